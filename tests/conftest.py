"""Fixtures compartidos: configuración aislada en directorios temporales."""
import pytest
from fastapi.testclient import TestClient

from nvds_admin.config import Settings
from nvds_admin.database import Database
from nvds_admin.main import create_app


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "_env_file": None,
            "SITE_ROOT": str(tmp_path),
            "DATABASE_URL": None,
            "MYSQL_HOST": None,
            "MYSQL_USER": None,
            "MYSQL_DATABASE": None,
            "MYSQL_URL": None,
            "PORT": 4000,
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'nvds.db'}"


@pytest.fixture
def unreachable_url(tmp_path):
    # SQLite no crea directorios: la conexión falla siempre
    return f"sqlite:///{tmp_path / 'missing' / 'dir' / 'nvds.db'}"


@pytest.fixture
def database(sqlite_url):
    db = Database(sqlite_url)
    yield db
    db.dispose()


@pytest.fixture
def unreachable_database(unreachable_url):
    db = Database(unreachable_url)
    yield db
    db.dispose()


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # El lifespan crea los directorios de datos y subidas
    with TestClient(app) as test_client:
        yield test_client
