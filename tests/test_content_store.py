import json

import pytest

from nvds_admin.core.core import to_iso
from nvds_admin.core.exceptions import StorageFailure
from nvds_admin.database import Database
from nvds_admin.services.content_store import (
    ContentBackend,
    ContentStore,
    JsonFileContentBackend,
    SqlContentBackend,
    sanitize_content,
)


class BrokenBackend(ContentBackend):
    name = "broken"

    def load(self):
        raise RuntimeError("sin conexión")

    def save(self, content, updated_at):
        raise RuntimeError("sin conexión")


@pytest.fixture
def content_file(tmp_path):
    return tmp_path / "data" / "content.json"


@pytest.fixture
def json_store(content_file):
    return ContentStore([JsonFileContentBackend(content_file)])


def test_sanitize_drops_non_string_values():
    assert sanitize_content({"a": "x", "b": 5, "c": None, "d": ["y"], "e": ""}) == {"a": "x", "e": ""}


def test_json_round_trip(json_store, content_file):
    content = {"hero_title": "Bienvenidos", "footer": "© NVDS", "empty": ""}
    saved = json_store.save(content)

    assert saved.content == content
    assert saved.updated_at is not None

    fresh = ContentStore([JsonFileContentBackend(content_file)])
    loaded = fresh.load()
    assert loaded.content == content
    assert to_iso(loaded.updated_at) == to_iso(saved.updated_at)


def test_save_strips_non_string_values(json_store, content_file):
    snapshot = json_store.save({"a": "x", "b": 5})

    assert snapshot.content == {"a": "x"}
    payload = json.loads(content_file.read_text(encoding="utf-8"))
    assert payload["content"] == {"a": "x"}
    assert payload["updatedAt"].endswith("Z")


def test_save_is_full_replace(json_store):
    json_store.save({"a": "1", "b": "2"})
    snapshot = json_store.save({"c": "3"})

    assert snapshot.content == {"c": "3"}


def test_missing_file_loads_empty(json_store):
    snapshot = json_store.load()

    assert snapshot.content == {}
    assert snapshot.updated_at is None


def test_malformed_file_loads_empty(content_file):
    content_file.parent.mkdir(parents=True)
    content_file.write_text("{ no es json", encoding="utf-8")

    snapshot = ContentStore([JsonFileContentBackend(content_file)]).load()
    assert snapshot.content == {}


def test_load_is_cached_until_next_write(json_store, content_file):
    json_store.save({"a": "x"})
    content_file.write_text(json.dumps({"content": {"a": "cambiado"}}), encoding="utf-8")

    assert json_store.load().content == {"a": "x"}

    json_store.invalidate()
    assert json_store.load().content == {"a": "cambiado"}


def test_generation_increments_on_save(json_store):
    assert json_store.load().generation == 0
    json_store.save({"a": "1"})
    json_store.save({"a": "2"})

    assert json_store.load().generation == 2


def test_sql_round_trip(database):
    store = ContentStore([SqlContentBackend(database)])
    content = {"hero_title": "Hola", "hero_subtitle": "Mundo"}
    saved = store.save(content)

    fresh = ContentStore([SqlContentBackend(database)])
    loaded = fresh.load()
    assert loaded.content == content
    assert loaded.served_by == "sql"
    assert to_iso(loaded.updated_at) == to_iso(saved.updated_at)


def test_sql_empty_table_has_no_timestamp(database):
    content, updated_at = SqlContentBackend(database).load()

    assert content == {}
    assert updated_at is None


def test_sql_failed_save_rolls_back(database):
    backend = SqlContentBackend(database)
    store = ContentStore([backend])
    store.save({"a": "x", "b": "y"})

    with pytest.raises(Exception):
        backend.save({None: "sin clave"}, store.load().updated_at)

    content, _ = backend.load()
    assert content == {"a": "x", "b": "y"}


def test_unreachable_database_falls_back_to_file(unreachable_database, content_file):
    store = ContentStore([SqlContentBackend(unreachable_database), JsonFileContentBackend(content_file)])

    saved = store.save({"a": "x"})
    assert saved.served_by == "json"
    assert content_file.exists()

    store.invalidate()
    loaded = store.load()
    assert loaded.content == {"a": "x"}
    assert loaded.served_by == "json"


def test_database_preferred_when_reachable(database, content_file):
    store = ContentStore([SqlContentBackend(database), JsonFileContentBackend(content_file)])
    store.save({"a": "x"})

    assert store.served_by == "sql"
    assert not content_file.exists()


def test_all_backends_failing_raises_storage_failure():
    store = ContentStore([BrokenBackend()])

    with pytest.raises(StorageFailure):
        store.load()
    with pytest.raises(StorageFailure):
        store.save({"a": "x"})


def test_store_requires_a_backend():
    with pytest.raises(ValueError):
        ContentStore([])


def test_sql_tables_follow_database_prefix(sqlite_url):
    database = Database(sqlite_url, table_prefix="site_")
    try:
        ContentStore([SqlContentBackend(database)]).save({"title": "Hola"})

        assert database.models.ContentEntry.__tablename__ == "site_content"
        assert sorted(database.models.Base.metadata.tables) == ["site_content", "site_images"]
        assert SqlContentBackend(database).load()[0] == {"title": "Hola"}
    finally:
        database.dispose()
