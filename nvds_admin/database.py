# nvds_admin/database.py

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from nvds_admin.core.exceptions import BackendUnavailable
from nvds_admin.models import ModelSet, get_models

logger = logging.getLogger(__name__)


class Database:
    """
    Acceso perezoso a la base de datos relacional.

    El engine se crea en el primer uso y las tablas se crean si no existen.
    Si la inicialización falla se vuelve a intentar en la siguiente llamada,
    así un servidor caído al arrancar no deja el proceso inutilizado.
    """

    def __init__(self, url: str, pool_size: int = 10, table_prefix: str = "nvds_"):
        self.url = url
        self.pool_size = pool_size
        self.table_prefix = table_prefix
        self.models: ModelSet = get_models(table_prefix)
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._tables_ready = False

    def _get_engine(self) -> Engine:
        if self._engine is None:
            options = {"pool_pre_ping": True}
            if not self.url.startswith("sqlite"):
                options["pool_size"] = self.pool_size
            self._engine = create_engine(self.url, **options)
            self._session_factory = sessionmaker(
                bind=self._engine, autoflush=False, expire_on_commit=False
            )
        return self._engine

    def ensure_tables(self) -> None:
        if self._tables_ready:
            return
        try:
            engine = self._get_engine()
            self.models.Base.metadata.create_all(bind=engine, checkfirst=True)
        except (SQLAlchemyError, ImportError) as exc:
            raise BackendUnavailable(f"Base de datos no disponible: {exc}") from exc
        self._tables_ready = True
        logger.info(f"Tablas verificadas en {self._engine.url.render_as_string(hide_password=True)}")

    @contextmanager
    def session(self) -> Iterator[Session]:
        self.ensure_tables()
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
