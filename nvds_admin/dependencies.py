# nvds_admin/dependencies.py

import logging
from typing import Optional

from fastapi import Request

from nvds_admin.config import Settings
from nvds_admin.database import Database
from nvds_admin.services.content_store import ContentStore, JsonFileContentBackend, SqlContentBackend
from nvds_admin.services.image_store import FilesystemImageBackend, ImageStore, SqlImageMirror

logger = logging.getLogger(__name__)


def build_database(settings: Settings) -> Optional[Database]:
    if not settings.database_enabled:
        return None
    return Database(
        settings.database_url,
        pool_size=settings.MYSQL_POOL_SIZE,
        table_prefix=settings.MYSQL_TABLE_PREFIX,
    )


def build_content_store(settings: Settings, database: Optional[Database] = None) -> ContentStore:
    """Base de datos primero (si está configurada), archivo JSON como respaldo."""
    backends = []
    if database is not None:
        backends.append(SqlContentBackend(database))
    backends.append(JsonFileContentBackend(settings.content_file))
    logger.info(f"Backends de contenido: {[backend.name for backend in backends]}")
    return ContentStore(backends)


def build_image_store(settings: Settings, database: Optional[Database] = None) -> ImageStore:
    mirrors = [SqlImageMirror(database)] if database is not None else []
    return ImageStore(
        FilesystemImageBackend(settings.upload_dir),
        mirrors=mirrors,
        max_size=settings.MAX_IMAGE_SIZE,
    )


# Dependencias para los routers
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_content_store(request: Request) -> ContentStore:
    return request.app.state.content_store


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store
