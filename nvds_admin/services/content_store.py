# nvds_admin/services/content_store.py
"""
Almacén de contenido editable del sitio: un mapa plano {clave: texto}.

Los backends forman una lista ordenada por preferencia (base de datos primero,
archivo JSON después). El store prueba cada uno en orden, devuelve el primer
resultado exitoso y guarda en memoria la última instantánea conocida.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from nvds_admin.core.core import as_utc, naive_utc, parse_iso, to_iso, utc_now
from nvds_admin.core.exceptions import StorageFailure
from nvds_admin.database import Database

logger = logging.getLogger(__name__)

ContentMap = Dict[str, str]
BackendResult = Tuple[ContentMap, Optional[datetime]]


def sanitize_content(content: Dict[str, Any]) -> ContentMap:
    """Descarta los valores que no son texto."""
    return {key: value for key, value in content.items() if isinstance(value, str)}


@dataclass
class ContentSnapshot:
    content: ContentMap
    updated_at: Optional[datetime]
    served_by: Optional[str] = None
    generation: int = 0


class ContentBackend:
    name = "base"

    def load(self) -> BackendResult:
        raise NotImplementedError

    def save(self, content: ContentMap, updated_at: datetime) -> BackendResult:
        """Reemplaza todo el contenido guardado por `content`."""
        raise NotImplementedError


class SqlContentBackend(ContentBackend):
    name = "sql"

    def __init__(self, database: Database):
        self.database = database

    def load(self) -> BackendResult:
        ContentEntry = self.database.models.ContentEntry
        with self.database.session() as db:
            rows = db.query(ContentEntry).all()

        content: ContentMap = {}
        latest: Optional[datetime] = None
        for row in rows:
            content[row.content_key] = row.content_value if row.content_value is not None else ""
            if row.updated_at is not None:
                row_updated = as_utc(row.updated_at)
                if latest is None or row_updated > latest:
                    latest = row_updated
        return content, latest

    def save(self, content: ContentMap, updated_at: datetime) -> BackendResult:
        ContentEntry = self.database.models.ContentEntry
        with self.database.session() as db:
            try:
                # Borrado total + inserción en una sola transacción
                db.query(ContentEntry).delete(synchronize_session=False)
                db.add_all([
                    ContentEntry(content_key=key, content_value=value, updated_at=naive_utc(updated_at))
                    for key, value in content.items()
                ])
                db.commit()
            except Exception:
                db.rollback()
                raise
        return dict(content), updated_at


class JsonFileContentBackend(ContentBackend):
    name = "json"

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> BackendResult:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}, None
        except (OSError, ValueError) as e:
            logger.warning(f"No se pudo leer {self.path}: {e}. Usando contenido vacío.")
            return {}, None

        if not isinstance(payload, dict) or not isinstance(payload.get("content"), dict):
            logger.warning(f"Formato inesperado en {self.path}. Usando contenido vacío.")
            return {}, None
        return sanitize_content(payload["content"]), parse_iso(payload.get("updatedAt"))

    def save(self, content: ContentMap, updated_at: datetime) -> BackendResult:
        payload = {"content": content, "updatedAt": to_iso(updated_at)}
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Escribe en un temporal del mismo directorio y lo renombra encima
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".content-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return dict(content), updated_at


class ContentStore:
    """
    Lista ordenada de backends detrás de una sola interfaz.

    `load()` usa la instantánea en memoria si existe; `save()` siempre escribe
    y la reemplaza. `served_by` indica qué backend atendió la última operación.
    """

    def __init__(self, backends: Sequence[ContentBackend]):
        if not backends:
            raise ValueError("ContentStore necesita al menos un backend")
        self.backends = list(backends)
        self.generation = 0
        self.served_by: Optional[str] = None
        self._snapshot: Optional[ContentSnapshot] = None

    def load(self) -> ContentSnapshot:
        if self._snapshot is not None:
            return self._snapshot
        content, updated_at = self._run("load", lambda backend: backend.load())
        self._snapshot = ContentSnapshot(
            content=content,
            updated_at=updated_at,
            served_by=self.served_by,
            generation=self.generation,
        )
        return self._snapshot

    def save(self, content: Dict[str, Any]) -> ContentSnapshot:
        sanitized = sanitize_content(content)
        updated_at = utc_now()
        stored, stored_at = self._run("save", lambda backend: backend.save(sanitized, updated_at))
        self.generation += 1
        self._snapshot = ContentSnapshot(
            content=stored,
            updated_at=stored_at,
            served_by=self.served_by,
            generation=self.generation,
        )
        logger.info(f"Contenido guardado ({len(stored)} claves) en backend '{self.served_by}'")
        return self._snapshot

    def invalidate(self) -> None:
        self._snapshot = None

    def _run(self, operation: str, call: Callable[[ContentBackend], BackendResult]) -> BackendResult:
        last_error: Optional[Exception] = None
        for backend in self.backends:
            try:
                result = call(backend)
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Backend '{backend.name}' falló en {operation}: {e}. Probando el siguiente."
                )
                continue
            if last_error is not None:
                logger.warning(f"{operation} atendido por el backend de respaldo '{backend.name}'")
            self.served_by = backend.name
            return result

        logger.error(f"Ningún backend pudo completar {operation}", exc_info=last_error)
        raise StorageFailure(f"Ningún backend pudo completar {operation}") from last_error
