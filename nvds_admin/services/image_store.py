# nvds_admin/services/image_store.py
"""
Almacén de imágenes por slot.

El directorio de subidas es el backend autoritativo: un archivo `<slot>.<ext>`
por slot. La tabla de metadatos, si hay base de datos, es un espejo que se
actualiza en modo best-effort y nunca hace fallar una operación.
"""

import logging
import mimetypes
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from fastapi import UploadFile, status
from starlette.concurrency import run_in_threadpool

from nvds_admin.core.core import naive_utc, utc_now
from nvds_admin.core.exceptions import StorageFailure, UploadRejected, ValidationException
from nvds_admin.database import Database

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_SIZE = 8 * 1024 * 1024
DEFAULT_EXTENSION = ".webp"
PUBLIC_PREFIX = "/assets/uploads"

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]+$")


def validate_slot_id(slot_id: Optional[str]) -> str:
    """El slot se usa como nombre de archivo: sin separadores ni prefijo '.'."""
    if not slot_id or not slot_id.strip():
        raise ValidationException("slotId is required.")
    if "/" in slot_id or "\\" in slot_id or "\x00" in slot_id or slot_id.startswith("."):
        raise ValidationException("slotId contains invalid characters.")
    return slot_id


def image_extension(filename: Optional[str]) -> str:
    ext = os.path.splitext(Path(filename or "").name)[1].lower()
    if not _EXTENSION_RE.match(ext):
        return DEFAULT_EXTENSION
    return ext


def slot_of(filename: str) -> str:
    return os.path.splitext(filename)[0]


class ImageBackend:
    name = "base"
    authoritative = False

    def list(self) -> Dict[str, str]:
        raise NotImplementedError

    def remove(self, slot_id: str) -> None:
        raise NotImplementedError


class FilesystemImageBackend(ImageBackend):
    name = "filesystem"
    authoritative = True

    def __init__(self, upload_dir: Path, public_prefix: str = PUBLIC_PREFIX):
        self.upload_dir = Path(upload_dir)
        self.public_prefix = public_prefix.rstrip("/")

    def public_path(self, filename: str) -> str:
        return f"{self.public_prefix}/{filename}"

    def _entries(self) -> List[Path]:
        if not self.upload_dir.is_dir():
            return []
        return [
            entry for entry in self.upload_dir.iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        ]

    def slot_files(self, slot_id: str) -> List[Path]:
        return [entry for entry in self._entries() if slot_of(entry.name) == slot_id]

    def list(self) -> Dict[str, str]:
        return {slot_of(entry.name): self.public_path(entry.name) for entry in sorted(self._entries())}

    def write(self, slot_id: str, filename: str, data: bytes) -> str:
        """Borra los archivos previos del slot y escribe el nuevo."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.remove(slot_id)
        (self.upload_dir / filename).write_bytes(data)
        return self.public_path(filename)

    def remove(self, slot_id: str) -> None:
        for entry in self.slot_files(slot_id):
            entry.unlink(missing_ok=True)


class SqlImageMirror(ImageBackend):
    name = "sql"

    def __init__(self, database: Database):
        self.database = database

    def list(self) -> Dict[str, str]:
        ImageRecord = self.database.models.ImageRecord
        with self.database.session() as db:
            rows = db.query(ImageRecord).all()
        return {row.slot_id: row.file_path for row in rows}

    def record(self, slot_id: str, public_path: str) -> None:
        ImageRecord = self.database.models.ImageRecord
        with self.database.session() as db:
            try:
                db.merge(ImageRecord(slot_id=slot_id, file_path=public_path, updated_at=naive_utc(utc_now())))
                db.commit()
            except Exception:
                db.rollback()
                raise

    def remove(self, slot_id: str) -> None:
        ImageRecord = self.database.models.ImageRecord
        with self.database.session() as db:
            try:
                db.query(ImageRecord).filter(ImageRecord.slot_id == slot_id).delete(
                    synchronize_session=False
                )
                db.commit()
            except Exception:
                db.rollback()
                raise


class ImageStore:
    def __init__(
        self,
        authoritative: FilesystemImageBackend,
        mirrors: Sequence[SqlImageMirror] = (),
        max_size: int = DEFAULT_MAX_IMAGE_SIZE,
    ):
        self.authoritative = authoritative
        self.mirrors = list(mirrors)
        self.max_size = max_size

    def check_content_type(self, content_type: Optional[str]) -> None:
        if not content_type or not content_type.lower().startswith("image/"):
            raise UploadRejected("Only image uploads are allowed.")

    def check_size(self, size: int) -> None:
        if size > self.max_size:
            raise UploadRejected(
                f"Image is too large (max {self.max_size} bytes).",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )

    def list(self) -> Dict[str, str]:
        try:
            return self.authoritative.list()
        except OSError as e:
            raise StorageFailure(f"No se pudo listar {self.authoritative.upload_dir}: {e}") from e

    def put(
        self,
        slot_id: str,
        data: bytes,
        original_filename: Optional[str],
        content_type: Optional[str] = None,
    ) -> str:
        """Guarda la imagen del slot y devuelve su ruta pública."""
        validate_slot_id(slot_id)
        if content_type is None:
            content_type = mimetypes.guess_type(original_filename or "")[0]
        self.check_content_type(content_type)
        self.check_size(len(data))

        filename = f"{slot_id}{image_extension(original_filename)}"
        try:
            public_path = self.authoritative.write(slot_id, filename, data)
        except OSError as e:
            raise StorageFailure(f"No se pudo guardar la imagen '{slot_id}': {e}") from e
        logger.info(f"Imagen del slot '{slot_id}' guardada como {filename} ({len(data)} bytes)")

        for mirror in self.mirrors:
            try:
                mirror.record(slot_id, public_path)
            except Exception as e:
                logger.warning(f"No se pudo reflejar el slot '{slot_id}' en '{mirror.name}': {e}")
        return public_path

    async def upload_image(self, slot_id: str, file: UploadFile) -> str:
        """Valida y guarda un UploadFile; el tipo se revisa antes de leer el cuerpo."""
        validate_slot_id(slot_id)
        self.check_content_type(file.content_type)
        # Lee como máximo un byte más del límite para detectar el exceso
        data = await file.read(self.max_size + 1)
        self.check_size(len(data))
        # Escritura en disco y espejo SQL fuera del event loop
        return await run_in_threadpool(self.put, slot_id, data, file.filename, file.content_type)

    def delete(self, slot_id: str) -> None:
        validate_slot_id(slot_id)
        try:
            self.authoritative.remove(slot_id)
        except OSError as e:
            raise StorageFailure(f"No se pudo borrar la imagen '{slot_id}': {e}") from e
        logger.info(f"Imagen del slot '{slot_id}' eliminada")

        for mirror in self.mirrors:
            try:
                mirror.remove(slot_id)
            except Exception as e:
                logger.warning(f"No se pudo borrar el slot '{slot_id}' en '{mirror.name}': {e}")

    def sync_mirrors(self) -> None:
        """Alinea los espejos con el directorio de subidas (best-effort)."""
        if not self.mirrors:
            return
        try:
            current = self.list()
        except StorageFailure as e:
            logger.warning(f"Sincronización de espejos omitida: {e}")
            return
        for mirror in self.mirrors:
            try:
                mirrored = mirror.list()
                for slot_id in set(mirrored) - set(current):
                    mirror.remove(slot_id)
                for slot_id, public_path in current.items():
                    if mirrored.get(slot_id) != public_path:
                        mirror.record(slot_id, public_path)
            except Exception as e:
                logger.warning(f"No se pudo sincronizar el espejo '{mirror.name}': {e}")
