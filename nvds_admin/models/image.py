from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func


class ImageRecordColumns:
    """Columnas de `<prefijo>images`; la clase mapeada se crea por prefijo."""

    slot_id = Column(String(191), primary_key=True)
    file_path = Column(String(512), nullable=False)  # ruta pública, ej: /assets/uploads/hero.png
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
