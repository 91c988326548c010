from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func


class ContentEntryColumns:
    """Columnas de `<prefijo>content`; la clase mapeada se crea por prefijo."""

    # 'content_key' es la clave editable (ej: 'hero_title')
    content_key = Column(String(191), primary_key=True)
    content_value = Column(Text, nullable=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
