from typing import Dict, NamedTuple, Type

from sqlalchemy.orm import declarative_base

from .content import ContentEntryColumns
from .image import ImageRecordColumns


class ModelSet(NamedTuple):
    Base: Type
    ContentEntry: Type
    ImageRecord: Type


_models_by_prefix: Dict[str, ModelSet] = {}


def get_models(table_prefix: str = "nvds_") -> ModelSet:
    """
    Modelos mapeados a `<prefijo>content` y `<prefijo>images`.

    Cada prefijo tiene su propio Base/metadata, así dos apps con prefijos
    distintos pueden convivir en el mismo proceso.
    """
    if table_prefix not in _models_by_prefix:
        Base = declarative_base()

        class ContentEntry(ContentEntryColumns, Base):
            __tablename__ = f"{table_prefix}content"

        class ImageRecord(ImageRecordColumns, Base):
            __tablename__ = f"{table_prefix}images"

        _models_by_prefix[table_prefix] = ModelSet(Base, ContentEntry, ImageRecord)
    return _models_by_prefix[table_prefix]


__all__ = ["ContentEntryColumns", "ImageRecordColumns", "ModelSet", "get_models"]
