from pydantic import BaseModel
from typing import Any, Dict, Optional


class ContentUpdate(BaseModel):
    """Cuerpo de PUT /api/content. Los valores no-texto se descartan al guardar."""
    content: Dict[str, Any]


class ContentResponse(BaseModel):
    content: Dict[str, str]
    updatedAt: Optional[str] = None
