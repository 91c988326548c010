from .common import *
from .content import *
from .image import *

__all__ = [
    # Común
    "HealthResponse", "ErrorResponse",

    # Contenido
    "ContentUpdate", "ContentResponse",

    # Imágenes
    "ImageListResponse", "ImageUploadResponse", "ImageDeleteResponse",
]
