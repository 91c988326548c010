from .health import router as health_router
from .content import router as content_router
from .images import router as images_router

__all__ = ["health_router", "content_router", "images_router"]
