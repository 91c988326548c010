"""Backend de administración de contenido e imágenes para el sitio NVDS."""

__version__ = "1.0.0"
