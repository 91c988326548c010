"""
Resolución de la configuración del panel de administración en el navegador.

Dada la URL de la página y la configuración guardada por el cliente, decide
la base de la API y la raíz de imágenes. Los sitios servidos desde hostings
estáticos (GitHub Pages, Netlify...) no tienen backend propio, así que apuntan
al servidor local por defecto.
"""

from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel

STATIC_HOST_SUFFIXES = (
    "github.io",
    "githubusercontent.com",
    "netlify.app",
    "pages.dev",
    "vercel.app",
)
LOCAL_HOSTS = ("localhost", "127.0.0.1")


class ClientConfig(BaseModel):
    apiBase: str
    imageRoot: str
    reset: bool = False


def default_api_base(port: int = 4000) -> str:
    return f"http://localhost:{port}/api"


def is_hosted_without_backend(page_url: str) -> bool:
    parts = urlsplit(page_url)
    hostname = parts.hostname or ""
    if parts.scheme == "file" or not hostname:
        return True
    if hostname in LOCAL_HOSTS:
        return False
    return any(hostname.endswith(domain) for domain in STATIC_HOST_SUFFIXES)


def _origin(page_url: str) -> Optional[str]:
    parts = urlsplit(page_url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def guess_api_base(page_url: str, merged: Dict[str, Any], port: int = 4000) -> str:
    if merged.get("apiBase"):
        return merged["apiBase"]
    if is_hosted_without_backend(page_url):
        return default_api_base(port)
    origin = _origin(page_url) or f"http://localhost:{port}"
    return f"{origin.rstrip('/')}/api"


def guess_image_root(api_base: str, merged: Dict[str, Any]) -> str:
    if merged.get("imageRoot"):
        return merged["imageRoot"]
    if api_base.endswith("/api"):
        return api_base[: -len("/api")] + "/assets/uploads"
    return ""


def resolve_client_config(
    page_url: str,
    stored: Optional[Dict[str, Any]] = None,
    port: int = 4000,
) -> ClientConfig:
    params = parse_qs(urlsplit(page_url).query)

    def param(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    reset = param("resetConfig") == "1"
    merged: Dict[str, Any] = {} if reset else dict(stored or {})

    # Los parámetros de la URL tienen prioridad sobre lo guardado
    if param("api"):
        merged["apiBase"] = param("api")
    if param("images"):
        merged["imageRoot"] = param("images")

    api_base = guess_api_base(page_url, merged, port)
    return ClientConfig(
        apiBase=api_base,
        imageRoot=guess_image_root(api_base, merged),
        reset=reset,
    )
