from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from nvds_admin.config import Settings
from nvds_admin.core.client_config import ClientConfig, resolve_client_config
from nvds_admin.core.core import epoch_ms
from nvds_admin.dependencies import get_settings
from nvds_admin.schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(status="ok", timestamp=epoch_ms())


@router.get("/client-config", response_model=ClientConfig)
def client_config(
    request: Request,
    page: Optional[str] = Query(None, description="URL de la página de administración"),
    apiBase: Optional[str] = Query(None, description="apiBase guardado por el cliente"),
    imageRoot: Optional[str] = Query(None, description="imageRoot guardado por el cliente"),
    settings: Settings = Depends(get_settings),
):
    """Resuelve apiBase e imageRoot para la página indicada (o la que hace la petición)."""
    page_url = page or request.headers.get("referer") or str(request.base_url)
    stored = {}
    if apiBase:
        stored["apiBase"] = apiBase
    if imageRoot:
        stored["imageRoot"] = imageRoot
    return resolve_client_config(page_url, stored, port=settings.PORT)
