import logging

from fastapi import APIRouter, Depends, HTTPException, status

from nvds_admin.core.core import to_iso, utc_now
from nvds_admin.core.exceptions import StorageFailure
from nvds_admin.dependencies import get_content_store
from nvds_admin.schemas.common import ErrorResponse
from nvds_admin.schemas.content import ContentResponse, ContentUpdate
from nvds_admin.services.content_store import ContentSnapshot, ContentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(snapshot: ContentSnapshot) -> ContentResponse:
    return ContentResponse(
        content=snapshot.content,
        updatedAt=to_iso(snapshot.updated_at or utc_now()),
    )


@router.get("", response_model=ContentResponse)
def get_website_content(store: ContentStore = Depends(get_content_store)):
    """Obtiene todo el contenido editable del sitio como un mapa {key: value}."""
    try:
        snapshot = store.load()
    except StorageFailure as e:
        logger.error(f"Error al obtener contenido: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load content.",
        )
    return _to_response(snapshot)


@router.put("", response_model=ContentResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
def update_website_content(
    update_data: ContentUpdate,
    store: ContentStore = Depends(get_content_store),
):
    """Reemplaza todo el contenido. Los campos que no son texto se descartan."""
    try:
        snapshot = store.save(update_data.content)
    except StorageFailure as e:
        logger.error(f"Error al guardar contenido: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save content.",
        )
    return _to_response(snapshot)
