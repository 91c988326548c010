import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from nvds_admin.core.core import epoch_ms
from nvds_admin.core.exceptions import StorageFailure, ValidationException
from nvds_admin.dependencies import get_image_store
from nvds_admin.schemas.common import ErrorResponse
from nvds_admin.schemas.image import ImageDeleteResponse, ImageListResponse, ImageUploadResponse
from nvds_admin.services.image_store import ImageStore, validate_slot_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ImageListResponse)
def list_images(store: ImageStore = Depends(get_image_store)):
    try:
        images = store.list()
    except StorageFailure as e:
        logger.error(f"Error al listar imágenes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list images.",
        )
    return ImageListResponse(images=images)


@router.post("", include_in_schema=False)
@router.post("/", include_in_schema=False)
@router.delete("", include_in_schema=False)
@router.delete("/", include_in_schema=False)
def missing_slot():
    raise ValidationException("slotId is required.")


@router.post(
    "/{slot_id}",
    response_model=ImageUploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_image(
    slot_id: str,
    file: Optional[UploadFile] = File(None),
    store: ImageStore = Depends(get_image_store),
):
    """Sube la imagen de un slot reemplazando la anterior."""
    validate_slot_id(slot_id)
    if file is None:
        raise ValidationException("No file uploaded.")

    try:
        public_path = await store.upload_image(slot_id, file)
    except StorageFailure as e:
        logger.error(f"No se pudo guardar la imagen: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save image.",
        )
    finally:
        await file.close()

    return ImageUploadResponse(slotId=slot_id, url=f"{public_path}?v={epoch_ms()}")


@router.delete("/{slot_id}", response_model=ImageDeleteResponse)
def delete_image(slot_id: str, store: ImageStore = Depends(get_image_store)):
    try:
        store.delete(slot_id)
    except StorageFailure as e:
        logger.error(f"No se pudo borrar la imagen: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete image.",
        )
    return ImageDeleteResponse(slotId=slot_id)
