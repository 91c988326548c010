from pydantic import BaseModel
from typing import Dict


class ImageListResponse(BaseModel):
    images: Dict[str, str]


class ImageUploadResponse(BaseModel):
    slotId: str
    url: str


class ImageDeleteResponse(BaseModel):
    slotId: str
