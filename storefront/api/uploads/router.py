"""Image upload router"""

from fastapi import APIRouter, Depends, File, UploadFile
from typing import Dict, Any

from storefront.core.security import require_admin
from storefront.schemas.base import BaseSchema
from storefront.services.storage import StorageService, get_storage_service

router = APIRouter()


class UploadResponse(BaseSchema):
    success: bool
    image_url: str


@router.post("", response_model=UploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    admin: Dict[str, Any] = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service)
):
    """Store one image and return its URL"""
    image_url = await storage.save_upload(image, "images")
    return UploadResponse(success=True, image_url=image_url)
