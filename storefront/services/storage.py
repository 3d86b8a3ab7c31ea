"""
File storage service using Cloudinary

Falls back to the local upload directory when Cloudinary credentials are
not configured.
"""

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from typing import Optional, Dict, Any
from pathlib import Path
import asyncio
import uuid
import logging

from storefront.core.config import settings
from storefront.core.exceptions import BadRequestException
from storefront.utils.helpers import optimize_cloudinary_url
from storefront.utils.validators import sanitize_filename, validate_file_extension

logger = logging.getLogger(__name__)


class StorageService:
    """Storage service for image uploads"""

    def __init__(self):
        self.use_cloudinary = settings.cloudinary_configured
        if self.use_cloudinary:
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True
            )

    async def save_upload(self, file: UploadFile, folder: str = "images") -> str:
        """
        Validate and store an uploaded image

        Args:
            file: Multipart file from the request
            folder: Sub-folder (Cloudinary folder or local directory)

        Returns:
            Public URL of the stored image
        """
        filename = sanitize_filename(file.filename or "")
        if not validate_file_extension(filename, settings.ALLOWED_IMAGE_EXTENSIONS):
            raise BadRequestException(
                f"Only image files are allowed ({', '.join(settings.ALLOWED_IMAGE_EXTENSIONS)})",
                error_code="INVALID_FILE_TYPE"
            )

        content = await file.read()
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise BadRequestException(
                f"File exceeds the maximum size of {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
                error_code="FILE_TOO_LARGE"
            )
        if not content:
            raise BadRequestException("Uploaded file is empty", error_code="EMPTY_FILE")

        if self.use_cloudinary:
            result = await self.upload_image(content, folder)
            return optimize_cloudinary_url(result["url"])

        return await self.save_local(content, filename, folder)

    async def upload_image(
        self,
        content: bytes,
        folder: str = "images",
        public_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Upload image bytes to Cloudinary"""
        try:
            # Run in thread pool
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None,
                self._upload_image_sync,
                content,
                f"{settings.CLOUDINARY_FOLDER}/{folder}",
                public_id
            )
        except Exception as e:
            logger.error(f"Failed to upload image: {str(e)}")
            raise

    def _upload_image_sync(
        self,
        content: bytes,
        folder: str,
        public_id: Optional[str]
    ) -> Dict[str, Any]:
        """Upload image synchronously"""
        options = {
            "folder": folder,
            "resource_type": "image",
            "allowed_formats": ["jpg", "jpeg", "png", "webp", "gif"],
        }

        if public_id:
            options["public_id"] = public_id

        result = cloudinary.uploader.upload(content, **options)

        return {
            "url": result["secure_url"],
            "public_id": result["public_id"],
            "width": result.get("width"),
            "height": result.get("height"),
            "format": result.get("format"),
            "size": result.get("bytes")
        }

    async def save_local(self, content: bytes, filename: str, folder: str = "images") -> str:
        """Write image bytes under UPLOAD_DIR and return its served URL"""
        stored_name = f"{uuid.uuid4().hex}-{filename}"
        directory = Path(settings.UPLOAD_DIR) / folder
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_file, directory, stored_name, content)

        logger.info(f"Stored upload {folder}/{stored_name} ({len(content)} bytes)")
        return f"{settings.UPLOAD_URL_PREFIX}/{folder}/{stored_name}"

    @staticmethod
    def _write_file(directory: Path, name: str, content: bytes) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / name).write_bytes(content)


def get_storage_service() -> StorageService:
    """Dependency returning a storage service for the current settings"""
    return StorageService()
