"""Plant photo storage on S3.

Photos are a side concern: a missing or unreachable image never fails a
plant read or a care session, it just shows up as "no image".
"""

import asyncio
import base64
import binascii
import logging
import uuid
from datetime import datetime
from typing import Optional

from verdant.core.aws import S3Service
from verdant.core.config import get_settings
from verdant.core.exceptions import AppException, BadRequestException

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
}


class PlantImageService:
    """Stores, resolves and releases plant photos."""

    @staticmethod
    def _object_key(plant_id: str, content_type: str) -> str:
        ext = _EXTENSIONS.get(content_type, "jpg")
        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        return f"plants/{plant_id}/{timestamp}_{str(uuid.uuid4())[:8]}.{ext}"

    @classmethod
    async def upload_image(cls, plant_id: str, image_base64: str, content_type: str = "image/jpeg") -> str:
        """Decode and upload a photo. Returns the stored object key."""
        try:
            data = base64.b64decode(image_base64, validate=True)
        except (binascii.Error, ValueError):
            raise BadRequestException("Image is not valid base64")
        if not data:
            raise BadRequestException("Image is empty")

        key = cls._object_key(plant_id, content_type)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, S3Service().upload_bytes, key, data, content_type)
        except Exception as e:
            logger.error(f"Failed to store image for plant {plant_id}: {e}")
            raise AppException("Failed to store plant image")
        return key

    @staticmethod
    def get_image_url(image_key: Optional[str]) -> Optional[str]:
        """Presigned URL for a stored photo, or None if it cannot be produced."""
        if not image_key:
            return None
        try:
            return S3Service().generate_presigned_get_url(
                image_key,
                expiration=get_settings().IMAGE_URL_EXPIRATION_SECONDS,
            )
        except Exception as e:
            logger.warning(f"No image URL for {image_key}: {e}")
            return None

    @classmethod
    async def delete_image(cls, image_key: Optional[str]) -> bool:
        """Release a stored photo. Failures are logged, not raised."""
        if not image_key:
            return False
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, S3Service().delete_object, image_key)
        except Exception as e:
            logger.warning(f"Failed to delete image {image_key}: {e}")
            return False
        return True
