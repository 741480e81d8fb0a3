import logging
from typing import Dict

import cloudinary
import cloudinary.uploader

from kalikascan_admin.infrastructure.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)


class CloudinaryMediaClient:
    """
    Uploads and removes images on Cloudinary.
    """

    PROFILE_FOLDER = "kalikascan/profile"

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self.configured = bool(cloud_name and api_key and api_secret)
        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True
            )
            logger.info(f"Cloudinary client configured for cloud: {cloud_name}")
        else:
            logger.warning("Cloudinary credentials missing; uploads will fail")

    def _ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("Missing CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY or CLOUDINARY_API_SECRET")

    def profile_folder(self, uid: str) -> str:
        return f"{self.PROFILE_FOLDER}/{uid}"

    def upload_image(self, data_url: str, folder: str) -> Dict[str, str]:
        """
        Upload a base64 data URL.

        Returns:
            Dict with secure_url and public_id
        """
        self._ensure_configured()
        try:
            result = cloudinary.uploader.upload(
                data_url,
                folder=folder,
                resource_type="image"
            )
        except Exception as e:
            logger.error(f"Cloudinary upload to {folder} failed: {e}")
            raise ExternalServiceError(
                message=f"Image upload failed: {e}",
                service_name="cloudinary"
            )

        return {
            "secure_url": result.get("secure_url"),
            "public_id": result.get("public_id"),
        }

    def destroy_image(self, public_id: str) -> bool:
        """
        Remove an image and invalidate CDN copies.

        Returns:
            True when Cloudinary reports the image deleted or absent
        """
        self._ensure_configured()
        result = cloudinary.uploader.destroy(
            public_id,
            invalidate=True,
            resource_type="image"
        )
        return result.get("result") in ("ok", "not found")
