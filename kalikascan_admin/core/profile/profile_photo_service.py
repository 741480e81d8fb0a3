"""
Profile photo replacement for signed-in app users.
"""
import logging
from typing import Any, Dict, Optional

from firebase_admin import firestore

from kalikascan_admin.infrastructure.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"


class ProfilePhotoService:

    def __init__(self, firestore_client, media_client, config_loader):
        self.firestore = firestore_client
        self.media = media_client
        self.users_collection = config_loader.collection("users")

    def _destroy_previous(self, public_id: Optional[str]) -> None:
        if not public_id:
            return
        try:
            self.media.destroy_image(public_id)
        except Exception as e:
            logger.warning(f"Could not delete previous profile photo {public_id}: {e}")

    def replace_photo(self, uid: str, image_base64: Any, mime_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Upload a new profile photo and drop the previous one.

        Args:
            uid: Owner of the photo, from the verified token
            image_base64: Raw base64 without the ``data:`` prefix
            mime_type: Image MIME type, JPEG when omitted

        Returns:
            {"ok", "photoURL", "photoPublicId"}
        """
        if not image_base64 or not isinstance(image_base64, str):
            raise ValidationError("Missing imageBase64", field="imageBase64")

        mime_type = (mime_type or DEFAULT_MIME_TYPE).strip() or DEFAULT_MIME_TYPE
        data_url = f"data:{mime_type};base64,{image_base64}"

        user_ref = self.firestore.collection(self.users_collection).document(uid)
        current = self.firestore.get_data(user_ref) or {}
        self._destroy_previous(current.get("photoPublicId"))

        upload = self.media.upload_image(data_url, self.media.profile_folder(uid))

        user_ref.set({
            "photoURL": upload["secure_url"],
            "imageUrl": upload["secure_url"],
            "photoPublicId": upload["public_id"],
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }, merge=True)

        logger.info(f"Profile photo of {uid} replaced with {upload['public_id']}")
        return {
            "ok": True,
            "photoURL": upload["secure_url"],
            "photoPublicId": upload["public_id"],
        }
