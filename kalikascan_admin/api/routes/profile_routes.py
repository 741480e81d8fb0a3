"""
Profile routes for any signed-in user.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.core.profile import ProfilePhotoService
from kalikascan_admin.infrastructure.dependencies import (
    get_profile_photo_service,
    handle_exceptions,
    require_user,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PhotoUploadRequest(BaseModel):
    imageBase64: Optional[str] = Field(None, description="Raw base64 image data, without the data: prefix")
    mimeType: Optional[str] = Field(None, description="Image MIME type, image/jpeg by default")


@router.post("/photo", summary="Replace the caller's profile photo")
@handle_exceptions
def upload_profile_photo(
    payload: PhotoUploadRequest = Body(...),
    user: Dict[str, Any] = Depends(require_user),
    service: ProfilePhotoService = Depends(get_profile_photo_service)
):
    return service.replace_photo(user["uid"], payload.imageBase64, payload.mimeType)
