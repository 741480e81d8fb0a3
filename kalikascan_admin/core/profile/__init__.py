from .profile_photo_service import ProfilePhotoService

__all__ = ["ProfilePhotoService"]
