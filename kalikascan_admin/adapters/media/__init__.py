from .cloudinary_client import CloudinaryMediaClient

__all__ = ["CloudinaryMediaClient"]
