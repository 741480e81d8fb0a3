from .map_post_service import MapPostService

__all__ = ["MapPostService"]
