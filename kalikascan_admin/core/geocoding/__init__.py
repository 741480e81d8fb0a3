from .geocode_service import GeocodeService

__all__ = ["GeocodeService"]
