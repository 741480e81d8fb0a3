from .plant_scan_service import PlantScanService

__all__ = ["PlantScanService"]
