from .client import PlantIdClient

__all__ = ["PlantIdClient"]
