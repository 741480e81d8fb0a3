"""
Cached reverse geocoding for the dashboard map.
"""
import logging
import math
from typing import Any, Dict

from kalikascan_admin.infrastructure.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_coordinate(raw: Any) -> float:
    """Finite float from a query value, else ValidationError."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid lat/lon")
    if not math.isfinite(value):
        raise ValidationError("Invalid lat/lon")
    return value


class GeocodeService:

    def __init__(self, geocoder, cache, precision: int = 6):
        self.geocoder = geocoder
        self.cache = cache
        self.precision = precision

    def cache_key(self, lat: float, lon: float) -> str:
        return f"{lat:.{self.precision}f},{lon:.{self.precision}f}"

    def reverse(self, raw_lat: Any, raw_lon: Any) -> Dict[str, Any]:
        """
        Address for a coordinate pair.

        Returns:
            {"address", "cached"}, or {"address": None} when nothing matched
        """
        lat = parse_coordinate(raw_lat)
        lon = parse_coordinate(raw_lon)
        key = self.cache_key(lat, lon)

        entry = self.cache.get(key)
        if isinstance(entry, dict) and entry.get("address"):
            return {"address": entry["address"], "cached": True}

        address = self.geocoder.reverse(lat, lon)
        if not address:
            logger.debug(f"No address found for {key}")
            return {"address": None}

        # Misses are not cached
        self.cache.set(key, {"address": address})
        return {"address": address, "cached": False}
