import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

from kalikascan_admin.infrastructure.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """Reverse geocoding against an OpenStreetMap Nominatim server."""

    def __init__(self, url: str, user_agent: str, timeout: int = 15,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    def reverse(self, lat: float, lon: float) -> Optional[str]:
        """
        Resolve coordinates to a display address.

        Returns:
            The display name, or None when Nominatim has no match
        """
        params = {
            "format": "jsonv2",
            "lat": str(lat),
            "lon": str(lon),
            "zoom": "18",
            "addressdetails": "1",
        }
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": "en",
        }

        try:
            response = self.session.get(self.url, params=params, headers=headers, timeout=self.timeout)
        except RequestException as e:
            logger.error(f"Reverse geocoding request failed: {e}")
            raise ExternalServiceError(message=f"Geocoding failed ({e})", service_name="nominatim")

        if not response.ok:
            raise ExternalServiceError(
                message=f"Geocoding failed ({response.status_code})",
                service_name="nominatim",
                details={"status": response.status_code}
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Nominatim returned a non-JSON body for {lat},{lon}")
            return None

        if not isinstance(data, dict):
            return None
        return data.get("display_name") or None
