import logging
from typing import Optional
from urllib.parse import quote

import requests
from requests.exceptions import RequestException, Timeout

from kalikascan_admin.infrastructure.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)


class PlantIdClient:
    """
    Client for the Plant.id (Kindwise) v3 identification API.

    Only deletion is needed here: when an admin removes a record, the
    identification and its chat conversation are removed upstream too.
    """

    DEFAULT_BASE_URL = "https://plant.id/api/v3"
    # Already deleted upstream
    GONE_STATUSES = (404, 410)

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: int = 30,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _identification_url(self, access_token: str) -> str:
        return f"{self.base_url}/identification/{quote(access_token, safe='')}"

    def _delete(self, url: str, what: str) -> bool:
        if not self.api_key:
            raise ConfigurationError("Missing PLANT_ID_API_KEY in env.")

        try:
            response = self.session.delete(
                url,
                headers={
                    "Api-Key": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout
            )
        except Timeout:
            raise ExternalServiceError(
                message=f"Plant.id {what} delete timed out after {self.timeout}s",
                service_name="plant.id"
            )
        except RequestException as e:
            raise ExternalServiceError(
                message=f"Plant.id {what} delete failed: {e}",
                service_name="plant.id"
            )

        if response.status_code in self.GONE_STATUSES:
            logger.debug(f"Plant.id {what} already gone ({response.status_code})")
            return True

        if not response.ok:
            raise ExternalServiceError(
                message=f"Plant.id {what} delete failed ({response.status_code}): {response.text}",
                service_name="plant.id",
                details={"status": response.status_code}
            )

        return True

    def delete_identification(self, access_token: Optional[str]) -> bool:
        """
        Delete an identification by its access token.

        Returns:
            True when deleted, already gone, or there is nothing to delete
        """
        if not access_token:
            return True
        return self._delete(self._identification_url(access_token), "identification")

    def delete_conversation(self, access_token: Optional[str]) -> bool:
        """Delete the chat conversation attached to an identification."""
        if not access_token:
            return True
        return self._delete(f"{self._identification_url(access_token)}/conversation", "conversation")

    def purge(self, access_token: Optional[str]) -> bool:
        """
        Best-effort removal of the conversation and the identification.

        Failures are logged and never raised so they cannot block a Firestore delete.

        Returns:
            True when both deletions succeeded
        """
        if not access_token:
            return True

        ok = True
        for what, action in (("conversation", self.delete_conversation),
                             ("identification", self.delete_identification)):
            try:
                action(access_token)
            except Exception as e:
                ok = False
                logger.warning(f"Best-effort Plant.id {what} cleanup failed: {e}")
        return ok
