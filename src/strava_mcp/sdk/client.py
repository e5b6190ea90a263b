"""
Strava API HTTP Client.

Handles HTTP transport, bearer authentication and error handling.
All endpoint-specific logic lives in the sibling modules (athlete, activities).
"""

import logging
from typing import Any, Dict

import requests

from strava_mcp.errors import UpstreamApiError, UpstreamConnectionError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

API_URL = "https://www.strava.com/api/v3"
DEFAULT_TIMEOUT = 10.0


class StravaClient:
    """
    Strava API HTTP transport.

    Attaches ``Authorization: Bearer <token>`` to every call.
    Response bodies are returned as opaque JSON.
    """

    def __init__(self, access_token: str, timeout: float = DEFAULT_TIMEOUT, api_url: str = API_URL):
        self._access_token = access_token
        self._timeout = timeout
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()

    @property
    def access_token(self) -> str:
        return self._access_token

    def make_request(
        self,
        method: str,
        path: str,
        params: Dict = None,
        json_data: Dict = None,
    ) -> Any:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method (GET/POST/PUT/DELETE)
            path: API path relative to /api/v3 (e.g. "athlete")
            params: Query parameters
            json_data: JSON body data

        Returns:
            Decoded JSON response (None for empty bodies)

        Raises:
            UpstreamApiError: On any non-2xx response
            UpstreamTimeoutError: If Strava does not answer in time
            UpstreamConnectionError: If Strava cannot be reached
        """
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        url = f"{self._api_url}/{path.lstrip('/')}"

        try:
            response = self._session.request(
                method.upper(),
                url,
                headers=headers,
                params=params,
                json=json_data,
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise UpstreamTimeoutError(f"Strava API timed out: {method.upper()} {path}") from e
        except requests.RequestException as e:
            logger.error(f"Strava API {method.upper()} {path} unreachable: {e}")
            raise UpstreamConnectionError(f"Strava API unreachable: {method.upper()} {path}") from e

        if not response.ok:
            logger.warning(f"Strava API {method.upper()} {path} failed: {response.status_code} {response.reason}")
            raise UpstreamApiError(response.status_code, response.reason or "")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamApiError(response.status_code, "Invalid JSON body") from e

    def get(self, path: str, params: Dict = None) -> Any:
        return self.make_request("GET", path, params=params)
