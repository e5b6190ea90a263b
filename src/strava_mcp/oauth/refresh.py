"""
Token refresh service.

Obtains a new Strava token pair from a refresh token, independently of any
live authorization flow. Never touches storage: callers merge the returned
fields into their SessionProps and persist the result.
"""

import logging
from typing import Dict

from strava_mcp.errors import RefreshError, RefreshFailedError
from strava_mcp.sdk import oauth as sdk_oauth
from strava_mcp.sdk.oauth import UpstreamCredential

logger = logging.getLogger(__name__)


class TokenRefreshService:
    """Refreshes Strava credentials with an explicit client id/secret."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = sdk_oauth.DEFAULT_TIMEOUT,
        token_url: str = sdk_oauth.TOKEN_URL,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._token_url = token_url

    def refresh_credential(self, refresh_token: str) -> UpstreamCredential:
        """
        Exchange a refresh token for a new credential.

        Raises:
            RefreshFailedError: With the upstream status and raw body
        """
        try:
            credential = sdk_oauth.exchange_refresh_token(
                self._client_id,
                self._client_secret,
                refresh_token,
                upstream_url=self._token_url,
                timeout=self._timeout,
            )
        except RefreshFailedError:
            raise
        except RefreshError as e:
            raise RefreshFailedError(e.upstream_status, e.body) from e

        logger.info("Refreshed Strava access token")
        return credential

    def refresh(self, refresh_token: str) -> Dict[str, str]:
        """
        Refresh and return only the fields of SessionProps that change.

        Returns:
            {"access_token": ..., "refresh_token": ...}
        """
        credential = self.refresh_credential(refresh_token)
        return {
            "access_token": credential.access_token,
            "refresh_token": credential.refresh_token,
        }
