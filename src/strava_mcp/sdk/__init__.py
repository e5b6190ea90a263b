"""
Strava API Low-Level SDK.

Thin typed wrapper over the Strava HTTP API and its OAuth endpoints.
Each function maps 1:1 to a Strava endpoint.
"""

from strava_mcp.sdk.client import StravaClient
from strava_mcp.sdk.oauth import (
    AUTHORIZE_URL,
    TOKEN_URL,
    REQUIRED_SCOPE,
    UpstreamCredential,
    build_authorization_url,
    exchange_code,
    exchange_refresh_token,
)

__all__ = [
    "StravaClient",
    "AUTHORIZE_URL",
    "TOKEN_URL",
    "REQUIRED_SCOPE",
    "UpstreamCredential",
    "build_authorization_url",
    "exchange_code",
    "exchange_refresh_token",
]
