"""
Strava OAuth SDK functions.

Builds authorization URLs and talks to the Strava token endpoint.
Each exchange performs exactly one HTTP call and never retries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from strava_mcp.errors import (
    MissingCodeError,
    RefreshError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
    UpstreamTokenError,
)

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.strava.com/api/v3/oauth/authorize"
TOKEN_URL = "https://www.strava.com/api/v3/oauth/token"

# Scopes requested for every user
REQUIRED_SCOPE = (
    "read,read_all,profile:read_all,profile:write,"
    "activity:read,activity:read_all,activity:write"
)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class UpstreamCredential:
    """Token pair returned by the Strava token endpoint."""
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    expires_in: Optional[int] = None
    token_type: str = "Bearer"
    athlete: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "UpstreamCredential":
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            expires_at=data.get("expires_at"),
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type", "Bearer"),
            athlete=data.get("athlete"),
            raw=dict(data),
        )


def build_authorization_url(
    client_id: str,
    scope: str,
    redirect_uri: str,
    state: Optional[str] = None,
    upstream_url: str = AUTHORIZE_URL,
) -> str:
    """
    Build the Strava authorization URL the browser is redirected to.

    The scope is passed through untouched. The state, when given, is
    preserved exactly.
    """
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
    }
    if state:
        params["state"] = state
    params["response_type"] = "code"
    return f"{upstream_url}?{urlencode(params)}"


def _post_token(url: str, form: Dict[str, str], timeout: float) -> requests.Response:
    try:
        return requests.post(
            url,
            data=form,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except requests.Timeout as e:
        raise UpstreamTimeoutError("Strava token endpoint timed out") from e
    except requests.RequestException as e:
        logger.error(f"Strava token endpoint unreachable: {e}")
        raise UpstreamConnectionError("Strava token endpoint unreachable") from e


def _decode(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def exchange_code(
    client_id: str,
    client_secret: str,
    code: Optional[str],
    redirect_uri: str,
    upstream_url: str = TOKEN_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> UpstreamCredential:
    """
    Exchange an authorization code for a Strava token pair.

    POST oauth/token (grant_type=authorization_code)

    Returns:
        UpstreamCredential including the inline athlete payload

    Raises:
        MissingCodeError: If no code was given (no network call is made)
        UpstreamTokenError: On a non-2xx answer or a payload without access token
    """
    if not code:
        raise MissingCodeError()

    response = _post_token(
        upstream_url,
        {
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        },
        timeout,
    )
    if not response.ok:
        logger.error(f"Strava code exchange failed: {response.status_code} {response.text}")
        raise UpstreamTokenError(
            "Failed to fetch access token", status_code=500, upstream_status=response.status_code
        )

    data = _decode(response)
    if not data.get("access_token"):
        raise UpstreamTokenError(
            "Missing access token", status_code=400, upstream_status=response.status_code
        )
    return UpstreamCredential.from_response(data)


def exchange_refresh_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    upstream_url: str = TOKEN_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> UpstreamCredential:
    """
    Exchange a refresh token for a new Strava token pair.

    POST oauth/token (grant_type=refresh_token)

    Raises:
        RefreshError: On a non-2xx answer or a payload without access token
    """
    response = _post_token(
        upstream_url,
        {
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        },
        timeout,
    )
    if not response.ok:
        logger.warning(f"Strava refresh failed: {response.status_code}")
        raise RefreshError(response.status_code, response.text)

    data = _decode(response)
    if not data.get("access_token"):
        raise RefreshError(response.status_code, response.text)
    return UpstreamCredential.from_response(data)
