"""
Client factory for Strava MCP server.

Provides session-based client management for tools.

Session resolution:
- HTTP transport: FastMCP has already verified the session token the MCP
  client sent as ``Authorization: Bearer``; it resolves to SessionProps
  whose Strava access token is used for the call.
- stdio transport: single-user, Strava token from STRAVA_ACCESS_TOKEN.
"""

import json
import logging
from typing import Optional

from fastmcp import Context
from fastmcp.server.dependencies import get_access_token

from strava_mcp.config import Settings
from strava_mcp.errors import UpstreamApiError
from strava_mcp.oauth.model import SessionProps
from strava_mcp.oauth.provider import StravaOAuthProvider
from strava_mcp.sdk.client import StravaClient

logger = logging.getLogger(__name__)

_settings: Optional[Settings] = None
_provider: Optional[StravaOAuthProvider] = None


def configure(settings: Settings, provider: Optional[StravaOAuthProvider] = None) -> None:
    """Install the settings and authorization provider used by get_client()."""
    global _settings, _provider
    _settings = settings
    _provider = provider


def _get_settings() -> Settings:
    if _settings is None:
        return Settings.from_env()
    return _settings


def get_session_props(ctx: Context) -> Optional[SessionProps]:
    """
    Resolve the SessionProps of the current HTTP request.

    Returns None outside an HTTP request or without an authenticated token.
    """
    if _provider is None:
        return None
    try:
        access_token = get_access_token()
    except RuntimeError:
        # Not in an HTTP request context (stdio)
        return None

    if access_token is None:
        return None
    return _provider.load_props(access_token.token)


def get_client(ctx: Context) -> StravaClient:
    """
    Get a Strava client for the current session.

    Usage in tools:
        @app.tool()
        async def get_activities(ctx: Context) -> str:
            client = get_client(ctx)
            return json.dumps(sdk_activities.list_activities(client))

    Args:
        ctx: FastMCP Context (automatically injected by framework)

    Returns:
        StravaClient carrying the session's access token

    Raises:
        ValueError: If no Strava session is active
        PermissionError: If the athlete is not in the allow-list
    """
    settings = _get_settings()
    props = get_session_props(ctx)

    if props is not None:
        if not settings.is_user_allowed(props.user_id):
            logger.warning(f"Athlete {props.user_id} is not in the allow-list")
            raise PermissionError("This Strava account is not allowed to use this server.")
        return StravaClient(props.access_token, timeout=settings.http_timeout)

    if settings.access_token:
        return StravaClient(settings.access_token, timeout=settings.http_timeout)

    raise ValueError("No Strava session. Connect your Strava account via /authorize first.")


def is_token_expired_error(error: Exception) -> bool:
    """
    Check if an error indicates that the Strava access token was rejected.

    Args:
        error: The exception to check

    Returns:
        True if Strava answered 401 Unauthorized
    """
    return isinstance(error, UpstreamApiError) and error.upstream_status == 401


def handle_token_expired() -> str:
    """
    Build the error returned to the user when Strava rejects the token.

    Recovery is to run the authorization flow again.
    """
    return json.dumps({
        "error": "Your Strava session has expired. Please reconnect your Strava account.",
        "error_code": "SESSION_EXPIRED",
        "note": "Revoking access at strava.com/settings/apps also invalidates tokens issued to this app.",
    }, indent=2)
