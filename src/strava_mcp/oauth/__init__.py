"""
OAuth bridge between MCP clients and Strava.

Modules:
    model    — AuthRequest and SessionProps
    state    — CSRF state codec
    refresh  — Strava token refresh service
    store    — file-based record store
    provider — authorization server facing MCP clients (FastMCP ``auth=``)
    bridge   — the Strava /callback endpoint
"""

from strava_mcp.oauth.model import AuthRequest, SessionProps
from strava_mcp.oauth.state import encode_state, decode_state
from strava_mcp.oauth.refresh import TokenRefreshService
from strava_mcp.oauth.store import FileStore
from strava_mcp.oauth.provider import StravaOAuthProvider
from strava_mcp.oauth.bridge import AuthorizationBridge

__all__ = [
    "AuthRequest",
    "SessionProps",
    "encode_state",
    "decode_state",
    "TokenRefreshService",
    "FileStore",
    "StravaOAuthProvider",
    "AuthorizationBridge",
]
