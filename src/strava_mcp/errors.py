"""
Exceptions raised by the Strava MCP server.

Every failure in the OAuth bridge is terminal for the request it occurs in.
The ``status_code`` attribute is the HTTP status the browser-facing
endpoints answer with.
"""

from typing import Optional


class StravaMCPError(Exception):
    """Base class for all Strava MCP errors."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# ── Authorization bridge ─────────────────────────────────────────────────


class InvalidCallbackState(StravaMCPError):
    """The /callback state cannot be decoded or names an unknown client or redirect URI."""

    status_code = 400


# ── Upstream OAuth ───────────────────────────────────────────────────────


class MissingCodeError(StravaMCPError):
    """Strava redirected back without an authorization code."""

    status_code = 400

    def __init__(self, message: str = "Missing code"):
        super().__init__(message)


class UpstreamTokenError(StravaMCPError):
    """The Strava token endpoint rejected the code exchange."""

    def __init__(self, message: str, status_code: int = 500, upstream_status: Optional[int] = None):
        super().__init__(message, status_code)
        self.upstream_status = upstream_status


class RefreshError(StravaMCPError):
    """The Strava token endpoint rejected a refresh grant."""

    def __init__(self, upstream_status: int, body: str):
        super().__init__(f"Failed to refresh Strava token: {upstream_status} {body}")
        self.upstream_status = upstream_status
        self.body = body


class RefreshFailedError(RefreshError):
    """Raised by the token refresh service; carries status and raw body."""


class UpstreamTimeoutError(StravaMCPError):
    """Strava did not answer within the configured timeout."""

    status_code = 504


class UpstreamConnectionError(StravaMCPError):
    """Strava could not be reached (DNS, refused connection, TLS, ...)."""

    status_code = 502


# ── Upstream API ─────────────────────────────────────────────────────────


class UpstreamApiError(StravaMCPError):
    """Non-2xx answer from the Strava resource API."""

    status_code = 502

    def __init__(self, upstream_status: int, status_text: str):
        super().__init__(f"Strava API error: {upstream_status} {status_text}")
        self.upstream_status = upstream_status
        self.status_text = status_text
