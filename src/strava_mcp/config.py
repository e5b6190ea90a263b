"""
Runtime configuration for the Strava MCP server.

All values come from the environment; secrets are never hardcoded.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional


DEFAULT_SESSION_DIR = "/data/strava_sessions"
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    """Server settings.

    Attributes:
        client_id: Strava OAuth application client id
        client_secret: Strava OAuth application client secret
        base_url: Public base URL of this server (OAuth issuer and callback host)
        session_dir: Directory holding clients, codes and grants
        http_timeout: Timeout in seconds for every call to Strava
        allowed_user_ids: Athlete ids allowed to use the tools (empty = all)
        access_token: Static Strava token for single-user stdio mode
    """
    client_id: str = ""
    client_secret: str = ""
    base_url: Optional[str] = None
    session_dir: Path = Path(DEFAULT_SESSION_DIR)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    allowed_user_ids: FrozenSet[str] = field(default_factory=frozenset)
    access_token: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        allowed = env.get("STRAVA_ALLOWED_USER_IDS", "")
        return cls(
            client_id=env.get("STRAVA_CLIENT_ID", ""),
            client_secret=env.get("STRAVA_CLIENT_SECRET", ""),
            base_url=env.get("MCP_BASE_URL") or None,
            session_dir=Path(env.get("STRAVA_SESSION_DIR", DEFAULT_SESSION_DIR)),
            http_timeout=float(env.get("STRAVA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
            allowed_user_ids=frozenset(u.strip() for u in allowed.split(",") if u.strip()),
            access_token=env.get("STRAVA_ACCESS_TOKEN") or None,
        )

    @property
    def oauth_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.base_url)

    def require_oauth_client(self) -> None:
        """Raise if the upstream OAuth client or the public base URL is not configured."""
        if not self.oauth_configured:
            raise ValueError(
                "STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET and MCP_BASE_URL must be set for HTTP transport"
            )

    def is_user_allowed(self, user_id: str) -> bool:
        return not self.allowed_user_ids or user_id in self.allowed_user_ids
