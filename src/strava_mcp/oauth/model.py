"""
Domain types for the OAuth bridge.

AuthRequest is what the MCP client asked for; SessionProps is what we
embed in the session token we hand back to it.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional


def _optional_str(d: Dict[str, Any], key: str) -> Optional[str]:
    value = d.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


@dataclass(frozen=True)
class AuthRequest:
    """An OAuth authorization request from an MCP client.

    Must round-trip unchanged through the CSRF state parameter.
    """
    client_id: str
    redirect_uri: str = ""
    scope: List[str] = field(default_factory=list)
    state: str = ""
    response_type: str = "code"
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    redirect_uri_provided_explicitly: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AuthRequest":
        """Build a request from its JSON form.

        Raises:
            ValueError: If a field has the wrong type
        """
        scope = d.get("scope") or []
        if isinstance(scope, str):
            scope = scope.split()
        if not isinstance(scope, list) or not all(isinstance(s, str) for s in scope):
            raise ValueError("scope must be a string or a list of strings")

        explicit = d.get("redirect_uri_provided_explicitly", True)
        if not isinstance(explicit, bool):
            raise ValueError("redirect_uri_provided_explicitly must be a boolean")

        return cls(
            client_id=_optional_str(d, "client_id") or "",
            redirect_uri=_optional_str(d, "redirect_uri") or "",
            scope=list(scope),
            state=_optional_str(d, "state") or "",
            response_type=_optional_str(d, "response_type") or "code",
            code_challenge=_optional_str(d, "code_challenge"),
            code_challenge_method=_optional_str(d, "code_challenge_method"),
            redirect_uri_provided_explicitly=explicit,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionProps:
    """Identity and Strava credentials carried by a session token.

    ``user_id`` is the Strava athlete id as a string. Instances are never
    mutated: a refresh produces a new one via ``with_tokens``.
    """
    user_id: str
    first_name: str
    last_name: str
    access_token: str
    refresh_token: str

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SessionProps":
        return cls(
            user_id=str(d["user_id"]),
            first_name=d.get("first_name", ""),
            last_name=d.get("last_name", ""),
            access_token=d["access_token"],
            refresh_token=d.get("refresh_token", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def label(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def with_tokens(self, tokens: Dict[str, str]) -> "SessionProps":
        """Return new props with ``access_token``/``refresh_token`` replaced."""
        return replace(
            self,
            access_token=tokens["access_token"],
            refresh_token=tokens.get("refresh_token") or self.refresh_token,
        )
