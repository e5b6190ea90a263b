"""
OAuth 2.0 authorization server facing MCP clients.

StravaOAuthProvider is handed to FastMCP as ``auth=``. The MCP SDK serves
/authorize, /token, /register, /revoke and the discovery metadata and
calls back into the provider, which stores clients and grants, sends the
browser on to Strava and keeps the Strava credentials of each grant fresh.

A *grant* is created each time a user completes the Strava flow (see
``AuthorizationBridge.callback``). It holds the SessionProps, the pending
authorization code and the hashes of the session tokens issued for it.
Codes and tokens have the form ``<user_id>:<grant_id>:<secret>``; only
SHA-256 hashes are stored.
"""

import hashlib
import hmac
import logging
import secrets
import time
from typing import Callable, List, Optional, Tuple, Union

from fastmcp.server.auth.auth import OAuthProvider
from mcp.server.auth.provider import (
    AccessToken,
    AuthorizationCode,
    AuthorizationParams,
    RefreshToken,
    TokenError,
    construct_redirect_uri,
)
from mcp.server.auth.settings import ClientRegistrationOptions, RevocationOptions
from mcp.shared.auth import OAuthClientInformationFull, OAuthToken
from pydantic import AnyUrl

from strava_mcp.errors import InvalidCallbackState, StravaMCPError
from strava_mcp.oauth.model import AuthRequest, SessionProps
from strava_mcp.oauth.refresh import TokenRefreshService
from strava_mcp.oauth.state import encode_state
from strava_mcp.oauth.store import FileStore
from strava_mcp.sdk import oauth as sdk_oauth

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TTL = 3600
AUTH_CODE_TTL = 600
# Refresh Strava credentials this many seconds before they expire
EXPIRY_SKEW = 60

CALLBACK_PATH = "/callback"

CLIENTS = "clients"
GRANTS = "grants"


def _hash(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _matches(token: str, token_hash: Optional[str]) -> bool:
    return bool(token_hash) and hmac.compare_digest(_hash(token), token_hash)


def _split_token(token: str) -> Optional[Tuple[str, str, str]]:
    parts = (token or "").split(":", 2)
    if len(parts) != 3 or not all(parts):
        return None
    return parts[0], parts[1], parts[2]


class StravaOAuthProvider(OAuthProvider):
    """
    Authorization server backed by a FileStore, with Strava as upstream.

    Usage:
        provider = StravaOAuthProvider(base_url, strava_client_id, FileStore(path), refresh_service)
        app = FastMCP("Strava MCP", auth=provider)
        redirect_to = provider.complete_authorization(request, user_id, props)
        props = provider.load_props(session_token)
    """

    def __init__(
        self,
        base_url: str,
        upstream_client_id: str,
        store: FileStore,
        refresh_service: TokenRefreshService,
        clock: Callable[[], float] = time.time,
        access_token_ttl: int = ACCESS_TOKEN_TTL,
        code_ttl: int = AUTH_CODE_TTL,
        authorize_url: str = sdk_oauth.AUTHORIZE_URL,
    ):
        super().__init__(
            base_url=base_url,
            client_registration_options=ClientRegistrationOptions(enabled=True),
            revocation_options=RevocationOptions(enabled=True),
        )
        self._callback_url = base_url.rstrip("/") + CALLBACK_PATH
        self._upstream_client_id = upstream_client_id
        self._store = store
        self._refresh_service = refresh_service
        self._clock = clock
        self._access_token_ttl = access_token_ttl
        self._code_ttl = code_ttl
        self._authorize_url = authorize_url

    @property
    def callback_url(self) -> str:
        """Redirect URI registered with Strava."""
        return self._callback_url

    def _now(self) -> int:
        return int(self._clock())

    # ── Clients ──────────────────────────────────────────────────────────

    def _load_client(self, client_id: str) -> Optional[OAuthClientInformationFull]:
        data = self._store.get(CLIENTS, client_id) if client_id else None
        if data is None:
            return None
        return OAuthClientInformationFull.model_validate(data)

    async def get_client(self, client_id: str) -> Optional[OAuthClientInformationFull]:
        return self._load_client(client_id)

    async def register_client(self, client_info: OAuthClientInformationFull) -> None:
        # Secrets stay in clear text: the SDK's client authenticator compares them as is
        self._store.put(CLIENTS, client_info.client_id, client_info.model_dump(mode="json", exclude_none=True))
        logger.info(f"Registered client {client_info.client_id} ({client_info.client_name or 'unnamed'})")

    # ── Authorization ────────────────────────────────────────────────────

    async def authorize(self, client: OAuthClientInformationFull, params: AuthorizationParams) -> str:
        """Pack the validated request into the state and send the browser to Strava."""
        request = AuthRequest(
            client_id=client.client_id,
            redirect_uri=str(params.redirect_uri),
            scope=list(params.scopes or []),
            state=params.state or "",
            code_challenge=params.code_challenge,
            code_challenge_method="S256",
            redirect_uri_provided_explicitly=params.redirect_uri_provided_explicitly,
        )
        logger.info(f"Redirecting client {client.client_id} to Strava")
        return sdk_oauth.build_authorization_url(
            client_id=self._upstream_client_id,
            scope=sdk_oauth.REQUIRED_SCOPE,
            redirect_uri=self._callback_url,
            state=encode_state(request),
            upstream_url=self._authorize_url,
        )

    def check_auth_request(self, request: AuthRequest) -> None:
        """
        Re-validate a request recovered from the callback state.

        Raises:
            InvalidCallbackState: If the client is unknown or the redirect
                URI is not one it registered
        """
        client = self._load_client(request.client_id)
        registered = {str(uri) for uri in (client.redirect_uris or [])} if client else set()
        if request.redirect_uri not in registered:
            logger.warning(f"Callback state names an unregistered redirect for client {request.client_id}")
            raise InvalidCallbackState("Invalid state")

    def complete_authorization(
        self,
        request: AuthRequest,
        user_id: str,
        props: SessionProps,
        scope: Optional[List[str]] = None,
        metadata: Optional[dict] = None,
        upstream_expires_at: Optional[int] = None,
    ) -> str:
        """
        Record a grant for a finished Strava flow and mint an authorization code.

        Returns:
            The client's redirect URI carrying ``code`` and the client's ``state``

        Raises:
            InvalidCallbackState: If the request no longer matches a registered client
        """
        self.check_auth_request(request)

        grant_id = secrets.token_hex(16)
        code = f"{user_id}:{grant_id}:{secrets.token_urlsafe(32)}"
        now = self._now()

        grant = {
            "grant_id": grant_id,
            "client_id": request.client_id,
            "user_id": user_id,
            "scope": list(scope if scope is not None else request.scope),
            "metadata": metadata or {},
            "props": props.to_dict(),
            "upstream_expires_at": upstream_expires_at,
            "created_at": now,
            "auth_code": {
                "hash": _hash(code),
                "expires_at": now + self._code_ttl,
                "redirect_uri": request.redirect_uri,
                "redirect_uri_provided_explicitly": request.redirect_uri_provided_explicitly,
                "code_challenge": request.code_challenge,
            },
            "access_token": None,
            "refresh_token_hash": None,
        }
        self._store.put(GRANTS, grant_id, grant)

        logger.info(f"Authorization completed for user {user_id} (client {request.client_id})")
        return construct_redirect_uri(request.redirect_uri, code=code, state=request.state or None)

    # ── Grants ───────────────────────────────────────────────────────────

    def _load_grant(self, token: str) -> Tuple[Optional[dict], Optional[str]]:
        parts = _split_token(token)
        if parts is None:
            return None, None
        user_id, grant_id, _ = parts
        grant = self._store.get(GRANTS, grant_id)
        if grant is None or grant.get("user_id") != user_id:
            return None, None
        return grant, grant_id

    async def load_authorization_code(
        self, client: OAuthClientInformationFull, authorization_code: str
    ) -> Optional[AuthorizationCode]:
        grant, grant_id = self._load_grant(authorization_code)
        pending = grant.get("auth_code") if grant else None
        if not pending or not _matches(authorization_code, pending.get("hash")):
            return None
        if grant["client_id"] != client.client_id:
            return None
        if pending["expires_at"] <= self._now():
            self._store.delete(GRANTS, grant_id)
            return None

        return AuthorizationCode(
            code=authorization_code,
            scopes=grant["scope"],
            expires_at=pending["expires_at"],
            client_id=grant["client_id"],
            code_challenge=pending.get("code_challenge") or "",
            redirect_uri=AnyUrl(pending["redirect_uri"]),
            redirect_uri_provided_explicitly=pending.get("redirect_uri_provided_explicitly", True),
        )

    async def exchange_authorization_code(
        self, client: OAuthClientInformationFull, authorization_code: AuthorizationCode
    ) -> OAuthToken:
        grant, _ = self._load_grant(authorization_code.code)
        if grant is None or not grant.get("auth_code"):
            raise TokenError("invalid_grant", "authorization code already used")

        # Single use
        grant["auth_code"] = None
        return self._issue_tokens(grant)

    async def load_refresh_token(
        self, client: OAuthClientInformationFull, refresh_token: str
    ) -> Optional[RefreshToken]:
        grant, _ = self._load_grant(refresh_token)
        if grant is None or not _matches(refresh_token, grant.get("refresh_token_hash")):
            return None
        if grant["client_id"] != client.client_id:
            return None
        return RefreshToken(token=refresh_token, client_id=grant["client_id"], scopes=grant["scope"])

    async def exchange_refresh_token(
        self,
        client: OAuthClientInformationFull,
        refresh_token: RefreshToken,
        scopes: List[str],
    ) -> OAuthToken:
        """Rotate the session tokens, refreshing the Strava credentials first if due."""
        grant, _ = self._load_grant(refresh_token.token)
        if grant is None:
            raise TokenError("invalid_grant", "refresh token does not exist")

        try:
            grant = self._ensure_fresh(grant)
        except StravaMCPError as e:
            logger.error(f"Strava refresh failed for user {grant['user_id']}: {e.message}")
            raise TokenError("invalid_grant", "Upstream refresh failed") from e

        if scopes:
            grant["scope"] = list(scopes)
        return self._issue_tokens(grant)

    def _issue_tokens(self, grant: dict) -> OAuthToken:
        access_token = f"{grant['user_id']}:{grant['grant_id']}:{secrets.token_urlsafe(32)}"
        refresh_token = f"{grant['user_id']}:{grant['grant_id']}:{secrets.token_urlsafe(32)}"

        grant["access_token"] = {
            "hash": _hash(access_token),
            "expires_at": self._now() + self._access_token_ttl,
        }
        grant["refresh_token_hash"] = _hash(refresh_token)
        self._store.put(GRANTS, grant["grant_id"], grant)

        return OAuthToken(
            access_token=access_token,
            token_type="Bearer",
            expires_in=self._access_token_ttl,
            refresh_token=refresh_token,
            scope=" ".join(grant.get("scope", [])) or None,
        )

    # ── Session lookup ───────────────────────────────────────────────────

    def _resolve(self, token: str) -> Optional[dict]:
        grant, _ = self._load_grant(token)
        access = grant.get("access_token") if grant else None
        if not access or not _matches(token, access.get("hash")):
            return None
        if access["expires_at"] <= self._now():
            return None

        try:
            return self._ensure_fresh(grant)
        except StravaMCPError as e:
            logger.warning(f"Strava refresh failed for user {grant['user_id']}: {e.message}")
            return None

    async def load_access_token(self, token: str) -> Optional[AccessToken]:
        """Bearer check on /mcp; an unusable Strava credential answers 401."""
        grant = self._resolve(token)
        if grant is None:
            return None
        return AccessToken(
            token=token,
            client_id=grant["client_id"],
            scopes=grant["scope"],
            expires_at=grant["access_token"]["expires_at"],
        )

    def load_props(self, token: str) -> Optional[SessionProps]:
        """
        Resolve a session access token to its SessionProps.

        Expired Strava credentials are refreshed and the replaced props
        persisted before returning.

        Returns:
            SessionProps, or None if the token is unknown, expired or its
            Strava credentials cannot be refreshed
        """
        grant = self._resolve(token)
        if grant is None:
            return None
        return SessionProps.from_dict(grant["props"])

    def _ensure_fresh(self, grant: dict) -> dict:
        expires_at = grant.get("upstream_expires_at")
        if expires_at is None or expires_at - EXPIRY_SKEW > self._now():
            return grant

        props = SessionProps.from_dict(grant["props"])
        credential = self._refresh_service.refresh_credential(props.refresh_token)
        props = props.with_tokens({
            "access_token": credential.access_token,
            "refresh_token": credential.refresh_token,
        })

        grant = dict(grant)
        grant["props"] = props.to_dict()
        grant["upstream_expires_at"] = credential.expires_at
        self._store.put(GRANTS, grant["grant_id"], grant)
        logger.info(f"Replaced Strava credentials for user {props.user_id}")
        return grant

    async def revoke_token(self, token: Union[AccessToken, RefreshToken]) -> None:
        """Delete the grant a session token belongs to."""
        grant, grant_id = self._load_grant(token.token)
        if grant is None:
            return
        self._store.delete(GRANTS, grant_id)
        logger.info(f"Revoked grant for user {grant['user_id']}")
