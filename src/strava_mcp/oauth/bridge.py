"""
Strava OAuth callback.

The MCP SDK routes /authorize to ``StravaOAuthProvider.authorize``, which
sends the browser to Strava with the MCP client's request packed into the
OAuth state. Strava redirects back to /callback: the state is unpacked,
the Strava code exchanged and the athlete fetched, and the provider
redirects the browser back to the MCP client with an authorization code.
"""

import logging
from typing import Callable, List

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response
from starlette.routing import Route

from strava_mcp.config import Settings
from strava_mcp.errors import InvalidCallbackState, StravaMCPError, UpstreamApiError
from strava_mcp.oauth.model import SessionProps
from strava_mcp.oauth.provider import CALLBACK_PATH, StravaOAuthProvider
from strava_mcp.oauth.state import decode_state
from strava_mcp.sdk import athlete as sdk_athlete
from strava_mcp.sdk import oauth as sdk_oauth
from strava_mcp.sdk.client import StravaClient

logger = logging.getLogger(__name__)


class AuthorizationBridge:
    """Handler for the Strava leg of the MCP client ⇄ server ⇄ Strava OAuth dance."""

    def __init__(
        self,
        settings: Settings,
        provider: StravaOAuthProvider,
        client_factory: Callable[..., StravaClient] = StravaClient,
        token_url: str = sdk_oauth.TOKEN_URL,
    ):
        self._settings = settings
        self._provider = provider
        self._client_factory = client_factory
        self._token_url = token_url

    async def callback(self, request: Request) -> Response:
        """GET /callback — finish the Strava flow and redirect to the MCP client."""
        try:
            auth_request = decode_state(request.query_params.get("state", ""))
            self._provider.check_auth_request(auth_request)
        except InvalidCallbackState as e:
            logger.warning("Callback with invalid state")
            return PlainTextResponse(e.message, status_code=e.status_code)

        upstream_error = request.query_params.get("error")
        if upstream_error:
            logger.warning(f"Strava returned error for client {auth_request.client_id}: {upstream_error}")

        try:
            credential = sdk_oauth.exchange_code(
                client_id=self._settings.client_id,
                client_secret=self._settings.client_secret,
                code=request.query_params.get("code"),
                redirect_uri=self._provider.callback_url,
                upstream_url=self._token_url,
                timeout=self._settings.http_timeout,
            )
            client = self._client_factory(credential.access_token, timeout=self._settings.http_timeout)
            athlete = sdk_athlete.get_logged_in_athlete(client)
        except UpstreamApiError as e:
            logger.error(f"Failed to fetch athlete: {e.upstream_status} {e.status_text}")
            return PlainTextResponse("Failed to fetch athlete", status_code=e.status_code)
        except StravaMCPError as e:
            return PlainTextResponse(e.message, status_code=e.status_code)

        user_id = str(athlete.id)
        props = SessionProps(
            user_id=user_id,
            first_name=athlete.firstname,
            last_name=athlete.lastname,
            access_token=credential.access_token,
            refresh_token=credential.refresh_token,
        )
        try:
            redirect_to = self._provider.complete_authorization(
                auth_request,
                user_id=user_id,
                props=props,
                scope=auth_request.scope,
                metadata={"label": props.label},
                upstream_expires_at=credential.expires_at,
            )
        except InvalidCallbackState as e:
            return PlainTextResponse(e.message, status_code=e.status_code)
        return RedirectResponse(redirect_to, status_code=302)

    def routes(self) -> List[Route]:
        return [Route(CALLBACK_PATH, self.callback, methods=["GET"])]

    def register_routes(self, app):
        """Register /callback on a FastMCP app."""
        app.custom_route(CALLBACK_PATH, methods=["GET"])(self.callback)
        return app
