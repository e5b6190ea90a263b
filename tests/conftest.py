"""
Shared pytest fixtures for Strava MCP testing.
"""
import base64
import hashlib
import json
import time

import pytest
from unittest.mock import Mock, patch

# Monkey-patch: production uses fastmcp.FastMCP, tests use mcp.server.fastmcp.
# Patch fastmcp.Context to match mcp.server.fastmcp.Context so tools work
# with the test FastMCP.
import fastmcp
from mcp.server.fastmcp import server as mcp_server
fastmcp.Context = mcp_server.Context

from mcp.server.fastmcp import FastMCP
from mcp.shared.auth import OAuthClientInformationFull
from pydantic import AnyUrl

from strava_mcp.oauth.model import AuthRequest, SessionProps
from strava_mcp.oauth.provider import CLIENTS, StravaOAuthProvider
from strava_mcp.oauth.store import FileStore

BASE_URL = "https://mcp.example"
CLIENT_REDIRECT_URI = "http://localhost:3000/callback"

CODE_VERIFIER = "test-code-verifier-" + "a" * 40
CODE_CHALLENGE = base64.urlsafe_b64encode(
    hashlib.sha256(CODE_VERIFIER.encode()).digest()
).decode().rstrip("=")


def get_tool_result_text(result):
    """Extract text from tool result.

    FastMCP call_tool returns a tuple (list_of_TextContent, metadata_dict).
    This helper extracts the text from the first TextContent item.
    """
    # Handle tuple return: (content_list, metadata)
    if isinstance(result, tuple) and len(result) > 0:
        result = result[0]
    if isinstance(result, list) and len(result) > 0:
        if hasattr(result[0], 'text'):
            return result[0].text
    return str(result)


def mock_response(status_code=200, payload=None, reason="OK", text=None):
    """Build a Mock that behaves like a requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    if payload is None:
        response.json = Mock(side_effect=ValueError("No JSON"))
        response.content = b""
    else:
        response.json = Mock(return_value=payload)
        response.content = json.dumps(payload).encode()
    response.text = text if text is not None else json.dumps(payload or {})
    return response


ATHLETE = {
    "id": 42,
    "firstname": "Ada",
    "lastname": "L",
    "city": "London",
    "country": "United Kingdom",
    "sex": "F",
}


@pytest.fixture
def athlete_payload():
    return dict(ATHLETE)


@pytest.fixture
def token_payload():
    """Strava code-exchange response with the athlete inline."""
    return {
        "token_type": "Bearer",
        "expires_at": 1_900_000_000,
        "expires_in": 21600,
        "access_token": "T",
        "refresh_token": "R",
        "athlete": {"id": 42, "firstname": "Ada", "lastname": "L"},
    }


@pytest.fixture
def session_props():
    return SessionProps(
        user_id="42",
        first_name="Ada",
        last_name="L",
        access_token="T",
        refresh_token="R",
    )


@pytest.fixture
def refresh_service():
    """Mock TokenRefreshService."""
    return Mock()


@pytest.fixture
def clock():
    """Controllable clock: set clock.now to move time.

    Starts at the current time because the MCP SDK handlers check code and
    token expiry against the wall clock.
    """
    class Clock:
        def __init__(self):
            self.now = int(time.time())

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "sessions")


@pytest.fixture
def auth_provider(store, refresh_service, clock):
    return StravaOAuthProvider(
        base_url=BASE_URL,
        upstream_client_id="strava_client",
        store=store,
        refresh_service=refresh_service,
        clock=clock,
    )


@pytest.fixture
def registered_client(store):
    """A confidential client known to the authorization provider."""
    client = OAuthClientInformationFull(
        client_id="test-client",
        client_secret="test-secret",
        client_name="Test MCP Client",
        redirect_uris=[AnyUrl(CLIENT_REDIRECT_URI)],
        scope="read write",
        grant_types=["authorization_code", "refresh_token"],
        response_types=["code"],
        token_endpoint_auth_method="client_secret_post",
    )
    store.put(CLIENTS, client.client_id, client.model_dump(mode="json", exclude_none=True))
    return client


@pytest.fixture
def auth_request(registered_client):
    return AuthRequest(
        client_id=registered_client.client_id,
        redirect_uri=CLIENT_REDIRECT_URI,
        scope=["read", "write"],
        state="client-state-123",
        code_challenge=CODE_CHALLENGE,
        code_challenge_method="S256",
    )


@pytest.fixture
def mock_sdk_client():
    """Create a mock Strava client."""
    client = Mock()
    client.access_token = "T"
    client.get = Mock()
    client.make_request = Mock()
    return client


@pytest.fixture(autouse=True)
def mock_get_client(mock_sdk_client):
    """Auto-mock client_factory.get_client in all tool modules.

    Patches get_client at the module level so that tool functions receive
    the mock client instead of trying to resolve the session token.

    Yields the mock function (not the client) so tests can set side_effect
    for error scenarios like "not logged in".
    """
    get_client_fn = Mock(return_value=mock_sdk_client)

    modules_to_patch = [
        "strava_mcp.activities",
        "strava_mcp.auth_tool",
        "strava_mcp.profile",
    ]

    patchers = []
    for module in modules_to_patch:
        p = patch(f"{module}.get_client", get_client_fn)
        p.start()
        patchers.append(p)

    yield get_client_fn

    for p in patchers:
        p.stop()


def create_test_app(module):
    """Helper to create a FastMCP app with a specific module registered."""
    app = FastMCP(f"Test Strava {module.__name__}")
    app = module.register_tools(app)
    return app
