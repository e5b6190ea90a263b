"""
MCP Server for Strava

Provides tools to retrieve Strava athlete and activity data via the
Model Context Protocol (MCP). Users connect their Strava account through
an OAuth 2.0 flow; this server acts as the authorization server for MCP
clients and as an OAuth client of Strava.

Supports two transport modes:
- stdio: For single-user local usage (default, token from STRAVA_ACCESS_TOKEN)
- http: For multi-user HTTP server deployment with OAuth
"""

import logging
import os
from typing import Optional

from fastmcp import FastMCP

from strava_mcp import auth_tool
from strava_mcp import activities
from strava_mcp import profile
from strava_mcp import client_factory
from strava_mcp.config import Settings
from strava_mcp.oauth.bridge import AuthorizationBridge
from strava_mcp.oauth.provider import StravaOAuthProvider
from strava_mcp.oauth.refresh import TokenRefreshService
from strava_mcp.oauth.store import FileStore

logger = logging.getLogger(__name__)


def create_auth_provider(settings: Settings) -> StravaOAuthProvider:
    """Build the authorization provider from settings."""
    refresh_service = TokenRefreshService(
        settings.client_id,
        settings.client_secret,
        timeout=settings.http_timeout,
    )
    return StravaOAuthProvider(
        base_url=settings.base_url,
        upstream_client_id=settings.client_id,
        store=FileStore(settings.session_dir),
        refresh_service=refresh_service,
    )


def create_app(settings: Optional[Settings] = None, provider: Optional[StravaOAuthProvider] = None) -> FastMCP:
    """Create and configure the MCP app with all tools and OAuth routes registered."""
    settings = settings or Settings.from_env()

    if provider is None and settings.oauth_configured:
        provider = create_auth_provider(settings)

    app = FastMCP("Strava MCP v1.0", auth=provider)
    client_factory.configure(settings, provider)

    if provider is not None:
        AuthorizationBridge(settings, provider).register_routes(app)

    app = auth_tool.register_tools(app)
    app = activities.register_tools(app)
    app = profile.register_tools(app)

    return app


def run(transport: str = "stdio", host: str = "0.0.0.0", port: int = 8081) -> None:
    """Run the server with the given transport."""
    settings = Settings.from_env()

    if transport == "http":
        settings.require_oauth_client()
        app = create_app(settings)
        logger.info(f"Starting Strava MCP server on http://{host}:{port}/mcp")
        app.run(transport="http", host=host, port=port)
    else:
        app = create_app(settings)
        app.run()


def main():
    """Initialize the MCP server and run with configured transport.

    Environment variables:
    - MCP_TRANSPORT: 'stdio' (default) or 'http'
    - MCP_HOST: Host to bind to (default: '0.0.0.0')
    - MCP_PORT: Port for HTTP transport (default: 8081)
    """
    logging.basicConfig(level=logging.INFO)

    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    host = os.environ.get("MCP_HOST", "0.0.0.0")
    port = int(os.environ.get("MCP_PORT", "8081"))
    run(transport, host, port)


if __name__ == "__main__":
    main()
