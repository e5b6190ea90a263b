"""
Tests for environment configuration and app wiring.
"""
from pathlib import Path

import pytest
from mcp.server.fastmcp import FastMCP
from unittest.mock import patch

from strava_mcp.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.client_id == ""
        assert settings.base_url is None
        assert settings.session_dir == Path("/data/strava_sessions")
        assert settings.http_timeout == 10.0
        assert settings.allowed_user_ids == frozenset()
        assert settings.access_token is None

    def test_from_env(self):
        settings = Settings.from_env({
            "STRAVA_CLIENT_ID": "123",
            "STRAVA_CLIENT_SECRET": "s3cret",
            "MCP_BASE_URL": "https://mcp.example",
            "STRAVA_SESSION_DIR": "/tmp/sessions",
            "STRAVA_HTTP_TIMEOUT": "2.5",
            "STRAVA_ALLOWED_USER_IDS": "42, 7,,",
            "STRAVA_ACCESS_TOKEN": "static",
        })
        assert settings.client_id == "123"
        assert settings.base_url == "https://mcp.example"
        assert settings.session_dir == Path("/tmp/sessions")
        assert settings.http_timeout == 2.5
        assert settings.allowed_user_ids == frozenset({"42", "7"})
        assert settings.access_token == "static"

    def test_require_oauth_client(self):
        with pytest.raises(ValueError):
            Settings(client_id="123").require_oauth_client()
        with pytest.raises(ValueError, match="MCP_BASE_URL"):
            Settings(client_id="123", client_secret="s").require_oauth_client()
        Settings(client_id="123", client_secret="s", base_url="https://mcp.example").require_oauth_client()

    def test_allow_list(self):
        assert Settings().is_user_allowed("42")
        settings = Settings(allowed_user_ids=frozenset({"42"}))
        assert settings.is_user_allowed("42")
        assert not settings.is_user_allowed("7")


class TestCreateApp:
    """create_app wired against the test FastMCP (see conftest)."""

    @pytest.fixture(autouse=True)
    def created(self, monkeypatch):
        from strava_mcp import client_factory

        monkeypatch.setattr(client_factory, "_settings", None)
        monkeypatch.setattr(client_factory, "_provider", None)

        created = {}

        def make_app(name, auth=None):
            created["auth"] = auth
            return FastMCP(name)

        with patch("strava_mcp.FastMCP", make_app):
            yield created

    def test_registers_tools_and_routes(self, tmp_path, auth_provider, created):
        from strava_mcp import client_factory, create_app

        settings = Settings(client_id="123", client_secret="s", base_url="https://mcp.example", session_dir=tmp_path)
        app = create_app(settings, auth_provider)

        assert {"get_user_name", "get_activities", "get_athlete_profile"} <= set(app._tool_manager._tools)
        assert [route.path for route in app._custom_starlette_routes] == ["/callback"]
        assert created["auth"] is auth_provider
        assert client_factory._provider is auth_provider
        assert client_factory._settings is settings

    def test_builds_provider_from_settings(self, tmp_path, created):
        from strava_mcp import create_app
        from strava_mcp.oauth.provider import StravaOAuthProvider

        settings = Settings(client_id="123", client_secret="s", base_url="https://mcp.example", session_dir=tmp_path)
        create_app(settings)

        assert isinstance(created["auth"], StravaOAuthProvider)
        assert created["auth"].callback_url == "https://mcp.example/callback"

    def test_without_oauth_client(self, tmp_path, created):
        from strava_mcp import client_factory, create_app

        app = create_app(Settings(access_token="static", session_dir=tmp_path))

        assert created["auth"] is None
        assert client_factory._provider is None
        assert not app._custom_starlette_routes
