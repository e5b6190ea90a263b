"""
Identity tools for Strava MCP server.

Authentication itself happens over OAuth (/authorize); these tools expose
who is connected and what the server can do.
"""

import json
import logging

from fastmcp import Context

from strava_mcp.client_factory import (
    get_client,
    is_token_expired_error,
    handle_token_expired,
)
from strava_mcp.errors import UpstreamApiError
from strava_mcp.sdk import athlete as sdk_athlete

logger = logging.getLogger(__name__)


def register_tools(app):
    """Register identity tools with the MCP app."""

    @app.tool()
    async def get_user_name(ctx: Context) -> str:
        """
        Get the connected athlete's name.

        Returns:
            JSON with the athlete's id, first and last name
        """
        client = get_client(ctx)
        try:
            athlete = sdk_athlete.get_logged_in_athlete(client)
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise
        return json.dumps({
            "name": f"{athlete.firstname} {athlete.lastname}".strip(),
            "user_id": str(athlete.id),
            "first_name": athlete.firstname,
            "last_name": athlete.lastname,
        }, indent=2)

    @app.tool()
    async def get_available_features(ctx: Context) -> str:
        """
        Get list of available Strava data features.

        Returns:
            JSON with available feature categories
        """
        features = {
            "platform": "Strava",
            "auth": [
                "Connect through the OAuth flow started at /authorize",
                "Sessions refresh the Strava token automatically",
            ],
            "user": [
                "get_user_name - Connected athlete's name and id",
                "get_athlete_profile - Profile with weight, FTP, gear and zones",
                "get_athlete_stats - Recent, year-to-date and all-time totals",
                "get_available_features - This feature list",
            ],
            "activities": [
                "get_activities - List activities with date filters",
                "get_activity_details - Detailed activity data (laps, splits, HR)",
                "get_activities_summary - Aggregated stats over N days",
            ],
        }
        return json.dumps(features, indent=2)

    return app
