"""
Athlete profile tools for Strava MCP server.
"""

import json

from fastmcp import Context

from strava_mcp.client_factory import get_client, is_token_expired_error, handle_token_expired
from strava_mcp.errors import UpstreamApiError
from strava_mcp.sdk import athlete as sdk_athlete
from strava_mcp.utils import format_distance, format_duration


def _clean_nones(d: dict) -> dict:
    return {k: v for k, v in d.items() if v is not None}


def _format_totals(totals: dict) -> dict:
    if not totals:
        return {}
    return {
        "count": totals.get("count", 0),
        "distance": format_distance(totals.get("distance", 0)),
        "moving_time": format_duration(totals.get("moving_time", 0)),
        "elevation_gain_meters": totals.get("elevation_gain", 0),
    }


def _format_zones(zones: dict) -> dict:
    result = {}
    hr = (zones or {}).get("heart_rate") or {}
    if hr.get("zones"):
        result["hr_zones"] = [
            {"zone": i + 1, "min_bpm": z.get("min"), "max_bpm": z.get("max")}
            for i, z in enumerate(hr["zones"])
        ]
    power = (zones or {}).get("power") or {}
    if power.get("zones"):
        result["power_zones"] = [
            {"zone": i + 1, "min_watts": z.get("min"), "max_watts": z.get("max")}
            for i, z in enumerate(power["zones"])
        ]
    return result


def register_tools(app):
    """Register profile tools with the MCP app."""

    @app.tool()
    async def get_athlete_profile(ctx: Context) -> str:
        """
        Get the athlete's profile.

        Identity, biometrics (weight, FTP), gear and training zones.

        Returns:
            JSON athlete profile
        """
        client = get_client(ctx)
        try:
            data = sdk_athlete.get_athlete_full(client)
            zones = sdk_athlete.get_athlete_zones(client)
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise

        result = {
            "identity": _clean_nones({
                "user_id": str(data.get("id")),
                "first_name": data.get("firstname"),
                "last_name": data.get("lastname"),
                "city": data.get("city"),
                "country": data.get("country"),
                "sex": data.get("sex"),
                "premium": data.get("premium"),
            }),
            "biometrics": _clean_nones({
                "weight_kg": data.get("weight"),
                "ftp": data.get("ftp"),
            }),
            "measurement_preference": data.get("measurement_preference"),
            "bikes": [{"id": b.get("id"), "name": b.get("name")} for b in data.get("bikes") or []],
            "shoes": [{"id": s.get("id"), "name": s.get("name")} for s in data.get("shoes") or []],
        }
        result.update(_format_zones(zones))
        return json.dumps(result, indent=2)

    @app.tool()
    async def get_athlete_stats(ctx: Context) -> str:
        """
        Get the athlete's activity totals.

        Recent (last 4 weeks), year-to-date and all-time totals for
        runs, rides and swims.

        Returns:
            JSON with totals per sport and period
        """
        client = get_client(ctx)
        try:
            athlete = sdk_athlete.get_logged_in_athlete(client)
            stats = sdk_athlete.get_athlete_stats(client, athlete.id)
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise

        result = {}
        for sport in ("run", "ride", "swim"):
            result[sport] = {
                "recent": _format_totals(stats.get(f"recent_{sport}_totals")),
                "year_to_date": _format_totals(stats.get(f"ytd_{sport}_totals")),
                "all_time": _format_totals(stats.get(f"all_{sport}_totals")),
            }
        result["biggest_ride_distance"] = format_distance(stats.get("biggest_ride_distance") or 0)
        result["biggest_climb_elevation_gain"] = stats.get("biggest_climb_elevation_gain")
        return json.dumps(result, indent=2)

    return app
