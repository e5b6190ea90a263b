"""
Activity tools for Strava MCP server.

Provides tools for querying Strava activities.
"""

import json
from datetime import date, datetime, timedelta

from fastmcp import Context

from strava_mcp.client_factory import get_client, is_token_expired_error, handle_token_expired
from strava_mcp.errors import UpstreamApiError
from strava_mcp.sdk import activities as sdk_activities
from strava_mcp.utils import format_distance, format_duration, format_pace, format_speed_kmh


def _summarize(activity: dict) -> dict:
    return {
        "id": str(activity.get("id")),
        "name": activity.get("name"),
        "sport_type": activity.get("sport_type") or activity.get("type"),
        "start_date_local": activity.get("start_date_local"),
        "distance_meters": activity.get("distance"),
        "moving_time_seconds": activity.get("moving_time"),
        "elapsed_time_seconds": activity.get("elapsed_time"),
        "elevation_gain_meters": activity.get("total_elevation_gain"),
        "avg_heart_rate_bpm": activity.get("average_heartrate"),
        "suffer_score": activity.get("suffer_score"),
    }


def register_tools(app):
    """Register activity tools with the MCP app."""

    @app.tool()
    async def get_activities(
        ctx: Context,
        start_date: str = None,
        end_date: str = None,
        page: int = 1,
        size: int = 30,
    ) -> str:
        """
        Get list of Strava activities.

        Returns a paginated list of activities, newest first.

        Args:
            start_date: Filter start date in YYYY-MM-DD format (optional)
            end_date: Filter end date in YYYY-MM-DD format (optional)
            page: Page number, starting from 1 (default: 1)
            size: Number of activities per page (default: 30, max: 200)

        Returns:
            JSON with activity list
        """
        client = get_client(ctx)

        after = datetime.strptime(start_date, "%Y-%m-%d").date() if start_date else None
        before = datetime.strptime(end_date, "%Y-%m-%d").date() if end_date else None

        try:
            data = sdk_activities.list_activities(
                client, page=page, per_page=min(size, 200), after=after, before=before,
            )
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise

        return json.dumps({
            "count": len(data),
            "page": page,
            "activities": [_summarize(a) for a in data],
        }, indent=2)

    @app.tool()
    async def get_activity_details(activity_id: str, ctx: Context) -> str:
        """
        Get detailed information about a Strava activity.

        Includes summary metrics, laps and per-kilometer splits.

        Args:
            activity_id: The activity id from get_activities

        Returns:
            JSON with detailed activity data
        """
        client = get_client(ctx)
        try:
            data = sdk_activities.get_activity(client, activity_id)
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise

        curated = _summarize(data)
        curated.update({
            "description": data.get("description"),
            "avg_speed_kmh": format_speed_kmh(data.get("average_speed")),
            "avg_pace": format_pace(data.get("average_speed")),
            "max_heart_rate_bpm": data.get("max_heartrate"),
            "avg_cadence": data.get("average_cadence"),
            "avg_watts": data.get("average_watts"),
            "calories": data.get("calories"),
            "gear": (data.get("gear") or {}).get("name"),
            "device": data.get("device_name"),
        })

        curated["laps"] = [
            {
                "lap": lap.get("lap_index"),
                "distance": format_distance(lap.get("distance")),
                "moving_time": format_duration(lap.get("moving_time")),
                "pace": format_pace(lap.get("average_speed")),
                "avg_heart_rate_bpm": lap.get("average_heartrate"),
            }
            for lap in data.get("laps") or []
        ]
        curated["splits_km"] = [
            {
                "split": split.get("split"),
                "moving_time": format_duration(split.get("moving_time")),
                "pace": format_pace(split.get("average_speed")),
                "elevation_difference": split.get("elevation_difference"),
            }
            for split in data.get("splits_metric") or []
        ]

        return json.dumps({k: v for k, v in curated.items() if v is not None}, indent=2)

    @app.tool()
    async def get_activities_summary(ctx: Context, days: int = 7) -> str:
        """
        Get a summary of activities over the last N days.

        Args:
            days: Number of days to look back (default: 7)

        Returns:
            JSON with totals overall and per sport type
        """
        client = get_client(ctx)
        after = date.today() - timedelta(days=days)

        activities = []
        page = 1
        try:
            while True:
                batch = sdk_activities.list_activities(client, page=page, per_page=100, after=after)
                activities.extend(batch)
                if len(batch) < 100:
                    break
                page += 1
        except UpstreamApiError as e:
            if is_token_expired_error(e):
                return handle_token_expired()
            raise

        by_sport = {}
        for activity in activities:
            sport = activity.get("sport_type") or activity.get("type") or "Unknown"
            entry = by_sport.setdefault(sport, {"count": 0, "distance_meters": 0.0, "moving_time_seconds": 0})
            entry["count"] += 1
            entry["distance_meters"] += activity.get("distance") or 0
            entry["moving_time_seconds"] += activity.get("moving_time") or 0

        total_distance = sum(e["distance_meters"] for e in by_sport.values())
        total_time = sum(e["moving_time_seconds"] for e in by_sport.values())

        return json.dumps({
            "days": days,
            "total_activities": len(activities),
            "total_distance": format_distance(total_distance),
            "total_moving_time": format_duration(total_time),
            "by_sport": {
                sport: {
                    "count": e["count"],
                    "distance": format_distance(e["distance_meters"]),
                    "moving_time": format_duration(e["moving_time_seconds"]),
                }
                for sport, e in by_sport.items()
            },
        }, indent=2)

    return app
