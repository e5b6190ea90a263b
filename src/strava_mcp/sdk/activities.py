"""
Strava activities SDK functions.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from strava_mcp.sdk.client import StravaClient


def _epoch(day: date, end_of_day: bool = False) -> int:
    moment = datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    return int(moment.timestamp())


def list_activities(
    client: StravaClient,
    page: int = 1,
    per_page: int = 30,
    after: Optional[date] = None,
    before: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Get the authenticated athlete's activities, newest first.

    GET athlete/activities

    Returns:
        [{id, name, sport_type, start_date_local, distance, moving_time, ...}]
    """
    params = {"page": page, "per_page": per_page}
    if after:
        params["after"] = _epoch(after)
    if before:
        params["before"] = _epoch(before, end_of_day=True)
    return client.get("athlete/activities", params=params) or []


def get_activity(client: StravaClient, activity_id: str, include_all_efforts: bool = False) -> Dict[str, Any]:
    """
    GET activities/{id}

    Returns:
        Detailed activity with laps, splits_metric, segment_efforts, ...
    """
    params = {"include_all_efforts": "true" if include_all_efforts else "false"}
    return client.get(f"activities/{activity_id}", params=params)


def get_activity_laps(client: StravaClient, activity_id: str) -> List[Dict[str, Any]]:
    """GET activities/{id}/laps"""
    return client.get(f"activities/{activity_id}/laps") or []
