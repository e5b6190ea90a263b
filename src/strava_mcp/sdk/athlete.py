"""
Strava athlete SDK functions.

GET athlete, GET athletes/{id}/stats, GET athlete/zones.
"""

from dataclasses import dataclass
from typing import Any, Dict

from strava_mcp.errors import UpstreamApiError
from strava_mcp.sdk.client import StravaClient


@dataclass
class Athlete:
    """Authenticated Strava athlete identity."""
    id: int
    firstname: str
    lastname: str
    city: str = ""
    country: str = ""
    sex: str = ""
    profile: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Athlete":
        return cls(
            id=data["id"],
            firstname=data.get("firstname") or "",
            lastname=data.get("lastname") or "",
            city=data.get("city") or "",
            country=data.get("country") or "",
            sex=data.get("sex") or "",
            profile=data.get("profile") or "",
        )


def get_logged_in_athlete(client: StravaClient) -> Athlete:
    """
    Get the athlete the access token belongs to.

    GET athlete

    Raises:
        UpstreamApiError: If Strava rejects the token or answers without an athlete id
    """
    data = client.get("athlete")
    if not isinstance(data, dict) or data.get("id") is None:
        raise UpstreamApiError(200, "Athlete payload without id")
    return Athlete.from_dict(data)


def get_athlete_full(client: StravaClient) -> Dict[str, Any]:
    """Raw detailed athlete payload (clubs, bikes, shoes, ftp, weight...)."""
    return client.get("athlete")


def get_athlete_stats(client: StravaClient, athlete_id: int) -> Dict[str, Any]:
    """
    GET athletes/{id}/stats

    Returns:
        {recent_run_totals, all_run_totals, ytd_ride_totals, biggest_ride_distance, ...}
    """
    return client.get(f"athletes/{athlete_id}/stats")


def get_athlete_zones(client: StravaClient) -> Dict[str, Any]:
    """GET athlete/zones — heart rate and power zones."""
    return client.get("athlete/zones")
