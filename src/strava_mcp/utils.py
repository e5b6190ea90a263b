"""
Shared utility functions for Strava MCP server.

Formatting helpers used across tool modules.
"""


def format_duration(seconds: int) -> str:
    """Format seconds into human-readable duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "1h01m01s" or "25m30s"
    """
    if not seconds or seconds <= 0:
        return "0s"
    seconds = int(seconds)
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}h{m:02d}m{s:02d}s"
    if m > 0:
        return f"{m}m{s:02d}s"
    return f"{s}s"


def format_pace(speed_m_s: float) -> str:
    """Format a Strava speed (m/s) as pace in min:sec/km.

    Args:
        speed_m_s: Average speed in meters per second

    Returns:
        Formatted string like "5:30/km", or None without speed
    """
    if not speed_m_s or speed_m_s <= 0:
        return None
    seconds_per_km = int(round(1000 / speed_m_s))
    minutes = seconds_per_km // 60
    secs = seconds_per_km % 60
    return f"{minutes}:{secs:02d}/km"


def format_distance(meters: float) -> str:
    """Format distance in meters to human-readable string.

    Args:
        meters: Distance in meters

    Returns:
        Formatted string like "10.0 km" or "800 m"
    """
    if not meters or meters <= 0:
        return "0 m"
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{int(meters)} m"


def format_speed_kmh(speed_m_s: float) -> float:
    """Convert meters per second to km/h rounded to one decimal."""
    if not speed_m_s:
        return None
    return round(speed_m_s * 3.6, 1)
