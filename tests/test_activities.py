"""
Tests for Strava MCP activity tools.

These tests verify the tool → sdk delegation and the curated JSON output.
"""
import json
import pytest
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from strava_mcp import activities
from strava_mcp.errors import UpstreamApiError
from tests.conftest import get_tool_result_text


@pytest.fixture
def app_with_activities():
    """Create FastMCP app with activity tools registered."""
    app = FastMCP("Test Strava Activities")
    app = activities.register_tools(app)
    return app


RUN = {
    "id": 1001,
    "name": "Morning Run",
    "sport_type": "Run",
    "start_date_local": "2024-05-01T07:00:00Z",
    "distance": 10000.0,
    "moving_time": 3000,
    "elapsed_time": 3100,
    "total_elevation_gain": 50.0,
    "average_heartrate": 150.0,
    "average_speed": 3.333,
}

RIDE = {
    "id": 1002,
    "name": "Evening Ride",
    "type": "Ride",
    "distance": 30000.0,
    "moving_time": 3600,
}


@pytest.mark.asyncio
async def test_get_activities(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.return_value = [RUN, RIDE]

    result = await app_with_activities.call_tool("get_activities", {})
    data = json.loads(get_tool_result_text(result))

    assert data["count"] == 2
    assert data["page"] == 1
    assert data["activities"][0]["id"] == "1001"
    assert data["activities"][0]["sport_type"] == "Run"
    assert data["activities"][1]["sport_type"] == "Ride"


@pytest.mark.asyncio
async def test_get_activities_with_date_filter(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.return_value = []

    await app_with_activities.call_tool(
        "get_activities",
        {"start_date": "2024-01-01", "end_date": "2024-01-31", "page": 2, "size": 500},
    )

    params = mock_sdk_client.get.call_args.kwargs["params"]
    assert params["after"] == 1704067200
    assert params["before"] == 1706745599
    assert params["page"] == 2
    assert params["per_page"] == 200


@pytest.mark.asyncio
async def test_get_activity_details(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.return_value = dict(
        RUN,
        description="Easy",
        gear={"name": "Pegasus"},
        laps=[{"lap_index": 1, "distance": 5000.0, "moving_time": 1500, "average_speed": 3.333}],
        splits_metric=[{"split": 1, "moving_time": 300, "average_speed": 3.333, "elevation_difference": 2.0}],
    )

    result = await app_with_activities.call_tool("get_activity_details", {"activity_id": "1001"})
    data = json.loads(get_tool_result_text(result))

    assert data["id"] == "1001"
    assert data["avg_pace"] == "5:00/km"
    assert data["avg_speed_kmh"] == 12.0
    assert data["gear"] == "Pegasus"
    assert data["laps"][0]["distance"] == "5.0 km"
    assert data["splits_km"][0]["moving_time"] == "5m00s"
    assert "calories" not in data
    mock_sdk_client.get.assert_called_once_with("activities/1001", params={"include_all_efforts": "false"})


@pytest.mark.asyncio
async def test_get_activities_summary(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.return_value = [RUN, RUN, RIDE]

    result = await app_with_activities.call_tool("get_activities_summary", {"days": 14})
    data = json.loads(get_tool_result_text(result))

    assert data["days"] == 14
    assert data["total_activities"] == 3
    assert data["total_distance"] == "50.0 km"
    assert data["by_sport"]["Run"]["count"] == 2
    assert data["by_sport"]["Ride"]["moving_time"] == "1h00m00s"
    # A short page ends pagination
    assert mock_sdk_client.get.call_count == 1


@pytest.mark.asyncio
async def test_get_activities_summary_pages(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.side_effect = [[RIDE] * 100, [RUN]]

    result = await app_with_activities.call_tool("get_activities_summary", {})
    data = json.loads(get_tool_result_text(result))

    assert data["total_activities"] == 101
    assert mock_sdk_client.get.call_args.kwargs["params"]["page"] == 2


@pytest.mark.asyncio
async def test_expired_token(app_with_activities, mock_sdk_client):
    mock_sdk_client.get.side_effect = UpstreamApiError(401, "Unauthorized")

    result = await app_with_activities.call_tool("get_activities", {})
    data = json.loads(get_tool_result_text(result))

    assert data["error_code"] == "SESSION_EXPIRED"


@pytest.mark.asyncio
async def test_not_logged_in(app_with_activities, mock_get_client):
    mock_get_client.side_effect = ValueError("No Strava session. Connect your Strava account via /authorize first.")

    with pytest.raises(ToolError) as exc_info:
        await app_with_activities.call_tool("get_activities", {})

    assert "No Strava session" in str(exc_info.value)


def test_activity_tools_registered(app_with_activities):
    tools = app_with_activities._tool_manager._tools
    assert {"get_activities", "get_activity_details", "get_activities_summary"} <= set(tools)
