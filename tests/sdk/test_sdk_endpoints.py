"""Tests for SDK athlete and activities functions."""

from datetime import date
from unittest.mock import Mock

import pytest

from strava_mcp.errors import UpstreamApiError
from strava_mcp.sdk import activities, athlete


class TestAthlete:
    def test_get_logged_in_athlete(self, athlete_payload):
        client = Mock()
        client.get.return_value = athlete_payload

        result = athlete.get_logged_in_athlete(client)

        client.get.assert_called_once_with("athlete")
        assert result.id == 42
        assert result.firstname == "Ada"
        assert result.lastname == "L"

    def test_null_names_become_empty(self):
        client = Mock()
        client.get.return_value = {"id": 7, "firstname": None, "lastname": None}
        result = athlete.get_logged_in_athlete(client)
        assert result.firstname == ""
        assert result.lastname == ""

    @pytest.mark.parametrize("payload", [None, {"firstname": "Ada"}, {"id": None}, ["not", "an", "object"]])
    def test_payload_without_id_is_upstream_error(self, payload):
        client = Mock()
        client.get.return_value = payload
        with pytest.raises(UpstreamApiError) as exc_info:
            athlete.get_logged_in_athlete(client)
        assert exc_info.value.status_code == 502

    def test_get_athlete_stats(self):
        client = Mock()
        client.get.return_value = {"all_run_totals": {"count": 3}}
        assert athlete.get_athlete_stats(client, 42)["all_run_totals"]["count"] == 3
        client.get.assert_called_once_with("athletes/42/stats")


class TestActivities:
    def test_list_activities_date_filters(self):
        client = Mock()
        client.get.return_value = [{"id": 1}]

        result = activities.list_activities(
            client, page=2, per_page=10, after=date(2024, 1, 1), before=date(2024, 1, 31),
        )

        assert result == [{"id": 1}]
        path, = client.get.call_args[0]
        params = client.get.call_args.kwargs["params"]
        assert path == "athlete/activities"
        assert params["page"] == 2
        assert params["per_page"] == 10
        assert params["after"] == 1704067200
        assert params["before"] == 1706745599

    def test_list_activities_without_filters(self):
        client = Mock()
        client.get.return_value = None
        assert activities.list_activities(client) == []
        params = client.get.call_args.kwargs["params"]
        assert "after" not in params
        assert "before" not in params

    def test_get_activity(self):
        client = Mock()
        client.get.return_value = {"id": 99}
        assert activities.get_activity(client, "99") == {"id": 99}
        client.get.assert_called_once_with("activities/99", params={"include_all_efforts": "false"})
