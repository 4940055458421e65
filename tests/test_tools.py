"""Tests for the MCP tool wrappers."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from circuit_transit.data.config import get_planner_config
from circuit_transit.models.responses import ItinerarySource, LegMode
from circuit_transit.services.schedule_service import to_timestamp_ms
from circuit_transit.tools.schedule_tools import get_next_departures
from circuit_transit.tools.stop_tools import search_stations
from circuit_transit.tools.trip_tools import plan_trip

START = to_timestamp_ms(datetime(2025, 5, 15, 10, 10, tzinfo=ZoneInfo("Europe/Madrid")))


@pytest.fixture(autouse=True)
def offline_config(monkeypatch):
    """Run tools without a live planner and with fresh settings."""
    monkeypatch.delenv("CIRCUIT_TRANSPORT_API_URL", raising=False)
    monkeypatch.setenv("CIRCUIT_TIMEZONE", "Europe/Madrid")
    get_planner_config.cache_clear()
    yield
    get_planner_config.cache_clear()


async def test_plan_trip_tool():
    response = await plan_trip(origin_lat=41.387, origin_lon=2.170, start_time=START)
    assert response.success is True
    assert response.source is ItinerarySource.OFFLINE
    assert response.count == 1


async def test_plan_trip_tool_mode_filter():
    response = await plan_trip(
        origin_lat=41.387, origin_lon=2.170, start_time=START, mode=LegMode.RAIL
    )
    assert response.count == 1
    assert LegMode.RAIL in [leg.mode for leg in response.itineraries[0].legs]


async def test_plan_trip_tool_invalid_coordinate():
    response = await plan_trip(origin_lat=41.387, origin_lon=999.0, start_time=START)
    assert response.success is False


async def test_search_stations_clamps_limit():
    response = await search_stations(limit=0)
    assert response.count == 1


async def test_search_stations_by_location():
    response = await search_stations(lat=41.392, lon=2.165, limit=1)
    assert response.stations[0].id == "pdg"


async def test_get_next_departures_clamps_count():
    response = await get_next_departures(station_id="sants", start_time=START, count=50)
    assert response.count == 12


async def test_get_next_departures_unknown_station():
    with pytest.raises(ValueError):
        await get_next_departures(station_id="atlantis", start_time=START)
