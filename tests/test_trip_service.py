"""Tests for the trip planning service (live planner with offline fallback)."""

import math
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from circuit_transit.data.config import PlannerConfig
from circuit_transit.data.network import MONTMELO, NetworkModel
from circuit_transit.models.responses import ItinerarySource, LegMode
from circuit_transit.services.schedule_service import to_timestamp_ms
from circuit_transit.services.stop_service import EARTH_RADIUS_METERS
from circuit_transit.services.trip_service import plan_trip

START = to_timestamp_ms(datetime(2025, 5, 15, 10, 10, tzinfo=ZoneInfo("Europe/Madrid")))


def _offline_config() -> PlannerConfig:
    """Create a config without a live planner.

    Note: Must use alias names to override .env file values.
    """
    return PlannerConfig(CIRCUIT_TRANSPORT_API_URL=None)


def _live_config() -> PlannerConfig:
    return PlannerConfig(CIRCUIT_TRANSPORT_API_URL="https://example.com/v1/transport")


def _live_body() -> dict:
    return {
        "itineraries": [
            {
                "duration": 120,
                "startTime": START,
                "endTime": START + 120_000,
                "walkTime": 120,
                "transitTime": 0,
                "legs": [
                    {
                        "mode": "WALK",
                        "from": {"name": "A", "lat": 41.4, "lon": 2.17, "departureTime": START},
                        "to": {"name": "B", "lat": 41.41, "lon": 2.17, "arrivalTime": START + 120_000},
                    }
                ],
            }
        ]
    }


def _ok_response(body: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = body
    return response


def _south_of_circuit(meters: float) -> tuple[float, float]:
    """Origin due south of the default destination, `meters` away."""
    return 41.570 - math.degrees(meters / EARTH_RADIUS_METERS), 2.260


def _patch_http(get: AsyncMock):
    mock_client = AsyncMock()
    mock_client.get = get
    patcher = patch("httpx.AsyncClient")
    mock_client_class = patcher.start()
    mock_client_class.return_value = mock_client
    return patcher


class TestOfflinePlanning:
    """Tests for planning without the live API."""

    async def test_offline_when_not_configured(self) -> None:
        response = await plan_trip(41.387, 2.170, start_time=START, config=_offline_config())

        assert response.success is True
        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason == "Live planner not configured"
        assert response.count == 1
        itinerary = response.itineraries[0]
        assert LegMode.RAIL in [leg.mode for leg in itinerary.legs]
        assert itinerary.start_time == START

    async def test_default_destination_is_circuit(self) -> None:
        response = await plan_trip(41.387, 2.170, start_time=START, config=_offline_config())
        assert (response.destination_lat, response.destination_lon) == (41.570, 2.260)
        last = response.itineraries[0].legs[-1]
        assert (last.to_place.lat, last.to_place.lon) == (41.570, 2.260)

    async def test_use_live_false_skips_api(self) -> None:
        get = AsyncMock()
        patcher = _patch_http(get)
        try:
            response = await plan_trip(
                41.387, 2.170, start_time=START, use_live=False, config=_live_config()
            )
        finally:
            patcher.stop()

        get.assert_not_called()
        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason == "Live planner disabled for this request"

    async def test_custom_network(self) -> None:
        """An empty network still yields a (walking) itinerary."""
        network = NetworkModel(stations=(), terminal=MONTMELO)
        response = await plan_trip(
            41.56, 2.25, start_time=START, config=_offline_config(), network=network
        )
        assert response.success is True
        assert [leg.mode for leg in response.itineraries[0].legs] == [LegMode.WALK]

    async def test_query_time_is_local_iso(self) -> None:
        response = await plan_trip(41.387, 2.170, start_time=START, config=_offline_config())
        assert response.query_time.startswith("2025-05-15T10:10:00")

    async def test_default_start_time(self) -> None:
        response = await plan_trip(41.387, 2.170, config=_offline_config())
        assert response.success is True


class TestWalkAlternative:
    """Tests for the direct walk offered to origins near the destination."""

    async def test_nearby_origin_gets_walk_first(self) -> None:
        response = await plan_trip(
            *_south_of_circuit(2900), start_time=START, config=_offline_config()
        )

        assert response.count == 2
        walk, rail = response.itineraries
        assert [leg.mode for leg in walk.legs] == [LegMode.WALK]
        assert walk.legs[0].distance == pytest.approx(2900)
        assert LegMode.RAIL in [leg.mode for leg in rail.legs]

    async def test_distant_origin_gets_rail_only(self) -> None:
        response = await plan_trip(
            *_south_of_circuit(3100), start_time=START, config=_offline_config()
        )

        assert response.count == 1
        assert LegMode.RAIL in [leg.mode for leg in response.itineraries[0].legs]

    async def test_walk_only_itinerary_not_duplicated(self) -> None:
        network = NetworkModel(stations=(), terminal=MONTMELO)
        response = await plan_trip(
            *_south_of_circuit(1000), start_time=START, config=_offline_config(), network=network
        )
        assert response.count == 1


class TestModeFilter:
    """Tests for keeping only itineraries that use a given mode."""

    async def test_rail_filter_drops_walk_alternative(self) -> None:
        response = await plan_trip(
            *_south_of_circuit(2900),
            start_time=START,
            mode=LegMode.RAIL,
            config=_offline_config(),
        )
        assert response.count == 1
        assert LegMode.RAIL in [leg.mode for leg in response.itineraries[0].legs]

    async def test_walk_filter_keeps_both(self) -> None:
        response = await plan_trip(
            *_south_of_circuit(2900),
            start_time=START,
            mode=LegMode.WALK,
            config=_offline_config(),
        )
        assert response.count == 2

    async def test_unmatched_mode_returns_nothing(self) -> None:
        """Next to Sants the rider walks to the train, so no metro leg exists."""
        response = await plan_trip(
            41.380, 2.141, start_time=START, mode=LegMode.SUBWAY, config=_offline_config()
        )
        assert response.success is True
        assert response.count == 0
        assert response.itineraries == []

    async def test_filter_applies_to_live_results(self) -> None:
        patcher = _patch_http(AsyncMock(return_value=_ok_response(_live_body())))
        try:
            response = await plan_trip(
                41.387, 2.170, start_time=START, mode=LegMode.BUS, config=_live_config()
            )
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.LIVE
        assert response.count == 0


class TestInvalidInput:
    """Tests for coordinate validation at the service boundary."""

    async def test_invalid_origin(self) -> None:
        response = await plan_trip(95.0, 2.170, start_time=START, config=_offline_config())
        assert response.success is False
        assert response.count == 0
        assert response.itineraries == []
        assert "Invalid coordinate" in response.error

    async def test_nan_destination(self) -> None:
        response = await plan_trip(
            41.387, 2.170, float("nan"), 2.26, start_time=START, config=_offline_config()
        )
        assert response.success is False


class TestLivePlanning:
    """Tests for the live planner path."""

    async def test_live_success(self) -> None:
        get = AsyncMock(return_value=_ok_response(_live_body()))
        patcher = _patch_http(get)
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.LIVE
        assert response.fallback_reason is None
        assert response.count == 1
        assert response.itineraries[0].duration == 120
        urls = [call.args[0] for call in get.call_args_list]
        assert urls == [
            "https://example.com/v1/transport/health",
            "https://example.com/v1/transport/plan",
        ]

    async def test_fallback_when_health_check_fails(self) -> None:
        unhealthy = MagicMock()
        unhealthy.status_code = 503
        get = AsyncMock(return_value=unhealthy)
        patcher = _patch_http(get)
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        get.assert_awaited_once()
        assert response.success is True
        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason == "Live planner unhealthy"

    async def test_fallback_when_unreachable(self) -> None:
        patcher = _patch_http(AsyncMock(side_effect=httpx.ConnectError("connection refused")))
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason == "Live planner unhealthy"

    async def test_fallback_on_connection_error_after_health(self) -> None:
        get = AsyncMock(
            side_effect=[_ok_response({}), httpx.ConnectError("connection refused")]
        )
        patcher = _patch_http(get)
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.success is True
        assert response.source is ItinerarySource.OFFLINE
        assert "connection refused" in response.fallback_reason

    async def test_fallback_on_http_status_error(self) -> None:
        request = httpx.Request("GET", "https://example.com/v1/transport/plan")
        mock_response = _ok_response({})
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "503 Service Unavailable", request=request, response=httpx.Response(503, request=request)
        )
        patcher = _patch_http(AsyncMock(return_value=mock_response))
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason.startswith("Live planner unavailable")

    async def test_fallback_on_non_json_body(self) -> None:
        """A 200 page that is not JSON (captive portal, proxy error) degrades."""
        request = httpx.Request("GET", "https://example.com/v1/transport/plan")
        html = httpx.Response(200, text="<html>Sign in to Wi-Fi</html>", request=request)
        patcher = _patch_http(AsyncMock(return_value=html))
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.success is True
        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason.startswith("Live planner unavailable")
        assert response.count == 1

    async def test_fallback_on_invalid_body(self) -> None:
        patcher = _patch_http(
            AsyncMock(return_value=_ok_response({"itineraries": [{"duration": "soon"}]}))
        )
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.OFFLINE

    async def test_fallback_on_empty_result(self) -> None:
        patcher = _patch_http(AsyncMock(return_value=_ok_response({"itineraries": []})))
        try:
            response = await plan_trip(41.387, 2.170, start_time=START, config=_live_config())
        finally:
            patcher.stop()

        assert response.source is ItinerarySource.OFFLINE
        assert response.fallback_reason == "Live planner returned no itineraries"
