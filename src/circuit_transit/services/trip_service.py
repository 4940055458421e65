"""Trip planning service.

Tries the live trip-planning API first (when configured) and degrades to
the offline planner on any failure. Live failures are logged, never raised.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from circuit_transit.data.config import PlannerConfig, get_planner_config
from circuit_transit.data.network import NetworkModel
from circuit_transit.data.transport_client import TransportAPIClient
from circuit_transit.models.network import Coordinate
from circuit_transit.models.responses import (
    Itinerary,
    ItinerarySource,
    LegMode,
    PlanTripResponse,
)
from circuit_transit.services.schedule_service import to_local_datetime, to_timestamp_ms
from circuit_transit.services.stop_service import (
    InvalidCoordinateError,
    distance_between,
    validate_coordinate,
)
from circuit_transit.services.trip_planner import TripPlanner

logger = logging.getLogger(__name__)

# Origins closer than this to the destination are also offered a direct walk
WALK_ALTERNATIVE_MAX_METERS = 3000.0


async def fetch_live_itineraries(
    origin: Coordinate,
    destination: Coordinate,
    config: PlannerConfig,
) -> tuple[list[Itinerary], str | None]:
    """Fetch itineraries from the live planner.

    The health endpoint is checked first so an unreachable planner fails fast.

    Returns:
        (itineraries, None) on success, or ([], reason) when the live planner
        is not configured, unhealthy, fails, or finds nothing.
    """
    if not config.transport_api_url:
        logger.debug("No transport API configured, using offline planner")
        return [], "Live planner not configured"

    try:
        async with TransportAPIClient(config) as client:
            if not await client.check_health():
                logger.warning("Live planner health check failed, using offline planner")
                return [], "Live planner unhealthy"
            itineraries = await client.plan(origin, destination)
    # ValueError covers bodies that are not JSON and pydantic validation errors
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Live planner failed, falling back to offline planner: {e}")
        return [], f"Live planner unavailable: {e}"

    if not itineraries:
        logger.info("Live planner returned no itineraries, falling back to offline planner")
        return [], "Live planner returned no itineraries"

    logger.debug(f"Fetched {len(itineraries)} itineraries from live planner")
    return itineraries, None


def plan_offline(
    origin: Coordinate,
    destination: Coordinate,
    start_time: int,
    planner: TripPlanner,
) -> list[Itinerary]:
    """Offline itineraries: the rail trip, plus a direct walk when close enough.

    The walk comes first when offered. An itinerary that already walks the
    whole way is not duplicated.
    """
    itinerary = planner.build_itinerary(origin, destination, start_time)
    if distance_between(origin, destination) >= WALK_ALTERNATIVE_MAX_METERS:
        return [itinerary]
    if all(leg.mode is LegMode.WALK for leg in itinerary.legs):
        return [itinerary]
    return [planner.walk_direct(origin, destination, start_time), itinerary]


def filter_by_mode(itineraries: list[Itinerary], mode: LegMode | None) -> list[Itinerary]:
    """Keep itineraries with at least one leg in the given mode (all when mode is None)."""
    if mode is None:
        return itineraries
    return [it for it in itineraries if any(leg.mode is mode for leg in it.legs)]


async def plan_trip(
    origin_lat: float,
    origin_lon: float,
    destination_lat: float | None = None,
    destination_lon: float | None = None,
    start_time: int | None = None,
    use_live: bool = True,
    mode: LegMode | None = None,
    config: PlannerConfig | None = None,
    network: NetworkModel | None = None,
) -> PlanTripResponse:
    """Plan a public transport trip to the circuit.

    Args:
        origin_lat, origin_lon: Rider position in degrees.
        destination_lat, destination_lon: Destination (default: circuit access).
        start_time: Departure in epoch milliseconds (default: now).
        use_live: Whether to try the live planner before the offline one.
        mode: Only return itineraries with a leg in this mode (default: all).
        config: Optional configuration override.
        network: Optional network override for the offline planner.

    Returns:
        PlanTripResponse with live itineraries, or the offline rail itinerary
        (preceded by a direct walk for nearby origins).
    """
    config = config or get_planner_config()

    if destination_lat is None:
        destination_lat = config.destination_lat
    if destination_lon is None:
        destination_lon = config.destination_lon
    if start_time is None:
        start_time = to_timestamp_ms(datetime.now(ZoneInfo(config.timezone)))

    response_context = {
        "origin_lat": origin_lat,
        "origin_lon": origin_lon,
        "destination_lat": destination_lat,
        "destination_lon": destination_lon,
        "query_time": to_local_datetime(start_time, config.timezone).isoformat(),
    }

    try:
        origin = validate_coordinate(origin_lat, origin_lon)
        destination = validate_coordinate(destination_lat, destination_lon)
    except InvalidCoordinateError as e:
        return PlanTripResponse(**response_context, count=0, success=False, error=str(e))

    fallback_reason = "Live planner disabled for this request"
    if use_live:
        itineraries, fallback_reason = await fetch_live_itineraries(origin, destination, config)
        if itineraries:
            itineraries = filter_by_mode(itineraries, mode)
            return PlanTripResponse(
                **response_context,
                itineraries=itineraries,
                source=ItinerarySource.LIVE,
                count=len(itineraries),
                success=True,
            )

    planner = TripPlanner.from_config(config, network=network)
    itineraries = filter_by_mode(plan_offline(origin, destination, start_time, planner), mode)

    return PlanTripResponse(
        **response_context,
        itineraries=itineraries,
        source=ItinerarySource.OFFLINE,
        fallback_reason=fallback_reason,
        count=len(itineraries),
        success=True,
    )
