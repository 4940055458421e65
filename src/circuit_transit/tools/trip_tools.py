from circuit_transit.app import mcp
from circuit_transit.models.responses import LegMode, PlanTripResponse
from circuit_transit.services.trip_service import plan_trip as _plan_trip


@mcp.tool()
async def plan_trip(
    origin_lat: float,
    origin_lon: float,
    destination_lat: float | None = None,
    destination_lon: float | None = None,
    start_time: int | None = None,
    use_live: bool = True,
    mode: LegMode | None = None,
) -> PlanTripResponse:
    """Plan a public transport trip to the Circuit de Barcelona-Catalunya.

    Uses the live trip-planning API when it is configured and reachable.
    Otherwise builds an offline itinerary: walk (or walk + metro) to the best
    R2 Nord station, the next scheduled train to Montmeló, then the circuit
    shuttle. Origins within 3 km of the destination also get a direct walk.

    Examples:
        plan_trip(origin_lat=41.387, origin_lon=2.170)  # From Plaça de Catalunya
        plan_trip(origin_lat=41.387, origin_lon=2.170, use_live=False)
        plan_trip(origin_lat=41.387, origin_lon=2.170, mode="BUS")  # Only trips using a bus

    Args:
        origin_lat: Rider latitude in degrees.
        origin_lon: Rider longitude in degrees.
        destination_lat: Destination latitude (default: circuit access).
        destination_lon: Destination longitude (default: circuit access).
        start_time: Departure time in epoch milliseconds (default: now).
        use_live: Set to False to skip the live planner.
        mode: Keep only itineraries with a leg in this mode (WALK, BUS, RAIL, SUBWAY).

    Returns:
        PlanTripResponse with itineraries and whether they are live or offline.
    """
    return await _plan_trip(
        origin_lat=origin_lat,
        origin_lon=origin_lon,
        destination_lat=destination_lat,
        destination_lon=destination_lon,
        start_time=start_time,
        use_live=use_live,
        mode=mode,
    )
