from circuit_transit.app import mcp
from circuit_transit.data.config import get_planner_config
from circuit_transit.models.responses import GetNextDeparturesResponse
from circuit_transit.services.schedule_service import (
    get_next_departures as _get_next_departures,
)


@mcp.tool()
async def get_next_departures(
    station_id: str,
    start_time: int | None = None,
    count: int = 4,
) -> GetNextDeparturesResponse:
    """Get upcoming R2 Nord departures at a station.

    Departures come from the fixed timetable pattern (trains leave Barcelona
    Sants at :08 and :38 every hour), not from real-time data.

    Examples:
        get_next_departures(station_id="sants")
        get_next_departures(station_id="clot", count=2)

    Args:
        station_id: The station ID (required). Use search_stations() to find IDs.
        start_time: Epoch milliseconds to search from (default: now).
        count: Number of departures to return (default 4, max 12).

    Returns:
        GetNextDeparturesResponse with departures, local times and minutes until.
    """
    # Validate count
    if count < 1:
        count = 1
    elif count > 12:
        count = 12

    return _get_next_departures(
        station_id=station_id,
        start_time=start_time,
        count=count,
        tz=get_planner_config().timezone,
    )
