"""MCP tools for searching stations."""

from circuit_transit.app import mcp
from circuit_transit.models.responses import SearchStationsResponse
from circuit_transit.services.stop_service import search_stations as _search_stations


@mcp.tool()
async def search_stations(
    query: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
    radius_meters: int | None = None,
    limit: int = 20,
) -> SearchStationsResponse:
    """Search R2 Nord entry stations.

    Supports two search modes:
    - Text search: Find stations by name (e.g., "Sants", "Clot")
    - Geo search: Stations sorted by distance from coordinates

    Examples:
        search_stations(query="Sants")
        search_stations(lat=41.387, lon=2.170, radius_meters=3000)
        search_stations()  # Every station, south to north

    Args:
        query: Text to search for in station names (case-insensitive partial match).
        lat: Latitude for geographic search (requires lon).
        lon: Longitude for geographic search (requires lat).
        radius_meters: Optional search radius for geo search.
        limit: Maximum number of results to return (default 20, max 100).

    Returns:
        SearchStationsResponse with list of matching stations and count.
    """
    # Validate limit
    if limit < 1:
        limit = 1
    elif limit > 100:
        limit = 100

    return _search_stations(
        query=query,
        lat=lat,
        lon=lon,
        radius_meters=radius_meters,
        limit=limit,
    )
