"""Station lookup and geographic helpers."""

import math

from pydantic import ValidationError

from circuit_transit.data.network import NetworkModel, get_default_network
from circuit_transit.models.network import Coordinate, Station
from circuit_transit.models.responses import SearchStationsResponse, StationResult

# Earth's radius in meters for haversine calculation
EARTH_RADIUS_METERS = 6_371_000


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair cannot be planned from."""


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1, lon1: First point coordinates in degrees.
        lat2, lon2: Second point coordinates in degrees.

    Returns:
        Distance in meters.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_between(a: Coordinate | Station, b: Coordinate | Station) -> float:
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def validate_coordinate(lat: float, lon: float) -> Coordinate:
    """Build a Coordinate, rejecting NaN, infinite and out-of-range values.

    Raises:
        InvalidCoordinateError: If the pair is not a valid position.
    """
    try:
        return Coordinate(lat=lat, lon=lon)
    except ValidationError as e:
        raise InvalidCoordinateError(f"Invalid coordinate ({lat}, {lon})") from e


def station_to_result(station: Station, distance: float | None = None) -> StationResult:
    """Convert a Station to a StationResult."""
    return StationResult(
        id=station.id,
        name=station.name,
        lat=station.lat,
        lon=station.lon,
        lines=list(station.lines),
        category=station.category,
        time_offset_minutes=station.time_offset_minutes,
        distance_meters=distance,
    )


def search_stations_by_location(
    network: NetworkModel,
    lat: float,
    lon: float,
    radius_meters: int | None = None,
    limit: int = 20,
) -> SearchStationsResponse:
    """Find entry stations near a location, closest first.

    Args:
        network: Network to search.
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        radius_meters: Optional search radius; all stations when None.
        limit: Maximum number of results.

    Returns:
        SearchStationsResponse with stations sorted by distance.
    """
    location = validate_coordinate(lat, lon)

    stations_with_distance: list[tuple[Station, float]] = []
    for station in network.stations:
        distance = distance_between(location, station)
        if radius_meters is None or distance <= radius_meters:
            stations_with_distance.append((station, distance))

    # sort is stable, so equal distances keep network order
    stations_with_distance.sort(key=lambda x: x[1])
    stations_with_distance = stations_with_distance[:limit]

    stations = [
        station_to_result(station, round(distance, 1))
        for station, distance in stations_with_distance
    ]
    return SearchStationsResponse(stations=stations, count=len(stations))


def search_stations_by_name(
    network: NetworkModel,
    query: str,
    limit: int = 20,
) -> SearchStationsResponse:
    """Case-insensitive partial match on station names."""
    needle = query.strip().casefold()
    matches = [s for s in network.stations if needle in s.name.casefold()]
    stations = [station_to_result(s) for s in matches[:limit]]
    return SearchStationsResponse(stations=stations, count=len(stations))


def search_stations(
    query: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
    radius_meters: int | None = None,
    limit: int = 20,
    network: NetworkModel | None = None,
) -> SearchStationsResponse:
    """Search for entry stations.

    Geo search takes priority over text search. With no criteria, every
    station is returned in network order.

    Raises:
        InvalidCoordinateError: If lat/lon are not a valid position.
    """
    network = network or get_default_network()

    if lat is not None and lon is not None:
        return search_stations_by_location(network, lat, lon, radius_meters, limit)

    if query is not None:
        return search_stations_by_name(network, query, limit)

    stations = [station_to_result(s) for s in network.stations[:limit]]
    return SearchStationsResponse(stations=stations, count=len(stations))


def get_station_by_id(
    station_id: str,
    network: NetworkModel | None = None,
) -> Station | None:
    """Get a single station (or the terminal) by its ID."""
    network = network or get_default_network()
    return network.get_station(station_id)
