"""Entry-station selection.

For every station on the line, estimate how long it takes to be on board a
train: getting to the station (on foot, or on foot plus metro when the
station is far away) plus the wait for the next scheduled departure. The
station with the lowest total wins.
"""

import logging
import math
from dataclasses import dataclass, field

from circuit_transit.data.network import NetworkModel, get_default_network
from circuit_transit.models.network import Coordinate, Station
from circuit_transit.models.responses import Leg, LegMode, Place
from circuit_transit.services.schedule_service import DEFAULT_TIMEZONE, next_departure
from circuit_transit.services.stop_service import distance_between

logger = logging.getLogger(__name__)

WALK_SPEED_MPS = 1.2

# Metro access is only modeled for stations farther than this
TRANSIT_DISTANCE_THRESHOLD_METERS = 1200
TRANSIT_SPEED_MPS = 30.0 * 1000 / 3600  # ~8.3 m/s
TRANSIT_ACCESS_WALK_SECONDS = 300
TRANSIT_ACCESS_WAIT_SECONDS = 300
TRANSIT_ACCESS_WALK_METERS = 400

ORIGIN_NAME = "Your location"


@dataclass
class StationPath:
    """Best way found to reach an entry station."""

    station: Station | None
    arrival_time: int  # Epoch ms on the platform
    legs: list[Leg] = field(default_factory=list)
    score: float = math.inf  # Seconds until on board, comparison only


def walk_seconds(distance: float) -> int:
    return int(distance / WALK_SPEED_MPS)


def transit_access_seconds(distance: float) -> int | None:
    """Walk to a metro hub, wait, then ride. None when the station is close."""
    if distance <= TRANSIT_DISTANCE_THRESHOLD_METERS:
        return None
    ride_seconds = int(distance / TRANSIT_SPEED_MPS)
    return TRANSIT_ACCESS_WALK_SECONDS + TRANSIT_ACCESS_WAIT_SECONDS + ride_seconds


def _station_place(station: Station, arrival_time: int | None = None) -> Place:
    return Place(name=station.name, lat=station.lat, lon=station.lon, arrival_time=arrival_time)


def build_walk_access(
    user_location: Coordinate,
    station: Station,
    start_time: int,
    seconds: int,
    distance: float,
) -> list[Leg]:
    """Single walking leg from the rider to the station."""
    return [
        Leg(
            mode=LegMode.WALK,
            from_place=Place(
                name=ORIGIN_NAME,
                lat=user_location.lat,
                lon=user_location.lon,
                departure_time=start_time,
            ),
            to_place=_station_place(station, start_time + seconds * 1000),
            real_time=False,
            distance=distance,
        )
    ]


def build_transit_access(
    user_location: Coordinate,
    station: Station,
    start_time: int,
    seconds: int,
    distance: float,
) -> list[Leg]:
    """Walk to the nearest metro hub, then ride to the station."""
    at_hub = start_time + TRANSIT_ACCESS_WALK_SECONDS * 1000
    metro_departure = at_hub + TRANSIT_ACCESS_WAIT_SECONDS * 1000

    # No geometry for the hub; it is placed at the rider's position
    return [
        Leg(
            mode=LegMode.WALK,
            from_place=Place(
                name=ORIGIN_NAME,
                lat=user_location.lat,
                lon=user_location.lon,
                departure_time=start_time,
            ),
            to_place=Place(
                name="Metro/Bus",
                lat=user_location.lat,
                lon=user_location.lon,
                arrival_time=at_hub,
            ),
            real_time=False,
            distance=TRANSIT_ACCESS_WALK_METERS,
        ),
        Leg(
            mode=LegMode.SUBWAY,
            route="L-Metro",
            route_color="FF0000",
            route_short_name="Metro",
            route_long_name=f"Direction {station.name}",
            from_place=Place(
                name="Metro/Bus",
                lat=user_location.lat,
                lon=user_location.lon,
                arrival_time=at_hub,
                departure_time=metro_departure,
            ),
            to_place=_station_place(station, start_time + seconds * 1000),
            real_time=False,
            distance=distance,
        ),
    ]


def select_best_station(
    user_location: Coordinate,
    start_time: int,
    network: NetworkModel | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> StationPath:
    """Pick the entry station that gets the rider on board soonest.

    Cost per station is min(walk, metro access) plus the wait for the next
    departure after the earlier of the two arrivals. Metro access is only
    considered beyond TRANSIT_DISTANCE_THRESHOLD_METERS. Ties keep the station
    listed first in the network.

    Args:
        user_location: Rider position.
        start_time: Epoch milliseconds the rider sets off.
        network: Network to choose from.
        tz: Time zone of the timetable.

    Returns:
        StationPath for the winner, or one with station=None and an infinite
        score when the network has no stations.
    """
    network = network or get_default_network()
    best: StationPath | None = None

    for station in network.stations:
        distance = distance_between(user_location, station)

        walk_cost = walk_seconds(distance)
        transit_cost = transit_access_seconds(distance)
        use_transit = transit_cost is not None and transit_cost < walk_cost
        access_seconds = transit_cost if use_transit else walk_cost

        arrival = start_time + access_seconds * 1000
        departure = next_departure(station, arrival, network=network, tz=tz)
        wait_seconds = (departure.departure_time - arrival) // 1000
        total_cost = access_seconds + wait_seconds

        logger.debug(
            f"{station.id}: {distance:.0f} m, access {access_seconds}s "
            f"({'metro' if use_transit else 'walk'}), wait {wait_seconds}s"
        )

        if best is None or total_cost < best.score:
            build_access = build_transit_access if use_transit else build_walk_access
            best = StationPath(
                station=station,
                arrival_time=arrival,
                legs=build_access(user_location, station, start_time, access_seconds, distance),
                score=float(total_cost),
            )

    if best is None:
        return StationPath(station=None, arrival_time=start_time)
    return best
