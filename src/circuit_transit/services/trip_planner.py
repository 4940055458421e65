"""Offline trip planner to the circuit.

Builds a complete itinerary (access legs, the R2 Nord train, and the last
mile to the circuit) from the static network model and timetable pattern
alone. Planning never fails: when no station can be used the rider gets a
walking-only itinerary.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from circuit_transit.data.config import PlannerConfig
from circuit_transit.data.network import NetworkModel, get_default_network
from circuit_transit.models.network import Coordinate, Station
from circuit_transit.models.responses import Itinerary, Leg, LegMode, Place
from circuit_transit.services.schedule_service import DEFAULT_TIMEZONE, next_departure
from circuit_transit.services.station_selector import (
    ORIGIN_NAME,
    StationPath,
    select_best_station,
    walk_seconds,
)
from circuit_transit.services.stop_service import distance_between, haversine_distance

logger = logging.getLogger(__name__)

DESTINATION_NAME = "Circuit (recommended access)"

# Rough average speed used for the rail leg's distance
RAIL_SPEED_MPS = 15.0

# Last mile from Montmeló: short walk to the shuttle stop, then the shuttle
SHUTTLE_STOP_NAME = "F1 Shuttle stop"
SHUTTLE_STOP_OFFSET_DEGREES = 0.001
SHUTTLE_WALK_SECONDS = 120
SHUTTLE_WALK_METERS = 100
SHUTTLE_RIDE_SECONDS = 600
SHUTTLE_RIDE_METERS = 2000


def always_available(departure_time: int) -> bool:
    return True


def never_available(departure_time: int) -> bool:
    return False


@dataclass(frozen=True)
class TripPlanner:
    """Stateless offline planner.

    Attributes:
        network: Stations and terminal to plan over.
        tz: Time zone the timetable is expressed in.
        shuttle_available: Given the epoch ms the rider reaches the terminal,
            whether the circuit shuttle runs. When it does not, the last mile
            is walked.
        max_access_cost_seconds: Best-station scores above this fall back to
            walking directly. None disables the limit.
    """

    network: NetworkModel = field(default_factory=get_default_network)
    tz: str = DEFAULT_TIMEZONE
    shuttle_available: Callable[[int], bool] = always_available
    max_access_cost_seconds: float | None = None

    @classmethod
    def from_config(
        cls,
        config: PlannerConfig,
        network: NetworkModel | None = None,
    ) -> "TripPlanner":
        return cls(
            network=network or get_default_network(),
            tz=config.timezone,
            shuttle_available=always_available if config.shuttle_enabled else never_available,
            max_access_cost_seconds=config.max_access_cost_seconds,
        )

    def build_itinerary(
        self,
        origin: Coordinate,
        destination: Coordinate,
        start_time: int,
    ) -> Itinerary:
        """Plan a trip from origin to the circuit, leaving at start_time.

        Args:
            origin: Rider position.
            destination: Circuit access point.
            start_time: Epoch milliseconds; sub-second precision is dropped.

        Returns:
            Itinerary whose legs tile [start_time, end_time] without gaps.
        """
        start_time -= start_time % 1000

        path = select_best_station(origin, start_time, network=self.network, tz=self.tz)
        if not self._is_usable(path):
            logger.debug(f"No usable entry station (score {path.score}), walking directly")
            return self.walk_direct(origin, destination, start_time)

        station = path.station
        train = next_departure(station, path.arrival_time, network=self.network, tz=self.tz)
        logger.debug(
            f"Entry station {station.id}, on platform at {path.arrival_time}, "
            f"train at {train.departure_time}"
        )

        legs: list[Leg] = list(path.legs)

        rail_leg = self._rail_leg(station, path.arrival_time, train.departure_time, train.destination)
        legs.append(rail_leg)

        destination_place = Place(name=DESTINATION_NAME, lat=destination.lat, lon=destination.lon)
        legs.extend(self._last_mile(self.network.terminal, destination_place, rail_leg.end_time))

        return Itinerary.from_legs(legs, start_time)

    def walk_direct(
        self,
        origin: Coordinate,
        destination: Coordinate,
        start_time: int,
    ) -> Itinerary:
        """Single walking leg straight to the destination."""
        start_time -= start_time % 1000
        distance = distance_between(origin, destination)
        seconds = walk_seconds(distance)

        leg = Leg(
            mode=LegMode.WALK,
            from_place=Place(
                name=ORIGIN_NAME, lat=origin.lat, lon=origin.lon, departure_time=start_time
            ),
            to_place=Place(
                name=DESTINATION_NAME,
                lat=destination.lat,
                lon=destination.lon,
                arrival_time=start_time + seconds * 1000,
            ),
            real_time=False,
            distance=distance,
        )
        return Itinerary.from_legs([leg], start_time)

    def _is_usable(self, path: StationPath) -> bool:
        if path.station is None:
            return False
        if self.max_access_cost_seconds is not None:
            return path.score <= self.max_access_cost_seconds
        return True

    def _rail_leg(
        self,
        station: Station,
        on_platform: int,
        departure_time: int,
        headsign: str,
    ) -> Leg:
        terminal = self.network.terminal
        ride_seconds = abs(terminal.time_offset_minutes - station.time_offset_minutes) * 60

        return Leg(
            mode=LegMode.RAIL,
            route=self.network.line,
            route_color="009900",
            route_short_name=self.network.line,
            route_long_name=headsign,
            from_place=Place(
                name=station.name,
                lat=station.lat,
                lon=station.lon,
                arrival_time=on_platform,
                departure_time=departure_time,
            ),
            to_place=Place(
                name=terminal.name,
                lat=terminal.lat,
                lon=terminal.lon,
                arrival_time=departure_time + ride_seconds * 1000,
            ),
            real_time=True,
            distance=ride_seconds * RAIL_SPEED_MPS,
        )

    def _last_mile(self, terminal: Station, destination: Place, start_time: int) -> list[Leg]:
        terminal_place = Place(
            name=terminal.name, lat=terminal.lat, lon=terminal.lon, departure_time=start_time
        )

        if not self.shuttle_available(start_time):
            distance = haversine_distance(terminal.lat, terminal.lon, destination.lat, destination.lon)
            logger.debug("Shuttle not running, walking the last mile")
            return [
                Leg(
                    mode=LegMode.WALK,
                    from_place=terminal_place,
                    to_place=destination.model_copy(
                        update={"arrival_time": start_time + walk_seconds(distance) * 1000}
                    ),
                    real_time=False,
                    distance=distance,
                )
            ]

        at_stop = start_time + SHUTTLE_WALK_SECONDS * 1000
        stop_lat = terminal.lat + SHUTTLE_STOP_OFFSET_DEGREES
        stop_lon = terminal.lon + SHUTTLE_STOP_OFFSET_DEGREES

        return [
            Leg(
                mode=LegMode.WALK,
                from_place=terminal_place,
                to_place=Place(
                    name=SHUTTLE_STOP_NAME, lat=stop_lat, lon=stop_lon, arrival_time=at_stop
                ),
                real_time=False,
                distance=SHUTTLE_WALK_METERS,
            ),
            Leg(
                mode=LegMode.BUS,
                route="Shuttle F1",
                route_color="FF0000",
                route_short_name="Shuttle F1",
                route_long_name="Direct to the circuit",
                from_place=Place(
                    name=SHUTTLE_STOP_NAME, lat=stop_lat, lon=stop_lon, departure_time=at_stop
                ),
                to_place=destination.model_copy(
                    update={"arrival_time": at_stop + SHUTTLE_RIDE_SECONDS * 1000}
                ),
                real_time=True,
                distance=SHUTTLE_RIDE_METERS,
            ),
        ]
