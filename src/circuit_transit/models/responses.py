from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from circuit_transit.models.network import StationCategory

# Itinerary contract
#
# Shared with the live trip-planning API: field names travel in camelCase
# (startTime, routeShortName, realTime, ...) so callers can consume live and
# offline itineraries interchangeably.

_CONTRACT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class LegMode(str, Enum):
    """Mode of transport for a single leg."""

    WALK = "WALK"
    BUS = "BUS"
    RAIL = "RAIL"
    SUBWAY = "SUBWAY"


class Place(BaseModel):
    """Endpoint of a leg. Times are epoch milliseconds."""

    model_config = _CONTRACT_CONFIG

    name: str
    lat: float
    lon: float
    departure_time: int | None = None
    arrival_time: int | None = None


class Leg(BaseModel):
    """One movement segment in a single mode."""

    model_config = _CONTRACT_CONFIG

    mode: LegMode
    route: str | None = None
    route_color: str | None = None
    route_short_name: str | None = None
    route_long_name: str | None = None
    from_place: Place = Field(alias="from")
    to_place: Place = Field(alias="to")
    real_time: bool | None = False
    distance: float | None = Field(default=None, description="Distance in meters")
    leg_geometry: str | None = Field(default=None, description="Encoded polyline")

    @model_validator(mode="after")
    def check_vehicle_times(self) -> "Leg":
        if self.mode is LegMode.WALK:
            return self
        departure = self.from_place.departure_time
        arrival = self.to_place.arrival_time
        if departure is not None and arrival is not None and arrival <= departure:
            raise ValueError(
                f"{self.mode.value} leg arrives at {arrival} but departs at {departure}"
            )
        return self

    @property
    def start_time(self) -> int | None:
        """When the rider reaches the start of this leg.

        A boarding place with an arrival time means the rider waits there until
        departure; that wait belongs to this leg.
        """
        if self.from_place.arrival_time is not None:
            return self.from_place.arrival_time
        return self.from_place.departure_time

    @property
    def end_time(self) -> int | None:
        return self.to_place.arrival_time

    @property
    def duration(self) -> int:
        """Leg span in whole seconds (0 when either end is unknown)."""
        start, end = self.start_time, self.end_time
        if start is None or end is None:
            return 0
        return (end - start) // 1000


class Itinerary(BaseModel):
    """Complete journey from origin to destination."""

    model_config = _CONTRACT_CONFIG

    duration: int = Field(description="Total duration in seconds")
    start_time: int = Field(description="Epoch milliseconds")
    end_time: int = Field(description="Epoch milliseconds")
    walk_time: int = Field(description="Seconds spent in WALK legs")
    transit_time: int = Field(description="Seconds spent in all other legs")
    legs: list[Leg] = Field(min_length=1, description="Ordered list of legs")

    @classmethod
    def from_legs(cls, legs: list[Leg], start_time: int) -> "Itinerary":
        """Aggregate totals from leg timestamps.

        The itinerary ends when the last leg arrives; walking and transit
        totals are summed over the legs actually present.
        """
        end_time = legs[-1].end_time
        if end_time is None:
            raise ValueError("Last leg has no arrival time")

        walk_time = sum(leg.duration for leg in legs if leg.mode is LegMode.WALK)
        transit_time = sum(leg.duration for leg in legs if leg.mode is not LegMode.WALK)

        return cls(
            duration=(end_time - start_time) // 1000,
            start_time=start_time,
            end_time=end_time,
            walk_time=walk_time,
            transit_time=transit_time,
            legs=legs,
        )


class TransportPlanResponse(BaseModel):
    """Body of the live planner's /plan endpoint."""

    model_config = _CONTRACT_CONFIG

    itineraries: list[Itinerary] = Field(default_factory=list)


class ScheduledDeparture(BaseModel):
    """Next train from a station on the supported line."""

    departure_time: int = Field(description="Epoch milliseconds")
    destination: str = Field(description="Headsign of the train")


# Tool responses


class ItinerarySource(str, Enum):
    """Indicates whether itineraries come from the live API or the offline planner."""

    LIVE = "live"
    OFFLINE = "offline"


class PlanTripResponse(BaseModel):
    """Response from plan_trip tool."""

    itineraries: list[Itinerary] = Field(default_factory=list)
    source: ItinerarySource | None = None
    fallback_reason: str | None = Field(
        default=None, description="Why the live planner was not used (offline results only)"
    )

    # Query context
    origin_lat: float
    origin_lon: float
    destination_lat: float
    destination_lon: float
    query_time: str = Field(description="Departure time, ISO 8601 in the network time zone")

    # Status
    count: int
    success: bool
    error: str | None = None


class StationResult(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    lines: list[str] = Field(default_factory=list)
    category: StationCategory
    time_offset_minutes: int = Field(description="Minutes after the reference terminal departure")
    distance_meters: float | None = Field(
        default=None, description="Distance from search coordinates (geo search only)"
    )


class SearchStationsResponse(BaseModel):
    stations: list[StationResult]
    count: int = Field(description="Number of stations returned")


class DepartureResult(BaseModel):
    departure_time: int = Field(description="Epoch milliseconds")
    departure_time_formatted: str = Field(description="Local time, HH:MM")
    destination: str
    minutes_until: int = Field(description="Minutes from query time")


class GetNextDeparturesResponse(BaseModel):
    station: StationResult
    line: str
    departures: list[DepartureResult]
    query_time: str = Field(description="Query time, ISO 8601 in the network time zone")
    count: int = Field(description="Number of departures returned")
