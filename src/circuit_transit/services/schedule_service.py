"""Schedule service for the fixed R2 Nord timetable pattern.

The reference terminal (Barcelona Sants) runs a train at fixed minutes past
every hour. Every other station departs a fixed number of minutes later, so
a station's timetable is the reference pattern shifted by its offset.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from circuit_transit.data.network import NetworkModel, get_default_network
from circuit_transit.models.network import Station
from circuit_transit.models.responses import (
    DepartureResult,
    GetNextDeparturesResponse,
    ScheduledDeparture,
)
from circuit_transit.services.stop_service import get_station_by_id, station_to_result

DEFAULT_TIMEZONE = "Europe/Madrid"

# Trains leaving within this many minutes of the query are not offered
DEPARTURE_BUFFER_MINUTES = 1


def to_local_datetime(timestamp_ms: int, tz: str = DEFAULT_TIMEZONE) -> datetime:
    """Convert epoch milliseconds to an aware datetime in the network time zone."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=ZoneInfo(tz))


def to_timestamp_ms(dt: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds (whole seconds)."""
    return int(dt.timestamp()) * 1000


def format_timestamp(timestamp_ms: int, tz: str = DEFAULT_TIMEZONE) -> str:
    """Format epoch milliseconds as local 24-hour time, e.g. "08:38"."""
    return to_local_datetime(timestamp_ms, tz).strftime("%H:%M")


def departure_slots(station: Station, reference_minutes: tuple[int, ...]) -> list[int]:
    """Minutes past the hour at which trains leave this station.

    Offsets that push a reference minute past the hour wrap into the same
    hour's slot list, so a 38-minute offset turns :08/:38 into :16/:46.

    Args:
        station: Station with its offset from the reference terminal.
        reference_minutes: Departure minutes at the reference terminal.

    Returns:
        Sorted minutes in [0, 60).
    """
    return sorted((minute + station.time_offset_minutes) % 60 for minute in reference_minutes)


def next_departure(
    station: Station,
    not_before: int,
    network: NetworkModel | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> ScheduledDeparture:
    """Find the next scheduled train from a station.

    Candidates are the station's slots in the current local hour and the
    hour after it, measured in absolute time. The first one more than
    DEPARTURE_BUFFER_MINUTES after the query minute wins; if none qualifies
    the last candidate is used. The result is always in the future, at most
    about two hours ahead, including across DST changes.

    Args:
        station: Boarding station.
        not_before: Epoch milliseconds the rider can be on the platform.
        network: Network providing the reference pattern and headsign.
        tz: IANA time zone the timetable is expressed in.

    Returns:
        ScheduledDeparture with an absolute departure timestamp.
    """
    network = network or get_default_network()
    local = to_local_datetime(not_before, tz)

    slots = departure_slots(station, network.reference_minutes)
    candidates = [hour * 60 + slot for hour in (0, 1) for slot in slots]

    departure_minute = next(
        (m for m in candidates if m > local.minute + DEPARTURE_BUFFER_MINUTES),
        candidates[-1],
    )

    # Count from the hour start in UTC so repeated or skipped DST hours stay ordered
    hour_start = local.replace(minute=0, second=0, microsecond=0).astimezone(timezone.utc)
    departure = hour_start + timedelta(minutes=departure_minute)

    return ScheduledDeparture(
        departure_time=to_timestamp_ms(departure),
        destination=network.headsign,
    )


def upcoming_departures(
    station: Station,
    not_before: int,
    count: int = 4,
    network: NetworkModel | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> list[ScheduledDeparture]:
    """List the next `count` departures from a station in order."""
    departures: list[ScheduledDeparture] = []
    query_time = not_before
    for _ in range(count):
        departure = next_departure(station, query_time, network=network, tz=tz)
        departures.append(departure)
        query_time = departure.departure_time
    return departures


def get_next_departures(
    station_id: str,
    start_time: int | None = None,
    count: int = 4,
    network: NetworkModel | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> GetNextDeparturesResponse:
    """Get upcoming R2 Nord departures at a station.

    Args:
        station_id: The station ID (see search_stations).
        start_time: Epoch milliseconds to search from (default: now).
        count: Number of departures to return.
        network: Optional network override.
        tz: Time zone the timetable is expressed in.

    Returns:
        GetNextDeparturesResponse with departures and station info.

    Raises:
        ValueError: If station_id is not found.
    """
    network = network or get_default_network()

    station = get_station_by_id(station_id, network)
    if station is None:
        raise ValueError(f"Station not found: {station_id}")

    if start_time is None:
        start_time = to_timestamp_ms(datetime.now(ZoneInfo(tz)))

    departures = [
        DepartureResult(
            departure_time=d.departure_time,
            departure_time_formatted=format_timestamp(d.departure_time, tz),
            destination=d.destination,
            minutes_until=(d.departure_time - start_time) // 60_000,
        )
        for d in upcoming_departures(station, start_time, count, network=network, tz=tz)
    ]

    return GetNextDeparturesResponse(
        station=station_to_result(station),
        line=network.line,
        departures=departures,
        query_time=to_local_datetime(start_time, tz).isoformat(),
        count=len(departures),
    )
