"""Static network model for the R2 Nord approach to Montmeló.

Stations are listed south to north. The order matters: the entry-station
selector keeps the first station on equal cost.
"""

from dataclasses import dataclass, field

from circuit_transit.models.network import Station, StationCategory

# R2 Nord leaves Barcelona Sants at these minutes past every hour
REFERENCE_DEPARTURE_MINUTES = (8, 38)

R2N_LINE = "R2N"
R2N_HEADSIGN = "Maçanet-Massanes / St. Celoni"


@dataclass(frozen=True)
class NetworkModel:
    """Read-only set of candidate entry stations and the destination terminal."""

    stations: tuple[Station, ...]
    terminal: Station
    line: str = R2N_LINE
    headsign: str = R2N_HEADSIGN
    reference_minutes: tuple[int, ...] = field(default=REFERENCE_DEPARTURE_MINUTES)

    def __post_init__(self) -> None:
        if not self.reference_minutes:
            raise ValueError("At least one reference departure minute is required")
        for station in self.stations:
            # A zero-length ride would put the train's arrival on its departure
            if station.time_offset_minutes == self.terminal.time_offset_minutes:
                raise ValueError(
                    f"Station {station.id} has the same time offset as terminal {self.terminal.id}"
                )

    def get_station(self, station_id: str) -> Station | None:
        for station in (*self.stations, self.terminal):
            if station.id == station_id:
                return station
        return None


MONTMELO = Station(
    id="montmelo",
    name="Estació de Montmeló",
    lat=41.551,
    lon=2.247,
    lines=("R2", "R2N"),
    category=StationCategory.RAIL,
    time_offset_minutes=30,
)

R2N_STATIONS = (
    Station(
        id="sants",
        name="Barcelona Sants",
        lat=41.379,
        lon=2.140,
        lines=("R2N", "L3", "L5"),
        time_offset_minutes=0,
    ),
    Station(
        id="pdg",
        name="Passeig de Gràcia",
        lat=41.392,
        lon=2.165,
        lines=("R2N", "L2", "L3", "L4"),
        time_offset_minutes=5,
    ),
    Station(
        id="clot",
        name="El Clot-Aragó",
        lat=41.407,
        lon=2.187,
        lines=("R2N", "L1", "L2"),
        time_offset_minutes=9,
    ),
    Station(
        id="standreu",
        name="Sant Andreu Comtal",
        lat=41.436,
        lon=2.190,
        lines=("R2N", "L1"),
        time_offset_minutes=14,
    ),
    # North of the circuit, riders travel back south
    Station(
        id="granollers",
        name="Granollers Centre",
        lat=41.597,
        lon=2.290,
        lines=("R2N", "R8"),
        time_offset_minutes=38,
    ),
)

DEFAULT_NETWORK = NetworkModel(stations=R2N_STATIONS, terminal=MONTMELO)


def get_default_network() -> NetworkModel:
    return DEFAULT_NETWORK
