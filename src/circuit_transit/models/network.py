"""Pydantic models for the static transit network."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StationCategory(str, Enum):
    """Kind of node in the network model."""

    RAIL = "rail"
    TRANSIT_NODE = "generic-transit-node"


class Station(BaseModel):
    """A station on the supported rail line."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lat: float
    lon: float
    lines: tuple[str, ...] = ()
    category: StationCategory = StationCategory.RAIL
    # Minutes this station's departure lags the reference terminal's departure
    time_offset_minutes: int = 0


class Coordinate(BaseModel):
    """A validated WGS84 position."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
