from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Circuit de Barcelona-Catalunya, recommended public access
DEFAULT_DESTINATION_LAT = 41.570
DEFAULT_DESTINATION_LON = 2.260


class PlannerConfig(BaseSettings):
    """Configuration for the trip planner and the live transport API.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    timezone: str = Field(default="Europe/Madrid", alias="CIRCUIT_TIMEZONE")
    destination_lat: float = Field(default=DEFAULT_DESTINATION_LAT, alias="CIRCUIT_DESTINATION_LAT")
    destination_lon: float = Field(default=DEFAULT_DESTINATION_LON, alias="CIRCUIT_DESTINATION_LON")

    # Last-mile shuttle (runs on race weekends)
    shuttle_enabled: bool = Field(default=True, alias="CIRCUIT_SHUTTLE_ENABLED")

    # Stations whose access cost exceeds this are ignored in favour of walking
    max_access_cost_seconds: float | None = Field(default=None, alias="CIRCUIT_MAX_ACCESS_COST")

    # Live trip-planning API (offline planner is used when unset or failing)
    transport_api_url: str | None = Field(default=None, alias="CIRCUIT_TRANSPORT_API_URL")
    transport_api_timeout: float = Field(default=10.0, alias="CIRCUIT_TRANSPORT_API_TIMEOUT")


@lru_cache
def get_planner_config() -> PlannerConfig:
    """Get planner configuration (cached singleton).

    Returns:
        PlannerConfig with values from .env file or environment variables.
    """
    return PlannerConfig()
