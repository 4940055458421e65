import httpx

from circuit_transit.data.config import PlannerConfig
from circuit_transit.models.network import Coordinate
from circuit_transit.models.responses import Itinerary, TransportPlanResponse


class TransportAPIClient:
    """Async HTTP client for the live trip-planning API.

    Usage:
        async with TransportAPIClient(config) as client:
            itineraries = await client.plan(origin, destination)
    """

    def __init__(self, config: PlannerConfig):
        """Initialize the client.

        Args:
            config: Configuration with the API base URL and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "TransportAPIClient":
        """Enter async context - create HTTP client."""
        self._client = httpx.AsyncClient(timeout=self._config.transport_api_timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _url(self, path: str) -> str:
        if not self._config.transport_api_url:
            raise RuntimeError("No transport API URL configured")
        return f"{self._config.transport_api_url.rstrip('/')}/{path}"

    async def plan(self, origin: Coordinate, destination: Coordinate) -> list[Itinerary]:
        """Ask the live planner for itineraries.

        Returns:
            Itineraries in the planner's order (possibly empty).

        Raises:
            RuntimeError: If client not initialized or no URL configured.
            httpx.HTTPError: If the HTTP request fails.
            ValueError: If the body is not JSON, or pydantic.ValidationError if
                it does not match the contract.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        params = {
            "fromLat": origin.lat,
            "fromLon": origin.lon,
            "toLat": destination.lat,
            "toLon": destination.lon,
            "arriveBy": "false",
        }
        response = await self._client.get(self._url("plan"), params=params)
        response.raise_for_status()

        return TransportPlanResponse.model_validate(response.json()).itineraries

    async def check_health(self) -> bool:
        """Return True if the live planner answers its health endpoint."""
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        try:
            response = await self._client.get(self._url("health"))
        except httpx.HTTPError:
            return False
        return response.status_code == 200
