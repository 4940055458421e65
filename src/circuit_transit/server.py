import argparse
import asyncio
import logging
from datetime import UTC, datetime

from pydantic import BaseModel

from circuit_transit.app import mcp
from circuit_transit.models.responses import LegMode


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the Circuit Transit MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from circuit_transit import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def register_tools() -> None:
    """Import tool modules so their @mcp.tool() decorators run."""
    from circuit_transit.tools import schedule_tools, stop_tools, trip_tools  # noqa: F401


async def run_plan(args: argparse.Namespace) -> None:
    """Plan a trip and print the response as JSON."""
    from circuit_transit.services.trip_service import plan_trip

    response = await plan_trip(
        origin_lat=args.lat,
        origin_lon=args.lon,
        destination_lat=args.dest_lat,
        destination_lon=args.dest_lon,
        start_time=args.start_time,
        use_live=not args.offline,
        mode=LegMode(args.mode) if args.mode else None,
    )
    print(response.model_dump_json(indent=2, by_alias=True))


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="circuit-transit",
        description="Circuit Transit MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # plan command
    plan_parser = subparsers.add_parser(
        "plan",
        help="Plan a trip to the circuit and print the itinerary",
    )
    plan_parser.add_argument("lat", type=float, help="Origin latitude")
    plan_parser.add_argument("lon", type=float, help="Origin longitude")
    plan_parser.add_argument("--dest-lat", type=float, default=None, help="Destination latitude")
    plan_parser.add_argument("--dest-lon", type=float, default=None, help="Destination longitude")
    plan_parser.add_argument(
        "--start-time",
        type=int,
        default=None,
        help="Departure time in epoch milliseconds (default: now)",
    )
    plan_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the live planner and use the offline planner only",
    )
    plan_parser.add_argument(
        "--mode",
        choices=[m.value for m in LegMode],
        default=None,
        help="Only show itineraries with a leg in this mode",
    )
    plan_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.command == "plan":
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        asyncio.run(run_plan(args))
    else:
        # Default: run MCP server
        register_tools()
        mcp.run()


if __name__ == "__main__":
    main()
