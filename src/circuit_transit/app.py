"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

from mcp.server.fastmcp import FastMCP

# Initialize the MCP server
mcp = FastMCP(
    "Circuit Transit",
    instructions=(
        "Public transport to the Circuit de Barcelona-Catalunya - R2 Nord departures, "
        "entry stations and offline trip planning"
    ),
)
