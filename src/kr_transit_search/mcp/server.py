"""MCP Server for Korean Transit Search.

This module implements a Model Context Protocol (MCP) server that exposes
Seoul bus stop and subway station search as tools, plus informational
resource templates for station identifiers.
"""

import asyncio
import logging
import re
from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from mcp.types import (
    ResourceTemplate,
    TextContent,
    Tool,
)

from .. import __version__
from ..cli.formatters import format_stops_json, render
from ..core.aggregator import TransitAggregator
from ..core.client import ProviderClient
from ..core.config import DEFAULT_RADIUS, TransitSettings
from ..core.exceptions import TransitSearchError
from ..core.models import SearchContext, TransitStop

logger = logging.getLogger(__name__)

SERVER_NAME = "kr-transit-search"

LOCATION_TOOL = "get_bus_stops_by_location"
BUS_NAME_TOOL = "search_bus_stops_by_name"
TRANSIT_NAME_TOOL = "search_transit_stops_by_name"

_RESOURCE_PATTERNS = [
    ("bus", re.compile(r"^bus_station://(?P<stop_id>[^/]+)/?$")),
    ("subway", re.compile(r"^subway_station://(?P<stop_id>[^/]+)/?$")),
    ("transit", re.compile(r"^transit://(?P<kind>[^/]+)/(?P<stop_id>[^/]+)/?$")),
]


class TransitMCPServer:
    """MCP Server for Korean Transit Search functionality."""

    def __init__(self, settings: TransitSettings | None = None) -> None:
        """Initialize the Transit MCP Server.

        Args:
            settings: Provider settings; read from the environment when omitted
        """
        self.settings = settings or TransitSettings.from_env()
        self.server = Server(SERVER_NAME)
        self.aggregator = TransitAggregator(ProviderClient(self.settings))

        self._register_handlers()

    @property
    def name_tool(self) -> str:
        """Name-search tool exposed by the configured profile."""
        if self.settings.tool_profile == "single":
            return BUS_NAME_TOOL
        return TRANSIT_NAME_TOOL

    def list_tools(self) -> list[Tool]:
        """Tools exposed by this deployment profile."""
        tools = [
            Tool(
                name=LOCATION_TOOL,
                description="Find Seoul bus stops around a TM coordinate",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "tmX": {
                            "type": "number",
                            "description": "X coordinate (TM coordinate system)",
                        },
                        "tmY": {
                            "type": "number",
                            "description": "Y coordinate (TM coordinate system)",
                        },
                        "radius": {
                            "type": "number",
                            "description": "Search radius in meters (default: 500)",
                            "default": DEFAULT_RADIUS,
                        },
                    },
                    "required": ["tmX", "tmY"],
                },
            ),
        ]

        if self.name_tool == BUS_NAME_TOOL:
            tools.append(
                Tool(
                    name=BUS_NAME_TOOL,
                    description="Search Seoul bus stops by stop name",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "stSrch": {
                                "type": "string",
                                "description": "Bus stop name to search for",
                            },
                        },
                        "required": ["stSrch"],
                    },
                )
            )
        else:
            tools.append(
                Tool(
                    name=TRANSIT_NAME_TOOL,
                    description="Search bus stops and subway stations by name",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "searchTerm": {
                                "type": "string",
                                "description": "Stop or station name to search for",
                            },
                        },
                        "required": ["searchTerm"],
                    },
                )
            )
        return tools

    def list_resource_templates(self) -> list[ResourceTemplate]:
        return [
            ResourceTemplate(
                uriTemplate="bus_station://{stationId}",
                name="bus_station_info",
                description="Usage guidance for a bus stop ID",
                mimeType="text/plain",
            ),
            ResourceTemplate(
                uriTemplate="subway_station://{stationId}",
                name="subway_station_info",
                description="Usage guidance for a subway station ID",
                mimeType="text/plain",
            ),
            ResourceTemplate(
                uriTemplate="transit://{type}/{stopId}",
                name="transit_stop_info",
                description="Usage guidance for a bus or subway stop ID",
                mimeType="text/plain",
            ),
        ]

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: dict[str, Any]
        ) -> list[TextContent]:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

        @self.server.list_resource_templates()
        async def handle_list_resource_templates() -> list[ResourceTemplate]:
            return self.list_resource_templates()

        @self.server.read_resource()
        async def handle_read_resource(uri: Any) -> list[ReadResourceContents]:
            return [
                ReadResourceContents(
                    content=self.describe_resource(str(uri)), mime_type="text/plain"
                )
            ]

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> list[TextContent]:
        """Dispatch a tool invocation; never raises."""
        arguments = arguments or {}
        try:
            if name == LOCATION_TOOL:
                return await self._get_bus_stops_by_location(arguments)
            elif name == TRANSIT_NAME_TOOL and self.name_tool == name:
                return await self._search_transit_stops_by_name(arguments)
            elif name == BUS_NAME_TOOL and self.name_tool == name:
                return await self._search_bus_stops_by_name(arguments)
            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.error(f"Error in tool {name}: {e}")
            return [TextContent(type="text", text=f"Error: {str(e)}")]

    async def _get_bus_stops_by_location(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Search bus stops around a coordinate."""
        tm_x = float(arguments["tmX"])
        tm_y = float(arguments["tmY"])
        radius = arguments.get("radius")
        radius = DEFAULT_RADIUS if radius is None else float(radius)

        try:
            stops = await self.aggregator.search_by_location(tm_x, tm_y, radius)
        except TransitSearchError as e:
            return [TextContent(type="text", text=f"Search failed: {str(e)}")]

        context = SearchContext.by_location(tm_x, tm_y, radius)
        return self._stop_contents(render(stops, context), stops)

    async def _search_bus_stops_by_name(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Search bus stops by name (single-provider profile)."""
        term = arguments["stSrch"]

        try:
            stops = await self.aggregator.search_bus_by_name(term)
        except TransitSearchError as e:
            return [TextContent(type="text", text=f"Search failed: {str(e)}")]

        return self._stop_contents(render(stops, SearchContext.by_name(term)), stops)

    async def _search_transit_stops_by_name(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Search bus stops and subway stations by name (dual-provider profile)."""
        term = arguments["searchTerm"]

        result = await self.aggregator.search_by_name(term)
        text = render(result, SearchContext.by_name(term))
        return self._stop_contents(text, result.stops)

    def _stop_contents(self, text: str, stops: list[TransitStop]) -> list[TextContent]:
        if not stops:
            return [TextContent(type="text", text=text)]

        return [
            TextContent(type="text", text=text),
            TextContent(
                type="text",
                text=f"JSON Data:\n```json\n{format_stops_json(stops)}\n```",
            ),
        ]

    def describe_resource(self, uri: str) -> str:
        """Static guidance text for a station resource URI."""
        for scheme, pattern in _RESOURCE_PATTERNS:
            match = pattern.match(uri)
            if not match:
                continue

            stop_id = match.group("stop_id")
            kind = match.groupdict().get("kind", scheme)
            if kind == "bus":
                return (
                    f"Bus stop ID: {stop_id}\n"
                    f"Usage: look up bus stops with the {LOCATION_TOOL} "
                    f"or {self.name_tool} tool."
                )
            if kind == "subway":
                if self.name_tool != TRANSIT_NAME_TOOL:
                    return (
                        f"Subway station ID: {stop_id}\n"
                        "Subway search is not enabled on this server."
                    )
                return (
                    f"Subway station ID: {stop_id}\n"
                    f"Usage: look up subway stations with the "
                    f"{TRANSIT_NAME_TOOL} tool."
                )
            return (
                f"Transit stop ID: {stop_id} (type: {kind})\n"
                "Supported types are 'bus' and 'subway'.\n"
                f"Usage: search stops with the {self.name_tool} tool."
            )

        return f"Unknown resource: {uri}"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for the server, replacing any earlier setup."""
    logging.basicConfig(level=level, force=True)


async def main(
    settings: TransitSettings | None = None, log_level: int = logging.INFO
) -> None:
    """Main entry point for the MCP server."""
    configure_logging(log_level)
    logger.info("Starting Korean Transit Search MCP Server")

    # Create the server
    server_instance = TransitMCPServer(settings)

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logger.info(
            f"MCP Server running with stdio transport "
            f"(profile: {server_instance.settings.tool_profile})"
        )
        await server_instance.server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=__version__,
                capabilities=server_instance.server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main_sync() -> None:
    """Synchronous wrapper for the async main function - used as entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
