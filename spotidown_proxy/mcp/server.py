"""MCP Server implementation for spotidown-proxy."""

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..browser import session_manager
from ..catalog import SpotifyCatalog, extract_track_id
from ..config import settings
from ..sites import SpotidownAdapter
from ..tracks import ResolutionResult

logger = logging.getLogger(__name__)

# Create MCP server
server = Server("spotidown-proxy")

adapter = SpotidownAdapter(session_manager)
catalog = SpotifyCatalog()


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools."""
    return [
        Tool(
            name="resolve_track",
            description="Get the MP3 download URL for a Spotify track id",
            inputSchema={
                "type": "object",
                "properties": {
                    "track_id": {
                        "type": "string",
                        "description": "Spotify track id (e.g. 3n3Ppam7vgaVa1iaRUc9Lp)",
                    },
                },
                "required": ["track_id"],
            },
        ),
        Tool(
            name="resolve_isrc",
            description="Get the MP3 download URL for a recording by ISRC",
            inputSchema={
                "type": "object",
                "properties": {
                    "isrc": {
                        "type": "string",
                        "description": "International Standard Recording Code",
                    },
                },
                "required": ["isrc"],
            },
        ),
        Tool(
            name="resolve_url",
            description="Get the MP3 download URL for an open.spotify.com track link",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "Spotify track URL or bare track id",
                    },
                },
                "required": ["url"],
            },
        ),
        Tool(
            name="session_status",
            description="Show the state of the shared browser session",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "resolve_track":
            return await handle_resolve_track(arguments)
        elif name == "resolve_isrc":
            return await handle_resolve_isrc(arguments)
        elif name == "resolve_url":
            return await handle_resolve_url(arguments)
        elif name == "session_status":
            return await handle_session_status(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return [TextContent(type="text", text=f"Error: {str(e)}")]


def format_result(result: ResolutionResult) -> str:
    """Render a resolution as markdown."""
    lines = [f"## {result.name}"]
    if result.artist:
        lines.append(f"**Artist:** {result.artist}")
    lines.append(f"**Download:** {result.url}")
    return "\n".join(lines)


async def handle_resolve_track(arguments: dict) -> list[TextContent]:
    """Handle resolve_track tool."""
    result = await adapter.resolve(arguments["track_id"])
    return [TextContent(type="text", text=format_result(result))]


async def handle_resolve_isrc(arguments: dict) -> list[TextContent]:
    """Handle resolve_isrc tool."""
    isrc = arguments["isrc"].strip()
    track_id = await catalog.find_track_id_async(isrc)
    if not track_id:
        return [TextContent(type="text", text=f"No track found for ISRC {isrc}")]

    result = await adapter.resolve(track_id)
    return [TextContent(type="text", text=format_result(result))]


async def handle_resolve_url(arguments: dict) -> list[TextContent]:
    """Handle resolve_url tool."""
    result = await adapter.resolve(extract_track_id(arguments["url"]))
    return [TextContent(type="text", text=format_result(result))]


async def handle_session_status(arguments: dict) -> list[TextContent]:
    """Handle session_status tool."""
    info = session_manager.info()
    output_lines = [
        "## Browser Session\n",
        f"**Ready:** {'yes' if info.ready else 'no'}",
        f"**Landing page:** {info.landing_url}",
        f"**Proxy:** {info.proxy_server or 'none'}",
        f"**Last navigation:** {info.last_navigation.isoformat() if info.last_navigation else 'never'}",
        f"**Refresh interval:** {info.refresh_interval:.0f}s",
    ]
    return [TextContent(type="text", text="\n".join(output_lines))]


async def run_server():
    """Run the MCP server."""
    session_manager.start_refresh()
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await session_manager.close()


def main():
    """Entry point for MCP server."""
    logging.basicConfig(level=settings.log_level.upper())
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
