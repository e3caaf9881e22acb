"""MCP server for planetary-registry-mcp."""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import swisseph as swe
from mcp.server import Server
from mcp.types import Tool, TextContent

from .config import ConfigManager
from .utils.ephemeris import create_ephemeris
from .tools.registry_tools import (
    get_registry_tools,
    handle_registry_tool,
    REGISTRY_TOOL_NAMES,
)

LOG_LEVEL_ENV = "PLANETARY_REGISTRY_LOG_LEVEL"

logger = logging.getLogger(__name__)


# Initialize MCP server
app = Server("planetary-registry-mcp")

# Global state
config: Optional[ConfigManager] = None
ephemeris = None
_ephemeris_task: Optional[asyncio.Task] = None


def configure_logging() -> None:
    """Log to stderr; stdout carries the MCP stdio protocol."""
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def init_config() -> ConfigManager:
    """Initialize the config manager (lazy singleton)."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def _build_ephemeris():
    # Honour an optional env-var override for the .se1 file directory.
    ephe_path = os.environ.get("SE_EPHE_PATH") or None
    engine = create_ephemeris(ephe_path=ephe_path)
    logger.info("Ephemeris initialized (%s)", engine.get_mode())
    return engine


async def init_ephemeris():
    """Initialize the ephemeris engine (lazy singleton).

    Concurrent first callers share one in-flight initialization. A failed
    initialization is not cached, so the next call retries.
    """
    global ephemeris, _ephemeris_task
    if ephemeris is not None:
        return ephemeris

    if _ephemeris_task is None:
        _ephemeris_task = asyncio.ensure_future(asyncio.to_thread(_build_ephemeris))
    task = _ephemeris_task
    try:
        engine = await task
    except Exception:
        if _ephemeris_task is task:
            _ephemeris_task = None
        raise

    ephemeris = engine
    return ephemeris


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools."""
    core_tools = [
        Tool(
            name="check_ephemeris",
            description=(
                "Check the current ephemeris mode and precision level. "
                "Reports whether the built-in Moshier ephemeris (~1 arcminute) or "
                "Swiss Ephemeris data files (~0.001 arcsecond) are active, "
                "and shows the pysweph version."
            ),
            inputSchema={
                "type": "object",
                "properties": {},
            }
        ),
    ]
    return core_tools + get_registry_tools()


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""

    if name == "check_ephemeris":
        engine = await init_ephemeris()
        mode = engine.get_mode()

        lines = [
            f"Ephemeris mode: {mode}",
            f"pysweph version: {swe.__version__}",
        ]
        if mode == "moshier":
            lines.append("Precision: ~1 arcminute (Moshier built-in, no files needed)")
            lines.append("Set SE_EPHE_PATH to a directory of .se1 files for ~0.001 arcsecond precision.")
        else:
            lines.append("Precision: ~0.001 arcsecond (Swiss Ephemeris files)")
            lines.append(f"Ephemeris path: {engine.ephe_path}")
            ephe_dir = Path(engine.ephe_path)
            files = sorted(ephe_dir.glob("*.se1")) if ephe_dir.exists() else []
            if files:
                lines.append(f"Data files: {', '.join(f.name for f in files)}")

        return [TextContent(type="text", text="\n".join(lines))]

    elif name in REGISTRY_TOOL_NAMES:
        return await handle_registry_tool(name, arguments or {}, init_config(), init_ephemeris)

    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def main():
    """Run the MCP server."""
    from mcp.server.stdio import stdio_server

    configure_logging()
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


def run():
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
