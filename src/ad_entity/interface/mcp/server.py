"""MCP server factory.

Builds the Studio (admin) server: placement CRUD, rule type listing and
context form / normalization tools over one set of wired services.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from ...config.runtime import RuntimeSettings, get_settings
from ...wiring import build_context_widget, build_placement_service, build_placement_store
from .tools import StudioTools, register_studio_tools

_SERVER_NAMES = {
    "studio": "ad-entity-studio",
}


def build_studio_tools(settings: RuntimeSettings | None = None) -> StudioTools:
    """Wire services once so every tool call shares the same store."""
    settings = settings or get_settings()
    store = build_placement_store(settings)
    return StudioTools(
        placements=build_placement_service(settings, store=store),
        widget=build_context_widget(settings, store=store),
    )


def create_server(mode: str = "studio", tools: StudioTools | None = None) -> FastMCP:
    """Build and return a configured FastMCP server.

    Args:
        mode: ``"studio"`` (the only surface; administers advertising entities).
        tools: Pre-wired tool implementation; built from settings when omitted.

    Returns:
        A FastMCP instance with the Studio tools registered.
    """
    if mode not in _SERVER_NAMES:
        raise ValueError(f"Unknown MCP mode {mode!r}; expected 'studio'")

    server = FastMCP(_SERVER_NAMES[mode])
    register_studio_tools(server, tools or build_studio_tools())
    return server


if __name__ == "__main__":
    create_server("studio").run(transport="stdio")
