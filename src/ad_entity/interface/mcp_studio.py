"""Studio entrypoint.

Starts the MCP Studio server (admin-only: placements and context values).

Usage:
    python -m ad_entity.interface.mcp_studio
    # or:
    ad-entity-studio
"""

from __future__ import annotations

import logging

from ..config.runtime import get_settings
from .mcp.auth import check_scope
from .mcp.server import create_server


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    check_scope("studio", settings)
    server = create_server(mode="studio")
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
