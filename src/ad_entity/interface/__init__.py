"""Studio surfaces: CLI and MCP admin server."""
