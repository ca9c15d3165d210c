"""MCP admin (Studio) server."""
