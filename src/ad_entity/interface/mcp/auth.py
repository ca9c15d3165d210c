"""MCP auth: gate the Studio (administer advertising entities)."""

from __future__ import annotations

import os

from ...config.runtime import RuntimeSettings, get_settings


def require_studio_scope(settings: RuntimeSettings | None = None) -> None:
    """Require studio scope. Raises PermissionError if not allowed."""
    settings = settings or get_settings()
    if not settings.require_studio_key:
        return
    if not (os.environ.get("MCP_STUDIO_KEY") or os.environ.get("MCP_ADMIN_KEY")):
        raise PermissionError("Studio requires MCP_STUDIO_KEY to be set")


def check_scope(mode: str, settings: RuntimeSettings | None = None) -> None:
    """Check scope for the given server mode. Call at server start."""
    if mode == "studio":
        require_studio_scope(settings)
    else:
        raise ValueError(f"Unknown mode: {mode!r}")
