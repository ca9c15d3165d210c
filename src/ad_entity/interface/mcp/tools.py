"""Tool registry for the Studio MCP server.

Each tool is a thin JSON wrapper around a ``StudioTools`` method; the
methods return plain dicts so they can be exercised without a server.
Domain ``ValueError``s become ``{"error": ...}`` payloads.
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Callable

from pydantic import ValidationError

from ...domain.context import ContextAssignment, contexts_for_placement
from ...services.context_widget import ContextValueError, ContextWidget, to_storage
from ...services.placement_service import PlacementService
from ..validation import validate_form_values, validate_placement_payload
from .observability import log_tool_invocation, metrics_snapshot

STUDIO_TOOLS = frozenset({
    "placements_list",
    "placements_get",
    "placements_save",
    "placements_delete",
    "rule_types_list",
    "context_form",
    "context_massage",
    "context_validate",
    "context_resolve",
    "studio_health",
})

ALLOWED_PLACEMENT_KEYS = frozenset({"id", "label", "uuid", "status"})


def _shape_placement(placement: Any) -> dict:
    d = placement.model_dump() if hasattr(placement, "model_dump") else placement
    return {k: d[k] for k in ALLOWED_PLACEMENT_KEYS if k in d}


def _load_json(raw: str | None, name: str, default: Any = None) -> Any:
    if raw is None or not raw.strip():
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid {name}: {exc}") from exc


class StudioTools:
    """Implementation of every Studio tool over injected services."""

    def __init__(self, placements: PlacementService, widget: ContextWidget) -> None:
        self._placements = placements
        self._widget = widget

    # --- placements ---

    def placements_list(self) -> dict:
        return {"placements": [_shape_placement(p) for p in self._placements.list_all()]}

    def placements_get(self, placement_id: str) -> dict:
        return {"placement": _shape_placement(self._placements.get(placement_id))}

    def placements_save(self, placement_id: str, label: str, status: bool = True) -> dict:
        result, placement = validate_placement_payload(
            {"id": placement_id, "label": label, "status": status}
        )
        if placement is None:
            return {"error": "invalid placement", **result.to_dict()}
        created = self._placements.save(placement)
        saved = self._placements.get(placement.id)
        return {"placement": _shape_placement(saved), "created": created, "warnings": result.warnings}

    def placements_delete(self, placement_id: str) -> dict:
        return {"deleted": self._placements.delete(placement_id), "placement_id": placement_id}

    # --- rule types ---

    def rule_types_list(self) -> dict:
        return {"rule_types": [d.model_dump() for d in self._widget.registry.list_definitions()]}

    # --- contexts ---

    def context_form(self, value_json: str | None = None) -> dict:
        raw = _load_json(value_json, "value_json")
        try:
            assignment = ContextAssignment.model_validate(raw) if raw is not None else None
        except ValidationError as exc:
            raise ValueError(f"invalid context value: {exc}") from exc
        return {"form": self._widget.form_element(assignment).model_dump(mode="json")}

    def context_massage(self, values_json: str) -> dict:
        values = _load_json(values_json, "values_json", default=[])
        if not isinstance(values, list):
            raise ValueError("values_json must be a JSON array")
        return {"values": to_storage(self._widget.massage_form_values(values))}

    def context_validate(self, values_json: str) -> dict:
        values = _load_json(values_json, "values_json", default=[])
        result, saved = validate_form_values(self._widget, values)
        out = result.to_dict()
        if result.is_valid:
            out["values"] = to_storage(saved)
        return out

    def context_resolve(self, values_json: str, placement_id: str) -> dict:
        values = _load_json(values_json, "values_json", default=[])
        if not isinstance(values, list):
            raise ValueError("values_json must be a JSON array")
        try:
            assignments = [ContextAssignment.model_validate(v) for v in values]
        except ValidationError as exc:
            raise ValueError(f"invalid stored context value: {exc}") from exc
        matched = contexts_for_placement(assignments, placement_id)
        return {"placement_id": placement_id, "contexts": to_storage(matched)}

    def studio_health(self) -> dict:
        return {
            "status": "ok",
            "placements": len(self._placements.list_all()),
            "rule_types": len(self._widget.registry),
            "metrics": metrics_snapshot(),
        }


def _invoke(tool: str, fn: Callable[..., dict], *args: Any, **kwargs: Any) -> str:
    """Run a tool, log it, and serialize the result (or the domain error)."""
    trace_id = str(uuid.uuid4())
    t0 = time.monotonic()
    error: str | None = None
    try:
        payload = fn(*args, **kwargs)
    except ContextValueError as exc:
        error = str(exc)
        payload = {"error": exc.message, "delta": exc.delta, "rule_type_id": exc.rule_type_id}
    except ValueError as exc:
        error = str(exc)
        payload = {"error": error}
    except Exception as exc:
        error = f"{type(exc).__name__}: {exc}"
        raise
    finally:
        log_tool_invocation(tool, trace_id, (time.monotonic() - t0) * 1000.0, error=error)
    return json.dumps(payload)


def register_studio_tools(mcp, tools: StudioTools) -> None:
    """Register Studio (admin) tools."""

    @mcp.tool()
    def placements_list() -> str:
        """List all advertising entities (placements), ordered by label.

        Returns:
            JSON with placements (id, label, uuid, status)
        """
        return _invoke("placements_list", tools.placements_list)

    @mcp.tool()
    def placements_get(placement_id: str) -> str:
        """Get one placement by machine name.

        Args:
            placement_id: Placement machine name

        Returns:
            JSON with placement or error
        """
        return _invoke("placements_get", tools.placements_get, placement_id)

    @mcp.tool()
    def placements_save(placement_id: str, label: str, status: bool = True) -> str:
        """Create or update a placement.

        Args:
            placement_id: Machine name (lowercase letters, numbers, underscores)
            label: Display label
            status: Whether the placement is enabled

        Returns:
            JSON with saved placement and created flag
        """
        return _invoke("placements_save", tools.placements_save, placement_id, label, status)

    @mcp.tool()
    def placements_delete(placement_id: str) -> str:
        """Delete a placement by machine name.

        Returns:
            JSON with deleted flag
        """
        return _invoke("placements_delete", tools.placements_delete, placement_id)

    @mcp.tool()
    def rule_types_list() -> str:
        """List registered context rule types (id, label, description, weight)."""
        return _invoke("rule_types_list", tools.rule_types_list)

    @mcp.tool()
    def context_form(value_json: str | None = None) -> str:
        """Build the context form fragment for one field value.

        Args:
            value_json: Optional current value {"rule_type_id", "apply_to", "rule_settings"}

        Returns:
            JSON form tree; panels carry visible_when bound to the selector's field_id
        """
        return _invoke("context_form", tools.context_form, value_json)

    @mcp.tool()
    def context_massage(values_json: str) -> str:
        """Normalize submitted context values for storage.

        Values without a rule type are dropped; only the selected type's
        settings are kept.

        Args:
            values_json: JSON array of submitted values

        Returns:
            JSON with normalized values, or the first error with its delta
        """
        return _invoke("context_massage", tools.context_massage, values_json)

    @mcp.tool()
    def context_validate(values_json: str) -> str:
        """Validate submitted context values, reporting every error and warning.

        Args:
            values_json: JSON array of submitted values

        Returns:
            JSON with valid, errors, warnings and (when valid) normalized values
        """
        return _invoke("context_validate", tools.context_validate, values_json)

    @mcp.tool()
    def context_resolve(values_json: str, placement_id: str) -> str:
        """Return the saved contexts that apply to a placement.

        An empty apply_to list applies to every placement.

        Args:
            values_json: JSON array of stored context values
            placement_id: Placement machine name

        Returns:
            JSON with matching contexts
        """
        return _invoke("context_resolve", tools.context_resolve, values_json, placement_id)

    @mcp.tool()
    def studio_health() -> str:
        """Return status, record counts and tool metrics."""
        return _invoke("studio_health", tools.studio_health)
