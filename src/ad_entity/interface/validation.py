"""Submission validation with collected errors and warnings.

The widget normalizer stops at the first bad value; the studio surfaces want
every problem at once, keyed by delta.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..domain.context import ContextAssignment
from ..domain.placement import Placement
from ..services.context_widget import ContextValueError, ContextWidget


class ValidationResult:
    """Result of request validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None, warnings: list[str] | None = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.warnings = warnings or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON response."""
        return {
            "valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    def add_error(self, error: str) -> ValidationResult:
        """Add an error and return self for chaining."""
        self.errors.append(error)
        self.is_valid = False
        return self

    def add_warning(self, warning: str) -> ValidationResult:
        """Add a warning and return self for chaining."""
        self.warnings.append(warning)
        return self


def validate_form_values(
    widget: ContextWidget,
    values: list[Any],
) -> tuple[ValidationResult, list[ContextAssignment]]:
    """Normalize each delta independently, collecting every failure.

    Returns:
        (ValidationResult, saved assignments). The list is only meaningful
        when the result is valid.
    """
    result = ValidationResult(is_valid=True)
    saved: list[ContextAssignment] = []
    if not isinstance(values, list):
        result.add_error(f"values must be a list, got {type(values).__name__}")
        return result, saved

    for delta, raw in enumerate(values):
        if not isinstance(raw, Mapping):
            result.add_error(f"context[{delta}]: value must be an object, got {type(raw).__name__}")
            continue
        try:
            massaged = widget.massage_form_values([raw])
        except ContextValueError as exc:
            result.add_error(f"context[{delta}] ({exc.rule_type_id}): {exc.message}")
            continue
        if not massaged:
            result.add_warning(f"context[{delta}]: no context type chosen; value will not be saved")
            continue
        saved.extend(massaged)
        stale = sorted(set(raw.get("rule_settings") or {}) - set(massaged[0].rule_settings))
        if stale:
            result.add_warning(f"context[{delta}]: discarding settings for {', '.join(stale)}")
    return result, saved


def validate_placement_payload(data: Any) -> tuple[ValidationResult, Placement | None]:
    """Validate a raw placement mapping (id, label, optional status)."""
    result = ValidationResult(is_valid=True)
    if not isinstance(data, Mapping):
        result.add_error(f"placement must be an object, got {type(data).__name__}")
        return result, None
    try:
        placement = Placement.model_validate(data)
    except ValidationError as exc:
        for err in exc.errors():
            loc = ".".join(str(part) for part in err["loc"])
            result.add_error(f"{loc}: {err['msg']}")
        return result, None
    if placement.label == placement.id:
        result.add_warning("label equals the machine name; consider a human-readable label")
    return result, placement
