"""Context assignment: one targeting rule attached to a field value."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ContextAssignment(BaseModel):
    """Which rule type is selected, its settings, and the placements it covers.

    An empty ``apply_to`` means the context applies to every placement.
    """

    rule_type_id: str | None = Field(default=None, description="Selected rule type, None for no rule")
    apply_to: list[str] = Field(default_factory=list, description="Placement ids; empty means all")
    rule_settings: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Settings blob per rule type id"
    )

    @field_validator("rule_type_id", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return self.rule_type_id is None

    @property
    def settings(self) -> dict[str, Any]:
        """Settings of the selected rule type ({} when none)."""
        if self.rule_type_id is None:
            return {}
        return self.rule_settings.get(self.rule_type_id) or {}

    def applies_to(self, placement_id: str) -> bool:
        """True when this context covers the given placement."""
        return not self.apply_to or placement_id in self.apply_to

    def to_storage(self) -> dict[str, Any]:
        """Return the persisted field value shape."""
        return {
            "rule_type_id": self.rule_type_id,
            "apply_to": list(self.apply_to),
            "rule_settings": {k: dict(v) for k, v in self.rule_settings.items()},
        }


def contexts_for_placement(
    assignments: list[ContextAssignment],
    placement_id: str,
) -> list[ContextAssignment]:
    """Return the configured assignments that apply to ``placement_id``."""
    return [a for a in assignments if not a.is_empty and a.applies_to(placement_id)]
