"""Placement domain model (one configured advertising entity)."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

MACHINE_NAME_RE = re.compile(r"^[a-z0-9_]+$")
MAX_ID_LENGTH = 64


class Placement(BaseModel):
    """An ad placement: identity plus a human-readable label."""

    id: str = Field(..., description="Machine name, unique across placements")
    label: str = Field(..., description="Display label")
    uuid: str | None = Field(default=None, description="Stable UUID assigned on first save")
    status: bool = Field(default=True, description="Whether the placement is enabled")

    @field_validator("id")
    @classmethod
    def _machine_name(cls, value: str) -> str:
        if not value or len(value) > MAX_ID_LENGTH:
            raise ValueError(f"id must be 1-{MAX_ID_LENGTH} characters, got {len(value)}")
        if not MACHINE_NAME_RE.match(value):
            raise ValueError(
                f"id {value!r} must contain only lowercase letters, numbers and underscores"
            )
        return value

    @field_validator("label")
    @classmethod
    def _non_empty_label(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("label cannot be empty")
        return value


def placement_options(placements: dict[str, Placement] | list[Placement]) -> dict[str, str]:
    """Return id -> label options, ordered by label then id."""
    items = placements.values() if isinstance(placements, dict) else placements
    ordered = sorted(items, key=lambda p: (p.label.lower(), p.id))
    return {p.id: p.label for p in ordered}
