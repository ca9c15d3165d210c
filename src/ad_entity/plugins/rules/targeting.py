"""Key/value targeting passed on to the ad server.

Administrators enter pairs as text, ``section: sports, section: news,
lang: en``; a repeated key collects several values. The stored form is a
mapping of lower-cased keys to value lists.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

from ...domain.context import ContextAssignment
from ...domain.forms import FieldType, FormElement
from ..base import RuleTypeDefinition, split_list, unique, validate_settings

# Stored pairs must survive format_targeting -> parse_targeting unchanged.
_KEY_SEPARATORS = (":", ",", "\n")
_VALUE_SEPARATORS = (",", "\n")


def parse_targeting(text: str) -> dict[str, list[str]]:
    """Parse ``key: value`` pairs separated by commas or newlines."""
    parsed: dict[str, list[str]] = {}
    for pair in split_list(text):
        key, sep, value = pair.partition(":")
        if not sep:
            raise ValueError(f"expected 'key: value', got {pair!r}")
        parsed.setdefault(key.strip(), []).append(value.strip())
    return parsed


def format_targeting(targeting: dict[str, list[str]]) -> str:
    """Inverse of :func:`parse_targeting`, used to pre-fill the form."""
    return ", ".join(f"{key}: {value}" for key, values in targeting.items() for value in values)


class TargetingSettings(BaseModel):
    targeting: dict[str, list[str]]

    @field_validator("targeting", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> dict[str, list[str]]:
        if isinstance(value, str):
            value = parse_targeting(value)
        if not isinstance(value, dict):
            raise ValueError("targeting must be 'key: value' text or a mapping")
        normalized: dict[str, list[str]] = {}
        for raw_key, raw_values in value.items():
            key = str(raw_key).strip().lower()
            if not key:
                raise ValueError("targeting keys cannot be empty")
            if any(ch in key for ch in _KEY_SEPARATORS):
                raise ValueError(f"targeting key {key!r} cannot contain ':', ',' or a line break")
            values = split_list([raw_values] if isinstance(raw_values, str) else raw_values)
            if not values:
                raise ValueError(f"targeting key {key!r} has no value")
            bad = [v for v in values if any(ch in v for ch in _VALUE_SEPARATORS)]
            if bad:
                raise ValueError(f"targeting values cannot contain ',' or a line break: {bad!r}")
            normalized[key] = unique(normalized.get(key, []) + values)
        if not normalized:
            raise ValueError("targeting must contain at least one 'key: value' pair")
        return normalized


class TargetingRule:
    rule_type = RuleTypeDefinition(
        id="targeting",
        label="Targeting",
        description="Adds key/value targeting to ads shown on matching content.",
        weight=0,
    )

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        current = settings.get("targeting") or {}
        if isinstance(current, dict):
            current = format_targeting(current)
        return [
            FormElement(
                name="targeting",
                type=FieldType.textarea,
                title="Targeting",
                description="Pairs of key: value, separated by commas. Repeat a key for several values.",
                default_value=current,
            )
        ]

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        return validate_settings(self.rule_type.id, TargetingSettings, {"targeting": settings.get("targeting")})
