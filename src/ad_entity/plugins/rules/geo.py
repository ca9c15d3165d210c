"""Restrict ads to visitors from a list of countries."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ...domain.context import ContextAssignment
from ...domain.forms import FieldType, FormElement
from ..base import RuleTypeDefinition, split_list, unique, validate_settings

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")


class GeoSettings(BaseModel):
    countries: list[str] = Field(..., min_length=1)

    @field_validator("countries", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> list[str]:
        codes = unique([c.upper() for c in split_list(value)])
        bad = [c for c in codes if not _COUNTRY_RE.match(c)]
        if bad:
            raise ValueError(f"not ISO 3166-1 alpha-2 country codes: {', '.join(bad)}")
        return codes


class GeoRule:
    rule_type = RuleTypeDefinition(
        id="geo",
        label="Geographic",
        description="Matches visitors located in one of the listed countries.",
        weight=30,
    )

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        return [
            FormElement(
                name="countries",
                type=FieldType.textfield,
                title="Countries",
                description="Comma-separated two-letter country codes, e.g. US, DE.",
                default_value=", ".join(settings.get("countries") or []),
            )
        ]

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        return validate_settings(self.rule_type.id, GeoSettings, {"countries": settings.get("countries")})
