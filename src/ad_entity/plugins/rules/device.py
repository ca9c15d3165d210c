"""Restrict ads to one device class."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, field_validator

from ...domain.context import ContextAssignment
from ...domain.forms import FieldType, FormElement
from ..base import RuleTypeDefinition, validate_settings

DEVICE_TYPES = {"mobile": "Mobile", "tablet": "Tablet", "desktop": "Desktop"}


class DeviceSettings(BaseModel):
    target: Literal["mobile", "tablet", "desktop"]

    @field_validator("target", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class DeviceRule:
    rule_type = RuleTypeDefinition(
        id="device",
        label="Device type",
        description="Matches visitors on the chosen device class.",
        weight=20,
    )

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        return [
            FormElement(
                name="target",
                type=FieldType.select,
                title="Device",
                options=dict(DEVICE_TYPES),
                empty_value="",
                default_value=settings.get("target", ""),
            )
        ]

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        return validate_settings(self.rule_type.id, DeviceSettings, {"target": settings.get("target")})
