"""Restrict ads to visitors holding one of the listed roles."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ...domain.context import ContextAssignment
from ...domain.forms import FieldType, FormElement
from ...domain.placement import MACHINE_NAME_RE
from ..base import RuleTypeDefinition, split_list, unique, validate_settings


class UserRoleSettings(BaseModel):
    roles: list[str] = Field(..., min_length=1)

    @field_validator("roles", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> list[str]:
        roles = unique([r.lower() for r in split_list(value)])
        bad = [r for r in roles if not MACHINE_NAME_RE.match(r)]
        if bad:
            raise ValueError(f"invalid role machine names: {', '.join(bad)}")
        return roles


class UserRoleRule:
    rule_type = RuleTypeDefinition(
        id="user_role",
        label="User role",
        description="Matches visitors having at least one of the listed roles.",
        weight=40,
    )

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        return [
            FormElement(
                name="roles",
                type=FieldType.textfield,
                title="Roles",
                description="Comma-separated role machine names, e.g. anonymous, authenticated.",
                default_value=", ".join(settings.get("roles") or []),
            )
        ]

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        return validate_settings(self.rule_type.id, UserRoleSettings, {"roles": settings.get("roles")})
