"""Turn off advertising wherever this context applies."""

from __future__ import annotations

from typing import Any

from ...domain.context import ContextAssignment
from ...domain.forms import FieldType, FormElement
from ..base import RuleTypeDefinition


class TurnoffRule:
    rule_type = RuleTypeDefinition(
        id="turnoff",
        label="Turn off advertising",
        description="Suppresses the selected ads on matching content.",
        weight=10,
    )

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        return [
            FormElement(
                name="notice",
                type=FieldType.item,
                description="Ads chosen below will not be displayed on this content.",
            )
        ]

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        return {}
