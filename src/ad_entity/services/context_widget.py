"""ContextWidget: builds the context form and normalizes submitted values.

Render: one type selector, one pre-built settings panel per registered rule
type (only the selected one visible), and an "apply on ads" multi-select.
Submit: values without a rule type are dropped; the selected rule plugin
normalizes its own settings and every other type's leftovers are discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..config.runtime import UnknownRuleTypePolicy
from ..domain.context import ContextAssignment
from ..domain.forms import FieldType, FormElement, VisibilityCondition
from ..domain.placement import placement_options
from ..plugins.base import SettingsValidationError
from ..plugins.registry import RuleTypeRegistry, UnknownRuleTypeError
from ..ports.id_gen import RandomSelectorTokenProvider, SelectorTokenProvider
from ..ports.placement_store import PlacementStore

logger = logging.getLogger("ad_entity.context")

APPLY_TO_DESCRIPTION = "Choose none to apply this context on any ad which would appear."


class ContextValueError(ValueError):
    """A submitted context value cannot be saved; bound to its delta."""

    def __init__(self, delta: int, rule_type_id: str | None, message: str) -> None:
        self.delta = delta
        self.rule_type_id = rule_type_id
        self.message = message
        super().__init__(f"context[{delta}] ({rule_type_id}): {message}")


class WidgetSettings(BaseModel):
    """Defaults applied when a field value has no context yet."""

    default_rule_type_id: str | None = Field(default=None, description="Preselected rule type")
    default_apply_to: list[str] = Field(default_factory=list, description="Preselected placements")


class ContextWidget:
    """Form builder and value normalizer for context assignments."""

    def __init__(
        self,
        registry: RuleTypeRegistry,
        placement_store: PlacementStore,
        token_provider: SelectorTokenProvider | None = None,
        unknown_rule_type_policy: UnknownRuleTypePolicy = UnknownRuleTypePolicy.reject,
        settings: WidgetSettings | None = None,
    ) -> None:
        self._registry = registry
        self._placements = placement_store
        self._tokens = token_provider or RandomSelectorTokenProvider()
        self._unknown_policy = UnknownRuleTypePolicy(unknown_rule_type_policy)
        self._settings = settings or WidgetSettings()

    @property
    def registry(self) -> RuleTypeRegistry:
        return self._registry

    def default_assignment(self) -> ContextAssignment:
        return ContextAssignment(
            rule_type_id=self._settings.default_rule_type_id,
            apply_to=list(self._settings.default_apply_to),
        )

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    def form_element(
        self,
        assignment: ContextAssignment | None = None,
        form_state: dict[str, Any] | None = None,
    ) -> FormElement:
        """Build the form fragment for a single field value."""
        if assignment is None:
            assignment = self.default_assignment()
        form_state = form_state if form_state is not None else {}

        token = self._tokens.new_token()
        definitions = self._registry.list_definitions()

        selector = FormElement(
            name="rule_type_id",
            type=FieldType.select,
            title="Context type",
            options={d.id: d.label for d in definitions},
            empty_value="",
            default_value=assignment.rule_type_id or "",
            weight=10,
            field_id=token,
        )
        settings_container = FormElement(
            name="rule_settings",
            type=FieldType.container,
            weight=20,
            classes=["ad-entity-context-settings"],
            visible_when=VisibilityCondition(field=token, not_equals=""),
        )
        apply_to = FormElement(
            name="apply_to",
            type=FieldType.select,
            title="Apply on ads",
            description=APPLY_TO_DESCRIPTION,
            multiple=True,
            options=placement_options(self._placements.load_multiple()),
            empty_value="",
            default_value=list(assignment.apply_to),
            weight=30,
            visible_when=VisibilityCondition(field=token, not_equals=""),
        )

        for definition in definitions:
            plugin = self._registry.create_instance(definition.id)
            plugin_settings = assignment.rule_settings.get(definition.id) or {}
            panel = FormElement(
                name=definition.id,
                type=FieldType.container,
                classes=[f"ad-entity-context-{definition.id}"],
                visible_when=VisibilityCondition(field=token, equals=definition.id),
            )
            panel.add(*plugin.settings_form(dict(plugin_settings), assignment, form_state))
            settings_container.add(panel)

        return FormElement(name="context", type=FieldType.container).add(
            selector, settings_container, apply_to
        )

    def form(
        self,
        assignments: list[ContextAssignment],
        form_state: dict[str, Any] | None = None,
    ) -> FormElement:
        """Build the multi-value form: one element per delta plus an empty one."""
        root = FormElement(name="contexts", type=FieldType.container)
        for delta, assignment in enumerate([*assignments, None]):
            element = self.form_element(assignment, form_state)
            element.name = str(delta)
            element.weight = delta
            root.add(element)
        return root

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def massage_form_values(self, values: list[Mapping[str, Any]]) -> list[ContextAssignment]:
        """Normalize submitted values for storage, dropping those with no rule type."""
        saved: list[ContextAssignment] = []
        for delta, raw in enumerate(values):
            assignment = self._massage_value(delta, raw)
            if assignment is not None:
                saved.append(assignment)
        logger.info(
            "context_values_massaged",
            extra={"submitted": len(values), "saved": len(saved)},
        )
        return saved

    def _massage_value(self, delta: int, raw: Mapping[str, Any]) -> ContextAssignment | None:
        if not isinstance(raw, Mapping):
            raise ContextValueError(delta, None, "value must be an object")
        rule_type_id = raw.get("rule_type_id")
        if isinstance(rule_type_id, str):
            rule_type_id = rule_type_id.strip()
        if not rule_type_id:
            logger.debug("context_value_dropped", extra={"delta": delta, "reason": "no_rule_type"})
            return None
        rule_type_id = str(rule_type_id)

        registered = self._registry.has_definition(rule_type_id)
        if not registered and self._unknown_policy is UnknownRuleTypePolicy.reject:
            raise ContextValueError(
                delta, rule_type_id, f"unknown rule type {rule_type_id!r}"
            ) from UnknownRuleTypeError(rule_type_id)
        if not registered and self._unknown_policy is UnknownRuleTypePolicy.drop:
            logger.warning(
                "context_value_dropped",
                extra={"delta": delta, "reason": "unknown_rule_type", "rule_type_id": rule_type_id},
            )
            return None

        raw_settings = raw.get("rule_settings") or {}
        if not isinstance(raw_settings, Mapping):
            raise ContextValueError(delta, rule_type_id, "rule_settings must be a mapping")
        if not registered:
            # passthrough: stored as-is, so each entry must already be an object
            not_objects = sorted(str(k) for k, v in raw_settings.items() if not isinstance(v, Mapping))
            if not_objects:
                raise ContextValueError(
                    delta,
                    rule_type_id,
                    f"unmassaged rule_settings must map rule type ids to objects: {', '.join(not_objects)}",
                )

        apply_to = self._clean_apply_to(delta, rule_type_id, raw.get("apply_to"))

        if registered:
            rule_settings = {rule_type_id: self._massage_settings(delta, rule_type_id, raw_settings)}
        else:
            logger.warning(
                "context_settings_unmassaged",
                extra={"delta": delta, "rule_type_id": rule_type_id},
            )
            rule_settings = {str(k): dict(v) for k, v in raw_settings.items()}

        try:
            return ContextAssignment(
                rule_type_id=rule_type_id,
                apply_to=apply_to,
                rule_settings=rule_settings,
            )
        except ValidationError as exc:
            raise ContextValueError(delta, rule_type_id, f"invalid rule_settings: {exc}") from exc

    def _massage_settings(
        self,
        delta: int,
        rule_type_id: str,
        raw_settings: Mapping[str, Any],
    ) -> dict[str, Any]:
        plugin_settings = raw_settings.get(rule_type_id) or {}
        if not isinstance(plugin_settings, Mapping):
            raise ContextValueError(delta, rule_type_id, "settings must be a mapping")
        plugin = self._registry.create_instance(rule_type_id)
        try:
            return plugin.massage_settings(dict(plugin_settings))
        except SettingsValidationError as exc:
            raise ContextValueError(delta, rule_type_id, "; ".join(exc.errors)) from exc

    def _clean_apply_to(self, delta: int, rule_type_id: str, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ContextValueError(delta, rule_type_id, "apply_to must be a list of placement ids")
        ids = list(dict.fromkeys(str(v).strip() for v in value if v is not None and str(v).strip()))
        if not ids:
            return []
        known = self._placements.load_multiple(ids)
        illegal = [pid for pid in ids if pid not in known]
        if illegal:
            raise ContextValueError(
                delta, rule_type_id, f"an illegal choice has been detected: {', '.join(illegal)}"
            )
        return ids


def to_storage(assignments: list[ContextAssignment]) -> list[dict[str, Any]]:
    """Serialize saved assignments to the persisted field value shape."""
    return [a.to_storage() for a in assignments if not a.is_empty]
