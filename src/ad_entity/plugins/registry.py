"""Rule type registry: string id -> plugin factory.

Populated once at startup (from ``RuntimeSettings.rule_plugins``) and
queried read-only afterwards.
"""

from __future__ import annotations

import importlib
import logging
from typing import Callable

from .base import RulePlugin, RuleTypeDefinition

logger = logging.getLogger("ad_entity.plugins")

RuleFactory = Callable[[], RulePlugin]


class UnknownRuleTypeError(KeyError):
    """No rule type is registered under the requested id."""

    def __init__(self, rule_type_id: str) -> None:
        self.rule_type_id = rule_type_id
        super().__init__(rule_type_id)

    def __str__(self) -> str:
        return f"Unknown rule type {self.rule_type_id!r}"


class RuleTypeRegistry:
    """Ordered mapping of rule type definitions to plugin factories."""

    def __init__(self) -> None:
        self._definitions: dict[str, RuleTypeDefinition] = {}
        self._factories: dict[str, RuleFactory] = {}

    def register(self, definition: RuleTypeDefinition, factory: RuleFactory) -> None:
        if definition.id in self._definitions:
            raise ValueError(f"Rule type {definition.id!r} is already registered")
        self._definitions[definition.id] = definition
        self._factories[definition.id] = factory
        logger.debug("rule_type_registered", extra={"rule_type_id": definition.id})

    def register_class(self, plugin_cls: type) -> None:
        """Register a plugin class carrying a ``rule_type`` definition."""
        if not isinstance(plugin_cls, type):
            raise ValueError(f"Rule plugin must be a class, got {type(plugin_cls).__name__}")
        definition = getattr(plugin_cls, "rule_type", None)
        if not isinstance(definition, RuleTypeDefinition):
            raise ValueError(f"{plugin_cls.__qualname__} has no 'rule_type' RuleTypeDefinition")
        self.register(definition, plugin_cls)

    def load_plugins(self, specs: list[str]) -> None:
        """Import and register each ``module.path:ClassName`` spec in order."""
        for spec in specs:
            module_name, _, attr = spec.partition(":")
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                raise ValueError(f"Cannot import rule plugin module {module_name!r}: {exc}") from exc
            plugin_cls = getattr(module, attr, None)
            if plugin_cls is None:
                raise ValueError(f"Rule plugin {spec!r}: {attr!r} not found in {module_name}")
            self.register_class(plugin_cls)
        logger.info("rule_types_loaded", extra={"rule_type_ids": list(self._definitions)})

    # --- queries ---

    def list_definitions(self) -> list[RuleTypeDefinition]:
        """Definitions ordered by weight, then registration order."""
        return sorted(self._definitions.values(), key=lambda d: d.weight)

    def has_definition(self, rule_type_id: str) -> bool:
        return rule_type_id in self._definitions

    def get_definition(self, rule_type_id: str) -> RuleTypeDefinition:
        try:
            return self._definitions[rule_type_id]
        except KeyError:
            raise UnknownRuleTypeError(rule_type_id) from None

    def create_instance(self, rule_type_id: str) -> RulePlugin:
        try:
            factory = self._factories[rule_type_id]
        except KeyError:
            raise UnknownRuleTypeError(rule_type_id) from None
        return factory()

    def options(self) -> dict[str, str]:
        """id -> label for every registered rule type."""
        return {d.id: d.label for d in self.list_definitions()}

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, rule_type_id: object) -> bool:
        return rule_type_id in self._definitions
