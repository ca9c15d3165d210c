"""Context rule plugins and their registry."""

from .base import RulePlugin, RuleTypeDefinition, SettingsValidationError
from .registry import RuleTypeRegistry, UnknownRuleTypeError

__all__ = [
    "RulePlugin",
    "RuleTypeDefinition",
    "RuleTypeRegistry",
    "SettingsValidationError",
    "UnknownRuleTypeError",
]
