"""Runtime configuration."""

from .runtime import (
    BUILTIN_RULE_PLUGINS,
    PlacementStoreKind,
    RuntimeSettings,
    UnknownRuleTypePolicy,
    get_settings,
)

__all__ = [
    "BUILTIN_RULE_PLUGINS",
    "PlacementStoreKind",
    "RuntimeSettings",
    "UnknownRuleTypePolicy",
    "get_settings",
]
