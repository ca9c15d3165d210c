"""Composition root: the single place where concrete adapters are built.

Call ``build_context_widget()`` or ``build_placement_service()`` to get a
fully-constructed service. No ad-hoc construction elsewhere.
"""

from __future__ import annotations

from .adapters.memory_placement_store import InMemoryPlacementStore
from .adapters.sqlite_placement_store import SqlitePlacementStore
from .config.runtime import PlacementStoreKind, RuntimeSettings, get_settings
from .plugins.registry import RuleTypeRegistry
from .ports.id_gen import RandomSelectorTokenProvider
from .ports.placement_store import PlacementStore
from .services.context_widget import ContextWidget, WidgetSettings
from .services.placement_service import PlacementService


def build_registry(settings: RuntimeSettings | None = None) -> RuleTypeRegistry:
    """Construct a registry populated from ``settings.rule_plugins``."""
    settings = settings or get_settings()
    registry = RuleTypeRegistry()
    registry.load_plugins(settings.rule_plugins)
    return registry


def build_placement_store(settings: RuntimeSettings | None = None) -> PlacementStore:
    settings = settings or get_settings()
    if settings.placement_store is PlacementStoreKind.memory:
        return InMemoryPlacementStore()
    return SqlitePlacementStore(settings.placement_db_path)


def build_placement_service(
    settings: RuntimeSettings | None = None,
    store: PlacementStore | None = None,
) -> PlacementService:
    settings = settings or get_settings()
    return PlacementService(store or build_placement_store(settings))


def build_context_widget(
    settings: RuntimeSettings | None = None,
    store: PlacementStore | None = None,
    registry: RuleTypeRegistry | None = None,
    widget_settings: WidgetSettings | None = None,
) -> ContextWidget:
    settings = settings or get_settings()
    return ContextWidget(
        registry=registry or build_registry(settings),
        placement_store=store or build_placement_store(settings),
        token_provider=RandomSelectorTokenProvider(settings.selector_token_bytes),
        unknown_rule_type_policy=settings.unknown_rule_type_policy,
        settings=widget_settings,
    )
