"""Pydantic-based runtime settings for the ad entity surfaces.

Loads from environment variables (with optional .env file).
Invalid values fail fast on first access.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

BUILTIN_RULE_PLUGINS = [
    "ad_entity.plugins.rules.targeting:TargetingRule",
    "ad_entity.plugins.rules.turnoff:TurnoffRule",
    "ad_entity.plugins.rules.device:DeviceRule",
    "ad_entity.plugins.rules.geo:GeoRule",
    "ad_entity.plugins.rules.user_role:UserRoleRule",
]


class PlacementStoreKind(str, Enum):
    sqlite = "sqlite"
    memory = "memory"


class UnknownRuleTypePolicy(str, Enum):
    reject = "reject"
    drop = "drop"
    passthrough = "passthrough"


class RuntimeSettings(BaseSettings):
    """All configuration for the ad entity runtime, validated at startup."""

    model_config = {"env_prefix": "", "env_file": ".env", "env_file_encoding": "utf-8"}

    # --- Placement storage ---
    placement_store: PlacementStoreKind = Field(
        default=PlacementStoreKind.sqlite,
        description="Placement store backend: 'sqlite' or 'memory'",
    )
    placement_db_path: str = Field(
        default="data/placements.db",
        validation_alias=AliasChoices("PLACEMENT_DB_PATH", "AD_ENTITY_DB_PATH"),
        description="SQLite path for placement storage",
    )

    # --- Rule types ---
    rule_plugins: list[str] = Field(
        default_factory=lambda: list(BUILTIN_RULE_PLUGINS),
        description="Rule plugin specs in 'module.path:ClassName' form, registered in order",
    )
    unknown_rule_type_policy: UnknownRuleTypePolicy = Field(
        default=UnknownRuleTypePolicy.reject,
        description="What to do with a submitted value whose rule type is not registered",
    )

    # --- Form building ---
    selector_token_bytes: int = Field(
        default=2,
        ge=1,
        le=32,
        description="Random bytes used for the type-selector correlation token",
    )

    # --- Auth (optional: require key for production) ---
    require_studio_key: bool = Field(
        default=False,
        validation_alias=AliasChoices("REQUIRE_STUDIO_KEY", "REQUIRE_ADMIN_KEY"),
        description="If True, Studio requires MCP_STUDIO_KEY env",
    )

    # --- Logging ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Root log level for entry points"
    )

    @field_validator("rule_plugins")
    @classmethod
    def _plugin_spec_shape(cls, v: list[str]) -> list[str]:
        for spec in v:
            module, sep, attr = spec.partition(":")
            if not sep or not module or not attr:
                raise ValueError(f"rule plugin spec must look like 'module:ClassName', got {spec!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Return the singleton RuntimeSettings (cached after first call)."""
    return RuntimeSettings()
