"""Rule plugin contract: one implementation per context rule type."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, ValidationError

from ..domain.context import ContextAssignment
from ..domain.forms import FormElement


class SettingsValidationError(ValueError):
    """A rule plugin rejected the submitted settings."""

    def __init__(self, rule_type_id: str, errors: list[str]) -> None:
        self.rule_type_id = rule_type_id
        self.errors = errors
        super().__init__(f"{rule_type_id}: " + "; ".join(errors))

    @classmethod
    def from_pydantic(cls, rule_type_id: str, exc: ValidationError) -> SettingsValidationError:
        errors = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err["loc"])
            errors.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        return cls(rule_type_id, errors)


class RuleTypeDefinition(BaseModel):
    """Registry metadata describing one rule type."""

    id: str = Field(..., description="Unique rule type identifier")
    label: str = Field(..., description="Display label")
    description: str = Field(default="", description="Short help text")
    weight: int = Field(default=0, description="Listing order; lower first, ties keep registration order")


@runtime_checkable
class RulePlugin(Protocol):
    """Builds the settings sub-form for a rule type and normalizes its settings."""

    def settings_form(
        self,
        settings: dict[str, Any],
        assignment: ContextAssignment,
        form_state: dict[str, Any],
    ) -> list[FormElement]:
        """Return the elements needed to configure this rule, pre-filled from ``settings``."""
        ...

    def massage_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize submitted settings; raise SettingsValidationError."""
        ...


def validate_settings(
    rule_type_id: str,
    model: type[BaseModel],
    settings: dict[str, Any],
) -> dict[str, Any]:
    """Run ``settings`` through a pydantic model and return the plain dump."""
    try:
        return model.model_validate(settings).model_dump(mode="json")
    except ValidationError as exc:
        raise SettingsValidationError.from_pydantic(rule_type_id, exc) from exc


def split_list(value: Any) -> list[str]:
    """Accept comma/newline separated text or a list; return stripped non-empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.replace("\n", ",").split(",")
    elif isinstance(value, (list, tuple, set)):
        parts = [str(v) for v in value]
    else:
        raise ValueError(f"expected text or list, got {type(value).__name__}")
    return [p.strip() for p in parts if p and p.strip()]


def unique(items: list[str]) -> list[str]:
    """De-duplicate preserving first occurrence."""
    return list(dict.fromkeys(items))
