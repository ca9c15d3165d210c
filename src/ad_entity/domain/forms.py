"""Declarative form-fragment tree consumed by the host form renderer.

Elements carry an optional ``visible_when`` predicate keyed by the
``field_id`` of another element, so the host can toggle panels client-side
without a round-trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class FieldType(str, Enum):
    """Supported element types."""

    container = "container"
    select = "select"
    textfield = "textfield"
    textarea = "textarea"
    checkbox = "checkbox"
    item = "item"           # read-only markup


class VisibilityCondition(BaseModel):
    """Show an element only while another field has (or lacks) a value."""

    field: str = Field(..., description="field_id of the controlling element")
    equals: str | None = Field(default=None, description="Visible when the field equals this value")
    not_equals: str | None = Field(default=None, description="Visible when the field differs from this value")

    @model_validator(mode="after")
    def _exactly_one(self) -> VisibilityCondition:
        if (self.equals is None) == (self.not_equals is None):
            raise ValueError("exactly one of equals / not_equals must be set")
        return self

    def evaluate(self, values: Mapping[str, Any]) -> bool:
        current = values.get(self.field)
        current = "" if current is None else str(current)
        if self.equals is not None:
            return current == self.equals
        return current != self.not_equals


class FormElement(BaseModel):
    """One node in a form fragment."""

    name: str = Field(..., description="Key of the submitted value")
    type: FieldType = Field(..., description="Element type")
    title: str | None = Field(default=None)
    description: str | None = Field(default=None)
    required: bool = Field(default=False)
    multiple: bool = Field(default=False, description="Multi-valued select")
    options: dict[str, str] = Field(default_factory=dict, description="value -> label for selects")
    empty_value: str | None = Field(default=None, description="Value submitted for the empty option")
    default_value: Any = Field(default=None)
    weight: int = Field(default=0, description="Render order among siblings")
    field_id: str | None = Field(default=None, description="Stable identifier other elements bind to")
    classes: list[str] = Field(default_factory=list)
    visible_when: VisibilityCondition | None = Field(default=None)
    children: list[FormElement] = Field(default_factory=list)

    def add(self, *elements: FormElement) -> FormElement:
        """Append children and return self for chaining."""
        self.children.extend(elements)
        return self

    def child(self, name: str) -> FormElement | None:
        for element in self.children:
            if element.name == name:
                return element
        return None

    def find(self, *path: str) -> FormElement | None:
        """Walk children by name; ``find()`` returns self."""
        node: FormElement | None = self
        for name in path:
            if node is None:
                return None
            node = node.child(name)
        return node

    def ordered_children(self) -> list[FormElement]:
        return sorted(self.children, key=lambda e: e.weight)

    def is_visible(self, values: Mapping[str, Any]) -> bool:
        """Evaluate this element's own visibility against field_id -> value."""
        if self.visible_when is None:
            return True
        return self.visible_when.evaluate(values)
