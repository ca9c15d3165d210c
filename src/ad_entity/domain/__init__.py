"""Domain layer for ad entities and context assignments."""

from .context import ContextAssignment, contexts_for_placement
from .forms import FieldType, FormElement, VisibilityCondition
from .placement import Placement, placement_options

__all__ = [
    "ContextAssignment",
    "FieldType",
    "FormElement",
    "Placement",
    "VisibilityCondition",
    "contexts_for_placement",
    "placement_options",
]
