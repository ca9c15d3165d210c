"""Ad placements ("advertising entities") with pluggable context rules."""

from .domain import ContextAssignment, FormElement, Placement

__version__ = "0.1.0"
__all__ = [
    "ContextAssignment",
    "FormElement",
    "Placement",
]
