"""Application services."""

from .context_widget import ContextValueError, ContextWidget, WidgetSettings, to_storage
from .placement_service import PlacementError, PlacementService

__all__ = [
    "ContextValueError",
    "ContextWidget",
    "PlacementError",
    "PlacementService",
    "WidgetSettings",
    "to_storage",
]
