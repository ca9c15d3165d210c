"""Built-in context rule types."""

from .device import DeviceRule
from .geo import GeoRule
from .targeting import TargetingRule
from .turnoff import TurnoffRule
from .user_role import UserRoleRule

__all__ = [
    "DeviceRule",
    "GeoRule",
    "TargetingRule",
    "TurnoffRule",
    "UserRoleRule",
]
