"""Port interfaces (Protocols).

Services depend only on these, never on concrete adapters.
No sqlite or other infrastructure imports allowed here.
"""

from .id_gen import SelectorTokenProvider, UuidProvider
from .placement_store import PlacementStore

__all__ = [
    "PlacementStore",
    "SelectorTokenProvider",
    "UuidProvider",
]
