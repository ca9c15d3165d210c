"""Port: key -> record store for placements."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain.placement import Placement


@runtime_checkable
class PlacementStore(Protocol):
    """CRUD interface for placement records."""

    # --- queries ---

    def load(self, placement_id: str) -> Placement | None: ...

    def load_multiple(self, ids: list[str] | None = None) -> dict[str, Placement]:
        """Return placements keyed by id, ordered by id; all when ``ids`` is None."""
        ...

    # --- mutations ---

    def save(self, placement: Placement) -> bool:
        """Insert or replace. Returns True when the record was created."""
        ...

    def delete(self, placement_id: str) -> bool:
        """Returns True when a record was removed."""
        ...
