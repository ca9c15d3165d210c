"""In-process placement store (tests, demos, ephemeral studio sessions)."""

from __future__ import annotations

from ..domain.placement import Placement


class InMemoryPlacementStore:
    """Dict-backed PlacementStore."""

    def __init__(self, placements: list[Placement] | None = None) -> None:
        self._items: dict[str, Placement] = {}
        for placement in placements or []:
            self.save(placement)

    def load(self, placement_id: str) -> Placement | None:
        placement = self._items.get(placement_id)
        return placement.model_copy() if placement is not None else None

    def load_multiple(self, ids: list[str] | None = None) -> dict[str, Placement]:
        keys = sorted(self._items) if ids is None else sorted(i for i in set(ids) if i in self._items)
        return {k: self._items[k].model_copy() for k in keys}

    def save(self, placement: Placement) -> bool:
        created = placement.id not in self._items
        self._items[placement.id] = placement.model_copy()
        return created

    def delete(self, placement_id: str) -> bool:
        return self._items.pop(placement_id, None) is not None
