"""PlacementService for administering advertising entities."""

from __future__ import annotations

import logging

from ..domain.placement import Placement, placement_options
from ..ports.id_gen import Uuid4Provider, UuidProvider
from ..ports.placement_store import PlacementStore

logger = logging.getLogger("ad_entity.placements")


class PlacementError(ValueError):
    """Invalid placement operation (duplicate id, missing record)."""


class PlacementService:
    """Create, edit, list and delete placements."""

    def __init__(
        self,
        store: PlacementStore,
        uuid_provider: UuidProvider | None = None,
    ) -> None:
        self._store = store
        self._uuid = uuid_provider or Uuid4Provider()

    def create(self, placement_id: str, label: str) -> Placement:
        if self._store.load(placement_id) is not None:
            raise PlacementError(f"Placement {placement_id!r} already exists")
        placement = Placement(id=placement_id, label=label)
        placement.uuid = self._uuid.new_uuid(placement.id)
        self._store.save(placement)
        logger.info("placement_created", extra={"placement_id": placement.id})
        return placement

    def update(self, placement_id: str, *, label: str | None = None, status: bool | None = None) -> Placement:
        placement = self.get(placement_id)
        changes = {}
        if label is not None:
            changes["label"] = label
        if status is not None:
            changes["status"] = status
        # Re-validate through the model so label rules apply to edits too.
        placement = Placement.model_validate({**placement.model_dump(), **changes})
        self._store.save(placement)
        logger.info("placement_updated", extra={"placement_id": placement.id, "fields": sorted(changes)})
        return placement

    def save(self, placement: Placement) -> bool:
        """Upsert a full record, keeping an existing uuid. Returns True when created."""
        existing = self._store.load(placement.id)
        if placement.uuid is None:
            placement = placement.model_copy(
                update={"uuid": existing.uuid if existing else self._uuid.new_uuid(placement.id)}
            )
        created = self._store.save(placement)
        logger.info("placement_saved", extra={"placement_id": placement.id, "was_created": created})
        return created

    def get(self, placement_id: str) -> Placement:
        placement = self._store.load(placement_id)
        if placement is None:
            raise PlacementError(f"Placement {placement_id!r} not found")
        return placement

    def delete(self, placement_id: str) -> bool:
        deleted = self._store.delete(placement_id)
        if deleted:
            logger.info("placement_deleted", extra={"placement_id": placement_id})
        return deleted

    def list_all(self) -> list[Placement]:
        """All placements ordered by label."""
        placements = self._store.load_multiple()
        return [placements[pid] for pid in placement_options(placements)]

    def options(self) -> dict[str, str]:
        return placement_options(self._store.load_multiple())
