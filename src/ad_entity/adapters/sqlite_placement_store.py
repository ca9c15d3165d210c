"""SQLite-backed placement store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..domain.placement import Placement


class SqlitePlacementStore:
    """Stores placement records in a single SQLite table."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_parent_dir()
        self._init_schema()

    def _ensure_parent_dir(self) -> None:
        path = Path(self._db_path)
        if path.parent.exists():
            return
        path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS placements (
                    id TEXT PRIMARY KEY,
                    label TEXT NOT NULL,
                    uuid TEXT,
                    status INTEGER NOT NULL DEFAULT 1
                )
                """
            )

    @staticmethod
    def _row_to_placement(row: sqlite3.Row) -> Placement:
        return Placement(
            id=row["id"],
            label=row["label"],
            uuid=row["uuid"],
            status=bool(row["status"]),
        )

    def load(self, placement_id: str) -> Placement | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, label, uuid, status FROM placements WHERE id = ?",
                (placement_id,),
            ).fetchone()
        return self._row_to_placement(row) if row is not None else None

    def load_multiple(self, ids: list[str] | None = None) -> dict[str, Placement]:
        query = "SELECT id, label, uuid, status FROM placements"
        params: list[object] = []
        if ids is not None:
            if not ids:
                return {}
            query += " WHERE id IN (" + ", ".join("?" for _ in ids) + ")"
            params.extend(ids)
        query += " ORDER BY id"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return {row["id"]: self._row_to_placement(row) for row in rows}

    def save(self, placement: Placement) -> bool:
        with self._connect() as conn:
            existing = conn.execute(
                "SELECT 1 FROM placements WHERE id = ?", (placement.id,)
            ).fetchone()
            conn.execute(
                """
                INSERT INTO placements (id, label, uuid, status) VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    label = excluded.label,
                    uuid = excluded.uuid,
                    status = excluded.status
                """,
                (placement.id, placement.label, placement.uuid, int(placement.status)),
            )
        return existing is None

    def delete(self, placement_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM placements WHERE id = ?", (placement_id,))
        return cursor.rowcount > 0
