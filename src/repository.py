"""Persistence of channel sync state in DuckDB."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import duckdb

from config import get_data_paths
from models import SyncState

SYNC_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS sync_state (
    channel_id TEXT PRIMARY KEY,
    state TEXT
);
"""


def default_db_path() -> Path:
    return get_data_paths()["data"] / "sync_state.duckdb"


class SyncStateRepository:
    """Stores the resumable SyncState of each channel between pages.

    ``db_path=":memory:"`` keeps a single in-process connection, which is what
    the tests use.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._memory_conn: duckdb.DuckDBPyConnection | None = None
        if db_path == ":memory:":
            self._memory_conn = duckdb.connect(":memory:")
            self.db_path: Path | None = None
        else:
            self.db_path = Path(db_path) if db_path else default_db_path()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_sync_table()

    @contextmanager
    def get_connection(self) -> Iterator[duckdb.DuckDBPyConnection]:
        if self._memory_conn is not None:
            yield self._memory_conn
            return
        conn = duckdb.connect(str(self.db_path))
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_sync_table(self) -> None:
        with self.get_connection() as conn:
            conn.execute(SYNC_TABLE_SQL)

    # ------------------------------------------------------------------
    def get_state(self, channel_id: str) -> SyncState | None:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT state FROM sync_state WHERE channel_id = ?", [channel_id]
            ).fetchone()
        return SyncState.model_validate_json(row[0]) if row else None

    def save_state(self, state: SyncState) -> None:
        """Upsert the state after a page has been processed."""
        with self.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO sync_state(channel_id, state) VALUES(?, ?)",
                [state.channel_id, state.model_dump_json()],
            )

    def clear_state(self, channel_id: str) -> None:
        with self.get_connection() as conn:
            conn.execute("DELETE FROM sync_state WHERE channel_id = ?", [channel_id])

    def reset_sync_state(self) -> None:
        """Delete all sync_state rows."""
        with self.get_connection() as conn:
            conn.execute("DELETE FROM sync_state")
