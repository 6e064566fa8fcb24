from __future__ import annotations

import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from typing import Optional

from .log import get_logger

LOGGER = get_logger(__name__)

# The app persists a single instance; its snapshot lives under this row key.
SNAPSHOT_SLOT = 'app'


def _db_file(db_path: str) -> str:
    """Returns the file to open for ``db_path``, creating its directory first.

    When that directory cannot be created the same file name is used under
    ``BOULE_DB_DIR``, or the system temp dir when the variable is unset.
    """
    directory = os.path.dirname(db_path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        return db_path
    except OSError as e:
        fallback = os.getenv('BOULE_DB_DIR') or tempfile.gettempdir()
        LOGGER.warning("Cannot use %s (%s), saving under %s", directory, e, fallback)
    os.makedirs(fallback, exist_ok=True)
    return os.path.join(fallback, os.path.basename(db_path) or 'boule.db')


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the snapshot table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS snapshots (
            slot TEXT PRIMARY KEY,
            payload TEXT NOT NULL,
            saved_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def db_load_snapshot(db_path: str, slot: str = SNAPSHOT_SLOT) -> Optional[str]:
    """Returns the stored snapshot payload, or None when nothing was saved yet."""
    resolved = _db_file(db_path)
    conn = sqlite3.connect(resolved)
    try:
        _ensure_db(conn)
        row = conn.execute("SELECT payload FROM snapshots WHERE slot = ?", (slot,)).fetchone()
        return row[0] if row else None
    finally:
        conn.close()


def db_save_snapshot(db_path: str, payload: str, slot: str = SNAPSHOT_SLOT) -> None:
    """Stores the snapshot payload, replacing the previous one."""
    resolved = _db_file(db_path)
    conn = sqlite3.connect(resolved)
    try:
        _ensure_db(conn)
        conn.execute(
            "INSERT OR REPLACE INTO snapshots (slot, payload, saved_at) VALUES (?, ?, ?)",
            (slot, payload, datetime.now(timezone.utc).isoformat(timespec='seconds')),
        )
        conn.commit()
    finally:
        conn.close()
