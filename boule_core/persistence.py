from __future__ import annotations

import sqlite3
import time
from typing import Callable, Optional

from .config import Config
from .db import db_load_snapshot, db_save_snapshot
from .exceptions import SnapshotDecodeError
from .log import get_logger
from .session import GameSession
from .snapshot import decode_snapshot, encode_snapshot, session_from_snapshot, snapshot_from_session

LOGGER = get_logger(__name__)


class SqliteStorage:
    """Storage capability handed to session management: opaque load/save of one payload."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def load(self) -> Optional[str]:
        return db_load_snapshot(self.db_path)

    def save(self, payload: str) -> None:
        db_save_snapshot(self.db_path, payload)


def load_session(storage: SqliteStorage, default_config: Config) -> GameSession:
    """Restores the saved session, or a fresh one when nothing usable is stored."""
    try:
        payload = storage.load()
    except (sqlite3.Error, OSError) as e:
        LOGGER.warning("Could not read saved state (%s), starting fresh", e)
        return GameSession(default_config)
    if payload is None:
        return GameSession(default_config)
    try:
        snapshot = decode_snapshot(payload)
    except SnapshotDecodeError as e:
        LOGGER.warning("Saved state is corrupt (%s), starting fresh", e)
        return GameSession(default_config)
    session = session_from_snapshot(snapshot)
    LOGGER.info("Restored %s session for %s", session.status.value, session.config.key())
    return session


def save_session(storage: SqliteStorage, session: GameSession) -> None:
    storage.save(encode_snapshot(snapshot_from_session(session)))
    session.mark_clean()


class AutosaveDriver:
    """Decides when to flush: right away when the session is dirty, otherwise every ``interval`` seconds."""

    def __init__(self, session: GameSession, storage: SqliteStorage, interval: float = 30.0,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.session = session
        self.storage = storage
        self.interval = interval
        self.clock = clock
        self.last_save = clock()

    def flush(self) -> bool:
        try:
            save_session(self.storage, self.session)
        except (sqlite3.Error, OSError) as e:
            LOGGER.error("Saving state failed: %s", e)
            return False
        self.last_save = self.clock()
        LOGGER.debug("State saved to %s", self.storage.db_path)
        return True

    def tick(self) -> bool:
        """Returns True when a save happened."""
        if self.session.dirty or self.clock() - self.last_save >= self.interval:
            return self.flush()
        return False
