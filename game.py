from __future__ import annotations

# Facade module that re-exports the Boule core.
# The Flask app, the tools and the tests import from here; the
# single-responsibility modules live under boule_core/*.

from boule_core.board import EMPTY, BoardState, Slot, slot_glyph
from boule_core.config import (
    HISTORY_DISPLAY_LIMIT,
    MAX_CAPACITY,
    MAX_COLUMNS,
    MIN_CAPACITY,
    MIN_COLUMNS,
    PALETTE_SIZE,
    Config,
    Settings,
    clamp_config,
    validate_config,
)
from boule_core.exceptions import (
    BouleError,
    ColumnIndexError,
    InvalidConfigurationError,
    InvalidMoveIntentError,
    SnapshotDecodeError,
)
from boule_core.intent import ColumnMoveIntent, MoveIntent, SlotMoveIntent, parse_intent
from boule_core.ledger import HistoryLedger
from boule_core.session import GameSession, SessionStatus
from boule_core.snapshot import (
    Snapshot,
    board_from_json,
    board_to_json,
    decode_snapshot,
    encode_snapshot,
    ledger_to_json,
    session_from_snapshot,
    snapshot_from_session,
    snapshot_to_json,
)
from boule_core.db import db_load_snapshot, db_save_snapshot
from boule_core.persistence import AutosaveDriver, SqliteStorage, load_session, save_session


def main() -> None:
    # CLI driver delegated to boule_core.cli
    from boule_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
