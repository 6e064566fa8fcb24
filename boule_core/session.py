from __future__ import annotations

import random
from enum import Enum
from typing import List, Optional

from .board import BoardState
from .config import HISTORY_DISPLAY_LIMIT, Config, validate_config
from .intent import MoveIntent
from .ledger import HistoryLedger
from .log import get_logger

LOGGER = get_logger(__name__)


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    WON = "won"


class GameSession:
    """Lifecycle of one puzzle at a time.

    NOT_STARTED -> PLAYING on start, PLAYING -> WON on the first winning
    move, PLAYING -> NOT_STARTED on abort, and WON -> NOT_STARTED on restart.
    The board is owned by the session and replaced, never reused, when a new
    puzzle starts. The ledger is shared with whoever persists it.

    ``config`` always describes the board in play. A configuration chosen while
    a board exists waits in ``next_config`` until that board is dropped.
    """

    def __init__(self, config: Config, ledger: Optional[HistoryLedger] = None) -> None:
        self.config = validate_config(config.column_count, config.column_capacity)
        self.next_config: Optional[Config] = None
        self.ledger = ledger if ledger is not None else HistoryLedger()
        self.board: Optional[BoardState] = None
        self.status = SessionStatus.NOT_STARTED
        self.dirty = False

    def _touch(self) -> None:
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    def _apply_next_config(self) -> None:
        if self.next_config is not None:
            self.config = self.next_config
            self.next_config = None

    def _drop_board(self) -> None:
        self.board = None
        self.status = SessionStatus.NOT_STARTED
        self._apply_next_config()
        self._touch()

    def set_config(self, config: Config) -> None:
        """Configuration used by the next start; a board in play keeps its own."""
        config = validate_config(config.column_count, config.column_capacity)
        if self.board is None:
            if config != self.config or self.next_config is not None:
                self.config = config
                self.next_config = None
                self._touch()
            return
        pending = None if config == self.config else config
        if pending != self.next_config:
            self.next_config = pending
            self._touch()
            LOGGER.debug("config %s deferred until the next start", config.key())

    def start(self, config: Optional[Config] = None, rng: Optional[random.Random] = None) -> bool:
        if self.status is not SessionStatus.NOT_STARTED:
            LOGGER.debug("start ignored while %s", self.status.value)
            return False
        if config is not None:
            self.set_config(config)
        self._apply_next_config()
        self.board = BoardState.new(self.config.column_count, self.config.column_capacity, rng)
        self.status = SessionStatus.PLAYING
        self._touch()
        LOGGER.info("Puzzle started: %s", self.config.key())
        return True

    def attempt_move(self, intent: MoveIntent) -> bool:
        """Applies a move intent; returns True when the session changed."""
        if self.status is not SessionStatus.PLAYING or self.board is None:
            LOGGER.debug("move ignored while %s", self.status.value)
            return False
        source, target = intent.columns()
        moved = self.board.move_ball(source, target)
        if not moved:
            LOGGER.debug("move %d -> %d had no effect", source, target)
        else:
            self._touch()
        score = self.board.is_winning()
        if score is not None:
            played = Config(self.board.column_count, self.board.column_capacity)
            self.status = SessionStatus.WON
            self.ledger.record(played, score)
            self._touch()
            LOGGER.info("Puzzle %s won in %d moves", played.key(), score)
            return True
        return moved

    def abort(self) -> bool:
        if self.status is not SessionStatus.PLAYING:
            return False
        LOGGER.info("Puzzle aborted: %s", self.config.key())
        self._drop_board()
        return True

    def restart(self, start_new: bool = False, config: Optional[Config] = None,
                rng: Optional[random.Random] = None) -> bool:
        """Discards the current board; optionally deals a new one right away.

        Restarting a puzzle still in play drops it the same way abort does.
        """
        if self.status is SessionStatus.PLAYING:
            self.abort()
        elif self.status is SessionStatus.WON:
            self._drop_board()
        if config is not None:
            self.set_config(config)
        if start_new:
            return self.start(rng=rng)
        return True

    def best_scores(self, limit: int = HISTORY_DISPLAY_LIMIT) -> List[int]:
        return self.ledger.query(self.config, limit)
