from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .board import BoardState
from .config import Config, validate_config
from .exceptions import BouleError, SnapshotDecodeError
from .ledger import HistoryLedger
from .session import GameSession, SessionStatus

SNAPSHOT_VERSION = 1


@dataclass
class Snapshot:
    """Everything that survives a restart. The dirty flag is not part of it."""
    config: Config
    board: Optional[BoardState]
    ledger: HistoryLedger
    status: SessionStatus = SessionStatus.NOT_STARTED
    next_config: Optional[Config] = None


def snapshot_from_session(session: GameSession) -> Snapshot:
    board = session.board
    if board is not None:
        board = BoardState(board.column_count, board.column_capacity, list(board.slots), board.play_count)
    return Snapshot(config=session.config, board=board, ledger=session.ledger, status=session.status,
                    next_config=session.next_config)


def session_from_snapshot(snapshot: Snapshot) -> GameSession:
    if snapshot.board is None or snapshot.status is SessionStatus.NOT_STARTED:
        return GameSession(snapshot.next_config or snapshot.config, snapshot.ledger)
    session = GameSession(snapshot.config, snapshot.ledger)
    session.board = snapshot.board
    session.status = snapshot.status
    session.next_config = snapshot.next_config
    return session


def _config_to_json(c: Config) -> Dict[str, int]:
    return {"columnCount": c.column_count, "columnCapacity": c.column_capacity}


def board_to_json(b: BoardState) -> Dict[str, Any]:
    return {
        "columnCount": b.column_count,
        "columnCapacity": b.column_capacity,
        "playCount": b.play_count,
        "slots": list(b.slots),
    }


def ledger_to_json(ledger: HistoryLedger) -> List[Dict[str, Any]]:
    return [
        {**_config_to_json(c), "scores": ledger.query(c)}
        for c in ledger.configs()
    ]


def snapshot_to_json(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "config": _config_to_json(snapshot.config),
        "status": snapshot.status.value,
        "nextConfig": _config_to_json(snapshot.next_config) if snapshot.next_config is not None else None,
        "board": board_to_json(snapshot.board) if snapshot.board is not None else None,
        "history": ledger_to_json(snapshot.ledger),
    }


def _int(obj: Dict[str, Any], name: str) -> int:
    value = obj[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotDecodeError(f'{name} must be an integer, got {value!r}')
    return value


def _json_to_config(obj: Dict[str, Any]) -> Config:
    return validate_config(_int(obj, "columnCount"), _int(obj, "columnCapacity"))


def board_from_json(obj: Dict[str, Any]) -> BoardState:
    slots = obj["slots"]
    if not isinstance(slots, list):
        raise SnapshotDecodeError('slots must be a list')
    return BoardState.from_slots(
        _int(obj, "columnCount"),
        _int(obj, "columnCapacity"),
        slots,
        play_count=_int(obj, "playCount"),
    )


def ledger_from_json(entries: List[Dict[str, Any]]) -> HistoryLedger:
    ledger = HistoryLedger()
    for entry in entries:
        config = _json_to_config(entry)
        for score in entry["scores"]:
            if isinstance(score, bool) or not isinstance(score, int):
                raise SnapshotDecodeError(f'score must be an integer, got {score!r}')
            ledger.record(config, score)
    return ledger


def json_to_snapshot(obj: Dict[str, Any]) -> Snapshot:
    try:
        if obj.get("version", SNAPSHOT_VERSION) != SNAPSHOT_VERSION:
            raise SnapshotDecodeError(f'unsupported snapshot version {obj.get("version")!r}')
        config = _json_to_config(obj["config"])
        next_obj = obj.get("nextConfig")
        next_config = _json_to_config(next_obj) if next_obj is not None else None
        board_obj = obj.get("board")
        board = board_from_json(board_obj) if board_obj is not None else None
        ledger = ledger_from_json(obj.get("history", []))
        status_raw = obj.get("status")
        if status_raw is None:
            if board is None:
                status = SessionStatus.NOT_STARTED
            else:
                status = SessionStatus.WON if board.is_winning() is not None else SessionStatus.PLAYING
        else:
            status = SessionStatus(status_raw)
    except SnapshotDecodeError:
        raise
    except (BouleError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotDecodeError(f'bad snapshot: {e}') from e
    if status is not SessionStatus.NOT_STARTED and board is None:
        raise SnapshotDecodeError(f'status {status.value} without a board')
    if board is not None:
        dealt = Config(board.column_count, board.column_capacity)
        if dealt != config:
            raise SnapshotDecodeError(f'config {config.key()} does not match a {dealt.key()} board')
    return Snapshot(config=config, board=board, ledger=ledger, status=status, next_config=next_config)


def encode_snapshot(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_json(snapshot), separators=(",", ":"))


def decode_snapshot(text: str) -> Snapshot:
    try:
        obj = json.loads(text)
    except (TypeError, ValueError) as e:
        raise SnapshotDecodeError(f'snapshot is not JSON: {e}') from e
    if not isinstance(obj, dict):
        raise SnapshotDecodeError('snapshot must be a JSON object')
    return json_to_snapshot(obj)
