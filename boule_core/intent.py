from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .exceptions import InvalidMoveIntentError

SlotCoord = Tuple[int, int]  # (row, column)


@dataclass(frozen=True)
class SlotMoveIntent:
    """Version 1 payload: the dragged slot and the slot it was released over."""
    source: SlotCoord
    destination: SlotCoord
    version: int = 1

    def columns(self) -> Tuple[int, int]:
        return self.source[1], self.destination[1]


@dataclass(frozen=True)
class ColumnMoveIntent:
    """Version 2 payload: only the two column indices."""
    source: int
    destination: int
    version: int = 2

    def columns(self) -> Tuple[int, int]:
        return self.source, self.destination


MoveIntent = Union[SlotMoveIntent, ColumnMoveIntent]


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidMoveIntentError(f'{what} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidMoveIntentError(f'{what} must be an integer, got {value!r}') from None


def _as_coord(value: Any, what: str) -> SlotCoord:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise InvalidMoveIntentError(f'{what} must be a [row, column] pair')
    return _as_int(value[0], f'{what} row'), _as_int(value[1], f'{what} column')


def parse_intent(payload: Dict[str, Any]) -> MoveIntent:
    """Builds a move intent from a decoded JSON body. Version defaults to 2."""
    if not isinstance(payload, dict):
        raise InvalidMoveIntentError('move intent must be an object')
    version = _as_int(payload.get('version', 2), 'version')
    if 'from' not in payload or 'to' not in payload:
        raise InvalidMoveIntentError("move intent needs 'from' and 'to'")
    if version == 1:
        return SlotMoveIntent(_as_coord(payload['from'], 'from'), _as_coord(payload['to'], 'to'))
    if version == 2:
        return ColumnMoveIntent(_as_int(payload['from'], 'from'), _as_int(payload['to'], 'to'))
    raise InvalidMoveIntentError(f'unsupported move intent version {version}')
