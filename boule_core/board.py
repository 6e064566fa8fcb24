from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import PALETTE_SIZE, validate_config
from .exceptions import ColumnIndexError, InvalidConfigurationError

Slot = Optional[int]  # None is an empty slot, an int is a ball's color index
EMPTY: Slot = None

_GLYPHS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'[:PALETTE_SIZE]


def slot_glyph(slot: Slot) -> str:
    """Single character for a slot: palette letter, lowercase for the second variant."""
    if slot is None:
        return '.'
    glyph = _GLYPHS[slot % PALETTE_SIZE]
    return glyph.lower() if (slot // PALETTE_SIZE) % 2 else glyph


@dataclass
class BoardState:
    """The grid of columns.

    Slots are stored column-major: slot (row, column) lives at
    ``column * column_capacity + row``. Row 0 is the open end of a column and
    row ``column_capacity - 1`` its bottom; balls always rest on the bottom.
    """
    column_count: int
    column_capacity: int
    slots: List[Slot] = field(default_factory=list)
    play_count: int = 0

    @classmethod
    def new(cls, column_count: int, column_capacity: int, rng: Optional[random.Random] = None) -> 'BoardState':
        """Deals a fresh board: one color per column, shuffled, last column left free."""
        validate_config(column_count, column_capacity)
        rng = rng or random.Random()
        slots: List[Slot] = [EMPTY] * (column_count * column_capacity)
        color_count = column_count - 1
        for col in range(color_count):
            for row in range(column_capacity):
                slots[col * column_capacity + row] = col
        filled = slots[:color_count * column_capacity]
        rng.shuffle(filled)
        slots[:color_count * column_capacity] = filled
        return cls(column_count=column_count, column_capacity=column_capacity, slots=slots)

    @classmethod
    def from_slots(cls, column_count: int, column_capacity: int, slots: Sequence[Slot], play_count: int = 0) -> 'BoardState':
        """Rebuilds a board from stored slots, checking size and gravity."""
        validate_config(column_count, column_capacity)
        if len(slots) != column_count * column_capacity:
            raise InvalidConfigurationError(
                f'expected {column_count * column_capacity} slots, got {len(slots)}'
            )
        if play_count < 0:
            raise InvalidConfigurationError(f'play_count must be >= 0, got {play_count}')
        for slot in slots:
            if slot is not None and (isinstance(slot, bool) or not isinstance(slot, int) or slot < 0):
                raise InvalidConfigurationError(f'bad slot value: {slot!r}')
        board = cls(column_count=column_count, column_capacity=column_capacity, slots=list(slots), play_count=play_count)
        for col in range(column_count):
            if not board._settled(col):
                raise InvalidConfigurationError(f'column {col} has a gap under its top ball')
        return board

    def _check(self, row: int, column: int) -> None:
        if not (0 <= column < self.column_count):
            raise ColumnIndexError(f'column {column} out of range 0..{self.column_count - 1}')
        if not (0 <= row < self.column_capacity):
            raise ColumnIndexError(f'row {row} out of range 0..{self.column_capacity - 1}')

    def _index(self, row: int, column: int) -> int:
        self._check(row, column)
        return column * self.column_capacity + row

    def slot(self, row: int, column: int) -> Slot:
        return self.slots[self._index(row, column)]

    def column(self, column: int) -> List[Slot]:
        """Slots of one column, top row first."""
        start = self._index(0, column)
        return self.slots[start:start + self.column_capacity]

    def _settled(self, column: int) -> bool:
        seen_ball = False
        for slot in self.column(column):
            if slot is not None:
                seen_ball = True
            elif seen_ball:
                return False
        return True

    def ball_count(self) -> int:
        return sum(1 for slot in self.slots if slot is not None)

    def is_top(self, row: int, column: int) -> bool:
        """True for the one movable ball of a column."""
        if self.slot(row, column) is None:
            return False
        return all(self.slot(r, column) is None for r in range(row))

    def first_empty(self, column: int) -> Optional[int]:
        """Row a ball pushed onto ``column`` lands in, or None when it is full."""
        for row in range(self.column_capacity - 1, -1, -1):
            if self.slot(row, column) is None:
                return row
        return None

    def first_ball(self, column: int) -> Optional[int]:
        """Row of the topmost ball of ``column``, or None when it is empty."""
        for row in range(self.column_capacity):
            if self.slot(row, column) is not None:
                return row
        return None

    def move_ball(self, source: int, destination: int) -> bool:
        """Moves the top ball of ``source`` onto ``destination``.

        Any ball may land on any column that has room; colors do not have to
        match. Returns False and leaves the board untouched when the move has
        no effect.
        """
        self._check(0, source)
        self._check(0, destination)
        if source == destination:
            return False
        from_row = self.first_ball(source)
        if from_row is None:
            return False
        to_row = self.first_empty(destination)
        if to_row is None:
            return False
        src = self._index(from_row, source)
        self.slots[self._index(to_row, destination)] = self.slots[src]
        self.slots[src] = EMPTY
        self.play_count += 1
        return True

    def is_winning(self) -> Optional[int]:
        """Returns play_count when every column holds a single value, else None."""
        for col in range(self.column_count):
            cells = self.column(col)
            if any(cell != cells[0] for cell in cells[1:]):
                return None
        return self.play_count

    def pretty(self) -> str:
        """Generates a human-readable dump, top row first, column numbers underneath."""
        lines: List[str] = []
        for row in range(self.column_capacity):
            lines.append(' '.join(slot_glyph(self.slot(row, col)) for col in range(self.column_count)))
        lines.append(' '.join(str(col % 10) for col in range(self.column_count)))
        return '\n'.join(lines)
