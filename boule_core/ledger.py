from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set

from .config import HISTORY_DISPLAY_LIMIT, Config


class HistoryLedger:
    """Move counts of past wins, per configuration.

    Each configuration keeps a set of scores, so solving a puzzle twice in the
    same number of moves is recorded once. Entries are never removed.
    """

    def __init__(self) -> None:
        self._scores: Dict[Config, Set[int]] = {}

    def record(self, config: Config, score: int) -> None:
        if score < 0:
            raise ValueError(f'score must be >= 0, got {score}')
        self._scores.setdefault(config, set()).add(int(score))

    def query(self, config: Config, limit: Optional[int] = None) -> List[int]:
        """Ascending scores for ``config``; ``limit`` keeps only the lowest ones."""
        ordered = sorted(self._scores.get(config, ()))
        return ordered if limit is None else ordered[:limit]

    def top(self, config: Config) -> List[int]:
        return self.query(config, HISTORY_DISPLAY_LIMIT)

    def configs(self) -> List[Config]:
        return sorted(self._scores)

    def __iter__(self) -> Iterator[Config]:
        return iter(self.configs())

    def __len__(self) -> int:
        return len(self._scores)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistoryLedger):
            return NotImplemented
        return self._scores == other._scores
