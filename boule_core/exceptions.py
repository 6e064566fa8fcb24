"""Exception hierarchy for the puzzle engine."""


class BouleError(Exception):
    """Base exception for engine failures."""


class InvalidConfigurationError(BouleError, ValueError):
    """Raised when a board is requested with fewer than one column or row."""


class ColumnIndexError(BouleError, IndexError):
    """Raised when a row or column index falls outside the board."""


class InvalidMoveIntentError(BouleError, ValueError):
    """Raised when a move intent payload cannot be understood."""


class SnapshotDecodeError(BouleError, ValueError):
    """Raised when a persisted snapshot is corrupt or undecodable."""
