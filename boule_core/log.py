"""Console logging for the engine, the Flask surface and the CLI.

Modules ask for ``get_logger(__name__)``; the first request installs the boule
console handler on the root logger unless something else already configured it.
"""

from __future__ import annotations

import logging
from typing import IO, Optional

from .config import _env_flag

_HANDLER_NAME = "boule-console"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def default_level() -> int:
    return logging.DEBUG if _env_flag('BOULE_DEBUG') else logging.INFO


def configure_logging(level: Optional[int] = None, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Installs (or replaces) the boule console handler on the root logger.

    Handlers added by other code, such as Flask or a test runner, are left in
    place. ``BOULE_DEBUG`` picks the level when ``level`` is omitted.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(default_level() if level is None else level)
    return handler


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)
