from __future__ import annotations

import argparse
import random
from typing import Optional, Tuple

from .config import Settings, clamp_config
from .intent import ColumnMoveIntent
from .log import configure_logging
from .persistence import AutosaveDriver, SqliteStorage, load_session
from .session import GameSession, SessionStatus


def _parse_move(text: str) -> Optional[Tuple[int, int]]:
    sep = ',' if ',' in text else ' '
    parts = [t for t in text.split(sep) if t != '']
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def _print_history(session: GameSession) -> None:
    scores = session.best_scores()
    label = session.config.key()
    print(f"Best results for {label}: {', '.join(map(str, scores)) if scores else 'none yet'}")


def main() -> None:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description='Boule ball-sorting puzzle')
    parser.add_argument('--columns', type=int, default=None, help='Column count (1..14)')
    parser.add_argument('--capacity', type=int, default=None, help='Balls per column (2..20)')
    parser.add_argument('--db', default=settings.db_path, help='SQLite DB file path')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the shuffle')
    parser.add_argument('--history', action='store_true', help='Print best results and exit')
    args = parser.parse_args()

    configure_logging()
    storage = SqliteStorage(args.db)
    session = load_session(storage, settings.default_config)
    if args.columns is not None or args.capacity is not None:
        session.set_config(clamp_config(
            args.columns if args.columns is not None else session.config.column_count,
            args.capacity if args.capacity is not None else session.config.column_capacity,
        ))
        if session.next_config is not None:
            print(f"Finish or quit the saved {session.config.key()} puzzle to play {session.next_config.key()}.")
    driver = AutosaveDriver(session, storage, settings.autosave_seconds)

    if args.history:
        _print_history(session)
        return

    rng = random.Random(args.seed)
    if session.status is not SessionStatus.PLAYING:
        session.restart(start_new=True, rng=rng)
    driver.tick()
    print('Move the top ball of one column onto another; "q" gives up.')

    while session.status is SessionStatus.PLAYING and session.board is not None:
        board = session.board
        print(board.pretty())
        print(f'Moves: {board.play_count}')
        text = input('Enter a move as from,to or from to: ').strip()
        if text.lower() in ('q', 'quit'):
            session.abort()
            driver.tick()
            print('Puzzle abandoned.')
            return
        move = _parse_move(text)
        if move is None:
            print('Could not parse. Try again.')
            continue
        source, destination = move
        if not (0 <= source < board.column_count and 0 <= destination < board.column_count):
            print(f'Columns go from 0 to {board.column_count - 1}.')
            continue
        if not session.attempt_move(ColumnMoveIntent(source, destination)):
            print('That move has no effect.')
        driver.tick()

    if session.board is not None:
        print(session.board.pretty())
    print(f'You won in {session.board.play_count if session.board else 0} moves!')
    _print_history(session)
