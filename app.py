from __future__ import annotations

import os
import random
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from game import (
    MAX_CAPACITY,
    MAX_COLUMNS,
    MIN_CAPACITY,
    MIN_COLUMNS,
    AutosaveDriver,
    ColumnIndexError,
    Config,
    GameSession,
    InvalidMoveIntentError,
    Settings,
    SqliteStorage,
    board_to_json,
    clamp_config,
    ledger_to_json,
    load_session,
    parse_intent,
)
from boule_core.log import configure_logging, get_logger

LOGGER = get_logger(__name__)

app = Flask(__name__)


class Runtime:
    """The single persisted app instance: one session, its storage and autosave driver."""

    def __init__(self, session: GameSession, storage: SqliteStorage, driver: AutosaveDriver,
                 rng: random.Random) -> None:
        self.session = session
        self.storage = storage
        self.driver = driver
        self.rng = rng


_runtime: Optional[Runtime] = None


def init_runtime(db_path: Optional[str] = None, rng: Optional[random.Random] = None,
                 settings: Optional[Settings] = None) -> Runtime:
    """(Re)builds the app instance from storage. Tests call this with a temp DB."""
    global _runtime
    settings = settings or Settings.from_env()
    storage = SqliteStorage(db_path or settings.db_path)
    session = load_session(storage, settings.default_config)
    driver = AutosaveDriver(session, storage, settings.autosave_seconds)
    _runtime = Runtime(session, storage, driver, rng or random.Random())
    return _runtime


def get_runtime() -> Runtime:
    if _runtime is None:
        return init_runtime()
    return _runtime


def _error(message: str, status: int = 400) -> Any:
    return jsonify({"ok": False, "error": message}), status


def _config_to_json(c: Config) -> Dict[str, int]:
    return {"columnCount": c.column_count, "columnCapacity": c.column_capacity}


def state_to_json(session: GameSession) -> Dict[str, Any]:
    board = session.board
    tops = None
    if board is not None:
        tops = [board.first_ball(col) for col in range(board.column_count)]
    return {
        "config": _config_to_json(session.config),
        "nextConfig": _config_to_json(session.next_config) if session.next_config is not None else None,
        "status": session.status.value,
        "board": board_to_json(board) if board is not None else None,
        "tops": tops,
        "score": board.is_winning() if board is not None else None,
        "best": session.best_scores(),
    }


def _json_object() -> Optional[Dict[str, Any]]:
    """The request body as a JSON object; an empty body counts as {}."""
    body = request.get_json(force=True, silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _upcoming_config(session: GameSession) -> Config:
    return session.next_config or session.config


def _config_from_body(body: Dict[str, Any], current: Config) -> Optional[Config]:
    if "columnCount" not in body and "columnCapacity" not in body:
        return None
    return clamp_config(
        body.get("columnCount", current.column_count),
        body.get("columnCapacity", current.column_capacity),
    )


def _rng_from_body(body: Dict[str, Any], rt: Runtime) -> random.Random:
    seed = body.get("seed")
    return random.Random(seed) if seed is not None else rt.rng


@app.after_request
def _autosave(response: Any) -> Any:
    if _runtime is not None:
        _runtime.driver.tick()
    return response


@app.get("/")
def index() -> Any:
    return jsonify({
        "ok": True,
        "name": "boule",
        "limits": {
            "columnCount": [MIN_COLUMNS, MAX_COLUMNS],
            "columnCapacity": [MIN_CAPACITY, MAX_CAPACITY],
        },
    })


@app.get("/api/state")
def api_state() -> Any:
    rt = get_runtime()
    return jsonify({"ok": True, "state": state_to_json(rt.session)})


@app.post("/api/config")
def api_config() -> Any:
    rt = get_runtime()
    body = _json_object()
    if body is None:
        return _error("request body must be a JSON object")
    try:
        config = _config_from_body(body, _upcoming_config(rt.session))
    except (TypeError, ValueError, OverflowError) as e:
        return _error(f"bad config: {e}")
    if config is None:
        return _error("columnCount or columnCapacity required")
    rt.session.set_config(config)
    return jsonify({"ok": True, "state": state_to_json(rt.session)})


@app.post("/api/new")
def api_new() -> Any:
    rt = get_runtime()
    body = _json_object()
    if body is None:
        return _error("request body must be a JSON object")
    try:
        config = _config_from_body(body, _upcoming_config(rt.session))
        rng = _rng_from_body(body, rt)
    except (TypeError, ValueError, OverflowError) as e:
        return _error(f"bad request: {e}")
    rt.session.restart(start_new=True, config=config, rng=rng)
    return jsonify({"ok": True, "state": state_to_json(rt.session)})


@app.post("/api/move")
def api_move() -> Any:
    rt = get_runtime()
    body = request.get_json(force=True, silent=True)
    try:
        intent = parse_intent(body)
        changed = rt.session.attempt_move(intent)
    except InvalidMoveIntentError as e:
        return _error(str(e))
    except ColumnIndexError as e:
        return _error(str(e))
    return jsonify({"ok": True, "changed": changed, "state": state_to_json(rt.session)})


@app.post("/api/abort")
def api_abort() -> Any:
    rt = get_runtime()
    changed = rt.session.abort()
    return jsonify({"ok": True, "changed": changed, "state": state_to_json(rt.session)})


@app.post("/api/restart")
def api_restart() -> Any:
    rt = get_runtime()
    body = _json_object()
    if body is None:
        return _error("request body must be a JSON object")
    try:
        config = _config_from_body(body, _upcoming_config(rt.session))
        rng = _rng_from_body(body, rt)
    except (TypeError, ValueError, OverflowError) as e:
        return _error(f"bad request: {e}")
    rt.session.restart(start_new=bool(body.get("start", False)), config=config, rng=rng)
    return jsonify({"ok": True, "state": state_to_json(rt.session)})


@app.get("/api/history")
def api_history() -> Any:
    rt = get_runtime()
    ledger = rt.session.ledger
    if "columnCount" in request.args or "columnCapacity" in request.args:
        try:
            config = Config(
                int(request.args.get("columnCount", rt.session.config.column_count)),
                int(request.args.get("columnCapacity", rt.session.config.column_capacity)),
            )
        except ValueError as e:
            return _error(f"bad config: {e}")
        return jsonify({"ok": True, "config": _config_to_json(config), "scores": ledger.top(config)})
    return jsonify({"ok": True, "history": ledger_to_json(ledger)})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    configure_logging()
    debug = os.getenv("FLASK_DEBUG", os.getenv("BOULE_DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    init_runtime()
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", "5000")), debug=debug)
