import json
import os
import random
import tempfile
import unittest
from unittest import mock

from game import (
    BoardState,
    ColumnMoveIntent,
    Config,
    GameSession,
    SessionStatus,
    SnapshotDecodeError,
    board_from_json,
    board_to_json,
    db_load_snapshot,
    db_save_snapshot,
    decode_snapshot,
    encode_snapshot,
    session_from_snapshot,
    snapshot_from_session,
)


def _playing_session():
    session = GameSession(Config(5, 4))
    session.start(rng=random.Random(11))
    moved = 0
    for a, b in [(0, 4), (1, 4), (2, 4), (4, 0)]:
        moved += int(session.attempt_move(ColumnMoveIntent(a, b)))
    session.ledger.record(Config(6, 7), 40)
    session.ledger.record(Config(6, 7), 25)
    session.ledger.record(Config(3, 3), 9)
    return session, moved


class TestSnapshotAndDb(unittest.TestCase):
    def test_given_board_when_roundtrip_json_then_equal(self):
        board = BoardState.from_slots(3, 2, [None, 0, 1, 1, None, 0], play_count=4)
        bj = board_to_json(board)
        self.assertEqual(bj["columnCount"], 3)
        self.assertEqual(bj["playCount"], 4)
        self.assertEqual(bj["slots"], [None, 0, 1, 1, None, 0])
        self.assertEqual(board_from_json(bj), board)

    def test_given_playing_session_when_roundtrip_snapshot_then_board_and_ledger_equal(self):
        session, moved = _playing_session()
        self.assertGreater(moved, 0)
        text = encode_snapshot(snapshot_from_session(session))
        restored = session_from_snapshot(decode_snapshot(text))

        self.assertIs(restored.status, SessionStatus.PLAYING)
        self.assertEqual(restored.config, Config(5, 4))
        self.assertEqual(restored.board, session.board)
        self.assertEqual(restored.board.play_count, moved)
        self.assertEqual(restored.ledger, session.ledger)
        self.assertEqual(restored.ledger.query(Config(6, 7)), [25, 40])
        self.assertFalse(restored.dirty)

    def test_given_snapshot_when_taken_then_board_is_a_copy(self):
        session, _ = _playing_session()
        snap = snapshot_from_session(session)
        session.attempt_move(ColumnMoveIntent(3, 4))
        self.assertIsNot(snap.board, session.board)

    def test_given_not_started_session_when_encoded_then_board_is_null(self):
        session = GameSession(Config(4, 4))
        obj = json.loads(encode_snapshot(snapshot_from_session(session)))
        self.assertIsNone(obj["board"])
        self.assertEqual(obj["status"], "not_started")
        self.assertNotIn("dirty", obj)

    def test_given_missing_status_when_decoding_then_inferred_from_board(self):
        obj = {
            "config": {"columnCount": 3, "columnCapacity": 2},
            "board": {"columnCount": 3, "columnCapacity": 2, "playCount": 6, "slots": [0, 0, 1, 1, None, None]},
        }
        snap = decode_snapshot(json.dumps(obj))
        self.assertIs(snap.status, SessionStatus.WON)
        obj["board"]["slots"] = [None, 0, 1, 1, None, 0]
        self.assertIs(decode_snapshot(json.dumps(obj)).status, SessionStatus.PLAYING)

    def test_given_corrupt_payloads_when_decoding_then_snapshot_decode_error(self):
        good = json.loads(encode_snapshot(snapshot_from_session(_playing_session()[0])))
        broken = [
            "",
            "not json",
            "[1, 2]",
            json.dumps({**good, "version": 99}),
            json.dumps({**good, "config": {"columnCount": 0, "columnCapacity": 4}}),
            json.dumps({**good, "config": {"columnCount": "5", "columnCapacity": 4}}),
            json.dumps({**good, "config": {"columnCount": 9, "columnCapacity": 9}}),
            json.dumps({**good, "config": {"columnCount": 5, "columnCapacity": 5}}),
            json.dumps({**good, "nextConfig": {"columnCount": -1, "columnCapacity": 4}}),
            json.dumps({**good, "board": {**good["board"], "slots": [1, 2]}}),
            json.dumps({**good, "board": {**good["board"], "playCount": -3}}),
            json.dumps({**good, "status": "paused"}),
            json.dumps({**good, "status": "playing", "board": None}),
            json.dumps({**good, "history": [{"columnCount": 3, "columnCapacity": 3, "scores": ["x"]}]}),
            json.dumps({**good, "history": [{"columnCount": 3, "columnCapacity": 3, "scores": [-4]}]}),
            json.dumps({**good, "history": [{"columnCount": 3}]}),
            json.dumps({"board": None}),
        ]
        for text in broken:
            with self.assertRaises(SnapshotDecodeError, msg=text[:60]):
                decode_snapshot(text)

    def test_given_pending_config_when_roundtrip_snapshot_then_kept_apart_from_board(self):
        session, _ = _playing_session()
        session.set_config(Config(7, 3))
        obj = json.loads(encode_snapshot(snapshot_from_session(session)))
        self.assertEqual(obj["config"], {"columnCount": 5, "columnCapacity": 4})
        self.assertEqual(obj["nextConfig"], {"columnCount": 7, "columnCapacity": 3})

        restored = session_from_snapshot(decode_snapshot(json.dumps(obj)))
        self.assertEqual(restored.config, Config(5, 4))
        self.assertEqual(restored.next_config, Config(7, 3))
        self.assertEqual(restored.board.column_count, 5)

        # Without a board in play the pending size is simply the current one.
        obj["board"] = None
        obj["status"] = "not_started"
        idle = session_from_snapshot(decode_snapshot(json.dumps(obj)))
        self.assertEqual(idle.config, Config(7, 3))
        self.assertIsNone(idle.next_config)

    def test_given_payload_when_store_then_load_returns_saved_value(self):
        with tempfile.TemporaryDirectory() as td:
            db_path = os.path.join(td, "boule.db")
            self.assertIsNone(db_load_snapshot(db_path))
            db_save_snapshot(db_path, '{"a": 1}')
            db_save_snapshot(db_path, '{"a": 2}')
            self.assertEqual(db_load_snapshot(db_path), '{"a": 2}')

    def test_given_nested_path_when_store_then_directories_created_and_load_ok(self):
        with tempfile.TemporaryDirectory() as td:
            nested = os.path.join(td, "deep", "nest", "file.db")
            db_save_snapshot(nested, "payload")
            self.assertTrue(os.path.isfile(nested))
            self.assertEqual(db_load_snapshot(nested), "payload")

    def test_given_unusable_directory_when_store_then_falls_back_to_db_dir(self):
        with tempfile.TemporaryDirectory() as td:
            blocker = os.path.join(td, "blocker")
            with open(blocker, "w") as fh:
                fh.write("not a directory")
            fallback = os.path.join(td, "fallback")
            db_path = os.path.join(blocker, "boule.db")
            with mock.patch.dict(os.environ, {"BOULE_DB_DIR": fallback}):
                with self.assertLogs("boule_core.db", level="WARNING"):
                    db_save_snapshot(db_path, "payload")
                self.assertTrue(os.path.isfile(os.path.join(fallback, "boule.db")))
                self.assertEqual(db_load_snapshot(db_path), "payload")


if __name__ == "__main__":
    unittest.main(verbosity=2)
