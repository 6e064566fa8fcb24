import json
import os
import random
import tempfile
import unittest

import app as app_mod             # noqa: E402
from app import app as flask_app  # noqa: E402
from game import BoardState, Config, SqliteStorage, db_save_snapshot  # noqa: E402


class TestFlaskAPIEdges(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._td.name, "boule.db")
        self._orig_runtime = app_mod._runtime
        self.rt = app_mod.init_runtime(db_path=self.db_path, rng=random.Random(5))
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod._runtime = self._orig_runtime
        self._td.cleanup()

    def _post(self, path, payload):
        return self.client.post(path, data=json.dumps(payload), content_type="application/json")

    def test_given_not_started_when_moving_then_ignored_without_error(self):
        r = self._post("/api/move", {"from": 0, "to": 1})
        self.assertEqual(r.status_code, 200)
        d = r.get_json()
        self.assertTrue(d["ok"])
        self.assertFalse(d["changed"])

    def test_given_full_destination_when_moving_then_no_effect(self):
        self._post("/api/new", {"columnCount": 4, "columnCapacity": 3, "seed": 2})
        d = self._post("/api/move", {"from": 0, "to": 1}).get_json()
        self.assertFalse(d["changed"])
        self.assertEqual(d["state"]["board"]["playCount"], 0)

    def test_given_malformed_intent_when_moving_then_400(self):
        self._post("/api/new", {"columnCount": 4, "columnCapacity": 3})
        r = self._post("/api/move", {"from": "left", "to": 1})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.get_json()["ok"])

        r2 = self.client.post("/api/move", data="nope", content_type="application/json")
        self.assertEqual(r2.status_code, 400)

    def test_given_column_out_of_range_when_moving_then_400(self):
        self._post("/api/new", {"columnCount": 4, "columnCapacity": 3})
        r = self._post("/api/move", {"from": 0, "to": 9})
        self.assertEqual(r.status_code, 400)
        self.assertIn("column", r.get_json()["error"])

    def test_given_non_numeric_config_when_posting_then_400(self):
        r = self._post("/api/new", {"columnCount": "many"})
        self.assertEqual(r.status_code, 400)
        r2 = self._post("/api/config", {})
        self.assertEqual(r2.status_code, 400)
        r3 = self.client.get("/api/history?columnCount=x")
        self.assertEqual(r3.status_code, 400)

    def test_given_non_object_body_when_posting_then_400(self):
        for path in ("/api/new", "/api/config", "/api/restart", "/api/move"):
            r = self.client.post(path, data="[1]", content_type="application/json")
            self.assertEqual(r.status_code, 400, path)
            self.assertFalse(r.get_json()["ok"])
        self.assertEqual(self.rt.session.status.value, "not_started")

    def test_given_huge_number_when_posting_then_400(self):
        for path in ("/api/new", "/api/config", "/api/restart"):
            r = self.client.post(path, data='{"columnCount": 1e400}', content_type="application/json")
            self.assertEqual(r.status_code, 400, path)
        self._post("/api/new", {"columnCount": 4, "columnCapacity": 3})
        r = self.client.post("/api/move", data='{"from": 1e400, "to": 0}', content_type="application/json")
        self.assertEqual(r.status_code, 400)

    def test_given_config_change_mid_game_when_won_then_state_and_history_follow_played_board(self):
        self._post("/api/new", {"columnCount": 3, "columnCapacity": 2, "seed": 1})
        self.rt.session.board = BoardState.from_slots(3, 2, [None, 0, 1, 1, None, 0], play_count=2)

        state = self._post("/api/config", {"columnCount": 5, "columnCapacity": 4}).get_json()["state"]
        self.assertEqual(state["config"], {"columnCount": 3, "columnCapacity": 2})
        self.assertEqual(state["nextConfig"], {"columnCount": 5, "columnCapacity": 4})
        self.assertEqual(state["board"]["columnCount"], 3)

        state = self._post("/api/move", {"from": 2, "to": 0}).get_json()["state"]
        self.assertEqual(state["status"], "won")
        self.assertEqual(state["best"], [3])
        h = self.client.get("/api/history").get_json()["history"]
        self.assertEqual(h, [{"columnCount": 3, "columnCapacity": 2, "scores": [3]}])

        state = self._post("/api/new", {}).get_json()["state"]
        self.assertEqual(state["config"], {"columnCount": 5, "columnCapacity": 4})
        self.assertIsNone(state["nextConfig"])
        self.assertEqual(state["board"]["columnCount"], 5)
        self.assertEqual(state["best"], [])

    def test_given_corrupt_saved_state_when_starting_then_fresh_session(self):
        db_save_snapshot(self.db_path, "garbage")
        rt = app_mod.init_runtime(db_path=self.db_path)
        self.assertEqual(rt.session.status.value, "not_started")
        d = self.client.get("/api/state").get_json()
        self.assertEqual(d["state"]["status"], "not_started")
        self.assertEqual(d["state"]["best"], [])
        # The next save replaces the corrupt payload.
        self._post("/api/new", {"columnCount": 3, "columnCapacity": 3})
        self.assertNotEqual(SqliteStorage(self.db_path).load(), "garbage")
        self.assertEqual(rt.session.config, Config(3, 3))


if __name__ == "__main__":
    unittest.main(verbosity=2)
