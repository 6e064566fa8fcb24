#!/usr/bin/env python3
"""
Quick inspector for a Boule save database.
Prints the stored configuration, the board in progress (if any) and the best results per configuration.
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from game import SnapshotDecodeError, db_load_snapshot, decode_snapshot  # noqa: E402

PATH = sys.argv[1] if len(sys.argv) > 1 else os.path.join("data", "boule.db")

payload = db_load_snapshot(PATH)
if payload is None:
    print(f"{PATH}: no snapshot stored")
    sys.exit(0)
print(f"{PATH}: {len(payload)} bytes")

try:
    snap = decode_snapshot(payload)
except SnapshotDecodeError as e:
    print(f"corrupt snapshot: {e}")
    sys.exit(1)

print(f"config: {snap.config.key()}  status: {snap.status.value}")
if snap.next_config is not None:
    print(f"next game: {snap.next_config.key()}")
if snap.board is not None:
    print(snap.board.pretty())
    print(f"moves: {snap.board.play_count}")
for c in snap.ledger.configs():
    print(f"  {c.key():>6}: {snap.ledger.query(c)}")
