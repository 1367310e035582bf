"""Tests for replay recording and playback."""

import json
import os
import tempfile
import unittest
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from samurai_duel.loader import load_decks, load_fighters
from samurai_duel.replay import ReplayWriter, load_replay, render_replay
from samurai_duel.simulation import run_battle

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


def _load_fixtures():
    fighters = load_fighters(os.path.join(DATA_DIR, "fighters.json"))
    decks = load_decks(os.path.join(DATA_DIR, "decks"))
    return fighters, decks


def _run_with_replay(fighters, decks, seed, replay_path, snapshot_every=0):
    """Run a battle with replay enabled and return (result, records)."""
    with ReplayWriter(replay_path) as rw:
        rw.write({
            "type": "meta",
            "seed": seed,
            "fighters": ["Takeshi the Master", "Ryu the Dragon"],
        })
        result = run_battle(
            fighters["samurai_takeshi"], decks["deck_tactical"],
            fighters["samurai_ryu"], decks["deck_berserker"],
            seed=seed, replay=rw, snapshot_every=snapshot_every,
        )
    return result, load_replay(replay_path)


class TestReplayWriter(unittest.TestCase):
    def test_writes_jsonl(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "test.jsonl"
            with ReplayWriter(path) as rw:
                rw.write({"a": 1})
                rw.write({"b": 2})
                self.assertEqual(rw.records_written, 2)
            lines = path.read_text().strip().split("\n")
            self.assertEqual(len(lines), 2)
            self.assertEqual(json.loads(lines[0]), {"a": 1})
            self.assertEqual(json.loads(lines[1]), {"b": 2})

    def test_context_manager_closes(self):
        with tempfile.TemporaryDirectory() as td:
            with ReplayWriter(Path(td) / "x.jsonl") as rw:
                pass
            self.assertTrue(rw.closed)

    def test_write_after_close(self):
        with tempfile.TemporaryDirectory() as td:
            rw = ReplayWriter(Path(td) / "x.jsonl")
            rw.close()
            rw.close()
            with self.assertRaises(RuntimeError):
                rw.write({"a": 1})

    def test_creates_parent_dirs(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "nested" / "dir" / "r.jsonl"
            with ReplayWriter(path) as rw:
                rw.write({"ok": True})
            self.assertTrue(path.exists())


class TestReplayRecording(unittest.TestCase):
    def setUp(self):
        self.fighters, self.decks = _load_fixtures()

    def test_record_order(self):
        with tempfile.TemporaryDirectory() as td:
            _, records = _run_with_replay(self.fighters, self.decks, 4,
                                          Path(td) / "r.jsonl")
        types = [r["type"] for r in records]
        self.assertEqual(types[0], "meta")
        self.assertEqual(types[1], "battle_start")
        self.assertEqual(types[-1], "battle_end")
        self.assertEqual(records[2]["event"], "battle_start")
        self.assertNotIn("tick", types)

    def test_events_match_result(self):
        with tempfile.TemporaryDirectory() as td:
            result, records = _run_with_replay(self.fighters, self.decks, 4,
                                               Path(td) / "r.jsonl")
        events = [r for r in records if r["type"] == "event"]
        self.assertEqual([e["event"] for e in events], [e.type for e in result.events])
        end = records[-1]
        self.assertEqual(end["winner"], result.winner.value)
        self.assertEqual(end["reason"], result.reason.value)
        self.assertNotIn("events", end)

    def test_tick_snapshots(self):
        with tempfile.TemporaryDirectory() as td:
            _, records = _run_with_replay(self.fighters, self.decks, 4,
                                          Path(td) / "r.jsonl", snapshot_every=30)
        ticks = [r for r in records if r["type"] == "tick"]
        self.assertGreater(len(ticks), 0)
        self.assertEqual(ticks[0]["tick"], 30)
        self.assertIn("hp", ticks[0]["player"])

    def test_replay_does_not_change_result(self):
        plain = run_battle(
            self.fighters["samurai_takeshi"], self.decks["deck_tactical"],
            self.fighters["samurai_ryu"], self.decks["deck_berserker"], seed=4,
        )
        with tempfile.TemporaryDirectory() as td:
            recorded, _ = _run_with_replay(self.fighters, self.decks, 4,
                                           Path(td) / "r.jsonl", snapshot_every=1)
        self.assertEqual(recorded, plain)


class TestRenderReplay(unittest.TestCase):
    def setUp(self):
        self.fighters, self.decks = _load_fixtures()

    def _render(self, **kwargs):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "r.jsonl"
            _run_with_replay(self.fighters, self.decks, 9, path, snapshot_every=60)
            with patch("sys.stdout", new_callable=StringIO) as out:
                render_replay(path, **kwargs)
            return out.getvalue()

    def test_full_render(self):
        text = self._render()
        self.assertIn("=== REPLAY: seed=9 ===", text)
        self.assertIn("Takeshi the Master vs Ryu the Dragon", text)
        self.assertIn("Battle begins!", text)
        self.assertIn("--- tick 60", text)
        self.assertIn("=== BATTLE END ===", text)

    def test_compact_hides_ticks(self):
        text = self._render(compact=True)
        self.assertNotIn("--- tick", text)
        self.assertIn("=== BATTLE END ===", text)

    def test_time_window(self):
        text = self._render(from_time=1000.0)
        self.assertNotIn("Battle begins!", text)
        self.assertIn("=== BATTLE END ===", text)


if __name__ == "__main__":
    unittest.main()
