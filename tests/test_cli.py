"""Smoke tests for the command line entry point."""

import json
import os
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch

from samurai_duel.cli import main


def _run(argv):
    with patch("sys.stdout", new_callable=StringIO) as out:
        main(argv)
    return out.getvalue()


class TestCli(unittest.TestCase):
    def test_cards(self):
        text = _run(["cards"])
        self.assertIn("IF cards:", text)
        self.assertIn("cond_always", text)
        self.assertIn("act_berserk", text)

    def test_play(self):
        with tempfile.TemporaryDirectory() as td:
            replay = os.path.join(td, "r.jsonl")
            tele = os.path.join(td, "t.json")
            text = _run(["play", "--fighter", "samurai_yuki", "--deck", "deck_tactical",
                         "--opponent", "opp_newbie", "--seed", "3",
                         "--replay", replay, "--telemetry-out", tele])
            self.assertTrue(os.path.exists(replay))
            self.assertTrue(os.path.exists(tele))
        self.assertIn("Winner:", text)
        self.assertIn("Battle begins!", text)
        self.assertIn("Replay written to:", text)

    def test_unknown_fighter_exits(self):
        with patch("sys.stderr", new_callable=StringIO) as err:
            with self.assertRaises(SystemExit) as ctx:
                _run(["play", "--fighter", "nobody", "--deck", "deck_tactical",
                      "--opponent", "opp_newbie"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("unknown fighter", err.getvalue())

    def test_bad_config_exits(self):
        with tempfile.TemporaryDirectory() as td:
            cfg = os.path.join(td, "cfg.json")
            with open(cfg, "w") as f:
                json.dump({"arena_widht": 800}, f)
            with patch("sys.stderr", new_callable=StringIO) as err:
                with self.assertRaises(SystemExit) as ctx:
                    _run(["play", "--fighter", "samurai_yuki", "--deck", "deck_tactical",
                          "--opponent", "opp_newbie", "--config", cfg])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("unknown field 'arena_widht'", err.getvalue())

    def test_simulate_then_stats(self):
        with tempfile.TemporaryDirectory() as td:
            text = _run(["simulate", "--contenders", "samurai_kenji:deck_aggressive",
                         "samurai_ryu:deck_control", "--battles", "2",
                         "--output", td])
            self.assertIn("Simulation Results  (2 battles)", text)
            logs = os.path.join(td, "battle_logs.json")
            self.assertTrue(os.path.exists(logs))
            stats = _run(["stats", "--logs", logs])
        self.assertIn("samurai_kenji:deck_aggressive", stats)

    def test_bad_contender(self):
        with patch("sys.stderr", new_callable=StringIO):
            with self.assertRaises(SystemExit) as ctx:
                _run(["simulate", "--contenders", "samurai_kenji"])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
