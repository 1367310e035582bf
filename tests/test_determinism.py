"""Same inputs and seed must reproduce the exact same battle."""

import os
import random
import tempfile
import unittest
from pathlib import Path

from samurai_duel.engine import BattleEngine
from samurai_duel.loader import load_decks, load_fighters
from samurai_duel.models import AIModifiers
from samurai_duel.replay import ReplayWriter
from samurai_duel.simulation import run_battle, run_to_completion
from samurai_duel.telemetry import BattleTelemetry

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


def _load():
    fighters = load_fighters(os.path.join(DATA_DIR, "fighters.json"))
    decks = load_decks(os.path.join(DATA_DIR, "decks"))
    return fighters, decks


class TestDeterminism(unittest.TestCase):
    def setUp(self):
        self.fighters, self.decks = _load()
        self.ai = AIModifiers(decision_delay=0.3, mistake_chance=0.25)

    def _run(self, seed, **kwargs):
        return run_battle(
            self.fighters["samurai_yuki"], self.decks["deck_tactical"],
            self.fighters["samurai_hiroshi"], self.decks["deck_defensive"],
            player_ai=self.ai, enemy_ai=self.ai, seed=seed, **kwargs,
        )

    def test_same_seed_same_battle(self):
        first = self._run(42)
        for _ in range(5):
            self.assertEqual(self._run(42), first)

    def test_injected_rng_matches_seed(self):
        by_seed = self._run(7)
        engine = BattleEngine(
            self.fighters["samurai_yuki"], self.decks["deck_tactical"],
            self.fighters["samurai_hiroshi"], self.decks["deck_defensive"],
            player_ai=self.ai, enemy_ai=self.ai, rng=random.Random(7),
        )
        run_to_completion(engine)
        self.assertEqual(engine.result(), by_seed)

    def test_observers_do_not_change_outcome(self):
        plain = self._run(3)
        with tempfile.TemporaryDirectory() as td:
            with ReplayWriter(Path(td) / "r.jsonl") as rw:
                observed = self._run(3, telemetry=BattleTelemetry(), replay=rw,
                                     snapshot_every=5)
        self.assertEqual(observed, plain)

    def test_tick_by_tick_state_matches(self):
        engines = [
            BattleEngine(
                self.fighters["samurai_akira"], self.decks["deck_berserker"],
                self.fighters["samurai_takeshi"], self.decks["deck_control"],
                player_ai=self.ai, enemy_ai=self.ai, seed=11,
            )
            for _ in range(2)
        ]
        for eng in engines:
            eng.start()
        for _ in range(600):
            for eng in engines:
                eng.update(1 / 60)
            self.assertEqual(engines[0].snapshot(), engines[1].snapshot())


if __name__ == "__main__":
    unittest.main()
