"""Tests for battle telemetry hooks and summaries."""

import json
import os
import tempfile
import unittest

from samurai_duel import events as ev
from samurai_duel.engine import BattleEngine
from samurai_duel.loader import load_decks, load_fighters
from samurai_duel.models import AIModifiers, DeckDef, DeckRule, FighterConfig, Team
from samurai_duel.simulation import run_to_completion
from samurai_duel.telemetry import (
    INTENT_KINDS, BattleTelemetry, TelemetryConfig, save_summaries,
)

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


def _cfg(name, **stats):
    base = dict(max_hp=100, attack=10, defense=0, speed=1.0, attack_speed=1.0)
    base.update(stats)
    return FighterConfig(name=name, **base)


class TestBattleTelemetry(unittest.TestCase):
    def _run(self, seed=0):
        fighters = load_fighters(os.path.join(DATA_DIR, "fighters.json"))
        decks = load_decks(os.path.join(DATA_DIR, "decks"))
        tm = BattleTelemetry()
        eng = BattleEngine(
            fighters["samurai_akira"], decks["deck_aggressive"],
            fighters["samurai_kenji"], decks["deck_defensive"],
            enemy_ai=AIModifiers(mistake_chance=0.2), seed=seed, telemetry=tm,
        )
        run_to_completion(eng)
        return eng, tm

    def test_summary_keys(self):
        _, tm = self._run()
        summary = tm.to_summary()
        for key in ("battle_time", "ticks", "winner", "reason", "p0_name", "p1_name",
                    "p0_decisions", "p1_attacks_landed", "p0_dashes",
                    "p1_defends_consumed"):
            self.assertIn(key, summary)
        for kind in INTENT_KINDS:
            self.assertIn(f"p0_intent_{kind}", summary)

    def test_counters_match_battle(self):
        eng, tm = self._run(3)
        summary = tm.to_summary()
        result = eng.result()
        self.assertEqual(summary["winner"], result.winner.value)
        self.assertEqual(summary["ticks"], eng.tick_count)
        self.assertEqual(summary["p0_name"], "Akira the Berserker")

        attacks = eng.events.of_type(ev.ATTACK)
        self.assertEqual(summary["p0_attacks_landed"] + summary["p1_attacks_landed"],
                         len(attacks))
        self.assertAlmostEqual(summary["p0_damage_dealt"], result.player.damage_dealt)
        for p in ("p0", "p1"):
            self.assertEqual(
                summary[f"{p}_decisions"],
                summary[f"{p}_mistakes"] + summary[f"{p}_rules_fired"]
                + summary[f"{p}_no_match"],
            )
            self.assertEqual(
                summary[f"{p}_decisions"],
                sum(summary[f"{p}_intent_{k}"] for k in INTENT_KINDS),
            )
        self.assertEqual(summary["p0_mistakes"], 0)
        self.assertGreater(summary["p0_dashes"], 0)

    def test_defend_consumed_counted(self):
        tm = BattleTelemetry()
        eng = BattleEngine(
            _cfg("A", attack=20), DeckDef("a", (DeckRule("cond_always", "act_attack_closest"),)),
            _cfg("B", speed=0.0), DeckDef("d", (DeckRule("cond_always", "act_defend"),)),
            player_ai=AIModifiers(decision_delay=1.0),
            enemy_ai=AIModifiers(decision_delay=0.0),
            seed=0, telemetry=tm,
        )
        eng.place(Team.PLAYER, 400, 300)
        eng.place(Team.ENEMY, 400, 300)
        eng.start()
        while eng.tick_count < 12:
            eng.update(0.1)
        # Defend re-arms every tick, so the first hit is halved
        self.assertEqual(tm.attacks_landed[0], 1)
        self.assertEqual(tm.defends_consumed[1], 1)
        self.assertEqual(eng.enemy.hp, 90)


class TestSaveSummaries(unittest.TestCase):
    def test_disabled_writes_nothing(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "t.json")
            self.assertIsNone(save_summaries([{}], TelemetryConfig(output_path=path)))
            self.assertFalse(os.path.exists(path))

    def test_writes_json(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "sub", "t.json")
            cfg = TelemetryConfig(save_battle_summaries=True, output_path=path)
            written = save_summaries([{"ticks": 3}], cfg)
            self.assertEqual(str(written), path)
            with open(path, encoding="utf-8") as f:
                self.assertEqual(json.load(f), [{"ticks": 3}])


if __name__ == "__main__":
    unittest.main()
