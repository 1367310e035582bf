"""Battle telemetry – per-battle counters collected through engine hooks."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TYPE_CHECKING

from samurai_duel.models import DecisionKind

if TYPE_CHECKING:
    from samurai_duel.engine import BattleEngine
    from samurai_duel.models import BattleResult, Intent


@dataclass
class TelemetryConfig:
    enabled: bool = True
    save_battle_summaries: bool = False
    output_path: str | None = None


INTENT_KINDS = ("idle", "attack", "retreat", "defend", "dash", "circle", "berserk")


class BattleTelemetry:
    """Collects per-battle statistics via on_*() hooks called from the engine.

    All counters are per-fighter lists [player, enemy].
    """

    def __init__(self) -> None:
        self.decisions: list[int] = [0, 0]
        self.mistakes: list[int] = [0, 0]
        self.rules_fired: list[int] = [0, 0]
        self.no_match: list[int] = [0, 0]
        self.attacks_landed: list[int] = [0, 0]
        self.damage_dealt: list[float] = [0.0, 0.0]
        self.lethal_hits: list[int] = [0, 0]
        self.dashes: list[int] = [0, 0]
        self.defends_consumed: list[int] = [0, 0]
        self.intent_counts: list[dict[str, int]] = [
            {k: 0 for k in INTENT_KINDS}, {k: 0 for k in INTENT_KINDS},
        ]

        self._battle_time: float = 0.0
        self._ticks: int = 0
        self._winner: str = ""
        self._reason: str = ""
        self._names: list[str] = ["", ""]

    # ------------------------------------------------------------------
    # Hook methods – called by engine.py
    # ------------------------------------------------------------------

    def on_battle_start(self, engine: "BattleEngine") -> None:
        self._names = [engine.player.name, engine.enemy.name]

    def on_decision(self, idx: int, kind: DecisionKind, intent: "Intent") -> None:
        if kind is DecisionKind.WAITING:
            return
        self.decisions[idx] += 1
        if kind is DecisionKind.MISTAKE:
            self.mistakes[idx] += 1
        elif kind is DecisionKind.RULE:
            self.rules_fired[idx] += 1
        else:
            self.no_match[idx] += 1
        self.intent_counts[idx][intent.kind] += 1

    def on_attack(self, idx: int, damage: float, lethal: bool) -> None:
        self.attacks_landed[idx] += 1
        self.damage_dealt[idx] += damage
        if lethal:
            self.lethal_hits[idx] += 1

    def on_dash(self, idx: int) -> None:
        self.dashes[idx] += 1

    def on_defend_consumed(self, idx: int) -> None:
        self.defends_consumed[idx] += 1

    def on_battle_end(self, engine: "BattleEngine", result: "BattleResult") -> None:
        self._battle_time = result.battle_time
        self._ticks = engine.tick_count
        self._winner = result.winner.value
        self._reason = result.reason.value

    # ------------------------------------------------------------------
    # Summary export
    # ------------------------------------------------------------------

    def to_summary(self) -> dict[str, Any]:
        """Return a flat dict summarizing this battle's telemetry."""
        summary: dict[str, Any] = {
            "battle_time": round(self._battle_time, 6),
            "ticks": self._ticks,
            "winner": self._winner,
            "reason": self._reason,
            "p0_name": self._names[0],
            "p1_name": self._names[1],
        }
        per_fighter_fields = [
            "decisions", "mistakes", "rules_fired", "no_match",
            "attacks_landed", "damage_dealt", "lethal_hits",
            "dashes", "defends_consumed",
        ]
        for fname in per_fighter_fields:
            vals = getattr(self, fname)
            for pi in range(2):
                summary[f"p{pi}_{fname}"] = vals[pi]
        for pi in range(2):
            for kind, count in self.intent_counts[pi].items():
                summary[f"p{pi}_intent_{kind}"] = count
        return summary


def save_summaries(summaries: list[dict[str, Any]], config: TelemetryConfig) -> Path | None:
    """Write summaries as JSON if the config asks for it. Returns the path written."""
    if not (config.enabled and config.save_battle_summaries and config.output_path):
        return None
    path = Path(config.output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summaries, f, indent=2, ensure_ascii=False)
    return path
