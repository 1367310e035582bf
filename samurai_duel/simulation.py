"""Headless battle runs, round-robin batch simulation and aggregation."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from itertools import combinations
from pathlib import Path
from typing import Any, TYPE_CHECKING

from samurai_duel.engine import BattleEngine
from samurai_duel.metrics import aggregate_battle_summaries
from samurai_duel.models import (
    AIModifiers, BattleConfig, BattleResult, BattleState, DeckDef, EndReason,
    FighterConfig, Opponent, Winner,
)
from samurai_duel.telemetry import BattleTelemetry

if TYPE_CHECKING:
    from samurai_duel.replay import ReplayWriter

DEFAULT_DT = 1.0 / 60.0


@dataclass(frozen=True)
class Contender:
    """A fighter paired with the deck and AI tuning that drive it."""
    contender_id: str
    fighter: FighterConfig
    deck: DeckDef
    ai: AIModifiers = field(default_factory=AIModifiers)

    @classmethod
    def from_opponent(cls, opponent: Opponent) -> "Contender":
        return cls(opponent.opponent_id, opponent.fighter, opponent.deck, opponent.ai)


@dataclass
class BattleRecord:
    battle_id: int
    seed: int
    contender_ids: tuple[str, str]
    result: BattleResult
    ticks: int
    telemetry: dict[str, Any] | None = None


def _check_dt(dt: float) -> None:
    if not math.isfinite(dt) or dt <= 0:
        raise ValueError(f"dt must be a positive finite number, got {dt}")


def run_to_completion(engine: BattleEngine, dt: float = DEFAULT_DT) -> int:
    """Start (if needed) and tick an engine until FINISHED. Returns ticks run."""
    _check_dt(dt)
    engine.start()
    max_ticks = math.ceil(engine.max_battle_time / dt) + 2
    ticks = 0
    while engine.state is not BattleState.FINISHED and ticks < max_ticks:
        engine.update(dt)
        ticks += 1
    return ticks


def run_battle(
    player: FighterConfig,
    player_deck: DeckDef,
    enemy: FighterConfig,
    enemy_deck: DeckDef,
    *,
    player_ai: AIModifiers | None = None,
    enemy_ai: AIModifiers | None = None,
    config: BattleConfig | None = None,
    seed: int = 0,
    dt: float = DEFAULT_DT,
    telemetry: BattleTelemetry | None = None,
    replay: "ReplayWriter | None" = None,
    snapshot_every: int = 0,
) -> BattleResult:
    engine = BattleEngine(
        player, player_deck, enemy, enemy_deck,
        player_ai=player_ai, enemy_ai=enemy_ai, config=config, seed=seed,
        telemetry=telemetry, replay=replay, snapshot_every=snapshot_every,
    )
    run_to_completion(engine, dt)
    return engine.result()


def run_batch(
    contenders: list[Contender],
    n_battles: int,
    base_seed: int,
    dt: float = DEFAULT_DT,
    config: BattleConfig | None = None,
    output_dir: str | Path | None = None,
    telemetry_enabled: bool = False,
    trace: bool = False,
) -> list[BattleRecord]:
    """Run round-robin battles between all contender pairs."""
    _check_dt(dt)
    records: list[BattleRecord] = []
    pairs = list(combinations(range(len(contenders)), 2))

    battle_id = 0
    for i, j in pairs:
        a, b = contenders[i], contenders[j]
        for _ in range(n_battles):
            seed = base_seed + battle_id
            tm = BattleTelemetry() if telemetry_enabled else None
            engine = BattleEngine(
                a.fighter, a.deck, b.fighter, b.deck,
                player_ai=a.ai, enemy_ai=b.ai, config=config, seed=seed,
                telemetry=tm,
            )
            ticks = run_to_completion(engine, dt)
            summary = None
            if tm is not None:
                summary = tm.to_summary()
                summary["player_id"] = a.contender_id
                summary["enemy_id"] = b.contender_id
            records.append(BattleRecord(
                battle_id=battle_id,
                seed=seed,
                contender_ids=(a.contender_id, b.contender_id),
                result=engine.result(),
                ticks=ticks,
                telemetry=summary,
            ))
            battle_id += 1

    if output_dir is not None:
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        write_records(records, out / "battle_logs.json", include_events=trace)
        if telemetry_enabled:
            summaries = [r.telemetry for r in records if r.telemetry is not None]
            _write_json(out / "telemetry_summaries.json", summaries)
            _write_json(out / "telemetry_metrics.json",
                        aggregate_battle_summaries(summaries, ["player_id", "enemy_id"]))

    return records


def _write_json(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def write_records(
    records: list[BattleRecord], path: str | Path, include_events: bool = False,
) -> None:
    data = [
        {
            "battle_id": r.battle_id,
            "seed": r.seed,
            "contender_ids": list(r.contender_ids),
            "ticks": r.ticks,
            "result": r.result.to_dict(include_events=include_events),
        }
        for r in records
    ]
    _write_json(Path(path), data)


def load_records(path: str | Path) -> list[BattleRecord]:
    with open(Path(path), encoding="utf-8") as f:
        raw = json.load(f)
    return [
        BattleRecord(
            battle_id=entry["battle_id"],
            seed=entry["seed"],
            contender_ids=tuple(entry["contender_ids"]),  # type: ignore[arg-type]
            result=BattleResult.from_dict(entry["result"]),
            ticks=entry.get("ticks", 0),
        )
        for entry in raw
    ]


def aggregate(records: list[BattleRecord]) -> dict[str, Any]:
    """Per-contender win rates, end reasons and seat stats."""
    stats: dict[str, dict[str, float]] = {}
    seat_wins = {Winner.PLAYER: 0, Winner.ENEMY: 0, Winner.DRAW: 0}
    knockouts = 0

    for r in records:
        c0, c1 = r.contender_ids
        for cid in (c0, c1):
            if cid not in stats:
                stats[cid] = {"wins": 0, "losses": 0, "draws": 0, "games": 0,
                              "knockouts": 0, "timeouts": 0, "time_total": 0.0}
            stats[cid]["games"] += 1
            stats[cid]["time_total"] += r.result.battle_time
            if r.result.reason is EndReason.KNOCKOUT:
                stats[cid]["knockouts"] += 1
            else:
                stats[cid]["timeouts"] += 1

        seat_wins[r.result.winner] += 1
        if r.result.reason is EndReason.KNOCKOUT:
            knockouts += 1

        if r.result.winner is Winner.PLAYER:
            stats[c0]["wins"] += 1
            stats[c1]["losses"] += 1
        elif r.result.winner is Winner.ENEMY:
            stats[c1]["wins"] += 1
            stats[c0]["losses"] += 1
        else:
            stats[c0]["draws"] += 1
            stats[c1]["draws"] += 1

    result: dict[str, Any] = {
        "contenders": {},
        "total_battles": len(records),
        "draws": seat_wins[Winner.DRAW],
        "player_side_wins": seat_wins[Winner.PLAYER],
        "enemy_side_wins": seat_wins[Winner.ENEMY],
        "knockouts": knockouts,
        "timeouts": len(records) - knockouts,
    }
    for cid, s in sorted(stats.items()):
        games = int(s["games"])
        result["contenders"][cid] = {
            "games": games,
            "wins": int(s["wins"]),
            "losses": int(s["losses"]),
            "draws": int(s["draws"]),
            "win_rate": round(s["wins"] / games * 100, 1) if games else 0,
            "knockouts": int(s["knockouts"]),
            "timeouts": int(s["timeouts"]),
            "mean_battle_time": round(s["time_total"] / games, 3) if games else 0,
        }
    return result
