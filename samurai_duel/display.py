"""CLI display – snapshots, event logs, results and batch stats."""

from __future__ import annotations

from typing import Any, Iterable

from samurai_duel.cards import Card
from samurai_duel.events import BattleEvent
from samurai_duel.models import BattleResult, BattleSnapshot, CardKind, FighterSnapshot


def _hp_bar(hp: float, max_hp: float, width: int = 20) -> str:
    filled = round(width * hp / max_hp) if max_hp > 0 else 0
    return "#" * filled + "." * (width - filled)


def _fighter_line(f: FighterSnapshot) -> str:
    status = "" if f.is_alive else "  [DOWN]"
    guard = " (guard)" if f.defend_active else ""
    return (f"  {f.team:6s} {f.name:24s} [{_hp_bar(f.hp, f.max_hp)}] "
            f"{f.hp:6.1f}/{f.max_hp:g}  pos=({f.x:5.0f},{f.y:5.0f})  "
            f"{f.intent}{guard}{status}")


def render_snapshot(snap: BattleSnapshot) -> None:
    print(f"\n{'='*60}")
    print(f"  {snap.state.value}  |  t={snap.battle_time:6.2f}s / {snap.max_battle_time:g}s")
    print(f"{'='*60}")
    print(_fighter_line(snap.player))
    print(_fighter_line(snap.enemy))
    print()


def render_events(events: Iterable[BattleEvent]) -> None:
    for e in events:
        print(f"  [{e.time:7.2f}s] {e.type:16s} {e.message}")


def render_result(result: BattleResult) -> None:
    print(f"\n{'='*60}")
    print(f"  Winner: {result.winner.value}  (reason: {result.reason.value})  "
          f"time={result.battle_time:.2f}s")
    print(f"{'='*60}")
    for label, s in (("player", result.player), ("enemy", result.enemy)):
        print(f"  {label:6s} {s.name:24s} HP={s.hp_remaining:g}/{s.max_hp:g}  "
              f"dealt={s.damage_dealt:g}  taken={s.damage_taken:g}  kills={s.kills}")
    print()


def render_stats(stats: dict[str, Any]) -> None:
    print(f"\n{'='*60}")
    print(f"  Simulation Results  ({stats['total_battles']} battles)")
    print(f"{'='*60}")

    for cid, cs in stats["contenders"].items():
        print(f"  {cid:20s}  W={cs['wins']:4d}  L={cs['losses']:4d}  "
              f"D={cs['draws']:4d}  WR={cs['win_rate']:5.1f}%  "
              f"KO={cs['knockouts']:4d}  avg={cs['mean_battle_time']:6.2f}s")

    print(f"\n  Player side wins: {stats['player_side_wins']}  |  "
          f"Enemy side wins: {stats['enemy_side_wins']}  |  "
          f"Draws: {stats['draws']}  |  Timeouts: {stats['timeouts']}")
    print()


def render_cards(cards: Iterable[Card]) -> None:
    cards = list(cards)
    for kind, label in ((CardKind.CONDITION, "IF"), (CardKind.ACTION, "DO")):
        print(f"\n  {label} cards:")
        for c in cards:
            if c.kind is kind:
                print(f"    {c.id:22s} {c.name:18s} {c.description}")
    print()
