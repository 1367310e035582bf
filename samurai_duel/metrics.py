"""Aggregation of battle telemetry summaries."""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Any

from samurai_duel.models import EndReason, Winner
from samurai_duel.telemetry import INTENT_KINDS


# Per-seat counters in a telemetry summary (p0 = player, p1 = enemy)
_SEAT_FIELDS = (
    "decisions", "mistakes", "rules_fired", "no_match",
    "attacks_landed", "damage_dealt", "lethal_hits",
    "dashes", "defends_consumed",
    *(f"intent_{k}" for k in INTENT_KINDS),
)

_NUMERIC_KEYS = frozenset(
    {f"p{seat}_{name}" for name in _SEAT_FIELDS for seat in (0, 1)}
    | {"battle_time", "ticks"}
)


def aggregate_battle_summaries(
    summaries: list[dict[str, Any]],
    group_keys: list[str] | None = None,
) -> dict[str, Any]:
    """Aggregate a list of battle telemetry summaries.

    Returns a dict with:
      - "count": number of summaries
      - "overall": {field: {"sum": .., "mean": .., "count": ..}}
      - "outcomes": winner / end-reason tallies and rates, plus each
        seat's share of the damage dealt
      - "by_group" and "outcomes_by_group" keyed by the joined
        group_keys values, when group_keys is given
    """
    result: dict[str, Any] = {
        "count": len(summaries),
        "overall": _field_stats(summaries),
        "outcomes": _outcomes(summaries),
    }
    if not group_keys:
        return result

    groups: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for s in summaries:
        groups["|".join(str(s.get(k, "unknown")) for k in group_keys)].append(s)
    ordered = sorted(groups.items())
    result["by_group"] = {key: _field_stats(members) for key, members in ordered}
    result["outcomes_by_group"] = {key: _outcomes(members) for key, members in ordered}
    return result


def _field_stats(summaries: list[dict[str, Any]]) -> dict[str, Any]:
    if not summaries:
        return {}
    count = len(summaries)
    totals: dict[str, float] = defaultdict(float)
    for s in summaries:
        for key in _NUMERIC_KEYS.intersection(s):
            totals[key] += float(s[key])
    return {
        key: {"sum": total, "mean": round(total / count, 4), "count": count}
        for key, total in sorted(totals.items())
    }


def _outcomes(summaries: list[dict[str, Any]]) -> dict[str, Any]:
    count = len(summaries)
    winners = Counter(s.get("winner") for s in summaries)
    reasons = Counter(s.get("reason") for s in summaries)
    tallies: dict[str, Any] = {w.value: winners[w.value] for w in Winner}
    tallies.update({r.value: reasons[r.value] for r in EndReason})
    if count == 0:
        return tallies

    for key in list(tallies):
        tallies[f"{key}_rate"] = round(tallies[key] / count, 4)

    dealt = [sum(float(s.get(f"p{seat}_damage_dealt", 0)) for s in summaries)
             for seat in (0, 1)]
    total = dealt[0] + dealt[1]
    tallies["player_damage_share"] = round(dealt[0] / total, 4) if total else 0.0
    return tallies
