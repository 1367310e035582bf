"""JSON content loading and validation – fighters, decks, opponents."""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Mapping

from samurai_duel.cards import CARD_LIBRARY, Card
from samurai_duel.models import (
    AIModifiers, CardKind, DeckDef, DeckRule, FighterConfig, Opponent,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_FIGHTERS = DATA_DIR / "fighters.json"
DEFAULT_DECKS = DATA_DIR / "decks"
DEFAULT_OPPONENTS = DATA_DIR / "opponents.json"


def _read_json(path: str | Path) -> Any:
    with open(Path(path), encoding="utf-8") as f:
        return json.load(f)


def _read_entries(path: str | Path, what: str) -> list[dict[str, Any]]:
    entries = _read_json(path)
    if not isinstance(entries, list):
        raise ValueError(f"{path}: expected a JSON list of {what} entries")
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"{path}: {what} entry {i} must be an object, got {entry!r}")
    return entries


def load_fighters(path: str | Path = DEFAULT_FIGHTERS) -> dict[str, FighterConfig]:
    fighters: dict[str, FighterConfig] = {}
    for entry in _read_entries(path, "fighter"):
        fighter_id = entry.get("id")
        if not fighter_id or not isinstance(fighter_id, str):
            raise ValueError(f"Fighter entry without a string id: {entry!r}")
        if fighter_id in fighters:
            raise ValueError(f"Duplicate fighter id '{fighter_id}'")
        fighters[fighter_id] = FighterConfig.from_dict(entry, fighter_id=fighter_id)
    return fighters


def deck_from_dict(
    raw: dict[str, Any],
    library: Mapping[str, Card] = CARD_LIBRARY,
) -> DeckDef:
    """Build a deck, warning (not failing) on unknown card ids."""
    if not isinstance(raw, dict):
        raise ValueError(f"Deck must be a JSON object, got {raw!r}")
    deck_id = raw.get("deck_id")
    if not deck_id or not isinstance(deck_id, str):
        raise ValueError(f"Deck without a string deck_id: {raw!r}")
    entries = raw.get("rules")
    if not isinstance(entries, list):
        raise ValueError(f"Deck {deck_id}: 'rules' must be a list")

    rules: list[DeckRule] = []
    for i, e in enumerate(entries):
        if not isinstance(e, dict) or "conditionId" not in e or "actionId" not in e:
            raise ValueError(
                f"Deck {deck_id}: rule {i} must have conditionId and actionId, got {e!r}"
            )
        if not isinstance(e["conditionId"], str) or not isinstance(e["actionId"], str):
            raise ValueError(f"Deck {deck_id}: rule {i} ids must be strings, got {e!r}")
        rule = DeckRule(condition_id=e["conditionId"], action_id=e["actionId"])
        _check_rule(deck_id, i, rule, library)
        rules.append(rule)

    return DeckDef(deck_id=deck_id, rules=tuple(rules), name=raw.get("name", deck_id))


def _check_rule(deck_id: str, i: int, rule: DeckRule, library: Mapping[str, Card]) -> None:
    for card_id, kind in ((rule.condition_id, CardKind.CONDITION),
                          (rule.action_id, CardKind.ACTION)):
        card = library.get(card_id)
        if card is None:
            warnings.warn(
                f"Deck {deck_id}: rule {i} references unknown card '{card_id}'; "
                "the rule will never fire.",
                stacklevel=3,
            )
        elif card.kind is not kind:
            warnings.warn(
                f"Deck {deck_id}: rule {i} uses '{card_id}' as {kind.value} "
                f"but it is a {card.kind.value} card; the rule will never fire.",
                stacklevel=3,
            )


def load_deck(
    path: str | Path,
    library: Mapping[str, Card] = CARD_LIBRARY,
) -> DeckDef:
    return deck_from_dict(_read_json(path), library)


def load_decks(
    directory: str | Path = DEFAULT_DECKS,
    library: Mapping[str, Card] = CARD_LIBRARY,
) -> dict[str, DeckDef]:
    decks: dict[str, DeckDef] = {}
    for path in sorted(Path(directory).glob("*.json")):
        deck = load_deck(path, library)
        if deck.deck_id in decks:
            raise ValueError(f"Duplicate deck id '{deck.deck_id}' in {path}")
        decks[deck.deck_id] = deck
    return decks


def _resolve_fighter(
    opp_id: str, raw: Any, fighters: dict[str, FighterConfig],
) -> FighterConfig:
    if isinstance(raw, str):
        if raw not in fighters:
            raise ValueError(f"Opponent {opp_id}: unknown fighter '{raw}'")
        return fighters[raw]

    if not isinstance(raw, dict):
        raise ValueError(f"Opponent {opp_id}: invalid fighter {raw!r}")

    # Inline fighter, optionally overriding a base fighter
    merged: dict[str, Any] = {}
    base_id = raw.get("base")
    if base_id is not None:
        if not isinstance(base_id, str) or base_id not in fighters:
            raise ValueError(f"Opponent {opp_id}: unknown base fighter '{base_id}'")
        base = fighters[base_id]
        merged = {
            "name": base.name,
            "color": base.color,
            "icon": base.icon,
            "stats": {
                "maxHp": base.max_hp,
                "attack": base.attack,
                "defense": base.defense,
                "speed": base.speed,
                "attackSpeed": base.attack_speed,
            },
        }
    for key, value in raw.items():
        if key == "stats":
            if not isinstance(value, dict):
                raise ValueError(f"Opponent {opp_id}: 'stats' must be an object")
            merged["stats"] = {**merged.get("stats", {}), **value}
        elif key != "base":
            merged[key] = value
    return FighterConfig.from_dict(merged, fighter_id=f"{opp_id}_fighter")


def load_opponents(
    path: str | Path = DEFAULT_OPPONENTS,
    fighters: dict[str, FighterConfig] | None = None,
    decks: dict[str, DeckDef] | None = None,
) -> dict[str, Opponent]:
    fighters = fighters if fighters is not None else load_fighters()
    decks = decks if decks is not None else load_decks()

    opponents: dict[str, Opponent] = {}
    for entry in _read_entries(path, "opponent"):
        opp_id = entry.get("id")
        if not opp_id or not isinstance(opp_id, str):
            raise ValueError(f"Opponent entry without a string id: {entry!r}")
        deck_id = entry.get("deck")
        if not isinstance(deck_id, str) or deck_id not in decks:
            raise ValueError(f"Opponent {opp_id}: unknown deck '{deck_id}'")
        opponents[opp_id] = Opponent(
            opponent_id=opp_id,
            name=entry.get("name", opp_id),
            fighter=_resolve_fighter(opp_id, entry.get("fighter"), fighters),
            deck=decks[deck_id],
            ai=AIModifiers.from_dict(entry.get("aiModifiers")),
            difficulty=entry.get("difficulty", ""),
            level=int(entry.get("level", 1)),
        )
    return opponents
