"""Data models for the duel simulator: configs, intents, snapshots, results."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BattleState(Enum):
    PREPARING = "PREPARING"
    FIGHTING = "FIGHTING"
    FINISHED = "FINISHED"


class Team(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


class Winner(Enum):
    PLAYER = "player"
    ENEMY = "enemy"
    DRAW = "draw"


class EndReason(Enum):
    KNOCKOUT = "knockout"
    TIMEOUT = "timeout"


class CardKind(Enum):
    CONDITION = "condition"
    ACTION = "action"


class DecisionKind(Enum):
    """What happened when a fighter was asked to decide."""
    WAITING = "waiting"      # decision interval not elapsed
    MISTAKE = "mistake"      # random fallback intent
    RULE = "rule"            # a deck rule fired
    NO_MATCH = "no_match"    # no rule matched, intent kept


# ---------------------------------------------------------------------------
# Intents (frozen dataclasses, one per behavior)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    kind = "idle"


@dataclass(frozen=True)
class Attack:
    target_id: str
    kind = "attack"


@dataclass(frozen=True)
class Retreat:
    speed_multiplier: float = 1.0
    kind = "retreat"


@dataclass(frozen=True)
class Defend:
    damage_reduction: float = 0.5
    kind = "defend"


@dataclass(frozen=True)
class Dash:
    target_id: str
    kind = "dash"


@dataclass(frozen=True)
class Circle:
    kind = "circle"


@dataclass(frozen=True)
class Berserk:
    target_id: str
    damage_multiplier: float = 1.5
    kind = "berserk"


Intent = Union[Idle, Attack, Retreat, Defend, Dash, Circle, Berserk]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _require_number(owner: str, name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{owner}: '{name}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{owner}: '{name}' must be finite, got {value!r}")
    return float(value)


# ---------------------------------------------------------------------------
# Fighter configuration (immutable)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FighterConfig:
    name: str
    max_hp: float
    attack: float
    defense: float
    speed: float            # movement multiplier
    attack_speed: float     # attacks per second
    color: str = "#ffffff"
    icon: str = ""
    fighter_id: str = ""

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        owner = f"Fighter {self.fighter_id or self.name!r}"
        if not self.name:
            raise ValueError(f"{owner}: name must not be empty")
        max_hp = _require_number(owner, "max_hp", self.max_hp)
        attack = _require_number(owner, "attack", self.attack)
        defense = _require_number(owner, "defense", self.defense)
        speed = _require_number(owner, "speed", self.speed)
        attack_speed = _require_number(owner, "attack_speed", self.attack_speed)
        if max_hp <= 0:
            raise ValueError(f"{owner}: max_hp must be > 0, got {max_hp}")
        if attack < 0:
            raise ValueError(f"{owner}: attack must be >= 0, got {attack}")
        if defense < 0:
            raise ValueError(f"{owner}: defense must be >= 0, got {defense}")
        if speed < 0:
            raise ValueError(f"{owner}: speed must be >= 0, got {speed}")
        if attack_speed <= 0:
            raise ValueError(
                f"{owner}: attack_speed must be > 0 (cooldown is 1/attack_speed), "
                f"got {attack_speed}"
            )

    @classmethod
    def from_dict(cls, raw: dict[str, Any], fighter_id: str = "") -> "FighterConfig":
        """Build from the JSON shape ``{name, stats: {...}, color, icon}``.

        Flat dicts (stats at top level) are accepted too.
        """
        stats = raw.get("stats", raw)
        owner = f"Fighter {fighter_id or raw.get('name', '?')!r}"
        if not isinstance(stats, dict):
            raise ValueError(f"{owner}: 'stats' must be an object, got {stats!r}")
        missing = [
            k for k in ("maxHp", "attack", "defense", "speed", "attackSpeed")
            if k not in stats
        ]
        if missing:
            raise ValueError(f"{owner}: missing stats {missing}")
        return cls(
            name=raw.get("name", ""),
            max_hp=stats["maxHp"],
            attack=stats["attack"],
            defense=stats["defense"],
            speed=stats["speed"],
            attack_speed=stats["attackSpeed"],
            color=raw.get("color", "#ffffff"),
            icon=raw.get("icon", ""),
            fighter_id=fighter_id or raw.get("id", ""),
        )


@dataclass(frozen=True)
class AIModifiers:
    decision_delay: float = 0.5     # seconds between deck evaluations
    mistake_chance: float = 0.0     # probability of a random fallback intent
    aggression: float = 0.7         # advisory only

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        owner = "AI modifiers"
        delay = _require_number(owner, "decision_delay", self.decision_delay)
        chance = _require_number(owner, "mistake_chance", self.mistake_chance)
        _require_number(owner, "aggression", self.aggression)
        if delay < 0:
            raise ValueError(f"{owner}: decision_delay must be >= 0, got {delay}")
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"{owner}: mistake_chance must be in [0, 1], got {chance}")

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "AIModifiers":
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValueError(f"AI modifiers must be an object, got {raw!r}")
        defaults = cls()
        return cls(
            decision_delay=raw.get("decisionDelay", defaults.decision_delay),
            mistake_chance=raw.get("mistakeChance", defaults.mistake_chance),
            aggression=raw.get("aggression", defaults.aggression),
        )


# ---------------------------------------------------------------------------
# Deck definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeckRule:
    condition_id: str
    action_id: str


@dataclass(frozen=True)
class DeckDef:
    deck_id: str
    rules: tuple[DeckRule, ...]
    name: str = ""


# ---------------------------------------------------------------------------
# Opponent (fighter + deck + AI tuning)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Opponent:
    opponent_id: str
    name: str
    fighter: FighterConfig
    deck: DeckDef
    ai: AIModifiers
    difficulty: str = ""
    level: int = 1


# ---------------------------------------------------------------------------
# Battle configuration
# ---------------------------------------------------------------------------

MIN_ARENA_SIZE = 200.0


@dataclass
class BattleConfig:
    arena_width: float = 800.0
    arena_height: float = 600.0
    max_battle_time: float = 120.0
    attack_range: float = 40.0
    arena_margin: float = 20.0
    dash_cooldown: float = 2.0
    dash_multiplier: float = 3.0
    orbit_radius: float = 100.0
    orbit_rate: float = 2.0         # radians per simulated second
    snap_distance: float = 5.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in vars(self):
            _require_number("BattleConfig", name, getattr(self, name))
        if self.arena_width < MIN_ARENA_SIZE or self.arena_height < MIN_ARENA_SIZE:
            raise ValueError(
                f"BattleConfig: arena must be at least {MIN_ARENA_SIZE:.0f}x"
                f"{MIN_ARENA_SIZE:.0f}, got {self.arena_width}x{self.arena_height}"
            )
        if self.max_battle_time <= 0:
            raise ValueError(
                f"BattleConfig: max_battle_time must be > 0, got {self.max_battle_time}"
            )
        for name in ("attack_range", "arena_margin", "dash_cooldown",
                     "dash_multiplier", "orbit_radius", "orbit_rate", "snap_distance"):
            if getattr(self, name) < 0:
                raise ValueError(f"BattleConfig: {name} must be >= 0")
        if 2 * self.arena_margin >= min(self.arena_width, self.arena_height):
            raise ValueError("BattleConfig: arena_margin leaves no playable area")

    @classmethod
    def from_json(cls, path: str | Path, **overrides: Any) -> "BattleConfig":
        """Load config from JSON file with optional overrides."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"BattleConfig: {path} must hold a JSON object")
        raw.update({k: v for k, v in overrides.items() if v is not None})
        known = {fld.name for fld in fields(cls)}
        for key in raw:
            if key not in known:
                raise ValueError(f"BattleConfig: unknown field '{key}'")
        return cls(**raw)


# ---------------------------------------------------------------------------
# Snapshots (read-only views for renderers)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FighterSnapshot:
    fighter_id: str
    name: str
    team: str
    x: float
    y: float
    hp: float
    max_hp: float
    is_alive: bool
    intent: str
    color: str
    icon: str
    attack_cooldown: float
    defend_active: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.fighter_id,
            "name": self.name,
            "team": self.team,
            "x": self.x,
            "y": self.y,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "is_alive": self.is_alive,
            "intent": self.intent,
            "color": self.color,
            "icon": self.icon,
            "attack_cooldown": self.attack_cooldown,
            "defend_active": self.defend_active,
        }


@dataclass(frozen=True)
class BattleSnapshot:
    state: BattleState
    battle_time: float
    max_battle_time: float
    player: FighterSnapshot
    enemy: FighterSnapshot

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "battle_time": self.battle_time,
            "max_battle_time": self.max_battle_time,
            "player": self.player.to_dict(),
            "enemy": self.enemy.to_dict(),
        }


# ---------------------------------------------------------------------------
# Battle result (produced once FINISHED)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FighterSummary:
    name: str
    hp_remaining: float
    max_hp: float
    damage_dealt: float
    damage_taken: float
    kills: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "hp_remaining": self.hp_remaining,
            "max_hp": self.max_hp,
            "damage_dealt": self.damage_dealt,
            "damage_taken": self.damage_taken,
            "kills": self.kills,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FighterSummary":
        return cls(
            name=raw["name"],
            hp_remaining=raw["hp_remaining"],
            max_hp=raw["max_hp"],
            damage_dealt=raw["damage_dealt"],
            damage_taken=raw["damage_taken"],
            kills=raw["kills"],
        )


@dataclass(frozen=True)
class BattleResult:
    winner: Winner
    reason: EndReason
    battle_time: float
    player: FighterSummary
    enemy: FighterSummary
    events: tuple[Any, ...] = field(default=())   # tuple[BattleEvent, ...]

    def to_dict(self, include_events: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "winner": self.winner.value,
            "reason": self.reason.value,
            "battle_time": self.battle_time,
            "player": self.player.to_dict(),
            "enemy": self.enemy.to_dict(),
        }
        if include_events:
            data["events"] = [e.to_dict() for e in self.events]
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "BattleResult":
        from samurai_duel.events import BattleEvent
        return cls(
            winner=Winner(raw["winner"]),
            reason=EndReason(raw["reason"]),
            battle_time=raw["battle_time"],
            player=FighterSummary.from_dict(raw["player"]),
            enemy=FighterSummary.from_dict(raw["enemy"]),
            events=tuple(BattleEvent.from_dict(e) for e in raw.get("events", ())),
        )
