"""Card library – condition (IF) and action (DO) cards, decorator-based registry.

Cards are immutable records holding a pure function. The library is built
once at import time and shared read-only by every battle.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Sequence, TYPE_CHECKING

from samurai_duel.geometry import distance_between, nearest, stable_max, stable_min
from samurai_duel.models import (
    Attack, Berserk, CardKind, Circle, Dash, Defend, Idle, Intent, Retreat,
)

if TYPE_CHECKING:
    from samurai_duel.fighter import BattleFighter

Fighters = Sequence["BattleFighter"]
ConditionFn = Callable[["BattleFighter", Fighters, Fighters], bool]
ActionFn = Callable[["BattleFighter", Fighters, Fighters], Intent]

# Default thresholds used by the bundled decks
HP_LOW_RATIO = 0.4
HP_CRITICAL_RATIO = 0.2
HP_HEALTHY_RATIO = 0.7
CLOSE_DISTANCE = 150.0
FAR_DISTANCE = 300.0
FAST_RETREAT_MULTIPLIER = 2.0
DEFEND_REDUCTION = 0.5
BERSERK_MULTIPLIER = 1.5


@dataclass(frozen=True)
class Card:
    id: str
    kind: CardKind
    name: str
    description: str
    icon: str
    fn: Callable[..., object]

    @property
    def is_condition(self) -> bool:
        return self.kind is CardKind.CONDITION

    def check(self, me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
        return bool(self.fn(me, enemies, allies))

    def execute(self, me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
        return self.fn(me, enemies, allies)  # type: ignore[return-value]


_REGISTRY: dict[str, Card] = {}

CARD_LIBRARY: Mapping[str, Card] = MappingProxyType(_REGISTRY)


def _register(card: Card) -> Card:
    if card.id in _REGISTRY:
        raise ValueError(f"Duplicate card id: {card.id}")
    _REGISTRY[card.id] = card
    return card


def register_condition(card_id: str, name: str, description: str, icon: str = ""):
    """Decorator to register a condition predicate."""
    def decorator(fn: ConditionFn) -> ConditionFn:
        _register(Card(card_id, CardKind.CONDITION, name, description, icon, fn))
        return fn
    return decorator


def register_action(card_id: str, name: str, description: str, icon: str = ""):
    """Decorator to register an action producing an Intent."""
    def decorator(fn: ActionFn) -> ActionFn:
        _register(Card(card_id, CardKind.ACTION, name, description, icon, fn))
        return fn
    return decorator


def get_card(card_id: str) -> Card | None:
    return _REGISTRY.get(card_id)


def list_cards(kind: CardKind | None = None) -> list[Card]:
    return [c for c in _REGISTRY.values() if kind is None or c.kind is kind]


# ---------------------------------------------------------------------------
# Condition factories
# ---------------------------------------------------------------------------

def hp_below(ratio: float) -> ConditionFn:
    def check(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
        return me.hp / me.max_hp < ratio
    return check


def hp_above(ratio: float) -> ConditionFn:
    def check(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
        return me.hp / me.max_hp > ratio
    return check


def _nearest_distance(me: "BattleFighter", enemies: Fighters) -> float | None:
    target = nearest(me, enemies)
    if target is None:
        return None
    return distance_between(me, target)


def enemy_closer_than(limit: float) -> ConditionFn:
    def check(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
        dist = _nearest_distance(me, enemies)
        return dist is not None and dist < limit
    return check


def enemy_farther_than(limit: float) -> ConditionFn:
    def check(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
        dist = _nearest_distance(me, enemies)
        return dist is not None and dist > limit
    return check


# ---------------------------------------------------------------------------
# Condition cards (IF)
# ---------------------------------------------------------------------------

register_condition("cond_hp_low", "HP Low", "If HP < 40%", "💔")(hp_below(HP_LOW_RATIO))
register_condition("cond_hp_critical", "HP Critical", "If HP < 20%", "☠️")(
    hp_below(HP_CRITICAL_RATIO))
register_condition("cond_hp_healthy", "HP Healthy", "If HP > 70%", "💚")(
    hp_above(HP_HEALTHY_RATIO))
register_condition("cond_enemy_close", "Enemy Close", "If enemy distance < 150", "⚔️")(
    enemy_closer_than(CLOSE_DISTANCE))
register_condition("cond_enemy_far", "Enemy Far", "If enemy distance > 300", "🏃")(
    enemy_farther_than(FAR_DISTANCE))


@register_condition("cond_outnumbered", "Outnumbered", "If enemies > allies", "😰")
def _outnumbered(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
    return len(enemies) > len(allies)


@register_condition("cond_advantage", "Advantage", "If allies > enemies", "💪")
def _advantage(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
    return len(allies) > len(enemies)


@register_condition("cond_alone", "Alone", "If no allies nearby", "🗿")
def _alone(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
    return len(allies) == 0


@register_condition("cond_always", "Always", "Always true", "♾️")
def _always(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> bool:
    return True


# ---------------------------------------------------------------------------
# Action cards (DO)
# ---------------------------------------------------------------------------

@register_action("act_attack_closest", "Attack Closest", "Attack nearest enemy", "⚔️")
def _attack_closest(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    target = nearest(me, enemies)
    if target is None:
        return Idle()
    return Attack(target_id=target.fighter_id)


@register_action("act_attack_weakest", "Attack Weakest", "Attack enemy with lowest HP", "🎯")
def _attack_weakest(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    target = stable_min(enemies, key=lambda e: e.hp)
    if target is None:
        return Idle()
    return Attack(target_id=target.fighter_id)


@register_action("act_attack_strongest", "Attack Strongest",
                 "Attack enemy with highest HP", "💀")
def _attack_strongest(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    target = stable_max(enemies, key=lambda e: e.hp)
    if target is None:
        return Idle()
    return Attack(target_id=target.fighter_id)


@register_action("act_retreat", "Retreat", "Move away from enemies", "🏃")
def _retreat(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    return Retreat(speed_multiplier=1.0)


@register_action("act_fast_retreat", "Fast Retreat", "Quickly move away", "💨")
def _fast_retreat(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    return Retreat(speed_multiplier=FAST_RETREAT_MULTIPLIER)


@register_action("act_defend", "Defend", "Block incoming damage (50%)", "🛡️")
def _defend(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    return Defend(damage_reduction=DEFEND_REDUCTION)


@register_action("act_dash", "Dash", "Quick dash to closest enemy", "⚡")
def _dash(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    target = nearest(me, enemies)
    if target is None:
        return Idle()
    return Dash(target_id=target.fighter_id)


@register_action("act_circle", "Circle", "Circle around enemy", "🔄")
def _circle(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    return Circle()


@register_action("act_berserk", "Berserk", "Aggressive attack (x1.5 damage)", "😡")
def _berserk(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    target = nearest(me, enemies)
    if target is None:
        return Idle()
    return Berserk(target_id=target.fighter_id, damage_multiplier=BERSERK_MULTIPLIER)


@register_action("act_wait", "Wait", "Do nothing, observe", "⏸️")
def _wait(me: "BattleFighter", enemies: Fighters, allies: Fighters) -> Intent:
    return Idle()
