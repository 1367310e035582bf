"""BattleFighter – stats, position, cooldowns, intent and deck-driven decisions."""

from __future__ import annotations

import math
import random
from typing import Mapping, Sequence

from samurai_duel.cards import CARD_LIBRARY, Card
from samurai_duel.geometry import direction, distance
from samurai_duel.models import (
    AIModifiers, Berserk, CardKind, Circle, DecisionKind, DeckDef, DeckRule,
    Defend, FighterConfig, FighterSnapshot, FighterSummary, Idle, Intent,
    Retreat, Team,
)

BASE_SPEED = 150.0          # units per second at speed 1.0
SNAP_DISTANCE = 5.0
COINCIDENT_DISTANCE = 0.1

# Fallback intents picked when the AI "makes a mistake"
MISTAKE_INTENTS: tuple[Intent, ...] = (Idle(), Circle(), Retreat(speed_multiplier=1.0))


class BattleFighter:
    """One combat participant.

    Only the BattleEngine that created a fighter mutates it. Targets are
    held by id, never by reference.
    """

    def __init__(
        self,
        config: FighterConfig,
        deck: DeckDef,
        team: Team,
        rng: random.Random,
        ai: AIModifiers | None = None,
        fighter_id: str | None = None,
        library: Mapping[str, Card] = CARD_LIBRARY,
        snap_distance: float = SNAP_DISTANCE,
    ) -> None:
        ai = ai or AIModifiers()

        # Identity
        self.fighter_id = fighter_id or team.value
        self.name = config.name
        self.team = team
        self.color = config.color
        self.icon = config.icon

        # Base stats
        self.max_hp = float(config.max_hp)
        self.attack = float(config.attack)
        self.defense = float(config.defense)
        self.speed = float(config.speed)
        self.attack_speed = float(config.attack_speed)

        # Combat state
        self.hp = self.max_hp
        self.is_alive = True
        self.x = 0.0
        self.y = 0.0
        self.intent: Intent = Idle()
        self.active_target_id: str | None = None
        self.defend_active = False
        self.defend_reduction = 0.0
        self.pending_damage_multiplier = 1.0
        self.attack_cooldown = 0.0
        self.dash_cooldown = 0.0

        # Bookkeeping
        self.damage_dealt = 0.0
        self.damage_taken = 0.0
        self.kills = 0

        # AI tuning
        self.deck = deck
        self.decision_delay = ai.decision_delay
        self.mistake_chance = ai.mistake_chance
        self.aggression = ai.aggression
        self.last_decision_time = 0.0

        self._rng = rng
        self._library = library
        self._snap_distance = snap_distance

    def __repr__(self) -> str:
        return (f"BattleFighter({self.fighter_id!r}, hp={self.hp:g}/{self.max_hp:g}, "
                f"pos=({self.x:.1f}, {self.y:.1f}), intent={self.intent.kind})")

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(
        self,
        enemies: Sequence["BattleFighter"],
        allies: Sequence["BattleFighter"],
        sim_time: float,
    ) -> DecisionKind:
        if sim_time - self.last_decision_time < self.decision_delay:
            return DecisionKind.WAITING

        self.last_decision_time = sim_time

        if self._rng.random() < self.mistake_chance:
            self.intent = self._rng.choice(MISTAKE_INTENTS)
            return DecisionKind.MISTAKE

        if self.evaluate_deck(enemies, allies) is None:
            return DecisionKind.NO_MATCH
        return DecisionKind.RULE

    def evaluate_deck(
        self,
        enemies: Sequence["BattleFighter"],
        allies: Sequence["BattleFighter"],
    ) -> DeckRule | None:
        """Fire the first rule whose condition holds. Returns that rule.

        Rules naming unknown or wrong-kind cards never match.
        """
        for rule in self.deck.rules:
            cond = self._library.get(rule.condition_id)
            act = self._library.get(rule.action_id)
            if cond is None or act is None:
                continue
            if cond.kind is not CardKind.CONDITION or act.kind is not CardKind.ACTION:
                continue
            if cond.check(self, enemies, allies):
                self.apply_intent(act.execute(self, enemies, allies))
                return rule
        return None

    def apply_intent(self, intent: Intent) -> None:
        self.intent = intent
        target_id = getattr(intent, "target_id", None)
        if target_id is not None:
            self.active_target_id = target_id
        match intent:
            case Defend(damage_reduction=reduction):
                self.defend_active = True
                self.defend_reduction = reduction
            case Berserk(damage_multiplier=mult):
                self.pending_damage_multiplier = mult

    # ------------------------------------------------------------------
    # Combat
    # ------------------------------------------------------------------

    def take_damage(self, raw_amount: float) -> float:
        """Apply one hit. Returns the damage actually removed."""
        damage = max(1.0, raw_amount - self.defense)

        # Defend absorbs the next hit only
        if self.defend_active:
            damage *= 1.0 - self.defend_reduction
            self.defend_active = False

        self.hp -= damage
        self.damage_taken += damage

        if self.hp <= 0:
            self.hp = 0.0
            self.is_alive = False

        return damage

    def execute_attack(self, target: "BattleFighter | None") -> bool:
        if target is None or not target.is_alive:
            return False
        if self.attack_cooldown > 0:
            return False

        damage = self.attack * self.pending_damage_multiplier
        self.pending_damage_multiplier = 1.0

        actual = target.take_damage(damage)
        self.damage_dealt += actual
        if not target.is_alive:
            self.kills += 1

        self.attack_cooldown = 1.0 / self.attack_speed
        return True

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move_toward(self, target_x: float, target_y: float, dt: float) -> None:
        dist = distance(self.x, self.y, target_x, target_y)
        if dist < self._snap_distance:
            return

        # never overshoot the target
        step = min(self.speed * BASE_SPEED * dt, dist)
        ux, uy = direction(self.x, self.y, target_x, target_y)
        self.x += ux * step
        self.y += uy * step

    def move_away(
        self, target_x: float, target_y: float, dt: float, speed_multiplier: float = 1.0,
    ) -> None:
        step = self.speed * speed_multiplier * BASE_SPEED * dt

        if distance(self.x, self.y, target_x, target_y) < COINCIDENT_DISTANCE:
            angle = self._rng.random() * 2 * math.pi
            self.x += math.cos(angle) * step
            self.y += math.sin(angle) * step
            return

        ux, uy = direction(target_x, target_y, self.x, self.y)
        self.x += ux * step
        self.y += uy * step

    def tick_cooldowns(self, dt: float) -> None:
        self.attack_cooldown = max(0.0, self.attack_cooldown - dt)
        self.dash_cooldown = max(0.0, self.dash_cooldown - dt)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self) -> FighterSnapshot:
        return FighterSnapshot(
            fighter_id=self.fighter_id,
            name=self.name,
            team=self.team.value,
            x=self.x,
            y=self.y,
            hp=self.hp,
            max_hp=self.max_hp,
            is_alive=self.is_alive,
            intent=self.intent.kind,
            color=self.color,
            icon=self.icon,
            attack_cooldown=self.attack_cooldown,
            defend_active=self.defend_active,
        )

    def summary(self) -> FighterSummary:
        return FighterSummary(
            name=self.name,
            hp_remaining=self.hp,
            max_hp=self.max_hp,
            damage_dealt=self.damage_dealt,
            damage_taken=self.damage_taken,
            kills=self.kills,
        )
