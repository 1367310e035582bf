"""Battle engine – fixed-timestep update loop, intent resolution, termination."""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from samurai_duel import events as ev
from samurai_duel.events import EventLog
from samurai_duel.fighter import BattleFighter
from samurai_duel.geometry import clamp_to_arena, distance_between, orbit_point
from samurai_duel.models import (
    AIModifiers, Attack, BattleConfig, BattleResult, BattleSnapshot, BattleState,
    Berserk, Circle, Dash, DeckDef, EndReason, FighterConfig, Retreat, Team, Winner,
)

if TYPE_CHECKING:
    from samurai_duel.replay import ReplayWriter
    from samurai_duel.telemetry import BattleTelemetry


class BattleEngine:
    """Owns both fighters for the duration of one battle.

    Call ``start()`` once, then ``update(dt)`` until ``state`` is FINISHED.
    ``update`` never raises; outside FIGHTING it does nothing.
    """

    def __init__(
        self,
        player: FighterConfig,
        player_deck: DeckDef,
        enemy: FighterConfig,
        enemy_deck: DeckDef,
        *,
        player_ai: AIModifiers | None = None,
        enemy_ai: AIModifiers | None = None,
        config: BattleConfig | None = None,
        rng: random.Random | None = None,
        seed: int = 0,
        telemetry: "BattleTelemetry | None" = None,
        replay: "ReplayWriter | None" = None,
        snapshot_every: int = 0,
    ) -> None:
        self.config = config or BattleConfig()
        self.rng = rng if rng is not None else random.Random(seed)
        self.telemetry = telemetry
        self.replay = replay
        self.snapshot_every = snapshot_every

        cfg = self.config
        self.player = BattleFighter(
            player, player_deck, Team.PLAYER, self.rng, player_ai,
            snap_distance=cfg.snap_distance,
        )
        self.enemy = BattleFighter(
            enemy, enemy_deck, Team.ENEMY, self.rng, enemy_ai,
            snap_distance=cfg.snap_distance,
        )

        self.player.x = cfg.arena_width * 0.25
        self.player.y = cfg.arena_height * 0.5
        self.enemy.x = cfg.arena_width * 0.75
        self.enemy.y = cfg.arena_height * 0.5

        self.state = BattleState.PREPARING
        self.winner: Winner | None = None
        self.reason: EndReason | None = None
        self.battle_time = 0.0
        self.max_battle_time = cfg.max_battle_time
        self.tick_count = 0
        self.events = EventLog()

    @property
    def fighters(self) -> tuple[BattleFighter, BattleFighter]:
        return (self.player, self.enemy)

    def place(self, team: Team, x: float, y: float) -> None:
        """Reposition a fighter before the battle starts."""
        if self.state is not BattleState.PREPARING:
            raise RuntimeError("Fighters can only be placed while PREPARING")
        fighter = self.player if team is Team.PLAYER else self.enemy
        cfg = self.config
        fighter.x, fighter.y = clamp_to_arena(
            x, y, cfg.arena_width, cfg.arena_height, cfg.arena_margin,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.state is not BattleState.PREPARING:
            return
        self.state = BattleState.FIGHTING

        if self.telemetry:
            self.telemetry.on_battle_start(self)
        if self.replay:
            self.replay.write({
                "type": "battle_start",
                "arena": [self.config.arena_width, self.config.arena_height],
                "max_battle_time": self.max_battle_time,
                "player": self.player.snapshot().to_dict(),
                "enemy": self.enemy.snapshot().to_dict(),
            })

        self._add_event(ev.BATTLE_START, "Battle begins!")

    def update(self, dt: float) -> None:
        if self.state is not BattleState.FIGHTING:
            return
        if not math.isfinite(dt) or dt <= 0:
            return

        self.tick_count += 1
        self.battle_time += dt

        if self.battle_time >= self.max_battle_time:
            self._end_battle(EndReason.TIMEOUT)
            return

        for fighter in self.fighters:
            fighter.tick_cooldowns(dt)

        # Decisions see living fighters only
        for idx, (fighter, opponent) in enumerate(self._pairings()):
            if not fighter.is_alive:
                continue
            enemies = [opponent] if opponent.is_alive else []
            kind = fighter.decide(enemies, [], self.battle_time)
            if self.telemetry:
                self.telemetry.on_decision(idx, kind, fighter.intent)

        # Player first, then enemy
        for idx, (fighter, opponent) in enumerate(self._pairings()):
            self._resolve_intent(idx, fighter, opponent, dt)

        cfg = self.config
        for fighter in self.fighters:
            fighter.x, fighter.y = clamp_to_arena(
                fighter.x, fighter.y, cfg.arena_width, cfg.arena_height, cfg.arena_margin,
            )

        if self.replay and self.snapshot_every and self.tick_count % self.snapshot_every == 0:
            self.replay.write({"type": "tick", "tick": self.tick_count,
                               **self.snapshot().to_dict()})

        if not self.player.is_alive or not self.enemy.is_alive:
            self._end_battle(EndReason.KNOCKOUT)

    def _pairings(self) -> tuple[tuple[BattleFighter, BattleFighter], ...]:
        return ((self.player, self.enemy), (self.enemy, self.player))

    # ------------------------------------------------------------------
    # Intent resolution
    # ------------------------------------------------------------------

    def _resolve_intent(
        self, idx: int, fighter: BattleFighter, opponent: BattleFighter, dt: float,
    ) -> None:
        if not fighter.is_alive or not opponent.is_alive:
            return
        cfg = self.config

        match fighter.intent:
            case Attack() | Berserk():
                if distance_between(fighter, opponent) <= cfg.attack_range:
                    defend_armed = opponent.defend_active
                    taken_before = opponent.damage_taken
                    if fighter.execute_attack(opponent):
                        dealt = opponent.damage_taken - taken_before
                        self._add_event(
                            ev.ATTACK,
                            f"{fighter.name} attacks {opponent.name} for {dealt:g} damage!",
                        )
                        if self.telemetry:
                            self.telemetry.on_attack(
                                idx, dealt, lethal=not opponent.is_alive,
                            )
                            if defend_armed:
                                self.telemetry.on_defend_consumed(1 - idx)
                else:
                    fighter.move_toward(opponent.x, opponent.y, dt)

            case Retreat(speed_multiplier=mult):
                fighter.move_away(opponent.x, opponent.y, dt, mult)

            case Dash():
                if fighter.dash_cooldown == 0:
                    fighter.move_toward(opponent.x, opponent.y, dt * cfg.dash_multiplier)
                    fighter.dash_cooldown = cfg.dash_cooldown
                    if self.telemetry:
                        self.telemetry.on_dash(idx)

            case Circle():
                tx, ty = orbit_point(
                    opponent.x, opponent.y, fighter.x, fighter.y,
                    dt * cfg.orbit_rate, cfg.orbit_radius,
                )
                fighter.move_toward(tx, ty, dt)

            case _:
                # Idle / Defend: nothing to do this tick
                pass

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def _end_battle(self, reason: EndReason) -> None:
        if self.state is BattleState.FINISHED:
            return
        self.state = BattleState.FINISHED
        self.reason = reason
        p, e = self.player, self.enemy

        if reason is EndReason.KNOCKOUT:
            if p.is_alive and not e.is_alive:
                self.winner = Winner.PLAYER
                self._add_event(ev.VICTORY, f"{p.name} wins!")
            elif e.is_alive and not p.is_alive:
                self.winner = Winner.ENEMY
                self._add_event(ev.DEFEAT, f"{e.name} wins!")
            else:
                self.winner = Winner.DRAW
                self._add_event(ev.DRAW, "Both fighters fell. It's a draw!")
        else:
            p_frac = p.hp / p.max_hp
            e_frac = e.hp / e.max_hp
            if p_frac > e_frac:
                self.winner = Winner.PLAYER
                self._add_event(ev.TIMEOUT_VICTORY, "Time out! You win by HP!")
            elif e_frac > p_frac:
                self.winner = Winner.ENEMY
                self._add_event(ev.TIMEOUT_DEFEAT, "Time out! Enemy wins by HP!")
            else:
                self.winner = Winner.DRAW
                self._add_event(ev.TIMEOUT_DRAW, "Time out! It's a draw!")

        result = self.result()
        if self.telemetry:
            self.telemetry.on_battle_end(self, result)
        if self.replay:
            self.replay.write({"type": "battle_end", **result.to_dict(include_events=False)})

    def _add_event(self, type: str, message: str) -> None:
        event = self.events.append(type, message, self.battle_time)
        if self.replay:
            self.replay.write({
                "type": "event",
                "event": event.type,
                "message": event.message,
                "time": event.time,
            })

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def snapshot(self) -> BattleSnapshot:
        return BattleSnapshot(
            state=self.state,
            battle_time=self.battle_time,
            max_battle_time=self.max_battle_time,
            player=self.player.snapshot(),
            enemy=self.enemy.snapshot(),
        )

    def result(self) -> BattleResult:
        if self.state is not BattleState.FINISHED:
            raise RuntimeError("Battle result is only available once FINISHED")
        assert self.winner is not None and self.reason is not None
        return BattleResult(
            winner=self.winner,
            reason=self.reason,
            battle_time=self.battle_time,
            player=self.player.summary(),
            enemy=self.enemy.summary(),
            events=self.events.to_tuple(),
        )
