"""Append-only battle event log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

# Event types
BATTLE_START = "battle_start"
ATTACK = "attack"
VICTORY = "victory"
DEFEAT = "defeat"
DRAW = "draw"
TIMEOUT_VICTORY = "timeout_victory"
TIMEOUT_DEFEAT = "timeout_defeat"
TIMEOUT_DRAW = "timeout_draw"

TERMINAL_TYPES = frozenset({
    VICTORY, DEFEAT, DRAW, TIMEOUT_VICTORY, TIMEOUT_DEFEAT, TIMEOUT_DRAW,
})


@dataclass(frozen=True)
class BattleEvent:
    type: str
    message: str
    time: float

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message, "time": self.time}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "BattleEvent":
        return cls(type=raw["type"], message=raw.get("message", ""), time=raw["time"])


class EventLog:
    """Events are only ever appended; readers get immutable tuples."""

    def __init__(self) -> None:
        self._events: list[BattleEvent] = []

    def append(self, type: str, message: str, time: float) -> BattleEvent:
        event = BattleEvent(type=type, message=message, time=time)
        self._events.append(event)
        return event

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[BattleEvent]:
        return iter(tuple(self._events))

    def __getitem__(self, index: int) -> BattleEvent:
        return self._events[index]

    def of_type(self, *types: str) -> list[BattleEvent]:
        return [e for e in self._events if e.type in types]

    def to_tuple(self) -> tuple[BattleEvent, ...]:
        return tuple(self._events)

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self._events]
