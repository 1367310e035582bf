"""Tests for the append-only event log."""

import unittest

from samurai_duel import events as ev
from samurai_duel.events import BattleEvent, EventLog


class TestEventLog(unittest.TestCase):
    def test_append_and_read(self):
        log = EventLog()
        first = log.append(ev.BATTLE_START, "Battle begins!", 0.0)
        log.append(ev.ATTACK, "A attacks B for 5 damage!", 0.5)
        self.assertEqual(len(log), 2)
        self.assertIs(log[0], first)
        self.assertEqual([e.type for e in log], [ev.BATTLE_START, ev.ATTACK])

    def test_of_type(self):
        log = EventLog()
        log.append(ev.ATTACK, "x", 1.0)
        log.append(ev.ATTACK, "y", 2.0)
        log.append(ev.VICTORY, "z", 2.0)
        self.assertEqual(len(log.of_type(ev.ATTACK)), 2)
        self.assertEqual(log.of_type(*ev.TERMINAL_TYPES)[0].message, "z")

    def test_views_are_copies(self):
        log = EventLog()
        log.append(ev.ATTACK, "x", 1.0)
        snapshot = log.to_tuple()
        log.append(ev.ATTACK, "y", 2.0)
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(log.to_list()[1], {"type": "attack", "message": "y", "time": 2.0})

    def test_event_frozen(self):
        event = BattleEvent("attack", "x", 1.0)
        with self.assertRaises(AttributeError):
            event.time = 2.0  # type: ignore
        self.assertEqual(BattleEvent.from_dict(event.to_dict()), event)


if __name__ == "__main__":
    unittest.main()
