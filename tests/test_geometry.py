"""Tests for arena geometry helpers."""

import math
import unittest
from types import SimpleNamespace

from samurai_duel.geometry import (
    clamp_to_arena, direction, distance, nearest, orbit_point, stable_max, stable_min,
)


class TestDistance(unittest.TestCase):
    def test_distance(self):
        self.assertEqual(distance(0, 0, 3, 4), 5.0)

    def test_direction_unit(self):
        dx, dy = direction(0, 0, 10, 0)
        self.assertEqual((dx, dy), (1.0, 0.0))

    def test_direction_coincident(self):
        self.assertEqual(direction(5, 5, 5, 5), (0.0, 0.0))


class TestClamp(unittest.TestCase):
    def test_inside_untouched(self):
        self.assertEqual(clamp_to_arena(100, 200, 800, 600, 20), (100, 200))

    def test_outside_clamped(self):
        self.assertEqual(clamp_to_arena(-50, 9999, 800, 600, 20), (20, 580))
        self.assertEqual(clamp_to_arena(900, -1, 800, 600, 20), (780, 20))


class TestOrbit(unittest.TestCase):
    def test_rotation_keeps_radius(self):
        x, y = orbit_point(0, 0, 200, 0, math.pi / 2, 100)
        self.assertAlmostEqual(x, 0.0, places=6)
        self.assertAlmostEqual(y, 200.0, places=6)

    def test_min_radius(self):
        x, y = orbit_point(0, 0, 10, 0, 0.0, 100)
        self.assertAlmostEqual(math.hypot(x, y), 100.0)


class TestStableReductions(unittest.TestCase):
    def test_min_tie_keeps_first(self):
        items = [("a", 2), ("b", 1), ("c", 1)]
        self.assertEqual(stable_min(items, key=lambda t: t[1]), ("b", 1))

    def test_max_tie_keeps_first(self):
        items = [("a", 5), ("b", 5), ("c", 3)]
        self.assertEqual(stable_max(items, key=lambda t: t[1]), ("a", 5))

    def test_empty(self):
        self.assertIsNone(stable_min([], key=lambda t: 0))
        self.assertIsNone(stable_max([], key=lambda t: 0))

    def test_nearest(self):
        origin = SimpleNamespace(x=0.0, y=0.0)
        far = SimpleNamespace(x=100.0, y=0.0)
        near_a = SimpleNamespace(x=0.0, y=10.0)
        near_b = SimpleNamespace(x=10.0, y=0.0)
        self.assertIs(nearest(origin, [far, near_a, near_b]), near_a)


if __name__ == "__main__":
    unittest.main()
