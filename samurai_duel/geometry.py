"""Arena geometry helpers – distance, clamping, direction, nearest pick."""

from __future__ import annotations

import math
from typing import Callable, Iterable, Protocol, TypeVar


class Positioned(Protocol):
    x: float
    y: float


T = TypeVar("T")


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def distance_between(a: Positioned, b: Positioned) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_to_arena(
    x: float, y: float, width: float, height: float, margin: float,
) -> tuple[float, float]:
    """Clamp a point into ``[margin, dimension - margin]`` on both axes."""
    return (
        clamp(x, margin, width - margin),
        clamp(y, margin, height - margin),
    )


def direction(ax: float, ay: float, bx: float, by: float) -> tuple[float, float]:
    """Unit vector from a to b; (0, 0) when the points coincide."""
    dx = bx - ax
    dy = by - ay
    dist = math.hypot(dx, dy)
    if dist == 0:
        return (0.0, 0.0)
    return (dx / dist, dy / dist)


def orbit_point(
    cx: float, cy: float, x: float, y: float, angle_step: float, min_radius: float,
) -> tuple[float, float]:
    """Point reached by rotating (x, y) about (cx, cy) by angle_step radians.

    The radius never drops below min_radius.
    """
    dx = x - cx
    dy = y - cy
    radius = max(math.hypot(dx, dy), min_radius)
    angle = math.atan2(dy, dx) + angle_step
    return (cx + math.cos(angle) * radius, cy + math.sin(angle) * radius)


def stable_min(items: Iterable[T], key: Callable[[T], float]) -> T | None:
    """First item with the smallest key; ties keep the earliest item."""
    best: T | None = None
    best_key = math.inf
    for item in items:
        k = key(item)
        if best is None or k < best_key:
            best = item
            best_key = k
    return best


def stable_max(items: Iterable[T], key: Callable[[T], float]) -> T | None:
    """First item with the largest key; ties keep the earliest item."""
    best: T | None = None
    best_key = -math.inf
    for item in items:
        k = key(item)
        if best is None or k > best_key:
            best = item
            best_key = k
    return best


def nearest(origin: Positioned, candidates: Iterable[T]) -> T | None:
    return stable_min(candidates, key=lambda c: distance_between(origin, c))  # type: ignore[arg-type]
