"""
spatial_probe.py – Directional obstacle queries.

The steering code never looks at level geometry directly; it asks a
probe "what is the first obstacle along this ray within this range?".
Any object with a matching ``probe`` method can be handed to the
controller.  A miss (``None``) always means "clear at max range".

``NullProbe`` is the empty world.  ``ArenaWorld`` in
``systems/arena.py`` is the wall-box implementation used by the
headless runner and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pygame.math import Vector2

from settings import OBSTACLE_LAYER_MASK


@dataclass(frozen=True)
class ProbeHit:
    """First obstacle along a probe ray."""

    distance: float
    normal: Vector2


class SpatialProbe(Protocol):
    def probe(self, origin: Vector2, direction: Vector2, max_distance: float,
              layer_mask: int = OBSTACLE_LAYER_MASK) -> ProbeHit | None:
        ...


class NullProbe:
    """A world with no obstacles: every probe misses."""

    def probe(self, origin: Vector2, direction: Vector2, max_distance: float,
              layer_mask: int = OBSTACLE_LAYER_MASK) -> ProbeHit | None:
        return None


def clear_distance(hit: ProbeHit | None, max_distance: float) -> float:
    """Free distance along a probe; misses are clear at *max_distance*."""
    if hit is None:
        return max_distance
    return min(max_distance, max(0.0, hit.distance))


def is_blocked(hit: ProbeHit | None, clearance: float) -> bool:
    """True when an obstacle sits closer than *clearance*."""
    return hit is not None and hit.distance < clearance
