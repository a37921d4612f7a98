"""
arena.py – Axis-aligned wall boxes and the probe that ray-casts them.

Stands in for the game's collision system in headless runs and
tests.  Walls carry a layer bit so probes can filter them the same
way the engine's layer masks do.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pygame.math import Vector2

from ai.spatial_probe import ProbeHit
from settings import (
    ARENA_BOUND_X, ARENA_BOUND_Y,
    LAYER_WALLS, LAYER_OBSTACLES, OBSTACLE_LAYER_MASK,
)
from utils.helpers import ArenaBounds

_BORDER_THICKNESS = 1.0


@dataclass(frozen=True)
class Wall:
    """Solid box spanning [min_x, max_x] × [min_y, max_y]."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    layer: int = LAYER_WALLS

    def contains(self, point: Vector2, inflate: float = 0.0) -> bool:
        return (self.min_x - inflate <= point.x <= self.max_x + inflate
                and self.min_y - inflate <= point.y <= self.max_y + inflate)

    def raycast(self, origin: Vector2, direction: Vector2) -> ProbeHit | None:
        """Slab test. Returns the entry hit, or a zero-distance hit from inside."""
        if self.contains(origin):
            return ProbeHit(0.0, -Vector2(direction))

        t_near = -math.inf
        t_far = math.inf
        normal = Vector2(0.0, 0.0)
        for axis, lo, hi in ((0, self.min_x, self.max_x),
                             (1, self.min_y, self.max_y)):
            o = origin[axis]
            d = direction[axis]
            if abs(d) < 1e-12:
                if o < lo or o > hi:
                    return None
                continue
            t1 = (lo - o) / d
            t2 = (hi - o) / d
            if t1 > t2:
                t1, t2 = t2, t1
            if t1 > t_near:
                t_near = t1
                normal = Vector2(0.0, 0.0)
                normal[axis] = -1.0 if d > 0 else 1.0
            t_far = min(t_far, t2)
            if t_near > t_far:
                return None

        if t_far < 0 or t_near < 0:
            return None
        return ProbeHit(t_near, normal)


class ArenaWorld:
    """Collection of walls answering spatial probes."""

    def __init__(self, walls=(), bounds: ArenaBounds | None = None,
                 include_border: bool = True):
        self.bounds = bounds or ArenaBounds()
        self.walls: list[Wall] = list(walls)
        if include_border:
            self.walls.extend(_border_walls(self.bounds))
        self.probe_count = 0

    def add_wall(self, wall: Wall):
        self.walls.append(wall)

    def probe(self, origin: Vector2, direction: Vector2, max_distance: float,
              layer_mask: int = OBSTACLE_LAYER_MASK) -> ProbeHit | None:
        """Nearest wall hit along the ray within *max_distance*, else None."""
        self.probe_count += 1
        if direction.length_squared() < 1e-18 or max_distance <= 0:
            return None
        unit = direction.normalize()
        best: ProbeHit | None = None
        for wall in self.walls:
            if not wall.layer & layer_mask:
                continue
            hit = wall.raycast(origin, unit)
            if hit is None or hit.distance > max_distance:
                continue
            if best is None or hit.distance < best.distance:
                best = hit
        return best

    def blocked_at(self, point: Vector2, radius: float = 0.0,
                   layer_mask: int = OBSTACLE_LAYER_MASK) -> bool:
        return any(w.contains(point, radius) for w in self.walls
                   if w.layer & layer_mask)

    def resolve_move(self, start: Vector2, end: Vector2,
                     radius: float = 0.0) -> Vector2:
        """Physics stand-in: reject the part of a move that enters a wall.

        Tries the full move, then each axis on its own (sliding), and
        finally stays put.
        """
        if not self.blocked_at(end, radius):
            return Vector2(end)
        slide_x = Vector2(end.x, start.y)
        if not self.blocked_at(slide_x, radius):
            return slide_x
        slide_y = Vector2(start.x, end.y)
        if not self.blocked_at(slide_y, radius):
            return slide_y
        return Vector2(start)


def _border_walls(bounds: ArenaBounds) -> list[Wall]:
    x, y, t = bounds.half_width, bounds.half_height, _BORDER_THICKNESS
    return [
        Wall(-x - t, -y - t, x + t, -y),      # bottom
        Wall(-x - t, y, x + t, y + t),        # top
        Wall(-x - t, -y, -x, y),              # left
        Wall(x, -y, x + t, y),                # right
    ]


def maze_layout() -> list[Wall]:
    """Small maze used by the headless runner: corridors and a pillar."""
    return [
        Wall(-2.6, 0.9, -0.4, 1.1),
        Wall(0.4, -1.1, 2.6, -0.9),
        Wall(-0.1, -0.3, 0.1, 0.3, layer=LAYER_OBSTACLES),
        Wall(2.9, 0.2, 3.1, 2.2),
        Wall(-3.1, -2.2, -2.9, -0.2),
    ]


def default_arena() -> ArenaWorld:
    return ArenaWorld(maze_layout(), ArenaBounds(ARENA_BOUND_X, ARENA_BOUND_Y))
