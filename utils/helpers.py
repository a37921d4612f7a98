"""helpers.py - Small vector and bounds utilities shared by the steering code."""

from __future__ import annotations

from dataclasses import dataclass

from pygame.math import Vector2

from settings import ARENA_BOUND_X, ARENA_BOUND_Y, ARENA_TARGET_MARGIN

_EPSILON = 1e-9


def safe_normalize(vec: Vector2) -> Vector2:
    """Return a unit copy of *vec*, or a zero vector when it has no length.

    ``Vector2.normalize`` raises on zero length, so every direction the
    steering code produces goes through here.
    """
    length = vec.length()
    if length < _EPSILON:
        return Vector2(0.0, 0.0)
    return vec / length


def direction_to(origin: Vector2, target: Vector2) -> Vector2:
    """Unit vector from *origin* toward *target* (zero if they coincide)."""
    return safe_normalize(Vector2(target) - Vector2(origin))


def clamp_length(vec: Vector2, max_length: float) -> Vector2:
    """Scale *vec* down so its length never exceeds *max_length*."""
    if max_length <= 0:
        return Vector2(0.0, 0.0)
    length = vec.length()
    if length > max_length:
        return vec * (max_length / length)
    return Vector2(vec)


def perpendicular(vec: Vector2, sign: int = 1) -> Vector2:
    """Left-hand perpendicular for ``sign=1``, right-hand for ``sign=-1``."""
    return Vector2(-vec.y, vec.x) * (1 if sign >= 0 else -1)


@dataclass(frozen=True)
class ArenaBounds:
    """Axis-aligned playable rectangle centred on the origin."""

    half_width: float = ARENA_BOUND_X
    half_height: float = ARENA_BOUND_Y

    def clamp(self, point: Vector2, margin: float = 0.0) -> Vector2:
        """Clamp *point* into the arena, optionally shrunk by *margin*."""
        max_x = max(0.0, self.half_width - margin)
        max_y = max(0.0, self.half_height - margin)
        return Vector2(
            min(max_x, max(-max_x, point.x)),
            min(max_y, max(-max_y, point.y)),
        )

    def clamp_target(self, point: Vector2) -> Vector2:
        """Clamp a steering target using the standard inner margin."""
        return self.clamp(point, ARENA_TARGET_MARGIN)

    def contains(self, point: Vector2, tolerance: float = 1e-6) -> bool:
        return (abs(point.x) <= self.half_width + tolerance
                and abs(point.y) <= self.half_height + tolerance)

    def random_point(self, rng, margin: float = ARENA_TARGET_MARGIN) -> Vector2:
        """Uniform random point inside the arena shrunk by *margin*."""
        max_x = max(0.0, self.half_width - margin)
        max_y = max(0.0, self.half_height - margin)
        return Vector2(rng.uniform(-max_x, max_x), rng.uniform(-max_y, max_y))
