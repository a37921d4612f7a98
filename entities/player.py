"""
player.py – What the cobras know about the player.

``PlayerState`` is the read-only snapshot the agent controller asks
for every tick through its player locator.  ``KinematicPlayer`` is a
minimal moving body used by the headless simulation runner and tests;
real games hand in their own locator instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2

from settings import PLAYER_RADIUS
from utils.helpers import ArenaBounds


@dataclass
class PlayerState:
    """Player position and velocity (velocity may be zero)."""

    position: Vector2 = field(default_factory=Vector2)
    velocity: Vector2 = field(default_factory=Vector2)
    shield_active: bool = False
    radius: float = PLAYER_RADIUS

    def __post_init__(self):
        self.position = Vector2(self.position)
        self.velocity = Vector2(self.velocity)


class KinematicPlayer:
    """Point-mass player that integrates a commanded velocity."""

    def __init__(self, position=(0.0, 0.0), bounds: ArenaBounds | None = None):
        self.position = Vector2(position)
        self.velocity = Vector2(0.0, 0.0)
        self.shield_active = False
        self.bounds = bounds or ArenaBounds()
        self.caught_count = 0

    def set_velocity(self, velocity: Vector2):
        self.velocity = Vector2(velocity)

    def update(self, dt: float):
        """Integrate velocity and keep the player inside the arena."""
        self.position = self.bounds.clamp(self.position + self.velocity * dt)

    def state(self) -> PlayerState:
        return PlayerState(self.position, self.velocity, self.shield_active)

    def __call__(self) -> PlayerState:
        # Lets the player object itself serve as a controller's locator
        return self.state()
