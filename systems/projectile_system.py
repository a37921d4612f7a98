"""
projectile_system.py – Cobra projectile gate and projectiles.

Handles:
- The per-agent fire gate (cooldown + distance window)
- Projectile creation, movement, collision and expiry
- Self-destruct on hit, lifetime expiry or leaving the arena

Rendering is left to the game; projectiles here are plain data.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from pygame.math import Vector2

from settings import (
    PROJECTILE_SPEED, PROJECTILE_DAMAGE, PROJECTILE_RADIUS,
    PROJECTILE_LIFETIME,
)
from utils.helpers import ArenaBounds, safe_normalize

logger = logging.getLogger(__name__)


class ProjectileType(IntEnum):
    FIRE = 0
    POISON = 1


class FireGate:
    """Cooldown + range check deciding when an agent may shoot.

    The timer accumulates (scaled) time; once a full interval has
    passed the gate opens the first tick the target sits inside
    ``[min_distance, max_distance]`` and then restarts.
    """

    def __init__(self, fire_rate: float, max_distance: float,
                 min_distance: float = 0.0):
        if fire_rate <= 0:
            raise ValueError(f"fire_rate must be positive, got {fire_rate}")
        self.fire_rate = fire_rate
        self.max_distance = max_distance
        self.min_distance = min_distance
        self.timer = 0.0

    @property
    def interval(self) -> float:
        return 1.0 / self.fire_rate

    def update(self, dt: float, distance: float) -> bool:
        """Advance the cooldown; returns True if a shot should fire now."""
        self.timer += dt
        if self.timer < self.interval:
            return False
        if self.min_distance <= distance <= self.max_distance:
            self.timer = 0.0
            return True
        return False

    def reset(self):
        self.timer = 0.0


class Projectile:
    """A single projectile travelling in a straight line.

    Attributes
    ----------
    position    : Vector2 – centre
    velocity    : Vector2 – units/sec
    damage      : int     – damage applied on hit
    radius      : float   – collision radius
    active      : bool    – False after hit or expiry
    owner_id    : int     – agent_id of the shooter (never hits its owner)
    bounds      : ArenaBounds – culled once more than 0.5 outside these
    """

    __slots__ = (
        "position", "velocity", "damage", "radius", "kind",
        "lifetime", "timer", "active", "owner_id", "bounds",
    )

    def __init__(self, position: Vector2, velocity: Vector2,
                 damage: int = PROJECTILE_DAMAGE,
                 radius: float = PROJECTILE_RADIUS,
                 lifetime: float = PROJECTILE_LIFETIME,
                 kind: ProjectileType = ProjectileType.FIRE,
                 owner_id: int = 0,
                 bounds: ArenaBounds | None = None):
        self.position = Vector2(position)
        self.velocity = Vector2(velocity)
        self.damage = max(1, damage)  # damage is never zero
        self.radius = radius
        self.kind = kind
        self.lifetime = lifetime
        self.timer = lifetime
        self.active = True
        self.owner_id = owner_id
        self.bounds = bounds or ArenaBounds()

    def update(self, dt: float):
        """Move and age the projectile."""
        if not self.active:
            return
        self.position += self.velocity * dt
        self.timer -= dt

        if self.timer <= 0:
            self.active = False

        margin = 0.5
        if (abs(self.position.x) > self.bounds.half_width + margin
                or abs(self.position.y) > self.bounds.half_height + margin):
            self.active = False

    def check_collision(self, position: Vector2, radius: float,
                        target_id: int = -1,
                        invulnerable: bool = False) -> bool:
        """Circle test against a target. Deactivates the projectile on hit."""
        if not self.active:
            return False
        if target_id == self.owner_id or invulnerable:
            return False
        if self.position.distance_to(position) <= self.radius + radius:
            self.active = False
            return True
        return False


class ProjectileSystem:
    """Manages all active projectiles. Call ``update(dt)`` each tick."""

    def __init__(self, bounds: ArenaBounds | None = None):
        self.bounds = bounds or ArenaBounds()
        self._projectiles: list[Projectile] = []

    @property
    def projectiles(self) -> list[Projectile]:
        return self._projectiles

    def spawn_at(self, origin: Vector2, target: Vector2,
                 damage: int = PROJECTILE_DAMAGE,
                 speed: float = PROJECTILE_SPEED,
                 kind: ProjectileType = ProjectileType.FIRE,
                 owner_id: int = 0) -> Projectile:
        """Spawn a projectile at *origin* aimed at *target*."""
        direction = safe_normalize(Vector2(target) - Vector2(origin))
        if direction.length_squared() == 0:
            direction = Vector2(1.0, 0.0)
        proj = Projectile(origin, direction * speed, damage=damage,
                          kind=kind, owner_id=owner_id, bounds=self.bounds)
        self._projectiles.append(proj)
        logger.debug("Projectile %s spawned at (%.2f,%.2f) → (%.2f,%.2f)",
                     kind.name, origin.x, origin.y, target.x, target.y)
        return proj

    def check_collisions(self, position: Vector2, radius: float,
                         target_id: int = -1,
                         invulnerable: bool = False) -> list[Projectile]:
        """Return the projectiles that hit the target (already deactivated)."""
        hits = [p for p in self._projectiles
                if p.check_collision(position, radius, target_id, invulnerable)]
        for proj in hits:
            logger.debug("Projectile hit! dmg=%d", proj.damage)
        return hits

    def update(self, dt: float):
        """Update all projectiles and remove dead ones."""
        for p in self._projectiles:
            p.update(dt)
        self._projectiles = [p for p in self._projectiles if p.active]

    def clear(self):
        self._projectiles.clear()
