"""
agent.py – Hostile cobra agent.

The agent is a plain data holder: its archetype is fixed at
construction, the controller moves it every tick, and the difficulty
adapter rescales its speed / prediction / alert parameters.

Archetypes:
- Chase:       straight pursuit
- Attack:      intercepts the player's predicted position
- Random:      wanders between random in-bounds targets
- Ambusher:    hides near an anchor, strikes when the player comes close
- Patroller:   walks a fixed route, chases once alerted
- PackHunter:  flanks with the nearest sibling
- Sniper:      keeps a distance band and strafes
"""

from __future__ import annotations

import itertools
from enum import Enum, IntEnum

from pygame.math import Vector2

from settings import (
    AGENT_SPEED, AGENT_SIZE,
    PREDICTION_MULTIPLIER, CLOSE_RANGE_DISTANCE, BOOST_MULTIPLIER,
    RANDOM_TARGET_INTERVAL,
    AMBUSH_RANGE, HIDE_TIME, STRIKE_SPEED,
    PATROL_SPEED, ALERT_RANGE, CHASE_SPEED_MULTIPLIER, DEFAULT_PATROL_ROUTE,
    COORDINATION_RANGE, FLANKING_ANGLE,
    SNIPER_MIN_DISTANCE, SNIPER_MAX_DISTANCE,
    SNIPER_STRAFE_SPEED_MULT, SNIPER_RETREAT_SPEED_MULT,
    SNIPER_APPROACH_SPEED_MULT,
    FIRE_RATE, SHOOTING_RANGE, MIN_SHOOTING_DISTANCE,
    PROJECTILE_SPEED, PROJECTILE_DAMAGE,
)
from systems.projectile_system import ProjectileType


class Archetype(IntEnum):
    """Behavior strategy an agent runs for its whole lifetime."""

    CHASE = 0
    ATTACK = 1
    RANDOM = 2
    AMBUSHER = 3
    PATROLLER = 4
    PACK_HUNTER = 5
    SNIPER = 6


class PersonalityTrait(IntEnum):
    AGGRESSIVE = 0
    CAUTIOUS = 1
    TACTICAL = 2
    ERRATIC = 3


class VisualState(str, Enum):
    """Discrete tag consumed by the renderer."""

    NORMAL = "normal"
    HIDDEN = "hidden"
    HUNTING = "hunting"
    ALERT = "alert"


_agent_ids = itertools.count(1)


class Agent:
    """A single cobra and all of its tunable parameters."""

    def __init__(self, archetype: Archetype,
                 position: tuple[float, float] | Vector2 = (0.0, 0.0),
                 personality: PersonalityTrait = PersonalityTrait.TACTICAL,
                 speed: float = AGENT_SPEED,
                 size: float = AGENT_SIZE,
                 instant_kill: bool = False,
                 can_shoot: bool = False,
                 patrol_route=None,
                 name: str | None = None,
                 agent_id: int | None = None):
        try:
            self._archetype = Archetype(archetype)
        except ValueError:
            raise ValueError(f"Unknown archetype: {archetype!r}") from None

        self.agent_id: int = agent_id if agent_id is not None else next(_agent_ids)
        self.name = name or f"{self._archetype.name.lower()}-{self.agent_id}"
        self.personality = PersonalityTrait(personality)
        self.use_personality_modifiers = True
        self.personality_applied = False

        # ── Kinematics ────────────────────────────────────
        self.position = Vector2(position)
        self.velocity = Vector2(0.0, 0.0)
        self.facing = Vector2(1.0, 0.0)
        self.size = size
        self.visual_state = VisualState.NORMAL

        # ── Movement ──────────────────────────────────────
        self.speed = speed
        self.prediction_multiplier = PREDICTION_MULTIPLIER
        self.close_range_distance = CLOSE_RANGE_DISTANCE
        self.boost_multiplier = BOOST_MULTIPLIER
        self.random_target_interval = RANDOM_TARGET_INTERVAL

        # Ambusher
        self.ambush_range = AMBUSH_RANGE
        self.hide_time = HIDE_TIME
        self.strike_speed = STRIKE_SPEED

        # Patroller
        self.patrol_speed = PATROL_SPEED
        self.alert_range = ALERT_RANGE
        self.chase_speed_multiplier = CHASE_SPEED_MULTIPLIER
        route = DEFAULT_PATROL_ROUTE if patrol_route is None else patrol_route
        self.patrol_route: tuple[Vector2, ...] = tuple(Vector2(p) for p in route)

        # Pack hunter
        self.coordination_range = COORDINATION_RANGE
        self.flanking_angle = FLANKING_ANGLE

        # Sniper
        self.preferred_min_distance = SNIPER_MIN_DISTANCE
        self.preferred_max_distance = SNIPER_MAX_DISTANCE

        # ── Projectiles ───────────────────────────────────
        self.can_shoot = can_shoot
        self.fire_rate = FIRE_RATE
        self.shooting_range = SHOOTING_RANGE
        self.min_shooting_distance = MIN_SHOOTING_DISTANCE
        self.projectile_type = ProjectileType.FIRE
        self.projectile_speed = PROJECTILE_SPEED
        self.projectile_damage = PROJECTILE_DAMAGE

        # ── Level flags ───────────────────────────────────
        self.instant_kill = instant_kill

        # Set by ai.difficulty_adapter on the first apply_difficulty() call
        self.difficulty = None

    @property
    def archetype(self) -> Archetype:
        """Read-only: the archetype never changes after construction."""
        return self._archetype

    def max_speed(self) -> float:
        """Highest speed this agent may move at, boosts included."""
        arch = self._archetype
        if arch == Archetype.ATTACK:
            return self.speed * (1.0 + max(0.0, self.boost_multiplier))
        if arch == Archetype.AMBUSHER:
            return max(self.speed, self.strike_speed)
        if arch == Archetype.PATROLLER:
            return max(self.patrol_speed,
                       self.speed * self.chase_speed_multiplier)
        if arch == Archetype.SNIPER:
            return self.speed * max(1.0, SNIPER_STRAFE_SPEED_MULT,
                                    SNIPER_RETREAT_SPEED_MULT,
                                    SNIPER_APPROACH_SPEED_MULT)
        return self.speed

    def distance_to(self, point: Vector2) -> float:
        return self.position.distance_to(point)

    def __repr__(self) -> str:
        return (f"Agent({self.name}, {self._archetype.name}, "
                f"pos=({self.position.x:.2f}, {self.position.y:.2f}))")
