"""
stuck_detector.py – Progress tracking and the hard-escape override.

Two timers are driven by the measured per-tick displacement:

    stuck_timer          – read by the avoidance planner (soft stuck)
    unstuck_force_timer  – once past the ceiling, forces a hard escape

The detector runs before any steering.  When the hard escape fires the
controller skips steering for that tick.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from pygame.math import Vector2

from ai.spatial_probe import NullProbe, is_blocked
from settings import (
    STUCK_MOVE_EPSILON, STUCK_RELEASE_EPSILON, UNSTUCK_FORCE_CEILING,
    HARD_ESCAPE_PROBE_DISTANCE, HARD_ESCAPE_NUDGE, HARD_ESCAPE_RANDOM_OFFSET,
    SOFT_STUCK_THRESHOLD, OBSTACLE_LAYER_MASK,
)
from utils.helpers import ArenaBounds, direction_to, safe_normalize

logger = logging.getLogger(__name__)


@dataclass
class MotionState:
    """Transient per-agent movement bookkeeping, mutated every tick."""

    previous_position: Vector2 | None = None
    stuck_timer: float = 0.0
    unstuck_force_timer: float = 0.0

    # Detour commitment (owned by the avoidance planner)
    detour_timer: float = 0.0
    detour_direction: Vector2 = field(default_factory=Vector2)
    is_pathfinding: bool = False

    unstuck_sign: int = 1
    escape_direction: Vector2 | None = None
    last_commanded_step: float = 0.0
    hard_escapes: int = 0

    def is_soft_stuck(self, threshold: float = SOFT_STUCK_THRESHOLD) -> bool:
        return self.stuck_timer > threshold

    def flip_sign(self):
        self.unstuck_sign = -self.unstuck_sign

    def reset_timers(self):
        self.stuck_timer = 0.0
        self.unstuck_force_timer = 0.0

    def clear_detour(self):
        self.detour_timer = 0.0
        self.detour_direction = Vector2(0.0, 0.0)
        self.is_pathfinding = False


@dataclass
class StuckConfig:
    move_epsilon: float = STUCK_MOVE_EPSILON
    release_epsilon: float = STUCK_RELEASE_EPSILON
    force_ceiling: float = UNSTUCK_FORCE_CEILING
    probe_distance: float = HARD_ESCAPE_PROBE_DISTANCE
    nudge_distance: float = HARD_ESCAPE_NUDGE
    random_offset: float = HARD_ESCAPE_RANDOM_OFFSET
    escape_directions: int = 8
    layer_mask: int = OBSTACLE_LAYER_MASK


class StuckDetector:
    """Flags insufficient progress and performs the emergency escape."""

    def __init__(self, probe=None, bounds: ArenaBounds | None = None,
                 config: StuckConfig | None = None,
                 rng: random.Random | None = None, physics=None):
        self.probe = probe or NullProbe()
        self.bounds = bounds or ArenaBounds()
        self.cfg = config or StuckConfig()
        self.rng = rng or random.Random()
        self.physics = physics

    def update(self, agent, motion: MotionState, dt: float,
               player_position: Vector2) -> bool:
        """Measure last tick's progress; returns True if a hard escape fired."""
        cfg = self.cfg
        position = agent.position
        if motion.previous_position is None:
            motion.previous_position = Vector2(position)
            return False

        delta = position.distance_to(motion.previous_position)
        motion.previous_position = Vector2(position)

        # An agent that was told to stand still is never stuck
        if motion.last_commanded_step < cfg.move_epsilon:
            motion.reset_timers()
            return False

        if delta < cfg.move_epsilon:
            motion.stuck_timer += dt
            motion.unstuck_force_timer += dt
        elif delta > cfg.release_epsilon:
            motion.reset_timers()

        if motion.unstuck_force_timer > cfg.force_ceiling:
            return self._hard_escape(agent, motion, player_position)
        return False

    # ══════════════════════════════════════════════════════
    #  Hard escape
    # ══════════════════════════════════════════════════════

    def escape_candidates(self, agent, motion: MotionState,
                          player_position: Vector2) -> list[Vector2]:
        """Directions tried by the hard escape, in probing order."""
        base = direction_to(agent.position, player_position)
        if base.length_squared() == 0:
            base = Vector2(1.0, 0.0)
        count = self.cfg.escape_directions
        step = 360.0 / count
        return [base.rotate(step * i * motion.unstuck_sign) for i in range(count)]

    def _hard_escape(self, agent, motion: MotionState,
                     player_position: Vector2) -> bool:
        cfg = self.cfg
        start = Vector2(agent.position)

        for direction in self.escape_candidates(agent, motion, player_position):
            hit = self.probe.probe(start, direction, cfg.probe_distance,
                                   cfg.layer_mask)
            if is_blocked(hit, cfg.probe_distance):
                continue
            end = self._resolve(agent, start, start + direction * cfg.nudge_distance)
            if end.distance_to(start) < cfg.move_epsilon:
                # The ray missed but the body does not fit
                continue
            agent.position = end
            motion.escape_direction = Vector2(direction)
            motion.flip_sign()
            motion.reset_timers()
            motion.clear_detour()
            self._finish(agent, motion, start)
            logger.debug("%s hard escape → (%.2f, %.2f)",
                         agent.name, direction.x, direction.y)
            return True

        # Boxed in on all sides: jiggle and keep the timers running
        jitter = safe_normalize(Vector2(self.rng.uniform(-1.0, 1.0),
                                        self.rng.uniform(-1.0, 1.0)))
        if jitter.length_squared() == 0:
            jitter = Vector2(1.0, 0.0)
        agent.position = self._resolve(agent, start, start + jitter * cfg.random_offset)
        self._finish(agent, motion, start)
        logger.debug("%s hard escape found no clear direction, jittering",
                     agent.name)
        return True

    def _resolve(self, agent, start: Vector2, end: Vector2) -> Vector2:
        if self.physics is not None:
            end = self.physics.resolve_move(start, end, agent.size)
        return self.bounds.clamp(end)

    @staticmethod
    def _finish(agent, motion: MotionState, start: Vector2):
        motion.hard_escapes += 1
        motion.previous_position = Vector2(agent.position)
        motion.last_commanded_step = agent.position.distance_to(start)
        agent.velocity = Vector2(0.0, 0.0)
