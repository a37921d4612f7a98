"""
avoidance_planner.py – Local wall avoidance for a desired direction.

Turns a behavior's desired direction into a safe movement vector using
only directional probes:

1. An active detour is kept until it expires, or cancelled early once
   the direct path is clear again (and the agent is not stuck).
2. A blocked direct path, or a soft-stuck agent, triggers detour
   selection: four candidates (both perpendiculars and the two
   diagonals) scored by clearance plus progress toward the target, with
   an 8-way fan search when none scores positive.  The winner is
   committed for a short time.
3. A final 7-ray fan around the chosen direction steers away from a
   blocked forward ray, wall-slides when everything is blocked, and
   rotates by the alternating sign as a last resort.

Tuning values are read from ``AvoidanceConfig`` which defaults to the
constants in ``settings.py``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pygame.math import Vector2

from ai.spatial_probe import NullProbe, clear_distance, is_blocked
from ai.stuck_detector import MotionState
from settings import (
    PROBE_DISTANCE, CLEARANCE_DISTANCE, SOFT_STUCK_THRESHOLD,
    DETOUR_COMMIT_TIME, DETOUR_PROGRESS_WEIGHT, FAN_ANGLES,
    FALLBACK_ANGLE_BONUS, OBSTACLE_LAYER_MASK,
)
from utils.helpers import perpendicular, safe_normalize

logger = logging.getLogger(__name__)

BLOCKED_SCORE = -1.0


@dataclass
class AvoidanceConfig:
    probe_distance: float = PROBE_DISTANCE
    clearance: float = CLEARANCE_DISTANCE
    soft_stuck_threshold: float = SOFT_STUCK_THRESHOLD
    commit_time: float = DETOUR_COMMIT_TIME
    progress_weight: float = DETOUR_PROGRESS_WEIGHT
    fan_angles: tuple = FAN_ANGLES
    fallback_angle_bonus: float = FALLBACK_ANGLE_BONUS
    fallback_directions: int = 8
    layer_mask: int = OBSTACLE_LAYER_MASK


class AvoidancePlanner:
    """Scores alternatives around obstacles and returns a velocity."""

    def __init__(self, probe=None, config: AvoidanceConfig | None = None):
        self.probe = probe or NullProbe()
        self.cfg = config or AvoidanceConfig()

    def plan(self, agent, motion: MotionState, direction: Vector2,
             speed: float, target: Vector2 | None, dt: float) -> Vector2:
        """Return the velocity (unit direction × speed) for this tick."""
        cfg = self.cfg
        desired = safe_normalize(Vector2(direction))
        if desired.length_squared() == 0 or speed <= 0:
            self._tick_detour(motion, dt)
            return Vector2(0.0, 0.0)

        origin = Vector2(agent.position)
        if target is None:
            target = origin + desired * (cfg.probe_distance * 2.0)
        # Walls past the target do not block the way to it
        reach = min(cfg.probe_distance, origin.distance_to(target))
        soft_stuck = motion.is_soft_stuck(cfg.soft_stuck_threshold)
        direct_clear = self.direct_path_clear(origin, desired, reach)
        direct = False

        if motion.detour_timer > 0:
            if direct_clear and not soft_stuck:
                motion.clear_detour()
                chosen, direct = desired, True
            else:
                chosen = Vector2(motion.detour_direction)
                self._tick_detour(motion, dt)
        elif not direct_clear or soft_stuck:
            if soft_stuck:
                motion.flip_sign()
            chosen = self.choose_detour(origin, desired, target,
                                        motion.unstuck_sign)
            motion.detour_direction = Vector2(chosen)
            motion.detour_timer = cfg.commit_time
            motion.is_pathfinding = True
            logger.debug("%s detour → (%.2f, %.2f) sign=%+d",
                         agent.name, chosen.x, chosen.y, motion.unstuck_sign)
        else:
            chosen, direct = desired, True

        chosen = self.fan_adjust(origin, chosen, desired, motion,
                                 reach if direct else None)
        return chosen * speed

    # ══════════════════════════════════════════════════════
    #  Probing helpers
    # ══════════════════════════════════════════════════════

    def _cast(self, origin: Vector2, direction: Vector2,
              max_distance: float | None = None):
        if max_distance is None:
            max_distance = self.cfg.probe_distance
        return self.probe.probe(origin, direction, max_distance, self.cfg.layer_mask)

    def direct_path_clear(self, origin: Vector2, desired: Vector2,
                          reach: float | None = None) -> bool:
        """Any hit within *reach* (default: the probe distance) blocks the
        direct path."""
        if reach is not None and reach <= 0:
            return True
        return self._cast(origin, desired, reach) is None

    def score_candidate(self, origin: Vector2, candidate: Vector2,
                        target: Vector2) -> float:
        hit = self._cast(origin, candidate)
        if is_blocked(hit, self.cfg.clearance):
            return BLOCKED_SCORE
        clear = clear_distance(hit, self.cfg.probe_distance)
        current = origin.distance_to(target)
        after = (origin + candidate * (clear * 0.5)).distance_to(target)
        return clear + self.cfg.progress_weight * (current - after)

    @staticmethod
    def _tick_detour(motion: MotionState, dt: float):
        if motion.detour_timer <= 0:
            return
        motion.detour_timer -= dt
        if motion.detour_timer <= 0:
            motion.clear_detour()

    # ══════════════════════════════════════════════════════
    #  Detour selection
    # ══════════════════════════════════════════════════════

    def detour_candidates(self, desired: Vector2, sign: int) -> list[Vector2]:
        """Perpendiculars then diagonals, the sign's side first."""
        side = perpendicular(desired, sign)
        other = -side
        return [
            side,
            other,
            safe_normalize(desired + side),
            safe_normalize(desired + other),
        ]

    def choose_detour(self, origin: Vector2, desired: Vector2,
                      target: Vector2, sign: int) -> Vector2:
        best = None
        best_score = 0.0
        for candidate in self.detour_candidates(desired, sign):
            score = self.score_candidate(origin, candidate, target)
            if score > best_score:
                best, best_score = candidate, score
        if best is not None:
            return best
        return self.fan_search(origin, desired, sign)

    def fan_search(self, origin: Vector2, desired: Vector2, sign: int) -> Vector2:
        """Every 45° around the agent, scored by alignment + angle bonus."""
        cfg = self.cfg
        step = 360.0 / cfg.fallback_directions
        best = None
        best_score = -float("inf")
        for i in range(cfg.fallback_directions):
            angle = step * i * sign
            candidate = desired.rotate(angle)
            if is_blocked(self._cast(origin, candidate), cfg.clearance):
                continue
            offset = min(abs(angle) % 360.0, 360.0 - abs(angle) % 360.0)
            score = (candidate.dot(desired)
                     + cfg.fallback_angle_bonus * (1.0 - offset / 180.0))
            if score > best_score:
                best, best_score = candidate, score
        if best is None:
            return perpendicular(desired, sign)
        return best

    # ══════════════════════════════════════════════════════
    #  Final fan
    # ══════════════════════════════════════════════════════

    def fan_adjust(self, origin: Vector2, chosen: Vector2, desired: Vector2,
                   motion: MotionState, reach: float | None = None) -> Vector2:
        cfg = self.cfg
        if reach is not None and reach <= 0:
            return chosen
        forward_hit = self._cast(origin, chosen, reach)
        if not is_blocked(forward_hit, cfg.clearance):
            return chosen

        best = None
        best_score = 0.0
        for angle in cfg.fan_angles:
            if angle == 0:
                continue
            candidate = chosen.rotate(angle)
            hit = self._cast(origin, candidate)
            if is_blocked(hit, cfg.clearance):
                continue
            alignment = max(0.0, candidate.dot(desired))
            score = (clear_distance(hit, cfg.probe_distance)
                     * (0.5 + 0.5 * alignment)
                     * (1.0 - abs(angle) / 180.0))
            if score > best_score:
                best, best_score = candidate, score
        if best is not None:
            return best

        # Everything blocked: slide along the obstacle plane
        normal = safe_normalize(forward_hit.normal)
        if normal.length_squared() > 0:
            slide = safe_normalize(chosen - normal * chosen.dot(normal))
            if slide.length_squared() > 0:
                return slide

        rotated = chosen.rotate(90.0 * motion.unstuck_sign)
        if motion.is_soft_stuck(cfg.soft_stuck_threshold):
            motion.flip_sign()
        return rotated
