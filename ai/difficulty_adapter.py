"""
difficulty_adapter.py – Live difficulty scaling without drift.

``apply_difficulty`` snapshots an agent's base speed / prediction /
alert range on the first call and from then on always recomputes
``current = base × multiplier``, so repeated calls never compound.

``DifficultyProgression`` is the external controller that raises the
multipliers over (scaled) game time:

    level       = min(1 + t / interval, max_level)
    speed       = min(1 + per_level × (level − 1), speed_cap)
    prediction  = 1 + prediction_increase × progress
    alert range = 1 + alert_increase × progress

where ``progress = (level − 1) / (max_level − 1)``.  Every increase is
pushed to all agents in the pack registry.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from settings import (
    DIFFICULTY_INCREASE_INTERVAL, MAX_DIFFICULTY_LEVEL,
    SPEED_INCREASE_PER_LEVEL, MAX_SPEED_MULTIPLIER,
    PREDICTION_ACCURACY_INCREASE, ALERT_RANGE_INCREASE,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════
#  Per-agent profile
# ══════════════════════════════════════════════════════════

@dataclass
class DifficultyProfile:
    """Base snapshot plus the multipliers last applied to it."""

    base_speed: float
    base_prediction: float
    base_alert_range: float
    speed_multiplier: float = 1.0
    prediction_multiplier: float = 1.0
    alert_range_multiplier: float = 1.0


def apply_difficulty(agent, speed_mult: float = 1.0,
                     prediction_mult: float = 1.0,
                     alert_range_mult: float = 1.0) -> DifficultyProfile:
    """Rescale *agent* from its cached base values. Idempotent."""
    profile = agent.difficulty
    if profile is None:
        profile = DifficultyProfile(
            base_speed=agent.speed,
            base_prediction=agent.prediction_multiplier,
            base_alert_range=agent.alert_range,
        )
        agent.difficulty = profile

    # Negative multipliers would reverse the agent; treat them as a stop
    profile.speed_multiplier = max(0.0, speed_mult)
    profile.prediction_multiplier = max(0.0, prediction_mult)
    profile.alert_range_multiplier = max(0.0, alert_range_mult)

    agent.speed = profile.base_speed * profile.speed_multiplier
    agent.prediction_multiplier = profile.base_prediction * profile.prediction_multiplier
    agent.alert_range = profile.base_alert_range * profile.alert_range_multiplier
    return profile


# ══════════════════════════════════════════════════════════
#  Progression controller
# ══════════════════════════════════════════════════════════

@dataclass
class ProgressionConfig:
    increase_interval: float = DIFFICULTY_INCREASE_INTERVAL
    max_level: float = MAX_DIFFICULTY_LEVEL
    speed_per_level: float = SPEED_INCREASE_PER_LEVEL
    max_speed_multiplier: float = MAX_SPEED_MULTIPLIER
    prediction_increase: float = PREDICTION_ACCURACY_INCREASE
    alert_range_increase: float = ALERT_RANGE_INCREASE
    enabled: bool = True


class DifficultyProgression:
    """Raises difficulty over time and pushes it to every registered agent."""

    def __init__(self, registry=None, config: ProgressionConfig | None = None):
        self.cfg = config or ProgressionConfig()
        self.registry = registry
        self.active = True
        self.level = 1.0
        self.game_time = 0.0
        self.speed_multiplier = 1.0
        self.prediction_multiplier = 1.0
        self.alert_range_multiplier = 1.0

    def update(self, dt: float) -> bool:
        """Advance game time; returns True when the level went up this tick."""
        if not self.active or not self.cfg.enabled:
            return False
        cfg = self.cfg
        self.game_time += dt

        interval = max(cfg.increase_interval, 1e-6)
        target = min(1.0 + self.game_time / interval, cfg.max_level)
        if target <= self.level:
            return False

        previous = self.level
        self.level = target
        self._recompute()
        self.apply_to_all()

        if math.floor(target) > math.floor(previous):
            logger.info("Difficulty increased to level %.1f! Speed: x%.2f",
                        self.level, self.speed_multiplier)
        return True

    def _recompute(self):
        cfg = self.cfg
        span = cfg.max_level - 1.0
        progress = (self.level - 1.0) / span if span > 0 else 1.0
        self.speed_multiplier = min(
            1.0 + cfg.speed_per_level * (self.level - 1.0),
            cfg.max_speed_multiplier,
        )
        self.prediction_multiplier = 1.0 + cfg.prediction_increase * progress
        self.alert_range_multiplier = 1.0 + cfg.alert_range_increase * progress

    def apply_to_all(self):
        if self.registry is None:
            return
        for agent in self.registry.agents():
            apply_difficulty(agent, self.speed_multiplier,
                             self.prediction_multiplier,
                             self.alert_range_multiplier)

    def stop(self):
        self.active = False

    def reset(self):
        """Back to level 1; agents are restored to their base values."""
        self.active = True
        self.level = 1.0
        self.game_time = 0.0
        self.speed_multiplier = 1.0
        self.prediction_multiplier = 1.0
        self.alert_range_multiplier = 1.0
        self.apply_to_all()
        logger.info("Difficulty reset")
