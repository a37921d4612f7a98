"""
time_scale.py - Global time scale for enemy-side timers.

The slow-motion ability slows every agent timer (movement, steering,
projectile gate, archetype timers) while its own duration and cooldown
keep running on real time.  Callers feed raw frame time into
``apply()`` and hand the returned scaled dt to the agent controllers.
"""

from __future__ import annotations

import logging

from settings import (
    SLOW_MOTION_SCALE, SLOW_MOTION_DURATION, SLOW_MOTION_COOLDOWN,
)

logger = logging.getLogger(__name__)


class TimeScaleManager:
    """Applies the slow-motion ability to delta time.

    Usage::

        tsm = TimeScaleManager()
        tsm.try_activate()
        dt = tsm.apply(raw_dt)
    """

    def __init__(self, scale: float = SLOW_MOTION_SCALE,
                 duration: float = SLOW_MOTION_DURATION,
                 cooldown: float = SLOW_MOTION_COOLDOWN):
        self.slow_scale = scale
        self.duration = duration
        self.cooldown = cooldown

        self.scale = 1.0
        self.remaining_duration = 0.0
        self.remaining_cooldown = 0.0

    @property
    def active(self) -> bool:
        return self.remaining_duration > 0

    @property
    def on_cooldown(self) -> bool:
        return self.remaining_cooldown > 0

    def try_activate(self) -> bool:
        """Start slow motion if it is neither running nor cooling down."""
        if self.active:
            logger.debug("Slow motion already active")
            return False
        if self.on_cooldown:
            logger.debug("Slow motion on cooldown: %.1fs remaining",
                         self.remaining_cooldown)
            return False
        self.scale = self.slow_scale
        self.remaining_duration = self.duration
        logger.info("Slow motion on (scale=%.2f, %.1fs)", self.scale, self.duration)
        return True

    def apply(self, raw_dt: float) -> float:
        """Tick the ability with real time and return scaled dt."""
        if self.active:
            self.remaining_duration -= raw_dt  # tick with real time
            scaled = raw_dt * self.scale
            if self.remaining_duration <= 0:
                self.remaining_duration = 0.0
                self.scale = 1.0
                self.remaining_cooldown = self.cooldown
                logger.info("Slow motion off, cooldown %.1fs", self.cooldown)
            return scaled

        if self.remaining_cooldown > 0:
            self.remaining_cooldown = max(0.0, self.remaining_cooldown - raw_dt)
        self.scale = 1.0
        return raw_dt

    def reset(self):
        self.scale = 1.0
        self.remaining_duration = 0.0
        self.remaining_cooldown = 0.0
