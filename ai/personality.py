"""
personality.py – One-time personality modifiers.

AGGRESSIVE  faster, less accurate prediction, boosts earlier
CAUTIOUS    slower, more accurate prediction, boosts later
TACTICAL    balanced, unchanged
ERRATIC     random speed and wander-interval variation
"""

from __future__ import annotations

import logging
import random

from entities.agent import PersonalityTrait
from settings import (
    PERSONALITY_AGGRESSIVE, PERSONALITY_CAUTIOUS,
    PERSONALITY_TACTICAL, PERSONALITY_ERRATIC,
)

logger = logging.getLogger(__name__)

_SCALED_TRAITS = {
    PersonalityTrait.AGGRESSIVE: PERSONALITY_AGGRESSIVE,
    PersonalityTrait.CAUTIOUS: PERSONALITY_CAUTIOUS,
    PersonalityTrait.TACTICAL: PERSONALITY_TACTICAL,
}


def apply_personality_modifiers(agent, rng: random.Random | None = None) -> bool:
    """Scale the agent's tuning by its personality.

    Only the first call has any effect; returns True when modifiers
    were applied.  Must run before the first ``apply_difficulty`` so the
    difficulty base snapshot includes the personality.
    """
    if agent.personality_applied or not agent.use_personality_modifiers:
        return False
    agent.personality_applied = True
    rng = rng or random.Random()

    if agent.personality == PersonalityTrait.ERRATIC:
        lo, hi = PERSONALITY_ERRATIC["speed_range"]
        agent.speed *= rng.uniform(lo, hi)
        lo, hi = PERSONALITY_ERRATIC["wander_interval_range"]
        agent.random_target_interval *= rng.uniform(lo, hi)
    else:
        mods = _SCALED_TRAITS[agent.personality]
        agent.speed *= mods.get("speed_mult", 1.0)
        agent.prediction_multiplier *= mods.get("prediction_mult", 1.0)
        agent.close_range_distance *= mods.get("close_range_mult", 1.0)

    logger.debug("%s personality %s → speed %.2f",
                 agent.name, agent.personality.name, agent.speed)
    return True
