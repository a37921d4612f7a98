"""
level_config.py – Per-level snake configuration.

Loads a ``LevelConfig`` from JSON (falling back to defaults when the
file is missing or corrupt) and applies it to agents at level setup.
Fire snakes come first; the remaining ``poison_snakes`` agents shoot
poison.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields

from settings import (
    LEVEL_FIRE_SNAKES, LEVEL_POISON_SNAKES, LEVEL_SNAKE_SPEED,
    LEVEL_SNAKE_FIRE_RATE, LEVEL_SNAKE_SHOOTING_RANGE,
    LEVEL_SNAKE_MIN_SHOOT_DISTANCE, PROJECTILE_SPEED, PROJECTILE_DAMAGE,
)
from systems.projectile_system import ProjectileType

logger = logging.getLogger(__name__)


@dataclass
class LevelConfig:
    level_name: str = "Level 1"
    level_number: int = 1
    fire_snakes: int = LEVEL_FIRE_SNAKES
    poison_snakes: int = LEVEL_POISON_SNAKES
    snakes_can_shoot: bool = True
    snake_fire_rate: float = LEVEL_SNAKE_FIRE_RATE
    snake_speed: float = LEVEL_SNAKE_SPEED
    snake_shooting_range: float = LEVEL_SNAKE_SHOOTING_RANGE
    snake_min_shoot_distance: float = LEVEL_SNAKE_MIN_SHOOT_DISTANCE
    instant_kill: bool = False
    projectile_speed: float = PROJECTILE_SPEED
    projectile_damage: int = PROJECTILE_DAMAGE

    @property
    def total_snakes(self) -> int:
        return self.fire_snakes + self.poison_snakes

    def projectile_type_for(self, index: int) -> ProjectileType:
        """Snake *index* shoots poison once the fire snakes are used up."""
        return ProjectileType.POISON if index >= self.fire_snakes else ProjectileType.FIRE

    @classmethod
    def from_dict(cls, data: dict) -> "LevelConfig":
        """Build from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# Shots per second triple-ish per level; later levels are a bullet hell
_PRESETS = {
    1: dict(fire_snakes=3, poison_snakes=0, snake_fire_rate=2.5,
            snake_speed=2.3, snake_shooting_range=9.0,
            snake_min_shoot_distance=1.2, projectile_damage=19,
            projectile_speed=6.0),
    2: dict(fire_snakes=0, poison_snakes=3, snake_fire_rate=6.5,
            snake_speed=2.9, snake_shooting_range=12.0,
            snake_min_shoot_distance=0.8, projectile_damage=32,
            projectile_speed=9.0),
    3: dict(fire_snakes=2, poison_snakes=1, snake_fire_rate=15.0,
            snake_speed=3.5, snake_shooting_range=14.0,
            snake_min_shoot_distance=0.3, projectile_damage=50,
            projectile_speed=12.0),
}


def preset(level: int) -> LevelConfig:
    """Built-in config for *level*; anything past 3 reuses level 3."""
    values = _PRESETS.get(level, _PRESETS[3])
    return LevelConfig(level_name=f"Level {level}", level_number=level, **values)


def load_level_config(path: str) -> LevelConfig:
    """Read a level config from JSON.

    A missing or corrupt file yields the defaults and a warning; the
    game keeps running either way.
    """
    if not os.path.isfile(path):
        logger.warning("Level config %s not found, using defaults", path)
        return LevelConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value must be an object")
        cfg = LevelConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError, ValueError) as exc:
        logger.warning("Level config %s is corrupt (%s), using defaults", path, exc)
        return LevelConfig()

    logger.info("Loaded %s: %d fire / %d poison snakes, fire rate %.1f",
                cfg.level_name, cfg.fire_snakes, cfg.poison_snakes,
                cfg.snake_fire_rate)
    return cfg


def save_level_config(cfg: LevelConfig, path: str) -> None:
    """Write *cfg* as JSON that load_level_config() reads back."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(cfg), f, indent=2)


def configure_agent(agent, cfg: LevelConfig, index: int = 0):
    """Apply level settings to a freshly created agent.

    Must run before the agent's controller is built, since the
    controller reads the fire rate once.
    """
    if cfg.snakes_can_shoot and cfg.snake_fire_rate <= 0:
        raise ValueError(f"snake_fire_rate must be positive, got {cfg.snake_fire_rate}")
    agent.can_shoot = cfg.snakes_can_shoot
    agent.fire_rate = cfg.snake_fire_rate
    agent.shooting_range = cfg.snake_shooting_range
    agent.min_shooting_distance = cfg.snake_min_shoot_distance
    agent.projectile_type = cfg.projectile_type_for(index)
    agent.projectile_speed = cfg.projectile_speed
    agent.projectile_damage = cfg.projectile_damage
    agent.speed = cfg.snake_speed
    agent.instant_kill = cfg.instant_kill
    logger.debug("%s: %s snake, shoot=%s", agent.name,
                 agent.projectile_type.name.lower(), agent.can_shoot)
