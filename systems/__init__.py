"""systems package – Arena walls, projectiles, level configuration."""

from .arena import ArenaWorld, Wall, default_arena, maze_layout
from .projectile_system import FireGate, Projectile, ProjectileSystem, ProjectileType
from .level_config import (
    LevelConfig, configure_agent, load_level_config, preset, save_level_config,
)
