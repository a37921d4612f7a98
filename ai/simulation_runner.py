"""
simulation_runner.py – Headless cobra-vs-player episodes.

Runs N episodes in a small maze: one agent of every archetype hunts a
scripted evasive player while difficulty rises over time and the
player occasionally triggers slow motion.  Nothing is rendered; the
loop advances with a fixed dt so runs are reproducible from a seed.

Usage (from CLI):
    python main.py --simulate 5 --seconds 60

Architecture:
    SimulationRunner builds the arena, the pack registry, the
    projectile system and one AgentController per agent, then drives
    them exactly the way a game loop would: raw dt → time scale →
    difficulty → controllers → projectiles.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from pygame.math import Vector2

from ai.agent_controller import AgentController
from ai.difficulty_adapter import DifficultyProgression, apply_difficulty
from ai.pack_registry import PackRegistry
from ai.personality import apply_personality_modifiers
from ai.stats import EpisodeStats
from entities.agent import Agent, Archetype, PersonalityTrait
from entities.player import KinematicPlayer
from settings import TICK_DT, MAX_TICK_DT, PLAYER_RADIUS
from systems.arena import ArenaWorld, default_arena
from systems.level_config import LevelConfig, configure_agent
from systems.projectile_system import ProjectileSystem
from utils.helpers import safe_normalize
from utils.time_scale import TimeScaleManager

logger = logging.getLogger(__name__)

_SPAWN_POINTS = (
    (-3.5, 2.5), (3.5, -2.5), (-1.5, -2.0), (1.5, 2.0),
    (3.5, 0.0), (-3.5, 0.5), (0.0, 2.5),
)
_PLAYER_START = (0.0, -2.4)


# ══════════════════════════════════════════════════════════
#  Configuration / per-episode result
# ══════════════════════════════════════════════════════════

@dataclass
class SimulationConfig:
    seconds: float = 60.0
    dt: float = TICK_DT
    seed: int | None = None
    archetypes: tuple = tuple(Archetype)
    slow_motion_every: float = 20.0       # real seconds between attempts, 0 = never
    instant_kill: bool = True
    respawn_shield_time: float = 2.0
    level: LevelConfig | None = None
    plot_path: str | None = None
    quiet: bool = False


@dataclass
class EpisodeResult:
    """Lightweight record for one simulated episode."""
    episode: int = 0
    ticks: int = 0
    sim_time: float = 0.0
    catches: int = 0
    hard_escapes: int = 0
    shots: int = 0
    projectile_hits: int = 0
    mean_distance: float = 0.0
    difficulty_level: float = 1.0
    escapes_by_archetype: dict = field(default_factory=dict)


# ══════════════════════════════════════════════════════════
#  Scripted player
# ══════════════════════════════════════════════════════════

class EvasivePlayer(KinematicPlayer):
    """Runs away from the nearest agent with a little randomness."""

    def __init__(self, world: ArenaWorld, rng: random.Random,
                 speed: float = 1.2, replan_interval: float = 0.8):
        super().__init__(_PLAYER_START, world.bounds)
        self.world = world
        self.rng = rng
        self.speed = speed
        self.replan_interval = replan_interval
        self._replan_timer = 0.0
        self._shield_timer = 0.0

    def drive(self, dt: float, agents):
        self._replan_timer -= dt
        if self._replan_timer <= 0 and agents:
            self._replan_timer = self.replan_interval
            nearest = min(agents, key=lambda a: a.position.distance_to(self.position))
            away = safe_normalize(self.position - nearest.position)
            jitter = Vector2(self.rng.uniform(-1, 1), self.rng.uniform(-1, 1))
            heading = safe_normalize(away * 1.5 + jitter)
            self.set_velocity(heading * self.speed)

        end = self.world.resolve_move(self.position, self.position + self.velocity * dt,
                                      PLAYER_RADIUS)
        if end == self.position:
            # Blocked: pick a new heading next tick
            self._replan_timer = 0.0
        self.position = self.bounds.clamp(end)

        if self._shield_timer > 0:
            self._shield_timer -= dt
            self.shield_active = self._shield_timer > 0

    def respawn(self, shield_time: float):
        self.caught_count += 1
        self.position = self.bounds.random_point(self.rng)
        while self.world.blocked_at(self.position, PLAYER_RADIUS):
            self.position = self.bounds.random_point(self.rng)
        self.velocity = Vector2(0.0, 0.0)
        self._replan_timer = 0.0
        self._shield_timer = shield_time
        self.shield_active = shield_time > 0


# ══════════════════════════════════════════════════════════
#  Simulation Runner
# ══════════════════════════════════════════════════════════

class SimulationRunner:
    """Run *n_episodes* headless episodes and summarise them."""

    def __init__(self, n_episodes: int = 1, config: SimulationConfig | None = None):
        self._n_episodes = max(1, n_episodes)
        self.cfg = config or SimulationConfig()
        self._results: list[EpisodeResult] = []

    # ── Public entry point ────────────────────────────────

    def run(self) -> list[EpisodeResult]:
        for i in range(1, self._n_episodes + 1):
            logger.info("=== Simulation episode %d / %d ===", i, self._n_episodes)
            result = self._run_one_episode(i)
            self._results.append(result)
            logger.info(
                "Episode %d: caught=%d  escapes=%d  shots=%d  dist=%.2f  level=%.2f",
                i, result.catches, result.hard_escapes, result.shots,
                result.mean_distance, result.difficulty_level,
            )
        if not self.cfg.quiet:
            self._print_summary()
        return self._results

    # ── Setup ─────────────────────────────────────────────

    def build_agents(self, rng: random.Random, world: ArenaWorld,
                     registry: PackRegistry, player, projectiles):
        cfg = self.cfg
        controllers = []
        for index, archetype in enumerate(cfg.archetypes):
            spawn = _SPAWN_POINTS[index % len(_SPAWN_POINTS)]
            agent = Agent(archetype, position=spawn,
                          personality=rng.choice(list(PersonalityTrait)),
                          instant_kill=cfg.instant_kill, agent_id=index + 1)
            if cfg.level is not None:
                configure_agent(agent, cfg.level, index)
                agent.instant_kill = cfg.instant_kill or cfg.level.instant_kill
            apply_personality_modifiers(agent, rng)
            apply_difficulty(agent)
            controllers.append(AgentController(
                agent, probe=world, registry=registry, player_locator=player,
                bounds=world.bounds, projectiles=projectiles, rng=rng,
                physics=world,
            ))
        return controllers

    # ── Single episode ────────────────────────────────────

    def _run_one_episode(self, episode: int) -> EpisodeResult:
        cfg = self.cfg
        seed = None if cfg.seed is None else cfg.seed + episode
        rng = random.Random(seed)

        world = default_arena()
        registry = PackRegistry()
        projectiles = ProjectileSystem(world.bounds)
        time_scale = TimeScaleManager()
        progression = DifficultyProgression(registry)
        player = EvasivePlayer(world, rng)
        controllers = self.build_agents(rng, world, registry, player, projectiles)
        agents = [c.agent for c in controllers]

        stats = EpisodeStats(episode)
        escapes = {c.agent.archetype.name: 0 for c in controllers}
        slow_timer = 0.0
        n_ticks = max(1, int(round(cfg.seconds / cfg.dt)))

        for _ in range(n_ticks):
            raw_dt = min(cfg.dt, MAX_TICK_DT)

            slow_timer += raw_dt
            if cfg.slow_motion_every > 0 and slow_timer >= cfg.slow_motion_every:
                slow_timer = 0.0
                if time_scale.try_activate():
                    stats.slow_motion_uses += 1
            dt = time_scale.apply(raw_dt)

            player.drive(dt, agents)
            progression.update(dt)
            results = [c.tick(dt) for c in controllers]

            projectiles.update(dt)
            hits = projectiles.check_collisions(player.position, PLAYER_RADIUS,
                                                invulnerable=player.shield_active)
            stats.record_projectile_hits(len(hits))
            if hits:
                logger.debug("Player took %d damage", sum(p.damage for p in hits))

            for ctrl, result in zip(controllers, results):
                if result.escaped:
                    escapes[ctrl.agent.archetype.name] += 1
            stats.record_tick(dt, results,
                              [a.distance_to(player.position) for a in agents])

            if any(r.player_caught for r in results):
                player.respawn(cfg.respawn_shield_time)

        for ctrl in controllers:
            ctrl.dispose()
        stats.difficulty_level = progression.level
        stats.end_episode(cfg.plot_path if episode == self._n_episodes else None,
                          quiet=cfg.quiet)

        return EpisodeResult(
            episode=episode,
            ticks=stats.ticks,
            sim_time=stats.sim_time,
            catches=stats.catches,
            hard_escapes=stats.hard_escapes,
            shots=stats.shots,
            projectile_hits=stats.projectile_hits,
            mean_distance=stats.mean_distance,
            difficulty_level=progression.level,
            escapes_by_archetype=escapes,
        )

    # ── Summary printout ──────────────────────────────────

    def _print_summary(self) -> None:
        n = len(self._results)
        if n == 0:
            print("\nNo episodes completed.")
            return

        print(f"\n{'=' * 58}")
        print(f"  Simulation Results  ({n} episodes)")
        print(f"{'=' * 58}")

        catches = sum(r.catches for r in self._results)
        escapes = sum(r.hard_escapes for r in self._results)
        shots = sum(r.shots for r in self._results)
        hits = sum(r.projectile_hits for r in self._results)
        print(f"\n  Player caught      : {catches:>5d}  ({catches / n:.1f} per episode)")
        print(f"  Hard escapes       : {escapes:>5d}  ({escapes / n:.1f} per episode)")
        print(f"  Shots / hits       : {shots:>5d} / {hits}")

        avg_dist = sum(r.mean_distance for r in self._results) / n
        avg_level = sum(r.difficulty_level for r in self._results) / n
        print(f"\n  Avg mean distance  : {avg_dist:.2f}")
        print(f"  Avg final level    : {avg_level:.2f}")

        # ── Hard escapes per archetype ────────────────────
        totals: dict[str, int] = {}
        for r in self._results:
            for name, count in r.escapes_by_archetype.items():
                totals[name] = totals.get(name, 0) + count
        print(f"\n  Hard escapes by archetype:")
        for name in sorted(totals, key=lambda k: totals[k], reverse=True):
            print(f"    {name:<12s}: {totals[name]:>4d}")
        print(f"{'=' * 58}\n")
