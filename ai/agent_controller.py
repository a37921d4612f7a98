"""
agent_controller.py – Per-tick orchestrator for one cobra.

Pipeline every tick:

    1. Locate the player      – no player means an idle tick
    2. Projectile gate        – cooldown + range, spawns via ProjectileSystem
    3. Stuck detector         – a hard escape skips steering this tick
    4. Behavior strategy      – fixed at construction
    5. Avoidance planner      – unless the intent bypasses it
    6. Apply                  – clamp to max speed, integrate, clamp to arena
    7. Visual tag + contact   – raises the one-frame ``player_caught`` event

Collaborators are injected: the spatial probe, the pack registry, a
player locator (any callable returning a ``PlayerState`` or None), the
arena bounds, and optionally a projectile system and a physics object
with ``resolve_move(start, end, radius)``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from pygame.math import Vector2

from ai.avoidance_planner import AvoidancePlanner, AvoidanceConfig
from ai.behaviors import SteeringContext, SteeringIntent, make_strategy
from ai.spatial_probe import NullProbe
from ai.stuck_detector import MotionState, StuckConfig, StuckDetector
from entities.agent import VisualState
from settings import DEBUG_LOG_INTERVAL
from systems.projectile_system import FireGate
from utils.helpers import ArenaBounds, clamp_length, safe_normalize

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outputs of one controller tick."""

    velocity: Vector2 = field(default_factory=Vector2)
    displacement: Vector2 = field(default_factory=Vector2)
    visual: VisualState = VisualState.NORMAL
    contact: bool = False
    player_caught: bool = False
    fired: bool = False
    escaped: bool = False
    idle: bool = False


class AgentController:
    """Moves one agent each tick. Call ``tick(dt)`` with scaled time."""

    def __init__(self, agent, probe=None, registry=None, player_locator=None,
                 bounds: ArenaBounds | None = None, projectiles=None,
                 rng: random.Random | None = None, physics=None,
                 avoidance: AvoidanceConfig | None = None,
                 stuck: StuckConfig | None = None):
        self.agent = agent
        self.probe = probe or NullProbe()
        self.registry = registry
        self.player_locator = player_locator
        self.bounds = bounds or ArenaBounds()
        self.projectiles = projectiles
        self.physics = physics
        self.rng = rng or random.Random()

        self.motion = MotionState()
        self.strategy = make_strategy(agent)
        self.planner = AvoidancePlanner(self.probe, avoidance)
        self.stuck_detector = StuckDetector(self.probe, self.bounds, stuck, self.rng,
                                            physics)
        self.fire_gate: FireGate | None = None
        if agent.can_shoot:
            self.fire_gate = FireGate(agent.fire_rate, agent.shooting_range,
                                      agent.min_shooting_distance)

        # One-frame event flag, cleared at the start of every tick
        self.player_caught = False
        self._debug_timer = 0.0

        if registry is not None:
            registry.register(agent)

    def dispose(self):
        """Remove the agent from the pack at level teardown."""
        if self.registry is not None:
            self.registry.unregister(self.agent)

    # ══════════════════════════════════════════════════════
    #  Tick
    # ══════════════════════════════════════════════════════

    def tick(self, dt: float) -> TickResult:
        agent = self.agent
        self.player_caught = False
        dt = max(0.0, dt)

        player = self.player_locator() if self.player_locator else None
        if player is None:
            agent.velocity = Vector2(0.0, 0.0)
            self.motion.last_commanded_step = 0.0
            return TickResult(visual=agent.visual_state, idle=True)

        fired = self._update_weapon(dt, player)

        start = Vector2(agent.position)
        if self.stuck_detector.update(agent, self.motion, dt, player.position):
            result = TickResult(
                displacement=agent.position - start,
                visual=agent.visual_state,
                fired=fired,
                escaped=True,
            )
        else:
            ctx = SteeringContext(agent, player, self.motion, self.bounds, dt,
                                  self.registry, self.rng)
            intent = self.strategy.steer(ctx)
            velocity, step = self._resolve_velocity(intent, dt)
            self._apply(start, velocity, step, dt)
            agent.visual_state = intent.visual
            result = TickResult(
                velocity=Vector2(agent.velocity),
                displacement=agent.position - start,
                visual=intent.visual,
                fired=fired,
            )

        self._check_contact(player, result)
        self._debug_log(dt, player)
        return result

    def _resolve_velocity(self, intent: SteeringIntent, dt: float):
        """Velocity clamped to max speed, and the step to take this tick."""
        max_speed = self.agent.max_speed()
        if intent.displacement is not None:
            step = clamp_length(intent.displacement, max_speed * dt)
            velocity = step / dt if dt > 0 else Vector2(0.0, 0.0)
            return velocity, step

        if intent.bypass_planner:
            velocity = safe_normalize(intent.direction) * max(0.0, intent.speed)
        else:
            velocity = self.planner.plan(self.agent, self.motion,
                                         intent.direction, intent.speed,
                                         intent.target, dt)
        velocity = clamp_length(velocity, max_speed)
        return velocity, velocity * dt

    def _apply(self, start: Vector2, velocity: Vector2, step: Vector2, dt: float):
        agent = self.agent
        end = start + step
        if self.physics is not None:
            end = self.physics.resolve_move(start, end, agent.size)
        agent.position = self.bounds.clamp(end)
        agent.velocity = Vector2(velocity)
        if velocity.length_squared() > 0:
            agent.facing = safe_normalize(velocity)
        self.motion.last_commanded_step = step.length()

    # ══════════════════════════════════════════════════════
    #  Weapon / contact
    # ══════════════════════════════════════════════════════

    def _update_weapon(self, dt: float, player) -> bool:
        if self.fire_gate is None:
            return False
        distance = self.agent.distance_to(player.position)
        if not self.fire_gate.update(dt, distance):
            return False
        if self.projectiles is not None:
            self.projectiles.spawn_at(self.agent.position, player.position,
                                      damage=self.agent.projectile_damage,
                                      speed=self.agent.projectile_speed,
                                      kind=self.agent.projectile_type,
                                      owner_id=self.agent.agent_id)
        return True

    def _check_contact(self, player, result: TickResult):
        agent = self.agent
        reach = agent.size + player.radius
        result.contact = agent.distance_to(player.position) < reach
        if result.contact and agent.instant_kill and not player.shield_active:
            self.player_caught = True
            result.player_caught = True
            logger.info("%s caught the player!", agent.name)

    def _debug_log(self, dt: float, player):
        if not logger.isEnabledFor(logging.DEBUG):
            return
        self._debug_timer += dt
        if self._debug_timer < DEBUG_LOG_INTERVAL:
            return
        self._debug_timer = 0.0
        agent, motion = self.agent, self.motion
        logger.debug(
            "%s pos=(%.2f,%.2f) dist=%.2f stuck=%.2f force=%.2f detour=%s "
            "sign=%+d state=%s",
            agent.name, agent.position.x, agent.position.y,
            agent.distance_to(player.position), motion.stuck_timer,
            motion.unstuck_force_timer, motion.is_pathfinding,
            motion.unstuck_sign, agent.visual_state.value,
        )
