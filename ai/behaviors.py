"""
behaviors.py – The seven cobra behavior strategies.

Each strategy owns the state of its archetype and turns
(agent, player state) into a ``SteeringIntent``: a desired direction
and speed, the point being steered toward, and whether the avoidance
planner should be skipped.  The strategy is picked once from a sealed
table when the controller is built; nothing switches it afterwards.

    CHASE        → ChaseStrategy
    ATTACK       → InterceptStrategy
    RANDOM       → WanderStrategy
    AMBUSHER     → AmbushStrategy
    PATROLLER    → PatrolStrategy
    PACK_HUNTER  → PackHuntStrategy
    SNIPER       → SniperStrategy
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from types import MappingProxyType

from pygame.math import Vector2

from entities.agent import Archetype, VisualState
from settings import (
    PREDICTION_MAX_LOOKAHEAD, WANDER_ARRIVE_DISTANCE,
    INTERCEPT_STATIONARY_SPEED, INTERCEPT_ESCAPE_OFFSET,
    INTERCEPT_CUTOFF_DISTANCE, INTERCEPT_CUTOFF_WEIGHT,
    HIDE_DRIFT_AMPLITUDE, HIDE_DRIFT_FREQUENCY, HIDE_DRIFT_LERP_RATE,
    PATROL_ARRIVE_DISTANCE, FLANK_OFFSET,
    SNIPER_STRAFE_FREQUENCY, SNIPER_STRAFE_SPEED_MULT,
    SNIPER_RETREAT_SPEED_MULT, SNIPER_RETREAT_STRAFE_WEIGHT,
    SNIPER_APPROACH_SPEED_MULT, SNIPER_BAND_CORRECTION,
    SOFT_STUCK_THRESHOLD,
)
from utils.helpers import direction_to, perpendicular, safe_normalize

logger = logging.getLogger(__name__)

_GOLDEN_RATIO_CONJUGATE = 0.6180339887498949


@dataclass
class SteeringIntent:
    """What a behavior wants this tick, before obstacle avoidance."""

    direction: Vector2 = field(default_factory=Vector2)
    speed: float = 0.0
    target: Vector2 | None = None
    bypass_planner: bool = False
    displacement: Vector2 | None = None    # exact move, overrides direction × speed
    visual: VisualState = VisualState.NORMAL


@dataclass
class SteeringContext:
    """Everything a strategy may read during one tick."""

    agent: object
    player: object                          # PlayerState
    motion: object                          # MotionState
    bounds: object                          # ArenaBounds
    dt: float
    registry: object = None
    rng: random.Random = field(default_factory=random.Random)

    @property
    def soft_stuck(self) -> bool:
        return self.motion.is_soft_stuck(SOFT_STUCK_THRESHOLD)


def _idle(visual: VisualState = VisualState.NORMAL) -> SteeringIntent:
    return SteeringIntent(visual=visual)


def _toward(agent, point: Vector2, speed: float,
            visual: VisualState = VisualState.NORMAL,
            bypass: bool = False) -> SteeringIntent:
    return SteeringIntent(
        direction=direction_to(agent.position, point),
        speed=speed,
        target=Vector2(point),
        bypass_planner=bypass,
        visual=visual,
    )


class BehaviorStrategy:
    """Base class: one instance per agent, holding that agent's state."""

    archetype: Archetype

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        raise NotImplementedError


# ══════════════════════════════════════════════════════════
#  Chase / Intercept / Wander
# ══════════════════════════════════════════════════════════

class ChaseStrategy(BehaviorStrategy):
    archetype = Archetype.CHASE

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        return _toward(ctx.agent, ctx.player.position, ctx.agent.speed)


class InterceptStrategy(BehaviorStrategy):
    """Cuts off the player's escape, boosting at close range.

    A moving player is led by their velocity.  A standing player is
    expected to bolt toward the roomier side of the arena on each axis.
    Further out than the cut-off distance the aim point is pushed past
    that guess so the cobra lands across the escape route instead of
    trailing it.
    """

    archetype = Archetype.ATTACK

    def _lead(self, ctx: SteeringContext) -> Vector2:
        agent, player = ctx.agent, ctx.player
        distance = agent.distance_to(player.position)
        lookahead = 0.0
        if agent.speed > 0:
            lookahead = min(distance / agent.speed, PREDICTION_MAX_LOOKAHEAD)
        return (player.position
                + player.velocity * lookahead * agent.prediction_multiplier)

    def predicted_position(self, ctx: SteeringContext) -> Vector2:
        return ctx.bounds.clamp_target(self._lead(ctx))

    def escape_guess(self, ctx: SteeringContext) -> Vector2:
        pos, bounds = ctx.player.position, ctx.bounds
        room_left = pos.x + bounds.half_width
        room_right = bounds.half_width - pos.x
        room_up = bounds.half_height - pos.y
        room_down = pos.y + bounds.half_height
        flee = Vector2(-1.0 if room_left > room_right else 1.0,
                       1.0 if room_up > room_down else -1.0)
        return pos + flee * INTERCEPT_ESCAPE_OFFSET

    def intercept_point(self, ctx: SteeringContext) -> Vector2:
        agent, player = ctx.agent, ctx.player
        if player.velocity.length() > INTERCEPT_STATIONARY_SPEED:
            future = self._lead(ctx)
        else:
            future = self.escape_guess(ctx)
        if agent.distance_to(player.position) > INTERCEPT_CUTOFF_DISTANCE:
            future = future + (future - player.position) * INTERCEPT_CUTOFF_WEIGHT
        return ctx.bounds.clamp_target(future)

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent = ctx.agent
        if agent.distance_to(ctx.player.position) < agent.close_range_distance:
            # Final lunge: no escape guessing this close
            return _toward(agent, self.predicted_position(ctx),
                           agent.speed * (1.0 + agent.boost_multiplier),
                           VisualState.HUNTING)
        return _toward(agent, self.intercept_point(ctx), agent.speed)


@dataclass
class WanderState:
    target: Vector2 | None = None
    timer: float = 0.0


class WanderStrategy(BehaviorStrategy):
    archetype = Archetype.RANDOM

    def __init__(self):
        self.state = WanderState()

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state = ctx.agent, self.state
        state.timer += ctx.dt
        if state.target is None or state.timer >= agent.random_target_interval:
            state.target = ctx.bounds.random_point(ctx.rng)
            state.timer = 0.0

        if agent.distance_to(state.target) <= WANDER_ARRIVE_DISTANCE:
            return SteeringIntent(target=Vector2(state.target))
        return _toward(agent, state.target, agent.speed)


# ══════════════════════════════════════════════════════════
#  Ambusher
# ══════════════════════════════════════════════════════════

@dataclass
class AmbusherState:
    is_hiding: bool = True
    hide_timer: float = 0.0
    anchor: Vector2 | None = None
    clock: float = 0.0


class AmbushStrategy(BehaviorStrategy):
    """Hides near an anchor, strikes once the player is in range."""

    archetype = Archetype.AMBUSHER

    def __init__(self):
        self.state = AmbusherState()

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state = ctx.agent, self.state
        if state.anchor is None:
            state.anchor = Vector2(agent.position)
        distance = agent.distance_to(ctx.player.position)

        if state.is_hiding:
            if distance < agent.ambush_range:
                state.is_hiding = False
                state.hide_timer = 0.0
                logger.info("%s strikes (player at %.2f)", agent.name, distance)
                return self._strike(ctx)
            return self._hide(ctx)

        if distance > agent.ambush_range * 2.0:
            state.is_hiding = True
            state.hide_timer = 0.0
            state.anchor = Vector2(agent.position)
            logger.info("%s lost the player, hiding again", agent.name)
            return _idle(VisualState.HIDDEN)
        return self._strike(ctx)

    def _strike(self, ctx: SteeringContext) -> SteeringIntent:
        return _toward(ctx.agent, ctx.player.position, ctx.agent.strike_speed,
                       VisualState.HUNTING)

    def _hide(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state, dt = ctx.agent, self.state, ctx.dt
        state.hide_timer += dt
        state.clock += dt

        if state.hide_timer > agent.hide_time * 2.0:
            state.anchor = ctx.bounds.random_point(ctx.rng)
            state.hide_timer = 0.0
            logger.debug("%s relocating ambush to (%.2f, %.2f)",
                         agent.name, state.anchor.x, state.anchor.y)

        if state.hide_timer >= agent.hide_time:
            # Drift settles; hold still until the next relocation
            return _idle(VisualState.HIDDEN)

        drift = math.sin(state.clock * HIDE_DRIFT_FREQUENCY) * HIDE_DRIFT_AMPLITUDE
        goal = state.anchor + Vector2(drift, drift * 0.5)
        new_position = agent.position.lerp(goal, min(1.0, dt * HIDE_DRIFT_LERP_RATE))
        displacement = new_position - agent.position
        speed = displacement.length() / dt if dt > 0 else 0.0
        return SteeringIntent(
            direction=safe_normalize(displacement),
            speed=speed,
            target=goal,
            bypass_planner=True,
            displacement=displacement,
            visual=VisualState.HIDDEN,
        )


# ══════════════════════════════════════════════════════════
#  Patroller
# ══════════════════════════════════════════════════════════

@dataclass
class PatrollerState:
    route: tuple = ()
    patrol_index: int = 0
    is_alerted: bool = False

    def current_waypoint(self) -> Vector2 | None:
        if not self.route:
            return None
        return self.route[self.patrol_index % len(self.route)]

    def advance(self):
        if self.route:
            self.patrol_index = (self.patrol_index + 1) % len(self.route)


class PatrolStrategy(BehaviorStrategy):
    """Walks a closed route; chases while the player is inside alert range."""

    archetype = Archetype.PATROLLER

    def __init__(self, route=()):
        self.state = PatrollerState(route=tuple(Vector2(p) for p in route))

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state = ctx.agent, self.state
        distance = agent.distance_to(ctx.player.position)

        if distance < agent.alert_range:
            if not state.is_alerted:
                state.is_alerted = True
                logger.info("%s alerted (player at %.2f)", agent.name, distance)
            return _toward(agent, ctx.player.position,
                           agent.speed * agent.chase_speed_multiplier,
                           VisualState.ALERT)
        if state.is_alerted:
            state.is_alerted = False
            logger.info("%s resumes patrol at waypoint %d",
                        agent.name, state.patrol_index)

        waypoint = state.current_waypoint()
        if waypoint is None:
            return _idle()
        if agent.distance_to(waypoint) <= PATROL_ARRIVE_DISTANCE:
            state.advance()
            waypoint = state.current_waypoint()

        speed = agent.patrol_speed
        if ctx.dt > 0:
            # Never overshoot a waypoint on a long frame
            speed = min(speed, agent.distance_to(waypoint) / ctx.dt)
        return _toward(agent, waypoint, speed, bypass=True)


# ══════════════════════════════════════════════════════════
#  Pack hunter
# ══════════════════════════════════════════════════════════

@dataclass
class PackHunterState:
    is_coordinating: bool = False
    flank_target: Vector2 | None = None


class PackHuntStrategy(BehaviorStrategy):
    """Flanks the player opposite the nearest sibling, else plain chase."""

    archetype = Archetype.PACK_HUNTER

    def __init__(self):
        self.state = PackHunterState()
        self._chase = ChaseStrategy()

    def flank_target(self, ctx: SteeringContext, ally) -> Vector2:
        player_pos = ctx.player.position
        to_ally = direction_to(player_pos, ally.position)
        if to_ally.length_squared() == 0:
            to_ally = direction_to(player_pos, ctx.agent.position)
        if to_ally.length_squared() == 0:
            to_ally = Vector2(1.0, 0.0)
        flank = to_ally.rotate(ctx.agent.flanking_angle)
        return ctx.bounds.clamp_target(player_pos + flank * FLANK_OFFSET)

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state = ctx.agent, self.state
        ally = ctx.registry.nearest_sibling(agent) if ctx.registry else None

        if ally is not None and agent.distance_to(ally.position) < agent.coordination_range:
            if not state.is_coordinating:
                logger.debug("%s coordinating with %s", agent.name, ally.name)
            state.is_coordinating = True
            state.flank_target = self.flank_target(ctx, ally)
            return _toward(agent, state.flank_target, agent.speed,
                           VisualState.HUNTING)

        state.is_coordinating = False
        state.flank_target = None
        return self._chase.steer(ctx)


# ══════════════════════════════════════════════════════════
#  Sniper
# ══════════════════════════════════════════════════════════

@dataclass
class SniperState:
    phase: float = 0.0
    clock: float = 0.0


class SniperStrategy(BehaviorStrategy):
    """Holds a distance band and strafes; siblings are phase-shifted."""

    archetype = Archetype.SNIPER

    def __init__(self, agent_id: int, min_distance: float, max_distance: float):
        if min_distance < 0 or max_distance < min_distance:
            raise ValueError(
                f"Invalid sniper band [{min_distance}, {max_distance}]")
        phase = ((agent_id * _GOLDEN_RATIO_CONJUGATE) % 1.0) * 2.0 * math.pi
        self.state = SniperState(phase=phase)

    def steer(self, ctx: SteeringContext) -> SteeringIntent:
        agent, state, motion = ctx.agent, self.state, ctx.motion
        state.clock += ctx.dt

        if ctx.soft_stuck and motion.escape_direction is not None:
            direction = safe_normalize(motion.escape_direction)
            return SteeringIntent(
                direction=direction,
                speed=agent.speed,
                target=agent.position + direction * agent.size * 4.0,
            )

        to_player = direction_to(agent.position, ctx.player.position)
        distance = agent.distance_to(ctx.player.position)
        side = perpendicular(to_player)
        wave = math.sin(SNIPER_STRAFE_FREQUENCY * state.clock + state.phase)
        lo, hi = agent.preferred_min_distance, agent.preferred_max_distance

        if distance < lo:
            direction = safe_normalize(
                -to_player + side * (wave * SNIPER_RETREAT_STRAFE_WEIGHT))
            speed = agent.speed * SNIPER_RETREAT_SPEED_MULT
        elif distance > hi:
            direction = to_player
            speed = agent.speed * SNIPER_APPROACH_SPEED_MULT
        else:
            half_band = max((hi - lo) * 0.5, 1e-6)
            radial = (distance - (lo + hi) * 0.5) / half_band
            direction = safe_normalize(
                side * wave + to_player * (radial * SNIPER_BAND_CORRECTION))
            speed = agent.speed * SNIPER_STRAFE_SPEED_MULT

        return SteeringIntent(
            direction=direction,
            speed=speed,
            target=agent.position + direction * max(distance, 1.0),
        )


# ══════════════════════════════════════════════════════════
#  Sealed strategy table
# ══════════════════════════════════════════════════════════

_FACTORIES = MappingProxyType({
    Archetype.CHASE: lambda agent: ChaseStrategy(),
    Archetype.ATTACK: lambda agent: InterceptStrategy(),
    Archetype.RANDOM: lambda agent: WanderStrategy(),
    Archetype.AMBUSHER: lambda agent: AmbushStrategy(),
    Archetype.PATROLLER: lambda agent: PatrolStrategy(agent.patrol_route),
    Archetype.PACK_HUNTER: lambda agent: PackHuntStrategy(),
    Archetype.SNIPER: lambda agent: SniperStrategy(
        agent.agent_id, agent.preferred_min_distance,
        agent.preferred_max_distance),
})


def make_strategy(agent) -> BehaviorStrategy:
    """Build the one strategy *agent* will run for its whole lifetime."""
    try:
        factory = _FACTORIES[agent.archetype]
    except KeyError:
        raise ValueError(f"No strategy for archetype {agent.archetype!r}") from None
    return factory(agent)
