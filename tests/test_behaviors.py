"""Scenario tests for the seven behavior strategies."""

import math
import random

import pytest
from pygame.math import Vector2

from ai.behaviors import (
    AmbushStrategy, ChaseStrategy, InterceptStrategy, PackHuntStrategy,
    PatrolStrategy, SniperStrategy, SteeringContext, WanderStrategy,
    make_strategy,
)
from ai.stuck_detector import MotionState
from entities.agent import Agent, Archetype, VisualState
from entities.player import PlayerState
from utils.helpers import ArenaBounds

from conftest import StaticPlayer


def _context(agent, player_pos, player_vel=(0.0, 0.0), motion=None,
             registry=None, dt=1.0 / 60.0) -> SteeringContext:
    return SteeringContext(
        agent=agent,
        player=PlayerState(player_pos, player_vel),
        motion=motion or MotionState(),
        bounds=ArenaBounds(),
        dt=dt,
        registry=registry,
        rng=random.Random(7),
    )


# ===========================================================================
# Strategy table
# ===========================================================================

class TestStrategyTable:
    @pytest.mark.parametrize("archetype, cls", [
        (Archetype.CHASE, ChaseStrategy),
        (Archetype.ATTACK, InterceptStrategy),
        (Archetype.RANDOM, WanderStrategy),
        (Archetype.AMBUSHER, AmbushStrategy),
        (Archetype.PATROLLER, PatrolStrategy),
        (Archetype.PACK_HUNTER, PackHuntStrategy),
        (Archetype.SNIPER, SniperStrategy),
    ])
    def test_each_archetype_gets_its_strategy(self, archetype, cls) -> None:
        assert isinstance(make_strategy(Agent(archetype)), cls)

    def test_unknown_archetype_rejected(self) -> None:
        with pytest.raises(ValueError):
            Agent(42)

    def test_archetype_is_read_only(self) -> None:
        agent = Agent(Archetype.CHASE)
        with pytest.raises(AttributeError):
            agent.archetype = Archetype.SNIPER


# ===========================================================================
# Chase / Intercept / Wander
# ===========================================================================

class TestChase:
    def test_chase_scenario(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE, (0.0, 0.0),
                                        player=StaticPlayer((5.0, 0.0)))
        result = controller.tick(1.0 / 60.0)
        speed = controller.agent.speed
        assert result.velocity.x == pytest.approx(speed)
        assert result.velocity.y == pytest.approx(0.0)
        assert controller.agent.facing == Vector2(1, 0)


class TestIntercept:
    def test_leads_a_moving_player(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (2.0, 0.0), (0.0, 1.0))
        predicted = InterceptStrategy().predicted_position(ctx)
        assert predicted.x == pytest.approx(2.0)
        assert predicted.y == pytest.approx(2.0 / agent.speed)

    def test_lookahead_is_capped(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (3.0, -2.0), (0.0, 0.5))
        predicted = InterceptStrategy().predicted_position(ctx)
        assert predicted.y == pytest.approx(-2.0 + 0.5 * 1.5)

    def test_prediction_clamped_inside_arena(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (3.9, 0.0), (5.0, 0.0))
        predicted = InterceptStrategy().predicted_position(ctx)
        assert predicted.x == pytest.approx(3.5)

    def test_standing_player_expected_to_flee_toward_open_space(self) -> None:
        agent = Agent(Archetype.ATTACK)
        strategy = InterceptStrategy()
        # More room to the left and below; far enough for the cut-off
        ctx = _context(agent, (2.0, 1.0))
        assert strategy.escape_guess(ctx) == Vector2(1.0, 0.0)
        point = strategy.intercept_point(ctx)
        assert point.x == pytest.approx(0.5)
        assert point.y == pytest.approx(-0.5)
        assert strategy.steer(ctx).target == point

    def test_far_moving_player_is_cut_off(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (2.0, 0.0), (0.0, 1.0))
        lead = 2.0 / agent.speed
        point = InterceptStrategy().intercept_point(ctx)
        assert point.x == pytest.approx(2.0)
        assert point.y == pytest.approx(lead * 1.5)

    def test_near_player_is_not_cut_off(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (0.9, 0.0), (0.0, 1.0))
        point = InterceptStrategy().intercept_point(ctx)
        assert point.y == pytest.approx(0.9 / agent.speed)

    def test_cut_off_point_stays_inside_arena(self) -> None:
        agent = Agent(Archetype.ATTACK)
        ctx = _context(agent, (3.0, 2.0), (2.0, 2.0))
        point = InterceptStrategy().intercept_point(ctx)
        assert point == Vector2(3.5, 2.5)

    def test_boost_inside_close_range(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.ATTACK,
                                        player=StaticPlayer((0.5, 0.0)))
        agent = controller.agent
        result = controller.tick(1.0 / 60.0)
        assert result.velocity.length() == pytest.approx(
            agent.speed * (1.0 + agent.boost_multiplier))
        assert result.visual == VisualState.HUNTING


class TestWander:
    def test_picks_in_bounds_target(self) -> None:
        agent = Agent(Archetype.RANDOM)
        strategy = WanderStrategy()
        intent = strategy.steer(_context(agent, (3.0, 0.0)))
        assert ArenaBounds().contains(strategy.state.target)
        assert intent.speed == agent.speed

    def test_new_target_every_interval(self) -> None:
        agent = Agent(Archetype.RANDOM)
        strategy = WanderStrategy()
        strategy.steer(_context(agent, (3.0, 0.0)))
        first = Vector2(strategy.state.target)
        strategy.steer(_context(agent, (3.0, 0.0), dt=agent.random_target_interval))
        assert strategy.state.target != first

    def test_stops_at_target(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.RANDOM)
        controller.strategy.state.target = Vector2(0.01, 0.0)
        result = controller.tick(1.0 / 60.0)
        assert result.velocity.length() == 0.0


# ===========================================================================
# Ambusher
# ===========================================================================

class TestAmbusher:
    def test_strikes_exactly_when_player_enters_range(self, make_controller) -> None:
        player = StaticPlayer((3.9, 2.9))
        controller, _ = make_controller(Archetype.AMBUSHER, player=player)
        agent = controller.agent
        state = controller.strategy.state
        assert agent.hide_time == 2.0 and agent.ambush_range == 2.0

        dt = 0.1
        for _ in range(9):
            player.move_to(agent.position + Vector2(2.05, 0.0))
            result = controller.tick(dt)
            assert state.is_hiding
            assert result.visual == VisualState.HIDDEN

        # t = 1.0 s: player reaches distance 1.9
        player.move_to(agent.position + Vector2(1.9, 0.0))
        result = controller.tick(dt)
        assert not state.is_hiding
        assert result.visual == VisualState.HUNTING
        assert result.velocity.length() == pytest.approx(agent.strike_speed)

    def test_hiding_drifts_slowly_around_anchor(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.AMBUSHER, (1.0, 1.0),
                                        player=StaticPlayer((-3.9, -2.9)))
        for _ in range(120):
            controller.tick(1.0 / 60.0)
        assert controller.agent.position.distance_to(Vector2(1.0, 1.0)) < 0.3

    def test_returns_to_hiding_when_player_escapes(self, make_controller) -> None:
        player = StaticPlayer((1.0, 0.0))
        controller, _ = make_controller(Archetype.AMBUSHER, player=player)
        controller.tick(0.1)
        assert not controller.strategy.state.is_hiding

        player.move_to(controller.agent.position + Vector2(4.5, 0.0))
        result = controller.tick(0.1)
        state = controller.strategy.state
        assert state.is_hiding
        assert state.anchor == controller.agent.position
        assert result.visual == VisualState.HIDDEN

    def test_relocates_after_hiding_too_long(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.AMBUSHER,
                                        player=StaticPlayer((50.0, 50.0)))
        controller.tick(0.1)
        anchor = Vector2(controller.strategy.state.anchor)
        for _ in range(45):
            controller.tick(0.1)
        assert controller.strategy.state.anchor != anchor

    def test_holds_still_once_drift_time_is_over(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.AMBUSHER, (1.0, 1.0),
                                        player=StaticPlayer((50.0, 50.0)))
        agent = controller.agent
        for _ in range(25):
            controller.tick(0.1)
        assert controller.strategy.state.hide_timer >= agent.hide_time
        parked = Vector2(agent.position)
        result = controller.tick(0.1)
        assert result.velocity.length() == 0.0
        assert agent.position == parked
        assert result.visual == VisualState.HIDDEN


# ===========================================================================
# Patroller
# ===========================================================================

class TestPatroller:
    def test_cycles_route_when_player_out_of_range(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.PATROLLER, (-2.0, 2.0),
                                        player=StaticPlayer((50.0, 50.0)))
        state = controller.strategy.state
        assert [tuple(p) for p in state.route] == [
            (-2.0, 2.0), (2.0, 2.0), (2.0, -2.0), (-2.0, -2.0)]

        visited = []
        for _ in range(60 * 60):
            controller.tick(1.0 / 60.0)
            if not visited or visited[-1] != state.patrol_index:
                visited.append(state.patrol_index)
            if len(visited) >= 5:
                break
        assert visited == [1, 2, 3, 0, 1]
        assert not state.is_alerted

    def test_alerted_chase_and_revert(self, make_controller) -> None:
        player = StaticPlayer((1.0, 0.0))
        controller, _ = make_controller(Archetype.PATROLLER, player=player)
        agent = controller.agent
        result = controller.tick(1.0 / 60.0)
        assert controller.strategy.state.is_alerted
        assert result.visual == VisualState.ALERT
        assert result.velocity.length() == pytest.approx(
            agent.speed * agent.chase_speed_multiplier)

        player.move_to((50.0, 50.0))
        result = controller.tick(1.0 / 60.0)
        assert not controller.strategy.state.is_alerted
        assert result.visual == VisualState.NORMAL

    def test_empty_route_is_a_no_op(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.PATROLLER, patrol_route=(),
                                        player=StaticPlayer((50.0, 50.0)))
        result = controller.tick(1.0 / 60.0)
        assert result.velocity.length() == 0.0


# ===========================================================================
# Pack hunter
# ===========================================================================

class TestPackHunter:
    def test_flanks_with_nearby_sibling(self, make_controller, registry) -> None:
        ally = Agent(Archetype.CHASE, position=(1.0, 0.0))
        registry.register(ally)
        controller, _ = make_controller(Archetype.PACK_HUNTER, registry=registry,
                                        player=StaticPlayer((0.0, -2.0)))
        result = controller.tick(1.0 / 60.0)
        state = controller.strategy.state

        to_ally = Vector2(1.0, 2.0).normalize().rotate(90.0)
        expected = Vector2(0.0, -2.0) + to_ally * 1.5
        assert state.is_coordinating
        assert state.flank_target.x == pytest.approx(expected.x)
        assert state.flank_target.y == pytest.approx(expected.y)
        assert result.visual == VisualState.HUNTING

    def test_chases_when_alone(self, make_controller, registry) -> None:
        controller, _ = make_controller(Archetype.PACK_HUNTER, registry=registry,
                                        player=StaticPlayer((3.0, 0.0)))
        result = controller.tick(1.0 / 60.0)
        assert not controller.strategy.state.is_coordinating
        assert result.velocity.x == pytest.approx(controller.agent.speed)

    def test_chases_when_sibling_out_of_range(self, make_controller, registry) -> None:
        registry.register(Agent(Archetype.CHASE, position=(-3.5, 0.0)))
        controller, _ = make_controller(Archetype.PACK_HUNTER, registry=registry,
                                        player=StaticPlayer((3.0, 0.0)))
        controller.tick(1.0 / 60.0)
        assert not controller.strategy.state.is_coordinating

    def test_flank_target_clamped_inside_arena(self, registry) -> None:
        agent = Agent(Archetype.PACK_HUNTER, position=(3.0, 2.0))
        ally = Agent(Archetype.CHASE, position=(3.5, 2.5))
        registry.register(agent)
        registry.register(ally)
        ctx = _context(agent, (3.9, 2.9), registry=registry)
        target = PackHuntStrategy().flank_target(ctx, ally)
        assert abs(target.x) <= 3.5 and abs(target.y) <= 2.5


# ===========================================================================
# Sniper
# ===========================================================================

class TestSniper:
    def test_inverted_band_rejected(self) -> None:
        agent = Agent(Archetype.SNIPER)
        agent.preferred_min_distance = 5.0
        agent.preferred_max_distance = 2.0
        with pytest.raises(ValueError):
            make_strategy(agent)

    def test_phase_differs_between_agents(self) -> None:
        a = SniperStrategy(1, 2.5, 4.0)
        b = SniperStrategy(2, 2.5, 4.0)
        assert a.state.phase != b.state.phase
        assert 0.0 <= a.state.phase < 2.0 * math.pi

    def test_retreats_when_too_close(self) -> None:
        agent = Agent(Archetype.SNIPER)
        intent = SniperStrategy(agent.agent_id, 2.5, 4.0).steer(
            _context(agent, (1.0, 0.0)))
        assert intent.direction.x < 0
        assert intent.speed == pytest.approx(agent.speed)

    def test_approaches_cautiously_when_too_far(self) -> None:
        agent = Agent(Archetype.SNIPER)
        intent = SniperStrategy(agent.agent_id, 2.5, 4.0).steer(
            _context(agent, (10.0, 0.0)))
        assert intent.direction.x == pytest.approx(1.0)
        assert intent.speed == pytest.approx(agent.speed * 0.6)

    def test_strafes_inside_band(self) -> None:
        agent = Agent(Archetype.SNIPER)
        strategy = SniperStrategy(agent.agent_id, 2.5, 4.0)
        strategy.state.phase = math.pi / 2           # sin() starts at its peak
        intent = strategy.steer(_context(agent, (3.25, 0.0), dt=0.0))
        assert abs(intent.direction.y) == pytest.approx(1.0)

    def test_reuses_escape_direction_when_stuck(self) -> None:
        agent = Agent(Archetype.SNIPER)
        motion = MotionState(stuck_timer=0.2, escape_direction=Vector2(0.0, 1.0))
        intent = SniperStrategy(agent.agent_id, 2.5, 4.0).steer(
            _context(agent, (3.0, 0.0), motion=motion))
        assert intent.direction == Vector2(0.0, 1.0)
