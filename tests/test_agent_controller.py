"""Controller-level properties: speed limits, bounds, liveness, events."""

import math

import pytest
from pygame.math import Vector2

from ai.agent_controller import AgentController
from ai.behaviors import SteeringIntent
from entities.agent import Agent, Archetype
from settings import HARD_ESCAPE_NUDGE, UNSTUCK_FORCE_CEILING
from systems.arena import ArenaWorld, maze_layout
from systems.level_config import configure_agent, preset
from systems.projectile_system import ProjectileSystem

from conftest import StaticPlayer

DT = 1.0 / 60.0


class CirclingPlayer(StaticPlayer):
    """Runs a circle around the arena centre, with matching velocity."""

    def __init__(self, radius=2.0, angular_speed=0.8):
        super().__init__((radius, 0.0))
        self.radius = radius
        self.angular_speed = angular_speed
        self.t = 0.0

    def advance(self, dt):
        self.t += dt
        a = self.t * self.angular_speed
        self.state.position = Vector2(math.cos(a), math.sin(a)) * self.radius
        self.state.velocity = Vector2(-math.sin(a), math.cos(a)) * (
            self.radius * self.angular_speed)


# ===========================================================================
# Long-run limits
# ===========================================================================

class TestLongRunLimits:
    @pytest.mark.parametrize("archetype", list(Archetype))
    def test_speed_and_bounds_hold_in_maze(self, make_controller, registry,
                                           bounds, archetype) -> None:
        world = ArenaWorld(maze_layout())
        player = CirclingPlayer()
        controller, _ = make_controller(archetype, (-3.5, 2.5), player=player,
                                        probe=world, physics=world,
                                        registry=registry)
        # A sibling so pack hunters actually coordinate
        sibling, _ = make_controller(Archetype.CHASE, (-3.0, 2.4), player=player,
                                     probe=world, physics=world, registry=registry)
        agent = controller.agent

        for _ in range(600):
            player.advance(DT)
            sibling.tick(DT)
            result = controller.tick(DT)
            assert result.velocity.length() <= agent.max_speed() + 1e-6
            if not result.escaped:
                assert result.displacement.length() <= agent.max_speed() * DT + 1e-6
            assert bounds.contains(agent.position)

    def test_no_player_is_an_idle_tick(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE)
        controller.player_locator = lambda: None
        result = controller.tick(DT)
        assert result.idle
        assert result.velocity.length() == 0.0
        assert controller.agent.position == Vector2(0, 0)

    def test_speed_above_max_is_clamped(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE)
        controller.strategy.steer = lambda ctx: SteeringIntent(
            direction=Vector2(1, 0), speed=50.0, target=Vector2(5, 0))
        result = controller.tick(DT)
        assert result.velocity.length() == pytest.approx(controller.agent.max_speed())


# ===========================================================================
# Liveness
# ===========================================================================

class TestLiveness:
    def test_moves_within_one_tick_of_ceiling(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE,
                                        player=StaticPlayer((3.0, 0.0)))
        motion = controller.motion
        motion.previous_position = Vector2(controller.agent.position)
        motion.last_commanded_step = 0.025
        motion.stuck_timer = UNSTUCK_FORCE_CEILING - 0.01
        motion.unstuck_force_timer = UNSTUCK_FORCE_CEILING - 0.01

        result = controller.tick(DT)
        assert result.escaped
        assert result.velocity.length() == 0.0
        assert result.displacement.length() == pytest.approx(HARD_ESCAPE_NUDGE)

    def test_pinned_agent_attempts_escape_at_ceiling(self, make_controller) -> None:
        # A wall the planner cannot see but the physics enforces
        class InvisibleWall:
            def resolve_move(self, start, end, radius):
                return Vector2(start)

        controller, _ = make_controller(Archetype.CHASE,
                                        player=StaticPlayer((3.0, 0.0)),
                                        physics=InvisibleWall())
        escaped_at = None
        for i in range(200):
            if controller.tick(DT).escaped:
                escaped_at = i
                break
        assert escaped_at is not None
        assert escaped_at * DT == pytest.approx(UNSTUCK_FORCE_CEILING, abs=3 * DT)
        # Nothing fits, so even the escape nudge is refused by physics
        assert controller.agent.position == Vector2(0, 0)
        assert controller.motion.hard_escapes == 1


# ===========================================================================
# Events and the projectile gate
# ===========================================================================

class TestEvents:
    def test_contact_in_instant_kill_mode_catches(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE, instant_kill=True,
                                        player=StaticPlayer((0.1, 0.0)))
        result = controller.tick(DT)
        assert result.contact
        assert result.player_caught
        assert controller.player_caught

    def test_shield_blocks_the_catch(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE, instant_kill=True,
                                        player=StaticPlayer((0.1, 0.0), shield=True))
        result = controller.tick(DT)
        assert result.contact
        assert not result.player_caught

    def test_contact_without_instant_kill(self, make_controller) -> None:
        controller, _ = make_controller(Archetype.CHASE,
                                        player=StaticPlayer((0.1, 0.0)))
        result = controller.tick(DT)
        assert result.contact and not result.player_caught

    def test_caught_flag_lasts_one_frame(self, make_controller) -> None:
        player = StaticPlayer((0.1, 0.0))
        controller, _ = make_controller(Archetype.CHASE, instant_kill=True,
                                        player=player)
        controller.tick(DT)
        player.move_to((3.0, 0.0))
        controller.tick(DT)
        assert not controller.player_caught

    def test_fire_gate_spawns_projectile(self, make_controller) -> None:
        projectiles = ProjectileSystem()
        controller, _ = make_controller(Archetype.CHASE, can_shoot=True,
                                        projectiles=projectiles,
                                        player=StaticPlayer((3.0, 0.0)))
        assert not controller.tick(0.25).fired
        assert controller.tick(0.25).fired
        assert len(projectiles.projectiles) == 1
        assert projectiles.projectiles[0].owner_id == controller.agent.agent_id

    def test_level_projectile_speed_and_damage_reach_the_shot(self) -> None:
        agent = Agent(Archetype.SNIPER)
        configure_agent(agent, preset(3), 0)
        projectiles = ProjectileSystem()
        controller = AgentController(agent, player_locator=StaticPlayer((3.0, 0.0)),
                                     projectiles=projectiles)
        assert controller.tick(0.1).fired
        shot = projectiles.projectiles[0]
        assert shot.velocity.length() == pytest.approx(12.0)
        assert shot.damage == 50

    def test_dispose_leaves_the_pack(self, make_controller, registry) -> None:
        controller, _ = make_controller(Archetype.PACK_HUNTER, registry=registry)
        assert controller.agent in registry
        controller.dispose()
        assert controller.agent not in registry
