"""Shared fixtures for the cobra steering tests."""

from __future__ import annotations

import random

import pytest
from pygame.math import Vector2

from ai.agent_controller import AgentController
from ai.pack_registry import PackRegistry
from ai.spatial_probe import ProbeHit
from entities.agent import Agent
from entities.player import PlayerState
from settings import OBSTACLE_LAYER_MASK
from utils.helpers import ArenaBounds, safe_normalize


class StaticPlayer:
    """Player locator whose state the test moves by hand."""

    def __init__(self, position=(0.0, 0.0), velocity=(0.0, 0.0), shield=False):
        self.state = PlayerState(position, velocity, shield)

    def move_to(self, position):
        self.state.position = Vector2(position)

    def __call__(self) -> PlayerState:
        return self.state


class DirectionalProbe:
    """Reports a hit for every ray whose direction matches *blocked*."""

    def __init__(self, blocked, distance: float = 0.1, normal=(-1.0, 0.0)):
        self.blocked = blocked
        self.distance = distance
        self.normal = Vector2(normal)
        self.calls = 0

    def probe(self, origin, direction, max_distance,
              layer_mask=OBSTACLE_LAYER_MASK):
        self.calls += 1
        unit = safe_normalize(Vector2(direction))
        if self.blocked(unit):
            return ProbeHit(min(self.distance, max_distance), Vector2(self.normal))
        return None


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def bounds() -> ArenaBounds:
    return ArenaBounds()


@pytest.fixture
def registry() -> PackRegistry:
    return PackRegistry()


@pytest.fixture
def make_controller(rng, bounds):
    """Factory: ``make_controller(archetype, position, player=..., probe=...)``."""

    def _make(archetype, position=(0.0, 0.0), player=None, probe=None,
              registry=None, projectiles=None, physics=None, **agent_kwargs):
        agent = Agent(archetype, position=position, **agent_kwargs)
        player = player if player is not None else StaticPlayer((5.0, 0.0))
        controller = AgentController(
            agent, probe=probe, registry=registry, player_locator=player,
            bounds=bounds, projectiles=projectiles, rng=rng, physics=physics,
        )
        return controller, player

    return _make
