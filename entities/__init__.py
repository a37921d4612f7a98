"""entities package – Cobra agents and the player snapshot."""

from .agent import Agent, Archetype, PersonalityTrait, VisualState
from .player import PlayerState, KinematicPlayer
