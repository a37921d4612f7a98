"""
pack_registry.py – Lookup of sibling agents for pack coordination.

Replaces a global "find every cobra in the scene" search.  Controllers
receive the registry at construction; pack hunters only read their
siblings' positions through it.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class PackRegistry:
    """Agents currently alive in the level, keyed by ``agent_id``."""

    def __init__(self):
        self._agents: dict = {}

    def register(self, agent):
        self._agents[agent.agent_id] = agent
        logger.debug("Registered %s (%d in pack)", agent.name, len(self._agents))

    def unregister(self, agent):
        self._agents.pop(agent.agent_id, None)

    def clear(self):
        self._agents.clear()

    def agents(self) -> list:
        return list(self._agents.values())

    def siblings(self, agent) -> list:
        """Every registered agent except *agent* itself."""
        return [a for a in self._agents.values() if a.agent_id != agent.agent_id]

    def nearest_sibling(self, agent):
        """Closest other agent, or None when the agent is alone."""
        nearest = None
        nearest_distance = float("inf")
        for other in self.siblings(agent):
            distance = agent.position.distance_to(other.position)
            if distance < nearest_distance:
                nearest, nearest_distance = other, distance
        return nearest

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent) -> bool:
        return agent.agent_id in self._agents
