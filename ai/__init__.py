"""
ai package – Cobra steering and local obstacle avoidance.

Modules:
    agent_controller   – Per-tick orchestrator (AgentController)
    behaviors          – The seven archetype strategies and their state
    avoidance_planner  – Detour scoring, fan probing and wall sliding
    stuck_detector     – Progress timers and the hard-escape override
    spatial_probe      – Directional obstacle query interface
    difficulty_adapter – Drift-free difficulty scaling and progression
    pack_registry      – Sibling lookup for pack hunters
    personality        – One-time personality modifiers
    simulation_runner  – Headless episodes
    stats              – Episode statistics tracking
"""
