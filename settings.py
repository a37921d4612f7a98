"""
settings.py - Tunable constants for the cobra steering core.

All configurable values live here so they're easy to tweak
and easy to reference from any module.  Distances are world
units, times are seconds, speeds are units per second.
"""

# ── Simulation ────────────────────────────────────────────
TICK_RATE = 60                 # ticks per second for headless runs
TICK_DT = 1.0 / TICK_RATE
MAX_TICK_DT = 0.05             # clamp for frame spikes

# ── Arena ─────────────────────────────────────────────────
ARENA_BOUND_X = 4.0            # playable area is [-X, X] × [-Y, Y]
ARENA_BOUND_Y = 3.0
ARENA_TARGET_MARGIN = 0.5      # random / predicted targets stay this far inside

# ── Collision layers (bit mask) ───────────────────────────
LAYER_WALLS = 1 << 0
LAYER_OBSTACLES = 1 << 1
LAYER_ALL = 0xFFFF
OBSTACLE_LAYER_MASK = LAYER_WALLS | LAYER_OBSTACLES

# ── Agent (cobra) defaults ────────────────────────────────
AGENT_SPEED = 1.5
AGENT_SIZE = 0.18              # body radius, used for contact checks
PLAYER_RADIUS = 0.2
CATCH_DISTANCE = AGENT_SIZE + PLAYER_RADIUS

# ── Attack / Intercept ────────────────────────────────────
PREDICTION_MULTIPLIER = 1.0
PREDICTION_MAX_LOOKAHEAD = 1.5 # seconds
CLOSE_RANGE_DISTANCE = 0.8
BOOST_MULTIPLIER = 0.8         # speed × (1 + boost) inside close range
INTERCEPT_STATIONARY_SPEED = 0.05   # below this the player counts as standing still
INTERCEPT_ESCAPE_OFFSET = 1.0      # per-axis guess of where a standing player bolts
INTERCEPT_CUTOFF_DISTANCE = 1.0    # beyond this, aim past the guess
INTERCEPT_CUTOFF_WEIGHT = 0.5

# ── Random wander ─────────────────────────────────────────
RANDOM_TARGET_INTERVAL = 1.0
WANDER_ARRIVE_DISTANCE = 0.05

# ── Ambusher ──────────────────────────────────────────────
AMBUSH_RANGE = 2.0
HIDE_TIME = 2.0
STRIKE_SPEED = 5.0
HIDE_DRIFT_AMPLITUDE = 0.2
HIDE_DRIFT_FREQUENCY = 2.0     # rad/s of the hiding sinusoid
HIDE_DRIFT_LERP_RATE = 0.5     # fraction per second toward the drift point

# ── Patroller ─────────────────────────────────────────────
PATROL_SPEED = 1.5
ALERT_RANGE = 2.5
CHASE_SPEED_MULTIPLIER = 1.8
PATROL_ARRIVE_DISTANCE = 0.2
DEFAULT_PATROL_ROUTE = (
    (-2.0, 2.0),
    (2.0, 2.0),
    (2.0, -2.0),
    (-2.0, -2.0),
)

# ── Pack hunter ───────────────────────────────────────────
COORDINATION_RANGE = 3.0
FLANKING_ANGLE = 90.0          # degrees
FLANK_OFFSET = 1.5

# ── Sniper ────────────────────────────────────────────────
SNIPER_MIN_DISTANCE = 2.5
SNIPER_MAX_DISTANCE = 4.0
SNIPER_STRAFE_FREQUENCY = 1.2  # rad/s
SNIPER_STRAFE_SPEED_MULT = 0.7
SNIPER_RETREAT_SPEED_MULT = 1.0
SNIPER_RETREAT_STRAFE_WEIGHT = 0.4
SNIPER_APPROACH_SPEED_MULT = 0.6
SNIPER_BAND_CORRECTION = 0.35  # radial pull toward the band centre while strafing

# ── Stuck detector ────────────────────────────────────────
STUCK_MOVE_EPSILON = 0.006     # per-tick delta below this counts as stuck
STUCK_RELEASE_EPSILON = 0.02   # per-tick delta above this clears the timers
UNSTUCK_FORCE_CEILING = 1.3    # seconds before the hard escape fires
HARD_ESCAPE_PROBE_DISTANCE = 0.5
HARD_ESCAPE_NUDGE = 0.15
HARD_ESCAPE_RANDOM_OFFSET = 0.05

# ── Avoidance planner ─────────────────────────────────────
PROBE_DISTANCE = 0.6           # look-ahead for the direct path and candidates
CLEARANCE_DISTANCE = 0.25      # a hit nearer than this blocks a direction
SOFT_STUCK_THRESHOLD = 0.15    # stuck time that forces re-evaluation / sign flips
DETOUR_COMMIT_TIME = 0.6
DETOUR_PROGRESS_WEIGHT = 2.0
FAN_ANGLES = (0.0, 30.0, -30.0, 60.0, -60.0, 90.0, -90.0)
FALLBACK_ANGLE_BONUS = 0.5

# ── Projectiles ───────────────────────────────────────────
FIRE_RATE = 2.0                # shots per second
SHOOTING_RANGE = 5.0
MIN_SHOOTING_DISTANCE = 2.0
PROJECTILE_SPEED = 3.0
PROJECTILE_DAMAGE = 10
PROJECTILE_RADIUS = 0.08
PROJECTILE_LIFETIME = 4.0

# ── Difficulty progression ────────────────────────────────
DIFFICULTY_INCREASE_INTERVAL = 30.0
MAX_DIFFICULTY_LEVEL = 5.0
SPEED_INCREASE_PER_LEVEL = 0.3
MAX_SPEED_MULTIPLIER = 1.8
PREDICTION_ACCURACY_INCREASE = 0.15
ALERT_RANGE_INCREASE = 0.4

# ── Slow motion (player ability) ──────────────────────────
SLOW_MOTION_SCALE = 0.3
SLOW_MOTION_DURATION = 5.0     # real seconds
SLOW_MOTION_COOLDOWN = 15.0    # real seconds

# ── Personality trait modifiers ───────────────────────────
PERSONALITY_AGGRESSIVE = {
    "speed_mult": 1.2,
    "prediction_mult": 0.8,    # less accurate prediction
    "close_range_mult": 1.3,   # boost earlier
}
PERSONALITY_CAUTIOUS = {
    "speed_mult": 0.85,
    "prediction_mult": 1.2,    # more accurate prediction
    "close_range_mult": 0.7,   # boost later
}
PERSONALITY_TACTICAL = {}      # balanced – no modifications
PERSONALITY_ERRATIC = {
    "speed_range": (0.8, 1.3),
    "wander_interval_range": (0.5, 2.0),
}

# ── Level defaults ────────────────────────────────────────
LEVEL_FIRE_SNAKES = 3
LEVEL_POISON_SNAKES = 0
LEVEL_SNAKE_SPEED = 2.0
LEVEL_SNAKE_FIRE_RATE = 1.0
LEVEL_SNAKE_SHOOTING_RANGE = 8.0
LEVEL_SNAKE_MIN_SHOOT_DISTANCE = 2.0

# ── Diagnostics ───────────────────────────────────────────
DEBUG_LOG_INTERVAL = 1.0       # seconds between per-agent debug lines
