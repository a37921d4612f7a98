"""utils package – Vector helpers and the global time scale."""

from .helpers import (
    ArenaBounds, clamp_length, direction_to, perpendicular, safe_normalize,
)
from .time_scale import TimeScaleManager
