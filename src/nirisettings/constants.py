"""Documented value ranges and clamping helpers.

Every numeric settings field is clamped to one of these ranges on import and
load; out-of-range input is corrected rather than rejected. Strings and
repeatable collections are capped the same way.
"""

from __future__ import annotations

import logging
import math
from typing import Any, NamedTuple

logger = logging.getLogger("nirisettings.constants")


class Range(NamedTuple):
    min: float
    max: float


# Appearance
FOCUS_RING_WIDTH = Range(1, 16)
BORDER_WIDTH = Range(1, 8)
GAPS = Range(0, 64)
CORNER_RADIUS = Range(0, 32)

# Behavior / layout
COLUMN_PROPORTION = Range(0.1, 1.0)
COLUMN_FIXED = Range(200, 4000)
STRUTS = Range(0, 500)
MAX_SCROLL_AMOUNT = Range(0.0, 100.0)

# Input
REPEAT_DELAY = Range(100, 2000)
REPEAT_RATE = Range(1, 100)
ACCEL_SPEED = Range(-1.0, 1.0)
SCROLL_FACTOR = Range(0.1, 10.0)
SCROLL_BUTTON = Range(1, 1024)

# Cursor
CURSOR_SIZE = Range(16, 64)
HIDE_AFTER_INACTIVE_MS = Range(100, 10000)

# Outputs
OUTPUT_SCALE = Range(0.25, 10.0)
OUTPUT_POSITION = Range(-65535, 65535)

# Overview
OVERVIEW_ZOOM = Range(0.1, 1.0)

# Animations
ANIMATION_SLOWDOWN = Range(0.1, 10.0)
SPRING_DAMPING = Range(0.1, 3.0)
SPRING_STIFFNESS = Range(50, 2000)
SPRING_EPSILON = Range(0.00001, 0.1)
EASING_DURATION_MS = Range(50, 1000)

# Layout extras
SHADOW_SOFTNESS = Range(0, 100)
SHADOW_SPREAD = Range(-100, 100)
SHADOW_OFFSET = Range(-100, 100)
TAB_INDICATOR_GAP = Range(-64, 64)
TAB_INDICATOR_WIDTH = Range(1, 32)
TAB_INDICATOR_PROPORTION = Range(0.0, 1.0)

# Gestures
DND_TRIGGER = Range(0, 500)
DND_DELAY_MS = Range(0, 5000)
DND_MAX_SPEED = Range(0, 10000)

# Rules
OPACITY = Range(0.0, 1.0)
WINDOW_SIZE = Range(0, 65535)

# Recent windows
RECENT_DEBOUNCE_MS = Range(0, 5000)
RECENT_OPEN_DELAY_MS = Range(0, 5000)
RECENT_HIGHLIGHT_PADDING = Range(0, 200)
RECENT_PREVIEW_HEIGHT = Range(50, 2000)
RECENT_PREVIEW_SCALE = Range(0.1, 1.0)

# Defaults shared by models and generator
DEFAULT_SCREENSHOT_PATH = "~/Pictures/Screenshots/Screenshot from %Y-%m-%d %H-%M-%S.png"
MAX_INCLUDE_DEPTH = 10


def clamp(value: Any, rng: Range) -> Any:
    """Clamp *value* into *rng*, keeping ints as ints and floats as floats.

    NaN has no place in any range and becomes the range minimum.
    """
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return float(rng.min)
        return min(max(value, float(rng.min)), float(rng.max))
    return int(min(max(value, rng.min), rng.max))


def clamp_fields(obj: Any, ranges: dict[str, Range]) -> None:
    """Clamp each named dataclass field of *obj* in place."""
    for name, rng in ranges.items():
        current = getattr(obj, name)
        fixed = clamp(current, rng)
        if fixed != current:
            logger.debug(
                "Clamped %s.%s from %r to %r", type(obj).__name__, name, current, fixed
            )
            setattr(obj, name, fixed)


# String and collection limits
MAX_STRING_LENGTH = 1024
MAX_PATTERN_LENGTH = 512
MAX_WINDOW_RULES = 100
MAX_LAYER_RULES = 100
MAX_WORKSPACES = 50
MAX_MATCHES_PER_RULE = 20
MAX_ENVIRONMENT_VARS = 100
MAX_STARTUP_COMMANDS = 50


def limit_string(value: Any, max_length: int = MAX_STRING_LENGTH) -> Any:
    """Truncate a string to *max_length* characters; other values pass through."""
    if not isinstance(value, str) or len(value) <= max_length:
        return value
    logger.warning("String truncated from %d to %d characters", len(value), max_length)
    return value[:max_length]


def limit_strings(obj: Any, names: tuple[str, ...], max_length: int = MAX_STRING_LENGTH) -> None:
    """Truncate each named string field of *obj* in place."""
    for name in names:
        setattr(obj, name, limit_string(getattr(obj, name), max_length))


def limit_list(items: list, max_items: int, what: str) -> list:
    """The first *max_items* of *items*, warning when any are dropped."""
    if len(items) <= max_items:
        return items
    logger.warning("Too many %s: keeping the first %d of %d", what, max_items, len(items))
    return items[:max_items]
