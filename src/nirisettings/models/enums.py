"""Closed value sets.

Each member's value is the exact string niri uses, so the importer can map
by ``Enum(value)`` and the generator can write ``member.value``.
"""

from __future__ import annotations

import enum


class WarpMouseMode(enum.Enum):
    OFF = "off"
    CENTER_XY = "center-xy"
    CENTER_XY_ALWAYS = "center-xy-always"


class CenterFocusedColumn(enum.Enum):
    NEVER = "never"
    ON_OVERFLOW = "on-overflow"
    ALWAYS = "always"


class SizeKind(enum.Enum):
    PROPORTION = "proportion"
    FIXED = "fixed"


class ModKey(enum.Enum):
    SUPER = "Super"
    ALT = "Alt"
    CTRL = "Ctrl"
    SHIFT = "Shift"
    MOD3 = "Mod3"
    MOD5 = "Mod5"
    ISO_LEVEL3_SHIFT = "ISO_Level3_Shift"
    ISO_LEVEL5_SHIFT = "ISO_Level5_Shift"


class TrackLayout(enum.Enum):
    GLOBAL = "global"
    WINDOW = "window"


class AccelProfile(enum.Enum):
    ADAPTIVE = "adaptive"
    FLAT = "flat"


class ScrollMethod(enum.Enum):
    NO_SCROLL = "no-scroll"
    TWO_FINGER = "two-finger"
    EDGE = "edge"
    ON_BUTTON_DOWN = "on-button-down"


class ClickMethod(enum.Enum):
    BUTTON_AREAS = "button-areas"
    CLICKFINGER = "clickfinger"


class TapButtonMap(enum.Enum):
    LEFT_RIGHT_MIDDLE = "left-right-middle"
    LEFT_MIDDLE_RIGHT = "left-middle-right"


class Transform(enum.Enum):
    NORMAL = "normal"
    ROTATE_90 = "90"
    ROTATE_180 = "180"
    ROTATE_270 = "270"
    FLIPPED = "flipped"
    FLIPPED_90 = "flipped-90"
    FLIPPED_180 = "flipped-180"
    FLIPPED_270 = "flipped-270"


class VrrMode(enum.Enum):
    OFF = "off"
    ON = "on"
    ON_DEMAND = "on-demand"


class EasingCurve(enum.Enum):
    LINEAR = "linear"
    EASE_OUT_QUAD = "ease-out-quad"
    EASE_OUT_CUBIC = "ease-out-cubic"
    EASE_OUT_EXPO = "ease-out-expo"


class BlockOutFrom(enum.Enum):
    SCREENCAST = "screencast"
    SCREEN_CAPTURE = "screen-capture"


class ColumnDisplay(enum.Enum):
    NORMAL = "normal"
    TABBED = "tabbed"


class TabIndicatorPosition(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
