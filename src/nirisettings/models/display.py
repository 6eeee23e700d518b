"""Outputs, animations, cursor, overview and the recent-windows switcher."""

from __future__ import annotations

import dataclasses
from typing import Union

import nirisettings.constants as C
from nirisettings.models.color import Color
from nirisettings.models.enums import EasingCurve, Transform, VrrMode


@dataclasses.dataclass
class Output:
    id: int
    name: str
    enabled: bool = True
    scale: float | None = None
    mode: str | None = None
    position: tuple[int, int] | None = None
    transform: Transform = Transform.NORMAL
    vrr: VrrMode = VrrMode.OFF
    focus_at_startup: bool = False
    backdrop_color: Color | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {"scale": C.OUTPUT_SCALE})
        C.limit_strings(self, ("name", "mode"))
        if self.position is not None:
            self.position = (
                C.clamp(int(self.position[0]), C.OUTPUT_POSITION),
                C.clamp(int(self.position[1]), C.OUTPUT_POSITION),
            )


@dataclasses.dataclass
class OutputSettings:
    outputs: list[Output] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        for output in self.outputs:
            output.validate()

    def next_id(self) -> int:
        return max((o.id for o in self.outputs), default=0) + 1


# ---------------------------------------------------------------------------
# Animations
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class AnimationOff:
    pass


@dataclasses.dataclass
class SpringAnimation:
    damping_ratio: float = 1.0
    stiffness: int = 800
    epsilon: float = 0.0001

    def validate(self) -> None:
        C.clamp_fields(self, {
            "damping_ratio": C.SPRING_DAMPING,
            "stiffness": C.SPRING_STIFFNESS,
            "epsilon": C.SPRING_EPSILON,
        })


@dataclasses.dataclass
class EasingAnimation:
    duration_ms: int = 150
    curve: EasingCurve = EasingCurve.EASE_OUT_CUBIC

    def validate(self) -> None:
        C.clamp_fields(self, {"duration_ms": C.EASING_DURATION_MS})


# None means "compositor default"
Animation = Union[AnimationOff, SpringAnimation, EasingAnimation, None]

ANIMATION_NAMES = (
    "workspace_switch",
    "window_open",
    "window_close",
    "horizontal_view_movement",
    "window_movement",
    "window_resize",
    "config_notification_open_close",
    "exit_confirmation_open_close",
    "screenshot_ui_open",
    "overview_open_close",
    "recent_windows_close",
)


@dataclasses.dataclass
class AnimationSettings:
    enabled: bool = True
    slowdown: float = 1.0
    workspace_switch: Animation = None
    window_open: Animation = None
    window_close: Animation = None
    horizontal_view_movement: Animation = None
    window_movement: Animation = None
    window_resize: Animation = None
    config_notification_open_close: Animation = None
    exit_confirmation_open_close: Animation = None
    screenshot_ui_open: Animation = None
    overview_open_close: Animation = None
    recent_windows_close: Animation = None

    def validate(self) -> None:
        C.clamp_fields(self, {"slowdown": C.ANIMATION_SLOWDOWN})
        for name in ANIMATION_NAMES:
            anim = getattr(self, name)
            if isinstance(anim, (SpringAnimation, EasingAnimation)):
                anim.validate()


@dataclasses.dataclass
class CursorSettings:
    theme: str = "default"
    size: int = 24
    hide_when_typing: bool = False
    hide_after_inactive_ms: int | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {
            "size": C.CURSOR_SIZE,
            "hide_after_inactive_ms": C.HIDE_AFTER_INACTIVE_MS,
        })
        self.theme = C.limit_string(self.theme)


@dataclasses.dataclass
class OverviewSettings:
    zoom: float = 0.5
    backdrop_color: Color | None = None
    workspace_shadow_enabled: bool = True

    def validate(self) -> None:
        C.clamp_fields(self, {"zoom": C.OVERVIEW_ZOOM})


@dataclasses.dataclass
class RecentWindowsSettings:
    off: bool = False
    debounce_ms: int = 750
    open_delay_ms: int = 150
    highlight_active_color: Color = Color.from_hex("#999999ff")
    highlight_urgent_color: Color = Color.from_hex("#ff9999ff")
    highlight_padding: int = 30
    highlight_corner_radius: int = 0
    preview_max_height: int = 480
    preview_max_scale: float = 0.5

    def validate(self) -> None:
        C.clamp_fields(self, {
            "debounce_ms": C.RECENT_DEBOUNCE_MS,
            "open_delay_ms": C.RECENT_OPEN_DELAY_MS,
            "highlight_padding": C.RECENT_HIGHLIGHT_PADDING,
            "highlight_corner_radius": C.CORNER_RADIUS,
            "preview_max_height": C.RECENT_PREVIEW_HEIGHT,
            "preview_max_scale": C.RECENT_PREVIEW_SCALE,
        })
