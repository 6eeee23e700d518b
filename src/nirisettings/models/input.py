"""Input device sections (``input { keyboard {} mouse {} ... }``)."""

from __future__ import annotations

import dataclasses

import nirisettings.constants as C
from nirisettings.models.enums import (
    AccelProfile,
    ClickMethod,
    ScrollMethod,
    TapButtonMap,
    TrackLayout,
)


@dataclasses.dataclass
class KeyboardSettings:
    off: bool = False
    xkb_layout: str = ""
    xkb_variant: str = ""
    xkb_model: str = ""
    xkb_rules: str = ""
    xkb_options: str = ""
    xkb_file: str = ""
    repeat_delay: int = 600
    repeat_rate: int = 25
    numlock: bool = False
    track_layout: TrackLayout = TrackLayout.GLOBAL

    def validate(self) -> None:
        C.clamp_fields(self, {
            "repeat_delay": C.REPEAT_DELAY,
            "repeat_rate": C.REPEAT_RATE,
        })
        C.limit_strings(self, (
            "xkb_layout", "xkb_variant", "xkb_model", "xkb_rules", "xkb_options", "xkb_file",
        ))


@dataclasses.dataclass
class PointerDevice:
    """Fields shared by every libinput pointer device."""

    off: bool = False
    natural_scroll: bool = False
    left_handed: bool = False
    middle_emulation: bool = False
    accel_speed: float = 0.0
    accel_profile: AccelProfile | None = None
    scroll_method: ScrollMethod | None = None
    scroll_button: int | None = None
    scroll_button_lock: bool = False

    def validate(self) -> None:
        C.clamp_fields(self, {
            "accel_speed": C.ACCEL_SPEED,
            "scroll_button": C.SCROLL_BUTTON,
        })


@dataclasses.dataclass
class MouseSettings(PointerDevice):
    scroll_factor: float | None = None

    def validate(self) -> None:
        super().validate()
        C.clamp_fields(self, {"scroll_factor": C.SCROLL_FACTOR})


@dataclasses.dataclass
class TouchpadSettings(PointerDevice):
    natural_scroll: bool = True
    tap: bool = True
    dwt: bool = True
    dwtp: bool = False
    drag: bool = True
    drag_lock: bool = False
    click_method: ClickMethod | None = None
    tap_button_map: TapButtonMap | None = None
    disabled_on_external_mouse: bool = False
    scroll_factor: float | None = None

    def validate(self) -> None:
        super().validate()
        C.clamp_fields(self, {"scroll_factor": C.SCROLL_FACTOR})


@dataclasses.dataclass
class TrackpointSettings(PointerDevice):
    scroll_method: ScrollMethod = ScrollMethod.ON_BUTTON_DOWN


@dataclasses.dataclass
class TrackballSettings(PointerDevice):
    scroll_method: ScrollMethod = ScrollMethod.ON_BUTTON_DOWN


@dataclasses.dataclass
class TabletSettings:
    off: bool = False
    map_to_output: str | None = None
    left_handed: bool = False
    calibration_matrix: tuple[float, ...] | None = None

    def validate(self) -> None:
        pass


@dataclasses.dataclass
class TouchSettings:
    off: bool = False
    map_to_output: str | None = None
    calibration_matrix: tuple[float, ...] | None = None

    def validate(self) -> None:
        pass
