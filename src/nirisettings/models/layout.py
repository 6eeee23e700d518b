"""Sections written inside niri's ``layout`` block."""

from __future__ import annotations

import dataclasses

import nirisettings.constants as C
from nirisettings.models.color import Color, ColorOrGradient
from nirisettings.models.enums import (
    CenterFocusedColumn,
    ColumnDisplay,
    ModKey,
    SizeKind,
    TabIndicatorPosition,
    WarpMouseMode,
)


@dataclasses.dataclass(frozen=True)
class PresetSize:
    """A column width or window height: ``proportion 0.5`` or ``fixed 800``."""

    kind: SizeKind = SizeKind.PROPORTION
    value: float = 0.5

    def clamped(self) -> PresetSize:
        if self.kind is SizeKind.FIXED:
            return PresetSize(self.kind, float(round(C.clamp(float(self.value), C.COLUMN_FIXED))))
        return PresetSize(self.kind, C.clamp(float(self.value), C.COLUMN_PROPORTION))


@dataclasses.dataclass
class AppearanceSettings:
    focus_ring_enabled: bool = True
    focus_ring_width: int = 4
    focus_ring_active: ColorOrGradient = Color.from_hex("#7fc8ff")
    focus_ring_inactive: ColorOrGradient = Color.from_hex("#505050")
    focus_ring_urgent: ColorOrGradient = Color.from_hex("#eb6f92")
    border_enabled: bool = False
    border_width: int = 2
    border_active: ColorOrGradient = Color.from_hex("#ffc87f")
    border_inactive: ColorOrGradient = Color.from_hex("#808080")
    border_urgent: ColorOrGradient = Color.from_hex("#9b0000")
    gaps: int = 16
    corner_radius: int = 12
    background_color: Color | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {
            "focus_ring_width": C.FOCUS_RING_WIDTH,
            "border_width": C.BORDER_WIDTH,
            "gaps": C.GAPS,
            "corner_radius": C.CORNER_RADIUS,
        })


@dataclasses.dataclass
class BehaviorSettings:
    focus_follows_mouse: bool = False
    # percent; only meaningful while focus_follows_mouse is on
    focus_follows_mouse_max_scroll: float | None = None
    warp_mouse_to_focus: WarpMouseMode = WarpMouseMode.OFF
    center_focused_column: CenterFocusedColumn = CenterFocusedColumn.NEVER
    always_center_single_column: bool = False
    empty_workspace_above_first: bool = False
    default_column_width: PresetSize | None = PresetSize(SizeKind.PROPORTION, 0.5)
    strut_left: int = 0
    strut_right: int = 0
    strut_top: int = 0
    strut_bottom: int = 0
    mod_key: ModKey | None = None
    mod_key_nested: ModKey | None = None
    workspace_auto_back_and_forth: bool = False
    disable_power_key_handling: bool = False

    def validate(self) -> None:
        C.clamp_fields(self, {
            "strut_left": C.STRUTS,
            "strut_right": C.STRUTS,
            "strut_top": C.STRUTS,
            "strut_bottom": C.STRUTS,
            "focus_follows_mouse_max_scroll": C.MAX_SCROLL_AMOUNT,
        })
        if not self.focus_follows_mouse:
            self.focus_follows_mouse_max_scroll = None
        if self.default_column_width is not None:
            self.default_column_width = self.default_column_width.clamped()


@dataclasses.dataclass
class Shadow:
    enabled: bool = False
    softness: int = 30
    spread: int = 5
    offset_x: int = 0
    offset_y: int = 5
    draw_behind_window: bool = False
    color: Color = Color.from_hex("#00000070")
    inactive_color: Color | None = None

    def validate(self) -> None:
        C.clamp_fields(self, {
            "softness": C.SHADOW_SOFTNESS,
            "spread": C.SHADOW_SPREAD,
            "offset_x": C.SHADOW_OFFSET,
            "offset_y": C.SHADOW_OFFSET,
        })


@dataclasses.dataclass
class TabIndicator:
    enabled: bool = True
    hide_when_single_tab: bool = False
    place_within_column: bool = False
    gap: int = 5
    width: int = 4
    length_total_proportion: float = 0.5
    position: TabIndicatorPosition = TabIndicatorPosition.LEFT
    corner_radius: int = 0

    def validate(self) -> None:
        C.clamp_fields(self, {
            "gap": C.TAB_INDICATOR_GAP,
            "width": C.TAB_INDICATOR_WIDTH,
            "length_total_proportion": C.TAB_INDICATOR_PROPORTION,
            "corner_radius": C.CORNER_RADIUS,
        })


@dataclasses.dataclass
class LayoutExtrasSettings:
    shadow: Shadow = dataclasses.field(default_factory=Shadow)
    tab_indicator: TabIndicator = dataclasses.field(default_factory=TabIndicator)
    insert_hint_enabled: bool = True
    insert_hint_color: Color = Color.from_hex("#7fc8ff80")
    preset_column_widths: list[PresetSize] = dataclasses.field(default_factory=list)
    preset_window_heights: list[PresetSize] = dataclasses.field(default_factory=list)
    default_column_display: ColumnDisplay = ColumnDisplay.NORMAL

    def validate(self) -> None:
        self.shadow.validate()
        self.tab_indicator.validate()
        self.preset_column_widths = [p.clamped() for p in self.preset_column_widths]
        self.preset_window_heights = [p.clamped() for p in self.preset_window_heights]
