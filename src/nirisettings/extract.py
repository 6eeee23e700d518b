"""Per-node extractors: read one top-level KDL node into ``Settings``.

Each extractor mutates the settings in place and returns the categories it
contributed to, one entry per contributing node or list entry, so callers
can count what was imported. Values that cannot be interpreted are logged
as warnings on the :class:`ExtractContext` and the field keeps its default;
a node whose overall shape is unusable raises :class:`ValidationError` and
is skipped by the caller.
"""

from __future__ import annotations

import dataclasses
import enum
import math
from typing import Any, TypeVar

from nirisettings.categories import SettingsCategory as Cat
from nirisettings.errors import ValidationError
from nirisettings.kdl_document import Node
from nirisettings.models.color import Color, ColorOrGradient, Gradient, GradientRelativeTo
from nirisettings.models.display import (
    ANIMATION_NAMES,
    AnimationOff,
    EasingAnimation,
    Output,
    SpringAnimation,
)
from nirisettings.models.enums import (
    AccelProfile,
    BlockOutFrom,
    CenterFocusedColumn,
    ClickMethod,
    ColumnDisplay,
    EasingCurve,
    ModKey,
    ScrollMethod,
    SizeKind,
    TabIndicatorPosition,
    TapButtonMap,
    TrackLayout,
    Transform,
    VrrMode,
    WarpMouseMode,
)
from nirisettings.models.input import (
    MouseSettings,
    PointerDevice,
    TabletSettings,
    TouchpadSettings,
    TouchSettings,
    TrackballSettings,
    TrackpointSettings,
)
from nirisettings.models.layout import PresetSize, Shadow, TabIndicator
from nirisettings.models.rules import LayerMatch, LayerRule, WindowMatch, WindowRule
from nirisettings.models.settings import Settings
from nirisettings.models.system import (
    DEBUG_FLAGS,
    SWITCH_EVENTS,
    EnvironmentVariable,
    Keybinding,
    StartupCommand,
    Workspace,
)

E = TypeVar("E", bound=enum.Enum)


@dataclasses.dataclass
class ExtractContext:
    """Warnings and id bookkeeping for one import or load pass."""

    warnings: list[str] = dataclasses.field(default_factory=list)
    used_ids: dict[Cat, set[int]] = dataclasses.field(default_factory=dict)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def assign_id(self, category: Cat, node: Node) -> int:
        """Use the node's ``/-id=N`` annotation if free, else the next id."""
        used = self.used_ids.setdefault(category, set())
        wanted = node.annotations.get("id")
        if isinstance(wanted, int) and not isinstance(wanted, bool) and wanted > 0 and wanted not in used:
            used.add(wanted)
            return wanted
        fresh = max(used, default=0) + 1
        used.add(fresh)
        return fresh


# ---------------------------------------------------------------------------
# Value reader
# ---------------------------------------------------------------------------


class _Reader:
    """Typed lookups on one node, warning instead of failing."""

    def __init__(self, node: Node, ctx: ExtractContext, where: str) -> None:
        self.node = node
        self.ctx = ctx
        self.where = where

    def _bad(self, key: str, raw: Any, expected: str) -> None:
        self.ctx.warn(
            f"{self.where}: ignored {key}={raw!r} (expected {expected}, line {self.node.line})"
        )

    def child(self, name: str) -> _Reader | None:
        found = self.node.get(name)
        return _Reader(found, self.ctx, f"{self.where} > {name}") if found is not None else None

    def flag(self, name: str) -> bool:
        """A flag child: present without args, or with a truthy first arg."""
        found = self.node.get(name)
        if found is None:
            return False
        return found.arg(0, True) is not False and found.arg(0, True) is not None

    def raw(self, key: str) -> Any:
        return self.node.value(key)

    def _finite(self, key: str, raw: Any) -> float | None:
        """*raw* as a finite float, or None with a warning."""
        try:
            value = float(str(raw).strip().rstrip("%")) if isinstance(raw, str) else float(raw)
        except (TypeError, ValueError, OverflowError):
            value = None
        if value is None or not math.isfinite(value):
            self._bad(key, raw, "a finite number")
            return None
        return value

    def int(self, key: str, raw: Any = None) -> int | None:
        raw = self.node.value(key) if raw is None else raw
        if raw is None:
            return None
        if isinstance(raw, bool):
            self._bad(key, raw, "a number")
            return None
        if isinstance(raw, int):
            return raw
        value = self._finite(key, raw)
        return int(value) if value is not None else None

    def float(self, key: str, raw: Any = None) -> float | None:
        raw = self.node.value(key) if raw is None else raw
        if raw is None:
            return None
        if isinstance(raw, bool):
            self._bad(key, raw, "a number")
            return None
        return self._finite(key, raw)

    def str(self, key: str) -> str | None:
        raw = self.node.value(key)
        if raw is None:
            return None
        if isinstance(raw, (bool, int, float)):
            return str(raw).lower() if isinstance(raw, bool) else str(raw)
        return raw

    def bool(self, key: str) -> bool | None:
        """A boolean child (``open-maximized true``) or property."""
        found = self.node.get(key)
        if found is not None:
            raw = found.arg(0, True)
        elif key in self.node.props:
            raw = self.node.props[key]
        else:
            return None
        if isinstance(raw, bool):
            return raw
        if raw in ("true", "false"):
            return raw == "true"
        self._bad(key, raw, "true or false")
        return None

    def enum(self, key: str, cls: type[E], raw: Any = None) -> E | None:
        raw = self.node.value(key) if raw is None else raw
        if raw is None:
            return None
        for member in cls:
            if member.value == raw:
                return member
        self._bad(key, raw, " | ".join(m.value for m in cls))
        return None

    def color(self, key: str, raw: Any = None) -> Color | None:
        raw = self.node.value(key) if raw is None else raw
        if raw is None:
            return None
        try:
            return Color.from_hex(raw)
        except ValidationError:
            self._bad(key, raw, "a #rrggbb[aa] color")
            return None

    def color_or_gradient(self, prefix: str) -> ColorOrGradient | None:
        grad = self.node.get(f"{prefix}-gradient")
        if grad is not None:
            g = _Reader(grad, self.ctx, f"{self.where} > {prefix}-gradient")
            start = g.color("from")
            end = g.color("to")
            if start is None or end is None:
                return None
            relative = g.enum("relative-to", GradientRelativeTo)
            angle = g.int("angle")
            return Gradient(
                start=start,
                end=end,
                angle=angle if angle is not None else 180,
                relative_to=relative or GradientRelativeTo.WINDOW,
                color_space=g.str("in"),
            )
        return self.color(f"{prefix}-color")

    def size(self) -> PresetSize | None:
        """``{ proportion 0.5; }`` or ``{ fixed 800; }`` inside this node."""
        for kind in SizeKind:
            if self.node.has(kind.value):
                value = self.float(kind.value)
                return PresetSize(kind, value) if value is not None else None
        return None

    def set(self, obj: Any, attr: str, value: Any) -> None:
        if value is not None:
            setattr(obj, attr, value)

    def expect(self, known: set[str]) -> None:
        for child in self.node.iter_children():
            if child.name not in known:
                self.ctx.warn(
                    f"{self.where}: skipped unrecognized '{child.name}' (line {child.line})"
                )


def _enabled(r: _Reader, default: bool = True) -> bool:
    if r.flag("off"):
        return False
    if r.flag("on"):
        return True
    return default


# ---------------------------------------------------------------------------
# layout
# ---------------------------------------------------------------------------

_LAYOUT_APPEARANCE = {"gaps", "focus-ring", "border", "background-color"}
_LAYOUT_BEHAVIOR = {
    "struts",
    "center-focused-column",
    "always-center-single-column",
    "empty-workspace-above-first",
    "default-column-width",
}
_LAYOUT_EXTRAS = {
    "shadow",
    "tab-indicator",
    "insert-hint",
    "preset-column-widths",
    "preset-window-heights",
    "default-column-display",
}


def extract_layout(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "layout")
    r.expect(_LAYOUT_APPEARANCE | _LAYOUT_BEHAVIOR | _LAYOUT_EXTRAS)
    names = {c.name for c in node.iter_children()}
    touched: list[Cat] = []

    app = settings.appearance
    gaps = node.get("gaps")
    if gaps is not None:
        raw = gaps.arg(0, gaps.props.get("inner"))
        r.set(app, "gaps", r.int("gaps", raw))
        for key in sorted(gaps.props.keys() - {"inner"}):
            ctx.warn(
                f"layout > gaps: ignored {key}={gaps.props[key]!r}; niri has a single gaps"
                f" value, use struts for outer spacing (line {gaps.line})"
            )
    ring = r.child("focus-ring")
    if ring is not None:
        app.focus_ring_enabled = _enabled(ring)
        ring.set(app, "focus_ring_width", ring.int("width"))
        for state in ("active", "inactive", "urgent"):
            ring.set(app, f"focus_ring_{state}", ring.color_or_gradient(state))
    border = r.child("border")
    if border is not None:
        app.border_enabled = _enabled(border)
        border.set(app, "border_width", border.int("width"))
        for state in ("active", "inactive", "urgent"):
            border.set(app, f"border_{state}", border.color_or_gradient(state))
    if node.has("background-color"):
        r.set(app, "background_color", r.color("background-color"))
    if names & _LAYOUT_APPEARANCE:
        touched.append(Cat.APPEARANCE)

    beh = settings.behavior
    struts = r.child("struts")
    if struts is not None:
        for side in ("left", "right", "top", "bottom"):
            struts.set(beh, f"strut_{side}", struts.int(side))
    r.set(beh, "center_focused_column", r.enum("center-focused-column", CenterFocusedColumn))
    if node.has("always-center-single-column"):
        beh.always_center_single_column = r.flag("always-center-single-column")
    if node.has("empty-workspace-above-first"):
        beh.empty_workspace_above_first = r.flag("empty-workspace-above-first")
    width = r.child("default-column-width")
    if width is not None:
        beh.default_column_width = width.size()
    if names & _LAYOUT_BEHAVIOR:
        touched.append(Cat.BEHAVIOR)

    extras = settings.layout_extras
    shadow = r.child("shadow")
    if shadow is not None:
        extras.shadow = _shadow(shadow)
    tab = r.child("tab-indicator")
    if tab is not None:
        extras.tab_indicator = _tab_indicator(tab)
    hint = r.child("insert-hint")
    if hint is not None:
        extras.insert_hint_enabled = _enabled(hint)
        hint.set(extras, "insert_hint_color", hint.color("color"))
    for key, attr in (
        ("preset-column-widths", "preset_column_widths"),
        ("preset-window-heights", "preset_window_heights"),
    ):
        presets = r.child(key)
        if presets is not None:
            sizes = []
            for entry in presets.node.iter_children():
                size = _Reader(entry, ctx, key).float(entry.name, entry.arg(0))
                kind = r.enum(key, SizeKind, entry.name)
                if size is not None and kind is not None:
                    sizes.append(PresetSize(kind, size))
            setattr(extras, attr, sizes)
    r.set(extras, "default_column_display", r.enum("default-column-display", ColumnDisplay))
    if names & _LAYOUT_EXTRAS:
        touched.append(Cat.LAYOUT_EXTRAS)
    return touched


def _shadow(r: _Reader) -> Shadow:
    shadow = Shadow(enabled=r.flag("on") and not r.flag("off"))
    r.set(shadow, "softness", r.int("softness"))
    r.set(shadow, "spread", r.int("spread"))
    offset = r.node.get("offset")
    if offset is not None:
        r.set(shadow, "offset_x", r.int("offset.x", offset.props.get("x")))
        r.set(shadow, "offset_y", r.int("offset.y", offset.props.get("y")))
    shadow.draw_behind_window = bool(r.bool("draw-behind-window"))
    r.set(shadow, "color", r.color("color"))
    r.set(shadow, "inactive_color", r.color("inactive-color"))
    return shadow


def _tab_indicator(r: _Reader) -> TabIndicator:
    tab = TabIndicator(enabled=_enabled(r))
    tab.hide_when_single_tab = r.flag("hide-when-single-tab")
    tab.place_within_column = r.flag("place-within-column")
    r.set(tab, "gap", r.int("gap"))
    r.set(tab, "width", r.int("width"))
    length = r.node.get("length")
    if length is not None:
        r.set(tab, "length_total_proportion",
              r.float("total-proportion", length.props.get("total-proportion")))
    r.set(tab, "position", r.enum("position", TabIndicatorPosition))
    r.set(tab, "corner_radius", r.int("corner-radius"))
    return tab


# ---------------------------------------------------------------------------
# input
# ---------------------------------------------------------------------------

_INPUT_DEVICES = {"keyboard", "mouse", "touchpad", "trackpoint", "trackball", "tablet", "touch"}
_INPUT_BEHAVIOR = {
    "focus-follows-mouse",
    "warp-mouse-to-focus",
    "workspace-auto-back-and-forth",
    "disable-power-key-handling",
    "mod-key",
    "mod-key-nested",
}


def extract_input(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "input")
    r.expect(_INPUT_DEVICES | _INPUT_BEHAVIOR)
    touched: list[Cat] = []

    kb = r.child("keyboard")
    if kb is not None:
        _keyboard(kb, settings)
        touched.append(Cat.KEYBOARD)
    for name, cls, cat in (
        ("mouse", MouseSettings, Cat.MOUSE),
        ("touchpad", TouchpadSettings, Cat.TOUCHPAD),
        ("trackpoint", TrackpointSettings, Cat.TRACKPOINT),
        ("trackball", TrackballSettings, Cat.TRACKBALL),
    ):
        dev = r.child(name)
        if dev is not None:
            cat.replace_section(settings, _pointer(dev, cls()))
            touched.append(cat)
    tablet = r.child("tablet")
    if tablet is not None:
        settings.tablet = TabletSettings(
            off=tablet.flag("off"),
            map_to_output=tablet.str("map-to-output"),
            left_handed=tablet.flag("left-handed"),
            calibration_matrix=_matrix(tablet),
        )
        touched.append(Cat.TABLET)
    touch = r.child("touch")
    if touch is not None:
        settings.touch = TouchSettings(
            off=touch.flag("off"),
            map_to_output=touch.str("map-to-output"),
            calibration_matrix=_matrix(touch),
        )
        touched.append(Cat.TOUCH)

    if {c.name for c in node.iter_children()} & _INPUT_BEHAVIOR:
        _input_behavior(r, settings)
        touched.append(Cat.BEHAVIOR)
    return touched


def _keyboard(r: _Reader, settings: Settings) -> None:
    kb = settings.keyboard
    kb.off = r.flag("off")
    xkb = r.child("xkb")
    if xkb is not None:
        for key in ("layout", "variant", "model", "rules", "options", "file"):
            xkb.set(kb, f"xkb_{key}", xkb.str(key))
    r.set(kb, "repeat_delay", r.int("repeat-delay"))
    r.set(kb, "repeat_rate", r.int("repeat-rate"))
    kb.numlock = r.flag("numlock")
    r.set(kb, "track_layout", r.enum("track-layout", TrackLayout))


def _pointer(r: _Reader, dev: PointerDevice) -> PointerDevice:
    for flag in ("off", "natural_scroll", "left_handed", "middle_emulation", "scroll_button_lock"):
        setattr(dev, flag, r.flag(flag.replace("_", "-")))
    r.set(dev, "accel_speed", r.float("accel-speed"))
    r.set(dev, "accel_profile", r.enum("accel-profile", AccelProfile))
    r.set(dev, "scroll_method", r.enum("scroll-method", ScrollMethod))
    r.set(dev, "scroll_button", r.int("scroll-button"))
    if isinstance(dev, (MouseSettings, TouchpadSettings)):
        r.set(dev, "scroll_factor", r.float("scroll-factor"))
    if isinstance(dev, TouchpadSettings):
        for flag in ("tap", "dwt", "dwtp", "drag_lock", "disabled_on_external_mouse"):
            setattr(dev, flag, r.flag(flag.replace("_", "-")))
        dev.drag = bool(r.bool("drag"))
        r.set(dev, "click_method", r.enum("click-method", ClickMethod))
        r.set(dev, "tap_button_map", r.enum("tap-button-map", TapButtonMap))
    return dev


def _matrix(r: _Reader) -> tuple[float, ...] | None:
    node = r.node.get("calibration-matrix")
    if node is None:
        return None
    values = [r.float("calibration-matrix", v) for v in node.args]
    if len(values) != 6 or any(v is None for v in values):
        r.ctx.warn(f"{r.where}: calibration-matrix needs 6 numbers (line {node.line})")
        return None
    return tuple(values)


def _input_behavior(r: _Reader, settings: Settings) -> None:
    beh = settings.behavior
    ffm = r.node.get("focus-follows-mouse")
    if ffm is not None:
        beh.focus_follows_mouse = True
        amount = ffm.props.get("max-scroll-amount")
        beh.focus_follows_mouse_max_scroll = (
            r.float("max-scroll-amount", amount) if amount is not None else None
        )
    warp = r.node.get("warp-mouse-to-focus")
    if warp is not None:
        mode = warp.props.get("mode")
        beh.warp_mouse_to_focus = (
            r.enum("warp-mouse-to-focus", WarpMouseMode, mode) or WarpMouseMode.CENTER_XY
            if mode is not None
            else WarpMouseMode.CENTER_XY
        )
    if r.node.has("workspace-auto-back-and-forth"):
        beh.workspace_auto_back_and_forth = r.flag("workspace-auto-back-and-forth")
    if r.node.has("disable-power-key-handling"):
        beh.disable_power_key_handling = r.flag("disable-power-key-handling")
    r.set(beh, "mod_key", r.enum("mod-key", ModKey))
    r.set(beh, "mod_key_nested", r.enum("mod-key-nested", ModKey))


def extract_top_level_behavior(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    """Older configs put these at the top level instead of inside ``input``."""
    wrapper = Node(name="input", children=[node], line=node.line)
    _input_behavior(_Reader(wrapper, ctx, node.name), settings)
    return [Cat.BEHAVIOR]


# ---------------------------------------------------------------------------
# Single-block sections
# ---------------------------------------------------------------------------


def _animation(r: _Reader):
    if r.flag("off"):
        return AnimationOff()
    spring = r.node.get("spring")
    if spring is not None:
        anim = SpringAnimation()
        s = _Reader(spring, r.ctx, f"{r.where} > spring")
        s.set(anim, "damping_ratio", s.float("damping-ratio"))
        s.set(anim, "stiffness", s.int("stiffness"))
        s.set(anim, "epsilon", s.float("epsilon"))
        return anim
    if r.node.has("duration-ms") or r.node.has("curve"):
        anim = EasingAnimation()
        r.set(anim, "duration_ms", r.int("duration-ms"))
        r.set(anim, "curve", r.enum("curve", EasingCurve))
        return anim
    return None


def extract_animations(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "animations")
    kdl_names = {name.replace("_", "-"): name for name in ANIMATION_NAMES}
    r.expect({"off", "on", "slowdown"} | set(kdl_names))
    anims = settings.animations
    anims.enabled = _enabled(r)
    r.set(anims, "slowdown", r.float("slowdown"))
    for kdl_name, attr in kdl_names.items():
        child = r.child(kdl_name)
        if child is not None:
            setattr(anims, attr, _animation(child))
    return [Cat.ANIMATIONS]


def extract_cursor(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "cursor")
    r.expect({"xcursor-theme", "xcursor-size", "hide-when-typing", "hide-after-inactive-ms"})
    cur = settings.cursor
    r.set(cur, "theme", r.str("xcursor-theme"))
    r.set(cur, "size", r.int("xcursor-size"))
    cur.hide_when_typing = r.flag("hide-when-typing")
    cur.hide_after_inactive_ms = r.int("hide-after-inactive-ms")
    return [Cat.CURSOR]


def extract_overview(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "overview")
    r.expect({"zoom", "backdrop-color", "workspace-shadow"})
    ov = settings.overview
    r.set(ov, "zoom", r.float("zoom"))
    ov.backdrop_color = r.color("backdrop-color")
    shadow = r.child("workspace-shadow")
    ov.workspace_shadow_enabled = _enabled(shadow) if shadow is not None else True
    return [Cat.OVERVIEW]


def extract_gestures(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "gestures")
    r.expect({"hot-corners", "dnd-edge-view-scroll", "dnd-edge-workspace-switch"})
    g = settings.gestures
    corners = r.child("hot-corners")
    if corners is not None:
        g.hot_corners_enabled = _enabled(corners)
    scroll = r.child("dnd-edge-view-scroll")
    if scroll is not None:
        scroll.set(g, "dnd_scroll_trigger_width", scroll.int("trigger-width"))
        scroll.set(g, "dnd_scroll_delay_ms", scroll.int("delay-ms"))
        scroll.set(g, "dnd_scroll_max_speed", scroll.int("max-speed"))
    switch = r.child("dnd-edge-workspace-switch")
    if switch is not None:
        switch.set(g, "dnd_workspace_trigger_height", switch.int("trigger-height"))
        switch.set(g, "dnd_workspace_delay_ms", switch.int("delay-ms"))
        switch.set(g, "dnd_workspace_max_speed", switch.int("max-speed"))
    return [Cat.GESTURES]


def extract_recent_windows(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "recent-windows")
    r.expect({"off", "on", "debounce-ms", "open-delay-ms", "highlight", "previews", "binds"})
    rw = settings.recent_windows
    rw.off = r.flag("off")
    r.set(rw, "debounce_ms", r.int("debounce-ms"))
    r.set(rw, "open_delay_ms", r.int("open-delay-ms"))
    hl = r.child("highlight")
    if hl is not None:
        hl.set(rw, "highlight_active_color", hl.color("active-color"))
        hl.set(rw, "highlight_urgent_color", hl.color("urgent-color"))
        hl.set(rw, "highlight_padding", hl.int("padding"))
        hl.set(rw, "highlight_corner_radius", hl.int("corner-radius"))
    pv = r.child("previews")
    if pv is not None:
        pv.set(rw, "preview_max_height", pv.int("max-height"))
        pv.set(rw, "preview_max_scale", pv.float("max-scale"))
    return [Cat.RECENT_WINDOWS]


def extract_environment(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    variables = settings.environment.variables
    count = 0
    for child in node.iter_children():
        value = child.arg(0)
        if value is not None and not isinstance(value, str):
            value = str(value)
        variables.append(EnvironmentVariable(name=child.name, value=value))
        count += 1
    return [Cat.ENVIRONMENT] * max(count, 1)


def extract_debug(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "debug")
    kdl_flags = {flag.replace("_", "-"): flag for flag in DEBUG_FLAGS}
    r.expect(set(kdl_flags) | {"render-drm-device"})
    dbg = settings.debug
    for kdl_name, attr in kdl_flags.items():
        setattr(dbg, attr, r.flag(kdl_name))
    dbg.render_drm_device = r.str("render-drm-device")
    return [Cat.DEBUG]


def extract_switch_events(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "switch-events")
    kdl_names = {name.replace("_", "-"): name for name in SWITCH_EVENTS}
    r.expect(set(kdl_names))
    sw = settings.switch_events
    for kdl_name, attr in kdl_names.items():
        event = node.get(kdl_name)
        if event is None:
            continue
        spawn = event.get("spawn")
        if spawn is None:
            ctx.warn(f"switch-events > {kdl_name}: only 'spawn' actions are supported (line {event.line})")
            continue
        setattr(sw, attr, [str(a) for a in spawn.args])
    return [Cat.SWITCH_EVENTS]


# ---------------------------------------------------------------------------
# Miscellaneous top-level nodes
# ---------------------------------------------------------------------------


def extract_prefer_no_csd(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    settings.miscellaneous.prefer_no_csd = node.arg(0, True) is True
    return [Cat.MISCELLANEOUS]


def extract_screenshot_path(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    value = node.arg(0)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"screenshot-path must be a string or null, got {value!r}")
    settings.miscellaneous.screenshot_path = value
    return [Cat.MISCELLANEOUS]


def extract_hotkey_overlay(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "hotkey-overlay")
    r.expect({"skip-at-startup", "hide-not-bound"})
    settings.miscellaneous.hotkey_overlay_skip_at_startup = r.flag("skip-at-startup")
    settings.miscellaneous.hotkey_overlay_hide_not_bound = r.flag("hide-not-bound")
    return [Cat.MISCELLANEOUS]


def extract_clipboard(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "clipboard")
    r.expect({"disable-primary"})
    settings.miscellaneous.disable_primary_clipboard = r.flag("disable-primary")
    return [Cat.MISCELLANEOUS]


def extract_config_notification(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "config-notification")
    r.expect({"disable-failed"})
    settings.miscellaneous.config_notification_disable_failed = r.flag("disable-failed")
    return [Cat.MISCELLANEOUS]


def extract_xwayland_satellite(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "xwayland-satellite")
    r.expect({"off", "path"})
    settings.miscellaneous.xwayland_satellite_off = r.flag("off")
    settings.miscellaneous.xwayland_satellite_path = r.str("path")
    return [Cat.MISCELLANEOUS]


# ---------------------------------------------------------------------------
# Repeatable entities
# ---------------------------------------------------------------------------


def extract_output(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    name = node.arg(0)
    if not isinstance(name, str) or not name:
        raise ValidationError("output needs a connector or monitor name")
    r = _Reader(node, ctx, f"output {name!r}")
    r.expect({
        "off", "on", "scale", "mode", "position", "transform",
        "variable-refresh-rate", "focus-at-startup", "backdrop-color",
    })
    out = Output(id=ctx.assign_id(Cat.OUTPUTS, node), name=name)
    out.enabled = _enabled(r)
    out.scale = r.float("scale")
    out.mode = r.str("mode")
    pos = node.get("position")
    if pos is not None:
        x = r.int("position.x", pos.props.get("x"))
        y = r.int("position.y", pos.props.get("y"))
        out.position = (x, y) if x is not None and y is not None else None
    r.set(out, "transform", r.enum("transform", Transform))
    vrr = node.get("variable-refresh-rate")
    if vrr is not None:
        out.vrr = VrrMode.ON_DEMAND if vrr.props.get("on-demand") is True else VrrMode.ON
    out.focus_at_startup = r.flag("focus-at-startup")
    out.backdrop_color = r.color("backdrop-color")
    settings.outputs.outputs.append(out)
    return [Cat.OUTPUTS]


def extract_workspace(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    name = node.arg(0)
    if not isinstance(name, str) or not name:
        raise ValidationError("workspace needs a name")
    r = _Reader(node, ctx, f"workspace {name!r}")
    r.expect({"open-on-output"})
    settings.workspaces.workspaces.append(Workspace(
        id=ctx.assign_id(Cat.WORKSPACES, node),
        name=name,
        open_on_output=r.str("open-on-output"),
    ))
    return [Cat.WORKSPACES]


_WINDOW_MATCH_KEYS = {
    "app-id": "app_id",
    "title": "title",
    "is-active": "is_active",
    "is-focused": "is_focused",
    "is-floating": "is_floating",
    "is-urgent": "is_urgent",
    "at-startup": "at_startup",
}
_WINDOW_RULE_STRINGS = ("open-on-output", "open-on-workspace")
_WINDOW_RULE_BOOLS = (
    "open-maximized",
    "open-fullscreen",
    "open-floating",
    "open-focused",
    "clip-to-geometry",
    "draw-border-with-background",
    "variable-refresh-rate",
)
_WINDOW_RULE_SIZES = ("min-width", "max-width", "min-height", "max-height")


def _window_match(child: Node, ctx: ExtractContext) -> WindowMatch:
    match = WindowMatch()
    for key, value in child.props.items():
        attr = _WINDOW_MATCH_KEYS.get(key)
        if attr is None:
            ctx.warn(f"window-rule > {child.name}: skipped unknown matcher '{key}' (line {child.line})")
            continue
        if attr in ("app_id", "title"):
            setattr(match, attr, str(value))
        elif isinstance(value, bool):
            setattr(match, attr, value)
        else:
            ctx.warn(f"window-rule > {child.name}: {key} must be true or false (line {child.line})")
    return match


def _is_global_corner_radius(node: Node) -> bool:
    return (
        "id" not in node.annotations
        and not node.args
        and not node.props
        and [c.name for c in node.iter_children()] == ["geometry-corner-radius"]
    )


def extract_window_rule(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "window-rule")
    if _is_global_corner_radius(node):
        r.set(settings.appearance, "corner_radius", r.int("geometry-corner-radius"))
        return [Cat.APPEARANCE]

    r.expect(
        {"match", "exclude", "opacity", "block-out-from", "geometry-corner-radius",
         "default-column-width"}
        | set(_WINDOW_RULE_STRINGS) | set(_WINDOW_RULE_BOOLS) | set(_WINDOW_RULE_SIZES)
    )
    name = node.annotations.get("name")
    rule = WindowRule(
        id=ctx.assign_id(Cat.WINDOW_RULES, node),
        name=name if isinstance(name, str) else None,
        matches=[_window_match(c, ctx) for c in node.get_all("match")],
        excludes=[_window_match(c, ctx) for c in node.get_all("exclude")],
    )
    for key in _WINDOW_RULE_STRINGS:
        setattr(rule, key.replace("-", "_"), r.str(key))
    for key in _WINDOW_RULE_BOOLS:
        setattr(rule, key.replace("-", "_"), r.bool(key))
    for key in _WINDOW_RULE_SIZES:
        setattr(rule, key.replace("-", "_"), r.int(key))
    rule.opacity = r.float("opacity")
    rule.block_out_from = r.enum("block-out-from", BlockOutFrom)
    rule.geometry_corner_radius = r.int("geometry-corner-radius")
    width = r.child("default-column-width")
    if width is not None:
        rule.default_column_width = width.size()
    settings.window_rules.rules.append(rule)
    return [Cat.WINDOW_RULES]


def _layer_match(child: Node, ctx: ExtractContext) -> LayerMatch:
    match = LayerMatch()
    for key, value in child.props.items():
        if key == "namespace":
            match.namespace = str(value)
        elif key == "at-startup" and isinstance(value, bool):
            match.at_startup = value
        else:
            ctx.warn(f"layer-rule > {child.name}: skipped matcher {key}={value!r} (line {child.line})")
    return match


def extract_layer_rule(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    r = _Reader(node, ctx, "layer-rule")
    r.expect({
        "match", "exclude", "opacity", "block-out-from", "geometry-corner-radius",
        "place-within-backdrop", "baba-is-float",
    })
    name = node.annotations.get("name")
    rule = LayerRule(
        id=ctx.assign_id(Cat.LAYER_RULES, node),
        name=name if isinstance(name, str) else None,
        matches=[_layer_match(c, ctx) for c in node.get_all("match")],
        excludes=[_layer_match(c, ctx) for c in node.get_all("exclude")],
        opacity=r.float("opacity"),
        block_out_from=r.enum("block-out-from", BlockOutFrom),
        geometry_corner_radius=r.int("geometry-corner-radius"),
        place_within_backdrop=r.bool("place-within-backdrop"),
        baba_is_float=r.bool("baba-is-float"),
    )
    settings.layer_rules.rules.append(rule)
    return [Cat.LAYER_RULES]


def extract_binds(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    touched: list[Cat] = []
    for child in node.iter_children():
        actions = child.children or []
        if len(actions) != 1:
            ctx.warn(f"binds: '{child.name}' needs exactly one action (line {child.line})")
            continue
        action = actions[0]
        r = _Reader(child, ctx, f"binds > {child.name}")
        title = child.props.get("hotkey-overlay-title", "")
        cooldown = r.int("cooldown-ms")
        binding = Keybinding(
            id=ctx.assign_id(Cat.KEYBINDINGS, child),
            key=child.name,
            action=action.name,
            args=list(action.args),
            action_props=dict(action.props),
            hotkey_overlay_title=title if isinstance(title, str) and title else None,
            hide_from_overlay="hotkey-overlay-title" in child.props and title is None,
            allow_when_locked=r.bool("allow-when-locked") is True,
            allow_inhibiting=r.bool("allow-inhibiting") is not False,
            repeat=r.bool("repeat") is not False,
            cooldown_ms=cooldown,
        )
        settings.keybindings.bindings.append(binding)
        touched.append(Cat.KEYBINDINGS)
    return touched or [Cat.KEYBINDINGS]


def extract_spawn_at_startup(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    if not node.args:
        raise ValidationError("spawn-at-startup needs a command")
    settings.startup.commands.append(StartupCommand(
        id=ctx.assign_id(Cat.STARTUP, node),
        command=[str(a) for a in node.args],
    ))
    return [Cat.STARTUP]


def extract_spawn_sh_at_startup(node: Node, settings: Settings, ctx: ExtractContext) -> list[Cat]:
    line = node.arg(0)
    if not isinstance(line, str) or not line:
        raise ValidationError("spawn-sh-at-startup needs a command line")
    settings.startup.commands.append(StartupCommand(
        id=ctx.assign_id(Cat.STARTUP, node),
        command=[line],
        shell=True,
    ))
    return [Cat.STARTUP]
