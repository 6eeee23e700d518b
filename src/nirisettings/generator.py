"""Generate canonical KDL for each settings category.

Every ``_gen_*`` function is the inverse of the extractors in
:mod:`nirisettings.extract` for its category: importing the text it returns
yields the same section value. Output is deterministic (fixed field order,
``repr()`` floats), so identical settings always produce identical bytes.
"""

from __future__ import annotations

import contextlib
from typing import Any, Callable, Iterator

from nirisettings.categories import SettingsCategory
from nirisettings.kdl_document import format_name, format_value, quote
from nirisettings.models.color import ColorOrGradient, Gradient
from nirisettings.models.display import (
    ANIMATION_NAMES,
    AnimationOff,
    EasingAnimation,
    SpringAnimation,
)
from nirisettings.models.enums import SizeKind, VrrMode, WarpMouseMode
from nirisettings.models.input import PointerDevice, TouchpadSettings
from nirisettings.models.layout import PresetSize
from nirisettings.models.rules import LayerMatch, WindowMatch
from nirisettings.models.settings import Settings
from nirisettings.models.system import DEBUG_FLAGS, SWITCH_EVENTS

HEADER = (
    "// Generated by nirisettings. Changes made here are overwritten on the\n"
    "// next save; edit the settings in the app instead.\n"
)


class _Writer:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.depth = 0

    def node(self, name: str, *args: Any, annotations: dict[str, Any] | None = None, **props: Any) -> None:
        self.lines.append("    " * self.depth + _render(name, args, props, annotations))

    def flag(self, name: str, on: bool) -> None:
        if on:
            self.node(name)

    @contextlib.contextmanager
    def block(
        self, name: str, *args: Any, annotations: dict[str, Any] | None = None, **props: Any
    ) -> Iterator[None]:
        self.lines.append("    " * self.depth + _render(name, args, props, annotations) + " {")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1
            self.lines.append("    " * self.depth + "}")

    def text(self) -> str:
        body = "\n".join(self.lines)
        return HEADER + ("\n" + body + "\n" if body else "")


def _render(name: str, args: tuple, props: dict[str, Any], annotations: dict[str, Any] | None) -> str:
    parts = [format_name(name)]
    parts.extend(format_value(a) for a in args)
    for key, value in props.items():
        parts.append(f"{format_name(key.replace('_', '-'))}={format_value(value)}")
    for key, value in (annotations or {}).items():
        if value is not None:
            parts.append(f"/-{format_name(key)}={format_value(value)}")
    return " ".join(parts)


def _color(w: _Writer, prefix: str, value: ColorOrGradient) -> None:
    if isinstance(value, Gradient):
        props: dict[str, Any] = {
            "from": value.start.to_hex(),
            "to": value.end.to_hex(),
            "angle": value.angle,
            "relative-to": value.relative_to.value,
        }
        if value.color_space:
            props["in"] = value.color_space
        w.lines.append(
            "    " * w.depth + _render(f"{prefix}-gradient", (), props, None)
        )
    else:
        w.node(f"{prefix}-color", value.to_hex())


def _size(w: _Writer, name: str, size: PresetSize | None) -> None:
    if size is None:
        w.lines.append("    " * w.depth + f"{name} {{}}")
        return
    with w.block(name):
        _size_entry(w, size)


def _size_entry(w: _Writer, size: PresetSize) -> None:
    if size.kind is SizeKind.FIXED:
        w.node("fixed", int(size.value))
    else:
        w.node("proportion", float(size.value))


# ---------------------------------------------------------------------------
# layout-based categories
# ---------------------------------------------------------------------------


def _gen_appearance(s: Settings, w: _Writer) -> None:
    a = s.appearance
    with w.block("layout"):
        w.node("gaps", a.gaps)
        with w.block("focus-ring"):
            w.flag("off", not a.focus_ring_enabled)
            w.node("width", a.focus_ring_width)
            _color(w, "active", a.focus_ring_active)
            _color(w, "inactive", a.focus_ring_inactive)
            _color(w, "urgent", a.focus_ring_urgent)
        with w.block("border"):
            w.node("on" if a.border_enabled else "off")
            w.node("width", a.border_width)
            _color(w, "active", a.border_active)
            _color(w, "inactive", a.border_inactive)
            _color(w, "urgent", a.border_urgent)
        if a.background_color is not None:
            w.node("background-color", a.background_color.to_hex())
    with w.block("window-rule"):
        w.node("geometry-corner-radius", a.corner_radius)


def _gen_behavior(s: Settings, w: _Writer) -> None:
    b = s.behavior
    with w.block("input"):
        if b.focus_follows_mouse:
            if b.focus_follows_mouse_max_scroll is not None:
                amount = f"{float(b.focus_follows_mouse_max_scroll)!r}%"
                w.node("focus-follows-mouse", max_scroll_amount=amount)
            else:
                w.node("focus-follows-mouse")
        if b.warp_mouse_to_focus is WarpMouseMode.CENTER_XY:
            w.node("warp-mouse-to-focus")
        elif b.warp_mouse_to_focus is not WarpMouseMode.OFF:
            w.node("warp-mouse-to-focus", mode=b.warp_mouse_to_focus.value)
        w.flag("workspace-auto-back-and-forth", b.workspace_auto_back_and_forth)
        w.flag("disable-power-key-handling", b.disable_power_key_handling)
        if b.mod_key is not None:
            w.node("mod-key", b.mod_key.value)
        if b.mod_key_nested is not None:
            w.node("mod-key-nested", b.mod_key_nested.value)
    with w.block("layout"):
        w.node("center-focused-column", b.center_focused_column.value)
        w.flag("always-center-single-column", b.always_center_single_column)
        w.flag("empty-workspace-above-first", b.empty_workspace_above_first)
        _size(w, "default-column-width", b.default_column_width)
        with w.block("struts"):
            w.node("left", b.strut_left)
            w.node("right", b.strut_right)
            w.node("top", b.strut_top)
            w.node("bottom", b.strut_bottom)


def _gen_layout_extras(s: Settings, w: _Writer) -> None:
    x = s.layout_extras
    with w.block("layout"):
        sh = x.shadow
        with w.block("shadow"):
            w.flag("on", sh.enabled)
            w.node("softness", sh.softness)
            w.node("spread", sh.spread)
            w.node("offset", x=sh.offset_x, y=sh.offset_y)
            w.node("draw-behind-window", sh.draw_behind_window)
            w.node("color", sh.color.to_hex())
            if sh.inactive_color is not None:
                w.node("inactive-color", sh.inactive_color.to_hex())
        tab = x.tab_indicator
        with w.block("tab-indicator"):
            w.flag("off", not tab.enabled)
            w.flag("hide-when-single-tab", tab.hide_when_single_tab)
            w.flag("place-within-column", tab.place_within_column)
            w.node("gap", tab.gap)
            w.node("width", tab.width)
            w.node("length", total_proportion=float(tab.length_total_proportion))
            w.node("position", tab.position.value)
            w.node("corner-radius", tab.corner_radius)
        with w.block("insert-hint"):
            w.flag("off", not x.insert_hint_enabled)
            w.node("color", x.insert_hint_color.to_hex())
        for name, sizes in (
            ("preset-column-widths", x.preset_column_widths),
            ("preset-window-heights", x.preset_window_heights),
        ):
            if sizes:
                with w.block(name):
                    for size in sizes:
                        _size_entry(w, size)
        w.node("default-column-display", x.default_column_display.value)


# ---------------------------------------------------------------------------
# input categories
# ---------------------------------------------------------------------------


def _gen_keyboard(s: Settings, w: _Writer) -> None:
    k = s.keyboard
    with w.block("input"), w.block("keyboard"):
        w.flag("off", k.off)
        with w.block("xkb"):
            for key in ("layout", "variant", "model", "rules", "options", "file"):
                value = getattr(k, f"xkb_{key}")
                if value:
                    w.node(key, value)
        w.node("repeat-delay", k.repeat_delay)
        w.node("repeat-rate", k.repeat_rate)
        w.node("track-layout", k.track_layout.value)
        w.flag("numlock", k.numlock)


def _pointer(w: _Writer, dev: PointerDevice) -> None:
    for flag in ("off", "natural_scroll", "left_handed", "middle_emulation", "scroll_button_lock"):
        w.flag(flag.replace("_", "-"), getattr(dev, flag))
    w.node("accel-speed", float(dev.accel_speed))
    if dev.accel_profile is not None:
        w.node("accel-profile", dev.accel_profile.value)
    if dev.scroll_method is not None:
        w.node("scroll-method", dev.scroll_method.value)
    if dev.scroll_button is not None:
        w.node("scroll-button", dev.scroll_button)
    scroll_factor = getattr(dev, "scroll_factor", None)
    if scroll_factor is not None:
        w.node("scroll-factor", float(scroll_factor))
    if isinstance(dev, TouchpadSettings):
        for flag in ("tap", "dwt", "dwtp", "drag_lock", "disabled_on_external_mouse"):
            w.flag(flag.replace("_", "-"), getattr(dev, flag))
        w.node("drag", dev.drag)
        if dev.click_method is not None:
            w.node("click-method", dev.click_method.value)
        if dev.tap_button_map is not None:
            w.node("tap-button-map", dev.tap_button_map.value)


def _pointer_gen(attr: str) -> Callable[[Settings, _Writer], None]:
    def gen(s: Settings, w: _Writer) -> None:
        with w.block("input"), w.block(attr):
            _pointer(w, getattr(s, attr))

    return gen


def _gen_tablet(s: Settings, w: _Writer) -> None:
    t = s.tablet
    with w.block("input"), w.block("tablet"):
        w.flag("off", t.off)
        if t.map_to_output is not None:
            w.node("map-to-output", t.map_to_output)
        w.flag("left-handed", t.left_handed)
        if t.calibration_matrix is not None:
            w.node("calibration-matrix", *(float(v) for v in t.calibration_matrix))


def _gen_touch(s: Settings, w: _Writer) -> None:
    t = s.touch
    with w.block("input"), w.block("touch"):
        w.flag("off", t.off)
        if t.map_to_output is not None:
            w.node("map-to-output", t.map_to_output)
        if t.calibration_matrix is not None:
            w.node("calibration-matrix", *(float(v) for v in t.calibration_matrix))


# ---------------------------------------------------------------------------
# Display categories
# ---------------------------------------------------------------------------


def _gen_outputs(s: Settings, w: _Writer) -> None:
    for out in s.outputs.outputs:
        with w.block("output", out.name, annotations={"id": out.id}):
            w.flag("off", not out.enabled)
            if out.mode is not None:
                w.node("mode", out.mode)
            if out.scale is not None:
                w.node("scale", float(out.scale))
            w.node("transform", out.transform.value)
            if out.position is not None:
                w.node("position", x=out.position[0], y=out.position[1])
            if out.vrr is VrrMode.ON:
                w.node("variable-refresh-rate")
            elif out.vrr is VrrMode.ON_DEMAND:
                w.node("variable-refresh-rate", on_demand=True)
            w.flag("focus-at-startup", out.focus_at_startup)
            if out.backdrop_color is not None:
                w.node("backdrop-color", out.backdrop_color.to_hex())


def _gen_animations(s: Settings, w: _Writer) -> None:
    a = s.animations
    with w.block("animations"):
        w.flag("off", not a.enabled)
        w.node("slowdown", float(a.slowdown))
        for attr in ANIMATION_NAMES:
            anim = getattr(a, attr)
            if anim is None:
                continue
            with w.block(attr.replace("_", "-")):
                if isinstance(anim, AnimationOff):
                    w.node("off")
                elif isinstance(anim, SpringAnimation):
                    w.node(
                        "spring",
                        damping_ratio=float(anim.damping_ratio),
                        stiffness=anim.stiffness,
                        epsilon=float(anim.epsilon),
                    )
                elif isinstance(anim, EasingAnimation):
                    w.node("duration-ms", anim.duration_ms)
                    w.node("curve", anim.curve.value)


def _gen_cursor(s: Settings, w: _Writer) -> None:
    c = s.cursor
    with w.block("cursor"):
        w.node("xcursor-theme", c.theme)
        w.node("xcursor-size", c.size)
        w.flag("hide-when-typing", c.hide_when_typing)
        if c.hide_after_inactive_ms is not None:
            w.node("hide-after-inactive-ms", c.hide_after_inactive_ms)


def _gen_overview(s: Settings, w: _Writer) -> None:
    o = s.overview
    with w.block("overview"):
        w.node("zoom", float(o.zoom))
        if o.backdrop_color is not None:
            w.node("backdrop-color", o.backdrop_color.to_hex())
        if not o.workspace_shadow_enabled:
            with w.block("workspace-shadow"):
                w.node("off")


def _gen_recent_windows(s: Settings, w: _Writer) -> None:
    r = s.recent_windows
    with w.block("recent-windows"):
        w.flag("off", r.off)
        w.node("debounce-ms", r.debounce_ms)
        w.node("open-delay-ms", r.open_delay_ms)
        with w.block("highlight"):
            w.node("active-color", r.highlight_active_color.to_hex())
            w.node("urgent-color", r.highlight_urgent_color.to_hex())
            w.node("padding", r.highlight_padding)
            w.node("corner-radius", r.highlight_corner_radius)
        with w.block("previews"):
            w.node("max-height", r.preview_max_height)
            w.node("max-scale", float(r.preview_max_scale))


# ---------------------------------------------------------------------------
# Lists and the rest
# ---------------------------------------------------------------------------


def _gen_workspaces(s: Settings, w: _Writer) -> None:
    for ws in s.workspaces.workspaces:
        if ws.open_on_output is None:
            w.node("workspace", ws.name, annotations={"id": ws.id})
        else:
            with w.block("workspace", ws.name, annotations={"id": ws.id}):
                w.node("open-on-output", ws.open_on_output)


def _gen_keybindings(s: Settings, w: _Writer) -> None:
    bindings = s.keybindings.bindings
    if not bindings:
        return
    with w.block("binds"):
        for b in bindings:
            props: dict[str, Any] = {}
            if b.hide_from_overlay:
                props["hotkey-overlay-title"] = None
            elif b.hotkey_overlay_title is not None:
                props["hotkey-overlay-title"] = b.hotkey_overlay_title
            if b.allow_when_locked:
                props["allow-when-locked"] = True
            if not b.allow_inhibiting:
                props["allow-inhibiting"] = False
            if not b.repeat:
                props["repeat"] = False
            if b.cooldown_ms is not None:
                props["cooldown-ms"] = b.cooldown_ms
            head = _render(b.key, (), props, {"id": b.id})
            action = _render(b.action, tuple(b.args), dict(b.action_props), None)
            w.lines.append("    " * w.depth + f"{head} {{ {action}; }}")


def _match_props(match: WindowMatch | LayerMatch) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for key, value in vars(match).items():
        if value is not None:
            props[key.replace("_", "-")] = value
    return props


def _gen_window_rules(s: Settings, w: _Writer) -> None:
    for rule in s.window_rules.rules:
        with w.block("window-rule", annotations={"id": rule.id, "name": rule.name}):
            for match in rule.matches:
                w.lines.append("    " * w.depth + _render("match", (), _match_props(match), None))
            for match in rule.excludes:
                w.lines.append("    " * w.depth + _render("exclude", (), _match_props(match), None))
            for attr in ("open_on_output", "open_on_workspace"):
                if getattr(rule, attr) is not None:
                    w.node(attr.replace("_", "-"), getattr(rule, attr))
            for attr in (
                "open_maximized", "open_fullscreen", "open_floating", "open_focused",
                "clip_to_geometry", "draw_border_with_background", "variable_refresh_rate",
            ):
                if getattr(rule, attr) is not None:
                    w.node(attr.replace("_", "-"), getattr(rule, attr))
            if rule.opacity is not None:
                w.node("opacity", float(rule.opacity))
            if rule.block_out_from is not None:
                w.node("block-out-from", rule.block_out_from.value)
            if rule.geometry_corner_radius is not None:
                w.node("geometry-corner-radius", rule.geometry_corner_radius)
            if rule.default_column_width is not None:
                _size(w, "default-column-width", rule.default_column_width)
            for attr in ("min_width", "max_width", "min_height", "max_height"):
                if getattr(rule, attr) is not None:
                    w.node(attr.replace("_", "-"), getattr(rule, attr))


def _gen_layer_rules(s: Settings, w: _Writer) -> None:
    for rule in s.layer_rules.rules:
        with w.block("layer-rule", annotations={"id": rule.id, "name": rule.name}):
            for match in rule.matches:
                w.lines.append("    " * w.depth + _render("match", (), _match_props(match), None))
            for match in rule.excludes:
                w.lines.append("    " * w.depth + _render("exclude", (), _match_props(match), None))
            if rule.opacity is not None:
                w.node("opacity", float(rule.opacity))
            if rule.block_out_from is not None:
                w.node("block-out-from", rule.block_out_from.value)
            if rule.geometry_corner_radius is not None:
                w.node("geometry-corner-radius", rule.geometry_corner_radius)
            if rule.place_within_backdrop is not None:
                w.node("place-within-backdrop", rule.place_within_backdrop)
            if rule.baba_is_float is not None:
                w.node("baba-is-float", rule.baba_is_float)


def _gen_gestures(s: Settings, w: _Writer) -> None:
    g = s.gestures
    with w.block("gestures"):
        if not g.hot_corners_enabled:
            with w.block("hot-corners"):
                w.node("off")
        with w.block("dnd-edge-view-scroll"):
            w.node("trigger-width", g.dnd_scroll_trigger_width)
            w.node("delay-ms", g.dnd_scroll_delay_ms)
            w.node("max-speed", g.dnd_scroll_max_speed)
        with w.block("dnd-edge-workspace-switch"):
            w.node("trigger-height", g.dnd_workspace_trigger_height)
            w.node("delay-ms", g.dnd_workspace_delay_ms)
            w.node("max-speed", g.dnd_workspace_max_speed)


def _gen_miscellaneous(s: Settings, w: _Writer) -> None:
    m = s.miscellaneous
    w.flag("prefer-no-csd", m.prefer_no_csd)
    w.node("screenshot-path", m.screenshot_path)
    if m.disable_primary_clipboard:
        with w.block("clipboard"):
            w.node("disable-primary")
    if m.hotkey_overlay_skip_at_startup or m.hotkey_overlay_hide_not_bound:
        with w.block("hotkey-overlay"):
            w.flag("skip-at-startup", m.hotkey_overlay_skip_at_startup)
            w.flag("hide-not-bound", m.hotkey_overlay_hide_not_bound)
    if m.config_notification_disable_failed:
        with w.block("config-notification"):
            w.node("disable-failed")
    if m.xwayland_satellite_off or m.xwayland_satellite_path is not None:
        with w.block("xwayland-satellite"):
            w.flag("off", m.xwayland_satellite_off)
            if m.xwayland_satellite_path is not None:
                w.node("path", m.xwayland_satellite_path)


def _gen_startup(s: Settings, w: _Writer) -> None:
    for cmd in s.startup.commands:
        if cmd.shell:
            w.node("spawn-sh-at-startup", cmd.command[0], annotations={"id": cmd.id})
        else:
            w.node("spawn-at-startup", *cmd.command, annotations={"id": cmd.id})


def _gen_environment(s: Settings, w: _Writer) -> None:
    if not s.environment.variables:
        return
    with w.block("environment"):
        for var in s.environment.variables:
            w.node(var.name, var.value)


def _gen_debug(s: Settings, w: _Writer) -> None:
    d = s.debug
    flags = [f for f in DEBUG_FLAGS if getattr(d, f)]
    if not flags and d.render_drm_device is None:
        return
    with w.block("debug"):
        for flag in flags:
            w.node(flag.replace("_", "-"))
        if d.render_drm_device is not None:
            w.node("render-drm-device", d.render_drm_device)


def _gen_switch_events(s: Settings, w: _Writer) -> None:
    sw = s.switch_events
    events = [(name, getattr(sw, name)) for name in SWITCH_EVENTS if getattr(sw, name)]
    if not events:
        return
    with w.block("switch-events"):
        for name, argv in events:
            spawn = _render("spawn", tuple(argv), {}, None)
            w.lines.append("    " * w.depth + f"{name.replace('_', '-')} {{ {spawn}; }}")


_GENERATORS: dict[SettingsCategory, Callable[[Settings, _Writer], None]] = {
    SettingsCategory.APPEARANCE: _gen_appearance,
    SettingsCategory.BEHAVIOR: _gen_behavior,
    SettingsCategory.KEYBOARD: _gen_keyboard,
    SettingsCategory.MOUSE: _pointer_gen("mouse"),
    SettingsCategory.TOUCHPAD: _pointer_gen("touchpad"),
    SettingsCategory.TRACKPOINT: _pointer_gen("trackpoint"),
    SettingsCategory.TRACKBALL: _pointer_gen("trackball"),
    SettingsCategory.TABLET: _gen_tablet,
    SettingsCategory.TOUCH: _gen_touch,
    SettingsCategory.OUTPUTS: _gen_outputs,
    SettingsCategory.ANIMATIONS: _gen_animations,
    SettingsCategory.CURSOR: _gen_cursor,
    SettingsCategory.OVERVIEW: _gen_overview,
    SettingsCategory.WORKSPACES: _gen_workspaces,
    SettingsCategory.KEYBINDINGS: _gen_keybindings,
    SettingsCategory.LAYOUT_EXTRAS: _gen_layout_extras,
    SettingsCategory.GESTURES: _gen_gestures,
    SettingsCategory.LAYER_RULES: _gen_layer_rules,
    SettingsCategory.WINDOW_RULES: _gen_window_rules,
    SettingsCategory.MISCELLANEOUS: _gen_miscellaneous,
    SettingsCategory.STARTUP: _gen_startup,
    SettingsCategory.ENVIRONMENT: _gen_environment,
    SettingsCategory.DEBUG: _gen_debug,
    SettingsCategory.SWITCH_EVENTS: _gen_switch_events,
    SettingsCategory.RECENT_WINDOWS: _gen_recent_windows,
}


def generate(category: SettingsCategory, settings: Settings) -> str:
    """Return the file contents for *category*."""
    w = _Writer()
    _GENERATORS[category](settings, w)
    return w.text()


def generate_main() -> str:
    """Return ``main.kdl``, which includes every category file."""
    lines = [HEADER]
    for category in SettingsCategory:
        lines.append(f"include {quote(category.relative_path)}\n")
    return "".join(lines)


def include_line(target: str) -> str:
    return f"include {quote(target)}"
