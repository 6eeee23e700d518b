"""Workspaces, bindings, gestures and the remaining top-level sections."""

from __future__ import annotations

import dataclasses
from typing import Any

import nirisettings.constants as C


@dataclasses.dataclass
class Workspace:
    id: int
    name: str
    open_on_output: str | None = None


@dataclasses.dataclass
class WorkspaceSettings:
    workspaces: list[Workspace] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        self.workspaces = C.limit_list(self.workspaces, C.MAX_WORKSPACES, "workspaces")
        for workspace in self.workspaces:
            C.limit_strings(workspace, ("name", "open_on_output"))

    def next_id(self) -> int:
        return max((w.id for w in self.workspaces), default=0) + 1


@dataclasses.dataclass
class Keybinding:
    """``Mod+T hotkey-overlay-title="Terminal" { spawn "alacritty"; }``"""

    id: int
    key: str
    action: str
    args: list[Any] = dataclasses.field(default_factory=list)
    action_props: dict[str, Any] = dataclasses.field(default_factory=dict)
    hotkey_overlay_title: str | None = None
    hide_from_overlay: bool = False
    allow_when_locked: bool = False
    allow_inhibiting: bool = True
    repeat: bool = True
    cooldown_ms: int | None = None


@dataclasses.dataclass
class KeybindingSettings:
    bindings: list[Keybinding] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        for binding in self.bindings:
            if binding.cooldown_ms is not None and binding.cooldown_ms < 0:
                binding.cooldown_ms = 0
            C.limit_strings(binding, ("key", "action", "hotkey_overlay_title"))
            binding.args = [C.limit_string(a) for a in binding.args]

    def next_id(self) -> int:
        return max((b.id for b in self.bindings), default=0) + 1


@dataclasses.dataclass
class GestureSettings:
    hot_corners_enabled: bool = True
    dnd_scroll_trigger_width: int = 30
    dnd_scroll_delay_ms: int = 100
    dnd_scroll_max_speed: int = 1500
    dnd_workspace_trigger_height: int = 50
    dnd_workspace_delay_ms: int = 100
    dnd_workspace_max_speed: int = 1500

    def validate(self) -> None:
        C.clamp_fields(self, {
            "dnd_scroll_trigger_width": C.DND_TRIGGER,
            "dnd_scroll_delay_ms": C.DND_DELAY_MS,
            "dnd_scroll_max_speed": C.DND_MAX_SPEED,
            "dnd_workspace_trigger_height": C.DND_TRIGGER,
            "dnd_workspace_delay_ms": C.DND_DELAY_MS,
            "dnd_workspace_max_speed": C.DND_MAX_SPEED,
        })


@dataclasses.dataclass
class MiscSettings:
    prefer_no_csd: bool = False
    # None disables screenshot saving (``screenshot-path null``)
    screenshot_path: str | None = C.DEFAULT_SCREENSHOT_PATH
    disable_primary_clipboard: bool = False
    hotkey_overlay_skip_at_startup: bool = False
    hotkey_overlay_hide_not_bound: bool = False
    config_notification_disable_failed: bool = False
    xwayland_satellite_off: bool = False
    xwayland_satellite_path: str | None = None

    def validate(self) -> None:
        C.limit_strings(self, ("screenshot_path", "xwayland_satellite_path"))


@dataclasses.dataclass
class StartupCommand:
    id: int
    command: list[str]
    # spawn-sh-at-startup: command[0] is a shell line
    shell: bool = False


@dataclasses.dataclass
class StartupSettings:
    commands: list[StartupCommand] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        self.commands = C.limit_list(self.commands, C.MAX_STARTUP_COMMANDS, "startup commands")
        for command in self.commands:
            command.command = [C.limit_string(part) for part in command.command]

    def next_id(self) -> int:
        return max((c.id for c in self.commands), default=0) + 1


@dataclasses.dataclass
class EnvironmentVariable:
    name: str
    # None unsets the variable
    value: str | None = None


@dataclasses.dataclass
class EnvironmentSettings:
    variables: list[EnvironmentVariable] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        self.variables = C.limit_list(self.variables, C.MAX_ENVIRONMENT_VARS, "environment variables")
        for variable in self.variables:
            C.limit_strings(variable, ("name", "value"))


DEBUG_FLAGS = (
    "enable_overlay_planes",
    "disable_cursor_plane",
    "disable_direct_scanout",
    "restrict_primary_scanout_to_matching_format",
    "wait_for_frame_completion_before_queueing",
    "disable_resize_throttling",
    "disable_transactions",
    "emulate_zero_presentation_time",
    "skip_cursor_only_updates_during_vrr",
    "dbus_interfaces_in_non_session_instances",
    "keep_laptop_panel_on_when_lid_is_closed",
    "disable_monitor_names",
    "strict_new_window_focus_policy",
    "honor_xdg_activation_with_invalid_serial",
    "deactivate_unfocused_windows",
    "force_pipewire_invalid_modifier",
)


@dataclasses.dataclass
class DebugSettings:
    enable_overlay_planes: bool = False
    disable_cursor_plane: bool = False
    disable_direct_scanout: bool = False
    restrict_primary_scanout_to_matching_format: bool = False
    wait_for_frame_completion_before_queueing: bool = False
    disable_resize_throttling: bool = False
    disable_transactions: bool = False
    emulate_zero_presentation_time: bool = False
    skip_cursor_only_updates_during_vrr: bool = False
    dbus_interfaces_in_non_session_instances: bool = False
    keep_laptop_panel_on_when_lid_is_closed: bool = False
    disable_monitor_names: bool = False
    strict_new_window_focus_policy: bool = False
    honor_xdg_activation_with_invalid_serial: bool = False
    deactivate_unfocused_windows: bool = False
    force_pipewire_invalid_modifier: bool = False
    render_drm_device: str | None = None

    def validate(self) -> None:
        self.render_drm_device = C.limit_string(self.render_drm_device)


SWITCH_EVENTS = ("lid_close", "lid_open", "tablet_mode_on", "tablet_mode_off")


@dataclasses.dataclass
class SwitchEventSettings:
    """Spawn argv per switch event; an empty list means no action."""

    lid_close: list[str] = dataclasses.field(default_factory=list)
    lid_open: list[str] = dataclasses.field(default_factory=list)
    tablet_mode_on: list[str] = dataclasses.field(default_factory=list)
    tablet_mode_off: list[str] = dataclasses.field(default_factory=list)

    def validate(self) -> None:
        for name in SWITCH_EVENTS:
            setattr(self, name, [C.limit_string(part) for part in getattr(self, name)])
