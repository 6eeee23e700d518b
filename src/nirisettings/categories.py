"""SettingsCategory: the unit of dirtiness and of file I/O."""

from __future__ import annotations

import enum

from nirisettings.models.settings import Settings


class SettingsCategory(enum.Enum):
    """One member per ``Settings`` field, with its file under the managed dir."""

    APPEARANCE = ("appearance", "appearance.kdl")
    BEHAVIOR = ("behavior", "behavior.kdl")
    KEYBOARD = ("keyboard", "input/keyboard.kdl")
    MOUSE = ("mouse", "input/mouse.kdl")
    TOUCHPAD = ("touchpad", "input/touchpad.kdl")
    TRACKPOINT = ("trackpoint", "input/trackpoint.kdl")
    TRACKBALL = ("trackball", "input/trackball.kdl")
    TABLET = ("tablet", "input/tablet.kdl")
    TOUCH = ("touch", "input/touch.kdl")
    OUTPUTS = ("outputs", "outputs.kdl")
    ANIMATIONS = ("animations", "animations.kdl")
    CURSOR = ("cursor", "cursor.kdl")
    OVERVIEW = ("overview", "overview.kdl")
    WORKSPACES = ("workspaces", "workspaces.kdl")
    KEYBINDINGS = ("keybindings", "keybindings.kdl")
    LAYOUT_EXTRAS = ("layout_extras", "advanced/layout-extras.kdl")
    GESTURES = ("gestures", "advanced/gestures.kdl")
    LAYER_RULES = ("layer_rules", "advanced/layer-rules.kdl")
    WINDOW_RULES = ("window_rules", "advanced/window-rules.kdl")
    MISCELLANEOUS = ("miscellaneous", "advanced/misc.kdl")
    STARTUP = ("startup", "advanced/startup.kdl")
    ENVIRONMENT = ("environment", "advanced/environment.kdl")
    DEBUG = ("debug", "advanced/debug.kdl")
    SWITCH_EVENTS = ("switch_events", "advanced/switch-events.kdl")
    RECENT_WINDOWS = ("recent_windows", "advanced/recent-windows.kdl")

    def __init__(self, attr: str, relative_path: str) -> None:
        self.attr = attr
        self.relative_path = relative_path

    @property
    def label(self) -> str:
        return self.attr.replace("_", "-")

    def section(self, settings: Settings):
        return getattr(settings, self.attr)

    def replace_section(self, settings: Settings, value) -> None:
        setattr(settings, self.attr, value)

    @classmethod
    def from_name(cls, name: str) -> SettingsCategory:
        """Accept ``layout_extras``, ``layout-extras`` or ``LAYOUT_EXTRAS``."""
        key = name.strip().lower().replace("-", "_")
        for member in cls:
            if member.attr == key:
                return member
        raise KeyError(f"Unknown category: {name}")


def _check_bijection() -> None:
    fields = Settings.section_names()
    attrs = [c.attr for c in SettingsCategory]
    if sorted(fields) != sorted(attrs) or len(set(attrs)) != len(attrs):
        missing = sorted(set(fields) ^ set(attrs))
        raise RuntimeError(f"SettingsCategory and Settings are out of sync: {missing}")


_check_bijection()
