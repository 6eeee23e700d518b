"""The closed set of top-level node kinds this app owns.

Both the importer (to dispatch extraction) and the merge engine (to decide
what to drop from the host file) use :class:`ManagedNode`, so the two can
never disagree about which nodes are managed.
"""

from __future__ import annotations

import enum
from typing import Callable

import nirisettings.extract as X
from nirisettings.categories import SettingsCategory
from nirisettings.errors import ValidationError
from nirisettings.kdl_document import Node
from nirisettings.models.settings import Settings

Extractor = Callable[[Node, Settings, X.ExtractContext], "list[SettingsCategory]"]


class ManagedNode(enum.Enum):
    LAYOUT = "layout"
    INPUT = "input"
    ANIMATIONS = "animations"
    CURSOR = "cursor"
    OVERVIEW = "overview"
    OUTPUT = "output"
    WORKSPACE = "workspace"
    WINDOW_RULE = "window-rule"
    LAYER_RULE = "layer-rule"
    BINDS = "binds"
    SPAWN_AT_STARTUP = "spawn-at-startup"
    SPAWN_SH_AT_STARTUP = "spawn-sh-at-startup"
    ENVIRONMENT = "environment"
    DEBUG = "debug"
    SWITCH_EVENTS = "switch-events"
    GESTURES = "gestures"
    RECENT_WINDOWS = "recent-windows"
    HOTKEY_OVERLAY = "hotkey-overlay"
    SCREENSHOT_PATH = "screenshot-path"
    PREFER_NO_CSD = "prefer-no-csd"
    CLIPBOARD = "clipboard"
    CONFIG_NOTIFICATION = "config-notification"
    XWAYLAND_SATELLITE = "xwayland-satellite"
    # accepted at the top level for older configs
    FOCUS_FOLLOWS_MOUSE = "focus-follows-mouse"
    WARP_MOUSE_TO_FOCUS = "warp-mouse-to-focus"
    WORKSPACE_AUTO_BACK_AND_FORTH = "workspace-auto-back-and-forth"

    @classmethod
    def lookup(cls, name: str) -> ManagedNode | None:
        try:
            return cls(name)
        except ValueError:
            return None

    @classmethod
    def is_managed(cls, name: str) -> bool:
        return cls.lookup(name) is not None

    def extract(self, node: Node, settings: Settings, ctx: X.ExtractContext) -> list[SettingsCategory]:
        return _EXTRACTORS[self](node, settings, ctx)


_EXTRACTORS: dict[ManagedNode, Extractor] = {
    ManagedNode.LAYOUT: X.extract_layout,
    ManagedNode.INPUT: X.extract_input,
    ManagedNode.ANIMATIONS: X.extract_animations,
    ManagedNode.CURSOR: X.extract_cursor,
    ManagedNode.OVERVIEW: X.extract_overview,
    ManagedNode.OUTPUT: X.extract_output,
    ManagedNode.WORKSPACE: X.extract_workspace,
    ManagedNode.WINDOW_RULE: X.extract_window_rule,
    ManagedNode.LAYER_RULE: X.extract_layer_rule,
    ManagedNode.BINDS: X.extract_binds,
    ManagedNode.SPAWN_AT_STARTUP: X.extract_spawn_at_startup,
    ManagedNode.SPAWN_SH_AT_STARTUP: X.extract_spawn_sh_at_startup,
    ManagedNode.ENVIRONMENT: X.extract_environment,
    ManagedNode.DEBUG: X.extract_debug,
    ManagedNode.SWITCH_EVENTS: X.extract_switch_events,
    ManagedNode.GESTURES: X.extract_gestures,
    ManagedNode.RECENT_WINDOWS: X.extract_recent_windows,
    ManagedNode.HOTKEY_OVERLAY: X.extract_hotkey_overlay,
    ManagedNode.SCREENSHOT_PATH: X.extract_screenshot_path,
    ManagedNode.PREFER_NO_CSD: X.extract_prefer_no_csd,
    ManagedNode.CLIPBOARD: X.extract_clipboard,
    ManagedNode.CONFIG_NOTIFICATION: X.extract_config_notification,
    ManagedNode.XWAYLAND_SATELLITE: X.extract_xwayland_satellite,
    ManagedNode.FOCUS_FOLLOWS_MOUSE: X.extract_top_level_behavior,
    ManagedNode.WARP_MOUSE_TO_FOCUS: X.extract_top_level_behavior,
    ManagedNode.WORKSPACE_AUTO_BACK_AND_FORTH: X.extract_top_level_behavior,
}

_missing = set(ManagedNode) - set(_EXTRACTORS)
if _missing:
    raise RuntimeError(f"ManagedNode members without an extractor: {sorted(m.value for m in _missing)}")


def apply_document(nodes: list[Node], settings: Settings, ctx: X.ExtractContext) -> list[SettingsCategory]:
    """Run every managed node through its extractor.

    Unknown nodes and malformed managed nodes are skipped with a warning;
    ``include`` nodes are left to the caller.
    """
    touched: list[SettingsCategory] = []
    for node in nodes:
        if node.name == "include":
            continue
        kind = ManagedNode.lookup(node.name)
        if kind is None:
            ctx.warn(f"Skipped unrecognized node '{node.name}' (line {node.line})")
            continue
        try:
            touched.extend(kind.extract(node, settings, ctx))
        except (ValidationError, TypeError, ValueError, ArithmeticError) as exc:
            ctx.warn(f"Skipped malformed '{node.name}' node (line {node.line}): {exc}")
    return touched
