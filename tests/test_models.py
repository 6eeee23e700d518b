"""Tests for the settings models, categories and the managed-node set."""

from __future__ import annotations

import pytest

import nirisettings.constants as C
from nirisettings.categories import SettingsCategory
from nirisettings.constants import OVERVIEW_ZOOM, clamp
from nirisettings.errors import ValidationError
from nirisettings.importer import import_text
from nirisettings.managed import ManagedNode
from nirisettings.models.color import Color
from nirisettings.models.enums import SizeKind
from nirisettings.models.layout import PresetSize
from nirisettings.models.rules import WindowMatch, WindowRule
from nirisettings.models.settings import Settings
from nirisettings.models.system import EnvironmentVariable, StartupCommand, Workspace


class TestColor:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("#fff", Color(255, 255, 255)),
            ("#0008", Color(0, 0, 0, 0x88)),
            ("#7fc8ff", Color(0x7F, 0xC8, 0xFF)),
            ("7FC8FF80", Color(0x7F, 0xC8, 0xFF, 0x80)),
        ],
    )
    def test_from_hex(self, text: str, expected: Color) -> None:
        assert Color.from_hex(text) == expected

    @pytest.mark.parametrize("text", ["", "#12", "#12345", "red", "#gggggg"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError):
            Color.from_hex(text)

    def test_to_hex_drops_opaque_alpha(self) -> None:
        assert Color.from_hex("#AABBCCFF").to_hex() == "#aabbcc"
        assert Color.from_hex("#aabbcc80").to_hex() == "#aabbcc80"


class TestValidate:
    def test_clamps_every_section(self) -> None:
        s = Settings()
        s.appearance.gaps = 1000
        s.appearance.border_width = 0
        s.keyboard.repeat_delay = 5
        s.cursor.size = 2
        s.behavior.focus_follows_mouse = False
        s.behavior.focus_follows_mouse_max_scroll = 50.0
        s.validate()
        assert s.appearance.gaps == 64
        assert s.appearance.border_width == 1
        assert s.keyboard.repeat_delay == 100
        assert s.cursor.size == 16
        assert s.behavior.focus_follows_mouse_max_scroll is None

    def test_float_fields_stay_float(self) -> None:
        s = Settings()
        s.overview.zoom = 5.0
        s.validate()
        assert s.overview.zoom == 1.0
        assert isinstance(s.overview.zoom, float)

    def test_nan_becomes_range_minimum(self) -> None:
        assert clamp(float("nan"), OVERVIEW_ZOOM) == 0.1
        assert clamp(float("inf"), OVERVIEW_ZOOM) == 1.0
        s = Settings()
        s.overview.zoom = float("nan")
        s.validate()
        assert s.overview.zoom == 0.1

    def test_preset_sizes(self) -> None:
        assert PresetSize(SizeKind.PROPORTION, 2.0).clamped().value == 1.0
        assert PresetSize(SizeKind.FIXED, 50.7).clamped() == PresetSize(SizeKind.FIXED, 200.0)

    def test_defaults_are_valid(self) -> None:
        s = Settings()
        s.validate()
        assert s == Settings()


class TestLimits:
    def test_long_strings_truncated(self) -> None:
        s = Settings()
        s.keyboard.xkb_options = "x" * (C.MAX_STRING_LENGTH + 100)
        s.cursor.theme = "t" * C.MAX_STRING_LENGTH
        s.environment.variables = [EnvironmentVariable("LONG", "v" * 5000)]
        s.validate()
        assert len(s.keyboard.xkb_options) == C.MAX_STRING_LENGTH
        assert len(s.cursor.theme) == C.MAX_STRING_LENGTH
        assert len(s.environment.variables[0].value) == C.MAX_STRING_LENGTH

    def test_patterns_use_shorter_limit(self) -> None:
        rule = WindowRule(id=1, matches=[WindowMatch(app_id="a" * 600, title="short")])
        rule.validate()
        assert len(rule.matches[0].app_id) == C.MAX_PATTERN_LENGTH
        assert rule.matches[0].title == "short"

    def test_collections_capped(self) -> None:
        s = Settings()
        s.workspaces.workspaces = [Workspace(i, f"ws{i}") for i in range(1, C.MAX_WORKSPACES + 6)]
        s.window_rules.rules = [
            WindowRule(id=1, matches=[WindowMatch(app_id=str(i)) for i in range(C.MAX_MATCHES_PER_RULE + 1)])
        ]
        s.startup.commands = [StartupCommand(i, ["true"]) for i in range(1, C.MAX_STARTUP_COMMANDS + 2)]
        s.validate()
        assert len(s.workspaces.workspaces) == C.MAX_WORKSPACES
        assert s.workspaces.workspaces[-1].name == f"ws{C.MAX_WORKSPACES}"
        assert len(s.window_rules.rules[0].matches) == C.MAX_MATCHES_PER_RULE
        assert len(s.startup.commands) == C.MAX_STARTUP_COMMANDS

    def test_none_and_non_strings_untouched(self) -> None:
        assert C.limit_string(None) is None
        assert C.limit_string(7) == 7

    def test_import_applies_limits(self) -> None:
        text = "".join(f'workspace "w{i}"\n' for i in range(C.MAX_WORKSPACES + 3))
        assert len(import_text(text).settings.workspaces.workspaces) == C.MAX_WORKSPACES


class TestSettingsCategory:
    def test_one_category_per_section(self) -> None:
        assert sorted(c.attr for c in SettingsCategory) == sorted(Settings.section_names())

    def test_paths_are_unique(self) -> None:
        paths = [c.relative_path for c in SettingsCategory]
        assert len(set(paths)) == len(paths)

    @pytest.mark.parametrize("name", ["layout_extras", "layout-extras", "LAYOUT_EXTRAS", " layout-extras "])
    def test_from_name(self, name: str) -> None:
        assert SettingsCategory.from_name(name) is SettingsCategory.LAYOUT_EXTRAS

    def test_from_name_unknown(self) -> None:
        with pytest.raises(KeyError):
            SettingsCategory.from_name("wallpaper")


class TestManagedNode:
    def test_lookup(self) -> None:
        assert ManagedNode.lookup("window-rule") is ManagedNode.WINDOW_RULE
        assert ManagedNode.lookup("include") is None
        assert not ManagedNode.is_managed("custom-node")
