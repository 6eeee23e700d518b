"""Tests for nirisettings.importer — host config to typed Settings."""

from __future__ import annotations

import pathlib

import pytest

from nirisettings.categories import SettingsCategory
from nirisettings.importer import import_file, import_text
from nirisettings.models.color import Color
from nirisettings.models.enums import CenterFocusedColumn, ScrollMethod, Transform, WarpMouseMode


class TestImportSample:
    def test_values(self, host_config: pathlib.Path) -> None:
        s = import_file(host_config).settings
        assert s.keyboard.xkb_layout == "us,de"
        assert s.keyboard.xkb_options == "grp:win_space_toggle"
        assert s.keyboard.repeat_delay == 300
        assert s.keyboard.repeat_rate == 40
        assert s.touchpad.tap is True
        assert s.touchpad.natural_scroll is True
        assert s.touchpad.dwt is False
        assert s.behavior.focus_follows_mouse is True
        assert s.behavior.focus_follows_mouse_max_scroll == 25.0
        assert s.behavior.center_focused_column is CenterFocusedColumn.ON_OVERFLOW
        assert s.appearance.gaps == 12
        assert s.appearance.focus_ring_width == 3
        assert s.appearance.focus_ring_active == Color.from_hex("#ff8800")
        assert s.miscellaneous.prefer_no_csd is True

    def test_repeatable_entities_get_sequential_ids(self, host_config: pathlib.Path) -> None:
        s = import_file(host_config).settings
        (output,) = s.outputs.outputs
        assert (output.id, output.name, output.scale, output.position) == (1, "eDP-1", 1.5, (0, 0))
        assert [(b.id, b.key, b.action) for b in s.keybindings.bindings] == [
            (1, "Mod+T", "spawn"),
            (2, "Mod+Q", "close-window"),
        ]
        assert s.keybindings.bindings[0].args == ["alacritty"]
        assert s.keybindings.bindings[0].hotkey_overlay_title == "Terminal"
        assert s.startup.commands[0].command == ["waybar"]

    def test_sections_reported(self, host_config: pathlib.Path) -> None:
        result = import_file(host_config)
        imported = dict(result.imported_sections)
        assert imported["keybindings"] == 2
        assert imported["outputs"] == 1
        assert imported["keyboard"] == 1
        assert "animations" in result.defaulted_sections
        assert "keyboard" not in result.defaulted_sections
        assert len(result.imported_sections) + len(result.defaulted_sections) == len(SettingsCategory)

    def test_unknown_node_warns(self, host_config: pathlib.Path) -> None:
        result = import_file(host_config)
        assert any("custom-node" in w for w in result.warnings)


class TestClamping:
    def test_negative_gaps(self) -> None:
        assert import_text("layout { gaps inner=-50; }").settings.appearance.gaps == 0

    def test_focus_ring_width_property(self) -> None:
        s = import_text("layout { focus-ring width=100; }").settings
        assert s.appearance.focus_ring_width == 16

    def test_repeat_rate(self) -> None:
        s = import_text("input { keyboard { repeat-rate 1000; }; }").settings
        assert s.keyboard.repeat_rate == 100

    def test_output_scale(self) -> None:
        s = import_text('output "DP-1" { scale 0.01; }').settings
        assert s.outputs.outputs[0].scale == 0.25

    def test_string_number_coerced(self) -> None:
        s = import_text('cursor { xcursor-size "32"; }').settings
        assert s.cursor.size == 32

    def test_huge_integer_clamped(self) -> None:
        s = import_text("layout { gaps 99999999999999999999999999; }").settings
        assert s.appearance.gaps == 64

    def test_gaps_outer_warns(self) -> None:
        result = import_text("layout { gaps inner=20 outer=10; }")
        assert result.settings.appearance.gaps == 20
        assert any("outer=10" in w for w in result.warnings)


class TestNonFinite:
    @pytest.mark.parametrize("value", ["1e999", "-1e999", '"inf"', '"nan"'])
    def test_int_field_keeps_default(self, value: str) -> None:
        result = import_text(f"layout {{ gaps {value}; }}\ncursor {{ xcursor-size 32; }}")
        assert result.settings.appearance.gaps == 16
        assert result.settings.cursor.size == 32
        assert any("finite" in w for w in result.warnings)

    @pytest.mark.parametrize("value", ['"inf"', "1e999"])
    def test_nested_int_field_keeps_default(self, value: str) -> None:
        result = import_text(f"input {{ keyboard {{ repeat-delay {value}; repeat-rate 40; }}; }}")
        assert result.settings.keyboard.repeat_delay == 600
        assert result.settings.keyboard.repeat_rate == 40
        assert result.warnings

    @pytest.mark.parametrize("value", ["1e999", '"inf"', '"-inf"', '"nan"', "1" + "0" * 400])
    def test_float_field_keeps_default(self, value: str) -> None:
        result = import_text(f"overview {{ zoom {value}; }}")
        assert result.settings.overview.zoom == 0.5
        assert any("finite" in w for w in result.warnings)


class TestRecovery:
    def test_unparsable_text(self) -> None:
        result = import_text("layout {\n    gaps 4\n")
        assert len(result.warnings) == 1
        assert result.imported_sections == []
        assert len(result.defaulted_sections) == len(SettingsCategory)
        assert result.settings.appearance.gaps == 16

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        result = import_file(tmp_path / "nope.kdl")
        assert len(result.warnings) == 1
        assert result.imported_sections == []

    def test_bad_enum_keeps_default(self) -> None:
        result = import_text('layout { center-focused-column "sometimes"; }')
        assert result.settings.behavior.center_focused_column is CenterFocusedColumn.NEVER
        assert any("sometimes" in w for w in result.warnings)

    def test_enum_match_is_case_sensitive(self) -> None:
        result = import_text('input { trackpoint { scroll-method "Edge"; }; }')
        assert result.settings.trackpoint.scroll_method is ScrollMethod.ON_BUTTON_DOWN
        assert result.warnings

    def test_malformed_node_skipped(self) -> None:
        result = import_text("output { scale 2.0; }\noutput \"HDMI-A-1\" { transform \"90\"; }")
        (output,) = result.settings.outputs.outputs
        assert output.name == "HDMI-A-1"
        assert output.transform is Transform.ROTATE_90
        assert any("malformed" in w for w in result.warnings)

    def test_bad_color_warns(self) -> None:
        result = import_text('layout { focus-ring { active-color "not-a-color"; }; }')
        assert result.settings.appearance.focus_ring_active == Color.from_hex("#7fc8ff")
        assert result.warnings


class TestNodeForms:
    def test_embedded_ids_honoured(self) -> None:
        s = import_text('workspace "a" /-id=7\nworkspace "b"\nworkspace "c" /-id=7').settings
        assert [(w.id, w.name) for w in s.workspaces.workspaces] == [(7, "a"), (8, "b"), (9, "c")]

    def test_global_corner_radius_rule(self) -> None:
        s = import_text("window-rule { geometry-corner-radius 9; }").settings
        assert s.appearance.corner_radius == 9
        assert s.window_rules.rules == []

    def test_window_rule_with_match(self) -> None:
        s = import_text(
            'window-rule {\n    match app-id="firefox" is-floating=true\n'
            "    geometry-corner-radius 4\n    open-maximized true\n}"
        ).settings
        (rule,) = s.window_rules.rules
        assert rule.matches[0].app_id == "firefox"
        assert rule.matches[0].is_floating is True
        assert rule.geometry_corner_radius == 4
        assert rule.open_maximized is True

    def test_top_level_warp_mouse(self) -> None:
        s = import_text('warp-mouse-to-focus mode="center-xy-always"').settings
        assert s.behavior.warp_mouse_to_focus is WarpMouseMode.CENTER_XY_ALWAYS

    def test_hidden_from_overlay(self) -> None:
        s = import_text("binds { Mod+Q hotkey-overlay-title=null { close-window; }; }").settings
        assert s.keybindings.bindings[0].hide_from_overlay is True

    def test_bind_without_action_warns(self) -> None:
        result = import_text("binds { Mod+Q; Mod+W { close-window; }; }")
        assert [b.key for b in result.settings.keybindings.bindings] == ["Mod+W"]
        assert any("Mod+Q" in w for w in result.warnings)

    def test_screenshot_path_null(self) -> None:
        s = import_text("screenshot-path null").settings
        assert s.miscellaneous.screenshot_path is None

    def test_spawn_sh(self) -> None:
        s = import_text('spawn-sh-at-startup "swaybg -i ~/bg.png"').settings
        (cmd,) = s.startup.commands
        assert cmd.shell is True
        assert cmd.command == ["swaybg -i ~/bg.png"]


class TestIncludes:
    def test_follows_relative_include(self, niri_dir: pathlib.Path) -> None:
        (niri_dir / "parts").mkdir()
        (niri_dir / "parts" / "layout.kdl").write_text("layout { gaps 30; }")
        host = niri_dir / "config.kdl"
        host.write_text('layout { gaps 4; }\ninclude "parts/layout.kdl"\n')
        assert import_file(host).settings.appearance.gaps == 30

    def test_later_nodes_override_include(self, niri_dir: pathlib.Path) -> None:
        (niri_dir / "a.kdl").write_text("layout { gaps 30; }")
        host = niri_dir / "config.kdl"
        host.write_text('include "a.kdl"\nlayout { gaps 4; }\n')
        assert import_file(host).settings.appearance.gaps == 4

    def test_cycle_is_skipped(self, niri_dir: pathlib.Path) -> None:
        (niri_dir / "a.kdl").write_text('include "b.kdl"\ncursor { xcursor-size 32; }')
        (niri_dir / "b.kdl").write_text('include "a.kdl"')
        host = niri_dir / "config.kdl"
        host.write_text('include "a.kdl"')
        result = import_file(host)
        assert result.settings.cursor.size == 32
        assert any("cycle" in w for w in result.warnings)

    def test_outside_root_refused(self, tmp_path: pathlib.Path, niri_dir: pathlib.Path) -> None:
        (tmp_path / "evil.kdl").write_text("layout { gaps 40; }")
        host = niri_dir / "config.kdl"
        host.write_text('include "../evil.kdl"')
        result = import_file(host)
        assert result.settings.appearance.gaps == 16
        assert any("outside" in w for w in result.warnings)

    def test_missing_include_warns(self, niri_dir: pathlib.Path) -> None:
        host = niri_dir / "config.kdl"
        host.write_text('include "gone.kdl"\nlayout { gaps 2; }')
        result = import_file(host)
        assert result.settings.appearance.gaps == 2
        assert any("gone.kdl" in w for w in result.warnings)
