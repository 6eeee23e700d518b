"""Tests for the top-level ``nirisettings`` CLI in nirisettings.__main__."""

from __future__ import annotations

import json
import pathlib
from unittest.mock import MagicMock, patch

import pytest

import nirisettings.__main__ as cli
import nirisettings.config
from nirisettings.categories import SettingsCategory
from nirisettings.generator import HEADER
from nirisettings.loader import load_settings
from nirisettings.models.color import Color
from nirisettings.models.enums import TrackLayout
from nirisettings.models.layout import AppearanceSettings, LayoutExtrasSettings
from nirisettings.paths import ConfigPaths
from nirisettings.storage import list_backups

_RUN = "nirisettings.ipc.subprocess.run"


@pytest.fixture(autouse=True)
def no_reload(isolated_app_config: pathlib.Path) -> None:
    nirisettings.config.set_value("save", "reload_after_save", False)


def _run(niri_dir: pathlib.Path, *argv: str) -> int:
    return cli.main(["--niri-dir", str(niri_dir), *argv])


class TestInitAndImport:
    def test_init(self, niri_dir: pathlib.Path, paths: ConfigPaths, host_config: pathlib.Path,
                  capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "init") == 0
        assert "Imported" in capsys.readouterr().out
        assert paths.main_kdl.exists()
        assert _run(niri_dir, "init") == 0
        assert "Already initialized" in capsys.readouterr().out

    def test_import_reports(self, niri_dir: pathlib.Path, paths: ConfigPaths, host_config: pathlib.Path,
                            capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "import") == 0
        out = capsys.readouterr().out
        assert "keybindings" in out
        assert "custom-node" in out
        assert not paths.managed_dir.exists()

    def test_import_save(self, niri_dir: pathlib.Path, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        assert _run(niri_dir, "import", "--save") == 0
        assert load_settings(paths).appearance.gaps == 12


class TestMergeCommands:
    def test_analyze(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                     capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "analyze") == 0
        out = capsys.readouterr().out
        assert "Include present: no" in out
        assert "custom-node (line" in out

    def test_analyze_unparsable(self, niri_dir: pathlib.Path, paths: ConfigPaths) -> None:
        paths.niri_config.write_text("layout {")
        assert _run(niri_dir, "analyze") == 1

    def test_merge_bootstraps_then_rewrites(self, niri_dir: pathlib.Path, paths: ConfigPaths,
                                            host_config: pathlib.Path,
                                            capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "merge") == 0
        out = capsys.readouterr().out
        assert "Backup:" in out
        assert paths.main_kdl.exists()
        text = host_config.read_text()
        assert 'include "nirisettings/main.kdl"' in text
        assert "custom-node" in text
        assert load_settings(paths).keyboard.xkb_layout == "us,de"

    def test_merge_prunes_backups(self, niri_dir: pathlib.Path, paths: ConfigPaths,
                                  host_config: pathlib.Path) -> None:
        nirisettings.config.set_value("save", "backup_limit", 1)
        original = host_config.read_text()
        for _ in range(3):
            host_config.write_text(original)
            assert _run(niri_dir, "merge") == 0
        assert len(list_backups(paths)) == 1

    def test_backups_listing(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                             capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "backups") == 0
        assert "No backups." in capsys.readouterr().out
        _run(niri_dir, "merge")
        capsys.readouterr()
        assert _run(niri_dir, "backups") == 0
        assert "config.kdl.backup-" in capsys.readouterr().out


class TestSettingsCommands:
    def test_health_and_repair(self, niri_dir: pathlib.Path, paths: ConfigPaths) -> None:
        assert _run(niri_dir, "init") == 0
        assert _run(niri_dir, "health") == 0
        paths.category_path(SettingsCategory.CURSOR).write_text("cursor {")
        assert _run(niri_dir, "health") == 1
        assert _run(niri_dir, "health", "--repair") == 0

    def test_show_list_and_section(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                                   capsys: pytest.CaptureFixture[str]) -> None:
        _run(niri_dir, "init")
        capsys.readouterr()
        assert _run(niri_dir, "show") == 0
        assert "input/keyboard.kdl" in capsys.readouterr().out
        assert _run(niri_dir, "show", "keyboard") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["xkb_layout"] == "us,de"
        assert data["track_layout"] == "global"

    def test_show_unknown_category(self, niri_dir: pathlib.Path,
                                   capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "show", "wallpaper") == 1
        assert "Unknown category" in capsys.readouterr().err

    def test_generate(self, niri_dir: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "generate", "layout-extras") == 0
        out = capsys.readouterr().out
        assert out.startswith(HEADER)
        assert "tab-indicator" in out

    def test_set_values(self, niri_dir: pathlib.Path, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        assert _run(niri_dir, "set", "cursor.size", "32") == 0
        assert _run(niri_dir, "set", "keyboard.track_layout", "window") == 0
        assert _run(niri_dir, "set", "appearance.focus_ring_active", "#112233") == 0
        assert _run(niri_dir, "set", "layout_extras.shadow.softness", "500") == 0
        settings = load_settings(paths)
        assert settings.cursor.size == 32
        assert settings.keyboard.track_layout is TrackLayout.WINDOW
        assert settings.appearance.focus_ring_active == Color.from_hex("#112233")
        assert settings.layout_extras.shadow.softness == 100
        assert settings.appearance.gaps == 12

    def test_set_rejects_bad_input(self, niri_dir: pathlib.Path,
                                   capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "set", "cursor", "32") == 1
        assert _run(niri_dir, "set", "cursor.bogus", "32") == 1
        assert _run(niri_dir, "set", "cursor.size", "big") == 1


class TestSetField:
    def test_optional_and_nested(self) -> None:
        section = LayoutExtrasSettings()
        assert cli.set_field(section, "shadow.inactive_color", "null") is None
        assert cli.set_field(section, "shadow.inactive_color", "#00000080") == Color.from_hex("#00000080")
        assert cli.set_field(section, "insert_hint_enabled", "off") is False

    def test_hex_int(self) -> None:
        section = AppearanceSettings()
        assert cli.set_field(section, "gaps", "0x10") == 16

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            cli.set_field(LayoutExtrasSettings(), "preset_column_widths", "0.5")


class TestMiscCommands:
    def test_validate(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                      capsys: pytest.CaptureFixture[str]) -> None:
        result = MagicMock(returncode=0, stdout="config is valid", stderr="")
        with patch(_RUN, return_value=result) as mock_run:
            assert _run(niri_dir, "validate") == 0
        assert mock_run.call_args.args[0][-1] == str(host_config)
        assert "valid" in capsys.readouterr().out

    def test_prefs(self, niri_dir: pathlib.Path, paths: ConfigPaths,
                   capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "prefs", "--theme", "nord", "--no-float") == 0
        out = capsys.readouterr().out
        assert "theme = 'nord'" in out
        assert "float_settings_app = False" in out
        assert json.loads(paths.prefs_file.read_text())["theme"] == "nord"

    def test_config_passthrough(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["config", "get", "save.niri_command"]) == 0
        assert capsys.readouterr().out.strip() == "niri"

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main([]) == 1


class TestDiffAndConsolidate:
    def test_diff_after_init_is_clean(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                                      capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "init") == 0
        capsys.readouterr()
        assert _run(niri_dir, "diff") == 0
        assert "No changes." in capsys.readouterr().out

    def test_diff_against_other_config(self, niri_dir: pathlib.Path, paths: ConfigPaths,
                                       host_config: pathlib.Path, tmp_path: pathlib.Path,
                                       capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "init") == 0
        other = tmp_path / "other.kdl"
        other.write_text(host_config.read_text().replace("gaps 12", "gaps 20"))
        capsys.readouterr()
        assert _run(niri_dir, "diff", "--file", str(other), "appearance") == 0
        out = capsys.readouterr().out
        assert "-    gaps 12" in out
        assert "+    gaps 20" in out
        assert "1 files would change" in out
        assert load_settings(paths).appearance.gaps == 12

    def test_diff_stat(self, niri_dir: pathlib.Path, paths: ConfigPaths,
                       capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "diff", "--stat", "cursor") == 0
        out = capsys.readouterr().out
        assert "cursor" in out
        assert "-0" in out
        assert not paths.managed_dir.exists()

    def test_diff_unknown_category(self, niri_dir: pathlib.Path) -> None:
        assert _run(niri_dir, "diff", "wallpaper") == 1

    def test_consolidate(self, niri_dir: pathlib.Path, tmp_path: pathlib.Path,
                         capsys: pytest.CaptureFixture[str]) -> None:
        config = tmp_path / "rules.kdl"
        config.write_text(
            'window-rule {\n    match app-id="steam"\n    open-floating true\n}\n'
            'window-rule {\n    match app-id="lutris"\n    open-floating true\n}\n'
        )
        assert _run(niri_dir, "consolidate", "--file", str(config)) == 0
        out = capsys.readouterr().out
        assert "merged: ^(steam|lutris)$" in out
        assert "1 suggestions covering 2 rules" in out
        assert _run(niri_dir, "import", "--file", str(config)) == 0
        assert "2 rules could be consolidated" in capsys.readouterr().out

    def test_consolidate_nothing(self, niri_dir: pathlib.Path, host_config: pathlib.Path,
                                 capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(niri_dir, "consolidate", "--file", str(host_config)) == 0
        assert "No rules to consolidate." in capsys.readouterr().out
