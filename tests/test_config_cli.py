"""Tests for nirisettings.config_cli — ``nirisettings config ...``."""

from __future__ import annotations

import pathlib

import pytest

import nirisettings.config
import nirisettings.config_cli


class TestCmdList:
    def test_lists_sections(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_list() == 0
        out = capsys.readouterr().out
        assert "[paths]" in out
        assert "backup_limit" in out


class TestCmdGet:
    def test_get_existing_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_get("save.backup_limit") == 0
        assert "10" in capsys.readouterr().out

    def test_get_invalid_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_get("no_dot") == 1
        assert "Invalid key format" in capsys.readouterr().err

    def test_get_unknown_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_get("save.nope") == 1


class TestCmdSet:
    def test_set_and_get(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_set("save.backup_limit", "3") == 0
        assert "Set save.backup_limit = 3" in capsys.readouterr().out
        nirisettings.config_cli.cmd_get("save.backup_limit")
        assert capsys.readouterr().out.strip() == "3"

    def test_set_bad_number(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_set("save.backup_limit", "many") == 1
        assert capsys.readouterr().err


class TestCmdReset:
    def test_reset(self, capsys: pytest.CaptureFixture[str]) -> None:
        nirisettings.config.set_value("save", "niri_command", "/opt/niri")
        assert nirisettings.config_cli.cmd_reset("save.niri_command") == 0
        assert "Reset save.niri_command" in capsys.readouterr().out
        assert nirisettings.config.load("save").niri_command == "niri"

    def test_reset_unknown_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_reset("save.nope") == 1
        assert "Unknown key" in capsys.readouterr().err


class TestCmdPath:
    def test_reports_missing_file(self, isolated_app_config: pathlib.Path,
                                  capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.main(["path"]) == 0
        out = capsys.readouterr().out
        assert str(isolated_app_config) in out
        assert "not created yet" in out


class TestCmdShow:
    def test_show_prints_sections(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.cmd_show() == 0
        out = capsys.readouterr().out
        assert "[save]" in out
        assert "autosave_interval = 0.5" in out


class TestCmdEdit:
    def test_creates_file_and_runs_editor(
        self,
        isolated_app_config: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls = []
        monkeypatch.setenv("EDITOR", "my-editor")
        monkeypatch.setattr(nirisettings.config_cli.subprocess, "call", lambda argv: calls.append(argv) or 0)
        assert nirisettings.config_cli.cmd_edit() == 0
        assert isolated_app_config.exists()
        assert calls == [["my-editor", str(isolated_app_config)]]


class TestMain:
    def test_no_subcmd(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.main([]) == 1

    def test_list_via_main(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert nirisettings.config_cli.main(["list"]) == 0
        assert capsys.readouterr().out
