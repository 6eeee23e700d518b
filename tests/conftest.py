"""Shared test fixtures for nirisettings tests."""

from __future__ import annotations

import pathlib

import pytest

import nirisettings.config
from nirisettings.paths import ConfigPaths

SAMPLE_CONFIG = """\
// My niri config
input {
    keyboard {
        xkb {
            layout "us,de"
            options "grp:win_space_toggle"
        }
        repeat-delay 300
        repeat-rate 40
    }
    touchpad {
        tap
        natural-scroll
    }
    focus-follows-mouse max-scroll-amount="25%"
}

output "eDP-1" {
    scale 1.5
    position x=0 y=0
}

layout {
    gaps 12
    center-focused-column "on-overflow"
    focus-ring {
        width 3
        active-color "#ff8800"
    }
}

// Keep this one: the app does not know about it.
custom-node "hello" {
    child 1
}

binds {
    Mod+T hotkey-overlay-title="Terminal" { spawn "alacritty"; }
    Mod+Q { close-window; }
}

spawn-at-startup "waybar"
prefer-no-csd
"""


@pytest.fixture(autouse=True)
def isolated_app_config(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Point the app's config.toml into the test's tmp dir."""
    path = tmp_path / "app-config" / "config.toml"
    monkeypatch.setattr(nirisettings.config, "_config_path", lambda: path)
    return path


@pytest.fixture
def niri_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    d = tmp_path / "niri"
    d.mkdir()
    return d


@pytest.fixture
def paths(niri_dir: pathlib.Path) -> ConfigPaths:
    return ConfigPaths.for_dir(niri_dir)


@pytest.fixture
def host_config(paths: ConfigPaths) -> pathlib.Path:
    """A realistic hand-written config.kdl."""
    paths.niri_config.write_text(SAMPLE_CONFIG)
    return paths.niri_config
