"""Preferences of the settings app itself, stored in ``app-prefs.json``.

These never reach the niri config. Older files stored the theme as an
integer ``theme_flavor``; that is migrated on load and dropped on save.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
import pathlib

from nirisettings.storage import atomic_write

logger = logging.getLogger("nirisettings.preferences")


class ThemePreset(enum.Enum):
    CATPPUCCIN_MOCHA = "catppuccin-mocha"
    CATPPUCCIN_LATTE = "catppuccin-latte"
    NORD = "nord"
    TOKYO_NIGHT = "tokyo-night"
    NIRI_AMBER = "niri-amber"


_LEGACY_FLAVORS = {
    0: ThemePreset.CATPPUCCIN_LATTE,
    1: ThemePreset.NORD,
    2: ThemePreset.TOKYO_NIGHT,
}


@dataclasses.dataclass
class AppPreferences:
    theme: ThemePreset = ThemePreset.CATPPUCCIN_MOCHA
    float_settings_app: bool = True
    show_search_bar: bool = True
    search_hotkey: str = "Ctrl+K"

    def to_dict(self) -> dict:
        return {
            "theme": self.theme.value,
            "float_settings_app": self.float_settings_app,
            "show_search_bar": self.show_search_bar,
            "search_hotkey": self.search_hotkey,
        }


def migrate_theme_flavor(flavor: object) -> ThemePreset:
    if isinstance(flavor, int) and not isinstance(flavor, bool):
        return _LEGACY_FLAVORS.get(flavor, ThemePreset.CATPPUCCIN_MOCHA)
    return ThemePreset.CATPPUCCIN_MOCHA


def _from_dict(data: dict) -> AppPreferences:
    prefs = AppPreferences()
    if "theme" in data:
        try:
            prefs.theme = ThemePreset(data["theme"])
        except ValueError:
            logger.warning("Unknown theme %r, using %s", data["theme"], prefs.theme.value)
    elif "theme_flavor" in data:
        prefs.theme = migrate_theme_flavor(data["theme_flavor"])
        logger.info("Migrated legacy theme_flavor %r to %s", data["theme_flavor"], prefs.theme.value)

    for key in ("float_settings_app", "show_search_bar"):
        if isinstance(data.get(key), bool):
            setattr(prefs, key, data[key])
    if isinstance(data.get("search_hotkey"), str):
        prefs.search_hotkey = data["search_hotkey"]
    return prefs


def load_preferences(path: pathlib.Path) -> AppPreferences:
    """Read preferences; a missing or corrupt file gives the defaults."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No preferences file at %s, using defaults", path)
        return AppPreferences()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s; using defaults", path, exc)
        return AppPreferences()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse preferences %s: %s; using defaults", path, exc)
        return AppPreferences()
    if not isinstance(data, dict):
        logger.warning("Preferences %s is not a JSON object; using defaults", path)
        return AppPreferences()
    return _from_dict(data)


def save_preferences(path: pathlib.Path, prefs: AppPreferences) -> None:
    atomic_write(path, json.dumps(prefs.to_dict(), indent=2) + "\n")
    logger.debug("Saved preferences to %s", path)
