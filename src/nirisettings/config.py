"""Application configuration: a registry of dataclass sections stored as TOML.

This is the app's own configuration (where the niri config lives, how
saving behaves). The niri settings themselves are KDL and never go here.

Sections are dataclasses registered with ``@configurable("name")``.
:func:`load` builds an instance from the class defaults overlaid with the
matching table of the config file:

    $NIRISETTINGS_CONFIG, else $XDG_CONFIG_HOME/nirisettings/config.toml
    (``~/.config/nirisettings/config.toml`` when XDG_CONFIG_HOME is unset)

A missing or broken file means "all defaults"; a value of the wrong type is
ignored with a warning rather than failing the load.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import pathlib
import tomllib
import typing
from typing import Any, TypeVar

logger = logging.getLogger("nirisettings.config")

T = TypeVar("T")

_REGISTRY: dict[str, type] = {}

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def configurable(section: str):
    """Class decorator: register a dataclass under *section*."""

    def decorator(cls: type[T]) -> type[T]:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"@configurable({section!r}) needs a dataclass, got {cls!r}")
        _REGISTRY[section] = cls
        return cls

    return decorator


def _config_path() -> pathlib.Path:
    explicit = os.environ.get("NIRISETTINGS_CONFIG")
    if explicit:
        return pathlib.Path(explicit).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME")
    root = pathlib.Path(base) if base else pathlib.Path.home() / ".config"
    return root / "nirisettings" / "config.toml"


def _section_class(section: str) -> type:
    try:
        return _REGISTRY[section]
    except KeyError:
        raise KeyError(f"Unknown config section: {section}") from None


def _field_types(cls: type) -> dict[str, type]:
    hints = typing.get_type_hints(cls)
    return {f.name: hints[f.name] for f in dataclasses.fields(cls)}


# ---------------------------------------------------------------------------
# TOML file
# ---------------------------------------------------------------------------

def _read_file(path: pathlib.Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s (%s); using defaults", path, exc)
        return {}
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Ignoring broken %s: %s", path, exc)
        return {}


def _write_file(path: pathlib.Path, data: dict[str, Any]) -> None:
    import tomli_w

    from nirisettings.storage import atomic_write_bytes

    atomic_write_bytes(path, tomli_w.dumps(data).encode("utf-8"))


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

def _coerce(value: str, target_type: type) -> Any:
    """Turn command-line text into *target_type*; raises ``ValueError``."""
    if target_type is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Expected a boolean, got {value!r}")
    if target_type is int:
        return int(value, 0)
    if target_type is float:
        return float(value)
    return value


def _accepts(target_type: type, value: Any) -> bool:
    # bool is an int subclass; only a real bool satisfies a bool field.
    if target_type is bool or isinstance(value, bool):
        return target_type is bool and isinstance(value, bool)
    if target_type is float:
        return isinstance(value, (int, float))
    return isinstance(value, target_type)


def _build(cls: type, table: dict[str, Any], section: str) -> Any:
    types = _field_types(cls)
    kwargs = {}
    for key, value in table.items():
        if key not in types:
            logger.debug("Unknown key %s.%s in config file", section, key)
        elif not _accepts(types[key], value):
            logger.warning("Ignoring %s.%s = %r: expected %s", section, key, value, types[key].__name__)
        else:
            kwargs[key] = float(value) if types[key] is float else value
    return cls(**kwargs)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def list_sections() -> dict[str, type]:
    return dict(_REGISTRY)


def load(section: str) -> Any:
    """Return the effective config for *section*."""
    cls = _section_class(section)
    table = _read_file(_config_path()).get(section, {})
    if not isinstance(table, dict):
        logger.warning("Ignoring [%s]: not a table", section)
        table = {}
    return _build(cls, table, section)


def get_effective(section: str, key: str) -> Any:
    return getattr(load(section), key)


def set_value(section: str, key: str, value: Any) -> None:
    """Store an override; string *value* is converted to the field's type."""
    types = _field_types(_section_class(section))
    if key not in types:
        raise KeyError(f"Unknown key: {section}.{key}")
    if isinstance(value, str):
        value = _coerce(value, types[key])

    path = _config_path()
    data = _read_file(path)
    data.setdefault(section, {})[key] = value
    _write_file(path, data)
    logger.debug("Set %s.%s = %r in %s", section, key, value, path)


def reset_value(section: str, key: str) -> None:
    """Drop an override so the default applies again."""
    path = _config_path()
    data = _read_file(path)
    table = data.get(section)
    if not isinstance(table, dict) or key not in table:
        return
    del table[key]
    if not table:
        del data[section]
    _write_file(path, data)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

@configurable("paths")
@dataclasses.dataclass
class PathsConfig:
    niri_config_dir: str = "~/.config/niri"
    host_file: str = "config.kdl"
    # Relative to niri_config_dir; this is also the include target.
    managed_dir: str = "nirisettings"


@configurable("save")
@dataclasses.dataclass
class SaveConfig:
    autosave_interval: float = 0.5
    reload_after_save: bool = True
    reload_min_interval: float = 1.0
    niri_command: str = "niri"
    backup_limit: int = 10

    def __post_init__(self) -> None:
        self.autosave_interval = max(self.autosave_interval, 0.05)
        self.reload_min_interval = max(self.reload_min_interval, 0.0)
        self.backup_limit = max(self.backup_limit, 0)
