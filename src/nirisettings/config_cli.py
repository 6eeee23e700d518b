"""``nirisettings config``: inspect and change the app's config.toml.

Usage:
    nirisettings config list                  Sections, fields and defaults
    nirisettings config get <section.key>     Effective value
    nirisettings config set <key> <value>     Store an override
    nirisettings config reset <key>           Drop an override
    nirisettings config show                  Effective values of every section
    nirisettings config path                  Where config.toml lives
    nirisettings config edit                  Open config.toml in $EDITOR
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import subprocess
import sys

import nirisettings.config

_EDIT_TEMPLATE = """\
# nirisettings configuration.
# Run `nirisettings config list` for the available keys, e.g.:
#
# [paths]
# niri_config_dir = "~/.config/niri"
#
# [save]
# backup_limit = 10
"""


def _parse_key(key: str) -> tuple[str, str] | None:
    section, _, field = key.partition(".")
    if not section or not field:
        print(f"Invalid key format: {key!r} (expected section.key)", file=sys.stderr)
        return None
    return section, field


def cmd_list() -> int:
    for name, cls in sorted(nirisettings.config.list_sections().items()):
        types = nirisettings.config._field_types(cls)
        print(f"[{name}]")
        for f in dataclasses.fields(cls):
            print(f"  {f.name}: {types[f.name].__name__} = {f.default!r}")
        print()
    return 0


def cmd_get(key: str) -> int:
    parsed = _parse_key(key)
    if parsed is None:
        return 1
    try:
        value = nirisettings.config.get_effective(*parsed)
    except (KeyError, AttributeError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(value)
    return 0


def cmd_set(key: str, value: str) -> int:
    parsed = _parse_key(key)
    if parsed is None:
        return 1
    try:
        nirisettings.config.set_value(*parsed, value)
    except (KeyError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(f"Set {key} = {nirisettings.config.get_effective(*parsed)!r}")
    return 0


def cmd_reset(key: str) -> int:
    parsed = _parse_key(key)
    if parsed is None:
        return 1
    section, field = parsed
    try:
        default = nirisettings.config.list_sections()[section]()
        default = getattr(default, field)
    except (KeyError, AttributeError):
        print(f"Unknown key: {key}", file=sys.stderr)
        return 1
    nirisettings.config.reset_value(section, field)
    print(f"Reset {key} (default {default!r})")
    return 0


def cmd_show() -> int:
    for name in sorted(nirisettings.config.list_sections()):
        effective = dataclasses.asdict(nirisettings.config.load(name))
        print(f"[{name}]")
        for field, value in effective.items():
            print(f"  {field} = {value!r}")
        print()
    return 0


def cmd_path() -> int:
    path = nirisettings.config._config_path()
    print(f"{path}{'' if path.exists() else '  (not created yet)'}")
    return 0


def cmd_edit() -> int:
    """Open config.toml in $EDITOR, creating a commented template first."""
    path = nirisettings.config._config_path()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_EDIT_TEMPLATE, encoding="utf-8")
    return subprocess.call([os.environ.get("EDITOR", "vi"), str(path)])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="nirisettings config",
        description="Configure nirisettings itself (not niri).",
    )
    sub = parser.add_subparsers(dest="subcmd")
    sub.add_parser("list", help="Sections, fields and defaults")
    sub.add_parser("get", help="Effective value").add_argument("key", help="section.key")
    p_set = sub.add_parser("set", help="Store an override")
    p_set.add_argument("key", help="section.key")
    p_set.add_argument("value")
    sub.add_parser("reset", help="Drop an override").add_argument("key", help="section.key")
    sub.add_parser("show", help="Effective values of every section")
    sub.add_parser("path", help="Where config.toml lives")
    sub.add_parser("edit", help="Open config.toml in $EDITOR")

    args = parser.parse_args(argv)
    commands = {
        "list": cmd_list,
        "get": lambda: cmd_get(args.key),
        "set": lambda: cmd_set(args.key, args.value),
        "reset": lambda: cmd_reset(args.key),
        "show": cmd_show,
        "path": cmd_path,
        "edit": cmd_edit,
    }
    if args.subcmd is None:
        parser.print_help()
        return 1
    return commands[args.subcmd]()
