"""nirisettings CLI.

Usage:
    nirisettings init                  First run: import config.kdl, write category files
    nirisettings import [--file F]     Import a config and report what was understood
    nirisettings analyze               Show which host config nodes are managed
    nirisettings merge                 Replace managed nodes with one include (backs up first)
    nirisettings health [--repair]     Check the category files
    nirisettings show [category]       Show categories, or one section's values
    nirisettings generate <category>   Print the KDL generated for a category
    nirisettings diff [category...]    Show what saving would change on disk
    nirisettings consolidate           Suggest window/layer rules that could be merged
    nirisettings set <cat.field> <v>   Change one setting and save it
    nirisettings validate              Run ``niri validate`` on the host config
    nirisettings prefs [options]       Show or change app preferences
    nirisettings backups [--prune]     List backups
    nirisettings watch                 Run the autosave loop
    nirisettings config <cmd>          App configuration (get/set/list/show)
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import enum
import json
import logging
import pathlib
import sys
import types
import typing
from typing import Any

import nirisettings.config
from nirisettings.categories import SettingsCategory
from nirisettings.consolidation import analyze_rules
from nirisettings.context import SettingsContext
from nirisettings.diff import generate_diff
from nirisettings.errors import MergeError, ParseError, SaveError, ValidationError
from nirisettings.generator import generate
from nirisettings.health import ConfigFileStatus, check_config_health, repair_corrupted
from nirisettings.importer import import_file
from nirisettings.ipc import ReloadNotifier, validate_config
from nirisettings.loader import load_settings_with_result
from nirisettings.merge import analyze_config, smart_replace_config
from nirisettings.models.color import Color
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths
from nirisettings.preferences import ThemePreset, load_preferences, save_preferences
from nirisettings.storage import list_backups, prune_backups, save_settings

logger = logging.getLogger("nirisettings")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _paths(args: argparse.Namespace) -> ConfigPaths:
    if args.niri_dir is None:
        return ConfigPaths.from_config()
    cfg = nirisettings.config.load("paths")
    return ConfigPaths.for_dir(args.niri_dir, host_file=cfg.host_file, managed_dir=cfg.managed_dir)


def _notifier() -> ReloadNotifier | None:
    cfg = nirisettings.config.load("save")
    if not cfg.reload_after_save:
        return None
    return ReloadNotifier(niri_command=cfg.niri_command, min_interval=cfg.reload_min_interval)


def _category(name: str) -> SettingsCategory | None:
    try:
        return SettingsCategory.from_name(name)
    except KeyError as exc:
        print(exc.args[0], file=sys.stderr)
        return None


def _jsonable(value: Any) -> Any:
    if isinstance(value, Color):
        return value.to_hex()
    if isinstance(value, enum.Enum):
        return value.value
    if dataclasses.is_dataclass(value):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _coerce(hint: Any, text: str) -> Any:
    """Interpret command-line *text* as a value of type *hint*."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        options = typing.get_args(hint)
        if type(None) in options and text.strip().lower() in ("null", "none"):
            return None
        for option in options:
            if option is type(None):
                continue
            try:
                return _coerce(option, text)
            except (TypeError, ValueError):
                continue
        raise ValueError(f"Cannot interpret {text!r}")
    if hint is bool:
        lowered = text.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"Not a boolean: {text!r}")
    if hint is int:
        return int(text, 0)
    if hint is float:
        return float(text)
    if hint is str:
        return text
    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        return hint(text)
    if hint is Color:
        return Color.from_hex(text)
    raise TypeError(f"Fields of type {hint} cannot be set from the command line")


def _source_settings(args: argparse.Namespace, paths: ConfigPaths) -> Settings:
    """Settings imported from ``--file`` when given, else the saved category files."""
    if args.file is None:
        return load_settings_with_result(paths).settings
    result = import_file(args.file)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return result.settings


def set_field(section: Any, dotted: str, text: str) -> Any:
    """Set ``a.b.c`` below *section* from *text*; returns the new value."""
    *parents, name = dotted.split(".")
    owner = section
    for part in parents:
        owner = getattr(owner, part)
    hints = typing.get_type_hints(type(owner))
    if name not in hints:
        raise AttributeError(f"{type(owner).__name__} has no field {name!r}")
    value = _coerce(hints[name], text)
    setattr(owner, name, value)
    return value


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_init(args: argparse.Namespace) -> int:
    paths = _paths(args)
    if not paths.is_first_run():
        print(f"Already initialized: {paths.main_kdl} exists")
        return 0
    ctx = SettingsContext.open(paths)
    result = ctx.import_result
    print(f"Imported {paths.niri_config}: {result.summary()}")
    print(f"Wrote settings to {paths.managed_dir}")
    print("Run 'nirisettings merge' to point config.kdl at them.")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    paths = _paths(args)
    source = args.file if args.file is not None else paths.niri_config
    result = import_file(source)
    print(f"{source}: {result.summary()}")
    for name, count in result.imported_sections:
        print(f"  {name:<16s} {count}")
    if result.defaulted_sections:
        print(f"Defaulted: {', '.join(result.defaulted_sections)}")
    for warning in result.warnings:
        print(f"warning: {warning}")
    analysis = analyze_rules(result.settings.window_rules.rules, result.settings.layer_rules.rules)
    if analysis.has_suggestions:
        print(f"{analysis.total_affected_rules} rules could be consolidated;"
              " run 'nirisettings consolidate' for details")
    if args.save:
        report = save_settings(paths, result.settings)
        print(f"Saved {len(report.written)} category files to {paths.managed_dir}")
        return 0 if report.ok else 1
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    paths = _paths(args)
    try:
        text = paths.niri_config.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {paths.niri_config}: {exc}", file=sys.stderr)
        return 1
    try:
        analysis = analyze_config(text, paths.include_target)
    except ParseError as exc:
        print(f"Cannot parse {paths.niri_config}: {exc}", file=sys.stderr)
        return 1
    print(f"Include present: {'yes' if analysis.has_include else 'no'}")
    print(f"Managed ({len(analysis.managed)}):")
    for node in analysis.managed:
        print(f"  {node.name} (line {node.line})")
    print(f"Preserved ({len(analysis.preserved)}):")
    for node in analysis.preserved:
        print(f"  {node.name} (line {node.line})")
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    paths = _paths(args)
    if paths.is_first_run():
        SettingsContext.open(paths)
    try:
        result = smart_replace_config(paths)
    except MergeError as exc:
        print(f"Merge aborted: {exc}", file=sys.stderr)
        return 1
    if result.backup_path:
        print(f"Backup: {result.backup_path}")
    print(f"Replaced {result.replaced_count} managed nodes, preserved {result.preserved_count}")
    if result.include_added:
        print(f"Added include {paths.include_target!r}")
    for warning in result.warnings:
        print(f"warning: {warning}")
    prune_backups(paths, nirisettings.config.load("save").backup_limit)
    return 0


def cmd_health(args: argparse.Namespace) -> int:
    paths = _paths(args)
    report = check_config_health(paths)
    for entry in report.files:
        line = f"  {entry.category.label:<16s} {entry.status.value}"
        if entry.message:
            line += f": {entry.message}"
        print(line)
    if args.repair and report.by_status(ConfigFileStatus.CORRUPTED):
        settings = load_settings_with_result(paths).settings
        repaired = repair_corrupted(paths, settings)
        print(f"Repaired {len(repaired)} files")
        report = check_config_health(paths)
    return 0 if report.healthy else 1


def cmd_show(args: argparse.Namespace) -> int:
    paths = _paths(args)
    if args.category is None:
        for category in SettingsCategory:
            exists = paths.category_path(category).exists()
            print(f"  {category.label:<16s} {category.relative_path}"
                  f"{'' if exists else '  (missing)'}")
        return 0
    category = _category(args.category)
    if category is None:
        return 1
    settings = load_settings_with_result(paths).settings
    print(json.dumps(_jsonable(category.section(settings)), indent=2))
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    category = _category(args.category)
    if category is None:
        return 1
    settings = load_settings_with_result(_paths(args)).settings
    sys.stdout.write(generate(category, settings))
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    paths = _paths(args)
    categories = None
    if args.category:
        categories = [_category(name) for name in args.category]
        if None in categories:
            return 1
    diff = generate_diff(paths, _source_settings(args, paths), categories)
    if not diff.has_changes:
        print("No changes.")
        return 0
    for entry in diff.categories:
        if args.stat:
            print(f"  {entry.category.label:<16s} +{entry.additions} -{entry.deletions}")
        else:
            sys.stdout.write(entry.unified())
    print(f"{len(diff.categories)} files would change "
          f"(+{diff.total_additions} -{diff.total_deletions})")
    return 0


def cmd_consolidate(args: argparse.Namespace) -> int:
    settings = _source_settings(args, _paths(args))
    analysis = analyze_rules(settings.window_rules.rules, settings.layer_rules.rules)
    if not analysis.has_suggestions:
        print("No rules to consolidate.")
        return 0
    for suggestion in analysis.window_suggestions + analysis.layer_suggestions:
        print(f"{suggestion.description}: {suggestion.shared_settings}")
        print(f"  rules {', '.join(str(i) for i in suggestion.rule_ids)}"
              f" match {', '.join(suggestion.patterns)}")
        print(f"  merged: {suggestion.merged_pattern}")
    print(f"{analysis.total_suggestions} suggestions covering {analysis.total_affected_rules} rules")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    category_name, _, field = args.key.partition(".")
    if not field:
        print(f"Invalid key format: {args.key!r} (expected category.field)", file=sys.stderr)
        return 1
    category = _category(category_name)
    if category is None:
        return 1

    notifier = _notifier()
    ctx = SettingsContext.open(_paths(args), notifier=notifier)
    section = ctx.get(category)
    try:
        set_field(section, field, args.value)
        ctx.set(category, section)
    except (AttributeError, TypeError, ValueError, ValidationError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    try:
        ctx.flush()
    except SaveError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if notifier is not None:
        notifier.wait(timeout=notifier.min_interval + 5)
    print(f"Set {category.label}.{field}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    paths = _paths(args)
    ok, output = validate_config(paths.niri_config, nirisettings.config.load("save").niri_command)
    if output:
        print(output)
    print("valid" if ok else "invalid")
    return 0 if ok else 1


def cmd_prefs(args: argparse.Namespace) -> int:
    path = _paths(args).prefs_file
    prefs = load_preferences(path)
    changed = False
    if args.theme is not None:
        prefs.theme = ThemePreset(args.theme)
        changed = True
    for key in ("float_settings_app", "show_search_bar", "search_hotkey"):
        value = getattr(args, key)
        if value is not None:
            setattr(prefs, key, value)
            changed = True
    if changed:
        save_preferences(path, prefs)
    for key, value in prefs.to_dict().items():
        print(f"  {key} = {value!r}")
    return 0


def cmd_backups(args: argparse.Namespace) -> int:
    paths = _paths(args)
    if args.prune:
        removed = prune_backups(paths, nirisettings.config.load("save").backup_limit)
        print(f"Removed {len(removed)} old backups")
    backups = list_backups(paths)
    if not backups:
        print("No backups.")
        return 0
    for path in backups:
        print(f"  {path}")
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    from nirisettings.autosave import AutoSaver

    cfg = nirisettings.config.load("save")
    interval = args.interval if args.interval is not None else cfg.autosave_interval
    ctx = SettingsContext.open(_paths(args), notifier=_notifier())
    saver = AutoSaver(ctx, interval_seconds=interval)
    print(f"Autosaving every {interval}s. Press Ctrl+C to stop.")
    try:
        asyncio.run(saver.run_forever())
    except KeyboardInterrupt:
        print("\nStopped.")
    finally:
        ctx.shutdown()
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nirisettings",
        description="Manage niri settings as per-category KDL files.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--niri-dir", type=pathlib.Path, default=None,
        help="niri config directory (default: paths.niri_config_dir)",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init", help="First-run import and save")

    p_import = sub.add_parser("import", help="Import a niri config")
    p_import.add_argument("--file", type=pathlib.Path, default=None)
    p_import.add_argument("--save", action="store_true", help="Overwrite the category files")

    sub.add_parser("analyze", help="Classify host config nodes")
    sub.add_parser("merge", help="Smart-replace the host config")

    p_health = sub.add_parser("health", help="Check category files")
    p_health.add_argument("--repair", action="store_true")

    p_show = sub.add_parser("show", help="Show settings")
    p_show.add_argument("category", nargs="?", default=None)

    p_gen = sub.add_parser("generate", help="Print generated KDL")
    p_gen.add_argument("category")

    p_diff = sub.add_parser("diff", help="Preview what saving would change")
    p_diff.add_argument("category", nargs="*", help="Limit to these categories")
    p_diff.add_argument("--file", type=pathlib.Path, default=None,
                        help="Compare settings imported from this config instead")
    p_diff.add_argument("--stat", action="store_true", help="Only count changed lines")

    p_consolidate = sub.add_parser("consolidate", help="Suggest rules that could be merged")
    p_consolidate.add_argument("--file", type=pathlib.Path, default=None)

    p_set = sub.add_parser("set", help="Change one setting")
    p_set.add_argument("key", help="category.field (nested fields: category.a.b)")
    p_set.add_argument("value")

    sub.add_parser("validate", help="Run niri validate")

    p_prefs = sub.add_parser("prefs", help="Show or change app preferences")
    p_prefs.add_argument("--theme", choices=[t.value for t in ThemePreset], default=None)
    p_prefs.add_argument("--float", dest="float_settings_app",
                         action=argparse.BooleanOptionalAction, default=None)
    p_prefs.add_argument("--search-bar", dest="show_search_bar",
                         action=argparse.BooleanOptionalAction, default=None)
    p_prefs.add_argument("--search-hotkey", dest="search_hotkey", default=None)

    p_backups = sub.add_parser("backups", help="List backups")
    p_backups.add_argument("--prune", action="store_true",
                           help="Keep only save.backup_limit backups")

    p_watch = sub.add_parser("watch", help="Run the autosave loop")
    p_watch.add_argument("--interval", type=float, default=None)

    p_config = sub.add_parser("config", help="App configuration")
    p_config.add_argument("args", nargs=argparse.REMAINDER)
    return parser


_COMMANDS = {
    "init": cmd_init,
    "import": cmd_import,
    "analyze": cmd_analyze,
    "merge": cmd_merge,
    "health": cmd_health,
    "show": cmd_show,
    "generate": cmd_generate,
    "diff": cmd_diff,
    "consolidate": cmd_consolidate,
    "set": cmd_set,
    "validate": cmd_validate,
    "prefs": cmd_prefs,
    "backups": cmd_backups,
    "watch": cmd_watch,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "config":
        from nirisettings.config_cli import main as config_main

        return config_main(args.args)
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
