"""Import a hand-written niri config into a typed ``Settings``.

Importing never raises: whatever cannot be read is reported in
``ImportResult.warnings`` and the affected section keeps its default.
"""

from __future__ import annotations

import collections
import dataclasses
import logging
import pathlib

import nirisettings.constants as C
from nirisettings.categories import SettingsCategory
from nirisettings.errors import ParseError
from nirisettings.extract import ExtractContext
from nirisettings.kdl_document import Node, parse
from nirisettings.managed import apply_document
from nirisettings.models.settings import Settings

logger = logging.getLogger("nirisettings.importer")


@dataclasses.dataclass
class ImportResult:
    settings: Settings
    imported_sections: list[tuple[str, int]] = dataclasses.field(default_factory=list)
    defaulted_sections: list[str] = dataclasses.field(default_factory=list)
    warnings: list[str] = dataclasses.field(default_factory=list)

    def summary(self) -> str:
        return (
            f"imported {len(self.imported_sections)} sections, "
            f"defaulted {len(self.defaulted_sections)}, "
            f"{len(self.warnings)} warnings"
        )


def _all_defaulted(warning: str) -> ImportResult:
    return ImportResult(
        settings=Settings(),
        defaulted_sections=[c.attr for c in SettingsCategory],
        warnings=[warning],
    )


def _build_result(
    settings: Settings,
    touched: list[SettingsCategory],
    ctx: ExtractContext,
) -> ImportResult:
    settings.validate()
    counts = collections.Counter(touched)
    result = ImportResult(settings=settings, warnings=list(ctx.warnings))
    for category in SettingsCategory:
        if counts[category]:
            result.imported_sections.append((category.attr, counts[category]))
        else:
            result.defaulted_sections.append(category.attr)
    return result


def import_text(text: str) -> ImportResult:
    """Import config *text*; ``include`` directives are not followed."""
    try:
        doc = parse(text)
    except ParseError as exc:
        logger.warning("Could not parse config, using defaults: %s", exc)
        return _all_defaulted(f"Could not parse config, using defaults: {exc}")

    settings = Settings()
    ctx = ExtractContext()
    touched = apply_document(doc.nodes, settings, ctx)
    return _build_result(settings, touched, ctx)


def import_file(path: pathlib.Path) -> ImportResult:
    """Import the config at *path*, following ``include`` directives.

    Included files are resolved relative to the including file and must
    stay inside the directory of *path*; nesting stops at
    ``MAX_INCLUDE_DEPTH`` and cycles are skipped.
    """
    path = pathlib.Path(path).expanduser()
    if not path.exists():
        return _all_defaulted(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return _all_defaulted(f"Could not read {path}: {exc}")
    try:
        doc = parse(text)
    except ParseError as exc:
        logger.warning("Could not parse %s, using defaults: %s", path, exc)
        return _all_defaulted(f"Could not parse {path}, using defaults: {exc}")

    settings = Settings()
    ctx = ExtractContext()
    root_dir = path.resolve().parent
    visited = {path.resolve()}
    touched = _apply_with_includes(doc.nodes, path.resolve(), root_dir, settings, ctx, visited, 0)
    return _build_result(settings, touched, ctx)


def _apply_with_includes(
    nodes: list[Node],
    source: pathlib.Path,
    root_dir: pathlib.Path,
    settings: Settings,
    ctx: ExtractContext,
    visited: set[pathlib.Path],
    depth: int,
) -> list[SettingsCategory]:
    touched: list[SettingsCategory] = []
    # Nodes are applied in order so an include overrides what precedes it.
    pending: list[Node] = []
    for node in nodes:
        if node.name != "include":
            pending.append(node)
            continue
        touched.extend(apply_document(pending, settings, ctx))
        pending = []
        target = node.arg(0)
        if not isinstance(target, str):
            ctx.warn(f"{source.name}: include without a path (line {node.line})")
            continue
        included = (source.parent / pathlib.Path(target).expanduser()).resolve()
        if depth + 1 > C.MAX_INCLUDE_DEPTH:
            ctx.warn(f"Include depth limit reached at {target!r}; not following")
            continue
        if not included.is_relative_to(root_dir):
            ctx.warn(f"Include {target!r} points outside {root_dir}; not following")
            continue
        if included in visited:
            ctx.warn(f"Include cycle at {target!r}; not following")
            continue
        try:
            sub = parse(included.read_text(encoding="utf-8"))
        except FileNotFoundError:
            ctx.warn(f"Included file not found: {target!r}")
            continue
        except (OSError, UnicodeDecodeError, ParseError) as exc:
            ctx.warn(f"Could not read included file {target!r}: {exc}")
            continue
        touched.extend(_apply_with_includes(
            sub.nodes, included, root_dir, settings, ctx, visited | {included}, depth + 1,
        ))
    touched.extend(apply_document(pending, settings, ctx))
    return touched
