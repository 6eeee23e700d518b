"""Previewing a save: what each category file would look like after writing.

:func:`generate_diff` renders every requested category and compares it line
by line with the file currently on disk. Nothing is written.
"""

from __future__ import annotations

import dataclasses
import difflib
import enum
import logging
import pathlib
from typing import Iterable

from nirisettings.categories import SettingsCategory
from nirisettings.generator import generate
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths

logger = logging.getLogger("nirisettings.diff")


class DiffLineKind(enum.Enum):
    UNCHANGED = " "
    ADDED = "+"
    REMOVED = "-"


@dataclasses.dataclass
class DiffLine:
    kind: DiffLineKind
    text: str


@dataclasses.dataclass
class CategoryDiff:
    category: SettingsCategory
    path: pathlib.Path
    old: str = ""
    new: str = ""
    lines: list[DiffLine] = dataclasses.field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.additions or self.deletions)

    def unified(self, context: int = 3) -> str:
        """The change as a unified diff, headed by the file path."""
        return "".join(difflib.unified_diff(
            self.old.splitlines(keepends=True),
            self.new.splitlines(keepends=True),
            fromfile=f"{self.path} (on disk)",
            tofile=f"{self.path} (generated)",
            n=context,
        ))


@dataclasses.dataclass
class ConfigDiff:
    categories: list[CategoryDiff] = dataclasses.field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return any(c.has_changes for c in self.categories)

    @property
    def total_additions(self) -> int:
        return sum(c.additions for c in self.categories)

    @property
    def total_deletions(self) -> int:
        return sum(c.deletions for c in self.categories)


def compare_lines(category: SettingsCategory, path: pathlib.Path, old: str, new: str) -> CategoryDiff:
    diff = CategoryDiff(category, path, old, new)
    if old == new:
        return diff
    old_lines = old.splitlines()
    new_lines = new.splitlines()
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            diff.lines.extend(DiffLine(DiffLineKind.UNCHANGED, line) for line in old_lines[i1:i2])
            continue
        # "replace" shows the old lines first, then the new ones
        removed = old_lines[i1:i2]
        added = new_lines[j1:j2]
        diff.lines.extend(DiffLine(DiffLineKind.REMOVED, line) for line in removed)
        diff.lines.extend(DiffLine(DiffLineKind.ADDED, line) for line in added)
        diff.deletions += len(removed)
        diff.additions += len(added)
    return diff


def _on_disk(path: pathlib.Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s for diff: %s", path, exc)
        return ""


def generate_diff(
    paths: ConfigPaths,
    settings: Settings,
    categories: Iterable[SettingsCategory] | None = None,
) -> ConfigDiff:
    """Compare *settings* as generated KDL with the category files on disk.

    Only categories whose files would change are included. *categories*
    limits the comparison (typically to the dirty set); all categories are
    compared when it is ``None``.
    """
    wanted = set(SettingsCategory) if categories is None else set(categories)
    result = ConfigDiff()
    for category in SettingsCategory:
        if category not in wanted:
            continue
        path = paths.category_path(category)
        diff = compare_lines(category, path, _on_disk(path), generate(category, settings))
        if diff.has_changes:
            result.categories.append(diff)
    logger.debug("Diff: %d categories change (+%d -%d)",
                 len(result.categories), result.total_additions, result.total_deletions)
    return result
