"""Writing category files: atomic writes, full and dirty-only saves, backups."""

from __future__ import annotations

import dataclasses
import datetime
import logging
import os
import pathlib
import tempfile
from typing import Iterable

from nirisettings.categories import SettingsCategory
from nirisettings.errors import ConfigIOError, SaveError
from nirisettings.generator import generate, generate_main
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths

logger = logging.getLogger("nirisettings.storage")


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


def atomic_write_bytes(path: pathlib.Path, data: bytes) -> None:
    """Write *data* to *path* via temp file + fsync + rename.

    The parent directory is created if missing. A leftover temp file is
    removed on failure. Permissions are tightened to 0600 when possible.
    """
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: pathlib.Path | None = None
    try:
        with tempfile.NamedTemporaryFile("wb", dir=str(path.parent), prefix=f".{path.name}.",
                                         suffix=".tmp", delete=False) as f:
            tmp_path = pathlib.Path(f.name)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        try:
            os.chmod(tmp_path, 0o600)
        except OSError:
            logger.debug("Could not chmod %s", tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


def atomic_write(path: pathlib.Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))


# ---------------------------------------------------------------------------
# Saving categories
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class SaveReport:
    written: list[SettingsCategory] = dataclasses.field(default_factory=list)
    failed: dict[SettingsCategory, str] = dataclasses.field(default_factory=dict)
    main_written: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


def write_category(paths: ConfigPaths, settings: Settings, category: SettingsCategory) -> None:
    """Generate and atomically write one category file."""
    path = paths.category_path(category)
    try:
        atomic_write(path, generate(category, settings))
    except OSError as exc:
        raise ConfigIOError(f"Could not write {path}: {exc}", path=path) from exc
    logger.debug("Wrote %s", path)


def _write_all(
    paths: ConfigPaths,
    settings: Settings,
    categories: Iterable[SettingsCategory],
) -> SaveReport:
    report = SaveReport()
    for category in categories:
        try:
            write_category(paths, settings, category)
        except ConfigIOError as exc:
            logger.warning("Failed to save %s: %s", category.label, exc)
            report.failed[category] = str(exc)
        else:
            report.written.append(category)
    return report


def save_settings(paths: ConfigPaths, settings: Settings) -> SaveReport:
    """Write every category file and ``main.kdl``.

    Used for first-run bootstrap and recovery. A failing file is recorded in
    the report and the remaining files are still attempted.
    """
    paths.ensure_directories()
    report = _write_all(paths, settings, SettingsCategory)
    try:
        atomic_write(paths.main_kdl, generate_main())
        report.main_written = True
    except OSError as exc:
        logger.warning("Failed to save %s: %s", paths.main_kdl, exc)
    logger.info("Saved %d/%d settings files", len(report.written), len(SettingsCategory))
    return report


def save_dirty(
    paths: ConfigPaths,
    settings: Settings,
    dirty: Iterable[SettingsCategory],
) -> int:
    """Write only the *dirty* categories and return how many were written.

    An empty set performs no I/O at all. If any file fails, the others are
    still written and :class:`SaveError` is raised afterwards with the report.
    """
    wanted = set(dirty)
    ordered = [c for c in SettingsCategory if c in wanted]
    if not ordered:
        return 0
    report = _write_all(paths, settings, ordered)
    if report.failed:
        names = ", ".join(c.label for c in report.failed)
        raise SaveError(f"Failed to save: {names}", report=report)
    return len(report.written)


# ---------------------------------------------------------------------------
# Backups
# ---------------------------------------------------------------------------


def backup_timestamp(now: datetime.datetime | None = None) -> str:
    now = now or datetime.datetime.now()
    return now.strftime("%Y-%m-%dT%H-%M-%S.%f")


def create_backup(paths: ConfigPaths, source: pathlib.Path) -> pathlib.Path:
    """Copy *source* byte-for-byte into the backup directory.

    Returns the backup path; raises :class:`ConfigIOError` when the copy
    cannot be made or does not read back identically.
    """
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise ConfigIOError(f"Could not read {source} for backup: {exc}", path=source) from exc
    target = paths.backup_dir / f"{source.name}.backup-{backup_timestamp()}"
    n = 1
    while target.exists():
        target = paths.backup_dir / f"{source.name}.backup-{backup_timestamp()}-{n}"
        n += 1
    try:
        atomic_write_bytes(target, data)
        copied = target.read_bytes()
    except OSError as exc:
        raise ConfigIOError(f"Could not write backup {target}: {exc}", path=target) from exc
    if copied != data:
        raise ConfigIOError(f"Backup {target} does not match {source}", path=target)
    logger.info("Backed up %s to %s", source, target)
    return target


def list_backups(paths: ConfigPaths) -> list[pathlib.Path]:
    """Backups, newest first."""
    if not paths.backup_dir.is_dir():
        return []
    files = [p for p in paths.backup_dir.iterdir() if p.is_file() and ".backup-" in p.name]
    return sorted(files, key=lambda p: p.name.split(".backup-", 1)[1], reverse=True)


def prune_backups(paths: ConfigPaths, keep: int) -> list[pathlib.Path]:
    """Delete all but the *keep* newest backups; return what was removed."""
    removed = []
    for old in list_backups(paths)[max(keep, 0):]:
        try:
            old.unlink()
            removed.append(old)
        except OSError as exc:
            logger.warning("Could not remove old backup %s: %s", old, exc)
    return removed
