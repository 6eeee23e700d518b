"""Read-only health check of the per-category files, plus optional repair."""

from __future__ import annotations

import dataclasses
import enum
import logging

from nirisettings.categories import SettingsCategory
from nirisettings.errors import ConfigIOError, ParseError
from nirisettings.kdl_document import parse
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths
from nirisettings.storage import create_backup, write_category

logger = logging.getLogger("nirisettings.health")


class ConfigFileStatus(enum.Enum):
    OK = "ok"
    CORRUPTED = "corrupted"
    UNREADABLE = "unreadable"
    MISSING = "missing"


@dataclasses.dataclass
class FileHealth:
    category: SettingsCategory
    status: ConfigFileStatus
    message: str = ""


@dataclasses.dataclass
class HealthReport:
    files: list[FileHealth]

    def by_status(self, status: ConfigFileStatus) -> list[FileHealth]:
        return [f for f in self.files if f.status is status]

    @property
    def healthy(self) -> bool:
        return all(f.status is ConfigFileStatus.OK for f in self.files)

    def summary(self) -> str:
        counts = {s: len(self.by_status(s)) for s in ConfigFileStatus}
        return ", ".join(f"{n} {s.value}" for s, n in counts.items() if n)


def check_file(paths: ConfigPaths, category: SettingsCategory) -> FileHealth:
    path = paths.category_path(category)
    if not path.exists():
        return FileHealth(category, ConfigFileStatus.MISSING)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return FileHealth(category, ConfigFileStatus.UNREADABLE, str(exc))
    try:
        parse(text)
    except ParseError as exc:
        return FileHealth(category, ConfigFileStatus.CORRUPTED, str(exc))
    return FileHealth(category, ConfigFileStatus.OK)


def check_config_health(paths: ConfigPaths) -> HealthReport:
    """Classify every category file; never writes anything."""
    report = HealthReport([check_file(paths, c) for c in SettingsCategory])
    if not report.healthy:
        logger.warning("Settings files need attention: %s", report.summary())
    return report


def repair_corrupted(paths: ConfigPaths, settings: Settings) -> list[SettingsCategory]:
    """Back up each corrupted file, then rewrite it from *settings*.

    Files whose backup fails are left untouched.
    """
    repaired = []
    for health in check_config_health(paths).by_status(ConfigFileStatus.CORRUPTED):
        try:
            create_backup(paths, paths.category_path(health.category))
            write_category(paths, settings, health.category)
        except ConfigIOError as exc:
            logger.warning("Could not repair %s: %s", health.category.label, exc)
            continue
        repaired.append(health.category)
    return repaired
