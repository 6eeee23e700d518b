"""Filesystem layout of the managed settings directory."""

from __future__ import annotations

import dataclasses
import logging
import pathlib

import nirisettings.config
from nirisettings.categories import SettingsCategory

logger = logging.getLogger("nirisettings.paths")

BACKUP_DIR_NAME = ".backup"
MAIN_FILE_NAME = "main.kdl"
PREFS_FILE_NAME = "app-prefs.json"


@dataclasses.dataclass(frozen=True)
class ConfigPaths:
    """Where the host config and every generated file live.

    ``managed_dir`` sits next to the host config so the include directive
    can be relative: ``include "nirisettings/main.kdl"``.
    """

    niri_config: pathlib.Path
    managed_dir: pathlib.Path

    @classmethod
    def for_dir(cls, niri_dir: pathlib.Path, *, host_file: str = "config.kdl",
                managed_dir: str = "nirisettings") -> ConfigPaths:
        niri_dir = pathlib.Path(niri_dir).expanduser()
        return cls(niri_config=niri_dir / host_file, managed_dir=niri_dir / managed_dir)

    @classmethod
    def from_config(cls) -> ConfigPaths:
        cfg = nirisettings.config.load("paths")
        return cls.for_dir(
            pathlib.Path(cfg.niri_config_dir),
            host_file=cfg.host_file,
            managed_dir=cfg.managed_dir,
        )

    @property
    def backup_dir(self) -> pathlib.Path:
        return self.managed_dir / BACKUP_DIR_NAME

    @property
    def main_kdl(self) -> pathlib.Path:
        return self.managed_dir / MAIN_FILE_NAME

    @property
    def prefs_file(self) -> pathlib.Path:
        return self.managed_dir / PREFS_FILE_NAME

    @property
    def include_target(self) -> str:
        """The include path as written in the host config."""
        try:
            rel = self.main_kdl.relative_to(self.niri_config.parent)
        except ValueError:
            return str(self.main_kdl)
        return rel.as_posix()

    def category_path(self, category: SettingsCategory) -> pathlib.Path:
        return self.managed_dir / category.relative_path

    def ensure_directories(self) -> None:
        """Create the managed tree; failures are logged, not raised."""
        dirs = {self.managed_dir, self.backup_dir}
        dirs.update(self.category_path(c).parent for c in SettingsCategory)
        for d in sorted(dirs):
            try:
                d.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.warning("Could not create %s: %s", d, exc)

    def is_first_run(self) -> bool:
        return not self.main_kdl.exists()
