"""Loading the per-category files back into ``Settings``.

Each file is read and parsed on its own. A file that is missing, unreadable
or unparsable leaves that one section at its default and adds a warning; the
other sections still load.
"""

from __future__ import annotations

import dataclasses
import logging

from nirisettings.categories import SettingsCategory
from nirisettings.errors import ConfigIOError, ParseError
from nirisettings.extract import ExtractContext
from nirisettings.kdl_document import parse
from nirisettings.managed import apply_document
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths

logger = logging.getLogger("nirisettings.loader")


@dataclasses.dataclass
class LoadResult:
    settings: Settings
    loaded: list[SettingsCategory] = dataclasses.field(default_factory=list)
    missing: list[SettingsCategory] = dataclasses.field(default_factory=list)
    failed: list[SettingsCategory] = dataclasses.field(default_factory=list)
    warnings: list[str] = dataclasses.field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def parse_category(category: SettingsCategory, text: str, ctx: ExtractContext):
    """Return the section value for *category* parsed from *text*.

    Raises :class:`ParseError` when *text* is not valid KDL.
    """
    doc = parse(text)
    scratch = Settings()
    apply_document(doc.nodes, scratch, ctx)
    section = category.section(scratch)
    section.validate()
    return section


def read_category(paths: ConfigPaths, category: SettingsCategory) -> str:
    path = paths.category_path(category)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigIOError(f"Could not read {path}: {exc}", path=path) from exc


def load_settings_with_result(paths: ConfigPaths) -> LoadResult:
    """Load every category file independently."""
    result = LoadResult(settings=Settings())
    for category in SettingsCategory:
        path = paths.category_path(category)
        try:
            text = read_category(paths, category)
        except FileNotFoundError:
            result.missing.append(category)
            continue
        except ConfigIOError as exc:
            logger.warning("%s", exc)
            result.failed.append(category)
            result.warnings.append(f"{category.label}: {exc}; using defaults")
            continue

        ctx = ExtractContext()
        try:
            section = parse_category(category, text, ctx)
        except ParseError as exc:
            logger.warning("Could not parse %s: %s", path, exc)
            result.failed.append(category)
            result.warnings.append(f"{category.label}: could not parse {path.name} ({exc}); using defaults")
            continue
        except (TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Could not read settings from %s: %s", path, exc, exc_info=True)
            result.failed.append(category)
            result.warnings.append(f"{category.label}: unusable values in {path.name} ({exc}); using defaults")
            continue
        category.replace_section(result.settings, section)
        result.loaded.append(category)
        result.warnings.extend(f"{category.label}: {w}" for w in ctx.warnings)

    if result.failed:
        logger.warning("%d settings files failed to load", len(result.failed))
    return result


def load_settings(paths: ConfigPaths) -> Settings:
    return load_settings_with_result(paths).settings
