"""The settings context: one owner for the in-memory settings and their saving.

Everything that reads or mutates settings goes through a
:class:`SettingsContext`; there is no module-level state. Edits happen under
a lock and mark their category dirty, and :meth:`SettingsContext.flush`
writes only what changed.
"""

from __future__ import annotations

import contextlib
import copy
import logging
import threading
from collections.abc import Iterator
from typing import Any

from nirisettings.categories import SettingsCategory
from nirisettings.diff import ConfigDiff, generate_diff
from nirisettings.dirty import DirtyTracker
from nirisettings.errors import ContextPoisonedError, SaveError
from nirisettings.importer import ImportResult, import_file
from nirisettings.ipc import ReloadNotifier
from nirisettings.loader import LoadResult, load_settings_with_result
from nirisettings.models.settings import Settings
from nirisettings.paths import ConfigPaths
from nirisettings.storage import save_dirty, save_settings

logger = logging.getLogger("nirisettings.context")


class SettingsContext:
    """Owns ``paths``, the ``Settings``, its lock, the dirty set and the reload sink.

    The lock is not re-entrant: do not nest :meth:`edit` blocks or call
    :meth:`get`/:meth:`set` from inside one.
    """

    def __init__(
        self,
        paths: ConfigPaths,
        settings: Settings | None = None,
        *,
        notifier: ReloadNotifier | None = None,
    ) -> None:
        self.paths = paths
        self.notifier = notifier
        self.dirty = DirtyTracker()
        self.import_result: ImportResult | None = None
        self.load_result: LoadResult | None = None
        self._settings = settings if settings is not None else Settings()
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._poisoned = False

    @classmethod
    def open(cls, paths: ConfigPaths, *, notifier: ReloadNotifier | None = None) -> SettingsContext:
        """Load settings, bootstrapping from the host config on first run.

        First run imports ``paths.niri_config`` and writes every category
        file. Once ``main.kdl`` exists the category files are loaded instead,
        so calling this repeatedly is idempotent.
        """
        if paths.is_first_run():
            result = import_file(paths.niri_config)
            for warning in result.warnings:
                logger.warning("%s", warning)
            report = save_settings(paths, result.settings)
            if not report.ok:
                logger.warning("First-run save incomplete: %d files failed", len(report.failed))
            ctx = cls(paths, result.settings, notifier=notifier)
            ctx.import_result = result
            logger.info("Imported %s: %s", paths.niri_config, result.summary())
            return ctx

        loaded = load_settings_with_result(paths)
        ctx = cls(paths, loaded.settings, notifier=notifier)
        ctx.load_result = loaded
        if loaded.missing:
            # Write missing files so the include in main.kdl always resolves.
            ctx.dirty.mark_many(loaded.missing)
        return ctx

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    # -----------------------------------------------------------------------
    # Access
    # -----------------------------------------------------------------------

    @contextlib.contextmanager
    def edit(self, category: SettingsCategory) -> Iterator[Settings]:
        """Mutate settings under the lock; *category* is marked dirty on exit.

        If the block raises, the settings are rolled back to the state they
        had on entry and the context is poisoned.
        """
        with self._lock:
            if self._poisoned:
                raise ContextPoisonedError("Settings context is poisoned by an earlier failed edit")
            snapshot = copy.deepcopy(self._settings)
            try:
                yield self._settings
            except Exception:
                self._settings = snapshot
                self._poisoned = True
                logger.error("Edit of %s failed; keeping last known good settings",
                             category.label, exc_info=True)
                raise
        self.dirty.mark(category)

    def get(self, category: SettingsCategory) -> Any:
        """Return a copy of one section."""
        with self._lock:
            return copy.deepcopy(category.section(self._settings))

    def set(self, category: SettingsCategory, value: Any) -> None:
        """Replace one section (clamped) and mark it dirty."""
        value = copy.deepcopy(value)
        value.validate()
        with self.edit(category) as settings:
            category.replace_section(settings, value)

    def mark_dirty(self, category: SettingsCategory) -> None:
        self.dirty.mark(category)

    def snapshot(self) -> Settings:
        with self._lock:
            return copy.deepcopy(self._settings)

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def flush(self) -> int:
        """Write the dirty categories and return how many files were written.

        Flushes are serialized so an older snapshot never lands on disk after
        a newer one. Categories whose write failed are marked dirty again
        before the error propagates, so the next flush retries them.
        """
        with self._flush_lock:
            dirty = self.dirty.take()
            if not dirty:
                return 0
            try:
                written = save_dirty(self.paths, self.snapshot(), dirty)
            except SaveError as exc:
                self.dirty.mark_many(exc.report.failed)
                if exc.report.written:
                    self._notify()
                raise
            except BaseException:
                self.dirty.mark_many(dirty)
                raise
        self._notify()
        logger.debug("Flushed %d categories", written)
        return written

    def pending_diff(self) -> ConfigDiff:
        """What the next :meth:`flush` would change on disk."""
        return generate_diff(self.paths, self.snapshot(), self.dirty.pending())

    def _notify(self) -> None:
        if self.notifier is not None:
            self.notifier.notify()

    def shutdown(self) -> None:
        """Final save; a poisoned context writes its recovered snapshot in full."""
        if self._poisoned:
            with self._flush_lock:
                report = save_settings(self.paths, self.snapshot())
            if not report.ok:
                logger.warning("Recovery save incomplete: %d files failed", len(report.failed))
            return
        try:
            self.flush()
        except SaveError as exc:
            logger.warning("Final save failed: %s", exc)
