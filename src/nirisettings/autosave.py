"""Periodic autosave: flush dirty categories on an interval.

Usable standalone (``nirisettings watch``) or as a background task inside
an application event loop. Idle cycles cost nothing: the executor is only
used when the dirty set is non-empty.
"""

from __future__ import annotations

import asyncio
import logging

from nirisettings.context import SettingsContext
from nirisettings.errors import SaveError

logger = logging.getLogger("nirisettings.autosave")


class AutoSaver:
    """Calls ``SettingsContext.flush`` every ``interval_seconds``."""

    def __init__(self, context: SettingsContext, *, interval_seconds: float = 0.5) -> None:
        self.context = context
        self.interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._running = False
        self._cycle_count = 0
        self._files_written = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def files_written(self) -> int:
        return self._files_written

    async def run_once(self) -> int:
        """One autosave cycle; returns the number of files written."""
        self._cycle_count += 1
        if not self.context.dirty.is_dirty():
            return 0
        try:
            written = await asyncio.get_running_loop().run_in_executor(None, self.context.flush)
        except SaveError as exc:
            # flush() has already re-marked the failed categories.
            logger.warning("Autosave cycle %d: %s", self._cycle_count, exc)
            written = len(exc.report.written)
        self._files_written += written
        if written:
            logger.info("Autosave cycle %d: wrote %d files", self._cycle_count, written)
        return written

    async def _wait_interval(self) -> bool:
        """Sleep one interval; True if :meth:`stop` was called meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
        except TimeoutError:
            return False
        return True

    async def _cycle(self) -> None:
        try:
            await self.run_once()
        except Exception:
            logger.error("Autosave cycle %d failed", self._cycle_count, exc_info=True)

    async def run_forever(self) -> None:
        """Autosave until :meth:`stop`; edits made before stopping are flushed."""
        self._stop_event.clear()
        self._running = True
        try:
            while not self._stop_event.is_set():
                await self._cycle()
                if await self._wait_interval():
                    break
            await self._cycle()
        finally:
            self._running = False

    def stop(self) -> None:
        self._stop_event.set()
