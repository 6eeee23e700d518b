"""Talking to the running compositor through the ``niri`` command line.

Only two calls are needed: asking niri to reload its config after a save,
and ``niri validate`` for checking a file before trusting it.
"""

from __future__ import annotations

import logging
import pathlib
import subprocess
import threading
import time

logger = logging.getLogger("nirisettings.ipc")

RELOAD_TIMEOUT = 5.0
VALIDATE_TIMEOUT = 10.0


def reload_config(niri_command: str = "niri", *, timeout: float = RELOAD_TIMEOUT) -> bool:
    """Run ``niri msg action load-config-file``; failures are logged only."""
    try:
        result = subprocess.run(
            [niri_command, "msg", "action", "load-config-file"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("Could not ask niri to reload: %s", exc)
        return False
    if result.returncode != 0:
        logger.warning("niri reload failed (exit %d): %s",
                       result.returncode, (result.stderr or result.stdout).strip())
        return False
    logger.debug("niri reloaded its config")
    return True


def validate_config(
    path: pathlib.Path,
    niri_command: str = "niri",
    *,
    timeout: float = VALIDATE_TIMEOUT,
) -> tuple[bool, str]:
    """Run ``niri validate -c <path>`` and return ``(ok, output)``."""
    try:
        result = subprocess.run(
            [niri_command, "validate", "-c", str(path)],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        return False, f"could not run {niri_command}: {exc}"
    output = "\n".join(s.strip() for s in (result.stdout, result.stderr) if s and s.strip())
    return result.returncode == 0, output


class ReloadNotifier:
    """Asks niri to reload, at most once per ``min_interval`` seconds.

    :meth:`notify` never blocks: the command runs on a daemon thread. Calls
    that arrive while a reload is already scheduled are folded into it.
    """

    def __init__(self, *, niri_command: str = "niri", min_interval: float = 1.0) -> None:
        self.niri_command = niri_command
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._pending = False
        self._last_run = float("-inf")
        self._thread: threading.Thread | None = None
        self._reload_count = 0

    @property
    def reload_count(self) -> int:
        return self._reload_count

    def notify(self) -> bool:
        """Schedule a reload. Returns False if one was already pending."""
        with self._lock:
            if self._pending:
                return False
            self._pending = True
            delay = max(0.0, self._last_run + self.min_interval - time.monotonic())
            self._thread = threading.Thread(
                target=self._run, args=(delay,), name="niri-reload", daemon=True,
            )
            thread = self._thread
        thread.start()
        return True

    def _run(self, delay: float) -> None:
        if delay > 0:
            time.sleep(delay)
        with self._lock:
            self._pending = False
            self._last_run = time.monotonic()
        reload_config(self.niri_command)
        self._reload_count += 1

    def wait(self, timeout: float | None = None) -> None:
        """Block until the scheduled reload (if any) has finished."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
