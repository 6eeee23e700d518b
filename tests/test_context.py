"""Tests for nirisettings.context — the settings owner."""

from __future__ import annotations

import pathlib
import threading
from unittest.mock import MagicMock, patch

import pytest

from nirisettings.categories import SettingsCategory
from nirisettings.context import SettingsContext
from nirisettings.errors import ConfigIOError, ContextPoisonedError, SaveError
from nirisettings.loader import load_settings
from nirisettings.paths import ConfigPaths
from nirisettings.storage import save_dirty

_WRITE_CATEGORY = "nirisettings.storage.write_category"
_SAVE_DIRTY = "nirisettings.context.save_dirty"


class TestOpen:
    def test_first_run_imports_and_saves(self, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        ctx = SettingsContext.open(paths)
        assert ctx.import_result is not None
        assert ctx.load_result is None
        assert ctx.get(SettingsCategory.APPEARANCE).gaps == 12
        assert paths.main_kdl.exists()
        for category in SettingsCategory:
            assert paths.category_path(category).exists()
        assert not ctx.dirty.is_dirty()

    def test_first_run_leaves_host_alone(self, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        original = host_config.read_bytes()
        SettingsContext.open(paths)
        assert host_config.read_bytes() == original

    def test_second_run_loads_files(self, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        SettingsContext.open(paths)
        host_config.write_text("layout { gaps 40; }")
        ctx = SettingsContext.open(paths)
        assert ctx.import_result is None
        assert ctx.load_result is not None
        assert ctx.get(SettingsCategory.APPEARANCE).gaps == 12

    def test_missing_files_marked_dirty(self, paths: ConfigPaths, host_config: pathlib.Path) -> None:
        SettingsContext.open(paths)
        paths.category_path(SettingsCategory.CURSOR).unlink()
        ctx = SettingsContext.open(paths)
        assert ctx.dirty.pending() == {SettingsCategory.CURSOR}
        assert ctx.flush() == 1
        assert paths.category_path(SettingsCategory.CURSOR).exists()

    def test_first_run_without_host(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext.open(paths)
        assert ctx.import_result.warnings
        assert paths.main_kdl.exists()


class TestEdit:
    def test_edit_marks_dirty(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with ctx.edit(SettingsCategory.CURSOR) as s:
            s.cursor.size = 40
        assert ctx.dirty.pending() == {SettingsCategory.CURSOR}
        assert ctx.get(SettingsCategory.CURSOR).size == 40

    def test_get_returns_copy(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        ctx.get(SettingsCategory.CURSOR).size = 50
        assert ctx.get(SettingsCategory.CURSOR).size == 24

    def test_set_validates(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        cursor = ctx.get(SettingsCategory.CURSOR)
        cursor.size = 500
        ctx.set(SettingsCategory.CURSOR, cursor)
        assert ctx.get(SettingsCategory.CURSOR).size == 64
        assert ctx.dirty.is_dirty(SettingsCategory.CURSOR)

    def test_failed_edit_rolls_back_and_poisons(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with pytest.raises(RuntimeError):
            with ctx.edit(SettingsCategory.CURSOR) as s:
                s.cursor.size = 48
                raise RuntimeError("boom")
        assert ctx.poisoned
        assert ctx.snapshot().cursor.size == 24
        assert not ctx.dirty.is_dirty()
        with pytest.raises(ContextPoisonedError):
            with ctx.edit(SettingsCategory.CURSOR):
                pass

    def test_concurrent_edits(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)

        def bump() -> None:
            for _ in range(200):
                with ctx.edit(SettingsCategory.GESTURES) as s:
                    s.gestures.dnd_scroll_delay_ms += 1

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert ctx.get(SettingsCategory.GESTURES).dnd_scroll_delay_ms == 100 + 800


class TestFlush:
    def test_writes_only_dirty(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with ctx.edit(SettingsCategory.APPEARANCE) as s:
            s.appearance.gaps = 30
        assert ctx.flush() == 1
        assert [p.name for p in paths.managed_dir.rglob("*.kdl")] == ["appearance.kdl"]
        assert load_settings(paths).appearance.gaps == 30
        assert ctx.flush() == 0

    def test_notifies_after_write(self, paths: ConfigPaths) -> None:
        notifier = MagicMock()
        ctx = SettingsContext(paths, notifier=notifier)
        assert ctx.flush() == 0
        notifier.notify.assert_not_called()
        ctx.mark_dirty(SettingsCategory.CURSOR)
        ctx.flush()
        notifier.notify.assert_called_once()

    def test_failed_categories_stay_dirty(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        ctx.mark_dirty(SettingsCategory.CURSOR)
        ctx.mark_dirty(SettingsCategory.DEBUG)

        def flaky(p, s, category):
            if category is SettingsCategory.CURSOR:
                raise ConfigIOError("read-only")

        with patch(_WRITE_CATEGORY, side_effect=flaky):
            with pytest.raises(SaveError):
                ctx.flush()
        assert ctx.dirty.pending() == {SettingsCategory.CURSOR}
        assert ctx.flush() == 1

    def test_unexpected_error_keeps_categories_dirty(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        ctx.mark_dirty(SettingsCategory.CURSOR)
        with patch(_SAVE_DIRTY, side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                ctx.flush()
        assert ctx.dirty.pending() == {SettingsCategory.CURSOR}
        assert ctx.flush() == 1

    def test_flushes_are_serialized(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with ctx.edit(SettingsCategory.APPEARANCE) as s:
            s.appearance.gaps = 20
        entered = threading.Event()
        release = threading.Event()
        seen: list[int] = []

        def stalled(p, settings, dirty):
            seen.append(settings.appearance.gaps)
            if len(seen) == 1:
                entered.set()
                release.wait(5)
            return save_dirty(p, settings, dirty)

        with patch(_SAVE_DIRTY, side_effect=stalled):
            first = threading.Thread(target=ctx.flush)
            first.start()
            assert entered.wait(5)
            with ctx.edit(SettingsCategory.APPEARANCE) as s:
                s.appearance.gaps = 40
            second = threading.Thread(target=ctx.flush)
            second.start()
            second.join(0.2)
            assert second.is_alive()
            release.set()
            first.join(5)
            second.join(5)
        assert seen == [20, 40]
        assert load_settings(paths).appearance.gaps == 40


class TestShutdown:
    def test_flushes_pending(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with ctx.edit(SettingsCategory.CURSOR) as s:
            s.cursor.theme = "Bibata"
        ctx.shutdown()
        assert load_settings(paths).cursor.theme == "Bibata"

    def test_poisoned_context_saves_everything(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        with ctx.edit(SettingsCategory.CURSOR) as s:
            s.cursor.theme = "Bibata"
        with pytest.raises(ValueError):
            with ctx.edit(SettingsCategory.CURSOR) as s:
                s.cursor.theme = "half-done"
                raise ValueError("bad")
        ctx.shutdown()
        assert paths.main_kdl.exists()
        assert load_settings(paths).cursor.theme == "Bibata"

    def test_save_error_is_logged_not_raised(self, paths: ConfigPaths) -> None:
        ctx = SettingsContext(paths)
        ctx.mark_dirty(SettingsCategory.CURSOR)
        with patch(_WRITE_CATEGORY, side_effect=ConfigIOError("read-only")):
            ctx.shutdown()
        assert ctx.dirty.is_dirty(SettingsCategory.CURSOR)
