"""Tests for nirisettings.dirty."""

from __future__ import annotations

import threading

from nirisettings.categories import SettingsCategory
from nirisettings.dirty import DirtyTracker


class TestDirtyTracker:
    def test_marks_coalesce(self) -> None:
        tracker = DirtyTracker()
        for _ in range(5):
            tracker.mark(SettingsCategory.APPEARANCE)
        tracker.mark(SettingsCategory.KEYBOARD)
        assert tracker.take() == {SettingsCategory.APPEARANCE, SettingsCategory.KEYBOARD}

    def test_take_empties(self) -> None:
        tracker = DirtyTracker()
        tracker.mark(SettingsCategory.CURSOR)
        tracker.take()
        assert tracker.take() == set()
        assert not tracker.is_dirty()

    def test_taken_set_is_independent(self) -> None:
        tracker = DirtyTracker()
        tracker.mark(SettingsCategory.CURSOR)
        taken = tracker.take()
        tracker.mark(SettingsCategory.DEBUG)
        assert taken == {SettingsCategory.CURSOR}
        assert tracker.pending() == {SettingsCategory.DEBUG}

    def test_is_dirty_per_category(self) -> None:
        tracker = DirtyTracker()
        tracker.mark(SettingsCategory.OUTPUTS)
        assert tracker.is_dirty(SettingsCategory.OUTPUTS)
        assert not tracker.is_dirty(SettingsCategory.MOUSE)
        assert len(tracker) == 1

    def test_mark_all(self) -> None:
        tracker = DirtyTracker()
        tracker.mark_all()
        assert tracker.take() == set(SettingsCategory)

    def test_no_mark_lost_across_threads(self) -> None:
        tracker = DirtyTracker()
        categories = list(SettingsCategory)
        seen: set[SettingsCategory] = set()
        done = threading.Event()

        def marker(offset: int) -> None:
            for i in range(2000):
                tracker.mark(categories[(i + offset) % len(categories)])

        def drainer() -> None:
            while not done.is_set():
                seen.update(tracker.take())
            seen.update(tracker.take())

        drain = threading.Thread(target=drainer)
        drain.start()
        workers = [threading.Thread(target=marker, args=(n,)) for n in range(4)]
        for t in workers:
            t.start()
        for t in workers:
            t.join()
        done.set()
        drain.join()
        assert seen == set(categories)
        assert tracker.take() == set()
