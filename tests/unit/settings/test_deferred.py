"""Unit tests for deferred change tracking."""

from unittest.mock import AsyncMock

import pytest

from settings_sync.settings.deferred import (
    BINARY_PATH,
    PROXY_SETTINGS,
    USER_HOOKS,
    DeferredChangeTracker,
    StagedChange,
)


class TestStagedChange:
    def test_pending_flag_lifecycle(self):
        change = StagedChange(AsyncMock())

        assert change.has_pending_change() is False
        change.mark_pending()
        assert change.has_pending_change() is True
        change.clear_pending()
        assert change.has_pending_change() is False

    @pytest.mark.asyncio
    async def test_commit_calls_supplied_coroutine(self):
        commit_fn = AsyncMock()
        change = StagedChange(commit_fn)

        await change.commit()

        commit_fn.assert_awaited_once()


class TestDeferredChangeTracker:
    def test_register_rejects_objects_without_contract(self):
        tracker = DeferredChangeTracker()

        with pytest.raises(TypeError):
            tracker.register(BINARY_PATH, object())

    def test_pending_lists_known_sub_modules_in_commit_order(self):
        tracker = DeferredChangeTracker()
        for name in (PROXY_SETTINGS, BINARY_PATH, USER_HOOKS):
            change = StagedChange(AsyncMock())
            change.mark_pending()
            tracker.register(name, change)

        assert tracker.pending() == [BINARY_PATH, USER_HOOKS, PROXY_SETTINGS]

    @pytest.mark.asyncio
    async def test_commit_pending_skips_clean_changes(self):
        tracker = DeferredChangeTracker()
        clean_fn = AsyncMock()
        dirty_fn = AsyncMock()
        dirty = StagedChange(dirty_fn)
        dirty.mark_pending()
        tracker.register(BINARY_PATH, StagedChange(clean_fn))
        tracker.register(USER_HOOKS, dirty)

        report = await tracker.commit_pending()

        clean_fn.assert_not_awaited()
        dirty_fn.assert_awaited_once()
        assert report.committed == [USER_HOOKS]
        assert report.ok
        assert dirty.has_pending_change() is False

    @pytest.mark.asyncio
    async def test_failed_commit_keeps_flag_and_others_still_run(self):
        tracker = DeferredChangeTracker()
        failing = StagedChange(AsyncMock(side_effect=RuntimeError("hooks invalid")))
        succeeding_fn = AsyncMock()
        succeeding = StagedChange(succeeding_fn)
        failing.mark_pending()
        succeeding.mark_pending()
        tracker.register(USER_HOOKS, failing)
        tracker.register(PROXY_SETTINGS, succeeding)

        report = await tracker.commit_pending()

        assert report.failed == {USER_HOOKS: "hooks invalid"}
        assert report.committed == [PROXY_SETTINGS]
        succeeding_fn.assert_awaited_once()
        assert failing.has_pending_change() is True
        assert succeeding.has_pending_change() is False
        assert tracker.pending() == [USER_HOOKS]
