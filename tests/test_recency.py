"""Tests for recency tracking and window sessions."""

import asyncio

import pytest

from tabharmony.host import NO_GROUP
from tabharmony.session import RecencyTracker, SessionRegistry


def test_touch_evicts_oldest_entry() -> None:
    recency = RecencyTracker(limit=3)

    for group_id in (1, 2, 3, 4):
        recency.touch(group_id)

    assert recency.snapshot() == [4, 3, 2]
    assert recency.should_collapse(1)
    assert not recency.should_collapse(4)


def test_touch_moves_existing_entry_to_front() -> None:
    recency = RecencyTracker(limit=3)
    for group_id in (1, 2, 3):
        recency.touch(group_id)

    recency.touch(1)
    recency.touch(1)

    assert recency.snapshot() == [1, 3, 2]


def test_ungrouped_tabs_are_not_tracked() -> None:
    recency = RecencyTracker(limit=2)
    recency.touch(5)

    recency.touch(NO_GROUP)

    assert recency.snapshot() == [5]


def test_resize_truncates_entries() -> None:
    recency = RecencyTracker(limit=4)
    for group_id in (1, 2, 3, 4):
        recency.touch(group_id)

    recency.resize(2)

    assert recency.limit == 2
    assert recency.snapshot() == [4, 3]
    assert recency.should_collapse(2)


def test_registry_creates_sessions_on_demand() -> None:
    registry = SessionRegistry(recency_limit=2)

    session = registry.ensure(7)

    assert 7 in registry
    assert registry.ensure(7) is session
    assert session.recency.limit == 2
    assert len(registry) == 1


def test_locator_cache_reports_changes_only() -> None:
    session = SessionRegistry(recency_limit=1).ensure(1)

    assert session.locator_changed(10, "https://example.com/")
    assert not session.locator_changed(10, "https://example.com/")
    assert session.locator_changed(10, "https://example.com/next")


@pytest.mark.asyncio
async def test_close_cancels_pending_tasks() -> None:
    registry = SessionRegistry(recency_limit=3)
    session = registry.ensure(1)
    session.run_task = asyncio.create_task(asyncio.sleep(10))

    closed = registry.close(1)

    assert closed is session
    assert 1 not in registry
    with pytest.raises(asyncio.CancelledError):
        await session.run_task
