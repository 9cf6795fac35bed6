"""
Tests for the rolling archival sweep.

Covers:
- Old dates are rolled up and their raw entries removed
- The retention boundary (exactly N days old is kept)
- Running twice changes nothing the second time
- A failed delete leaves raw entries and is retried next sweep without double counting
- The sweep never raises
- The session sweep runs once per user per day
"""

import datetime as dt

import pytest

from adapters.local_adapter import LocalKeyValueStore
from app.exceptions import RemoteStorageError
from core.dependencies import build_container

from test_fixtures import TODAY, USER_ID, any_container, clock, identity, make_entry, make_settings


def old_day(days: int) -> dt.date:
    return TODAY - dt.timedelta(days=days)


async def seed_ten_old_entries(container) -> dt.date:
    day = old_day(45)
    await container.repository.upsert_entries(
        USER_ID, [make_entry(day, calories=450, hour=8 + i) for i in range(10)]
    )
    return day


# =============================================================================
# ARCHIVAL
# =============================================================================


@pytest.mark.anyio
async def test_old_day_rolled_up_and_raw_entries_removed(any_container):
    """
    Verifies:
    - 10 entries 45 days old totaling 4500 kcal become one rollup
    - Raw entries for that date are gone
    - Summaries still report 4500 for the date
    """
    day = await seed_ten_old_entries(any_container)

    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == [day]
    assert report.archived_entries == 10
    assert report.threshold == old_day(30)
    stored = await any_container.repository.list_summaries(USER_ID)
    assert [(s.date, s.total_calories, s.entry_count) for s in stored] == [(day, 4500, 10)]
    assert await any_container.repository.count_entries(USER_ID, day) == 0

    summaries = await any_container.summaries.get_daily_summaries()
    assert [(s.date, s.total_calories) for s in summaries] == [(day, 4500)]


@pytest.mark.anyio
async def test_retention_boundary(any_container):
    repo = any_container.repository
    await repo.upsert_entries(
        USER_ID,
        [make_entry(old_day(30), entry_id="kept"), make_entry(old_day(31), entry_id="gone")],
    )

    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == [old_day(31)]
    assert [e.id for e in await repo.list_entries(USER_ID)] == ["kept"]


@pytest.mark.anyio
async def test_second_sweep_is_a_no_op(any_container):
    day = await seed_ten_old_entries(any_container)
    await any_container.cleanup.perform_data_cleanup(today=TODAY)

    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == []
    stored = await any_container.repository.list_summaries(USER_ID)
    assert [(s.date, s.total_calories) for s in stored] == [(day, 4500)]


@pytest.mark.anyio
async def test_recent_entries_untouched(any_container):
    await any_container.repository.upsert_entries(
        USER_ID, [make_entry(TODAY), make_entry(old_day(5))]
    )

    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == []
    assert await any_container.repository.list_summaries(USER_ID) == []
    assert len(await any_container.repository.list_entries(USER_ID)) == 2


@pytest.mark.anyio
async def test_only_the_signed_in_user_is_swept(any_container):
    await any_container.repository.upsert_entry("someone-else", make_entry(old_day(50)))

    await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert len(await any_container.repository.list_entries("someone-else")) == 1


# =============================================================================
# FAILURE SAFETY
# =============================================================================


@pytest.mark.anyio
async def test_failed_delete_keeps_entries_and_does_not_double_count(any_container, monkeypatch):
    """
    Verifies:
    - Rollup written, delete fails: date reported as failed, nothing raised
    - Raw entries still present; summaries show 4500 once (live overrides rollup)
    - Next sweep completes the archival with the same totals
    """
    repo = any_container.repository
    day = await seed_ten_old_entries(any_container)
    real_delete = repo.delete_entries_for_date

    async def failing_delete(user_id, on_date):
        raise RemoteStorageError("Cloud Save Failed: connection reset")

    monkeypatch.setattr(repo, "delete_entries_for_date", failing_delete)
    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.failed_dates == [day]
    assert report.archived_dates == []
    assert await repo.count_entries(USER_ID, day) == 10
    summaries = await any_container.summaries.get_daily_summaries()
    assert [(s.date, s.total_calories, s.entry_count) for s in summaries] == [(day, 4500, 10)]

    monkeypatch.setattr(repo, "delete_entries_for_date", real_delete)
    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == [day]
    stored = await repo.list_summaries(USER_ID)
    assert [(s.date, s.total_calories) for s in stored] == [(day, 4500)]
    assert await repo.count_entries(USER_ID, day) == 0


@pytest.mark.anyio
async def test_failure_on_one_date_does_not_stop_others(any_container, monkeypatch):
    repo = any_container.repository
    bad_day, good_day = old_day(50), old_day(40)
    await repo.upsert_entries(USER_ID, [make_entry(bad_day), make_entry(good_day)])
    real_upsert = repo.upsert_summary

    async def flaky_upsert(summary):
        if summary.date == bad_day:
            raise RemoteStorageError()
        await real_upsert(summary)

    monkeypatch.setattr(repo, "upsert_summary", flaky_upsert)
    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.failed_dates == [bad_day]
    assert report.archived_dates == [good_day]
    assert await repo.count_entries(USER_ID, bad_day) == 1


@pytest.mark.anyio
async def test_sweep_never_raises_when_listing_fails(any_container, monkeypatch):
    async def broken_list(*args, **kwargs):
        raise RemoteStorageError()

    monkeypatch.setattr(any_container.repository, "list_entries", broken_list)

    report = await any_container.cleanup.perform_data_cleanup(today=TODAY)

    assert report.archived_dates == []
    assert report.failed_dates == []


@pytest.mark.anyio
async def test_signed_out_sweep_does_nothing(any_container):
    await seed_ten_old_entries(any_container)
    any_container.identity.sign_out()

    report = await any_container.on_authenticated_load()

    assert report.archived_entries == 0
    assert await any_container.repository.count_entries(USER_ID, old_day(45)) == 10


# =============================================================================
# SESSION START
# =============================================================================


@pytest.mark.anyio
async def test_session_sweep_runs_once_per_user_per_day(identity):
    """
    Verifies:
    - First call for the day archives old entries
    - Later calls the same day are skipped
    - A new day runs the sweep again
    """
    current = {"day": TODAY}

    def today() -> dt.date:
        return current["day"]

    container = build_container(
        make_settings(), identity=identity, local_store=LocalKeyValueStore(), today=today
    )
    day = await seed_ten_old_entries(container)

    first = await container.sweep_once_per_day(USER_ID)
    assert first.archived_dates == [day]

    await container.repository.upsert_entry(USER_ID, make_entry(old_day(60)))
    assert await container.sweep_once_per_day(USER_ID) is None
    assert await container.repository.count_entries(USER_ID, old_day(60)) == 1

    current["day"] = TODAY + dt.timedelta(days=1)
    later = await container.sweep_once_per_day(USER_ID)
    assert later.archived_dates == [old_day(60)]


@pytest.mark.anyio
async def test_session_sweep_retried_after_failed_date(identity, monkeypatch):
    container = build_container(
        make_settings(), identity=identity, local_store=LocalKeyValueStore(), today=lambda: TODAY
    )
    repo = container.repository
    day = await seed_ten_old_entries(container)
    real_delete = repo.delete_entries_for_date

    async def failing_delete(user_id, on_date):
        raise RemoteStorageError()

    monkeypatch.setattr(repo, "delete_entries_for_date", failing_delete)
    report = await container.sweep_once_per_day(USER_ID)
    assert report.failed_dates == [day]

    monkeypatch.setattr(repo, "delete_entries_for_date", real_delete)
    report = await container.sweep_once_per_day(USER_ID)
    assert report.archived_dates == [day]
