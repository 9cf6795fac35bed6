"""
Tests for daily aggregation (live totals merged with archived rollups).

Covers:
- Totals per date, most recent first
- A live date overrides a stored rollup for the same date
- Half-open date ranges
- Cache invalidation after writes
"""

import datetime as dt

import pytest

from domain.schemas import DailySummary
from services import merge_summaries

from test_fixtures import TODAY, USER_ID, any_container, clock, identity, make_entry


# =============================================================================
# MERGE RULE
# =============================================================================


def test_live_entries_override_stored_rollup():
    """
    Verifies:
    - A date with live entries uses their sum, not the rollup
    - A date with only a rollup keeps the rollup (archived=True)
    - Output is sorted newest first
    """
    live_day = TODAY - dt.timedelta(days=2)
    archived_day = TODAY - dt.timedelta(days=45)
    stored = [
        DailySummary(user_id="u1", date=live_day, total_calories=999, entry_count=9, archived=True),
        DailySummary(user_id="u1", date=archived_day, total_calories=4500, entry_count=10, archived=True),
    ]
    entries = [make_entry(live_day, calories=100), make_entry(live_day, calories=200)]

    merged = merge_summaries("u1", entries, stored)

    assert [s.date for s in merged] == [live_day, archived_day]
    assert merged[0].total_calories == 300
    assert merged[0].entry_count == 2
    assert merged[0].archived is False
    assert merged[1].total_calories == 4500
    assert merged[1].archived is True


def test_totals_sum_every_macro():
    entries = [
        make_entry(TODAY, calories=250, protein=12, carbs=30, fat=8),
        make_entry(TODAY, calories=150, protein=3, carbs=20, fat=4),
    ]

    (summary,) = merge_summaries("u1", entries, [])

    assert summary.total_calories == 400
    assert summary.total_protein == 15
    assert summary.total_carbs == 50
    assert summary.total_fat == 12


def test_no_data_yields_empty_list():
    assert merge_summaries("u1", [], []) == []


# =============================================================================
# SERVICE
# =============================================================================


@pytest.mark.anyio
async def test_daily_summaries_include_rollups(any_container):
    old_day = TODAY - dt.timedelta(days=60)
    await any_container.repository.upsert_summary(
        DailySummary(user_id=USER_ID, date=old_day, total_calories=1800, entry_count=4)
    )
    await any_container.food_log.save_entry(make_entry(TODAY, calories=500))

    summaries = await any_container.summaries.get_daily_summaries()

    assert [(s.date, s.total_calories) for s in summaries] == [(TODAY, 500), (old_day, 1800)]


@pytest.mark.anyio
async def test_range_is_half_open(any_container):
    days = [TODAY - dt.timedelta(days=n) for n in range(4)]
    for day in days:
        await any_container.food_log.save_entry(make_entry(day, calories=100))

    summaries = await any_container.summaries.get_daily_summaries_for_range(days[2], days[0])

    assert [s.date for s in summaries] == [days[1], days[2]]


@pytest.mark.anyio
async def test_empty_or_inverted_range_returns_nothing(any_container):
    await any_container.food_log.save_entry(make_entry(TODAY))
    service = any_container.summaries

    assert await service.get_daily_summaries_for_range(TODAY, TODAY) == []
    assert await service.get_daily_summaries_for_range(
        TODAY.isoformat(), (TODAY - dt.timedelta(days=3)).isoformat()
    ) == []


@pytest.mark.anyio
async def test_summaries_refresh_after_write(any_container):
    service = any_container.summaries
    await any_container.food_log.save_entry(make_entry(TODAY, calories=300))
    assert (await service.get_daily_summaries())[0].total_calories == 300

    await any_container.food_log.save_entry(make_entry(TODAY, calories=200))

    assert (await service.get_daily_summaries())[0].total_calories == 500


@pytest.mark.anyio
async def test_signed_out_has_no_summaries(any_container):
    any_container.identity.sign_out()
    assert await any_container.summaries.get_daily_summaries() == []
    assert await any_container.summaries.get_daily_summaries_for_range(
        TODAY - dt.timedelta(days=7), TODAY
    ) == []
