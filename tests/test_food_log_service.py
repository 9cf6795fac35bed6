"""
Tests for FoodLogService (the record store callers use).

Each test runs once per backend via the any_container fixture, so local and
remote behave the same from the caller's side.

Covers:
- Save then read, with cache invalidation on write
- Signed-out behaviour (empty reads, rejected writes)
- Per-date reads and counts
- Daily goal, profile and onboarding settings
"""

import datetime as dt

import pytest

from adapters.identity_adapter import CurrentUser
from app.exceptions import LocalStorageFullError, UnauthorizedError
from adapters.local_adapter import LocalKeyValueStore
from core.cache import CacheKeys, TTLCache
from core.dependencies import build_container
from domain.schemas import UserProfile

from test_fixtures import (
    TODAY,
    USER_ID,
    FakeClock,
    any_container,
    clock,
    identity,
    make_entry,
    make_settings,
    signed_in,
)


# =============================================================================
# SAVE AND READ
# =============================================================================


@pytest.mark.anyio
async def test_save_then_read_returns_entry(any_container):
    """
    Verifies:
    - save_entry stamps the signed-in user's id
    - get_entries returns it with identical fields
    """
    service = any_container.food_log
    entry = make_entry(TODAY, calories=450, food_item="Chicken salad")

    saved = await service.save_entry(entry)
    entries = await service.get_entries()

    assert saved.user_id == USER_ID
    assert [e.id for e in entries] == [entry.id]
    assert entries[0].food_item == "Chicken salad"
    assert entries[0].calories == 450
    assert entries[0].date == TODAY


@pytest.mark.anyio
async def test_write_invalidates_cached_lists(any_container):
    service = any_container.food_log
    await service.save_entry(make_entry(TODAY, hour=8))
    assert len(await service.get_entries()) == 1
    assert len(await service.get_entries_lite()) == 1
    assert await service.count_entries_for_date(TODAY) == 1

    await service.save_entry(make_entry(TODAY, hour=13))

    assert len(await service.get_entries()) == 2
    assert len(await service.get_entries_lite()) == 2
    assert await service.count_entries_for_date(TODAY) == 2


@pytest.mark.anyio
async def test_reads_are_served_from_cache(any_container):
    service = any_container.food_log
    await service.save_entry(make_entry(TODAY))
    first = await service.get_entries()

    # Bypass the service: the cached list is still returned
    await any_container.repository.upsert_entry(USER_ID, make_entry(TODAY))

    assert await service.get_entries() == first


@pytest.mark.anyio
async def test_entries_for_date_and_lite_exclude_images(any_container):
    service = any_container.food_log
    yesterday = TODAY - dt.timedelta(days=1)
    photo = make_entry(TODAY, image_url="data:image/jpeg;base64,AAAA")
    await service.save_entry(photo)
    await service.save_entry(make_entry(yesterday))

    today_entries = await service.get_entries_for_date(TODAY.isoformat())
    assert [e.id for e in today_entries] == [photo.id]
    assert today_entries[0].image_url is None
    assert await service.count_entries_for_date(yesterday) == 1
    assert await service.get_entry_image(photo.id) == "data:image/jpeg;base64,AAAA"


@pytest.mark.anyio
async def test_delete_and_clear_image(any_container):
    service = any_container.food_log
    entry = make_entry(TODAY, image_url="data:image/jpeg;base64,AAAA")
    await service.save_entry(entry)
    assert await service.get_entry_image(entry.id) is not None

    assert await service.clear_entry_image(entry.id) is True
    assert await service.get_entry_image(entry.id) is None

    assert await service.delete_entry(entry.id) is True
    assert await service.get_entries() == []
    assert await service.delete_entry(entry.id) is False


# =============================================================================
# SIGNED OUT
# =============================================================================


@pytest.mark.anyio
async def test_signed_out_reads_are_empty_and_writes_rejected(any_container):
    any_container.identity.sign_out()
    service = any_container.food_log

    assert await service.get_entries() == []
    assert await service.count_entries_for_date(TODAY) == 0
    assert await service.get_entry_image("anything") is None
    assert await service.get_daily_goal() == 2000
    assert await service.get_user_profile() is None
    assert await service.has_completed_onboarding() is False

    with pytest.raises(UnauthorizedError):
        await service.save_entry(make_entry(TODAY))
    with pytest.raises(UnauthorizedError):
        await service.save_daily_goal(1800)


@pytest.mark.anyio
async def test_users_do_not_see_each_others_entries(any_container):
    service = any_container.food_log
    await service.save_entry(make_entry(TODAY))

    any_container.identity.sign_in(CurrentUser(id="user-other"))

    assert await service.get_entries() == []


# =============================================================================
# LOCAL QUOTA
# =============================================================================


@pytest.mark.anyio
async def test_local_full_leaves_entries_unchanged():
    """
    Verifies:
    - Save past the local quota raises LocalStorageFullError
    - Previously saved entries are still returned afterwards
    """
    container = build_container(
        make_settings(),
        identity=signed_in(),
        local_store=LocalKeyValueStore(quota_bytes=2048),
        cache=TTLCache(clock=FakeClock()),
    )
    service = container.food_log
    kept = await service.save_entry(make_entry(TODAY, food_item="Apple"))

    with pytest.raises(LocalStorageFullError):
        await service.save_entry(make_entry(TODAY, image_url="x" * 8192))

    container.cache.clear()
    assert [e.id for e in await service.get_entries()] == [kept.id]


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.mark.anyio
async def test_daily_goal_defaults_then_persists(any_container):
    service = any_container.food_log
    assert await service.get_daily_goal() == 2000

    await service.save_daily_goal(1750)

    assert await service.get_daily_goal() == 1750
    any_container.cache.clear()
    assert await service.get_daily_goal() == 1750


@pytest.mark.anyio
async def test_profile_save_and_read(any_container):
    service = any_container.food_log
    assert await service.get_user_profile() is None

    profile = UserProfile(name="Emma Johnson", height=165, weight=58)
    await service.save_user_profile(profile)

    assert await service.get_user_profile() == profile


@pytest.mark.anyio
async def test_onboarding_flag_cached_only_when_true(any_container):
    service = any_container.food_log
    assert await service.has_completed_onboarding() is False
    assert any_container.cache.get(CacheKeys.onboarding(USER_ID)) is None

    await service.mark_onboarding_complete()

    assert await service.has_completed_onboarding() is True
    any_container.cache.clear()
    assert await service.has_completed_onboarding() is True


@pytest.mark.anyio
async def test_schema_check_ok_for_both_backends(any_container):
    result = await any_container.food_log.check_database_schema()
    assert result.ok is True
