"""
API dependencies for dependency injection
"""

from typing import Optional

from fastapi import Depends, Header, Request

from adapters.identity_adapter import CurrentUser, RequestIdentityProvider, local_user_id
from core.dependencies import StorageContainer
from services import CleanupService, FoodLogService, MigrationService, SummaryService


def get_container(request: Request) -> StorageContainer:
    """The storage layer built at startup (see main.lifespan)"""
    return request.app.state.container


async def bind_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    container: StorageContainer = Depends(get_container),
) -> Optional[CurrentUser]:
    """
    Make the caller the signed-in user for the rest of this request.

    Callers that only send an email are local-only accounts and get the
    id derived from it. The first request of the day for each user runs
    the archival sweep before the route does.

    Must stay ``async``: sync dependencies run in a worker thread and a
    context variable set there would not reach the route.
    """
    user_id = x_user_id or (local_user_id(x_user_email) if x_user_email else None)
    user = CurrentUser(id=user_id, email=x_user_email) if user_id else None
    RequestIdentityProvider.bind(user)
    if user is not None:
        await container.sweep_once_per_day(user.id)
    return user


def get_food_log(
    _user: Optional[CurrentUser] = Depends(bind_user),
    container: StorageContainer = Depends(get_container),
) -> FoodLogService:
    return container.food_log


def get_summaries(
    _user: Optional[CurrentUser] = Depends(bind_user),
    container: StorageContainer = Depends(get_container),
) -> SummaryService:
    return container.summaries


def get_cleanup(
    _user: Optional[CurrentUser] = Depends(bind_user),
    container: StorageContainer = Depends(get_container),
) -> CleanupService:
    return container.cleanup


def get_migration(
    _user: Optional[CurrentUser] = Depends(bind_user),
    container: StorageContainer = Depends(get_container),
) -> MigrationService:
    return container.migration
