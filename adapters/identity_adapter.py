"""
Identity provider seam.

Authentication itself lives elsewhere; this layer only needs to ask "who is
signed in right now?".
"""

from __future__ import annotations

import base64
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None


class IdentityProvider(Protocol):
    async def current_user(self) -> Optional[CurrentUser]: ...


class StaticIdentityProvider:
    """Holds the signed-in user in memory; used for local mode and tests"""

    def __init__(self, user: Optional[CurrentUser] = None):
        self._user = user

    async def current_user(self) -> Optional[CurrentUser]:
        return self._user

    def sign_in(self, user: CurrentUser) -> None:
        self._user = user

    def sign_out(self) -> None:
        self._user = None


def local_user_id(email: str) -> str:
    """Deterministic id for local-only accounts (base64 of the lowercased email)"""
    return base64.b64encode(email.strip().lower().encode("utf-8")).decode("ascii")


_request_user: ContextVar[Optional[CurrentUser]] = ContextVar("snapcal_request_user", default=None)


class RequestIdentityProvider:
    """
    Signed-in user of the current request.

    The API binds the caller (from the X-User-Id header) at the start of each
    request; services running in that request see it through current_user().
    """

    async def current_user(self) -> Optional[CurrentUser]:
        return _request_user.get()

    @staticmethod
    def bind(user: Optional[CurrentUser]) -> Token:
        return _request_user.set(user)
