"""
Base service interface for business logic layer.
Services orchestrate storage operations using a repository, the shared read
cache and the identity provider.
"""

from typing import Generic, Optional, TypeVar
from abc import ABC
import logging

from adapters.identity_adapter import IdentityProvider
from app.config import Settings
from app.exceptions import UnauthorizedError
from core.cache import TTLCache

RepositoryType = TypeVar("RepositoryType")


class BaseService(Generic[RepositoryType], ABC):
    """
    Base service providing common functionality.
    All service classes should inherit from this class.
    """

    def __init__(
        self,
        logger_name: str,
        repository: RepositoryType,
        cache: TTLCache,
        identity: IdentityProvider,
        settings: Settings,
    ):
        self.logger = logging.getLogger(logger_name)
        self.repository = repository
        self.cache = cache
        self.identity = identity
        self.settings = settings

    async def current_user_id(self) -> Optional[str]:
        """Id of the signed-in user, or None"""
        user = await self.identity.current_user()
        return user.id if user else None

    async def require_user_id(self, action: str) -> str:
        """Id of the signed-in user; raises UnauthorizedError when nobody is signed in"""
        user_id = await self.current_user_id()
        if not user_id:
            raise UnauthorizedError(f"User must be logged in to {action}.", code="not_signed_in")
        return user_id

    def log_info(self, message: str, **kwargs):
        """Log info message with structured data"""
        extra_data = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.info(f"{message} {extra_data}".strip())

    def log_warning(self, message: str, **kwargs):
        """Log warning message with structured data"""
        extra_data = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.warning(f"{message} {extra_data}".strip())

    def log_error(self, message: str, **kwargs):
        """Log error message with structured data"""
        extra_data = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.error(f"{message} {extra_data}".strip())
