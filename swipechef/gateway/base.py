"""Shared plumbing for the gateway classes."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from swipechef.auth import ClerkUser
from swipechef.errors import NotAuthenticated, NotFound


class BaseGateway:
    """
    Stateless request boundary for one signed-in user.

    Every public coroutine opens its own session from ``session_factory``, so a
    gateway can be shared by concurrent callers.
    """

    def __init__(
        self,
        user: Optional[ClerkUser],
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        if session_factory is None:
            from swipechef.db.database import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        self.user = user
        self.session_factory = session_factory

    def require_user(self) -> ClerkUser:
        """First check of every operation; nothing is sent without a user."""
        if self.user is None or not self.user.id:
            raise NotAuthenticated()
        return self.user


def parse_id(value: str | UUID, what: str = "Record") -> UUID:
    """Parse an opaque id; anything that isn't one of ours can't exist."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFound(f"{what} not found")
