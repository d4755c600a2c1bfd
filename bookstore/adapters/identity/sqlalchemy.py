"""Identity adapter backed by the ``users``/``roles`` tables."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.middleware.auth import verify_password
from bookstore.domain.models import User
from bookstore.ports.identity import AuthenticatedUser, IdentityPort

logger = logging.getLogger(__name__)


class SqlAlchemyIdentityAdapter(IdentityPort):
    """Look users up by username and check their bcrypt hash."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def authenticate(self, username: str, password: str) -> AuthenticatedUser | None:
        result = await self._session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            logger.debug("No user named %s", username)
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return AuthenticatedUser(
            id=user.id,
            username=user.username,
            email=user.email,
            roles=sorted(role.name for role in user.roles),
        )
