"""Idempotent seeding of roles and the bootstrap administrator account."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.middleware.auth import hash_password
from bookstore.config import Settings
from bookstore.domain.models import ADMINISTRATOR, CUSTOMER, Role, User

logger = logging.getLogger(__name__)

DEFAULT_ROLES = (ADMINISTRATOR, CUSTOMER)


async def ensure_roles(session: AsyncSession, names: tuple[str, ...] = DEFAULT_ROLES) -> dict[str, Role]:
    result = await session.execute(select(Role).where(Role.name.in_(names)))
    roles = {role.name: role for role in result.scalars().all()}
    for name in names:
        if name not in roles:
            roles[name] = Role(name=name)
            session.add(roles[name])
            logger.info("Seeded role %s", name)
    await session.flush()
    return roles


async def ensure_user(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    roles: list[Role],
) -> User:
    """Create the user with ``roles`` unless the username is already taken."""
    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        roles=roles,
    )
    session.add(user)
    await session.flush()
    logger.info("Seeded user %s", username)
    return user


async def seed(session: AsyncSession, config: Settings) -> None:
    roles = await ensure_roles(session)
    if config.admin_username and config.admin_email and config.admin_password:
        await ensure_user(
            session,
            config.admin_username,
            config.admin_email,
            config.admin_password,
            [roles[ADMINISTRATOR]],
        )
    else:
        logger.info("ADMIN_USERNAME/ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin seed")
    await session.commit()
