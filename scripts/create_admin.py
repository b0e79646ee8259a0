#!/usr/bin/env python3
"""Create (or reset) an administrator account with a properly hashed password.

Administrators cannot self-register, so the first one is created here.
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festivalhub.core.logging_config import configure_logging
from festivalhub.core.permissions import AccountStatus, UserRole
from festivalhub.core.security import get_password_hash
from festivalhub.models.user import User

logger = logging.getLogger(__name__)


async def create_admin(
    username: str = "admin",
    password: str = "Admin@123",
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> User:
    """Create an admin user if it doesn't exist, otherwise reset it."""
    if session_factory is None:
        from festivalhub.database import AsyncSessionLocal

        session_factory = AsyncSessionLocal

    async with session_factory() as session:
        result = await session.execute(select(User).where(User.username == username))
        admin = result.scalar_one_or_none()

        if admin:
            admin.password_hash = get_password_hash(password)
            admin.role = UserRole.ADMIN.value
            admin.account_status = AccountStatus.ACTIVE.value
            admin.failed_password_attempts = 0
            logger.info(f"Updated existing admin user: {username}")
        else:
            admin = User(
                username=username,
                password_hash=get_password_hash(password),
                role=UserRole.ADMIN.value,
                account_status=AccountStatus.ACTIVE.value,
                failed_password_attempts=0,
            )
            session.add(admin)
            logger.info(f"Created admin user: {username}")

        await session.commit()

    return admin


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--username", default="admin", help="Admin username")
    parser.add_argument("--password", default="Admin@123", help="Admin password")

    args = parser.parse_args()

    configure_logging()
    asyncio.run(create_admin(username=args.username, password=args.password))
