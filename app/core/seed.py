"""Seed an admin account on app startup."""

import logging
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import async_session
from app.models.user import User, ROLE_ADMIN
from app.services.auth import hash_password, get_user_by_email

logger = logging.getLogger(__name__)


async def create_or_promote_admin(db: AsyncSession, email: str, password: str, promote: bool = True) -> User:
    """Create an admin account, or promote an existing account and reset its password.

    With promote=False an existing account is returned untouched.
    """
    user = await get_user_by_email(db, email)
    if user:
        if not promote:
            return user
        user.role = ROLE_ADMIN
        user.hashed_password = hash_password(password)
        logger.info("Existing account promoted to admin: %s", email)
    else:
        user = User(
            first_name="Clinic",
            last_name="Admin",
            email=email,
            hashed_password=hash_password(password),
            role=ROLE_ADMIN,
        )
        db.add(user)
        logger.info("Admin account created: %s", email)

    await db.commit()
    await db.refresh(user)
    return user


async def seed_admin_account():
    """Create the configured admin account if it doesn't exist."""
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        return

    async with async_session() as db:
        try:
            await create_or_promote_admin(
                db, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD, promote=False
            )
        except Exception as e:
            logger.error("Failed to seed admin account: %s", e)
            await db.rollback()
