import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from database import with_timeout
from errors import ConflictError
from models import User, utc_now
from schemas import Identity
from utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await with_timeout(session.exec(select(User).where(User.email == email)))
    return result.first()


async def get_user_by_id(session: AsyncSession, user_id: str) -> Optional[User]:
    return await with_timeout(session.get(User, user_id))


async def get_user_identity(session: AsyncSession, user_id: str) -> Optional[Identity]:
    """
    Find a user by id, loading only the id and email columns

    Args:
        session: Database session
        user_id: User ID

    Returns:
        Identity if the user exists, None otherwise
    """
    result = await with_timeout(
        session.exec(select(User.id, User.email).where(User.id == user_id))
    )
    row = result.first()
    if row is None:
        return None
    return Identity(user_id=row[0], email=row[1])


async def create_user(session: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Create a user if no account uses the email yet

    Raises:
        ConflictError: If the email is already registered
    """
    if await get_user_by_email(session, email) is not None:
        raise ConflictError()

    user = User(name=name, email=email, password_hash=hash_password(password))
    session.add(user)
    try:
        await with_timeout(session.commit())
    except IntegrityError as exc:
        # Lost a race against a concurrent registration; the unique index decides
        await session.rollback()
        raise ConflictError() from exc

    await session.refresh(user)
    return user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the user if the email exists and the password matches"""
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


async def update_display_name(session: AsyncSession, user_id: str, name: str) -> Optional[User]:
    result = await with_timeout(
        session.exec(
            update(User)
            .where(User.id == user_id)
            .values(name=name, updated_at=utc_now())
        )
    )
    if result.rowcount == 0:
        return None
    await with_timeout(session.commit())

    logger.info("Updated display name for user %s", user_id)
    refreshed = await with_timeout(
        session.exec(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
    )
    return refreshed.first()
