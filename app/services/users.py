"""User administration: listing, role changes and the bootstrap admin."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import TrainingError
from app.core.security import hash_password
from app.models.user import User, ROLE_ADMIN, ROLE_LEARNER
from app.services.store import get_or_404

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def role_for_new_user(email: str) -> str:
    """The configured bootstrap email registers as admin, everyone else as learner."""
    admin_email = normalize_email(get_settings().admin_email)
    if admin_email and normalize_email(email) == admin_email:
        return ROLE_ADMIN
    return ROLE_LEARNER


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def set_role(db: AsyncSession, user_id: int, role: str, acting_user_id: int) -> User:
    user = await get_or_404(db, User, user_id, "User")
    if user.id == acting_user_id and user.role == ROLE_ADMIN and role != ROLE_ADMIN:
        raise TrainingError("Admins cannot remove their own admin role", extra={"user_id": user_id})
    previous = user.role
    user.role = role
    await db.commit()
    await db.refresh(user)
    logger.info("User %s role changed by %s: %s -> %s", user_id, acting_user_id, previous, role)
    return user


async def ensure_bootstrap_admin(db: AsyncSession) -> User | None:
    """Give ``admin_email`` the admin role, creating the account when a password is configured."""
    settings = get_settings()
    email = normalize_email(settings.admin_email)
    if not email:
        return None

    user = await get_user_by_email(db, email)
    if user is None:
        if not settings.admin_password:
            logger.warning("Admin %s not registered yet; the role is granted on registration", email)
            return None
        user = User(
            email=email,
            hashed_password=hash_password(settings.admin_password),
            full_name="Administrator",
            role=ROLE_ADMIN,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info("Bootstrap admin %s created", email)
    elif user.role != ROLE_ADMIN:
        user.role = ROLE_ADMIN
        await db.commit()
        await db.refresh(user)
        logger.info("Bootstrap admin %s promoted", email)
    return user
