# storefront/services/auth_service.py
import logging
from datetime import timedelta
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.models.user_models import User
from storefront.core.security import hash_password, verify_password, create_access_token
from storefront.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %r", username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")
    return user


def create_token_for(user: User) -> str:
    """
    Access token carrying token_version, so bumping the version on the user
    row invalidates every token issued before.
    """
    expire_minutes = (
        ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
        if user.role == "admin"
        else ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role},
        token_version=user.token_version,
        expires_delta=timedelta(minutes=expire_minutes),
    )


async def create_user(db: AsyncSession, username: str, password: str, role: str = "admin") -> User:
    existing = await db.execute(select(User).where(User.username == username))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail="Username already exists")

    user = User(username=username, password_hash=hash_password(password), role=role, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created %s user %r", role, username)
    return user
