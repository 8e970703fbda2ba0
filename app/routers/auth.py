"""Auth routes: register, login, logout, me. Session-based auth via secure cookie."""
from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import (
    hash_password,
    verify_password,
    create_session_token,
    verify_session_token,
)
from app.db.session import get_db
from app.models.user import User, ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER
from app.schemas.auth import LoginSchema, NavItemSchema, RegisterSchema, SessionContextSchema
from app.services.users import normalize_email, role_for_new_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# (path, label, roles); empty roles means everyone
NAV_ITEMS = [
    ("/dashboard", "Dashboard", ()),
    ("/modules", "Training Modules", ()),
    ("/scenarios", "Scenarios", ()),
    ("/assessments", "Assessments", ()),
    ("/certificates", "Certificates", ()),
    ("/reports", "Reports", (ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER)),
    ("/users", "Users", (ROLE_ADMIN,)),
]


def nav_for_role(role: str) -> list[NavItemSchema]:
    return [
        NavItemSchema(path=path, label=label)
        for path, label, roles in NAV_ITEMS
        if not roles or role in roles
    ]


def _set_auth_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.auth_cookie_max_age,
        httponly=True,
        samesite="lax",
        path="/",
    )


async def get_current_user_optional(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Return current user if auth cookie is valid; else None."""
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        return None
    user_id = verify_session_token(token)
    if user_id is None:
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_session_context(
    current_user: Annotated[User | None, Depends(get_current_user_optional)],
) -> SessionContextSchema:
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return SessionContextSchema(
        user_id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name or "",
        role=current_user.role,
        nav=nav_for_role(current_user.role),
    )


def require_roles(*roles: str):
    """Dependency factory: the session must hold one of ``roles``."""

    async def _check(
        ctx: Annotated[SessionContextSchema, Depends(get_session_context)],
    ) -> SessionContextSchema:
        if not ctx.has_role(*roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return ctx

    return _check


@router.post("/register", response_model=SessionContextSchema, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterSchema,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create an account and log it in; only the bootstrap admin email registers as admin."""
    email_norm = normalize_email(body.email)
    pwd = body.password or ""

    if not email_norm or not EMAIL_RE.match(email_norm):
        raise HTTPException(status_code=400, detail="Invalid email")
    if len(pwd) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")
    # bcrypt hard limit: 72 bytes (UTF-8)
    if len(pwd.encode("utf-8")) > 72:
        raise HTTPException(status_code=400, detail="Password too long")

    result = await db.execute(select(User).where(User.email == email_norm))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(
        email=email_norm,
        hashed_password=hash_password(pwd),
        full_name=body.full_name.strip(),
        department=body.department,
        role=role_for_new_user(email_norm),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s registered as %s", user.id, user.role)

    _set_auth_cookie(response, user.id)
    return await get_session_context(user)


@router.post("/login", response_model=SessionContextSchema)
async def login(
    body: LoginSchema,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Authenticate and set auth cookie."""
    result = await db.execute(select(User).where(User.email == normalize_email(body.email)))
    user = result.scalar_one_or_none()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    _set_auth_cookie(response, user.id)
    return await get_session_context(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    """Clear auth cookie."""
    # path must match the one used in set_cookie()
    response.delete_cookie(settings.auth_cookie_name, path="/")


@router.get("/me", response_model=SessionContextSchema)
async def me(ctx: Annotated[SessionContextSchema, Depends(get_session_context)]):
    return ctx
