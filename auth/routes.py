"""
Auth API routes — signup, login, me.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_user_id
from auth.jwt import create_token
from auth.password import hash_password, needs_rehash, verify_password
from database.helpers import create_user, get_user_by_email, get_user_by_id
from database.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


# ── Request / response schemas ─────────────────────────────────────────


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., max_length=128)
    email: str = Field(..., max_length=255)
    password: str
    terms_accepted: Optional[bool] = Field(None, alias="termsAccepted")

    @field_validator("name")
    @classmethod
    def _name_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def _email_format(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Email is required")
        try:
            # display-name forms like "Ada <ada@example.com>" are rejected
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError("Invalid email format") from exc
        return value

    @field_validator("password")
    @classmethod
    def _password_strength(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value

    @field_validator("terms_accepted")
    @classmethod
    def _terms(cls, value: Optional[bool]) -> Optional[bool]:
        if value is False:
            raise ValueError("You must accept the terms")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class SignupResponse(BaseModel):
    message: str
    user: UserPublic


class LoginResponse(BaseModel):
    message: str
    token: str


def _public_user(user: User) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "createdAt": user.created_at,
    }


async def _upgrade_hash(session: AsyncSession, user: User, password: str) -> None:
    """Re-hash at the configured bcrypt cost; a failure here must not block login."""
    try:
        user.password_hash = await run_in_threadpool(hash_password, password)
        await session.flush()
    except SQLAlchemyError:
        await session.rollback()
        logger.warning("Could not upgrade password hash", exc_info=True)
    else:
        logger.info("Upgraded password hash for %s", user.id)


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    req: SignupRequest,
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Register a new user."""
    try:
        if await get_user_by_email(session, req.email) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        password_hash = await run_in_threadpool(hash_password, req.password)

        try:
            user = await create_user(
                session,
                name=req.name,
                email=req.email,
                password_hash=password_hash,
                terms_accepted=req.terms_accepted,
            )
        except IntegrityError:
            await session.rollback()
            logger.info("Signup raced on existing email %s", req.email)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )
        except SQLAlchemyError:
            await session.rollback()
            logger.exception("Insert error for %s", req.email)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to register user",
            )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Signup error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during signup",
        )

    logger.info("Registered user %s (%s)", user.email, user.id)
    return {
        "message": "User registered successfully",
        "user": _public_user(user),
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Login with email + password."""
    try:
        user = await get_user_by_email(session, req.email)
        valid = user is not None and await run_in_threadpool(
            verify_password, req.password, user.password_hash
        )
        if not valid:
            logger.info("Failed login for %s", req.email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )
        user_id = str(user.id)
        if needs_rehash(user.password_hash):
            await _upgrade_hash(session, user, req.password)
        token = create_token(user_id)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Login error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error logging in",
        )

    logger.info("Login: %s (%s)", req.email, user_id)
    return {"message": "Login successful!", "token": token}


@router.get("/me", response_model=UserPublic)
async def me(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Return the authenticated user's public profile."""
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return _public_user(user)
