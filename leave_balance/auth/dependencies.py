"""Auth dependencies — JWT validation and role extraction."""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leave_balance.auth.models import UserSession
from leave_balance.common.constants import UserRole
from leave_balance.config import settings
from leave_balance.core_hr.models import Employee
from leave_balance.database import get_db


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Validate JWT, verify session, return the authenticated Employee.

    The token's role claim is stored on ``request.state.user_role``.
    """
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    # Verify session exists, not revoked, not expired
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == _hash_token(token),
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(timezone.utc),
        ),
    )
    if result.scalars().first() is None:
        raise HTTPException(status_code=401, detail="Session invalid or expired.")

    employee_id = uuid.UUID(payload["sub"])
    emp_result = await db.execute(
        select(Employee).where(Employee.id == employee_id, Employee.is_active.is_(True)),
    )
    employee = emp_result.scalars().first()
    if employee is None:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    try:
        role = UserRole(payload.get("role", UserRole.employee.value))
    except ValueError:
        role = UserRole.employee
    request.state.user_role = role

    return employee


def get_current_role(request: Request, employee: Employee = Depends(get_current_user)) -> UserRole:
    """Role of the authenticated caller (resolved by get_current_user)."""
    return request.state.user_role
