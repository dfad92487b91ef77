"""
Authentication dependencies.

CRM: the session token issued by the main platform (Bearer header or
auth_token cookie) is looked up in the shared sessions table.
Admin: a short-lived HS256 token signed with ADMIN_JWT_SECRET.
"""

import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from src.core.config import Settings, get_settings
from src.core.database import get_db
from src.core.logging import get_logger
from src.core.timeutils import now_ms
from src.models import AuthSession, User, Workspace

logger = get_logger(__name__)

_BEARER = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)

ADMIN_JWT_ALGORITHM = "HS256"
ADMIN_SUBJECT = "admin"


@dataclass
class CrmPrincipal:
    """Authenticated CRM caller and the workspace their requests are scoped to."""

    user_id: str
    email: str
    name: str
    workspace: Workspace
    session_token: str

    @property
    def workspace_id(self) -> str:
        return self.workspace.id


def get_auth_token(request: Request, cookie_name: str) -> str | None:
    """Token from `Authorization: Bearer ...`, falling back to a cookie."""
    header = request.headers.get("authorization", "").strip()
    match = _BEARER.match(header)
    if match:
        return match.group(1).strip()
    return request.cookies.get(cookie_name) or None


def require_crm_auth(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CrmPrincipal:
    """
    Resolve the CRM caller from their session token.

    Expired sessions are deleted on sight. The caller's first workspace
    (oldest) scopes every contacts request.
    """
    token = get_auth_token(request, settings.auth_cookie_name)
    if not token:
        raise HTTPException(status_code=401, detail="Missing auth token")

    session = db.get(AuthSession, token)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid session")

    if session.expires_at and session.expires_at < now_ms():
        db.execute(delete(AuthSession).where(AuthSession.token == token))
        db.commit()
        logger.info(f"Removed expired session for user {session.user_id}")
        raise HTTPException(status_code=401, detail="Session expired")

    user = db.get(User, session.user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    workspace = db.scalars(
        select(Workspace)
        .where(Workspace.user_id == user.id)
        .order_by(Workspace.created_at.asc())
        .limit(1)
    ).first()
    if workspace is None:
        raise HTTPException(status_code=401, detail="Workspace not found")

    return CrmPrincipal(
        user_id=user.id,
        email=user.email,
        name=user.name or "",
        workspace=workspace,
        session_token=token,
    )


def check_admin_password(settings: Settings, password: str) -> bool:
    """Constant-time comparison against ADMIN_PASSWORD."""
    if not settings.admin_password:
        raise HTTPException(status_code=503, detail="Admin login is not configured")
    return secrets.compare_digest(password.encode(), settings.admin_password.encode())


def _admin_secret(settings: Settings) -> str:
    if not settings.admin_jwt_secret:
        raise HTTPException(status_code=503, detail="Admin auth is not configured")
    return settings.admin_jwt_secret


def create_admin_token(settings: Settings, now: datetime | None = None) -> str:
    """Issue a signed admin token valid for ADMIN_JWT_TTL_HOURS."""
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": ADMIN_SUBJECT,
        "role": "admin",
        "iat": now,
        "exp": now + timedelta(hours=settings.admin_jwt_ttl_hours),
    }
    return jwt.encode(payload, _admin_secret(settings), algorithm=ADMIN_JWT_ALGORITHM)


def decode_admin_token(settings: Settings, token: str) -> dict[str, Any]:
    """
    Verify an admin token.

    Raises:
        HTTPException: 401 when expired, tampered with, or not an admin token
    """
    try:
        payload = jwt.decode(token, _admin_secret(settings), algorithms=[ADMIN_JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    if payload.get("sub") != ADMIN_SUBJECT or payload.get("role") != "admin":
        raise HTTPException(status_code=401, detail="Invalid token: not an admin token")
    return payload


def require_admin(request: Request, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Dependency guarding every admin route except login."""
    token = get_auth_token(request, settings.admin_cookie_name)
    if not token:
        raise HTTPException(status_code=401, detail="Missing auth token")
    return decode_admin_token(settings, token)
