"""
Admin panel routes: login plus read-only listings and detail views.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from src.api.auth import check_admin_password, create_admin_token, require_admin
from src.core.config import Settings, get_settings
from src.core.database import get_db
from src.core.logging import get_logger
from src.services.admin import store as admin_store

logger = get_logger(__name__)

# Login is public; everything on `router` requires an admin token
login_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_admin)])

LimitParam = Annotated[int, Query(ge=1, le=1000)]
OffsetParam = Annotated[int, Query(ge=0)]


class LoginRequest(BaseModel):
    """Admin login with the shared admin password."""

    password: str


class LoginResponse(BaseModel):
    """Signed admin token."""

    token: str


@login_router.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """Exchange the admin password for a signed token (also set as a cookie)."""
    if not check_admin_password(settings, request.password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid password")

    token = create_admin_token(settings)
    response.set_cookie(
        key=settings.admin_cookie_name,
        value=token,
        max_age=settings.admin_jwt_ttl_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info("Admin logged in")
    return LoginResponse(token=token)


# ────────────────── Dashboard ──────────────────


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Platform-wide totals."""
    return admin_store.get_dashboard_stats(db)


# ────────────────── Users ──────────────────


@router.get("/users")
def list_users(
    search: str | None = None,
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    users = admin_store.list_all_users(db, search=search, limit=limit, offset=offset)
    return {"users": users}


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    detail = admin_store.get_user_detail(db, user_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="User not found")
    return detail


# ────────────────── Workspaces ──────────────────


@router.get("/workspaces")
def list_workspaces(
    search: str | None = None,
    is_paid: bool | None = Query(default=None, alias="isPaid"),
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    workspaces = admin_store.list_all_workspaces(
        db, search=search, is_paid=is_paid, limit=limit, offset=offset
    )
    return {"workspaces": workspaces}


@router.get("/workspaces/{workspace_id}")
def get_workspace(workspace_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    detail = admin_store.get_workspace_detail(db, workspace_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return detail


# ────────────────── Agents ──────────────────


@router.get("/agents")
def list_agents(
    workspace: str | None = None,
    search: str | None = None,
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    agents = admin_store.list_all_agents(
        db, workspace_id=workspace, search=search, limit=limit, offset=offset
    )
    return {"agents": agents}


@router.get("/agents/{agent_id}")
def get_agent(agent_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    detail = admin_store.get_agent_detail(db, agent_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    return detail


# ────────────────── Calls ──────────────────


@router.get("/calls")
def list_calls(
    workspace: str | None = None,
    agent: str | None = None,
    date_from: int | None = Query(default=None, alias="from", description="Epoch ms, inclusive"),
    date_to: int | None = Query(default=None, alias="to", description="Epoch ms, inclusive"),
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    calls = admin_store.list_all_calls(
        db,
        workspace_id=workspace,
        agent_id=agent,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return {"calls": calls}


@router.get("/calls/{call_id}")
def get_call(call_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    call = admin_store.get_call_detail(db, call_id)
    if call is None:
        raise HTTPException(status_code=404, detail="Call not found")
    return {"call": call}


# ────────────────── Outbound jobs ──────────────────


@router.get("/outbound-jobs")
def list_outbound_jobs(
    workspace: str | None = None,
    status: str | None = None,
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    jobs = admin_store.list_all_outbound_jobs(
        db, workspace_id=workspace, status=status, limit=limit, offset=offset
    )
    return {"jobs": jobs}


# ────────────────── Phone numbers ──────────────────


@router.get("/phone-numbers")
def list_phone_numbers(
    workspace: str | None = None,
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    numbers = admin_store.list_all_phone_numbers(
        db, workspace_id=workspace, limit=limit, offset=offset
    )
    return {"phoneNumbers": numbers}


# ────────────────── Contacts ──────────────────


@router.get("/contacts")
def list_contacts(
    workspace: str | None = None,
    search: str | None = None,
    limit: LimitParam = admin_store.DEFAULT_LIMIT,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    contacts = admin_store.list_all_contacts(
        db, workspace_id=workspace, search=search, limit=limit, offset=offset
    )
    return {"contacts": contacts}


# ────────────────── Billing ──────────────────


@router.get("/billing")
def billing_overview(db: Session = Depends(get_db)) -> dict[str, Any]:
    return admin_store.get_billing_overview(db)
