"""
Read-only aggregation queries for the admin panel.

Every function returns plain dicts with camelCase keys, ready to be serialized.
Listings default to 100 rows, newest first.
"""

from typing import Any

from sqlalchemy import Float, String, func, or_, select
from sqlalchemy.orm import Session, defer

from src.core.timeutils import days_ago_ms, start_of_day_ms, start_of_month_ms
from src.models import Agent, Call, Contact, OutboundJob, PhoneNumber, User, Workspace

DEFAULT_LIMIT = 100
RECENT_CALLS_LIMIT = 50

# Call listings never need the heavy JSON columns
_CALL_LIST_OPTIONS = (defer(Call.transcript), defer(Call.recording), defer(Call.metrics))


def _count(db: Session, model: type, *criteria: Any) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return int(db.scalar(stmt) or 0)


def _ilike(column: Any, search: str) -> Any:
    return func.lower(column, type_=String).contains(search.lower(), autoescape=True)


def _agent_count():
    return (
        select(func.count(Agent.id))
        .where(Agent.workspace_id == Workspace.id)
        .correlate(Workspace)
        .scalar_subquery()
        .label("agent_count")
    )


def _workspace_call_count():
    return (
        select(func.count(Call.id))
        .where(Call.workspace_id == Workspace.id)
        .correlate(Workspace)
        .scalar_subquery()
        .label("call_count")
    )


def _total_revenue(db: Session) -> float:
    total = db.scalar(select(func.coalesce(func.sum(Call.cost_usd), 0.0, type_=Float)))
    return round(float(total or 0.0), 2)


# ────────────────── Serializers ──────────────────


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name or "",
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }


def workspace_to_dict(
    workspace: Workspace,
    *,
    owner_email: str | None = None,
    owner_name: str | None = None,
    agent_count: int = 0,
    call_count: int = 0,
) -> dict[str, Any]:
    return {
        "id": workspace.id,
        "name": workspace.name or "",
        "userId": workspace.user_id,
        "ownerEmail": owner_email,
        "ownerName": owner_name,
        "isTrial": bool(workspace.is_trial),
        "isPaid": bool(workspace.is_paid),
        "trialCreditUsd": float(workspace.trial_credit_usd or 0),
        "telephonyEnabled": bool(workspace.telephony_enabled),
        "stripeCustomerId": workspace.stripe_customer_id,
        "stripeSubscriptionId": workspace.stripe_subscription_id,
        "createdAt": workspace.created_at,
        "updatedAt": workspace.updated_at,
        "agentCount": int(agent_count or 0),
        "callCount": int(call_count or 0),
    }


def agent_summary_to_dict(agent: Agent, workspace_name: str | None = None) -> dict[str, Any]:
    return {
        "id": agent.id,
        "workspaceId": agent.workspace_id,
        "workspaceName": workspace_name,
        "name": agent.name or "",
        "llmModel": agent.llm_model or "",
        "createdAt": agent.created_at,
        "updatedAt": agent.updated_at,
    }


def call_to_dict(call: Call, workspace_name: str | None = None) -> dict[str, Any]:
    return {
        "id": call.id,
        "workspaceId": call.workspace_id,
        "workspaceName": workspace_name,
        "agentId": call.agent_id,
        "agentName": call.agent_name or "",
        "to": call.to_number or "",
        "roomName": call.room_name or "",
        "startedAt": call.started_at,
        "endedAt": call.ended_at,
        "durationSec": call.duration_sec,
        "outcome": call.outcome or "",
        "costUsd": call.cost_usd,
    }


def phone_number_to_dict(number: PhoneNumber, workspace_name: str | None = None) -> dict[str, Any]:
    return {
        "id": number.id,
        "workspaceId": number.workspace_id,
        "workspaceName": workspace_name,
        "e164": number.e164,
        "label": number.label or "",
        "status": number.status or "",
        "inboundAgentId": number.inbound_agent_id,
        "outboundAgentId": number.outbound_agent_id,
        "createdAt": number.created_at,
        "updatedAt": number.updated_at,
    }


def outbound_job_to_dict(job: OutboundJob, workspace_name: str | None = None) -> dict[str, Any]:
    return {
        "id": job.id,
        "workspaceId": job.workspace_id,
        "workspaceName": workspace_name,
        "phoneE164": job.phone_e164,
        "leadName": job.lead_name or "",
        "status": job.status,
        "attempts": int(job.attempts or 0),
        "maxAttempts": int(job.max_attempts or 0),
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
    }


def contact_to_admin_dict(contact: Contact, workspace_name: str | None = None) -> dict[str, Any]:
    return {
        "id": contact.id,
        "workspaceId": contact.workspace_id,
        "workspaceName": workspace_name,
        "phoneE164": contact.phone_e164,
        "name": contact.name or "",
        "email": contact.email or "",
        "company": contact.company or "",
        "tags": list(contact.tags or []),
        "totalCalls": int(contact.total_calls or 0),
        "lastCallAt": contact.last_call_at,
        "createdAt": contact.created_at,
        "updatedAt": contact.updated_at,
    }


# ────────────────── Dashboard ──────────────────


def get_dashboard_stats(db: Session) -> dict[str, Any]:
    """Platform-wide totals and call volume for today, the last 7 days and this month."""
    return {
        "totalUsers": _count(db, User),
        "totalWorkspaces": _count(db, Workspace),
        "totalAgents": _count(db, Agent),
        "totalCalls": _count(db, Call),
        "totalOutboundJobs": _count(db, OutboundJob),
        "totalPhoneNumbers": _count(db, PhoneNumber),
        "totalContacts": _count(db, Contact),
        "totalRevenue": _total_revenue(db),
        "paidWorkspaces": _count(db, Workspace, Workspace.is_paid.is_(True)),
        "trialWorkspaces": _count(db, Workspace, Workspace.is_trial.is_(True)),
        "callsToday": _count(db, Call, Call.started_at >= start_of_day_ms()),
        "callsThisWeek": _count(db, Call, Call.started_at >= days_ago_ms(7)),
        "callsThisMonth": _count(db, Call, Call.started_at >= start_of_month_ms()),
    }


# ────────────────── Users ──────────────────


def list_all_users(
    db: Session, *, search: str | None = None, limit: int = DEFAULT_LIMIT, offset: int = 0
) -> list[dict[str, Any]]:
    stmt = select(User)
    if search:
        stmt = stmt.where(or_(_ilike(User.email, search), _ilike(User.name, search)))
    stmt = stmt.order_by(User.created_at.desc()).limit(limit).offset(offset)
    return [user_to_dict(user) for user in db.scalars(stmt).all()]


def get_user_detail(db: Session, user_id: str) -> dict[str, Any] | None:
    """User with their workspaces and the latest calls across them."""
    user = db.get(User, user_id)
    if user is None:
        return None

    rows = db.execute(
        select(Workspace, _agent_count(), _workspace_call_count())
        .where(Workspace.user_id == user_id)
        .order_by(Workspace.created_at.asc())
    ).all()
    workspaces = [
        workspace_to_dict(
            workspace,
            owner_email=user.email,
            owner_name=user.name,
            agent_count=agent_count,
            call_count=call_count,
        )
        for workspace, agent_count, call_count in rows
    ]

    recent_calls: list[dict[str, Any]] = []
    workspace_names = {workspace["id"]: workspace["name"] for workspace in workspaces}
    if workspace_names:
        calls = db.scalars(
            select(Call)
            .options(*_CALL_LIST_OPTIONS)
            .where(Call.workspace_id.in_(list(workspace_names)))
            .order_by(Call.started_at.desc())
            .limit(RECENT_CALLS_LIMIT)
        ).all()
        recent_calls = [call_to_dict(call, workspace_names.get(call.workspace_id)) for call in calls]

    return {"user": user_to_dict(user), "workspaces": workspaces, "recentCalls": recent_calls}


# ────────────────── Workspaces ──────────────────


def _workspace_listing():
    return select(
        Workspace,
        User.email.label("owner_email"),
        User.name.label("owner_name"),
        _agent_count(),
        _workspace_call_count(),
    ).outerjoin(User, User.id == Workspace.user_id)


def _workspace_row_to_dict(row: Any) -> dict[str, Any]:
    workspace, owner_email, owner_name, agent_count, call_count = row
    return workspace_to_dict(
        workspace,
        owner_email=owner_email,
        owner_name=owner_name,
        agent_count=agent_count,
        call_count=call_count,
    )


def list_all_workspaces(
    db: Session,
    *,
    search: str | None = None,
    is_paid: bool | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    stmt = _workspace_listing()
    if search:
        stmt = stmt.where(
            or_(_ilike(Workspace.name, search), _ilike(User.email, search), Workspace.id == search)
        )
    if is_paid is not None:
        stmt = stmt.where(Workspace.is_paid.is_(is_paid))
    stmt = stmt.order_by(Workspace.created_at.desc()).limit(limit).offset(offset)
    return [_workspace_row_to_dict(row) for row in db.execute(stmt).all()]


def get_workspace_detail(db: Session, workspace_id: str) -> dict[str, Any] | None:
    """Workspace with its agents, phone numbers and latest calls."""
    row = db.execute(_workspace_listing().where(Workspace.id == workspace_id)).first()
    if row is None:
        return None
    workspace = _workspace_row_to_dict(row)

    agents = db.scalars(
        select(Agent).where(Agent.workspace_id == workspace_id).order_by(Agent.created_at.desc())
    ).all()
    numbers = db.scalars(
        select(PhoneNumber)
        .where(PhoneNumber.workspace_id == workspace_id)
        .order_by(PhoneNumber.created_at.desc())
    ).all()
    calls = db.scalars(
        select(Call)
        .options(*_CALL_LIST_OPTIONS)
        .where(Call.workspace_id == workspace_id)
        .order_by(Call.started_at.desc())
        .limit(RECENT_CALLS_LIMIT)
    ).all()

    return {
        "workspace": workspace,
        "agents": [agent_summary_to_dict(agent) for agent in agents],
        "phoneNumbers": [phone_number_to_dict(number) for number in numbers],
        "recentCalls": [call_to_dict(call, workspace["name"]) for call in calls],
    }


# ────────────────── Agents ──────────────────


def list_all_agents(
    db: Session,
    *,
    workspace_id: str | None = None,
    search: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    total_calls = (
        select(func.count(Call.id))
        .where(Call.agent_id == Agent.id)
        .correlate(Agent)
        .scalar_subquery()
        .label("total_calls")
    )
    last_call_at = (
        select(func.max(Call.started_at))
        .where(Call.agent_id == Agent.id)
        .correlate(Agent)
        .scalar_subquery()
        .label("last_call_at")
    )
    stmt = select(
        Agent, Workspace.name.label("workspace_name"), total_calls, last_call_at
    ).outerjoin(Workspace, Workspace.id == Agent.workspace_id)
    if workspace_id:
        stmt = stmt.where(Agent.workspace_id == workspace_id)
    if search:
        stmt = stmt.where(or_(_ilike(Agent.name, search), Agent.id == search))
    stmt = stmt.order_by(Agent.created_at.desc()).limit(limit).offset(offset)

    agents = []
    for agent, workspace_name, calls, last_at in db.execute(stmt).all():
        item = agent_summary_to_dict(agent, workspace_name)
        item["totalCalls"] = int(calls or 0)
        item["lastCallAt"] = last_at
        agents.append(item)
    return agents


def get_agent_detail(db: Session, agent_id: str) -> dict[str, Any] | None:
    """Full agent configuration with its latest calls."""
    row = db.execute(
        select(Agent, Workspace.name)
        .outerjoin(Workspace, Workspace.id == Agent.workspace_id)
        .where(Agent.id == agent_id)
    ).first()
    if row is None:
        return None
    agent, workspace_name = row

    calls = db.scalars(
        select(Call)
        .options(*_CALL_LIST_OPTIONS)
        .where(Call.agent_id == agent_id)
        .order_by(Call.started_at.desc())
        .limit(RECENT_CALLS_LIMIT)
    ).all()

    return {
        "agent": {
            "id": agent.id,
            "workspaceId": agent.workspace_id,
            "workspaceName": workspace_name,
            "name": agent.name or "",
            "promptDraft": agent.prompt_draft or "",
            "promptPublished": agent.prompt_published or "",
            "publishedAt": agent.published_at,
            "welcome": agent.welcome or {},
            "voice": agent.voice or {},
            "llmModel": agent.llm_model or "",
            "autoEvalEnabled": bool(agent.auto_eval_enabled),
            "maxCallSeconds": int(agent.max_call_seconds or 0),
            "createdAt": agent.created_at,
            "updatedAt": agent.updated_at,
        },
        "calls": [call_to_dict(call, workspace_name) for call in calls],
    }


# ────────────────── Calls ──────────────────


def list_all_calls(
    db: Session,
    *,
    workspace_id: str | None = None,
    agent_id: str | None = None,
    date_from: int | None = None,
    date_to: int | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    stmt = (
        select(Call, Workspace.name)
        .options(*_CALL_LIST_OPTIONS)
        .outerjoin(Workspace, Workspace.id == Call.workspace_id)
    )
    if workspace_id:
        stmt = stmt.where(Call.workspace_id == workspace_id)
    if agent_id:
        stmt = stmt.where(Call.agent_id == agent_id)
    if date_from is not None:
        stmt = stmt.where(Call.started_at >= date_from)
    if date_to is not None:
        stmt = stmt.where(Call.started_at <= date_to)
    stmt = stmt.order_by(Call.started_at.desc()).limit(limit).offset(offset)
    return [call_to_dict(call, workspace_name) for call, workspace_name in db.execute(stmt).all()]


def get_call_detail(db: Session, call_id: str) -> dict[str, Any] | None:
    """Call record including transcript, recording and metrics."""
    row = db.execute(
        select(Call, Workspace.name)
        .outerjoin(Workspace, Workspace.id == Call.workspace_id)
        .where(Call.id == call_id)
    ).first()
    if row is None:
        return None
    call, workspace_name = row

    detail = call_to_dict(call, workspace_name)
    detail["transcript"] = call.transcript or []
    detail["recording"] = call.recording
    detail["metrics"] = call.metrics
    return detail


# ────────────────── Outbound jobs, phone numbers, contacts ──────────────────


def list_all_outbound_jobs(
    db: Session,
    *,
    workspace_id: str | None = None,
    status: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    stmt = select(OutboundJob, Workspace.name).outerjoin(
        Workspace, Workspace.id == OutboundJob.workspace_id
    )
    if workspace_id:
        stmt = stmt.where(OutboundJob.workspace_id == workspace_id)
    if status:
        stmt = stmt.where(OutboundJob.status == status)
    stmt = stmt.order_by(OutboundJob.created_at.desc()).limit(limit).offset(offset)
    return [outbound_job_to_dict(job, name) for job, name in db.execute(stmt).all()]


def list_all_phone_numbers(
    db: Session, *, workspace_id: str | None = None, limit: int = DEFAULT_LIMIT, offset: int = 0
) -> list[dict[str, Any]]:
    stmt = select(PhoneNumber, Workspace.name).outerjoin(
        Workspace, Workspace.id == PhoneNumber.workspace_id
    )
    if workspace_id:
        stmt = stmt.where(PhoneNumber.workspace_id == workspace_id)
    stmt = stmt.order_by(PhoneNumber.created_at.desc()).limit(limit).offset(offset)
    return [phone_number_to_dict(number, name) for number, name in db.execute(stmt).all()]


def list_all_contacts(
    db: Session,
    *,
    workspace_id: str | None = None,
    search: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    stmt = select(Contact, Workspace.name).outerjoin(
        Workspace, Workspace.id == Contact.workspace_id
    )
    if workspace_id:
        stmt = stmt.where(Contact.workspace_id == workspace_id)
    if search:
        stmt = stmt.where(
            or_(
                _ilike(Contact.name, search),
                _ilike(Contact.phone_e164, search),
                _ilike(Contact.email, search),
            )
        )
    stmt = stmt.order_by(Contact.created_at.desc()).limit(limit).offset(offset)
    return [contact_to_admin_dict(contact, name) for contact, name in db.execute(stmt).all()]


# ────────────────── Billing ──────────────────


def get_billing_overview(db: Session) -> dict[str, Any]:
    """Paid/trial split, revenue and the Stripe linkage of every workspace."""
    rows = db.execute(
        select(Workspace, User.email)
        .outerjoin(User, User.id == Workspace.user_id)
        .order_by(Workspace.is_paid.desc(), Workspace.created_at.desc())
    ).all()

    workspace_billing = [
        {
            "workspaceId": workspace.id,
            "workspaceName": workspace.name or "",
            "ownerEmail": owner_email,
            "isPaid": bool(workspace.is_paid),
            "isTrial": bool(workspace.is_trial),
            "trialCreditUsd": float(workspace.trial_credit_usd or 0),
            "stripeCustomerId": workspace.stripe_customer_id,
            "stripeSubscriptionId": workspace.stripe_subscription_id,
        }
        for workspace, owner_email in rows
    ]

    return {
        "paidWorkspaces": sum(1 for item in workspace_billing if item["isPaid"]),
        "trialWorkspaces": sum(1 for item in workspace_billing if item["isTrial"]),
        "totalRevenue": _total_revenue(db),
        "stripeSubscriptions": sum(1 for item in workspace_billing if item["stripeSubscriptionId"]),
        "workspaceBilling": workspace_billing,
    }
