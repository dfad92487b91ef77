"""
Backfill contacts from historical calls.

A maintenance pass: every call of a workspace is folded into the contact for
the dialed number. Calls are processed in the order the database returns them
and each one overwrites last_call_at / last_call_outcome on an existing
contact, so the stored values come from the last call processed rather than
the chronologically latest one.
"""

from dataclasses import asdict, dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.logging import get_logger
from src.models.call import Call
from src.models.outbound_job import OutboundJob
from src.services.contacts import store
from src.services.contacts.phone import normalize_phone

logger = get_logger(__name__)

DEFAULT_TEST_CALL_SENTINEL = "webtest"


@dataclass
class BackfillResult:
    """Distinct contacts created and updated by one backfill pass."""

    created: int = 0
    updated: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def call_phone(to_number: str | None, test_call_sentinel: str = DEFAULT_TEST_CALL_SENTINEL) -> str | None:
    """E.164 number a call was placed to, or None for test calls and junk values."""
    if not to_number or to_number.strip() == test_call_sentinel:
        return None
    return normalize_phone(to_number)


def longest_lead_names(db: Session, workspace_id: str) -> dict[str, str]:
    """
    Best display name per phone from the workspace's outbound jobs.

    The longest lead name seen for a phone wins; on equal length the first one is kept.
    """
    rows = db.execute(
        select(OutboundJob.phone_e164, OutboundJob.lead_name).where(
            OutboundJob.workspace_id == workspace_id
        )
    ).all()

    names: dict[str, str] = {}
    for phone, lead_name in rows:
        candidate = (lead_name or "").strip()
        if phone and len(candidate) > len(names.get(phone, "")):
            names[phone] = candidate
    return names


def backfill_contacts_from_calls(
    db: Session,
    workspace_id: str,
    test_call_sentinel: str = DEFAULT_TEST_CALL_SENTINEL,
) -> BackfillResult:
    """
    Reconcile a workspace's call history into contacts.

    Args:
        db: Database session
        workspace_id: Workspace to backfill
        test_call_sentinel: `to` value used by dashboard test calls

    Returns:
        Counts of newly created and updated contacts
    """
    lead_names = longest_lead_names(db, workspace_id)
    calls = db.execute(
        select(Call.id, Call.to_number, Call.started_at, Call.outcome).where(
            Call.workspace_id == workspace_id
        )
    ).all()

    created: set[str] = set()
    updated: set[str] = set()

    for call in calls:
        phone = call_phone(call.to_number, test_call_sentinel)
        if phone is None:
            continue

        try:
            with db.begin_nested():
                existing = store.get_contact_by_phone(db, workspace_id, phone)
                if existing is None:
                    store.upsert_contact_from_call(
                        db,
                        workspace_id,
                        phone,
                        lead_names.get(phone, ""),
                        "outbound",
                        commit=False,
                    )
                    created.add(phone)
                else:
                    store.record_call_on_contact(db, existing.id, call.started_at, call.outcome)
                    if phone not in created:
                        updated.add(phone)
        except SQLAlchemyError as e:
            logger.warning(f"Backfill skipped call {call.id} in workspace {workspace_id}: {str(e)}")
            continue

    db.commit()

    result = BackfillResult(created=len(created), updated=len(updated))
    logger.info(
        f"Backfilled workspace {workspace_id} from {len(calls)} calls: "
        f"{result.created} created, {result.updated} updated"
    )
    return result
