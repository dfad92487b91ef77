"""
Contacts routes for the CRM service.
Every route is scoped to the authenticated caller's workspace.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from src.api.auth import CrmPrincipal, require_crm_auth
from src.core.config import Settings, get_settings
from src.core.database import get_db
from src.core.logging import get_logger
from src.models import Contact
from src.services.contacts import backfill, store
from src.services.contacts.csv_import import parse_contacts_csv
from src.services.contacts.errors import ContactError
from src.services.contacts.schemas import (
    CamelModel,
    ContactCreate,
    ContactPatch,
    ContactResponse,
    ContactSource,
)

logger = get_logger(__name__)

router = APIRouter()


# Request/Response models
class ContactEnvelope(BaseModel):
    """Single contact response."""

    contact: ContactResponse


class ContactListResponse(BaseModel):
    """Contact listing response."""

    contacts: list[ContactResponse]


class ImportRequest(BaseModel):
    """CSV text uploaded from the dashboard."""

    csv: str = Field(..., description="CSV text with a header row")


class ImportResponse(BaseModel):
    """Result of a CSV import."""

    imported: int
    total: int
    skipped: int
    contacts: list[ContactResponse]


class BackfillResponse(BaseModel):
    """Result of a backfill pass."""

    created: int
    updated: int


class UpsertFromCallRequest(CamelModel):
    """Call event reported by the calling platform."""

    phone_e164: str
    name: str | None = None
    source: ContactSource | None = None


def _bad_request(error: ContactError) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": error.code, "message": str(error)})


def _owned_contact(db: Session, principal: CrmPrincipal, contact_id: str) -> Contact:
    """Contact by id; another workspace's contact is reported as missing."""
    contact = store.get_contact(db, contact_id)
    if contact is None or contact.workspace_id != principal.workspace_id:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.get("/contacts", response_model=ContactListResponse)
def list_contacts(
    search: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    source: str | None = Query(default=None),
    limit: int = Query(default=store.DEFAULT_LIST_LIMIT, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ContactListResponse:
    """List the workspace's contacts, most recently called first."""
    contacts = store.list_contacts(
        db,
        principal.workspace_id,
        search=search,
        tag=tag,
        source=source,
        limit=limit,
        offset=offset,
    )
    return ContactListResponse(contacts=[ContactResponse.from_contact(c) for c in contacts])


@router.get("/contacts/{contact_id}", response_model=ContactEnvelope)
def get_contact(
    contact_id: str,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ContactEnvelope:
    """Get a single contact."""
    contact = _owned_contact(db, principal, contact_id)
    return ContactEnvelope(contact=ContactResponse.from_contact(contact))


@router.post("/contacts", response_model=ContactEnvelope)
def create_contact(
    request: ContactCreate,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ContactEnvelope:
    """
    Create a contact, merging into the existing one if the phone number is known.

    Fields sent in the request replace stored values; omitted fields are kept.
    """
    try:
        contact = store.create_contact(db, principal.workspace_id, request)
    except ContactError as e:
        raise _bad_request(e)
    return ContactEnvelope(contact=ContactResponse.from_contact(contact))


@router.put("/contacts/{contact_id}", response_model=ContactEnvelope)
def update_contact(
    contact_id: str,
    patch: ContactPatch,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ContactEnvelope:
    """Partially update a contact. Only fields present in the body change."""
    _owned_contact(db, principal, contact_id)
    contact = store.update_contact(db, contact_id, patch)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return ContactEnvelope(contact=ContactResponse.from_contact(contact))


@router.delete("/contacts/{contact_id}")
def delete_contact(
    contact_id: str,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Permanently delete a contact."""
    _owned_contact(db, principal, contact_id)
    store.delete_contact(db, contact_id)
    return {"ok": True}


@router.post("/contacts/import", response_model=ImportResponse)
def import_contacts(
    request: ImportRequest,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ImportResponse:
    """
    Import contacts from CSV.

    Rows with a missing or invalid phone are skipped before the insert; rows
    whose phone the workspace already has are left untouched.
    `total` counts the rows with a valid phone, `imported` the rows inserted.
    """
    try:
        parsed = parse_contacts_csv(request.csv)
    except ContactError as e:
        raise _bad_request(e)

    logger.info(
        f"CSV import for workspace {principal.workspace_id}: "
        f"{parsed.total} valid rows, {parsed.skipped} skipped"
    )
    inserted = store.bulk_create_contacts(db, principal.workspace_id, parsed.rows)

    return ImportResponse(
        imported=len(inserted),
        total=parsed.total,
        skipped=parsed.skipped,
        contacts=[ContactResponse.from_contact(c) for c in inserted],
    )


@router.post("/contacts/backfill", response_model=BackfillResponse)
def backfill_contacts(
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> BackfillResponse:
    """Create or update contacts from the workspace's call history."""
    result = backfill.backfill_contacts_from_calls(
        db, principal.workspace_id, test_call_sentinel=settings.test_call_sentinel
    )
    return BackfillResponse(created=result.created, updated=result.updated)


@router.post("/contacts/upsert-from-call", response_model=ContactEnvelope)
def upsert_from_call(
    request: UpsertFromCallRequest,
    principal: CrmPrincipal = Depends(require_crm_auth),
    db: Session = Depends(get_db),
) -> ContactEnvelope:
    """
    Record a call against the contact for a phone number.

    Used by the calling platform after each inbound/outbound call.
    """
    try:
        contact = store.upsert_contact_from_call(
            db, principal.workspace_id, request.phone_e164, request.name, request.source
        )
    except ContactError as e:
        raise _bad_request(e)
    return ContactEnvelope(contact=ContactResponse.from_contact(contact))
