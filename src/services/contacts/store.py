"""
Contact store: find-or-create and merge of contacts keyed by (workspace, phone).

This module handles:
- Authoritative merge on explicit creation (present fields replace stored ones)
- Best-effort enrichment from call events (never overwrite a non-empty name)
- Tri-state partial updates
- CSV batch inserts that skip existing numbers instead of merging

Every find-or-create is a single PostgreSQL INSERT ... ON CONFLICT statement,
so concurrent calls for a brand-new number cannot produce two rows.
"""

from sqlalchemy import String, and_, case, delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.ids import generate_id
from src.core.logging import get_logger
from src.core.timeutils import now_ms
from src.models.contact import Contact
from src.services.contacts.errors import InvalidPhoneNumberError
from src.services.contacts.phone import is_valid_e164
from src.services.contacts.schemas import ContactCreate, ContactPatch

logger = get_logger(__name__)

CONFLICT_KEY = ["workspace_id", "phone_e164"]
DEFAULT_LIST_LIMIT = 100


def create_contact(db: Session, workspace_id: str, data: ContactCreate) -> Contact:
    """
    Create a contact, or merge into the existing one for the same phone.

    Fields present in ``data`` replace the stored values; omitted fields keep
    whatever the existing contact has. A new row gets defaults for omitted fields.

    Args:
        db: Database session
        workspace_id: Owning workspace
        data: Contact fields; phone_e164 is required

    Returns:
        The created or merged contact

    Raises:
        InvalidPhoneNumberError: phone_e164 is not valid E.164
    """
    if not is_valid_e164(data.phone_e164):
        raise InvalidPhoneNumberError(data.phone_e164)

    now = now_ms()
    stmt = insert(Contact).values(
        id=generate_id(),
        workspace_id=workspace_id,
        phone_e164=data.phone_e164,
        created_at=now,
        updated_at=now,
        **data.insert_values(),
    )
    merge = {field: stmt.excluded[field] for field in data.merge_fields()}
    merge["updated_at"] = now
    stmt = stmt.on_conflict_do_update(index_elements=CONFLICT_KEY, set_=merge).returning(Contact)

    contact = db.scalars(stmt, execution_options={"populate_existing": True}).one()
    db.commit()
    logger.info(f"Saved contact {contact.id} in workspace {workspace_id}")
    return contact


def get_contact(db: Session, contact_id: str) -> Contact | None:
    """Fetch a contact by id."""
    return db.get(Contact, contact_id)


def get_contact_by_phone(db: Session, workspace_id: str, phone_e164: str) -> Contact | None:
    """Fetch the contact for a phone number within a workspace."""
    return db.scalars(
        select(Contact).where(
            Contact.workspace_id == workspace_id,
            Contact.phone_e164 == phone_e164,
        )
    ).one_or_none()


def list_contacts(
    db: Session,
    workspace_id: str,
    *,
    search: str | None = None,
    tag: str | None = None,
    source: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
    offset: int = 0,
) -> list[Contact]:
    """
    List a workspace's contacts, most recently called first.

    Args:
        db: Database session
        workspace_id: Workspace to list
        search: Case-insensitive substring matched against name, phone and email
        tag: Only contacts carrying this tag
        source: Only contacts with this source
        limit: Page size
        offset: Rows to skip

    Returns:
        Matching contacts
    """
    stmt = select(Contact).where(Contact.workspace_id == workspace_id)

    if search:
        needle = search.lower()
        stmt = stmt.where(
            or_(
                func.lower(Contact.name, type_=String).contains(needle, autoescape=True),
                func.lower(Contact.phone_e164, type_=String).contains(needle, autoescape=True),
                func.lower(Contact.email, type_=String).contains(needle, autoescape=True),
            )
        )

    if tag:
        stmt = stmt.where(Contact.tags.any(tag))

    if source:
        stmt = stmt.where(Contact.source == source)

    stmt = (
        stmt.order_by(Contact.last_call_at.desc().nulls_last(), Contact.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt).all())


def update_contact(db: Session, contact_id: str, patch: ContactPatch) -> Contact | None:
    """
    Apply a partial update.

    Only fields present in the patch are written. A patch with no recognized
    fields returns the contact untouched (updated_at not advanced).

    Returns:
        Updated contact, or None if the id does not exist
    """
    contact = db.get(Contact, contact_id)
    if contact is None:
        return None

    changes = patch.changes()
    if not changes:
        return contact

    for field, value in changes.items():
        setattr(contact, field, value)
    contact.updated_at = now_ms()

    db.commit()
    logger.info(f"Updated contact {contact_id}: {sorted(changes)}")
    return contact


def delete_contact(db: Session, contact_id: str) -> bool:
    """
    Hard-delete a contact.

    Returns:
        True if a row was removed
    """
    result = db.execute(delete(Contact).where(Contact.id == contact_id))
    db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Deleted contact {contact_id}")
    return deleted


def upsert_contact_from_call(
    db: Session,
    workspace_id: str,
    phone_e164: str,
    name: str | None = None,
    source: str | None = None,
    *,
    commit: bool = True,
) -> Contact:
    """
    Record a call against the contact for a phone number, creating it if needed.

    New contact: total_calls=1, last_call_at=now, name=name or "",
    source=source or "inbound".
    Existing contact: total_calls += 1, last_call_at=now, and the name is filled
    in only when the stored name is empty. Other fields are left alone.

    Args:
        db: Database session
        workspace_id: Owning workspace
        phone_e164: Normalized phone number
        name: Display name derived from call or lead data
        source: Contact source for a newly created contact
        commit: Commit the session after the upsert

    Returns:
        The created or updated contact

    Raises:
        InvalidPhoneNumberError: phone_e164 is not valid E.164
    """
    if not is_valid_e164(phone_e164):
        raise InvalidPhoneNumberError(phone_e164)

    now = now_ms()
    stmt = insert(Contact).values(
        id=generate_id(),
        workspace_id=workspace_id,
        phone_e164=phone_e164,
        name=name or "",
        email="",
        company="",
        tags=[],
        notes="",
        source=source or "inbound",
        meta={},
        total_calls=1,
        last_call_at=now,
        last_call_outcome="",
        created_at=now,
        updated_at=now,
    )
    stored_name = func.coalesce(Contact.name, "")
    stmt = stmt.on_conflict_do_update(
        index_elements=CONFLICT_KEY,
        set_={
            "total_calls": Contact.total_calls + 1,
            "last_call_at": now,
            "name": case(
                (and_(stored_name == "", stmt.excluded["name"] != ""), stmt.excluded["name"]),
                else_=Contact.name,
            ),
            "updated_at": now,
        },
    ).returning(Contact)

    contact = db.scalars(stmt, execution_options={"populate_existing": True}).one()
    if commit:
        db.commit()
    return contact


def record_call_on_contact(
    db: Session, contact_id: str, called_at: int | None, outcome: str | None
) -> None:
    """Count one more call on an existing contact and overwrite its last-call fields."""
    db.execute(
        update(Contact)
        .where(Contact.id == contact_id)
        .values(
            total_calls=Contact.total_calls + 1,
            last_call_at=called_at,
            last_call_outcome=outcome or "",
            updated_at=now_ms(),
        )
        .execution_options(synchronize_session=False)
    )


def bulk_create_contacts(
    db: Session, workspace_id: str, rows: list[ContactCreate]
) -> list[Contact]:
    """
    Insert imported contacts, skipping phone numbers the workspace already has.

    Each row runs in its own savepoint: a row that fails is logged and skipped,
    the rest of the batch still goes in.

    Returns:
        Contacts actually inserted
    """
    now = now_ms()
    inserted: list[Contact] = []

    for row in rows:
        values = row.insert_values()
        values["source"] = "import"
        stmt = (
            insert(Contact)
            .values(
                id=generate_id(),
                workspace_id=workspace_id,
                phone_e164=row.phone_e164,
                created_at=now,
                updated_at=now,
                **values,
            )
            .on_conflict_do_nothing(index_elements=CONFLICT_KEY)
            .returning(Contact)
        )

        try:
            with db.begin_nested():
                contact = db.scalars(stmt).one_or_none()
        except SQLAlchemyError as e:
            logger.warning(f"Skipped import row {row.phone_e164}: {str(e)}")
            continue

        if contact is not None:
            inserted.append(contact)

    db.commit()
    logger.info(
        f"Imported {len(inserted)}/{len(rows)} contacts into workspace {workspace_id}"
    )
    return inserted
