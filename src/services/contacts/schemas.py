"""
Input and output shapes for contacts.

Request bodies arrive in camelCase (phoneE164, lastCallAt, ...). Presence of a
field is tracked by pydantic in model_fields_set, which is what separates
"omitted" from "explicitly set to an empty value".
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.contact import Contact

ContactSource = Literal["manual", "inbound", "outbound", "import"]

# Value stored when a field is sent as null or never set on a new row
FIELD_DEFAULTS: dict[str, Any] = {
    "name": "",
    "email": "",
    "company": "",
    "tags": [],
    "notes": "",
    "source": "manual",
    "meta": {},
    "total_calls": 0,
    "last_call_at": None,
    "last_call_outcome": "",
}

MERGE_FIELDS = ("name", "email", "company", "tags", "notes", "source", "meta")

PATCH_FIELDS = MERGE_FIELDS + ("total_calls", "last_call_at", "last_call_outcome")


def field_default(field: str) -> Any:
    """Default for a contact column, with a fresh list/dict each call."""
    default = FIELD_DEFAULTS.get(field)
    if isinstance(default, (list, dict)):
        return type(default)()
    return default


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactFields(CamelModel):
    """Descriptive contact fields shared by create and patch bodies."""

    name: str | None = None
    email: str | None = None
    company: str | None = None
    tags: list[str] | None = None
    notes: str | None = None
    source: ContactSource | None = None
    meta: dict[str, Any] | None = Field(default=None, alias="metadata")

    def provided_fields(self, fields: tuple[str, ...]) -> dict[str, Any]:
        """
        Map each explicitly provided field to the value to store.

        A field sent as null stores its default (empty string, empty list, ...).
        """
        changes: dict[str, Any] = {}
        for field in fields:
            if field not in self.model_fields_set:
                continue
            value = getattr(self, field)
            changes[field] = field_default(field) if value is None else value
        return changes


class ContactCreate(ContactFields):
    """Explicit creation of a contact by an operator (or one CSV row)."""

    phone_e164: str = Field(..., description="E.164 phone number, e.g. +14155550123")

    def merge_fields(self) -> dict[str, Any]:
        """Fields that replace the stored values when the phone already exists."""
        return self.provided_fields(MERGE_FIELDS)

    def insert_values(self) -> dict[str, Any]:
        """Column values for a brand-new row."""
        values = {field: field_default(field) for field in MERGE_FIELDS}
        values.update(self.merge_fields())
        return values


class ContactPatch(ContactFields):
    """
    Partial update of a contact.
    Only fields present in the request are written; phone_e164 is never patchable.
    """

    total_calls: int | None = Field(default=None, ge=0)
    last_call_at: int | None = None
    last_call_outcome: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.provided_fields(PATCH_FIELDS)


class ContactResponse(CamelModel):
    """Contact as returned to the dashboards."""

    id: str
    workspace_id: str
    phone_e164: str
    name: str
    email: str
    company: str
    tags: list[str]
    notes: str
    source: str
    total_calls: int
    last_call_at: int | None
    last_call_outcome: str
    meta: dict[str, Any] = Field(alias="metadata")
    created_at: int
    updated_at: int

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactResponse":
        return cls(
            id=contact.id,
            workspace_id=contact.workspace_id,
            phone_e164=contact.phone_e164,
            name=contact.name or "",
            email=contact.email or "",
            company=contact.company or "",
            tags=list(contact.tags or []),
            notes=contact.notes or "",
            source=contact.source or "manual",
            total_calls=int(contact.total_calls or 0),
            last_call_at=contact.last_call_at,
            last_call_outcome=contact.last_call_outcome or "",
            meta=contact.meta or {},
            created_at=contact.created_at,
            updated_at=contact.updated_at,
        )
