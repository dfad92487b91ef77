"""
Errors raised by the contacts service layer.
Routers translate these into 400 responses.
"""


class ContactError(Exception):
    """Base class for contact validation errors."""

    code = "contact_error"


class InvalidPhoneNumberError(ContactError):
    """Phone number is not a valid E.164 number."""

    code = "invalid_phone"

    def __init__(self, phone: str | None) -> None:
        self.phone = phone
        super().__init__(f"Invalid phone number {phone!r}: expected E.164 format like +14155550123")


class CsvImportError(ContactError):
    """CSV payload cannot be imported at all (no header, no phone column)."""

    code = "invalid_csv"
