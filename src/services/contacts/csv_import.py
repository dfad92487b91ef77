"""
CSV parsing for contact imports.

Recognized headers (case-insensitive): phone / phone_e164 / phonee164 (required),
name, email, company, tags (semicolon-separated). Rows whose phone is missing
or not valid E.164 after cleaning are dropped here and never reach the store.
"""

import csv
import io
from dataclasses import dataclass, field

from src.services.contacts.errors import CsvImportError
from src.services.contacts.phone import normalize_phone
from src.services.contacts.schemas import ContactCreate

PHONE_COLUMNS = ("phone", "phone_e164", "phonee164")
TEXT_COLUMNS = ("name", "email", "company")


@dataclass
class CsvParseResult:
    """Rows ready for the store plus the number of data rows dropped."""

    rows: list[ContactCreate] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        """Rows that passed phone validation."""
        return len(self.rows)


def parse_tags(value: str | None) -> list[str]:
    """Split a semicolon-separated tag cell."""
    if not value:
        return []
    return [tag.strip() for tag in value.split(";") if tag.strip()]


def _header_index(header: list[str]) -> dict[str, int]:
    index: dict[str, int] = {}
    for position, column in enumerate(header):
        key = column.strip().lstrip("\ufeff").lower()
        if key and key not in index:
            index[key] = position
    return index


def parse_contacts_csv(text: str) -> CsvParseResult:
    """
    Parse an uploaded CSV into contact rows.

    Args:
        text: Full CSV text including the header row

    Returns:
        Parsed rows and the count of rows skipped for a bad phone

    Raises:
        CsvImportError: empty input or no phone column in the header
    """
    reader = csv.reader(io.StringIO(text or ""))
    header = next(reader, None)
    if not header:
        raise CsvImportError("CSV is empty: a header row is required")

    columns = _header_index(header)
    phone_column = next((columns[name] for name in PHONE_COLUMNS if name in columns), None)
    if phone_column is None:
        raise CsvImportError(
            f"CSV header must include a phone column ({', '.join(PHONE_COLUMNS)})"
        )

    def cell(record: list[str], position: int | None) -> str:
        if position is None or position >= len(record):
            return ""
        return record[position].strip()

    result = CsvParseResult()
    for record in reader:
        if not any(value.strip() for value in record):
            continue  # blank line

        phone = normalize_phone(cell(record, phone_column))
        if phone is None:
            result.skipped += 1
            continue

        values: dict[str, object] = {"phone_e164": phone}
        for name in TEXT_COLUMNS:
            if name in columns:
                values[name] = cell(record, columns[name])
        if "tags" in columns:
            values["tags"] = parse_tags(cell(record, columns["tags"]))

        result.rows.append(ContactCreate(**values))

    return result
