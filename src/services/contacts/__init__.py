"""Contact identity and merge: one contact per (workspace, phone number)."""

from src.services.contacts.backfill import BackfillResult, backfill_contacts_from_calls
from src.services.contacts.csv_import import CsvParseResult, parse_contacts_csv

__all__ = [
    "BackfillResult",
    "backfill_contacts_from_calls",
    "CsvParseResult",
    "parse_contacts_csv",
]
