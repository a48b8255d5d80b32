"""
Contact record shapes shared by the customer lookup services.

Both sources are read into ``RawContact`` through an explicit
constructor per source shape, and every surviving record is turned
into one ``CanonicalContact`` by ``normalize_contact()``.  Nothing in
the pipeline inspects source-specific keys after construction.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# Source discriminators.
SOURCE_PRIMARY_STORE = "primary_store"
SOURCE_DIRECTORY = "directory"


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are assumed to already be UTC.

        2026-10-19 14:03:07.512000+00:00 → 2026-10-19T14:03:07.512Z
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RawContact:
    """A contact as sighted in one source, before normalization."""

    source: str
    id: Any = None
    contact_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_added: str | None = None

    @property
    def dedupe_key(self) -> str:
        """String-coerced id; a missing id coerces to ``""``."""
        return "" if self.id is None else str(self.id)

    @classmethod
    def from_store_row(cls, row) -> "RawContact":
        """Build from a ``contacts`` table row (snake_case columns)."""
        date_added = row.date_added
        if isinstance(date_added, datetime):
            date_added = format_timestamp(date_added)

        return cls(
            source=SOURCE_PRIMARY_STORE,
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            phone=row.phone,
            date_added=date_added,
        )

    @classmethod
    def from_directory(cls, record: dict[str, Any]) -> "RawContact":
        """Build from one entry of a directory page (camelCase keys)."""
        return cls(
            source=SOURCE_DIRECTORY,
            id=record.get("id"),
            contact_name=record.get("contactName"),
            first_name=record.get("firstName"),
            last_name=record.get("lastName"),
            phone=record.get("phone"),
            date_added=record.get("dateAdded"),
        )


@dataclass(frozen=True)
class CanonicalContact:
    """The single contact shape returned to API callers."""

    id: str
    contact_name: str
    first_name: str
    last_name: str
    phone: str | None
    date_added: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the dashboard expects."""
        return {
            "id": self.id,
            "contactName": self.contact_name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "dateAdded": self.date_added,
        }


def normalize_contact(
    raw: RawContact,
    now: datetime | None = None,
) -> CanonicalContact:
    """
    Map a ``RawContact`` into the canonical contact shape.

    ``contact_name`` falls back to ``"first last"`` (trimmed) when the
    source has no composed name.  ``date_added`` falls back to ``now``,
    which defaults to the current UTC time.

    Args:
        raw: The contact to normalize.
        now: Timestamp used for a missing ``date_added``.

    Returns:
        The canonical contact.
    """
    first_name = raw.first_name or ""
    last_name = raw.last_name or ""
    contact_name = raw.contact_name or f"{first_name} {last_name}".strip()

    date_added = raw.date_added
    if not date_added:
        date_added = format_timestamp(now or datetime.now(timezone.utc))

    return CanonicalContact(
        id=raw.dedupe_key,
        contact_name=contact_name,
        first_name=first_name,
        last_name=last_name,
        phone=raw.phone,
        date_added=date_added,
    )
