"""
Contact store service — best-effort lookup in the primary store.

The primary store only holds a subset of customers, and the external
directory scan always runs afterwards, so this lookup never raises.
A query failure is logged and reported as a degraded lookup with no
contacts; a disabled store simply returns no contacts.
"""

import logging
from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from opsboard.extensions import db
from opsboard.models.contact import Contact
from opsboard.services.contact_records import RawContact

logger = logging.getLogger(__name__)


@dataclass
class StoreLookup:
    """Contacts found in the primary store and whether the query failed."""

    contacts: list[RawContact] = field(default_factory=list)
    degraded: bool = False


def find_by_phone_suffix(digits: str, limit: int | None = None) -> StoreLookup:
    """
    Find contacts whose stored phone ends with ``digits``.

    Uses a loose ``phone LIKE '%NNNN'`` predicate, so formatted numbers
    such as ``555-000-1234`` match but ``1234 ext. 9`` does not.  The
    caller re-checks every row against the normalized digits.

    Args:
        digits: The validated digit key (digits only).
        limit:  Row cap; defaults to ``CONTACT_STORE_ROW_LIMIT``.

    Returns:
        A ``StoreLookup`` with at most ``limit`` contacts.
    """
    if not current_app.config.get("CONTACT_STORE_ENABLED", False):
        logger.debug("Contact store disabled — skipping primary lookup")
        return StoreLookup()

    if limit is None:
        limit = current_app.config.get("CONTACT_STORE_ROW_LIMIT", 50)

    query = (
        db.select(Contact)
        .where(Contact.phone.like(f"%{digits}"))
        .limit(limit)
    )

    try:
        rows = db.session.execute(query).scalars().all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Contact store lookup for *%s failed: %s", digits, exc)
        return StoreLookup(degraded=True)

    contacts = [RawContact.from_store_row(row) for row in rows]
    logger.debug("Contact store returned %d row(s) for *%s", len(contacts), digits)
    return StoreLookup(contacts=contacts)
