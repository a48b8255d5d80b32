"""
Customer search service — lookup by the last four digits of a phone.

Customers are held in two independent places: the primary contact
store (a subset, queried with a loose suffix match) and the external
CRM directory (the broader source, scanned page by page without a
filter).  A search always consults both:

    1. ``parse_search_params`` validates ``digits`` and clamps ``pages``
       before any I/O happens.
    2. ``contact_store.find_by_phone_suffix`` runs first.
    3. ``DirectoryApiClient.scan`` always runs afterwards, even if the
       store already found matches.
    4. ``merge_and_dedupe`` keeps contacts whose normalized phone ends
       with the exact digits and drops repeated ids (first sighting
       wins: store rows, then directory pages in fetch order).
    5. ``normalize_contact`` shapes each survivor.

A failed store query or directory page degrades the result instead of
failing the search.  The degraded sources are carried on
``SearchResult`` for logging and the CLI; the HTTP response does not
expose them.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from flask import current_app

from opsboard.services import contact_store
from opsboard.services.contact_records import (
    SOURCE_DIRECTORY,
    SOURCE_PRIMARY_STORE,
    CanonicalContact,
    RawContact,
    normalize_contact,
)
from opsboard.services.directory_client import DirectoryApiClient
from opsboard.services.errors import SearchValidationError
from opsboard.services.phone import SUFFIX_LENGTH, digits_only, last_digits

logger = logging.getLogger(__name__)

INVALID_DIGITS_MESSAGE = "Invalid digits. Provide exactly 4 digits."

# Lowest page ceiling; the upper bound comes from CUSTOMER_SEARCH_MAX_PAGES.
MIN_PAGES = 1

# Plain decimal numbers only; rejects "2_0", "1e1", "inf" and "nan".
_PAGES_PATTERN = re.compile(r"^[+-]?[0-9]+(\.[0-9]+)?$")


# =========================================================================
# Data classes
# =========================================================================


@dataclass(frozen=True)
class SearchParams:
    """Validated search request."""

    digits: str
    pages: int


@dataclass
class SearchResult:
    """
    Outcome of one search.

    ``degraded_sources`` names each source whose failure was absorbed;
    an empty list means both sources answered in full.
    """

    digits: str
    contacts: list[CanonicalContact] = field(default_factory=list)
    degraded_sources: list[str] = field(default_factory=list)
    pages_fetched: int = 0

    @property
    def is_partial(self) -> bool:
        return bool(self.degraded_sources)

    def to_response(self) -> dict:
        """Collapse into the public ``{ok, results}`` body."""
        return {"ok": True, "results": [c.to_dict() for c in self.contacts]}


# =========================================================================
# Request validation
# =========================================================================


def _parse_pages(raw, default: int, maximum: int) -> int:
    """Clamp ``raw`` into ``[1, maximum]``; non-numeric means ``default``."""
    if raw is None:
        return default
    text = str(raw).strip()
    if not _PAGES_PATTERN.match(text):
        return default
    return max(MIN_PAGES, min(maximum, int(float(text))))


def parse_search_params(args: Mapping) -> SearchParams:
    """
    Validate raw query parameters.

    ``digits`` is reduced to its digit characters and must then be
    exactly four digits.  ``pages`` is clamped to
    ``[1, CUSTOMER_SEARCH_MAX_PAGES]`` and falls back to
    ``CUSTOMER_SEARCH_DEFAULT_PAGES`` when absent or non-numeric.

    Args:
        args: Query mapping (e.g. ``request.args``).

    Returns:
        The validated ``SearchParams``.

    Raises:
        SearchValidationError: If ``digits`` is not exactly 4 digits.
    """
    digits = digits_only(args.get("digits"))
    if len(digits) != SUFFIX_LENGTH:
        raise SearchValidationError(INVALID_DIGITS_MESSAGE)

    pages = _parse_pages(
        args.get("pages"),
        default=current_app.config.get("CUSTOMER_SEARCH_DEFAULT_PAGES", 10),
        maximum=current_app.config.get("CUSTOMER_SEARCH_MAX_PAGES", 20),
    )
    return SearchParams(digits=digits, pages=pages)


# =========================================================================
# Merge & dedup
# =========================================================================


def merge_and_dedupe(
    digits: str,
    *streams: Iterable[RawContact],
) -> list[RawContact]:
    """
    Union contact streams, keep exact suffix matches, drop repeated ids.

    Streams are consumed in the order given.  A contact survives only
    if the last four digits of its phone equal ``digits``; the store's
    ``LIKE`` match and the unfiltered directory are both re-checked
    here.  On a repeated id the first sighting is kept unchanged.
    Contacts without an id share the ``""`` key, so at most one of them
    survives.

    Args:
        digits:  The validated 4-digit key.
        streams: ``RawContact`` iterables, in priority order.

    Returns:
        Matching contacts in first-occurrence order.
    """
    merged: dict[str, RawContact] = {}

    for stream in streams:
        for contact in stream:
            if last_digits(contact.phone, len(digits)) != digits:
                continue
            key = contact.dedupe_key
            if key in merged:
                logger.debug(
                    "Dropping duplicate contact id=%r from %s", key, contact.source
                )
                continue
            merged[key] = contact

    return list(merged.values())


# =========================================================================
# Public search API
# =========================================================================


def search_by_last4(
    digits: str,
    pages: int,
    now: datetime | None = None,
) -> SearchResult:
    """
    Look a customer up in the primary store and the external directory.

    Args:
        digits: Validated 4-digit key (see ``parse_search_params``).
        pages:  Directory page ceiling, already clamped.
        now:    Timestamp for contacts without a ``dateAdded``.

    Returns:
        A ``SearchResult``; never raises for source failures.

    Raises:
        DirectoryPayloadError: If a directory page is malformed beyond
                               the tolerated envelope shapes.
    """
    result = SearchResult(digits=digits)

    store_lookup = contact_store.find_by_phone_suffix(digits)
    if store_lookup.degraded:
        result.degraded_sources.append(SOURCE_PRIMARY_STORE)

    scan = DirectoryApiClient().scan(pages)
    survivors = merge_and_dedupe(digits, store_lookup.contacts, scan)

    result.pages_fetched = scan.pages_fetched
    if scan.degraded:
        result.degraded_sources.append(SOURCE_DIRECTORY)

    timestamp = now or datetime.now(timezone.utc)
    result.contacts = [normalize_contact(raw, now=timestamp) for raw in survivors]

    if result.is_partial:
        logger.warning(
            "Partial customer search for *%s — degraded sources: %s",
            digits,
            ", ".join(result.degraded_sources),
        )

    logger.info(
        "Customer search *%s: %d store row(s), %d directory page(s) "
        "(%s), %d match(es)",
        digits,
        len(store_lookup.contacts),
        scan.pages_fetched,
        scan.stop_reason,
        len(result.contacts),
    )
    return result
