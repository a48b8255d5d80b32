"""
Directory API client — reads contacts from the external CRM directory.

The directory is a paginated HTTP endpoint (``?page=N``, starting at 1)
whose JSON body carries a contacts array, either directly under
``contacts`` or nested one level deeper as ``contacts.contacts``.  It
has no total-page count, so a scan walks pages until one of:

    - the caller's page ceiling is reached;
    - a page request fails (non-2xx status or transport error);
    - a page comes back with no contacts (end of directory).

A failed page ends the scan without raising; whatever was collected
from earlier pages is still returned.  There is no retry and no page
caching.

Configuration is read from Flask ``current_app.config``:
    - ``DIRECTORY_API_BASE_URL``:      e.g. ``https://crm.example.com/functions``
    - ``DIRECTORY_CONTACTS_ENDPOINT``: e.g. ``getcontacts``
    - ``DIRECTORY_API_KEY``:           Optional bearer token.
"""

import json
import logging
from collections.abc import Iterator
from typing import Any

import urllib3
from flask import current_app

from opsboard.services.contact_records import RawContact
from opsboard.services.errors import DirectoryPayloadError

logger = logging.getLogger(__name__)

# Reasons a scan stopped.
STOP_PAGE_LIMIT = "page_limit"
STOP_PAGE_ERROR = "page_error"
STOP_END_OF_DIRECTORY = "end_of_directory"


def extract_contacts(payload: Any) -> list[dict[str, Any]]:
    """
    Unwrap the contacts array from a directory page body.

    Accepts ``{"contacts": [...]}`` and ``{"contacts": {"contacts":
    [...]}}``.  Any other shape is treated as an empty page.

    Raises:
        DirectoryPayloadError: If the array holds a non-object entry.
    """
    root = payload.get("contacts") if isinstance(payload, dict) else None
    if isinstance(root, dict):
        root = root.get("contacts")
    if not isinstance(root, list):
        return []

    for entry in root:
        if not isinstance(entry, dict):
            raise DirectoryPayloadError(
                f"Directory contact entry is {type(entry).__name__}, expected object"
            )
    return root


class DirectoryScan:
    """
    Lazy, page-bounded walk over the directory.

    Iterating yields ``RawContact`` records in page order and fetches
    the next page only once the previous one has been consumed.  After
    iteration, ``stop_reason`` and ``pages_fetched`` describe how the
    scan ended.  A scan is single-use.
    """

    def __init__(self, client: "DirectoryApiClient", max_pages: int) -> None:
        self._client = client
        self.max_pages = max_pages
        self.pages_fetched = 0
        self.contacts_seen = 0
        self.stop_reason: str | None = None

    @property
    def degraded(self) -> bool:
        """True when a page request failed before the scan completed."""
        return self.stop_reason == STOP_PAGE_ERROR

    def __iter__(self) -> Iterator[RawContact]:
        for page in range(1, self.max_pages + 1):
            payload = self._client.fetch_page(page)

            if payload is None:
                logger.warning(
                    "Directory page %d failed — stopping scan with %d contact(s)",
                    page,
                    self.contacts_seen,
                )
                self.stop_reason = STOP_PAGE_ERROR
                return

            self.pages_fetched += 1
            records = extract_contacts(payload)

            if not records:
                logger.debug("Directory page %d is empty — end of directory", page)
                self.stop_reason = STOP_END_OF_DIRECTORY
                return

            self.contacts_seen += len(records)
            for record in records:
                yield RawContact.from_directory(record)

        logger.debug("Directory scan reached the %d page ceiling", self.max_pages)
        self.stop_reason = STOP_PAGE_LIMIT


class DirectoryApiClient:
    """
    Client for the external contact directory.

    Usage inside a Flask request or app context::

        client = DirectoryApiClient()
        for contact in client.scan(max_pages=5):
            ...
    """

    def __init__(self) -> None:
        """
        Initialize the client by reading config from Flask app context.

        Raises:
            RuntimeError: If called outside a Flask application context.
        """
        self.base_url: str = current_app.config["DIRECTORY_API_BASE_URL"].rstrip("/")
        self.endpoint: str = current_app.config.get(
            "DIRECTORY_CONTACTS_ENDPOINT", "getcontacts"
        ).strip("/")
        self.api_key: str = current_app.config.get("DIRECTORY_API_KEY", "")

        self.headers: dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            self.headers["Authorization"] = f"Bearer {self.api_key}"

        logger.debug(
            "DirectoryApiClient initialized — url=%s/%s",
            self.base_url,
            self.endpoint,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.endpoint}"

    # =================================================================
    # Public API
    # =================================================================

    def scan(self, max_pages: int) -> DirectoryScan:
        """Return a lazy scan over at most ``max_pages`` pages."""
        return DirectoryScan(self, max_pages)

    # =================================================================
    # HTTP transport
    # =================================================================

    def fetch_page(self, page: int) -> Any | None:
        """
        Send a GET request for one directory page.

        Args:
            page: 1-based page number.

        Returns:
            The decoded JSON body, ``{}`` if the body is not valid
            JSON, or None if the request did not succeed.  A failed
            page is never retried and redirects are not followed, so a
            3xx answer also counts as a failed page.
        """
        try:
            with urllib3.PoolManager() as http:
                response = http.request(
                    "GET",
                    self.url,
                    headers=self.headers,
                    fields={"page": page},
                    retries=False,
                )
        except urllib3.exceptions.RequestError as exc:
            logger.error("RequestError calling directory page %d: %s", page, exc)
            return None
        except urllib3.exceptions.HTTPError as exc:
            logger.error("HTTPError calling directory page %d: %s", page, exc)
            return None

        if not 200 <= response.status < 300:
            logger.error(
                "Directory page %d returned status %d",
                page,
                response.status,
            )
            return None

        try:
            return json.loads(response.data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Invalid JSON on directory page %d: %s", page, exc)
            return {}
