"""
Pytest configuration and shared fixtures.

Provides a test application backed by an in-memory SQLite contact
store, a test client, and a fake directory that replaces the urllib3
transport so no test reaches the real directory.
"""

import json

import pytest
import urllib3

from opsboard import create_app
from opsboard.extensions import db as _db
from opsboard.models.contact import Contact


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    A fresh app (and therefore a fresh in-memory database) is built for
    every test so store contents never leak between tests.
    """
    app = create_app("testing")

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name,unused-argument
    """Provide the SQLAlchemy session bound to the test store."""
    yield _db.session


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def add_contact(db_session):  # pylint: disable=redefined-outer-name
    """Insert a row into the primary contact store."""

    def _add(contact_id, phone, first_name="", last_name="", date_added=None):
        row = Contact(
            id=contact_id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            date_added=date_added,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _add


# =========================================================================
# Fake directory transport
# =========================================================================


class FakeResponse:
    """Minimal stand-in for ``urllib3.BaseHTTPResponse``."""

    def __init__(self, status: int, data: bytes) -> None:
        self.status = status
        self.data = data


class FakeDirectory:
    """
    Serves directory pages from memory.

    Pages are registered with ``add_page``.  Unregistered pages come
    back as an empty contacts list (end of directory) unless
    ``page_factory`` is set, in which case it builds every page.
    """

    def __init__(self) -> None:
        self.pages: dict[int, object] = {}
        self.page_factory = None
        self.requests: list[dict] = []

    def add_page(self, page: int, body=None, status: int = 200, raw: bytes | None = None):
        """
        Register a page.

        ``body`` is JSON-encoded; ``raw`` is served verbatim; a status of
        ``None`` makes the request raise a transport error.
        """
        self.pages[page] = (status, raw if raw is not None else json.dumps(body).encode())

    def add_contacts_page(self, page: int, contacts: list[dict], nested: bool = False):
        body = {"contacts": {"contacts": contacts}} if nested else {"contacts": contacts}
        self.add_page(page, body)

    @property
    def requested_pages(self) -> list[int]:
        return [req["fields"]["page"] for req in self.requests]

    def pool_manager(self, *args, **kwargs):  # pylint: disable=unused-argument
        return _FakePoolManager(self)

    def respond(self, page: int) -> FakeResponse:
        if self.page_factory is not None:
            return FakeResponse(200, json.dumps(self.page_factory(page)).encode())

        status, data = self.pages.get(page, (200, b'{"contacts": []}'))
        if status is None:
            raise urllib3.exceptions.ProtocolError("connection reset by peer")
        return FakeResponse(status, data)


class _FakePoolManager:
    def __init__(self, directory: FakeDirectory) -> None:
        self._directory = directory

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def request(self, method, url, headers=None, fields=None, **kwargs):
        self._directory.requests.append(
            {
                "method": method,
                "url": url,
                "headers": headers,
                "fields": fields,
                "retries": kwargs.get("retries"),
            }
        )
        return self._directory.respond(fields["page"])


@pytest.fixture(scope="function")
def directory(monkeypatch):
    """Replace ``urllib3.PoolManager`` with an in-memory directory."""
    fake = FakeDirectory()
    monkeypatch.setattr(urllib3, "PoolManager", fake.pool_manager)
    return fake


@pytest.fixture(scope="function")
def make_contact():
    """Build a directory contact record (camelCase keys)."""

    def _make(contact_id, phone, first="", last="", **extra) -> dict:
        record = {"id": contact_id, "firstName": first, "lastName": last, "phone": phone}
        record.update(extra)
        return record

    return _make
