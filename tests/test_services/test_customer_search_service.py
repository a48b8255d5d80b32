"""
Tests for customer_search_service: request validation, merge/dedup
and the end-to-end lookup across the store and the directory.
"""

from datetime import datetime, timezone

import pytest
from werkzeug.datastructures import MultiDict

from opsboard.extensions import db
from opsboard.services import contact_store, customer_search_service
from opsboard.services.contact_records import (
    SOURCE_DIRECTORY,
    SOURCE_PRIMARY_STORE,
    RawContact,
)
from opsboard.services.customer_search_service import (
    INVALID_DIGITS_MESSAGE,
    merge_and_dedupe,
    parse_search_params,
    search_by_last4,
)
from opsboard.services.errors import DirectoryPayloadError, SearchValidationError
from opsboard.services.phone import last_digits

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def _store(contact_id, phone):
    return RawContact(source=SOURCE_PRIMARY_STORE, id=contact_id, phone=phone)


def _directory(contact_id, phone, **fields):
    return RawContact(source=SOURCE_DIRECTORY, id=contact_id, phone=phone, **fields)


class TestParseSearchParams:
    """Tests for request validation."""

    @pytest.mark.parametrize("digits", ["1234", "12-34", " 1 2 3 4 ", "(1234)"])
    def test_accepts_four_digits_after_extraction(self, app, digits):
        assert parse_search_params({"digits": digits}).digits == "1234"

    @pytest.mark.parametrize(
        "digits",
        [
            "12a4",
            "123",
            "12345",
            "",
            None,
            "abcd",
            "\u0661\u0662\u0663\u0664",
            "\uff11\uff12\uff13\uff14",
        ],
    )
    def test_rejects_anything_else(self, app, digits):
        with pytest.raises(SearchValidationError, match="exactly 4 digits"):
            parse_search_params({"digits": digits})

    @pytest.mark.parametrize(
        "pages, expected",
        [
            (None, 10),
            ("", 10),
            ("abc", 10),
            ("nan", 10),
            ("inf", 10),
            ("3", 3),
            ("2.9", 2),
            ("+3", 3),
            (" 4 ", 4),
            ("2_0", 10),
            ("1e1", 10),
            ("0x10", 10),
            (".5", 10),
            ("0", 1),
            ("-4", 1),
            ("20", 20),
            ("21", 20),
            ("500", 20),
        ],
    )
    def test_pages_are_clamped(self, app, pages, expected):
        params = parse_search_params({"digits": "1234", "pages": pages})
        assert params.pages == expected

    def test_reads_werkzeug_multidict(self, app):
        params = parse_search_params(MultiDict([("digits", "9876"), ("pages", "4")]))
        assert (params.digits, params.pages) == ("9876", 4)

    def test_default_pages_come_from_config(self, app):
        app.config["CUSTOMER_SEARCH_DEFAULT_PAGES"] = 3
        assert parse_search_params({"digits": "1234"}).pages == 3


class TestMergeAndDedupe:
    """Tests for the union, exact-suffix filter and dedup."""

    def test_filters_to_exact_suffix(self):
        survivors = merge_and_dedupe(
            "1234",
            [_store("a", "555-000-1234"), _store("b", "555-001-2345")],
            [_directory("c", "555 000 1234 "), _directory("d", None), _directory("e", "234")],
        )
        assert [c.id for c in survivors] == ["a", "c"]

    def test_store_duplicate_wins_over_directory(self):
        """The same id in both sources collapses to the store's sighting."""
        survivors = merge_and_dedupe(
            "1234",
            [_store("x1", "(555) 000-1234")],
            [_directory("x1", "555-000-1234", first_name="Dir")],
        )

        assert len(survivors) == 1
        assert survivors[0].source == SOURCE_PRIMARY_STORE
        assert survivors[0].first_name is None

    def test_ids_are_string_coerced(self):
        survivors = merge_and_dedupe(
            "1234",
            [_store("42", "555-000-1234")],
            [_directory(42, "555-000-1234")],
        )
        assert len(survivors) == 1

    def test_at_most_one_contact_without_id(self):
        survivors = merge_and_dedupe(
            "1234",
            [_directory(None, "555-000-1234"), _directory(None, "555-999-1234")],
        )
        assert len(survivors) == 1
        assert survivors[0].phone == "555-000-1234"

    def test_preserves_first_occurrence_order(self):
        survivors = merge_and_dedupe(
            "1234",
            [_store("b", "1234")],
            [_directory("a", "1234"), _directory("b", "1234"), _directory("c", "1234")],
        )
        assert [c.id for c in survivors] == ["b", "a", "c"]

    def test_consumes_generators(self):
        stream = (_directory(str(i), "1234") for i in range(3))
        assert len(merge_and_dedupe("1234", stream)) == 3


class TestSearchByLast4:
    """End-to-end lookups against the in-memory store and fake directory."""

    def test_merges_store_and_directory(self, app, add_contact, directory, make_contact):
        add_contact("s1", "(555) 000-1234", "Ana", "Reyes", datetime(2026, 1, 1))
        directory.add_contacts_page(
            1,
            [
                make_contact("d1", "555-222-1234", "Ben", "Ortiz"),
                make_contact("d2", "555-222-9999", "Cy", "Hale"),
            ],
        )

        result = search_by_last4("1234", pages=10, now=NOW)

        assert [c.id for c in result.contacts] == ["s1", "d1"]
        assert result.contacts[0].contact_name == "Ana Reyes"
        assert result.contacts[0].date_added == "2026-01-01T00:00:00.000Z"
        assert result.contacts[1].date_added == "2026-10-19T12:00:00.000Z"
        assert result.degraded_sources == []
        assert not result.is_partial

    def test_same_contact_in_both_sources_appears_once(
        self, app, add_contact, directory, make_contact
    ):
        add_contact("dup", "(555) 000-1234", "Ana", "Reyes")
        directory.add_contacts_page(1, [make_contact("dup", "555-000-1234", "Ana", "R.")])

        result = search_by_last4("1234", pages=10, now=NOW)

        assert [c.id for c in result.contacts] == ["dup"]
        assert result.contacts[0].phone == "(555) 000-1234"

    def test_directory_runs_even_when_store_matches(
        self, app, add_contact, directory
    ):
        add_contact("s1", "555-000-1234")

        result = search_by_last4("1234", pages=3, now=NOW)

        assert directory.requested_pages == [1]
        assert result.pages_fetched == 1

    def test_page_ceiling_bounds_directory_calls(self, app, directory, make_contact):
        directory.page_factory = lambda page: {
            "contacts": [make_contact(f"p{page}", "555-000-1234")]
        }

        result = search_by_last4("1234", pages=2, now=NOW)

        assert directory.requested_pages == [1, 2]
        assert [c.id for c in result.contacts] == ["p1", "p2"]

    def test_failed_page_returns_partial_results(self, app, directory, make_contact):
        directory.add_contacts_page(
            1, [make_contact(f"c{i}", f"(555) 00{i}-1234") for i in range(3)]
        )
        directory.add_page(2, status=500, body={"error": "upstream"})

        result = search_by_last4("1234", pages=10, now=NOW)

        assert [c.id for c in result.contacts] == ["c0", "c1", "c2"]
        assert result.degraded_sources == [SOURCE_DIRECTORY]

    def test_store_failure_is_absorbed(self, app, directory, make_contact):
        directory.add_contacts_page(1, [make_contact("d1", "555-000-1234")])
        db.drop_all()

        result = search_by_last4("1234", pages=10, now=NOW)

        assert [c.id for c in result.contacts] == ["d1"]
        assert result.degraded_sources == [SOURCE_PRIMARY_STORE]

    def test_disabled_store_is_not_degraded(self, app, directory):
        app.config["CONTACT_STORE_ENABLED"] = False

        result = search_by_last4("1234", pages=10, now=NOW)

        assert result.contacts == []
        assert result.degraded_sources == []

    def test_every_result_matches_and_ids_are_unique(
        self, app, add_contact, directory, make_contact
    ):
        add_contact("a", "555-111-1234")
        add_contact("b", "555-1234-99")  # LIKE miss, kept out by the store
        directory.add_contacts_page(
            1,
            [
                make_contact("a", "555-111-1234"),
                make_contact("c", "1234-5678"),
                make_contact("d", "+1 (555) 777-1234"),
            ],
        )
        directory.add_contacts_page(2, [make_contact("d", "555-777-1234"), {"phone": "1234"}])

        result = search_by_last4("1234", pages=10, now=NOW)

        ids = [c.id for c in result.contacts]
        assert ids == ["a", "d", ""]
        assert len(ids) == len(set(ids))
        assert all(last_digits(c.phone) == "1234" for c in result.contacts)

    def test_malformed_directory_payload_raises(self, app, directory):
        directory.add_page(1, {"contacts": ["not-an-object"]})

        with pytest.raises(DirectoryPayloadError):
            search_by_last4("1234", pages=10, now=NOW)

    def test_uses_store_lookup_result(self, app, monkeypatch, directory):
        """The store lookup is consulted once with the validated digits."""
        calls = []

        def fake_lookup(digits, limit=None):  # pylint: disable=unused-argument
            calls.append(digits)
            return contact_store.StoreLookup(contacts=[_store("s", "000-1234")])

        monkeypatch.setattr(contact_store, "find_by_phone_suffix", fake_lookup)

        result = customer_search_service.search_by_last4("1234", pages=1, now=NOW)

        assert calls == ["1234"]
        assert [c.id for c in result.contacts] == ["s"]

    def test_response_body_shape(self, app, directory, make_contact):
        directory.add_contacts_page(1, [make_contact("d1", "555-000-1234", "Ben", "Ortiz")])

        body = search_by_last4("1234", pages=10, now=NOW).to_response()

        assert body == {
            "ok": True,
            "results": [
                {
                    "id": "d1",
                    "contactName": "Ben Ortiz",
                    "firstName": "Ben",
                    "lastName": "Ortiz",
                    "phone": "555-000-1234",
                    "dateAdded": "2026-10-19T12:00:00.000Z",
                }
            ],
        }


def test_invalid_digits_message():
    assert INVALID_DIGITS_MESSAGE == "Invalid digits. Provide exactly 4 digits."
