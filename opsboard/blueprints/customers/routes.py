"""
Routes for the customers blueprint — lookup by phone suffix.
"""

import logging

from flask import request

from opsboard.blueprints.customers import bp
from opsboard.services import customer_search_service
from opsboard.services.errors import SearchValidationError

logger = logging.getLogger(__name__)


@bp.route("/search-last4", methods=["GET"])
def search_last4():
    """
    Find customers whose phone ends with the given four digits.

    Query parameters:
        digits: Exactly four digits (formatting characters are ignored).
        pages:  Directory page ceiling, 1–20 (default 10).

    Returns ``{"ok": true, "results": [...]}``.  Malformed ``digits``
    gives a 400 before any lookup runs; any unexpected failure gives a
    generic 500 without exception detail.
    """
    try:
        params = customer_search_service.parse_search_params(request.args)
    except SearchValidationError as exc:
        return {"ok": False, "error": str(exc)}, 400

    try:
        result = customer_search_service.search_by_last4(params.digits, params.pages)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("search-last4 failed for *%s", params.digits)
        return {"ok": False, "error": "Server error"}, 500

    return result.to_response(), 200
