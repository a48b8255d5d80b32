"""
Routes for the main blueprint — health check and reachability check.
"""

import logging

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from opsboard.blueprints.main import bp
from opsboard.extensions import db

logger = logging.getLogger(__name__)


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the contact store
    (or the store is disabled), 503 otherwise.
    """
    if not current_app.config.get("CONTACT_STORE_ENABLED", False):
        return {"status": "healthy", "database": "disabled"}, 200

    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Health check could not reach the contact store: %s", exc)
        return {"status": "unhealthy", "database": "unavailable"}, 503


@bp.route("/api/test-connection")
def test_connection():
    """Lightweight check the dashboard uses to confirm the API is up."""
    return {"ok": True, "message": "API is reachable"}, 200
