"""
Main blueprint — health check and API reachability check.
"""

from flask import Blueprint

bp = Blueprint("main", __name__)

# Import routes after blueprint creation to avoid circular imports.
from opsboard.blueprints.main import routes  # noqa: E402, F401
