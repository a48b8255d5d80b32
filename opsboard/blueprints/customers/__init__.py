"""
Customers blueprint — cross-source customer lookup.
"""

from flask import Blueprint

bp = Blueprint("customers", __name__)

# Import routes after blueprint creation to avoid circular imports.
from opsboard.blueprints.customers import routes  # noqa: E402, F401
