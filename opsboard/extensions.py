"""
Flask extension instances.

Extensions are created here without binding to an application so that
the application factory can call ``init_app()`` on each one during
``create_app()``.
"""

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# -- Primary contact store -------------------------------------------------
# The ``db`` instance is imported by models and the contact store service.
db = SQLAlchemy()

# -- Schema migrations (Alembic via Flask-Migrate) -------------------------
migrate = Migrate()
