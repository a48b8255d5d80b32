"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - contact.py -> contacts table (primary contact store)
"""

from opsboard.models.contact import Contact  # noqa: F401
