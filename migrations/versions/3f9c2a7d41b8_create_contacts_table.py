"""Create the contacts table.

Primary contact store used by the customer lookup.  ``id`` holds the
CRM contact identifier so store rows and directory records share ids.
``phone`` keeps the number exactly as entered and is indexed for the
``LIKE '%NNNN'`` suffix lookup.

Revision ID: 3f9c2a7d41b8
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "3f9c2a7d41b8"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the contacts table and its phone index."""
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("date_added", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_contacts_phone", "contacts", ["phone"])


def downgrade() -> None:
    """Drop the contacts table."""
    op.drop_index("ix_contacts_phone", table_name="contacts")
    op.drop_table("contacts")
