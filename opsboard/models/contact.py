"""
Customer contact model — the primary store's ``contacts`` table.

The hosted store holds a subset of the CRM's contacts.  This app only
reads from it; rows are written by the booking and walk-in flows.
"""

from opsboard.extensions import db


class Contact(db.Model):
    """
    A customer contact row in the primary store.

    ``id`` is the CRM contact identifier, so a row and its directory
    counterpart share the same id.  ``phone`` is stored exactly as it
    was entered, which is why lookups use a loose ``LIKE`` suffix match
    and re-check the digits afterwards.
    """

    __tablename__ = "contacts"

    id = db.Column(db.String(64), primary_key=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    phone = db.Column(db.String(40), nullable=True, index=True)
    date_added = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Contact {self.id}: {self.first_name} {self.last_name}>"
