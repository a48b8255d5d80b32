"""
Service layer package.

Each service module encapsulates one piece of the customer lookup.
Services are the only layer that talks to the contact store or the
external directory; routes never do.

Import services in route modules as needed::

    from opsboard.services import customer_search_service
"""
