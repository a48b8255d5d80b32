"""Exceptions raised by the customer search services."""


class CustomerSearchError(Exception):
    """Base class for customer search failures."""


class SearchValidationError(CustomerSearchError):
    """The request parameters are malformed; no I/O has been performed."""


class DirectoryPayloadError(CustomerSearchError):
    """The directory returned a contacts array with unusable entries."""
