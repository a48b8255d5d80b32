"""Phone number helpers used by the customer lookup."""

import re

_NON_DIGIT = re.compile(r"[^0-9]")

# Number of trailing digits used for the customer lookup key.
SUFFIX_LENGTH = 4


def digits_only(value) -> str:
    """
    Strip every non-digit character from a phone value.

    ``None`` and empty values yield ``""``.  Non-string values are
    converted with ``str()`` first.

        (555) 000-1234 → 5550001234
    """
    if value is None:
        return ""
    return _NON_DIGIT.sub("", str(value))


def last_digits(value, count: int = SUFFIX_LENGTH) -> str:
    """Return the trailing ``count`` digits of a phone value, or fewer."""
    digits = digits_only(value)
    return digits[-count:] if count > 0 else ""
