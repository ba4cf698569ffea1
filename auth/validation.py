"""
auth/validation.py -- Input format predicates consumed by AuthDirectory.

Pure functions, no side effects. The directory only ever asks yes/no
questions; it never sees why a value failed. Callers that want a different
policy pass their own object with the same four methods to AuthDirectory.
"""

from __future__ import annotations

import re
from typing import Protocol

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Kept in step with core/config.py _EMAIL_RE.
EMAIL_PATTERN = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
CONTACT_PATTERN = r"^[0-9]{10}$"

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_CONTACT_RE = re.compile(CONTACT_PATTERN)


class ValidatorProtocol(Protocol):
    def is_valid_name(self, value: str | None) -> bool: ...

    def is_valid_email(self, value: str | None) -> bool: ...

    def is_valid_password(self, value: str | None) -> bool: ...

    def is_valid_contact(self, value: str | None) -> bool: ...


class Validator:
    """Default validation policy.

    name     -- at least 2 characters once surrounding whitespace is removed
    email    -- local@domain.tld, no whitespace
    password -- at least 6 characters (whitespace counts), UTF-8 encodable
    contact  -- exactly 10 ASCII digits
    """

    def is_valid_name(self, value: str | None) -> bool:
        return isinstance(value, str) and len(value.strip()) >= MIN_NAME_LENGTH

    def is_valid_email(self, value: str | None) -> bool:
        return isinstance(value, str) and _EMAIL_RE.fullmatch(value) is not None

    def is_valid_password(self, value: str | None) -> bool:
        if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
            return False
        # Lone surrogates survive str but not the UTF-8 encode before hashing.
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True

    def is_valid_contact(self, value: str | None) -> bool:
        # re's \d would also accept non-ASCII digits, hence the explicit class.
        return isinstance(value, str) and _CONTACT_RE.fullmatch(value) is not None
