"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost zero logic). The directory
owns the rules; these types own the shape.

Layer rule: no imports from core/ or main.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    @classmethod
    def parse(cls, value: str | Role) -> Role | None:
        """Case-insensitive lookup. Returns None for anything that is not a role."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


@dataclass
class User:
    """A registered identity.

    email is stored case-folded and doubles as the registry key, so it never
    changes after registration. hashed_password is the bcrypt hash of the
    credential; it is kept out of repr() so users can be logged or printed
    without leaking it.

    Only area and contact are mutable through the directory (update_profile).
    """

    id: str
    name: str
    email: str
    hashed_password: str = field(repr=False)
    role: Role
    area: str | None = None
    contact: str | None = None
    created_at: str = ""  # ISO 8601, set by the directory on register
    updated_at: str = ""  # ISO 8601, bumped by update_profile
    last_login: str = ""  # ISO 8601, empty until the first successful login

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass
class Session:
    """A token session held by SessionStore.

    The raw token is never stored -- the store keys sessions by its digest.
    user_email is the registry key of the session owner.
    """

    user_email: str
    issued_at: float  # epoch seconds
    expires_at: float  # epoch seconds

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
