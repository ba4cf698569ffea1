"""
auth/identifiers.py -- Role-tagged user identifiers.

Format: <prefix>-<8 upper-case hex chars>, e.g. ADM-1F3A9C0B or USR-77E0D412.
The prefix tells an operator at a glance whether an id belongs to the
administrator. The random part comes from uuid4; with 32 bits the directory
still checks for collisions against ids it already issued.
"""

from __future__ import annotations

import uuid

from auth.models import Role

_PREFIXES: dict[Role, str] = {
    Role.ADMIN: "ADM",
    Role.MEMBER: "USR",
}


class IdentifierGenerator:
    def __call__(self, role: Role) -> str:
        return self.generate(role)

    def generate(self, role: Role) -> str:
        return f"{_PREFIXES[role]}-{uuid.uuid4().hex[:8].upper()}"
