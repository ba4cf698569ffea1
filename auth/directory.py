"""
auth/directory.py -- AuthDirectory, the authority over users and sessions.

Holds three pieces of state:
  registry        -- case-folded email -> User, the only copy of each record
  admin_assigned  -- flips to True on the one ADMIN registration, never back
  active_session  -- the User currently logged in through login(), or None

plus a SessionStore of token sessions (open_session / close_session) for
callers that serve more than one client. Every operation that reads or
acts on "the current user" accepts an optional token: with a token the
token's owner is the acting identity, without one the active session is.

Concurrency: one RLock guards all state. register() does its uniqueness and
admin checks under the lock, hashes the password outside it, then re-checks
and inserts under the lock again -- the re-check is what makes the
check-then-insert atomic while keeping bcrypt off the critical section.

Record discipline: get_current_user() and session_user() return the live
stored User (update_profile() changes are visible through them immediately);
get_all_users() returns copies.

Layer rule: no imports from main. core/ (config) is allowed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from auth.errors import (
    AccessDenied,
    AdminAlreadyRegistered,
    EmailAlreadyRegistered,
    EmailNotRegistered,
    IncorrectPassword,
    InvalidAdminEmail,
    InvalidContact,
    InvalidEmail,
    InvalidEmailFormat,
    InvalidName,
    InvalidPassword,
    InvalidRole,
    NotLoggedIn,
)
from auth.identifiers import IdentifierGenerator
from auth.models import Role, User
from auth.sessions import SessionStore
from auth.tokens import dummy_hash, hash_password, spend_dummy_verification, verify_password
from auth.validation import Validator, ValidatorProtocol
from core.config import Settings, get_settings

logger = logging.getLogger("authdirectory.auth")

# Bound on id regeneration when the generator returns an id already in use.
_MAX_ID_ATTEMPTS = 16


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _key(email: str) -> str:
    return email.casefold()


class AuthDirectory:
    """Registry of users plus the session state that authorizes them.

    Usage:
        directory = AuthDirectory()
        directory.register("Asha", "asha@x.com", "secret1", "MEMBER")
        directory.login("asha@x.com", "secret1")
        directory.update_profile("Coimbatore", "9876543210")
        directory.logout()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        validator: ValidatorProtocol | None = None,
        id_generator: Callable[[Role], str] | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._validator = validator or Validator()
        self._generate_id = id_generator or IdentifierGenerator()
        self._sessions = session_store or SessionStore(self._settings.session_expire_seconds)
        self._lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._issued_ids: set[str] = set()
        self._admin_assigned = False
        self._active: User | None = None
        # Hashed once per cost factor; first unknown-email login pays no extra.
        dummy_hash(self._settings.bcrypt_rounds)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @staticmethod
    def get_admin_email() -> str:
        """Return the process-wide reserved administrator email (for display).

        Reads get_settings(). A directory built with its own Settings enforces
        that object's value instead -- use the admin_email property for it.
        """
        return get_settings().admin_email

    @property
    def admin_email(self) -> str:
        """The reserved administrator email this instance enforces."""
        return self._settings.admin_email

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str, email: str, password: str, role: str | Role) -> User:
        """Create a user. Does not log them in.

        Checks run in a fixed order and the first failure wins: name, email
        format, password length, role, email uniqueness, then the two admin
        rules. Nothing is stored unless every check passes.

        Raises:
            InvalidName, InvalidEmail, InvalidPassword, InvalidRole,
            EmailAlreadyRegistered, AdminAlreadyRegistered, InvalidAdminEmail
            (all RegistrationError).
        """
        if not self._validator.is_valid_name(name):
            raise InvalidName()
        if not self._validator.is_valid_email(email):
            raise InvalidEmail()
        if not self._validator.is_valid_password(password):
            raise InvalidPassword()
        parsed_role = Role.parse(role)
        if parsed_role is None:
            raise InvalidRole()

        key = _key(email)
        with self._lock:
            self._check_registrable(key, parsed_role)

        hashed = hash_password(password, rounds=self._settings.bcrypt_rounds)

        with self._lock:
            # State may have moved while hashing.
            self._check_registrable(key, parsed_role)
            now = _now_iso()
            user = User(
                id=self._new_id(parsed_role),
                name=name.strip(),
                email=key,
                hashed_password=hashed,
                role=parsed_role,
                created_at=now,
                updated_at=now,
            )
            if parsed_role is Role.ADMIN:
                self._admin_assigned = True
            self._users[key] = user

        logger.info("Registered %s %s (%s)", user.role.value, user.id, user.email)
        return user

    def _check_registrable(self, key: str, role: Role) -> None:
        if key in self._users:
            raise EmailAlreadyRegistered()
        if role is Role.ADMIN:
            if self._admin_assigned:
                raise AdminAlreadyRegistered()
            if key != _key(self._settings.admin_email):
                raise InvalidAdminEmail(f"Invalid admin email. Admin must use: {self._settings.admin_email}")

    def _new_id(self, role: Role) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            user_id = self._generate_id(role)
            if user_id not in self._issued_ids:
                self._issued_ids.add(user_id)
                return user_id
        raise RuntimeError(f"Identifier generator returned {_MAX_ID_ATTEMPTS} ids already in use")

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _authenticate(self, email: str, password: str) -> User:
        """Resolve credentials to the stored User without touching any session.

        Format is checked first, then existence, then the password. Unknown
        emails still cost one bcrypt verification so both failure paths take
        comparable time.
        """
        if not self._validator.is_valid_email(email):
            raise InvalidEmailFormat()
        with self._lock:
            user = self._users.get(_key(email))
        if user is None:
            spend_dummy_verification(password if isinstance(password, str) else "", self._settings.bcrypt_rounds)
            logger.warning("Login rejected: email not registered")
            raise EmailNotRegistered()
        if not isinstance(password, str) or not verify_password(password, user.hashed_password):
            logger.warning("Login rejected: incorrect password for %s", user.id)
            raise IncorrectPassword()
        return user

    def login(self, email: str, password: str) -> User:
        """Authenticate and bind the directory's active session to the user.

        A successful login replaces any session already active; no logout is
        needed in between.

        Raises:
            InvalidEmailFormat, EmailNotRegistered, IncorrectPassword
            (all AuthenticationError).
        """
        user = self._authenticate(email, password)
        with self._lock:
            self._active = user
            user.last_login = _now_iso()
        logger.info("Login successful: %s (%s)", user.name, user.id)
        return user

    def logout(self) -> None:
        """Clear the active session. Does nothing when no one is logged in."""
        with self._lock:
            user, self._active = self._active, None
        if user is not None:
            logger.info("Logged out: %s (%s)", user.name, user.id)

    def open_session(self, email: str, password: str) -> str:
        """Authenticate and issue a token session. The active session is untouched.

        Returns the raw token; the directory keeps only its digest.

        Raises the same errors as login().
        """
        user = self._authenticate(email, password)
        with self._lock:
            token = self._sessions.issue(user.email)
            user.last_login = _now_iso()
        logger.info("Session opened: %s (%s)", user.name, user.id)
        return token

    def close_session(self, token: str) -> None:
        """Revoke a token session. Unknown or expired tokens are ignored."""
        with self._lock:
            revoked = self._sessions.revoke(token)
        if revoked:
            logger.info("Session closed")

    def session_user(self, token: str) -> User | None:
        """Return the live User behind a token, or None if it is unknown or expired."""
        with self._lock:
            key = self._sessions.resolve(token)
            return self._users.get(key) if key is not None else None

    def purge_expired_sessions(self) -> int:
        """Drop expired token sessions. Returns number of sessions removed."""
        with self._lock:
            return self._sessions.purge_expired()

    # ------------------------------------------------------------------
    # Session queries
    # ------------------------------------------------------------------

    def _acting_user(self, token: str | None) -> User | None:
        if token is not None:
            return self.session_user(token)
        with self._lock:
            return self._active

    def is_logged_in(self, token: str | None = None) -> bool:
        return self._acting_user(token) is not None

    def get_current_user(self, token: str | None = None) -> User | None:
        return self._acting_user(token)

    def is_current_user_admin(self, token: str | None = None) -> bool:
        user = self._acting_user(token)
        return user is not None and user.is_admin

    def is_admin_registered(self) -> bool:
        with self._lock:
            return self._admin_assigned

    def user_count(self) -> int:
        with self._lock:
            return len(self._users)

    # ------------------------------------------------------------------
    # Authenticated operations
    # ------------------------------------------------------------------

    def update_profile(self, area: str | None, contact: str | None, *, token: str | None = None) -> None:
        """Set area and contact on the acting user's record.

        Empty values clear the field. area is free text; contact must be
        exactly 10 digits when given.

        Raises:
            NotLoggedIn   -- no acting user (no active session / dead token)
            InvalidContact -- contact is non-empty and not 10 digits
        """
        user = self._acting_user(token)
        if user is None:
            raise NotLoggedIn()
        if contact and not self._validator.is_valid_contact(contact):
            raise InvalidContact()
        with self._lock:
            user.area = area or None
            user.contact = contact or None
            user.updated_at = _now_iso()
        logger.info("Profile updated: %s", user.id)

    def get_all_users(self, *, token: str | None = None) -> list[User]:
        """Return copies of every registered user. Admin only.

        Order is not part of the contract (registration order in practice).

        Raises:
            AccessDenied -- acting user is missing or not the admin
        """
        user = self._acting_user(token)
        if user is None or not user.is_admin:
            logger.warning("User listing denied for %s", user.id if user else "anonymous caller")
            raise AccessDenied()
        with self._lock:
            return [replace(u) for u in self._users.values()]
