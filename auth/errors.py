"""
auth/errors.py -- Exception hierarchy for rejected directory operations.

Two families, both describing caller-input or authorization failures:

  RegistrationError   -- raised by register()
  AuthenticationError -- raised by login(), open_session(), update_profile(),
                         get_all_users()

Every concrete error carries a stable snake_case ``code`` and a human
``message``, the same {"code", "message"} shape the transport layers turn
into error responses. Callers may catch a family or a specific kind.

None of these is fatal: each one is a rejected call that can be retried with
corrected input.
"""

from __future__ import annotations


class AuthDirectoryError(Exception):
    code: str = "auth_directory_error"
    default_message: str = "Operation rejected."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class RegistrationError(AuthDirectoryError):
    code = "registration_error"
    default_message = "Registration failed."


class InvalidName(RegistrationError):
    code = "invalid_name"
    default_message = "Invalid name. Name must be at least 2 characters."


class InvalidEmail(RegistrationError):
    code = "invalid_email"
    default_message = "Invalid email format."


class InvalidPassword(RegistrationError):
    code = "invalid_password"
    default_message = "Password must be at least 6 characters long."


class InvalidRole(RegistrationError):
    code = "invalid_role"
    default_message = "Invalid role. Role must be ADMIN or MEMBER."


class EmailAlreadyRegistered(RegistrationError):
    code = "email_already_registered"
    default_message = "Email already registered. Please login."


class AdminAlreadyRegistered(RegistrationError):
    code = "admin_already_registered"
    default_message = "Admin already registered. Only one admin is allowed."


class InvalidAdminEmail(RegistrationError):
    code = "invalid_admin_email"
    default_message = "Invalid admin email."


# ---------------------------------------------------------------------------
# Authentication and authorization
# ---------------------------------------------------------------------------


class AuthenticationError(AuthDirectoryError):
    code = "authentication_error"
    default_message = "Authentication failed."


class InvalidEmailFormat(AuthenticationError):
    code = "invalid_email_format"
    default_message = "Invalid email format."


class EmailNotRegistered(AuthenticationError):
    code = "email_not_registered"
    default_message = "Email not registered. Please register first."


class IncorrectPassword(AuthenticationError):
    code = "incorrect_password"
    default_message = "Incorrect password."


class NotLoggedIn(AuthenticationError):
    code = "not_logged_in"
    default_message = "Please login first."


class InvalidContact(AuthenticationError):
    code = "invalid_contact"
    default_message = "Invalid contact number. Must be 10 digits."


class AccessDenied(AuthenticationError):
    code = "access_denied"
    default_message = "Access denied. Admin only."
