"""Unit tests for AuthDirectory.register().

Covers:
- successful member and admin registration (ids, stored fields, no login)
- each RegistrationError kind, and the order the checks run in
- email uniqueness is case-insensitive
- the single-admin rule and the reserved admin email gate
- no partial writes on failure
- concurrent registrations cannot create two admins or duplicate emails
"""

from __future__ import annotations

import re
import threading

import pytest

from auth.directory import AuthDirectory
from auth.errors import (
    AdminAlreadyRegistered,
    EmailAlreadyRegistered,
    InvalidAdminEmail,
    InvalidEmail,
    InvalidName,
    InvalidPassword,
    InvalidRole,
    RegistrationError,
)
from auth.models import Role
from core.config import Settings


ADMIN_EMAIL = "admin@nammatirupur.com"
MEMBER_EMAIL = "asha@x.com"
MEMBER_PASSWORD = "secret1"


class TestRegisterSuccess:
    def test_member_registration_returns_user(self, directory: AuthDirectory) -> None:
        user = directory.register("Asha", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER")
        assert user.role is Role.MEMBER
        assert user.name == "Asha"
        assert user.email == MEMBER_EMAIL
        assert re.fullmatch(r"USR-[0-9A-F]{8}", user.id)
        assert user.area is None and user.contact is None
        assert user.created_at

    def test_email_is_stored_case_folded(self, directory: AuthDirectory) -> None:
        user = directory.register("Asha", "Asha@X.com", MEMBER_PASSWORD, "member")
        assert user.email == "asha@x.com"

    def test_password_is_not_stored_in_plaintext(self, directory: AuthDirectory) -> None:
        user = directory.register("Asha", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER")
        assert user.hashed_password != MEMBER_PASSWORD
        assert MEMBER_PASSWORD not in repr(user)

    def test_role_is_case_insensitive(self, directory: AuthDirectory) -> None:
        assert directory.register("Ravi", "ravi@x.com", "secret1", "mEmBeR").role is Role.MEMBER

    def test_admin_registration(self, directory: AuthDirectory) -> None:
        assert not directory.is_admin_registered()
        user = directory.register("Admin", ADMIN_EMAIL.upper(), "adminpass1", "admin")
        assert user.role is Role.ADMIN
        assert user.is_admin
        assert re.fullmatch(r"ADM-[0-9A-F]{8}", user.id)
        assert directory.is_admin_registered()

    def test_registration_does_not_log_in(self, directory: AuthDirectory) -> None:
        directory.register("Asha", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER")
        assert not directory.is_logged_in()
        assert directory.get_current_user() is None

    def test_ids_are_unique(self, directory: AuthDirectory) -> None:
        ids = {directory.register(f"User{i}", f"user{i}@x.com", "secret1", "MEMBER").id for i in range(20)}
        assert len(ids) == 20

    def test_colliding_generator_output_is_regenerated(self, settings: Settings) -> None:
        issued = iter(["USR-00000001", "USR-00000001", "USR-00000002"])
        directory = AuthDirectory(settings=settings, id_generator=lambda role: next(issued))
        first = directory.register("One", "one@x.com", "secret1", "MEMBER")
        second = directory.register("Two", "two@x.com", "secret1", "MEMBER")
        assert (first.id, second.id) == ("USR-00000001", "USR-00000002")


class TestRegisterValidation:
    @pytest.mark.parametrize(
        "args, error",
        [
            (("A", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER"), InvalidName),
            (("Asha", "not-an-email", MEMBER_PASSWORD, "MEMBER"), InvalidEmail),
            (("Asha", MEMBER_EMAIL, "12345", "MEMBER"), InvalidPassword),
            (("Asha", MEMBER_EMAIL, MEMBER_PASSWORD, "GUEST"), InvalidRole),
        ],
    )
    def test_each_field_check(self, directory: AuthDirectory, args, error) -> None:
        with pytest.raises(error):
            directory.register(*args)
        assert directory.user_count() == 0

    def test_name_is_checked_before_email_and_password(self, directory: AuthDirectory) -> None:
        with pytest.raises(InvalidName):
            directory.register("", "bad", "x", "nope")

    def test_email_is_checked_before_password(self, directory: AuthDirectory) -> None:
        with pytest.raises(InvalidEmail):
            directory.register("Asha", "bad", "x", "MEMBER")

    def test_password_is_checked_before_uniqueness(self, directory: AuthDirectory, member) -> None:
        with pytest.raises(InvalidPassword):
            directory.register("Asha", MEMBER_EMAIL, "x", "MEMBER")

    def test_unencodable_password_is_invalid(self, directory: AuthDirectory) -> None:
        with pytest.raises(InvalidPassword):
            directory.register("Sur", "sur@x.com", "secret\ud800", "MEMBER")
        assert directory.user_count() == 0

    def test_errors_share_the_registration_family(self, directory: AuthDirectory) -> None:
        with pytest.raises(RegistrationError) as exc_info:
            directory.register("A", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER")
        assert exc_info.value.code == "invalid_name"
        assert exc_info.value.to_dict()["message"]


class TestUniqueness:
    def test_same_email_any_casing_is_rejected(self, directory: AuthDirectory, member) -> None:
        with pytest.raises(EmailAlreadyRegistered):
            directory.register("Asha Again", "ASHA@X.COM", "another1", "MEMBER")
        assert directory.user_count() == 1

    def test_uniqueness_is_checked_before_admin_rules(self, directory: AuthDirectory, admin) -> None:
        with pytest.raises(EmailAlreadyRegistered):
            directory.register("Admin Two", ADMIN_EMAIL, "adminpass2", "ADMIN")


class TestSingleAdmin:
    def test_admin_must_use_reserved_email(self, directory: AuthDirectory) -> None:
        with pytest.raises(InvalidAdminEmail) as exc_info:
            directory.register("Boss", "boss@x.com", "adminpass1", "ADMIN")
        assert ADMIN_EMAIL in exc_info.value.message
        assert not directory.is_admin_registered()
        assert directory.user_count() == 0

    def test_second_admin_is_rejected_regardless_of_email(self, directory: AuthDirectory, admin) -> None:
        with pytest.raises(AdminAlreadyRegistered):
            directory.register("Boss", "boss@x.com", "adminpass2", "ADMIN")

    def test_member_may_not_take_the_admin_email_after_admin_exists(
        self, directory: AuthDirectory, admin
    ) -> None:
        with pytest.raises(EmailAlreadyRegistered):
            directory.register("Sneaky", ADMIN_EMAIL, "secret1", "MEMBER")

    def test_custom_admin_email(self) -> None:
        directory = AuthDirectory(settings=Settings(admin_email="root@example.org", bcrypt_rounds=4))
        assert directory.admin_email == "root@example.org"
        with pytest.raises(InvalidAdminEmail):
            directory.register("Admin", ADMIN_EMAIL, "adminpass1", "ADMIN")
        assert directory.register("Admin", "Root@Example.org", "adminpass1", "ADMIN").is_admin

    def test_static_accessor_reports_configured_email(self) -> None:
        assert AuthDirectory.get_admin_email() == ADMIN_EMAIL

    def test_instance_email_follows_its_own_settings(self) -> None:
        directory = AuthDirectory(settings=Settings(admin_email="root@example.org", bcrypt_rounds=4))
        assert directory.admin_email == "root@example.org"
        assert AuthDirectory.get_admin_email() == ADMIN_EMAIL


class TestConcurrentRegistration:
    def test_only_one_of_many_concurrent_admin_registrations_wins(self, directory: AuthDirectory) -> None:
        results: list[object] = []
        barrier = threading.Barrier(8)

        def attempt() -> None:
            barrier.wait()
            try:
                results.append(directory.register("Admin", ADMIN_EMAIL, "adminpass1", "ADMIN"))
            except RegistrationError as e:
                results.append(e)

        threads = [threading.Thread(target=attempt) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        losers = [r for r in results if isinstance(r, RegistrationError)]
        assert len(results) - len(losers) == 1
        assert all(isinstance(r, (EmailAlreadyRegistered, AdminAlreadyRegistered)) for r in losers)
        assert directory.user_count() == 1
