#!/usr/bin/env python3
"""
Auth Directory -- interactive console over an in-memory user directory.

Usage:
  python main.py
  python main.py --admin-email admin@example.com
  python main.py --file commands.txt
  python main.py --log-level DEBUG

Commands (one per line, shell-style quoting):
  register NAME EMAIL ROLE [PASSWORD]   ROLE is admin or member
  login EMAIL [PASSWORD]
  logout
  whoami
  profile AREA [CONTACT]                "" clears a field
  users                                 admin only
  status
  help
  quit

Passwords left off the command line are prompted for without echo.

Environment variables:
  ADMIN_EMAIL             Reserved administrator address.
  BCRYPT_ROUNDS           bcrypt cost factor (default 12).
  SESSION_EXPIRE_SECONDS  Token session lifetime (default 3600).
  LOG_LEVEL               Logging level (default INFO).
"""

from __future__ import annotations

import argparse
import getpass
import logging
import shlex
from collections.abc import Callable
from pathlib import Path

from auth.directory import AuthDirectory
from auth.errors import AuthDirectoryError
from auth.models import User
from core.config import Settings, get_settings

logger = logging.getLogger("authdirectory.cli")

_HELP = """\
  register NAME EMAIL ROLE [PASSWORD]   create an account (ROLE: admin | member)
  login EMAIL [PASSWORD]                start the session
  logout                                end the session
  whoami                                show the logged-in user
  profile AREA [CONTACT]                update area and 10-digit contact
  users                                 list all users (admin only)
  status                                directory summary
  help                                  this text
  quit                                  leave"""


def _load_file(path: str) -> list[str]:
    """Read commands from a file -- one per line, # comments and blank lines ignored.

    Resolves symlinks and verifies the path is a regular file before reading.
    """
    file_path = Path(path).resolve()
    if not file_path.is_file():
        print(f"  [!] '{path}' is not a readable file.")
        return []
    try:
        lines = file_path.read_text().splitlines()
    except OSError as e:
        print(f"  [!] Could not read file '{path}': {e}")
        return []
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]


def format_user(user: User) -> str:
    area = user.area or "-"
    contact = user.contact or "-"
    return f"{user.id:<12} {user.role.value:<6} {user.name:<20} {user.email:<30} {area:<15} {contact}"


class Shell:
    """Command interpreter bound to one AuthDirectory.

    execute() handles a single command line and returns False once the
    user asks to quit. All output goes through ``out`` so tests can capture it.
    """

    def __init__(
        self,
        directory: AuthDirectory,
        out: Callable[[str], None] = print,
        ask_password: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self.directory = directory
        self._out = out
        self._ask_password = ask_password
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "register": self._register,
            "login": self._login,
            "logout": self._logout,
            "whoami": self._whoami,
            "profile": self._profile,
            "users": self._users,
            "status": self._status,
            "help": self._help,
        }

    def execute(self, line: str) -> bool:
        try:
            words = shlex.split(line)
        except ValueError as e:
            self._out(f"  [!] Could not parse command: {e}")
            return True
        if not words:
            return True
        name, args = words[0].lower(), words[1:]
        if name in ("quit", "exit"):
            return False
        handler = self._commands.get(name)
        if handler is None:
            self._out(f"  [!] Unknown command '{name}'. Type 'help' for the list.")
            return True
        try:
            handler(args)
        except AuthDirectoryError as e:
            self._out(f"  [!] {e.message}")
        except _UsageError as e:
            self._out(f"  Usage: {e}")
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _password(self, args: list[str], index: int) -> str:
        if len(args) > index:
            return args[index]
        return self._ask_password("  Password: ")

    def _register(self, args: list[str]) -> None:
        if len(args) not in (3, 4):
            raise _UsageError("register NAME EMAIL ROLE [PASSWORD]")
        name, email, role = args[:3]
        user = self.directory.register(name, email, self._password(args, 3), role)
        self._out(f"  Registration successful! {user.name} is {user.role.value} {user.id}.")

    def _login(self, args: list[str]) -> None:
        if len(args) not in (1, 2):
            raise _UsageError("login EMAIL [PASSWORD]")
        user = self.directory.login(args[0], self._password(args, 1))
        self._out(f"  Login successful! Welcome, {user.name}.")

    def _logout(self, args: list[str]) -> None:
        user = self.directory.get_current_user()
        self.directory.logout()
        if user is None:
            self._out("  No one is logged in.")
        else:
            self._out(f"  Goodbye, {user.name}.")

    def _whoami(self, args: list[str]) -> None:
        user = self.directory.get_current_user()
        if user is None:
            self._out("  Not logged in.")
            return
        self._out(format_user(user))

    def _profile(self, args: list[str]) -> None:
        if len(args) not in (1, 2):
            raise _UsageError("profile AREA [CONTACT]")
        contact = args[1] if len(args) == 2 else None
        self.directory.update_profile(args[0], contact)
        self._out("  Profile updated successfully!")

    def _users(self, args: list[str]) -> None:
        users = self.directory.get_all_users()
        self._out(f"{'ID':<12} {'ROLE':<6} {'NAME':<20} {'EMAIL':<30} {'AREA':<15} CONTACT")
        for user in users:
            self._out(format_user(user))
        self._out(f"  {len(users)} user(s).")

    def _status(self, args: list[str]) -> None:
        admin = "registered" if self.directory.is_admin_registered() else "not registered"
        current = self.directory.get_current_user()
        self._out(f"  Users: {self.directory.user_count()}")
        self._out(f"  Admin: {admin} (reserved email: {self.directory.admin_email})")
        self._out(f"  Session: {current.email if current else 'none'}")

    def _help(self, args: list[str]) -> None:
        self._out(_HELP)


class _UsageError(Exception):
    pass


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="auth-directory",
        description="Interactive console over an in-memory user and session directory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --admin-email admin@example.com
  python main.py --file commands.txt
  BCRYPT_ROUNDS=10 python main.py
        """,
    )
    parser.add_argument(
        "--admin-email",
        metavar="EMAIL",
        help="Reserved administrator email (overrides ADMIN_EMAIL)",
    )
    parser.add_argument(
        "--file",
        metavar="PATH",
        help="Run commands from a file (one per line, # comments supported) instead of prompting",
    )
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="Logging level (overrides LOG_LEVEL)",
    )
    args = parser.parse_args()

    overrides: dict = {}
    if args.admin_email:
        overrides["admin_email"] = args.admin_email
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        settings = Settings(**overrides) if overrides else get_settings()
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    shell = Shell(AuthDirectory(settings=settings))

    if args.file:
        for line in _load_file(args.file):
            print(f"> {line}")
            if not shell.execute(line):
                break
        return

    print("\nAuth Directory")
    print("─" * 40)
    print(f"Reserved admin email: {settings.admin_email}")
    print("Type 'help' for commands.\n")
    while True:
        try:
            line = input("auth> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not shell.execute(line):
            break
    logger.debug("Console closed")


if __name__ == "__main__":
    main()
