"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. Code that
      needs different values (tests, embedding callers) constructs Settings()
      directly and hands it to AuthDirectory.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. admin_email -> ADMIN_EMAIL). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used to refuse a reserved admin address
      that registration itself would reject as malformed -- such a value makes
      the admin account impossible to create.

Layer rule: core/ is the kernel. This module may not import from auth/.
"""

import logging
import re
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("authdirectory.config")

# Kept in step with auth/validation.py EMAIL_PATTERN. Duplicated rather than
# imported because core/ may not depend on auth/.
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


class Settings(BaseSettings):
    """Settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    # The single address the administrator account must register with.
    # Compared case-insensitively.
    admin_email: str = "admin@nammatirupur.com"

    # ------------------------------------------------------------------
    # Credentials and sessions
    # ------------------------------------------------------------------

    # bcrypt cost factor. 12 is the library default; tests drop it to 4.
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    # Lifetime of token sessions issued by open_session(). The directory's
    # default active session has no expiry.
    session_expire_seconds: int = Field(default=3600, gt=0)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_admin_email(self) -> "Settings":
        """Refuse to start with a malformed reserved admin email."""
        self.admin_email = self.admin_email.strip()
        if not _EMAIL_RE.fullmatch(self.admin_email):
            raise ValueError(
                f"ADMIN_EMAIL {self.admin_email!r} is not a valid email address. "
                "The administrator account could never be registered with it."
            )
        self.log_level = self.log_level.upper()
        if self.log_level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL {self.log_level!r} is not a logging level name.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    settings = Settings()
    logger.debug("Settings loaded (admin_email=%s)", settings.admin_email)
    return settings
