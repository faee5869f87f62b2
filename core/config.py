"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the back-office service happen here. No
module should call os.getenv() or os.environ.get() directly. The Settings
object is built once (get_settings()) and handed to the authenticator, the
request signer and the logging setup by the app factory in api/main.py.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. admin_password_hash -> ADMIN_PASSWORD_HASH).

  @model_validator(mode="after"): cross-field checks after all fields are
      resolved. Dev mode generates a session secret when none is set.

Missing secrets are NOT a startup failure. Each operation that needs a secret
checks for it and raises ConfigurationError, so "misconfigured" stays distinct
from "authentication failed" in API responses.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("backoffice.config")

_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. Empty string is the sentinel for
    "not configured" on every secret.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    environment: str = "development"
    debug: bool = False
    app_version: str = "0.1.0"

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    # bcrypt hash of the admin password. Never the plaintext.
    admin_password_hash: str = ""
    # Signs session tokens (HS256).
    jwt_secret: str = ""
    # Shared secret for X-Signature request signing.
    form_hmac_secret: str = ""

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    session_cookie_name: str = "admin_token"
    session_max_age_seconds: int = 24 * 60 * 60

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    log_redact_keys: list[str] = ["email", "phone", "user_email", "contact_email", "phone_number"]

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """Enforce the secret policy.

        Dev mode (DEBUG=true) with no JWT_SECRET: generate a random one with a
            warning. Sessions will not survive restart.

        Any secret that IS set must be at least 32 characters. A short HMAC key
            weakens both session signing and request signing.
        """
        if not self.jwt_secret and self.debug:
            self.jwt_secret = secrets.token_hex(32)
            logger.warning("Using auto-generated JWT_SECRET. Sessions will not persist across restarts.")
        for name in ("jwt_secret", "form_hmac_secret"):
            value = getattr(self, name)
            if value and len(value) < _MIN_SECRET_LENGTH:
                raise ValueError(f"{name.upper()} must be at least {_MIN_SECRET_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: build Settings(...) directly and pass it to create_app(), or call
    get_settings.cache_clear() after changing environment variables.
    """
    return Settings()
