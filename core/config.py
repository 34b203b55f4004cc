"""
core/config.py -- TokenGate settings, read once from the environment.

Three groups of knobs decide how the service behaves:

  Signing      SECRET_KEY signs every token (HS256) and TOKEN_EXPIRE_SECONDS
               fixes how long a token stays valid. Rotating the key logs
               everyone out; there is no server-side token state to migrate.

  Credentials  SEED_USERS ({username: bcrypt hash}, JSON) feeds the in-memory
               store. Setting CREDENTIAL_DB_URL switches to the SQL store and
               SEED_USERS becomes an insert-if-missing list. BCRYPT_ROUNDS is
               the cost used when hashing new passwords.

  Access       ACCESS_RULES ({glob: "open" | "authenticated"}, JSON, first
               match wins) plus DEFAULT_REQUIREMENT for paths no rule names.
               LOGIN_RATE_LIMIT throttles POST /login per client address.

Values come from environment variables or a .env file (pydantic-settings).
get_settings() caches the parsed Settings for the life of the process.

Signing key rules: a key under 32 characters is refused, since HS256 is only
as strong as the key. With DEBUG=true and no key, a random one is generated,
so tokens die with the process. Without DEBUG a missing key stops startup.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("tokengate.config")

_REQUIREMENT_VALUES = {"open", "authenticated"}


class Settings(BaseSettings):
    """Every TokenGate knob, one field per environment variable.

    Only SECRET_KEY lacks a usable default; set it, or DEBUG=true, before
    constructing Settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Mode and signing key
    # ------------------------------------------------------------------

    debug: bool = False
    # "" means unset; validate_secret_key replaces it or refuses to start.
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Tokens and passwords
    # ------------------------------------------------------------------

    token_expire_seconds: int = 3600
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # Credential store
    # ------------------------------------------------------------------

    # username -> bcrypt hash. Produce hashes with `python main.py hash-password`.
    seed_users: dict[str, str] = {}
    # Empty selects the in-memory store.
    credential_db_url: str = ""

    # ------------------------------------------------------------------
    # Access policy
    # ------------------------------------------------------------------

    # Glob pattern -> "open" | "authenticated". First match wins.
    access_rules: dict[str, str] = {
        "/login": "open",
        "/health": "open",
        "/hello": "authenticated",
        "/me": "authenticated",
    }
    default_requirement: str = "authenticated"

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("token_expire_seconds")
    @classmethod
    def validate_token_ttl(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        # bcrypt.gensalt() accepts 4..31
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @field_validator("access_rules")
    @classmethod
    def validate_access_rules(cls, rules: dict[str, str]) -> dict[str, str]:
        normalized = {pattern: requirement.strip().lower() for pattern, requirement in rules.items()}
        unknown = {r for r in normalized.values() if r not in _REQUIREMENT_VALUES}
        if unknown:
            raise ValueError(f"Unknown access requirement(s): {sorted(unknown)!r}")
        return normalized

    @field_validator("default_requirement")
    @classmethod
    def validate_default_requirement(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in _REQUIREMENT_VALUES:
            raise ValueError(f"DEFAULT_REQUIREMENT must be one of {sorted(_REQUIREMENT_VALUES)!r}")
        return value

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Resolve the token signing key.

        No key + DEBUG: sign with a throwaway random key for this process.
        No key otherwise: fail, since tokens from an unknown key cannot be
        verified by the next replica or the next restart.
        Any key under 32 characters is refused.
        """
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required to sign tokens. "
                    "Provide at least 32 random characters via the environment or .env "
                    "(or set DEBUG=true to sign with a per-process key)."
                )
            self.secret_key = secrets.token_hex(32)
            logger.warning("No SECRET_KEY set; signing tokens with a per-process key (DEBUG mode).")
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Parse the environment once and reuse the result.

    Tests that change environment variables call get_settings.cache_clear()
    before and after.
    """
    return Settings()
