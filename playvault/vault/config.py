"""
Vault Configuration — Validated settings for the vault service.

Reads settings from environment variables:
    VAULT_DEFAULT_ID = <vault id used when a container names none>
    VAULT_PROMPT_ON_MISSING = <bool, caller prompts when a password is missing>
    VAULT_CACHE_TTL = <seconds, 0 disables the plaintext cache>
    VAULT_CACHE_MAX_ENTRIES = <int>
    VAULT_PASSWORD_FILE = <path to a vault password file>

Security Note:
    Never log passwords. Only log vault ids and file paths.
"""
import os
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .container import validate_vault_id

logger = logging.getLogger("playvault.vault")

_ENV_FIELDS = {
    "VAULT_DEFAULT_ID": "default_vault_id",
    "VAULT_PROMPT_ON_MISSING": "prompt_on_missing",
    "VAULT_CACHE_TTL": "cache_ttl",
    "VAULT_CACHE_MAX_ENTRIES": "cache_max_entries",
    "VAULT_PASSWORD_FILE": "password_file",
}


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    default_vault_id: Optional[str] = None
    prompt_on_missing: bool = False
    cache_ttl: int = Field(default=300, ge=0)
    cache_max_entries: int = Field(default=1024, ge=1, le=100000)
    password_file: Optional[Path] = None

    @field_validator("default_vault_id")
    @classmethod
    def validate_default_id(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the default vault id can be written into a header."""
        if v is not None:
            validate_vault_id(v)
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Unset variables keep their defaults.

        Returns:
            Populated VaultConfig instance.
        """
        values = {
            name: os.environ[env]
            for env, name in _ENV_FIELDS.items()
            if os.environ.get(env)
        }
        config = cls(**values)
        logger.debug(
            "Vault config from env: default_id=%s cache_ttl=%d",
            config.default_vault_id, config.cache_ttl,
        )
        return config
