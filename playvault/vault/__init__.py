"""Vault — Password-encrypted containers embedded in playbook content.

Security Note (Threat Model):
    Decrypted plaintext is cached in process memory until its TTL expires.
    A memory dump of the application process could expose cached secrets
    and registered passwords. This is an accepted limitation; callers that
    cannot accept it should set ``cache_ttl=0``.
"""

from .errors import (
    VaultError,
    FormatError,
    UnsupportedVersion,
    UnsupportedCipher,
    PasswordNotAvailable,
    DecryptionFailed,
    PasswordFileError,
    PasswordFileFormatError,
    VaultFileError,
)
from .container import Container, is_encrypted, extract_vault_id, parse, serialize
from .kdf import DerivedKeys, derive_keys
from .passwords import DEFAULT_VAULT_ID, PasswordEntry, PasswordStore
from .config import VaultConfig
from .service import VaultService, is_encrypted_file

__all__ = [
    "VaultError",
    "FormatError",
    "UnsupportedVersion",
    "UnsupportedCipher",
    "PasswordNotAvailable",
    "DecryptionFailed",
    "PasswordFileError",
    "PasswordFileFormatError",
    "VaultFileError",
    "Container",
    "is_encrypted",
    "extract_vault_id",
    "parse",
    "serialize",
    "DerivedKeys",
    "derive_keys",
    "DEFAULT_VAULT_ID",
    "PasswordEntry",
    "PasswordStore",
    "VaultConfig",
    "VaultService",
    "is_encrypted_file",
]
