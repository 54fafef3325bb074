"""
Vault Errors — Typed failures raised by the vault engine.

Every parse, password or crypto failure surfaces as a subclass of
:class:`VaultError`. ``DecryptionFailed`` deliberately does not say whether
the password was wrong or the data was tampered with.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for all vault failures."""


class FormatError(VaultError, ValueError):
    """Malformed container header or body."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnsupportedVersion(VaultError):
    """Container version is recognized as a vault but not handled."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Unsupported vault format version: {version!r}")


class UnsupportedCipher(VaultError):
    """Container names a cipher suite this engine does not implement."""

    def __init__(self, cipher_id: str):
        self.cipher_id = cipher_id
        super().__init__(f"Unsupported vault cipher: {cipher_id!r}")


class PasswordNotAvailable(VaultError):
    """No registered password applies to the requested vault id.

    Recoverable: the caller may register a password (prompting the user
    when ``prompt`` is set) and retry.
    """

    def __init__(self, vault_id: Optional[str], prompt: bool = False):
        self.vault_id = vault_id
        self.prompt = prompt
        if vault_id is None:
            message = "No vault password available"
        else:
            message = f"No vault password available for vault id {vault_id!r}"
        super().__init__(message)


class DecryptionFailed(VaultError):
    """Wrong password, corrupted or tampered data."""

    def __init__(self, message: str = "Decryption failed"):
        super().__init__(message)


class PasswordFileError(VaultError):
    """The password file could not be read."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot read vault password file {path}: {reason}")


class PasswordFileFormatError(VaultError):
    """The password file was read but its content is malformed."""

    def __init__(self, path, message: str, line: Optional[int] = None):
        self.path = path
        self.line = line
        where = f"{path}" if line is None else f"{path}, line {line}"
        super().__init__(f"Invalid vault password file ({where}): {message}")


class VaultFileError(VaultError):
    """A vault file could not be read or written."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot access vault file {path}: {reason}")
