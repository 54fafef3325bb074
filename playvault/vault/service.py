"""
VaultService — Decrypt and encrypt vault containers.

Provides the public API used by document parsers:
- ``is_encrypted(data)`` / ``extract_vault_id(data)`` — header inspection
- ``decrypt_string(data)`` / ``decrypt_bytes(data)`` — cache → full pipeline
- ``decrypt_file(path)`` / ``decrypt_file_async(path)`` — file wrappers
- ``encrypt_string(plaintext, vault_id)`` / ``encrypt_file(...)``
- ``rekey(data, new_vault_id)`` — re-encrypt under another password

Decryption runs parse → resolve password → derive keys → authenticate and
decrypt; any stage failure raises its typed error and nothing is cached.

Security Note:
    Never log plaintext, passwords or container bodies. Only log vault ids,
    versions and fingerprint prefixes.
"""
import os
import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from . import cipher
from .cache import PlaintextCache, fingerprint
from .config import VaultConfig
from .container import (
    DEFAULT_CIPHER,
    VERSION_1_1,
    VERSION_1_2,
    Container,
    as_text,
    get_suite,
    parse,
    serialize,
)
from .container import extract_vault_id as _extract_vault_id
from .container import is_encrypted as _is_encrypted
from .errors import DecryptionFailed, FormatError, VaultFileError
from .kdf import derive_keys
from .passwords import DEFAULT_VAULT_ID, PasswordStore

logger = logging.getLogger("playvault.vault")


# ---------------------------------------------------------------------------
# Container-level helpers
# ---------------------------------------------------------------------------

def seal(
    plaintext: bytes,
    secret: str,
    vault_id: Optional[str] = None,
    salt: Optional[bytes] = None,
    cipher_id: str = DEFAULT_CIPHER,
) -> Container:
    """Encrypt ``plaintext`` under ``secret`` into a new container.

    A vault id other than ``"default"`` produces a version 1.2 container,
    anything else version 1.1. A fresh random salt is used unless one is
    given.
    """
    suite = get_suite(cipher_id)
    if salt is None:
        salt = os.urandom(suite.salt_length)
    keys = derive_keys(secret, salt, suite)
    ciphertext, tag = cipher.encrypt(
        plaintext, keys.cipher_key, keys.iv, keys.auth_key,
    )
    if vault_id is not None and vault_id != DEFAULT_VAULT_ID:
        version = VERSION_1_2
    else:
        version, vault_id = VERSION_1_1, None
    return Container(
        version=version,
        cipher_id=cipher_id,
        vault_id=vault_id,
        salt=salt,
        auth_tag=tag,
        ciphertext=ciphertext,
    )


def unseal(container: Container, secret: str) -> bytes:
    """Authenticate and decrypt ``container`` with ``secret``.

    Raises:
        DecryptionFailed: Wrong secret or tampered container.
    """
    keys = derive_keys(secret, container.salt, container.suite)
    return cipher.verify_and_decrypt(
        container.ciphertext,
        keys.auth_key,
        container.auth_tag,
        keys.cipher_key,
        keys.iv,
    )


def is_encrypted_file(path: Union[str, Path]) -> bool:
    """Return True if the first line of the file at ``path`` is a vault header."""
    try:
        with open(path, "rb") as fh:
            head = fh.readline()
    except OSError as err:
        raise VaultFileError(path, err.strerror or str(err)) from err
    return _is_encrypted(head)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class VaultService:
    """Façade over the container codec, password store and cipher engine.

    Owns the password store and a bounded TTL cache of decrypted plaintext.
    The password store is only read while decrypting or encrypting.
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        passwords: Optional[PasswordStore] = None,
        clock=None,
    ):
        self.config = config or VaultConfig()
        if passwords is None:
            passwords = PasswordStore(
                default_vault_id=self.config.default_vault_id,
                prompt_on_missing=self.config.prompt_on_missing,
            )
        self.passwords = passwords
        cache_kwargs = {}
        if clock is not None:
            cache_kwargs["clock"] = clock
        self._cache = PlaintextCache(
            ttl=self.config.cache_ttl,
            max_entries=self.config.cache_max_entries,
            **cache_kwargs,
        )

    @classmethod
    def from_config(cls, config: Optional[VaultConfig] = None) -> "VaultService":
        """Build a service, loading the configured password file if any.

        Args:
            config: Settings; read from the environment when omitted.
        """
        if config is None:
            config = VaultConfig.from_env()
        service = cls(config=config)
        if config.password_file is not None:
            service.load_password_file(
                config.password_file,
                vault_id=config.default_vault_id or DEFAULT_VAULT_ID,
            )
        return service

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def add_password(self, vault_id: str, secret: str) -> None:
        self.passwords.add_password(vault_id, secret)

    def load_password_file(
        self,
        path: Union[str, Path],
        vault_id: str = DEFAULT_VAULT_ID,
    ) -> list[str]:
        return self.passwords.load_password_file(path, vault_id=vault_id)

    # ------------------------------------------------------------------
    # Header inspection
    # ------------------------------------------------------------------

    def is_encrypted(self, data: Union[str, bytes]) -> bool:
        return _is_encrypted(data)

    def extract_vault_id(self, data: Union[str, bytes]) -> Optional[str]:
        """Return the vault id in the header; touches no password or key."""
        return _extract_vault_id(data)

    # ------------------------------------------------------------------
    # Decryption
    # ------------------------------------------------------------------

    def decrypt_bytes(self, data: Union[str, bytes]) -> bytes:
        """Decrypt a vault blob and return the raw plaintext.

        A non-expired cache hit for the same blob skips key derivation and
        decryption entirely.

        Raises:
            FormatError, UnsupportedVersion, UnsupportedCipher: Bad envelope.
            PasswordNotAvailable: No registered password applies.
            DecryptionFailed: Wrong password or tampered data.
        """
        text = as_text(data)
        key = fingerprint(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        container = parse(text)
        secret = self.passwords.resolve(container.vault_id)
        try:
            plaintext = unseal(container, secret)
        except DecryptionFailed:
            logger.warning(
                "Vault decryption failed: version=%s vault_id=%s",
                container.version, container.vault_id,
            )
            raise
        self._cache.put(key, plaintext)
        logger.debug(
            "Vault decrypted: version=%s vault_id=%s fingerprint=%s",
            container.version, container.vault_id, key[:12],
        )
        return plaintext

    def decrypt_string(self, data: Union[str, bytes]) -> str:
        """Decrypt a vault blob holding UTF-8 text.

        Raises:
            FormatError: If the plaintext is not valid UTF-8, besides the
                errors of :meth:`decrypt_bytes`.
        """
        plaintext = self.decrypt_bytes(data)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise FormatError("Decrypted content is not valid UTF-8") from None

    @staticmethod
    def _read_file(path: Union[str, Path]) -> bytes:
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as err:
            raise VaultFileError(path, err.strerror or str(err)) from err

    def decrypt_file(self, path: Union[str, Path]) -> str:
        """Read a vault file and decrypt its content as text."""
        return self.decrypt_string(self._read_file(path))

    async def decrypt_file_async(self, path: Union[str, Path]) -> str:
        """Like :meth:`decrypt_file`, reading the file off the event loop.

        Cancelling while the file is being read leaves no trace; once
        decryption starts it runs to completion.
        """
        data = await asyncio.to_thread(self._read_file, path)
        return self.decrypt_string(data)

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def encrypt_bytes(
        self,
        plaintext: bytes,
        vault_id: Optional[str] = None,
    ) -> str:
        """Encrypt ``plaintext`` with the password resolved for ``vault_id``.

        Raises:
            PasswordNotAvailable: No registered password applies.
        """
        entry = self.passwords.resolve_entry(vault_id)
        container = seal(plaintext, entry.secret, vault_id=entry.vault_id)
        logger.debug(
            "Vault encrypted: version=%s vault_id=%s",
            container.version, container.vault_id,
        )
        return serialize(container)

    def encrypt_string(
        self,
        plaintext: str,
        vault_id: Optional[str] = None,
    ) -> str:
        return self.encrypt_bytes(plaintext.encode("utf-8"), vault_id)

    def encrypt_file(
        self,
        path: Union[str, Path],
        plaintext: Union[str, bytes],
        vault_id: Optional[str] = None,
    ) -> None:
        """Encrypt ``plaintext`` and write the container to ``path``."""
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        vaulttext = self.encrypt_bytes(plaintext, vault_id)
        try:
            with open(path, "w", encoding="ascii", newline="\n") as fh:
                fh.write(vaulttext)
        except OSError as err:
            raise VaultFileError(path, err.strerror or str(err)) from err

    def rekey(self, data: Union[str, bytes], new_vault_id: str) -> str:
        """Re-encrypt a vault blob under the password of ``new_vault_id``."""
        plaintext = self.decrypt_bytes(data)
        return self.encrypt_bytes(plaintext, new_vault_id)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()

    def purge_expired(self) -> int:
        return self._cache.purge_expired()

    def cache_stats(self) -> dict:
        return self._cache.stats()
