"""
Vault Password Store — Registered secrets keyed by vault id.

Password file format (UTF-8):

- a single non-blank line is one bare secret, registered under the vault id
  given by the caller (``"default"`` unless told otherwise);
- two or more non-blank lines are ``<vault_id>: <secret>`` pairs, split on
  the first ``:`` and stripped of surrounding whitespace.

Blank lines are ignored everywhere.

Security Note:
    Never log secrets. Only log vault ids and entry counts.
"""
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

from .container import validate_vault_id
from .errors import (
    FormatError,
    PasswordFileError,
    PasswordFileFormatError,
    PasswordNotAvailable,
)

logger = logging.getLogger("playvault.vault")

DEFAULT_VAULT_ID = "default"


@dataclass(frozen=True)
class PasswordEntry:
    vault_id: str
    secret: str = field(repr=False)


def parse_password_file(
    content: str,
    path: Union[str, Path] = "<string>",
    vault_id: str = DEFAULT_VAULT_ID,
) -> list[PasswordEntry]:
    """Parse password file content into entries.

    Raises:
        PasswordFileFormatError: If the content is empty or a line of a
            multi-password file is not a valid ``id: secret`` pair.
    """
    lines = [
        (lineno, raw.strip())
        for lineno, raw in enumerate(content.splitlines(), start=1)
        if raw.strip()
    ]
    if not lines:
        raise PasswordFileFormatError(path, "file holds no password")
    if len(lines) == 1:
        return [PasswordEntry(vault_id=vault_id, secret=lines[0][1])]

    entries = []
    for lineno, line in lines:
        name, sep, secret = line.partition(":")
        name = name.strip()
        secret = secret.strip()
        if not sep:
            raise PasswordFileFormatError(
                path, "expected '<vault_id>: <secret>'", line=lineno,
            )
        if not name or not secret:
            raise PasswordFileFormatError(
                path, "vault id and secret cannot be empty", line=lineno,
            )
        try:
            validate_vault_id(name)
        except FormatError as err:
            raise PasswordFileFormatError(path, str(err), line=lineno) from None
        entries.append(PasswordEntry(vault_id=name, secret=secret))
    return entries


class PasswordStore:
    """Maps vault ids to secrets and picks the secret for a container.

    Writers swap in a new read-only snapshot under a lock, so concurrent
    readers see either the old or the new table, never a mix.
    """

    def __init__(
        self,
        default_vault_id: Optional[str] = None,
        prompt_on_missing: bool = False,
    ):
        if default_vault_id is not None:
            validate_vault_id(default_vault_id)
        self.default_vault_id = default_vault_id
        self.prompt_on_missing = prompt_on_missing
        self._entries = MappingProxyType({})
        self._lock = threading.Lock()

    def _publish(self, entries: list[PasswordEntry]) -> None:
        with self._lock:
            table = dict(self._entries)
            for entry in entries:
                table[entry.vault_id] = entry
            self._entries = MappingProxyType(table)

    def add_password(self, vault_id: str, secret: str) -> None:
        """Register ``secret`` for ``vault_id``; an existing entry is replaced.

        Raises:
            FormatError: If the vault id cannot appear in a header.
            ValueError: If the secret is empty.
        """
        validate_vault_id(vault_id)
        if not secret:
            raise ValueError("Vault password cannot be empty")
        self._publish([PasswordEntry(vault_id=vault_id, secret=secret)])
        logger.debug("Registered vault password for id=%s", vault_id)

    def remove_password(self, vault_id: str) -> bool:
        """Drop the entry for ``vault_id``. Returns False if it was absent."""
        with self._lock:
            if vault_id not in self._entries:
                return False
            table = dict(self._entries)
            del table[vault_id]
            self._entries = MappingProxyType(table)
        logger.debug("Removed vault password for id=%s", vault_id)
        return True

    def load_password_file(
        self,
        path: Union[str, Path],
        vault_id: str = DEFAULT_VAULT_ID,
    ) -> list[str]:
        """Read a password file and merge its entries into the store.

        Args:
            path: Password file location.
            vault_id: Id used when the file holds a single bare secret.

        Returns:
            The vault ids loaded from the file.

        Raises:
            PasswordFileError: The file could not be read.
            PasswordFileFormatError: The file content is malformed.
        """
        validate_vault_id(vault_id)
        try:
            with open(path, "rb") as fh:
                raw = fh.read()
        except OSError as err:
            raise PasswordFileError(path, err.strerror or str(err)) from err
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise PasswordFileFormatError(path, "file is not valid UTF-8") from None

        entries = parse_password_file(content, path=path, vault_id=vault_id)
        self._publish(entries)
        ids = [entry.vault_id for entry in entries]
        logger.info(
            "Loaded %d vault password(s) from %s: %s", len(ids), path, ids,
        )
        return ids

    def resolve_entry(self, vault_id: Optional[str] = None) -> PasswordEntry:
        """Pick the entry for ``vault_id``.

        An explicit id is looked up exactly. Without one the configured
        default id is used when registered, else the only entry when the
        store holds exactly one.

        Raises:
            PasswordNotAvailable: If no entry applies.
        """
        entries = self._entries
        if vault_id is not None:
            entry = entries.get(vault_id)
        elif self.default_vault_id is not None and self.default_vault_id in entries:
            entry = entries[self.default_vault_id]
        elif len(entries) == 1:
            entry = next(iter(entries.values()))
        else:
            entry = None
        if entry is None:
            raise PasswordNotAvailable(
                vault_id if vault_id is not None else self.default_vault_id,
                prompt=self.prompt_on_missing,
            )
        return entry

    def resolve(self, vault_id: Optional[str] = None) -> str:
        """Return the secret for ``vault_id`` (see :meth:`resolve_entry`)."""
        return self.resolve_entry(vault_id).secret

    def vault_ids(self) -> list[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, vault_id: object) -> bool:
        return vault_id in self._entries
