"""
Vault Container Codec — Parse and serialize the vault text envelope.

Envelope layout::

    $ANSIBLE_VAULT;<version>;<cipher>[;<vault_id>]
    <hex, wrapped at 80 columns>

The wrapped hex decodes to ``<hex salt>\\n<hex tag>\\n<hex ciphertext>``.
Version ``1.1`` carries three header fields, version ``1.2`` adds the vault
id as a fourth one.

Security Note:
    Never log container bodies. Header fields (version, cipher, vault id)
    are safe to log.
"""
import re
import binascii
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import FormatError, UnsupportedCipher, UnsupportedVersion

logger = logging.getLogger("playvault.vault")

VAULT_TAG = "$ANSIBLE_VAULT"
WRAP_WIDTH = 80

VERSION_1_1 = "1.1"
VERSION_1_2 = "1.2"
# version -> number of header fields
SUPPORTED_VERSIONS = {
    VERSION_1_1: 3,
    VERSION_1_2: 4,
}


@dataclass(frozen=True)
class CipherSuite:
    """Fixed parameters of a cipher identifier."""
    cipher_id: str
    salt_length: int
    tag_length: int
    key_length: int
    iv_length: int


CIPHER_SUITES = {
    "AES256": CipherSuite(
        cipher_id="AES256",
        salt_length=32,
        tag_length=32,
        key_length=32,
        iv_length=16,
    ),
}
DEFAULT_CIPHER = "AES256"

_HEX_LINE = re.compile(r"^[0-9a-fA-F]*$")


def get_suite(cipher_id: str) -> CipherSuite:
    """Return the cipher suite for ``cipher_id``.

    Raises:
        UnsupportedCipher: If the identifier is unknown.
    """
    try:
        return CIPHER_SUITES[cipher_id]
    except KeyError:
        raise UnsupportedCipher(cipher_id) from None


def validate_vault_id(vault_id: str) -> str:
    """Check a vault id can be embedded in a header line.

    Raises:
        FormatError: If the id is empty or contains ``;`` or a line break.
    """
    if not isinstance(vault_id, str) or not vault_id.strip():
        raise FormatError("Vault id cannot be empty")
    if vault_id != vault_id.strip():
        raise FormatError(
            f"Vault id cannot have surrounding whitespace: {vault_id!r}"
        )
    if ";" in vault_id or "\n" in vault_id or "\r" in vault_id:
        raise FormatError(
            f"Vault id cannot contain ';' or line breaks: {vault_id!r}"
        )
    return vault_id


@dataclass(frozen=True)
class Container:
    """A parsed vault envelope.

    Built fresh for every decrypt or encrypt call and never persisted.
    """
    version: str
    cipher_id: str
    salt: bytes = field(repr=False)
    auth_tag: bytes = field(repr=False)
    ciphertext: bytes = field(repr=False)
    vault_id: Optional[str] = None

    def __post_init__(self):
        if self.version not in SUPPORTED_VERSIONS:
            raise UnsupportedVersion(self.version)
        suite = get_suite(self.cipher_id)
        if self.version == VERSION_1_2:
            if self.vault_id is None:
                raise FormatError("Version 1.2 container requires a vault id")
            validate_vault_id(self.vault_id)
        elif self.vault_id is not None:
            raise FormatError(
                f"Version {self.version} container cannot carry a vault id"
            )
        if len(self.salt) != suite.salt_length:
            raise FormatError(
                f"Salt must be {suite.salt_length} bytes, got {len(self.salt)}"
            )
        if len(self.auth_tag) != suite.tag_length:
            raise FormatError(
                f"Auth tag must be {suite.tag_length} bytes, "
                f"got {len(self.auth_tag)}"
            )
        if not self.ciphertext:
            raise FormatError("Ciphertext cannot be empty")

    @property
    def suite(self) -> CipherSuite:
        return CIPHER_SUITES[self.cipher_id]

    @property
    def header(self) -> str:
        fields = [VAULT_TAG, self.version, self.cipher_id]
        if self.vault_id is not None:
            fields.append(self.vault_id)
        return ";".join(fields)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def as_text(data: Union[str, bytes]) -> str:
    """Return ``data`` as text, raising FormatError for anything unusable."""
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise FormatError(f"Vault data is not valid UTF-8: {err}") from None
    if not isinstance(data, str):
        raise FormatError(
            f"Vault data must be str or bytes, not {type(data).__name__}"
        )
    try:
        data.encode("utf-8")
    except UnicodeEncodeError as err:
        raise FormatError(f"Vault data is not valid UTF-8: {err}") from None
    return data


def _first_line(data: Union[str, bytes]) -> Optional[str]:
    """Return the first line of ``data`` without leading/trailing blanks."""
    if isinstance(data, bytes):
        try:
            return data.split(b"\n", 1)[0].decode("utf-8").strip()
        except UnicodeDecodeError:
            return None
    if isinstance(data, str):
        return data.split("\n", 1)[0].strip()
    return None


def _unhex(value: str, what: str, line: Optional[int] = None) -> bytes:
    try:
        return binascii.unhexlify(value)
    except ValueError as err:
        raise FormatError(f"Invalid hex in {what}: {err}", line=line) from None


def _split_header(header: str) -> tuple[str, str, Optional[str]]:
    fields = [f.strip() for f in header.strip().split(";")]
    if fields[0] != VAULT_TAG:
        raise FormatError("Missing vault header tag", line=1)
    if len(fields) < 2:
        raise FormatError("Vault header has no version field", line=1)
    version = fields[1]
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersion(version)
    expected = SUPPORTED_VERSIONS[version]
    if len(fields) != expected:
        raise FormatError(
            f"Version {version} header expects {expected} fields, "
            f"got {len(fields)}",
            line=1,
        )
    cipher_id = fields[2]
    get_suite(cipher_id)
    vault_id = None
    if version == VERSION_1_2:
        vault_id = fields[3]
        if not vault_id:
            raise FormatError("Vault id field is empty", line=1)
    return version, cipher_id, vault_id


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def is_encrypted(data: Union[str, bytes]) -> bool:
    """Return True if the first line of ``data`` starts with the vault tag.

    Spaces and tabs around the first line are ignored, so indented block
    scalars qualify. The tag on any later line, even after blank lines,
    does not count. Only the first line has to be valid UTF-8.
    """
    first_line = _first_line(data)
    return first_line is not None and first_line.startswith(VAULT_TAG)


def extract_vault_id(data: Union[str, bytes]) -> Optional[str]:
    """Return the vault id named in the header, or None.

    Only the header line is inspected. Plain (non-vault) data and version
    1.1 containers yield None.

    Raises:
        FormatError, UnsupportedVersion, UnsupportedCipher: On a malformed
        vault header.
    """
    if not is_encrypted(data):
        return None
    return _split_header(_first_line(data))[2]


def parse(data: Union[str, bytes]) -> Container:
    """Parse a vault envelope into a :class:`Container`.

    Raises:
        FormatError: Malformed header or body (with the 1-based line number
            when one applies).
        UnsupportedVersion: Unknown format version.
        UnsupportedCipher: Unknown cipher identifier.
    """
    text = as_text(data).strip()
    if not text:
        raise FormatError("Vault data is empty")
    lines = text.splitlines()
    version, cipher_id, vault_id = _split_header(lines[0])

    body_lines = []
    for lineno, raw in enumerate(lines[1:], start=2):
        chunk = raw.strip()
        if not _HEX_LINE.match(chunk):
            raise FormatError("Vault body is not hex", line=lineno)
        body_lines.append(chunk)
    body = "".join(body_lines)
    if not body:
        raise FormatError("Vault body is empty", line=2)

    inner = _unhex(body, "vault body")
    try:
        inner_text = inner.decode("ascii")
    except UnicodeDecodeError:
        raise FormatError("Decoded vault body is not hex text") from None
    parts = inner_text.split("\n")
    if len(parts) != 3:
        raise FormatError(
            f"Decoded vault body must hold 3 fields, got {len(parts)}"
        )
    salt = _unhex(parts[0], "salt")
    auth_tag = _unhex(parts[1], "auth tag")
    ciphertext = _unhex(parts[2], "ciphertext")
    return Container(
        version=version,
        cipher_id=cipher_id,
        vault_id=vault_id,
        salt=salt,
        auth_tag=auth_tag,
        ciphertext=ciphertext,
    )


def serialize(container: Container) -> str:
    """Render a :class:`Container` as envelope text (trailing newline included)."""
    inner = b"\n".join(
        binascii.hexlify(part)
        for part in (container.salt, container.auth_tag, container.ciphertext)
    )
    body = binascii.hexlify(inner).decode("ascii")
    lines = [container.header]
    lines.extend(
        body[i:i + WRAP_WIDTH] for i in range(0, len(body), WRAP_WIDTH)
    )
    lines.append("")
    return "\n".join(lines)
