"""
Vault Key Derivation — PBKDF2-HMAC-SHA256 over (password, salt).

One derivation yields ``2 * key_length + iv_length`` bytes which are split,
in order, into the cipher key, the authentication key and the counter IV.

Security Note:
    Never log passwords or derived key material.
"""
import logging
from dataclasses import dataclass, field
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .container import CIPHER_SUITES, DEFAULT_CIPHER, CipherSuite

logger = logging.getLogger("playvault.vault")

KDF_ITERATIONS = 10000


@dataclass(frozen=True)
class DerivedKeys:
    """Key material for one container. Discard after use."""
    cipher_key: bytes = field(repr=False)
    auth_key: bytes = field(repr=False)
    iv: bytes = field(repr=False)


def derive_keys(
    password: Union[str, bytes],
    salt: bytes,
    suite: CipherSuite = CIPHER_SUITES[DEFAULT_CIPHER],
    iterations: int = KDF_ITERATIONS,
) -> DerivedKeys:
    """Derive cipher key, auth key and IV from a password.

    Identical inputs always produce identical keys. PBKDF2 hashes the
    password into the HMAC key before iterating, so the running time does
    not depend on the password's length or content.

    Args:
        password: Vault password (str is encoded as UTF-8).
        salt: Per-container random salt.
        suite: Cipher suite fixing key and IV lengths.
        iterations: PBKDF2 iteration count.

    Returns:
        The split key material.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    key_length = suite.key_length
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=2 * key_length + suite.iv_length,
        salt=salt,
        iterations=iterations,
    )
    material = kdf.derive(password)
    return DerivedKeys(
        cipher_key=material[:key_length],
        auth_key=material[key_length:2 * key_length],
        iv=material[2 * key_length:],
    )
