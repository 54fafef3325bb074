"""
Vault Cipher Engine — AES-256-CTR with an HMAC-SHA256 tag.

Encrypt-then-authenticate on the way in, authenticate-then-decrypt on the
way out. The plaintext is PKCS#7 padded to the AES block size before the
counter-mode pass so that containers produced by other vault tools decrypt
unchanged; a bad pad is reported exactly like a bad tag.

Security Note:
    Never log plaintext, ciphertext or keys. The tag check uses the
    constant-time comparison built into ``HMAC.verify``.
"""
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import DecryptionFailed

logger = logging.getLogger("playvault.vault")

BLOCK_SIZE = 128  # bits


def compute_tag(ciphertext: bytes, auth_key: bytes) -> bytes:
    """Return HMAC-SHA256(auth_key, ciphertext)."""
    mac = hmac.HMAC(auth_key, hashes.SHA256())
    mac.update(ciphertext)
    return mac.finalize()


def _ctr(key: bytes, iv: bytes):
    return Cipher(algorithms.AES(key), modes.CTR(iv))


def encrypt(
    plaintext: bytes,
    cipher_key: bytes,
    iv: bytes,
    auth_key: bytes,
) -> tuple[bytes, bytes]:
    """Encrypt and then authenticate ``plaintext``.

    Returns:
        Tuple of (ciphertext, tag).
    """
    padder = padding.PKCS7(BLOCK_SIZE).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = _ctr(cipher_key, iv).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return ciphertext, compute_tag(ciphertext, auth_key)


def verify_and_decrypt(
    ciphertext: bytes,
    auth_key: bytes,
    expected_tag: bytes,
    cipher_key: bytes,
    iv: bytes,
) -> bytes:
    """Check the tag over ``ciphertext`` and only then decrypt it.

    Raises:
        DecryptionFailed: On tag mismatch or invalid padding. Both cases
            raise the same error with the same message.
    """
    mac = hmac.HMAC(auth_key, hashes.SHA256())
    mac.update(ciphertext)
    try:
        mac.verify(expected_tag)
    except InvalidSignature:
        raise DecryptionFailed() from None

    decryptor = _ctr(cipher_key, iv).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError:
        raise DecryptionFailed() from None
