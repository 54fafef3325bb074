import hmac
import hashlib
import binascii

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from playvault.vault import PasswordStore, VaultConfig, VaultService


class FakeClock:
    """Manually advanced monotonic clock."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_container(plaintext: bytes, password: bytes, salt: bytes, vault_id=None) -> str:
    """Assemble a vault envelope using only hashlib, hmac and raw AES-CTR.

    Mirrors the reference vault tool step by step without touching any
    playvault code, so it serves as an outside-made container.
    """
    material = hashlib.pbkdf2_hmac("sha256", password, salt, 10000, dklen=80)
    cipher_key, auth_key, iv = material[:32], material[32:64], material[64:]
    pad = 16 - len(plaintext) % 16
    padded = plaintext + bytes([pad]) * pad
    encryptor = Cipher(algorithms.AES(cipher_key), modes.CTR(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    tag = hmac.new(auth_key, ciphertext, hashlib.sha256).hexdigest().encode()
    inner = binascii.hexlify(salt) + b"\n" + tag + b"\n" + binascii.hexlify(ciphertext)
    body = binascii.hexlify(inner).decode()
    header = "$ANSIBLE_VAULT;1.1;AES256"
    if vault_id is not None:
        header = f"$ANSIBLE_VAULT;1.2;AES256;{vault_id}"
    lines = [header] + [body[i:i + 80] for i in range(0, len(body), 80)]
    return "\n".join(lines) + "\n"


@pytest.fixture
def assemble_vault():
    """Builder for vault envelopes made without playvault code."""
    return build_container


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Password store with a single 'default' password."""
    passwords = PasswordStore()
    passwords.add_password("default", "test")
    return passwords


@pytest.fixture
def service(clock):
    """Vault service with 'test' registered under the default id."""
    vault = VaultService(config=VaultConfig(cache_ttl=60), clock=clock)
    vault.add_password("default", "test")
    return vault


@pytest.fixture
def salt():
    return bytes(range(32))
