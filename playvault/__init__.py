"""PlayVault — encrypted vault containers for playbook content."""
from .version import __version__
from .vault import VaultConfig, VaultService, PasswordStore, is_encrypted

__all__ = [
    "__version__",
    "VaultConfig",
    "VaultService",
    "PasswordStore",
    "is_encrypted",
]
