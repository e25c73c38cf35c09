"""Key Vault — Encrypted storage of user-supplied provider API keys.

Security Note (Threat Model):
    Stored records hold AES-256-GCM ciphertext only. The master key lives
    in process memory for the vault's lifetime, and a decrypted key exists
    in memory for the duration of one provider call. A memory dump of the
    application process could expose either; mitigation requires
    HSM/secure enclave integration which is out of scope.
"""

from .key_vault import KeyVault, VaultHandle
from .crypto import encrypt_secret, decrypt_secret
from .config import (
    VaultConfig,
    load_master_key,
    generate_master_key,
    normalize_master_key,
)

__all__ = [
    "KeyVault",
    "VaultHandle",
    "encrypt_secret",
    "decrypt_secret",
    "VaultConfig",
    "load_master_key",
    "generate_master_key",
    "normalize_master_key",
]
