"""BYOK Vault.

Keeps each user's third-party AI provider key encrypted at rest and
decrypts it only for the duration of a single outbound call.
"""
from .version import __version__
from .errors import (
    VaultError,
    ConfigurationError,
    ValidationError,
    KeyNotFoundError,
    DecryptionError,
    ProviderError,
)
from .models import Provider, KeyRecord, ChatResponse
from .stores import KeyStore, MemoryStore, RedisStore, PostgresStore
from .providers import ChatProvider, GeminiProvider, PROVIDERS
from .vault import (
    KeyVault,
    VaultHandle,
    VaultConfig,
    encrypt_secret,
    decrypt_secret,
    generate_master_key,
)

__all__ = [
    "__version__",
    "VaultError",
    "ConfigurationError",
    "ValidationError",
    "KeyNotFoundError",
    "DecryptionError",
    "ProviderError",
    "Provider",
    "KeyRecord",
    "ChatResponse",
    "KeyStore",
    "MemoryStore",
    "RedisStore",
    "PostgresStore",
    "ChatProvider",
    "GeminiProvider",
    "PROVIDERS",
    "KeyVault",
    "VaultHandle",
    "VaultConfig",
    "encrypt_secret",
    "decrypt_secret",
    "generate_master_key",
]
