"""
Vault Errors — exception taxonomy for the key vault.

Every error is raised to the caller of the operation that triggered it.
Messages never carry plaintext keys, ciphertext or master key material.
"""


class VaultError(Exception):
    """Base class for all vault errors."""


class ConfigurationError(VaultError, ValueError):
    """Missing or malformed master key / vault settings."""


class ValidationError(VaultError, ValueError):
    """Invalid caller input, rejected before any side effect."""


class KeyNotFoundError(VaultError, LookupError):
    """No stored key for the requested (user, provider)."""

    def __init__(self, user_id: str, provider: str):
        self.user_id = user_id
        self.provider = provider
        super().__init__(
            f"No {provider} key registered for user {user_id}"
        )


class DecryptionError(VaultError, ValueError):
    """A stored ciphertext could not be opened.

    The message is the same for every cause (bad tag, truncated blob,
    wrong master key) so callers cannot probe ciphertext validity.
    """

    def __init__(self, message: str = "Decryption failed"):
        super().__init__(message)


class ProviderError(VaultError, RuntimeError):
    """The outbound provider call failed."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)
