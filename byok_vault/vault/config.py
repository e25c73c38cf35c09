"""
Vault Configuration — Master key normalization and validated settings.

Reads the master key from the environment:
    BYOK_MASTER_KEY = <32-byte value, raw text or base64-encoded>

Optional settings:
    BYOK_GEMINI_MODEL, BYOK_GEMINI_BASE_URL, BYOK_PROVIDER_TIMEOUT

Security Note:
    Never log key material. The master key is excluded from repr().
"""
import os
import base64
import binascii
import secrets
import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ConfigurationError
from ..models import Provider
from ..providers.gemini import DEFAULT_GEMINI_BASE_URL, DEFAULT_GEMINI_MODEL

logger = logging.getLogger("byok.vault")

MASTER_KEY_LENGTH = 32  # AES-256
MASTER_KEY_ENV = "BYOK_MASTER_KEY"


def normalize_master_key(master_key: Any) -> bytes:
    """Normalize a master key to exactly 32 raw bytes.

    Accepted forms, tried in this order:
    - binary (bytes, bytearray, memoryview) used as-is;
    - text that base64-decodes to exactly 32 bytes;
    - text taken as its UTF-8 bytes.

    Args:
        master_key: Master key in any accepted form.

    Returns:
        Immutable 32-byte key.

    Raises:
        ConfigurationError: If the key is missing, of an unsupported type,
            or not 32 bytes after normalization.
    """
    if master_key is None or (
        isinstance(master_key, (str, bytes, bytearray)) and not master_key
    ):
        raise ConfigurationError("Master key is required")
    if isinstance(master_key, (bytes, bytearray, memoryview)):
        key_bytes = bytes(master_key)
    elif isinstance(master_key, str):
        try:
            decoded = base64.b64decode(master_key, validate=True)
        except (binascii.Error, ValueError):
            decoded = None
        if decoded is not None and len(decoded) == MASTER_KEY_LENGTH:
            key_bytes = decoded
        else:
            key_bytes = master_key.encode("utf-8")
    else:
        raise ConfigurationError(
            f"Master key must be bytes or str, got {type(master_key).__name__}"
        )
    if len(key_bytes) != MASTER_KEY_LENGTH:
        raise ConfigurationError(
            f"Master key must be exactly {MASTER_KEY_LENGTH} bytes "
            f"({MASTER_KEY_LENGTH * 8} bits), got {len(key_bytes)}. "
            "Generate one with generate_master_key()"
        )
    return key_bytes


def load_master_key() -> bytes:
    """Load the master key from the BYOK_MASTER_KEY environment variable.

    Returns:
        Normalized 32-byte master key.

    Raises:
        ConfigurationError: If the variable is unset or malformed.
    """
    raw = os.environ.get(MASTER_KEY_ENV)
    if not raw:
        raise ConfigurationError(
            f"{MASTER_KEY_ENV} environment variable is not set. "
            f"Set {MASTER_KEY_ENV}=<base64-encoded-32-byte-key>"
        )
    key = normalize_master_key(raw)
    logger.debug("Loaded vault master key from %s", MASTER_KEY_ENV)
    return key


def generate_master_key() -> str:
    """Generate a random 32-byte master key and return as base64 string.

    This is a utility for operators to provision new keys out-of-band.

    Returns:
        Base64-encoded 32-byte key string.
    """
    return base64.b64encode(
        secrets.token_bytes(MASTER_KEY_LENGTH)
    ).decode("ascii")


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    master_key: bytes = Field(repr=False)
    gemini_model: str = Field(default=DEFAULT_GEMINI_MODEL, min_length=1)
    gemini_base_url: str = Field(default=DEFAULT_GEMINI_BASE_URL)
    provider_timeout: int = Field(default=60, ge=1)

    model_config = {"frozen": True, "hide_input_in_errors": True}

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as err:
            # pydantic errors carry the raw input; only field and reason go out
            reasons = "; ".join(
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                for error in err.errors(include_input=False)
            )
            raise ConfigurationError(
                f"Invalid vault configuration: {reasons}"
            ) from None

    @field_validator("master_key", mode="before")
    @classmethod
    def validate_master_key(cls, v: Any) -> bytes:
        """Normalize the master key to 32 raw bytes."""
        return normalize_master_key(v)

    @field_validator("gemini_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL, without trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Unsupported provider URL: {v}")
        return v.rstrip("/")

    def provider_options(self, provider: Provider) -> dict[str, Any]:
        """Keyword arguments for building the given provider adapter."""
        if provider is Provider.GEMINI:
            return {
                "model": self.gemini_model,
                "base_url": self.gemini_base_url,
                "timeout": self.provider_timeout,
            }
        return {}

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.

        Raises:
            ConfigurationError: If any variable is missing or malformed.
        """
        master_key = load_master_key()
        return cls(
            master_key=master_key,
            gemini_model=os.environ.get(
                "BYOK_GEMINI_MODEL", DEFAULT_GEMINI_MODEL
            ),
            gemini_base_url=os.environ.get(
                "BYOK_GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL
            ),
            provider_timeout=os.environ.get("BYOK_PROVIDER_TIMEOUT", "60"),
        )
