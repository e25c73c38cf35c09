"""
Vault data models — provider identifiers, stored key records and
provider chat responses.
"""
from enum import Enum
from datetime import datetime, timezone

import orjson
from pydantic import BaseModel, Field


class Provider(str, Enum):
    """Supported AI providers."""

    GEMINI = "gemini"

    def __str__(self) -> str:
        return self.value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyRecord(BaseModel):
    """One stored credential, addressed by (user_id, provider).

    ``encrypted_key`` is the base64 envelope produced by
    :func:`byok_vault.vault.crypto.encrypt_secret`; the plaintext key is
    never part of a record.
    """

    user_id: str = Field(min_length=1)
    provider: Provider
    encrypted_key: str = Field(min_length=1, repr=False)
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}

    @property
    def identity(self) -> tuple[str, Provider]:
        return (self.user_id, self.provider)

    def to_json(self) -> bytes:
        """Serialize the record as an orjson document."""
        return orjson.dumps(self.model_dump(mode="json"))

    @classmethod
    def from_json(cls, data: bytes | str) -> "KeyRecord":
        """Rebuild a record from :meth:`to_json` output."""
        return cls.model_validate(orjson.loads(data))


class ChatResponse(BaseModel):
    """Normalized provider result."""

    text: str = ""
