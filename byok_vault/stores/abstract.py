"""Credential store protocol.

Defines the structural typing contract for persisting encrypted key
records. Uses :class:`typing.Protocol` so backends are injected into
:class:`~byok_vault.vault.KeyVault` without inheriting from a base class.

Every backend must keep at most one record per (user_id, provider) and
apply ``set``/``delete`` for the same identity in order (last writer wins).
"""
from typing import Optional, Protocol, runtime_checkable

from ..models import KeyRecord, Provider


@runtime_checkable
class KeyStore(Protocol):
    """Persist, fetch and remove encrypted key records."""

    async def set(self, record: KeyRecord) -> None:
        """Upsert a record, replacing any record with the same identity."""
        ...

    async def get(self, user_id: str, provider: Provider) -> Optional[KeyRecord]:
        """Return the record, or None when nothing is stored."""
        ...

    async def delete(self, user_id: str, provider: Provider) -> bool:
        """Remove the record; True if one existed."""
        ...

    async def has(self, user_id: str, provider: Provider) -> bool:
        """Check existence without loading the record."""
        ...
