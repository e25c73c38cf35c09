"""
MemoryStore — in-process reference implementation of :class:`KeyStore`.

Records live in a plain dict and are lost on restart; do not use this
store in production. Each operation completes without awaiting, so
writes for the same identity are applied in call order.
"""
import logging
from typing import Optional

from ..models import KeyRecord, Provider

logger = logging.getLogger("byok.store")


class MemoryStore:
    """Dict-backed key store keyed by ``"{user_id}:{provider}"``."""

    def __init__(self) -> None:
        self._records: dict[str, KeyRecord] = {}

    def _key(self, user_id: str, provider: Provider) -> str:
        return f"{user_id}:{Provider(provider).value}"

    async def set(self, record: KeyRecord) -> None:
        self._records[self._key(record.user_id, record.provider)] = record

    async def get(self, user_id: str, provider: Provider) -> Optional[KeyRecord]:
        return self._records.get(self._key(user_id, provider))

    async def delete(self, user_id: str, provider: Provider) -> bool:
        return self._records.pop(self._key(user_id, provider), None) is not None

    async def has(self, user_id: str, provider: Provider) -> bool:
        return self._key(user_id, provider) in self._records

    def __len__(self) -> int:
        return len(self._records)
