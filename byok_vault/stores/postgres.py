"""
PostgresStore — relational backend for :class:`KeyStore`.

Works with an injected asyncpg-compatible pool (``acquire()`` returning an
async context manager whose connection exposes ``execute``, ``fetchrow``
and ``fetchval``). Upserts are a single ``INSERT ... ON CONFLICT``
statement, so concurrent writers for one identity are serialized by the
database and the last writer wins.

Security Note:
    Rows hold ciphertext only. Never log ``encrypted_key`` values.
"""
import re
import logging
from typing import Any, Optional

from ..models import KeyRecord, Provider

logger = logging.getLogger("byok.store")

_TABLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    user_id TEXT NOT NULL,
    provider TEXT NOT NULL,
    encrypted_key TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (user_id, provider)
)
"""

_UPSERT_KEY = """
INSERT INTO {table} (user_id, provider, encrypted_key, created_at)
VALUES ($1, $2, $3, $4)
ON CONFLICT (user_id, provider)
DO UPDATE SET encrypted_key = EXCLUDED.encrypted_key,
             created_at = EXCLUDED.created_at
"""

_SELECT_KEY = """
SELECT user_id, provider, encrypted_key, created_at
FROM {table}
WHERE user_id = $1 AND provider = $2
"""

_DELETE_KEY = """
DELETE FROM {table}
WHERE user_id = $1 AND provider = $2
"""

_EXISTS_KEY = """
SELECT EXISTS (
    SELECT 1 FROM {table} WHERE user_id = $1 AND provider = $2
)
"""


class PostgresStore:
    """Key store backed by a single PostgreSQL table."""

    def __init__(self, db_pool: Any, table: str = "byok_user_api_keys"):
        if db_pool is None:
            raise ValueError("PostgresStore requires a connection pool")
        if not _TABLE_PATTERN.match(table):
            raise ValueError(f"Invalid table name: {table}")
        self._db = db_pool
        self._table = table

    def _sql(self, statement: str) -> str:
        return statement.format(table=self._table)

    async def initialize(self) -> None:
        """Create the key table if it does not exist."""
        async with self._db.acquire() as conn:
            await conn.execute(self._sql(_CREATE_TABLE))
        logger.info("Postgres key store ready: table=%s", self._table)

    async def set(self, record: KeyRecord) -> None:
        async with self._db.acquire() as conn:
            await conn.execute(
                self._sql(_UPSERT_KEY),
                record.user_id, record.provider.value,
                record.encrypted_key, record.created_at,
            )
        logger.debug(
            "Postgres store set: user=%s provider=%s",
            record.user_id, record.provider,
        )

    async def get(self, user_id: str, provider: Provider) -> Optional[KeyRecord]:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(
                self._sql(_SELECT_KEY), user_id, Provider(provider).value,
            )
        if row is None:
            return None
        return KeyRecord(
            user_id=row["user_id"],
            provider=row["provider"],
            encrypted_key=row["encrypted_key"],
            created_at=row["created_at"],
        )

    async def delete(self, user_id: str, provider: Provider) -> bool:
        async with self._db.acquire() as conn:
            status = await conn.execute(
                self._sql(_DELETE_KEY), user_id, Provider(provider).value,
            )
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return str(status).split()[-1] != "0"

    async def has(self, user_id: str, provider: Provider) -> bool:
        async with self._db.acquire() as conn:
            found = await conn.fetchval(
                self._sql(_EXISTS_KEY), user_id, Provider(provider).value,
            )
        return bool(found)
