"""
Tests for key store backends.

Tests cover:
- KeyStore protocol conformance
- MemoryStore upsert / get / delete / has
- RedisStore document round trip over a fake client
- PostgresStore statements over a fake asyncpg pool
"""
from datetime import datetime, timezone

import pytest

from byok_vault.models import KeyRecord, Provider
from byok_vault.stores import KeyStore, MemoryStore, PostgresStore, RedisStore


def make_record(user_id: str = "u1", blob: str = "ciphertext") -> KeyRecord:
    return KeyRecord(
        user_id=user_id,
        provider=Provider.GEMINI,
        encrypted_key=blob,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


# --- Fakes ---

class FakeRedis:
    """Minimal async redis client."""

    def __init__(self):
        self.data: dict[str, bytes] = {}

    async def set(self, key, value):
        self.data[key] = value
        return True

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    async def exists(self, key):
        return int(key in self.data)


class FakeConnection:
    """Connection emulating the statements PostgresStore issues."""

    def __init__(self, rows: dict, statements: list):
        self._rows = rows
        self._statements = statements

    async def execute(self, sql, *args):
        self._statements.append(sql)
        if sql.lstrip().startswith("INSERT"):
            user_id, provider, encrypted_key, created_at = args
            self._rows[(user_id, provider)] = {
                "user_id": user_id,
                "provider": provider,
                "encrypted_key": encrypted_key,
                "created_at": created_at,
            }
            return "INSERT 0 1"
        if sql.lstrip().startswith("DELETE"):
            removed = self._rows.pop(tuple(args), None)
            return f"DELETE {1 if removed else 0}"
        return "CREATE TABLE"

    async def fetchrow(self, sql, *args):
        self._statements.append(sql)
        return self._rows.get(tuple(args))

    async def fetchval(self, sql, *args):
        self._statements.append(sql)
        return tuple(args) in self._rows


class FakeAcquire:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, *exc):
        return False


class FakePool:
    """asyncpg-like pool handing out one fake connection."""

    def __init__(self):
        self.rows: dict = {}
        self.statements: list[str] = []

    def acquire(self):
        return FakeAcquire(FakeConnection(self.rows, self.statements))


@pytest.fixture(params=["memory", "redis", "postgres"])
def any_store(request):
    if request.param == "memory":
        return MemoryStore()
    if request.param == "redis":
        return RedisStore(FakeRedis())
    return PostgresStore(FakePool())


# --- Contract ---

class TestStoreContract:
    """Behaviour every backend shares."""

    def test_protocol(self, any_store):
        assert isinstance(any_store, KeyStore)

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, any_store):
        assert await any_store.get("u1", Provider.GEMINI) is None
        assert await any_store.has("u1", Provider.GEMINI) is False

    @pytest.mark.asyncio
    async def test_set_get(self, any_store):
        record = make_record()
        await any_store.set(record)
        fetched = await any_store.get("u1", Provider.GEMINI)
        assert fetched == record
        assert await any_store.has("u1", "gemini") is True

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, any_store):
        await any_store.set(make_record(blob="first"))
        await any_store.set(make_record(blob="second"))
        fetched = await any_store.get("u1", Provider.GEMINI)
        assert fetched.encrypted_key == "second"

    @pytest.mark.asyncio
    async def test_delete(self, any_store):
        await any_store.set(make_record())
        assert await any_store.delete("u1", Provider.GEMINI) is True
        assert await any_store.delete("u1", Provider.GEMINI) is False
        assert await any_store.has("u1", Provider.GEMINI) is False

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, any_store):
        await any_store.set(make_record("userA", "a"))
        await any_store.set(make_record("userB", "b"))
        await any_store.delete("userA", Provider.GEMINI)
        fetched = await any_store.get("userB", Provider.GEMINI)
        assert fetched.encrypted_key == "b"


# --- Backend specifics ---

class TestMemoryStore:
    """Tests specific to MemoryStore."""

    @pytest.mark.asyncio
    async def test_keyed_by_user_and_provider(self):
        store = MemoryStore()
        await store.set(make_record())
        assert list(store._records) == ["u1:gemini"]
        assert len(store) == 1


class TestRedisStore:
    """Tests specific to RedisStore."""

    def test_requires_client(self):
        with pytest.raises(ValueError):
            RedisStore(None)

    @pytest.mark.asyncio
    async def test_document_layout(self):
        redis = FakeRedis()
        store = RedisStore(redis, prefix="vault")
        await store.set(make_record())
        assert list(redis.data) == ["vault:u1:gemini"]
        assert KeyRecord.from_json(redis.data["vault:u1:gemini"]) == make_record()


class TestPostgresStore:
    """Tests specific to PostgresStore."""

    def test_requires_pool(self):
        with pytest.raises(ValueError):
            PostgresStore(None)

    @pytest.mark.parametrize("table", ["keys; DROP TABLE x", "1table", "a.b.c"])
    def test_rejects_bad_table_name(self, table):
        with pytest.raises(ValueError):
            PostgresStore(FakePool(), table=table)

    @pytest.mark.asyncio
    async def test_default_table(self):
        pool = FakePool()
        await PostgresStore(pool).initialize()
        assert "CREATE TABLE IF NOT EXISTS byok_user_api_keys" in pool.statements[0]

    @pytest.mark.asyncio
    async def test_initialize_creates_table(self):
        pool = FakePool()
        store = PostgresStore(pool, table="vault.api_keys")
        await store.initialize()
        assert "CREATE TABLE IF NOT EXISTS vault.api_keys" in pool.statements[0]

    @pytest.mark.asyncio
    async def test_upsert_statement(self):
        pool = FakePool()
        store = PostgresStore(pool)
        await store.set(make_record())
        assert "ON CONFLICT (user_id, provider)" in pool.statements[0]
        assert pool.rows[("u1", "gemini")]["encrypted_key"] == "ciphertext"
