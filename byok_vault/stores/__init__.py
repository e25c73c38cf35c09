"""Key stores — pluggable persistence for encrypted key records."""

from .abstract import KeyStore
from .memory import MemoryStore
from .redis import RedisStore
from .postgres import PostgresStore

__all__ = [
    "KeyStore",
    "MemoryStore",
    "RedisStore",
    "PostgresStore",
]
