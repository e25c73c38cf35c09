"""Shared fixtures for vault tests."""
import base64

import pytest

from byok_vault.errors import ValidationError
from byok_vault.models import ChatResponse, Provider
from byok_vault.providers import GeminiProvider
from byok_vault.stores import MemoryStore
from byok_vault.vault import KeyVault

GEMINI_KEY = "AIzaSyAAAAAAAAAAAAAAAAAAAAAAAAAAA"
OTHER_GEMINI_KEY = "AIzaSyBBBBBBBBBBBBBBBBBBBBBBBBBBB"


class FakeProvider:
    """Stand-in adapter that records what the vault hands it."""

    provider = Provider.GEMINI
    default_model = "fake-model"
    key_pattern = GeminiProvider.key_pattern

    created: list["FakeProvider"] = []

    def __init__(self, api_key: str, **options):
        self.api_key = api_key
        self.options = options
        self.calls: list[tuple[str, str | None]] = []
        FakeProvider.created.append(self)

    async def chat(self, prompt: str, model: str | None = None) -> ChatResponse:
        if not prompt:
            raise ValidationError("prompt is required")
        self.calls.append((prompt, model))
        return ChatResponse(text=f"{model or self.default_model}:{prompt}")


class SpyStore(MemoryStore):
    """MemoryStore counting write calls."""

    def __init__(self):
        super().__init__()
        self.set_calls = 0

    async def set(self, record):
        self.set_calls += 1
        await super().set(record)


@pytest.fixture
def master_key() -> bytes:
    return bytes(range(32))


@pytest.fixture
def master_key_b64(master_key) -> str:
    return base64.b64encode(master_key).decode("ascii")


@pytest.fixture
def fake_provider():
    FakeProvider.created = []
    yield FakeProvider
    FakeProvider.created = []


@pytest.fixture
def store():
    return SpyStore()


@pytest.fixture
def vault(master_key, store, fake_provider):
    return KeyVault(
        master_key, store=store, providers={Provider.GEMINI: fake_provider},
    )
