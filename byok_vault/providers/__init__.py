"""Provider adapters and the provider → adapter registry.

Adding a provider means one new adapter class and one entry in
``PROVIDERS``; the vault's validation and decryption paths are unchanged.
"""
from ..models import Provider
from .abstract import ChatProvider
from .gemini import GeminiProvider

PROVIDERS: dict[Provider, type] = {
    Provider.GEMINI: GeminiProvider,
}

__all__ = [
    "ChatProvider",
    "GeminiProvider",
    "PROVIDERS",
]
