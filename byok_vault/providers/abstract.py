"""Provider adapter protocol.

An adapter is built from one decrypted API key, performs one outbound
chat call and is then discarded. The outbound wire protocol is the
adapter's own concern.
"""
import re
from typing import ClassVar, Optional, Protocol, runtime_checkable

from ..models import ChatResponse, Provider


@runtime_checkable
class ChatProvider(Protocol):
    """Single-call chat capability bound to one API key."""

    provider: ClassVar[Provider]
    default_model: ClassVar[str]
    key_pattern: ClassVar[re.Pattern]

    async def chat(self, prompt: str, model: Optional[str] = None) -> ChatResponse:
        """Send ``prompt`` and return the normalized reply."""
        ...
