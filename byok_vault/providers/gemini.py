"""
GeminiProvider — Google Gemini adapter over the Generative Language REST API.

Security Note:
    The API key is sent only in the ``x-goog-api-key`` header and never
    appears in URLs, log lines or error messages.
"""
import re
import asyncio
import logging
from typing import Any, ClassVar, Optional

import aiohttp

from ..errors import ProviderError, ValidationError
from ..models import ChatResponse, Provider

logger = logging.getLogger("byok.provider")

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider:
    """Chat adapter for Gemini models."""

    provider: ClassVar[Provider] = Provider.GEMINI
    default_model: ClassVar[str] = DEFAULT_GEMINI_MODEL
    # Early-reject heuristic only; revoked keys still pass.
    key_pattern: ClassVar[re.Pattern] = re.compile(r"^AI[0-9A-Za-z_-]{20,}$")

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: int = 60,
    ):
        if not api_key:
            raise ValidationError("Gemini API key is required")
        self._api_key = api_key
        self.model = model or self.default_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"<GeminiProvider model={self.model!r}>"

    def _endpoint(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent"

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Join the text parts of the first candidate."""
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )

    async def chat(self, prompt: str, model: Optional[str] = None) -> ChatResponse:
        """Generate a single reply for ``prompt``.

        Args:
            prompt: User prompt, required.
            model: Gemini model id; defaults to the adapter's model.

        Returns:
            ChatResponse with the generated text ("" if none).

        Raises:
            ValidationError: If prompt is empty.
            ProviderError: On HTTP errors, timeouts or transport failures.
        """
        if not prompt:
            raise ValidationError("prompt is required")
        model_id = model or self.model
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]},
            ],
        }
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self._endpoint(model_id), json=payload, headers=headers,
                ) as response:
                    if response.status != 200:
                        body = await response.text()
                        logger.error(
                            "Gemini request failed: model=%s status=%s",
                            model_id, response.status,
                        )
                        raise ProviderError(
                            f"Gemini API error {response.status}: {body[:200]}",
                            status=response.status,
                        )
                    data = await response.json()
        except asyncio.TimeoutError as err:
            raise ProviderError(
                f"Gemini request timed out after {self.timeout}s"
            ) from err
        except aiohttp.ClientError as err:
            raise ProviderError(f"Gemini request failed: {err}") from err
        return ChatResponse(text=self._extract_text(data))
