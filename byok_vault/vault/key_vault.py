"""
KeyVault — the single trust boundary for user-supplied provider keys.

Provides the public API of the vault:
- ``register_key(user_id, provider, api_key)`` — validate, encrypt, upsert
- ``delete_key(user_id, provider)`` / ``has_key(user_id, provider)``
- ``use(user_id).chat(prompt, model, provider)`` — decrypt for one call

Security Note:
    No method returns a plaintext or encrypted key. Decrypted keys live
    only inside ``chat()`` for the duration of one provider call; they are
    never cached, stored on the instance or logged. Only user ids,
    providers and operation names are logged.
"""
import logging
from typing import Any, Callable, Mapping, Optional

from ..errors import DecryptionError, KeyNotFoundError, ValidationError
from ..models import ChatResponse, KeyRecord, Provider, utcnow
from ..providers import PROVIDERS
from ..stores import KeyStore, MemoryStore
from .config import VaultConfig, normalize_master_key
from .crypto import decrypt_secret, encrypt_secret

logger = logging.getLogger("byok.vault")

ProviderFactory = Callable[[str], Any]


class VaultHandle:
    """Chat capability bound to one user.

    Returned by :meth:`KeyVault.use`; carries no state besides the user id.
    """

    __slots__ = ("_vault", "user_id")

    def __init__(self, vault: "KeyVault", user_id: str):
        self._vault = vault
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"<VaultHandle user={self.user_id!r}>"

    async def chat(
        self,
        prompt: str,
        model: Optional[str] = None,
        provider: Any = None,
    ) -> ChatResponse:
        """Run one chat call with this user's stored key.

        See :meth:`KeyVault.chat`.
        """
        return await self._vault.chat(
            self.user_id, prompt, model=model, provider=provider,
        )


class KeyVault:
    """Encrypted key vault scoped by (user_id, provider).

    Keys are sealed with a per-record PBKDF2-derived AES-256-GCM key
    (see :mod:`byok_vault.vault.crypto`) before they reach the store.
    The master key is fixed for the lifetime of the instance; vaults with
    different master keys can coexist in one process.
    """

    def __init__(
        self,
        master_key: Any,
        store: Optional[KeyStore] = None,
        providers: Optional[Mapping[Provider, ProviderFactory]] = None,
        config: Optional[VaultConfig] = None,
    ):
        self._master_key: bytes = normalize_master_key(master_key)
        self._store = store if store is not None else MemoryStore()
        self._providers: dict[Provider, ProviderFactory] = dict(
            providers if providers is not None else PROVIDERS
        )
        self._config = config
        if store is None:
            logger.warning(
                "KeyVault using in-memory store; keys are lost on restart"
            )

    def __repr__(self) -> str:
        return (
            f"<KeyVault store={type(self._store).__name__} "
            f"providers={[p.value for p in self._providers]}>"
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_user(self, user_id: Any) -> str:
        """Validate a user id.

        Raises:
            ValidationError: If user_id is empty or not a string.
        """
        if not user_id or not isinstance(user_id, str):
            raise ValidationError("user_id is required")
        return user_id

    def _validate_provider(self, provider: Any) -> Provider:
        """Resolve a provider name to a supported :class:`Provider`.

        Raises:
            ValidationError: If provider is empty or not supported.
        """
        if not provider:
            raise ValidationError("provider is required")
        try:
            resolved = Provider(provider)
        except ValueError:
            raise ValidationError(
                f"Unsupported provider: {provider}"
            ) from None
        if resolved not in self._providers:
            raise ValidationError(f"Unsupported provider: {resolved.value}")
        return resolved

    def _validate_api_key(self, provider: Provider, api_key: Any) -> str:
        """Check the key's shape against the provider's pattern.

        Only an early reject; the provider still authenticates the key.

        Raises:
            ValidationError: If api_key is empty or malformed.
        """
        if not api_key or not isinstance(api_key, str):
            raise ValidationError("api_key is required")
        pattern = getattr(self._providers[provider], "key_pattern", None)
        if pattern is not None and not pattern.match(api_key):
            raise ValidationError(
                f"Invalid {provider.value} API key format"
            )
        return api_key

    # ------------------------------------------------------------------
    # Provider adapters
    # ------------------------------------------------------------------

    def _build_provider(self, provider: Provider, api_key: str) -> Any:
        """Create a short-lived adapter for one call."""
        options = {}
        if self._config is not None:
            options = self._config.provider_options(provider)
        return self._providers[provider](api_key, **options)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def register_key(
        self,
        user_id: str,
        provider: Any,
        api_key: str,
    ) -> None:
        """Encrypt and store a user's provider key.

        Replaces any key already registered for (user_id, provider).
        Nothing is encrypted or written unless every field validates.

        Args:
            user_id: Caller-defined user identifier.
            provider: Provider name or :class:`Provider`.
            api_key: Plaintext provider API key.

        Raises:
            ValidationError: On missing fields, unsupported provider or
                malformed api_key.
        """
        self._validate_user(user_id)
        resolved = self._validate_provider(provider)
        self._validate_api_key(resolved, api_key)

        record = KeyRecord(
            user_id=user_id,
            provider=resolved,
            encrypted_key=encrypt_secret(api_key, self._master_key),
            created_at=utcnow(),
        )
        await self._store.set(record)
        logger.debug(
            "Vault register: user=%s provider=%s", user_id, resolved.value,
        )

    async def delete_key(self, user_id: str, provider: Any) -> bool:
        """Remove a user's provider key.

        Returns:
            True if a key was removed, False if none was stored.
        """
        self._validate_user(user_id)
        resolved = self._validate_provider(provider)
        removed = await self._store.delete(user_id, resolved)
        logger.debug(
            "Vault delete: user=%s provider=%s removed=%s",
            user_id, resolved.value, removed,
        )
        return removed

    async def has_key(self, user_id: str, provider: Any) -> bool:
        """Check whether a key is registered, without decrypting it."""
        self._validate_user(user_id)
        resolved = self._validate_provider(provider)
        return await self._store.has(user_id, resolved)

    def use(self, user_id: str) -> VaultHandle:
        """Return a chat handle bound to ``user_id``.

        The provider is chosen when ``chat()`` is called.
        """
        return VaultHandle(self, self._validate_user(user_id))

    async def chat(
        self,
        user_id: str,
        prompt: str,
        model: Optional[str] = None,
        provider: Any = None,
    ) -> ChatResponse:
        """Decrypt the user's key and run a single provider chat call.

        Provider errors propagate unchanged and are never retried.

        Args:
            user_id: User whose key is used.
            prompt: Prompt sent to the provider.
            model: Optional model id; the adapter default otherwise.
            provider: Provider name; defaults to ``gemini``.

        Returns:
            ChatResponse with the provider's text.

        Raises:
            ValidationError: On empty user_id/prompt or unsupported provider.
            KeyNotFoundError: If no key is registered.
            DecryptionError: If the stored key cannot be decrypted.
        """
        self._validate_user(user_id)
        resolved = self._validate_provider(provider or Provider.GEMINI)
        if not prompt:
            raise ValidationError("prompt is required")

        record = await self._store.get(user_id, resolved)
        if record is None:
            raise KeyNotFoundError(user_id, resolved.value)

        try:
            api_key = decrypt_secret(record.encrypted_key, self._master_key)
        except DecryptionError:
            logger.warning(
                "Vault decrypt failed: user=%s provider=%s",
                user_id, resolved.value,
            )
            raise
        adapter = self._build_provider(resolved, api_key)
        logger.debug(
            "Vault chat: user=%s provider=%s", user_id, resolved.value,
        )
        return await adapter.chat(prompt, model=model)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: VaultConfig,
        store: Optional[KeyStore] = None,
    ) -> "KeyVault":
        """Build a vault from validated settings."""
        return cls(config.master_key, store=store, config=config)

    @classmethod
    def from_env(cls, store: Optional[KeyStore] = None) -> "KeyVault":
        """Build a vault from ``BYOK_*`` environment variables.

        Raises:
            ConfigurationError: If BYOK_MASTER_KEY is unset or malformed.
        """
        return cls.from_config(VaultConfig.from_env(), store=store)
