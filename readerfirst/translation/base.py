"""
Base translation backend interface.
All translation providers must inherit from TranslationBackend.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional
from dataclasses import dataclass, field

import httpx

from readerfirst.utils.http import RetryPolicy

DEFAULT_TARGET_LANG = "pt-BR"

LANGUAGE_NAMES = {
    "pt-BR": "natural Brazilian Portuguese",
    "pt": "Portuguese",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}


@dataclass
class TranslationRequest:
    """Request for translating one (already guarded) chunk."""
    text: str
    target_lang: str = DEFAULT_TARGET_LANG


@dataclass
class TranslationResponse:
    """Response from a translation backend."""
    text: str
    backend: str
    model: Optional[str] = None
    latency: float = 0.0
    degraded: bool = False  # provider answered without the expected fields
    metadata: Dict[str, Any] = field(default_factory=dict)


class TranslationBackend(ABC):
    """Abstract base class for translation providers."""

    name = "base"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.retry = retry or RetryPolicy()
        self.sleep = sleep
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Shared HTTP client, created lazily when none was injected."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """
        Translate one chunk.

        Args:
            request: Translation request with guarded text

        Returns:
            TranslationResponse; degraded=True when the original text is
            returned because the provider response lacked the expected fields

        Raises:
            BackendError: when the request still fails after all retries
        """

    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        """Translate synchronously (runs its own event loop)."""
        async def _run():
            try:
                return await self.translate(request)
            finally:
                await self.aclose()
        return asyncio.run(_run())

    def is_available(self) -> bool:
        """Check if backend is configured."""
        return bool(self.api_key)

    def get_info(self) -> Dict:
        return {
            "name": self.name,
            "model": self.model,
            "available": self.is_available()
        }
