"""DeepL dedicated translation backend (form-encoded HTTP API)."""

import logging
import os
import time
from typing import Optional

import httpx

from ..base import TranslationBackend, TranslationRequest, TranslationResponse
from readerfirst.core.exceptions import BackendError, ConfigurationError
from readerfirst.utils.http import fetch_with_retry, status_of

logger = logging.getLogger(__name__)

DEEPL_FREE_URL = "https://api-free.deepl.com/v2/translate"


def deepl_target(lang: str) -> str:
    """DeepL wants upper-case locale codes (pt-BR -> PT-BR)."""
    return lang.upper()


class DeepLBackend(TranslationBackend):
    """Dedicated translation provider."""

    name = "deepl"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 endpoint: Optional[str] = None, **kwargs):
        api_key = api_key or os.getenv("DEEPL_API_KEY")
        super().__init__(api_key, model, **kwargs)
        self.endpoint = endpoint or os.getenv("DEEPL_API_URL", DEEPL_FREE_URL)

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        if not self.api_key:
            raise ConfigurationError("DeepL API key not configured", config_key="api_keys.deepl")

        start = time.time()
        form = {
            "auth_key": self.api_key,
            "target_lang": deepl_target(request.target_lang),
            "text": request.text,
            "preserve_formatting": "1",
        }

        try:
            resp = await fetch_with_retry(
                self.client,
                "POST",
                self.endpoint,
                policy=self.retry,
                sleep=self.sleep,
                data=form,
            )
        except httpx.HTTPError as e:
            raise BackendError(self.name, str(e), original_error=e, status_code=status_of(e)) from e

        try:
            data = resp.json()
            translation = data["translations"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            translation = None

        degraded = not (isinstance(translation, str) and translation)
        if degraded:
            logger.warning("DeepL response missing translations[0].text; keeping original chunk")
            translation = request.text

        return TranslationResponse(
            text=translation,
            backend=self.name,
            model=self.model,
            latency=time.time() - start,
            degraded=degraded,
            metadata={"endpoint": self.endpoint},
        )
