"""OpenAI-compatible chat-completion translation backend."""

import logging
import os
import time
from typing import Optional

import httpx

from ..base import TranslationBackend, TranslationRequest, TranslationResponse, LANGUAGE_NAMES
from readerfirst.core.exceptions import BackendError, ConfigurationError
from readerfirst.utils.http import (
    DEFAULT_CHAT_MODEL,
    OPENAI_BASE_URL,
    first_message_content,
    post_chat_completion,
    status_of,
)

logger = logging.getLogger(__name__)


class OpenAIBackend(TranslationBackend):
    """Generic chat-completion provider."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.2,
        **kwargs
    ):
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        super().__init__(api_key, model or DEFAULT_CHAT_MODEL, **kwargs)
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL", OPENAI_BASE_URL)
        self.temperature = temperature

    def _build_messages(self, request: TranslationRequest):
        language = LANGUAGE_NAMES.get(request.target_lang, request.target_lang)
        system = (
            f"Translate to {language} while preserving markdown/html inline structure "
            "and protected technical terms."
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": f"Translate preserving structure:\n{request.text}"},
        ]

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not configured", config_key="api_keys.openai")

        start_time = time.time()
        payload = {
            "model": self.model,
            "messages": self._build_messages(request),
            "temperature": self.temperature,
        }

        try:
            data = await post_chat_completion(
                self.client,
                self.api_key,
                payload,
                base_url=self.base_url,
                policy=self.retry,
                sleep=self.sleep,
            )
        except httpx.HTTPError as e:
            raise BackendError(self.name, str(e), original_error=e, status_code=status_of(e)) from e

        content = first_message_content(data)
        translated = content.strip() if content else ""
        degraded = not translated
        if degraded:
            logger.warning("OpenAI response missing choices[0].message.content; keeping original chunk")

        return TranslationResponse(
            text=translated or request.text,
            backend=self.name,
            model=self.model,
            latency=time.time() - start_time,
            degraded=degraded,
        )
