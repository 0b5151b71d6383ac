"""
Section enhancement backends.

The OpenAI backend rewrites one section through a JSON chat completion. The
local backend is the heuristic used when no provider is configured or when
the provider let us down; choosing between them is the caller's job, wrapped
up in FallbackEnhancementBackend.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from readerfirst.core.exceptions import BackendError
from readerfirst.core.models import EnhancementResult, ResultStatus
from readerfirst.enhancement.sections import strip_tags
from readerfirst.utils.http import ChatCompletionClient, parse_json_object, status_of

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You improve document readability while preserving meaning.
Return strict JSON: {"enhancedHtml": string, "summary": string, "takeaways": string[], "glossary": string[] }.
Keep semantic HTML and avoid scripts."""

SUMMARY_CHARS = 260
TAKEAWAY_CHARS = 120


def _string_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


class EnhancementBackend(ABC):
    """Rewrites one section of a document."""

    name = "base"

    @abstractmethod
    async def enhance(self, section_html: str, title: str) -> EnhancementResult:
        """Return the enhanced section with its summary, takeaways and glossary."""

    async def aclose(self) -> None:
        return None


class LocalEnhancementBackend(EnhancementBackend):
    """Plain-text truncation heuristic; never touches the network."""

    name = "local"

    async def enhance(self, section_html: str, title: str) -> EnhancementResult:
        plain = strip_tags(section_html)
        return EnhancementResult(
            enhanced_html=section_html,
            summary=plain[:SUMMARY_CHARS],
            takeaways=[plain[:TAKEAWAY_CHARS]] if plain else [],
            glossary=[],
            status=ResultStatus.FALLBACK,
        )


class OpenAIEnhancementBackend(ChatCompletionClient, EnhancementBackend):
    """JSON-mode chat completion per section."""

    name = "openai"

    async def enhance(self, section_html: str, title: str) -> EnhancementResult:
        payload = {
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Title: {title or 'Document'}\nSection HTML:\n{section_html}"},
            ],
        }

        try:
            content = await self.chat(payload)
        except httpx.HTTPError as e:
            raise BackendError(self.name, str(e), original_error=e, status_code=status_of(e)) from e

        parsed = parse_json_object(content)
        if parsed is None:
            logger.warning("Enhancement response was not a JSON object; returning section unchanged")
            return EnhancementResult(enhanced_html=section_html, status=ResultStatus.DEGRADED)

        enhanced = parsed.get("enhancedHtml")
        return EnhancementResult(
            enhanced_html=enhanced if isinstance(enhanced, str) and enhanced else section_html,
            summary=parsed.get("summary") if isinstance(parsed.get("summary"), str) else "",
            takeaways=_string_list(parsed.get("takeaways")),
            glossary=_string_list(parsed.get("glossary")),
            status=ResultStatus.OK,
        )


class FallbackEnhancementBackend(EnhancementBackend):
    """Caller-side policy: use the fallback when the primary fails or degrades."""

    def __init__(self, primary: EnhancementBackend, fallback: Optional[EnhancementBackend] = None):
        self.primary = primary
        self.fallback = fallback or LocalEnhancementBackend()
        self.name = f"{primary.name}+{self.fallback.name}"

    async def enhance(self, section_html: str, title: str) -> EnhancementResult:
        try:
            result = await self.primary.enhance(section_html, title)
        except BackendError as e:
            logger.warning(f"Enhancement failed, using {self.fallback.name} fallback: {e.message}")
            return await self.fallback.enhance(section_html, title)

        if result.is_degraded:
            return await self.fallback.enhance(section_html, title)
        return result

    async def aclose(self) -> None:
        await self.primary.aclose()
        await self.fallback.aclose()


def create_enhancer(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs
) -> EnhancementBackend:
    """
    Pick the enhancer for the current configuration.

    Without an API key nothing is sent anywhere: the local heuristic is used
    directly.
    """
    api_key = api_key or os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.info("No OpenAI API key configured; enhancement runs locally")
        return LocalEnhancementBackend()
    return FallbackEnhancementBackend(OpenAIEnhancementBackend(api_key=api_key, model=model, **kwargs))
