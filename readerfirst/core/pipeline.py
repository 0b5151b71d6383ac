"""
Chunk translation pipeline for ReaderFirst.

Drives the glossary guard, the translation cache and a provider backend for
every text chunk of a document, in document order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Callable, Any, Sequence
from pathlib import Path
import asyncio
import logging
import time

from readerfirst.core.exceptions import ConfigurationError
from readerfirst.core.models import PROVIDERS, ParsedDocument, TranslationProviderConfig
from readerfirst.document.html import replace_chunk_text
from readerfirst.translation.base import (
    DEFAULT_TARGET_LANG, TranslationBackend, TranslationRequest
)
from readerfirst.translation.backends import create_backend
from readerfirst.translation.backends.deepl_backend import DEEPL_FREE_URL
from readerfirst.translation.glossary.manager import GlossaryManager, protected_terms
from readerfirst.utils.cache import TRANSLATIONS, TranslationCache
from readerfirst.utils.http import DEFAULT_CHAT_MODEL, OPENAI_BASE_URL, RetryPolicy

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass
class PipelineConfig:
    """Configuration shared by the translation and enhancement pipelines."""

    # Provider
    provider: str = "openai"  # openai (generic chat), deepl (dedicated translation)
    api_key: Optional[str] = None
    model: Optional[str] = DEFAULT_CHAT_MODEL
    target_lang: str = DEFAULT_TARGET_LANG
    openai_base_url: str = OPENAI_BASE_URL
    deepl_url: str = DEEPL_FREE_URL

    # Chunks in flight at once; 1 keeps the pass strictly sequential
    max_concurrency: int = 1

    # Retry / HTTP
    retries: int = 3
    base_delay: float = 0.5
    timeout: float = 60.0

    # Cache
    cache_dir: Path = field(default_factory=lambda: Path(".cache/readerfirst"))
    use_disk_cache: bool = True

    # Enhancement
    enhancement_api_key: Optional[str] = None
    max_takeaways: int = 6

    def validate(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        if self.provider not in PROVIDERS:
            issues.append(f"provider must be one of {', '.join(PROVIDERS)}")

        if self.max_concurrency < 1:
            issues.append("max_concurrency must be at least 1")

        if self.retries < 1:
            issues.append("retries must be at least 1")

        if self.base_delay < 0:
            issues.append("base_delay must be non-negative")

        if self.max_takeaways < 0:
            issues.append("max_takeaways must be non-negative")

        return issues

    @property
    def provider_config(self) -> TranslationProviderConfig:
        return TranslationProviderConfig(
            provider=self.provider,
            api_key=self.api_key or "",
            model=self.model if self.provider == "openai" else None,
        )

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(retries=self.retries, base_delay=self.base_delay)

    @property
    def cache_namespace(self) -> str:
        """Translations into other languages live in their own namespace."""
        if self.target_lang == DEFAULT_TARGET_LANG:
            return TRANSLATIONS
        return f"{TRANSLATIONS}-{self.target_lang}"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "PipelineConfig":
        """Build from a loaded YAML/env configuration dictionary."""
        translation = config.get("translation", {}) or {}
        retry = config.get("retry", {}) or {}
        http = config.get("http", {}) or {}
        cache = config.get("cache", {}) or {}
        enhancement = config.get("enhancement", {}) or {}
        api_keys = config.get("api_keys", {}) or {}

        provider = translation.get("provider", "openai")
        return cls(
            provider=provider,
            api_key=api_keys.get(provider) or None,
            model=translation.get("model", DEFAULT_CHAT_MODEL),
            target_lang=translation.get("target_lang", DEFAULT_TARGET_LANG),
            openai_base_url=translation.get("openai_base_url", OPENAI_BASE_URL),
            deepl_url=translation.get("deepl_url", DEEPL_FREE_URL),
            max_concurrency=int(translation.get("max_concurrency", 1)),
            retries=int(retry.get("retries", 3)),
            base_delay=float(retry.get("base_delay", 0.5)),
            timeout=float(http.get("timeout", 60.0)),
            cache_dir=Path(cache.get("directory", ".cache/readerfirst")),
            use_disk_cache=bool(cache.get("use_disk", True)),
            enhancement_api_key=api_keys.get("openai") or None,
            max_takeaways=int(enhancement.get("max_takeaways", 6)),
        )


class ChunkTranslationPipeline:
    """
    Translates a document's text chunks one provider call at a time.

    For each chunk:
    1. Guard glossary terms
    2. Look up (provider, hash(guarded text)) in the cache
    3. On a miss, call the backend and store the result

    Results come back in chunk order. Errors from the backend are not caught
    here: the first chunk that fails after retries fails the whole pass.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        backend: Optional[TranslationBackend] = None,
        cache: Optional[TranslationCache] = None,
        glossary: Optional[GlossaryManager] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self.config = config or PipelineConfig()

        issues = self.config.validate()
        if issues:
            raise ConfigurationError(f"Configuration issues: {', '.join(issues)}")

        self.progress_callback = progress_callback
        self.glossary = glossary if glossary is not None else protected_terms()
        self.cache = cache if cache is not None else TranslationCache(
            cache_dir=str(self.config.cache_dir),
            namespace=self.config.cache_namespace,
            use_disk=self.config.use_disk_cache,
        )
        self._owns_cache = cache is None
        self._backend = backend
        self._owns_backend = backend is None

        self.stats = {
            'chunks_processed': 0,
            'cache_hits': 0,
            'api_calls': 0,
            'degraded': 0,
            'total_time': 0.0
        }

    @property
    def provider_id(self) -> str:
        return self.config.provider

    @property
    def backend(self) -> TranslationBackend:
        """Backend built from the config on first use (fails fast without an API key)."""
        if self._backend is None:
            extra = {"base_url": self.config.openai_base_url} if self.config.provider == "openai" \
                else {"endpoint": self.config.deepl_url}
            self._backend = create_backend(
                self.config.provider_config,
                retry=self.config.retry_policy,
                timeout=self.config.timeout,
                **extra
            )
        return self._backend

    async def translate_chunk(self, chunk: str) -> str:
        """Translate one chunk, serving repeats from the cache."""
        guarded = self.glossary.guard_text(chunk)
        key = self.cache.make_key(self.provider_id, guarded)

        cached = self.cache.get(key)
        if cached is not None:
            self.stats['cache_hits'] += 1
            logger.debug(f"Cache hit for {key}")
            return cached

        response = await self.backend.translate(
            TranslationRequest(text=guarded, target_lang=self.config.target_lang)
        )
        self.stats['api_calls'] += 1

        if response.degraded:
            self.stats['degraded'] += 1
        self.cache.put(key, response.text)

        return response.text

    async def translate_chunks(self, chunks: Sequence[str]) -> List[str]:
        """
        Translate every chunk, returning translations in chunk order.

        Progress is reported as an integer percentage after each chunk
        completes. With max_concurrency > 1 chunks overlap, but the
        percentage still only grows and the output order is unchanged.
        """
        total = len(chunks)
        if total == 0:
            return []

        start_time = time.time()
        results: List[Optional[str]] = [None] * total
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        done = 0

        async def run(index: int, chunk: str) -> None:
            nonlocal done
            async with semaphore:
                results[index] = await self.translate_chunk(chunk)
            done += 1
            self.stats['chunks_processed'] += 1
            self._report_progress(done, total)

        if self.config.max_concurrency == 1:
            for index, chunk in enumerate(chunks):
                await run(index, chunk)
        else:
            tasks = [asyncio.ensure_future(run(i, c)) for i, c in enumerate(chunks)]
            try:
                await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        self.stats['total_time'] += time.time() - start_time
        logger.info(
            f"Translated {total} chunks via {self.provider_id} "
            f"({self.stats['cache_hits']} cache hits, {self.stats['api_calls']} API calls)"
        )
        return results

    async def translate_document(self, document: ParsedDocument) -> str:
        """Translate a parsed document and return its HTML with chunks replaced."""
        translated = await self.translate_chunks(document.text_chunks)
        return replace_chunk_text(document.html, translated)

    def translate_chunks_sync(self, chunks: Sequence[str]) -> List[str]:
        async def _run():
            try:
                return await self.translate_chunks(chunks)
            finally:
                await self.aclose()
        return asyncio.run(_run())

    def _report_progress(self, done: int, total: int) -> None:
        if self.progress_callback:
            percent = round(done / total * 100)
            self.progress_callback(percent, f"Translated {done}/{total} chunks")

    def get_stats(self) -> Dict[str, Any]:
        stats = dict(self.stats)
        stats["cache"] = self.cache.get_stats()
        return stats

    async def aclose(self) -> None:
        if self._owns_backend and self._backend is not None:
            await self._backend.aclose()
        if self._owns_cache:
            self.cache.close()

    async def __aenter__(self) -> "ChunkTranslationPipeline":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
