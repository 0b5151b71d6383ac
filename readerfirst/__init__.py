"""
ReaderFirst AI: translation and enhancement pipelines for document reading.

Provides:

1. Chunk translation with glossary protection, caching and retry
2. Section-by-section enhancement with an executive summary block
3. Study helpers (Q&A, flashcards, quizzes) and image captioning

Usage:
    from readerfirst import ChunkTranslationPipeline, PipelineConfig

    config = PipelineConfig(provider="deepl", api_key="...")
    async with ChunkTranslationPipeline(config) as pipeline:
        translated = await pipeline.translate_chunks(["Hello", "World"])
"""

__version__ = "1.0.0"
__author__ = "ReaderFirst Team"
__license__ = "MIT"

from readerfirst.core.exceptions import (
    ReaderFirstError,
    BackendError,
    ConfigurationError,
    CacheError,
)
from readerfirst.core.models import (
    TextChunk,
    HeadingItem,
    ParsedDocument,
    TranslationProviderConfig,
    EnhancementResult,
    DocumentEnhancement,
    ResultStatus,
)
from readerfirst.core.pipeline import ChunkTranslationPipeline, PipelineConfig
from readerfirst.enhancement import SectionEnhancementPipeline, create_enhancer

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "ReaderFirstError",
    "BackendError",
    "ConfigurationError",
    "CacheError",
    "TextChunk",
    "HeadingItem",
    "ParsedDocument",
    "TranslationProviderConfig",
    "EnhancementResult",
    "DocumentEnhancement",
    "ResultStatus",
    "ChunkTranslationPipeline",
    "PipelineConfig",
    "SectionEnhancementPipeline",
    "create_enhancer",
]
