"""Translation providers and the glossary guard."""

from readerfirst.translation.base import (
    DEFAULT_TARGET_LANG,
    TranslationBackend,
    TranslationRequest,
    TranslationResponse,
)

__all__ = [
    "DEFAULT_TARGET_LANG",
    "TranslationBackend",
    "TranslationRequest",
    "TranslationResponse",
]
