"""
Section enhancement: split a document at its headings, rewrite each section,
and prepend a summary block.
"""

from readerfirst.enhancement.backends import (
    EnhancementBackend,
    FallbackEnhancementBackend,
    LocalEnhancementBackend,
    OpenAIEnhancementBackend,
    create_enhancer,
)
from readerfirst.enhancement.orchestrator import SectionEnhancementPipeline
from readerfirst.enhancement.sections import merge_enhanced_document, split_sections, strip_tags

__all__ = [
    "EnhancementBackend",
    "FallbackEnhancementBackend",
    "LocalEnhancementBackend",
    "OpenAIEnhancementBackend",
    "SectionEnhancementPipeline",
    "create_enhancer",
    "merge_enhanced_document",
    "split_sections",
    "strip_tags",
]
