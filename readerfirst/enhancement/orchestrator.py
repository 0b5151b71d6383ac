"""
Section enhancement pipeline.

Splits a document at its headings, rewrites each section in order, and
prepends one summary block built from all of them.
"""

import logging
from typing import Callable, List, Optional

from readerfirst.core.models import DocumentEnhancement, EnhancementResult, ResultStatus
from readerfirst.enhancement.backends import EnhancementBackend
from readerfirst.enhancement.sections import merge_enhanced_document, split_sections, strip_tags
from readerfirst.translation.glossary.manager import GlossaryManager, domain_keywords
from readerfirst.utils.cache import TranslationCache

logger = logging.getLogger(__name__)

MAX_TAKEAWAYS = 6


class SectionEnhancementPipeline:
    """
    Sequential per-section enhancement.

    Accumulation rules:
    - the first non-empty summary becomes the document summary
    - takeaways from every section are concatenated, then cut to max_takeaways
    - glossary hits are the AI glossary plus the local keyword scan,
      deduplicated in first-seen order

    Enhancer errors propagate; substituting a fallback is the caller's
    decision (see FallbackEnhancementBackend).
    """

    def __init__(
        self,
        enhancer: EnhancementBackend,
        glossary: Optional[GlossaryManager] = None,
        cache: Optional[TranslationCache] = None,
        max_takeaways: int = MAX_TAKEAWAYS,
        progress_callback: Optional[Callable[[int, str], None]] = None
    ):
        self.enhancer = enhancer
        self.glossary = glossary if glossary is not None else domain_keywords()
        self.cache = cache
        self.max_takeaways = max_takeaways
        self.progress_callback = progress_callback

    async def enhance_section(self, section_html: str, title: str) -> EnhancementResult:
        """Enhance one section, reusing a cached provider answer when present."""
        key = None
        if self.cache is not None:
            key = self.cache.make_key(self.enhancer.name, f"{title}:{section_html}")
            cached = self.cache.get_json(key)
            if cached is not None:
                return EnhancementResult.from_dict(cached)

        result = await self.enhancer.enhance(section_html, title)

        if key is not None and result.status == ResultStatus.OK:
            self.cache.put_json(key, result.to_dict())
        return result

    async def enhance_document(self, document_html: str, title: str) -> DocumentEnhancement:
        sections = split_sections(document_html)
        total = len(sections)

        enhanced_sections: List[str] = []
        summary = ""
        takeaways: List[str] = []
        glossary_hits: List[str] = []
        degraded = 0

        for index, section in enumerate(sections):
            result = await self.enhance_section(section, title)
            if result.status != ResultStatus.OK:
                degraded += 1

            enhanced_sections.append(result.enhanced_html)
            if not summary and result.summary:
                summary = result.summary
            takeaways.extend(result.takeaways)

            for term in list(result.glossary) + self.glossary.keyword_hits(strip_tags(section)):
                if term not in glossary_hits:
                    glossary_hits.append(term)

            if self.progress_callback:
                self.progress_callback(round((index + 1) / total * 100), f"Enhanced {index + 1}/{total} sections")

        takeaways = takeaways[:self.max_takeaways]
        if degraded:
            logger.warning(f"{degraded}/{total} sections were not enhanced by the provider")
        logger.info(f"Enhanced '{title}': {total} sections, {len(glossary_hits)} glossary hits")

        return DocumentEnhancement(
            html=merge_enhanced_document(enhanced_sections, summary, takeaways, glossary_hits),
            summary=summary,
            takeaways=takeaways,
            glossary_hits=glossary_hits,
            sections=total,
            degraded_sections=degraded,
        )
