"""
Centralized Glossary Management for ReaderFirst.

Loads domain glossaries, protects terms from mistranslation by normalizing
them to their canonical form before a provider call, and scans text for
domain vocabulary.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Set
import json
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Placeholder tokens are built from private-use code points so they can never
# match an alphabetic glossary term.
_TOKEN_OPEN_BASE = 0xE000
_TOKEN_INDEX_BASE = 0xE100


@dataclass
class GlossaryTerm:
    """A single glossary term and the form it must keep."""
    source: str
    target: str
    domain: str = "general"

    def matches(self, text: str) -> bool:
        """Case-insensitive substring check."""
        return self.source.lower() in text.lower()


class GlossaryManager:
    """
    Glossary of protected terms.

    Features:
    - Load glossaries from packaged JSON domain files, any JSON file, or dicts
    - Glossary guard: rewrite every casing of a term to its canonical form
    - Keyword scan for domain vocabulary
    """

    def __init__(self, glossary_dir: Optional[Path] = None):
        """
        Initialize glossary manager.

        Args:
            glossary_dir: Directory containing glossary JSON files.
                         Defaults to readerfirst/translation/glossary/domains/
        """
        self.glossary_dir = glossary_dir or self._get_default_glossary_dir()
        self.terms: Dict[str, GlossaryTerm] = {}
        self.domains_loaded: Set[str] = set()

    def _get_default_glossary_dir(self) -> Path:
        return Path(__file__).parent / "domains"

    def load_domain(self, domain: str, lang: str = "en") -> int:
        """
        Load glossary for a packaged domain.

        Args:
            domain: Domain name (protected, keywords, ...)
            lang: Source language suffix of the file

        Returns:
            Number of terms loaded
        """
        glossary_file = self.glossary_dir / f"{domain}_{lang}.json"

        if not glossary_file.exists():
            logger.warning(f"Glossary file not found: {glossary_file}")
            return 0

        with open(glossary_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        count = self.load_from_dict(data.get('terms', data), domain=domain)
        logger.debug(f"Loaded {count} terms from {domain} ({lang})")
        return count

    def load_from_dict(self, terms: Dict[str, str], domain: str = "custom") -> int:
        """
        Load glossary from a dictionary of term -> canonical form.

        Returns:
            Number of terms loaded
        """
        count = 0
        for source, target in terms.items():
            self.add_term(source, target, domain=domain)
            count += 1

        self.domains_loaded.add(domain)
        return count

    def load_from_file(self, filepath: Path) -> int:
        """
        Load glossary from a JSON file.

        Accepts either {"domain": ..., "terms": {...}} or a flat mapping.
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        terms = data.get('terms', data)
        domain = data.get('domain', 'imported')
        return self.load_from_dict(terms, domain)

    def add_term(self, source: str, target: Optional[str] = None, domain: str = "user") -> None:
        """Add a single term. The canonical form defaults to the term itself."""
        if not source or not source.strip():
            raise ValueError("Glossary term must not be empty")
        self.terms[source.lower()] = GlossaryTerm(
            source=source,
            target=target if target is not None else source,
            domain=domain
        )

    def get_term(self, source: str) -> Optional[GlossaryTerm]:
        """Get a term by source text (case-insensitive)."""
        return self.terms.get(source.lower())

    def get_translation(self, source: str) -> Optional[str]:
        term = self.get_term(source)
        return term.target if term else None

    def find_terms_in_text(self, text: str) -> List[GlossaryTerm]:
        """
        Find all glossary terms present in text (case-insensitive substring).

        Returns:
            Terms in the order they were declared
        """
        text_lower = text.lower()
        return [term for term in self.terms.values() if term.source.lower() in text_lower]

    def keyword_hits(self, text: str) -> List[str]:
        """Names of the terms found in text."""
        return [term.source for term in self.find_terms_in_text(text)]

    def guard_text(self, text: str) -> str:
        """
        Rewrite every case-insensitive occurrence of a term to its canonical form.

        Every term is first swapped for a unique placeholder, then every
        placeholder for the canonical form, so no replacement can re-match the
        output of another. Longer terms are substituted first.

        Args:
            text: Text to guard

        Returns:
            Guarded text; all other characters unchanged
        """
        if not text or not self.terms:
            return text

        open_char, close_char = self._token_delimiters(text)
        ordered = sorted(self.terms.values(), key=lambda t: len(t.source), reverse=True)

        placeholders: Dict[str, str] = {}
        guarded = text
        for i, term in enumerate(ordered):
            token = f"{open_char}{chr(_TOKEN_INDEX_BASE + i)}{close_char}"
            guarded, count = re.subn(re.escape(term.source), token, guarded, flags=re.IGNORECASE)
            if count:
                placeholders[token] = term.target

        for token, canonical in placeholders.items():
            guarded = guarded.replace(token, canonical)

        return guarded

    @staticmethod
    def _token_delimiters(text: str):
        """Pick a pair of private-use delimiters absent from text."""
        for offset in range(0, 0x100, 2):
            open_char = chr(_TOKEN_OPEN_BASE + offset)
            close_char = chr(_TOKEN_OPEN_BASE + offset + 1)
            if open_char not in text and close_char not in text:
                return open_char, close_char
        raise ValueError("Text uses every private-use delimiter; cannot build placeholders")

    def to_dict(self) -> Dict[str, str]:
        """Export all terms as simple dictionary."""
        return {term.source: term.target for term in self.terms.values()}

    def clear(self) -> None:
        self.terms.clear()
        self.domains_loaded.clear()

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, source: str) -> bool:
        return source.lower() in self.terms

    def __repr__(self) -> str:
        return f"GlossaryManager({len(self.terms)} terms, domains={self.domains_loaded})"


def create_glossary(
    domains: Optional[List[str]] = None,
    lang: str = "en",
    custom_terms: Optional[Dict[str, str]] = None
) -> GlossaryManager:
    """
    Create a glossary manager with specified domains.

    Example:
        >>> guard = create_glossary(['protected'], custom_terms={'LOD': 'LOD'})
    """
    manager = GlossaryManager()

    for domain in domains or []:
        manager.load_domain(domain, lang)

    if custom_terms:
        manager.load_from_dict(custom_terms, domain='custom')

    return manager


def protected_terms() -> GlossaryManager:
    """Terms kept verbatim through translation."""
    return create_glossary(["protected"])


def domain_keywords() -> GlossaryManager:
    """Vocabulary reported by the enhancement keyword scan."""
    return create_glossary(["keywords"])
