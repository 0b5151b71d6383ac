"""Glossary terms: protection during translation and keyword hits."""

from .manager import GlossaryManager, GlossaryTerm, create_glossary, domain_keywords, protected_terms

__all__ = [
    'GlossaryManager',
    'GlossaryTerm',
    'create_glossary',
    'domain_keywords',
    'protected_terms',
]
