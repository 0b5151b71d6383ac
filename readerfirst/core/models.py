"""
Core data models for ReaderFirst.

Plain dataclasses shared by the translation, enhancement and study pipelines.
Chunks, sections and provider configuration are immutable once produced.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Optional, Any


PROVIDERS = ("openai", "deepl")


@dataclass(frozen=True)
class TextChunk:
    """One indexed unit of plain text, anchored by data-chunk in the HTML."""
    index: int
    text: str


@dataclass(frozen=True)
class HeadingItem:
    """Heading entry for the document outline."""
    id: str
    text: str
    level: int  # 1-3


@dataclass
class ParsedDocument:
    """Shape produced by the document parser collaborator."""
    title: str
    html: str
    headings: List[HeadingItem] = field(default_factory=list)
    text_chunks: List[str] = field(default_factory=list)

    @property
    def chunks(self) -> List[TextChunk]:
        return [TextChunk(index=i, text=text) for i, text in enumerate(self.text_chunks)]


@dataclass(frozen=True)
class TranslationProviderConfig:
    """Provider selection supplied by the caller. Never mutated by the pipeline."""
    provider: str  # "openai" (generic chat) or "deepl" (dedicated translation)
    api_key: str
    model: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class ResultStatus(str, Enum):
    """How an AI result was obtained."""
    OK = "ok"              # provider answered with the expected shape
    DEGRADED = "degraded"  # provider answered but fields were missing/unparsable
    FALLBACK = "fallback"  # produced locally, no provider involved


@dataclass
class EnhancementResult:
    """Per-section output of the enhancement provider."""
    enhanced_html: str
    summary: str = ""
    takeaways: List[str] = field(default_factory=list)
    glossary: List[str] = field(default_factory=list)
    status: ResultStatus = ResultStatus.OK

    @property
    def is_degraded(self) -> bool:
        return self.status == ResultStatus.DEGRADED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enhancedHtml": self.enhanced_html,
            "summary": self.summary,
            "takeaways": list(self.takeaways),
            "glossary": list(self.glossary),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnhancementResult":
        return cls(
            enhanced_html=data.get("enhancedHtml", ""),
            summary=data.get("summary", ""),
            takeaways=list(data.get("takeaways", [])),
            glossary=list(data.get("glossary", [])),
            status=ResultStatus(data.get("status", ResultStatus.OK.value)),
        )


@dataclass
class DocumentEnhancement:
    """Merged document-level result of an enhancement pass."""
    html: str
    summary: str
    takeaways: List[str]
    glossary_hits: List[str]
    sections: int = 0
    degraded_sections: int = 0


@dataclass
class Flashcard:
    front: str
    back: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class QuizItem:
    question: str
    answer: str
    options: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
