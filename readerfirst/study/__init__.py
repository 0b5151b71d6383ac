"""Study tools over document text."""

from readerfirst.study.assistant import MAX_CONTEXT_CHARS, StudyAssistant

__all__ = ["MAX_CONTEXT_CHARS", "StudyAssistant"]
