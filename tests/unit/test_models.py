"""
Tests for core data models and the exception hierarchy.
"""

import dataclasses

import pytest

from readerfirst.core.exceptions import BackendError, CacheError, ConfigurationError, ReaderFirstError
from readerfirst.core.models import (
    EnhancementResult,
    Flashcard,
    ParsedDocument,
    QuizItem,
    ResultStatus,
    TextChunk,
    TranslationProviderConfig,
)


class TestModels:

    def test_chunk_is_immutable(self):
        chunk = TextChunk(index=0, text="Hello")
        with pytest.raises(dataclasses.FrozenInstanceError):
            chunk.text = "Changed"

    def test_provider_config(self):
        assert TranslationProviderConfig("deepl", "key").is_configured
        assert not TranslationProviderConfig("deepl", "").is_configured

    def test_parsed_document_chunks(self):
        document = ParsedDocument(title="T", html="", text_chunks=["a", "b"])
        assert [chunk.index for chunk in document.chunks] == [0, 1]

    def test_enhancement_result_dict_roundtrip(self):
        result = EnhancementResult("<p>x</p>", "Sum", ["t"], ["UV"], ResultStatus.OK)
        data = result.to_dict()

        assert data["enhancedHtml"] == "<p>x</p>"
        assert data["status"] == "ok"
        assert EnhancementResult.from_dict(data) == result

    def test_study_items_to_dict(self):
        assert Flashcard("Key point", "Quads deform well").to_dict() == {
            "front": "Key point", "back": "Quads deform well",
        }
        assert QuizItem("Main idea?", "Topology", ["UV", "Topology"]).to_dict()["options"] == ["UV", "Topology"]

    def test_degraded_flag(self):
        assert EnhancementResult("x", status=ResultStatus.DEGRADED).is_degraded
        assert not EnhancementResult("x", status=ResultStatus.FALLBACK).is_degraded


class TestExceptions:

    def test_hierarchy(self):
        for error in (BackendError("deepl", "down"), ConfigurationError("bad"), CacheError("broken")):
            assert isinstance(error, ReaderFirstError)

    def test_backend_error_suggestions(self):
        assert "API key" in BackendError("openai", "denied", status_code=401).suggestion
        assert BackendError("openai", "boom", status_code=500).suggestion is None
        assert "network" in BackendError("openai", "x", original_error=OSError("down")).suggestion

    def test_configuration_error_details(self):
        error = ConfigurationError("Unknown provider", config_key="translation.provider",
                                   invalid_value="google", valid_values=["openai", "deepl"])
        data = error.to_dict()

        assert data["error_type"] == "ConfigurationError"
        assert data["details"]["invalid_value"] == "google"
        assert "openai, deepl" in error.suggestion
        assert "Suggestion:" in str(error)
