"""
Tests for enhancement backends and the caller-side fallback policy.
"""

import json

import httpx
import pytest

from readerfirst.core.exceptions import BackendError
from readerfirst.core.models import EnhancementResult, ResultStatus
from readerfirst.enhancement.backends import (
    EnhancementBackend,
    FallbackEnhancementBackend,
    LocalEnhancementBackend,
    OpenAIEnhancementBackend,
    create_enhancer,
)

SECTION = "<h2>Rigging</h2><p>A clean rig needs good skinning.</p>"


class FailingBackend(EnhancementBackend):
    name = "failing"

    async def enhance(self, section_html, title):
        raise BackendError(self.name, "unavailable", status_code=503)


class TestLocalEnhancement:

    @pytest.mark.asyncio
    async def test_truncation_heuristic(self):
        long_text = "word " * 100
        result = await LocalEnhancementBackend().enhance(f"<p>{long_text}</p>", "Doc")

        plain = long_text.strip()
        assert result.enhanced_html == f"<p>{long_text}</p>"
        assert result.summary == plain[:260]
        assert result.takeaways == [plain[:120]]
        assert result.glossary == []
        assert result.status == ResultStatus.FALLBACK

    @pytest.mark.asyncio
    async def test_empty_section_has_no_takeaways(self):
        result = await LocalEnhancementBackend().enhance("<hr>", "Doc")
        assert result.summary == ""
        assert result.takeaways == []


class TestOpenAIEnhancement:

    @pytest.mark.asyncio
    async def test_request_and_parsed_result(self, mock_client, sleeps, chat_reply):
        seen = {}
        answer = {
            "enhancedHtml": "<h2>Rigging</h2><p>Better.</p>",
            "summary": "About rigs",
            "takeaways": ["Skin carefully"],
            "glossary": ["rig", "skinning"],
        }

        def handler(request):
            seen["body"] = json.loads(request.content)
            return chat_reply(json.dumps(answer))

        async with mock_client(handler) as client:
            backend = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            result = await backend.enhance(SECTION, "")

        assert result == EnhancementResult(
            enhanced_html="<h2>Rigging</h2><p>Better.</p>",
            summary="About rigs",
            takeaways=["Skin carefully"],
            glossary=["rig", "skinning"],
            status=ResultStatus.OK,
        )
        body = seen["body"]
        assert body["response_format"] == {"type": "json_object"}
        assert body["temperature"] == 0.2
        assert body["messages"][1]["content"] == f"Title: Document\nSection HTML:\n{SECTION}"

    @pytest.mark.asyncio
    async def test_missing_fields_default(self, mock_client, sleeps, chat_reply):
        async with mock_client(lambda request: chat_reply('{"summary": 5}')) as client:
            backend = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            result = await backend.enhance(SECTION, "Doc")

        assert result.enhanced_html == SECTION
        assert result.summary == ""
        assert result.takeaways == []
        assert result.glossary == []
        assert result.status == ResultStatus.OK

    @pytest.mark.asyncio
    async def test_unparsable_content_is_degraded(self, mock_client, sleeps, chat_reply):
        async with mock_client(lambda request: chat_reply("Sure! Here is your JSON")) as client:
            backend = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            result = await backend.enhance(SECTION, "Doc")

        assert result.enhanced_html == SECTION
        assert result.is_degraded

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, mock_client, sleeps):
        async with mock_client(lambda request: httpx.Response(500)) as client:
            backend = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            with pytest.raises(BackendError):
                await backend.enhance(SECTION, "Doc")

        assert sleeps.delays == [0.5, 1.0]


class TestFallbackPolicy:

    @pytest.mark.asyncio
    async def test_backend_error_uses_fallback(self):
        backend = FallbackEnhancementBackend(FailingBackend())
        result = await backend.enhance(SECTION, "Doc")

        assert result.status == ResultStatus.FALLBACK
        assert result.summary == "Rigging A clean rig needs good skinning."

    @pytest.mark.asyncio
    async def test_degraded_result_uses_fallback(self, mock_client, sleeps, chat_reply):
        async with mock_client(lambda request: chat_reply("not json")) as client:
            primary = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            result = await FallbackEnhancementBackend(primary).enhance(SECTION, "Doc")

        assert result.status == ResultStatus.FALLBACK

    @pytest.mark.asyncio
    async def test_ok_result_passes_through(self, mock_client, sleeps, chat_reply):
        reply = json.dumps({"enhancedHtml": "<p>ok</p>", "summary": "s"})
        async with mock_client(lambda request: chat_reply(reply)) as client:
            primary = OpenAIEnhancementBackend(api_key="sk-test", client=client, sleep=sleeps)
            result = await FallbackEnhancementBackend(primary).enhance(SECTION, "Doc")

        assert result.status == ResultStatus.OK
        assert result.enhanced_html == "<p>ok</p>"


class TestCreateEnhancer:

    def test_no_key_is_local(self):
        assert isinstance(create_enhancer(), LocalEnhancementBackend)

    def test_key_wraps_openai(self):
        enhancer = create_enhancer(api_key="sk-test")
        assert isinstance(enhancer, FallbackEnhancementBackend)
        assert isinstance(enhancer.primary, OpenAIEnhancementBackend)
        assert enhancer.name == "openai+local"

    def test_env_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert isinstance(create_enhancer(), FallbackEnhancementBackend)
