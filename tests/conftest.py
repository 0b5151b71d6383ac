"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import httpx
import pytest


@pytest.fixture(autouse=True)
def no_provider_env(monkeypatch):
    """Keep real API keys and endpoints out of tests."""
    for name in ("OPENAI_API_KEY", "DEEPL_API_KEY", "AI_MODEL", "TRANSLATION_PROVIDER",
                 "OPENAI_BASE_URL", "DEEPL_API_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sleeps():
    """Awaitable sleep that only records the requested delays."""
    delays = []

    async def sleep(delay):
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def mock_client():
    """Build an AsyncClient whose requests are answered by a handler function."""
    def make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return make


@pytest.fixture
def memory_cache():
    from readerfirst.utils.cache import TranslationCache
    return TranslationCache(use_disk=False)


@pytest.fixture
def sample_html():
    """Small rendered document with two sections and one embedded image."""
    return (
        "<h1>Modeling Basics</h1>"
        "<p>Good topology makes an edge loop easy to select.</p>"
        '<img src="data:image/png;base64,AAAA">'
        "<h2>Texturing</h2>"
        "<p>Unwrap the UV layout before baking a normal map.</p>"
        "<ul><li>Check PBR values</li></ul>"
    )


@pytest.fixture
def chat_reply():
    """Chat-completion response carrying one assistant message."""
    def make(content, status_code=200):
        return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})
    return make
