"""
HTTP helpers: retry with exponential backoff and the chat-completion call
shared by every AI feature.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed retry budget. Delay before retry n (0-based) is base_delay * 2**n."""
    retries: int = 3
    base_delay: float = 0.5

    def __post_init__(self):
        if self.retries < 1:
            raise ValueError(f"retries must be at least 1, got {self.retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must not be negative, got {self.base_delay}")

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs
) -> httpx.Response:
    """
    Send a request, retrying on any non-2xx status or httpx error.

    Every failure is retried the same way, including 4xx responses. After
    the last attempt the last error is re-raised unchanged.

    Args:
        client: Shared async client
        method: HTTP method
        url: Absolute URL
        policy: Retry budget (default 3 attempts, 0.5s base delay)
        sleep: Awaitable sleep, injectable for tests
        **kwargs: Passed through to client.request (json=, data=, headers=...)

    Returns:
        The first successful response
    """
    policy = policy or RetryPolicy()
    last_error: Optional[Exception] = None

    for attempt in range(policy.retries):
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            last_error = e
            if attempt + 1 >= policy.retries:
                break
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{method} {url} failed (attempt {attempt + 1}/{policy.retries}): {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await sleep(delay)

    raise last_error


def status_of(error: Exception) -> Optional[int]:
    """HTTP status code carried by an error, if it came from a response."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def first_message_content(data: Any) -> Optional[str]:
    """Extract choices[0].message.content, or None if the shape is off."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


def parse_json_object(content: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse model output that should be a JSON object."""
    if not content:
        return None
    try:
        parsed = json.loads(content)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


async def post_chat_completion(
    client: httpx.AsyncClient,
    api_key: str,
    payload: Dict[str, Any],
    base_url: str = OPENAI_BASE_URL,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """
    POST a chat-completion request through the retry fetcher.

    Returns the decoded JSON body, or None when the body is not JSON.
    """
    response = await fetch_with_retry(
        client,
        "POST",
        f"{base_url.rstrip('/')}/chat/completions",
        policy=policy,
        sleep=sleep,
        json=payload,
        headers={"Authorization": f"Bearer {api_key}"},
    )
    try:
        return response.json()
    except ValueError:
        logger.warning("Chat completion returned a non-JSON body")
        return None


class ChatCompletionClient:
    """
    Owns the httpx client and retry settings for one chat-completion caller.

    An injected client is never closed here; a client created on first use
    is closed by aclose().
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: str = OPENAI_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        retry: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        timeout: float = 60.0,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or os.getenv("AI_MODEL", DEFAULT_CHAT_MODEL)
        self.base_url = base_url
        self.retry = retry or RetryPolicy()
        self.sleep = sleep
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def chat(self, payload: Dict[str, Any]) -> Optional[str]:
        """Send a chat completion and return the first message's content."""
        payload = {"model": self.model, **payload}
        data = await post_chat_completion(
            self.client, self.api_key, payload,
            base_url=self.base_url, policy=self.retry, sleep=self.sleep,
        )
        return first_message_content(data)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
