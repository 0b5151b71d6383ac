"""
Study assistant: question answering, flashcards and quizzes over document text.

Every call is a JSON-mode chat completion. Without an API key the assistant
answers locally with placeholder content so the reader stays usable offline.
"""

import logging
from typing import Any, Dict, List

import httpx

from readerfirst.core.exceptions import BackendError
from readerfirst.core.models import Flashcard, QuizItem
from readerfirst.utils.http import ChatCompletionClient, parse_json_object, status_of

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 70000

QA_PROMPT = 'Answer only from the provided context. Return JSON: {"answer": string}.'
FLASHCARDS_PROMPT = (
    "Create 10-30 flashcards from the provided context. "
    'Return JSON: {"flashcards": [{"front": string, "back": string}]}.'
)
QUIZ_PROMPT = (
    "Create a multiple-choice quiz from the provided context. "
    'Return JSON: {"quiz": [{"question": string, "options": string[], "answer": string}]}.'
)


class StudyAssistant(ChatCompletionClient):
    """Q&A, flashcards and quiz generation backed by a chat model."""

    name = "openai"

    def _check_context(self, context: str) -> None:
        if len(context) > MAX_CONTEXT_CHARS:
            raise ValueError(
                f"Context is {len(context)} characters; the limit is {MAX_CONTEXT_CHARS}"
            )

    async def _ask_json(self, system_prompt: str, user_content: str) -> Dict[str, Any]:
        payload = {
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        }
        try:
            content = await self.chat(payload)
        except httpx.HTTPError as e:
            raise BackendError(self.name, str(e), original_error=e, status_code=status_of(e)) from e

        parsed = parse_json_object(content)
        if parsed is None:
            logger.warning("Study response was not a JSON object")
            return {}
        return parsed

    async def ask(self, question: str, context: str) -> str:
        self._check_context(context)
        if not self.api_key:
            return f"Fallback answer for: {question}"

        data = await self._ask_json(QA_PROMPT, f"Question: {question}\nContext:\n{context}")
        answer = data.get("answer")
        return answer if isinstance(answer, str) else ""

    async def flashcards(self, context: str) -> List[Flashcard]:
        self._check_context(context)
        if not self.api_key:
            return [Flashcard(front="Key point", back=context[:120])]

        data = await self._ask_json(FLASHCARDS_PROMPT, context)
        cards = []
        for item in data.get("flashcards") or []:
            if isinstance(item, dict) and item.get("front") and item.get("back"):
                cards.append(Flashcard(front=str(item["front"]), back=str(item["back"])))
        return cards

    async def quiz(self, context: str) -> List[QuizItem]:
        self._check_context(context)
        if not self.api_key:
            return [QuizItem(question="Main idea?", answer=context[:100], options=[])]

        data = await self._ask_json(QUIZ_PROMPT, context)
        items = []
        for item in data.get("quiz") or []:
            if not isinstance(item, dict) or not item.get("question"):
                continue
            options = item.get("options")
            items.append(QuizItem(
                question=str(item["question"]),
                answer=str(item.get("answer") or ""),
                options=[str(o) for o in options] if isinstance(options, list) else [],
            ))
        return items
