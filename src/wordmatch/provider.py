import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .config import Settings
from .models import Difficulty, WordPair
from .vocabulary import VocabularyManager

logger = logging.getLogger("wordmatch")

WORD_PAIR_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "STRING"},
            "en": {"type": "STRING"},
            "zh": {"type": "STRING"},
            "explanation": {"type": "STRING"},
        },
        "required": ["id", "en", "zh", "explanation"],
    },
}


class ProviderError(Exception):
    """The word pair service failed or returned something unusable."""


def validate_word_pairs(raw: Any, count: int) -> List[WordPair]:
    if not isinstance(raw, list):
        raise ProviderError(f"Expected a list of word pairs, got {type(raw).__name__}")
    if len(raw) != count:
        raise ProviderError(f"Expected {count} word pairs, got {len(raw)}")

    try:
        pairs = [WordPair.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ProviderError(f"Malformed word pair: {e}") from e

    if any(pair.explanation is None for pair in pairs):
        raise ProviderError("Word pair without an explanation")
    if len({pair.id for pair in pairs}) != len(pairs):
        raise ProviderError("Duplicate word pair ids")
    return pairs


def _strip_code_fence(text: str) -> str:
    match = re.search(r"```(?:json)?\s*([\s\S]+?)```", text, flags=re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return text.strip()


# --- Strategy Pattern: Word Pair Providers ---
class WordPairProvider(ABC):
    """Abstract Base Class for the services that supply word pairs."""

    @abstractmethod
    async def fetch_word_pairs(
        self, difficulty: Difficulty, count: int
    ) -> List[WordPair]:
        pass


class StaticWordPairProvider(WordPairProvider):
    """Serves the offline vocabulary without any network access."""

    def __init__(self, vocabulary: VocabularyManager):
        self.vocabulary = vocabulary

    async def fetch_word_pairs(
        self, difficulty: Difficulty, count: int
    ) -> List[WordPair]:
        return self.vocabulary.fallback_pairs(difficulty, count)


class GeminiWordPairProvider(WordPairProvider):
    """Asks Google Gemini for word pairs through its REST API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def build_prompt(self, difficulty: Difficulty, count: int) -> str:
        return (
            f"Generate {count} English-Chinese word pairs for a matching game.\n"
            f"Difficulty level: {difficulty.value}.\n"
            "Provide commonly used words. Ensure the translations are accurate "
            "and concise.\n"
            "Include a short sentence or additional explanation for each word.\n"
            "Give every pair a distinct id."
        )

    def build_payload(self, difficulty: Difficulty, count: int) -> Dict[str, Any]:
        return {
            "contents": [
                {"role": "user", "parts": [{"text": self.build_prompt(difficulty, count)}]}
            ],
            "generationConfig": {
                "temperature": 0.7,
                "responseMimeType": "application/json",
                "responseSchema": WORD_PAIR_SCHEMA,
            },
        }

    async def fetch_word_pairs(
        self, difficulty: Difficulty, count: int
    ) -> List[WordPair]:
        if not self.api_key:
            raise ProviderError("GEMINI_API_KEY is not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    url,
                    params={"key": self.api_key},
                    json=self.build_payload(difficulty, count),
                )
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(
                f"Gemini API error {response.status_code}: {response.text[:200]}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ProviderError("Gemini returned a non-JSON body") from e

        text = self._extract_text(result)
        try:
            raw = json.loads(_strip_code_fence(text))
        except (ValueError, TypeError) as e:
            raise ProviderError(f"Could not parse word pairs: {e}") from e
        return validate_word_pairs(raw, count)

    @staticmethod
    def _extract_text(result: Any) -> str:
        if not isinstance(result, dict):
            raise ProviderError(
                f"Unexpected Gemini response of type {type(result).__name__}"
            )

        feedback = result.get("promptFeedback") or {}
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise ProviderError(f"Gemini blocked the prompt: {feedback['blockReason']}")

        candidates = result.get("candidates") or []
        if not isinstance(candidates, list):
            raise ProviderError("Gemini candidates are not a list")

        for candidate in candidates:
            if not isinstance(candidate, dict):
                raise ProviderError("Malformed Gemini candidate")
            content = candidate.get("content") or {}
            parts = content.get("parts") if isinstance(content, dict) else None
            if not isinstance(parts, (list, type(None))):
                raise ProviderError("Malformed Gemini content parts")
            for part in parts or []:
                if not isinstance(part, dict):
                    raise ProviderError("Malformed Gemini content part")
                text = part.get("text")
                if text is not None and not isinstance(text, str):
                    raise ProviderError("Gemini returned non-text content")
                if text:
                    return text
            if candidate.get("finishReason") == "SAFETY":
                raise ProviderError("Gemini response blocked by safety settings")
        raise ProviderError("Gemini returned no text")


class ProviderFactory:
    """Factory to select the word pair provider from the settings."""

    @staticmethod
    def create(settings: Settings, vocabulary: VocabularyManager) -> WordPairProvider:
        if settings.WORD_PROVIDER == "gemini" and settings.GEMINI_API_KEY:
            return GeminiWordPairProvider(
                api_key=settings.GEMINI_API_KEY,
                model=settings.GEMINI_MODEL,
                base_url=settings.GEMINI_BASE_URL,
                timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            )
        if settings.WORD_PROVIDER == "gemini":
            logger.warning("GEMINI_API_KEY missing. Serving the offline word list.")
        return StaticWordPairProvider(vocabulary)


async def load_word_pairs(
    provider: WordPairProvider,
    difficulty: Difficulty,
    count: int,
    vocabulary: VocabularyManager,
) -> List[WordPair]:
    """Fetches word pairs, substituting the offline list on any provider failure."""
    try:
        return await provider.fetch_word_pairs(difficulty, count)
    except ProviderError as e:
        logger.warning(f"Word pair provider failed ({e}). Using fallback words.")
        return vocabulary.fallback_pairs(difficulty, count)
