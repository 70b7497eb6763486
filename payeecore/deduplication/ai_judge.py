"""
AI Duplicate Judge

LLM-backed judgment for ambiguous payee name pairs. The tiered processor
depends only on the judge signature, an async callable
``(name_a, name_b) -> {is_duplicate, confidence, reasoning}``;
``LLMDuplicateJudge`` is the implementation backed by the OpenAI or
Anthropic SDKs.
"""

import hashlib
import json
import logging
import os
import re
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from ..errors import AIJudgmentError, ConfigurationError
from .models import AIJudgment

logger = logging.getLogger(__name__)

AIJudge = Callable[[str, str], Awaitable[Any]]

SYSTEM_PROMPT = (
    "You are a duplicate detection expert. Analyze payee names and return "
    "accurate JSON responses."
)

JUDGMENT_PROMPT = """You are an expert at analyzing payee names to determine if they represent the same entity. Compare these two payee names and determine if they are duplicates.

PAYEE NAME 1: "{name_a}"
PAYEE NAME 2: "{name_b}"

Consider:
1. Are these names referring to the same person or business entity?
2. Business suffix variations (INC, LLC, CORP, etc.) usually denote the SAME entity
3. Case variations, abbreviations and formatting differences
4. Partial names vs full names of the same entity

Examples:
- "Christa INC" vs "CHRISTA" -> DUPLICATE (same entity with suffix variation)
- "WALMART INC" vs "WAL-MART STORES" -> DUPLICATE (same company)
- "AT&T" vs "AT T" -> DUPLICATE (punctuation only)
- "John Smith" vs "Jonathan Smith" -> LIKELY NOT DUPLICATE (different people)

Focus on whether these represent the SAME REAL-WORLD ENTITY, not just textual similarity.

Return your analysis as JSON:
{{
  "is_duplicate": boolean,
  "confidence": number (0-100),
  "reasoning": "Explain WHY these names represent the same or different real-world entities"
}}"""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-20241022",
}

API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class JudgmentCache:
    """In-memory TTL cache of judgments keyed by an unordered name pair."""

    def __init__(self, ttl_seconds: int = 3600):
        self.cache: Dict[str, Tuple[AIJudgment, datetime]] = {}
        self.ttl = timedelta(seconds=ttl_seconds)

    def get_cache_key(self, name_a: str, name_b: str) -> str:
        """Stable key for a name pair regardless of order."""
        combined = "\x1f".join(sorted([name_a, name_b]))
        return hashlib.sha256(combined.encode()).hexdigest()

    def get(self, key: str) -> Optional[AIJudgment]:
        if key in self.cache:
            value, timestamp = self.cache[key]
            if datetime.now() - timestamp < self.ttl:
                return value
            del self.cache[key]
        return None

    def set(self, key: str, value: AIJudgment) -> None:
        self.cache[key] = (value, datetime.now())

    def clear_expired(self) -> None:
        now = datetime.now()
        expired_keys = [
            key for key, (_, timestamp) in self.cache.items() if now - timestamp >= self.ttl
        ]
        for key in expired_keys:
            del self.cache[key]

    def clear(self) -> None:
        self.cache.clear()


def parse_judgment(content: Optional[str], name_a: str, name_b: str) -> AIJudgment:
    """Extract and validate the JSON verdict from a model reply."""
    content = (content or "").strip()
    if not content:
        raise AIJudgmentError("Empty response from AI judge", name_a=name_a, name_b=name_b)

    match = _JSON_OBJECT.search(content)
    if not match:
        raise AIJudgmentError("No JSON found in response", name_a=name_a, name_b=name_b)

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIJudgmentError(
            f"Malformed JSON in response: {e}", name_a=name_a, name_b=name_b, cause=e
        ) from e

    return AIJudgment.from_response(payload, name_a=name_a, name_b=name_b)


class LLMDuplicateJudge:
    """
    AI judge for ambiguous pairs using OpenAI or Anthropic chat models.

    Errors are raised, not swallowed: the tiered processor owns the
    fail-soft policy.
    """

    def __init__(
        self,
        provider: str = "openai",
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
        timeout: float = 30.0,
        cache: Optional[JudgmentCache] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize the judge.

        Args:
            provider: "openai" or "anthropic"
            model: Model name (defaults per provider)
            api_key: API key, read from the provider's env var if omitted
            temperature: Sampling temperature
            max_tokens: Maximum tokens in the reply
            timeout: Per-request timeout in seconds
            cache: Optional judgment cache
            client: Pre-built async SDK client (skips key lookup)
        """
        if provider not in DEFAULT_MODELS:
            raise ConfigurationError(
                f"Unknown AI judge provider '{provider}' "
                f"(expected one of {sorted(DEFAULT_MODELS)})"
            )

        self.provider = provider
        self.model = model or DEFAULT_MODELS[provider]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.cache = cache
        self.client = client or self._create_client(api_key)

        self.stats = {"total_judgments": 0, "cache_hits": 0, "failed_judgments": 0}

    def _create_client(self, api_key: Optional[str]) -> Any:
        api_key = api_key or os.getenv(API_KEY_ENV_VARS[self.provider])
        if not api_key:
            raise ConfigurationError(
                f"No API key for AI judge provider '{self.provider}' "
                f"(set {API_KEY_ENV_VARS[self.provider]})"
            )
        if self.provider == "anthropic":
            return AsyncAnthropic(api_key=api_key)
        return AsyncOpenAI(api_key=api_key)

    async def __call__(self, name_a: str, name_b: str) -> AIJudgment:
        """Judge whether two payee names refer to the same entity."""
        cache_key = None
        if self.cache is not None:
            cache_key = self.cache.get_cache_key(name_a, name_b)
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.stats["cache_hits"] += 1
                return cached

        self.stats["total_judgments"] += 1
        logger.debug(f"Requesting AI judgment: '{name_a}' vs '{name_b}'")

        prompt = JUDGMENT_PROMPT.format(name_a=name_a, name_b=name_b)
        try:
            content = await self._complete(prompt)
            judgment = parse_judgment(content, name_a, name_b)
        except AIJudgmentError:
            self.stats["failed_judgments"] += 1
            raise
        except Exception as e:
            self.stats["failed_judgments"] += 1
            raise AIJudgmentError(
                f"AI judge request failed: {e}", name_a=name_a, name_b=name_b, cause=e
            ) from e

        logger.debug(
            f"AI judgment: {'DUPLICATE' if judgment.is_duplicate else 'NOT DUPLICATE'} "
            f"({judgment.confidence:.0f}%) - {judgment.reasoning}"
        )

        if cache_key is not None:
            self.cache.set(cache_key, judgment)
        return judgment

    async def _complete(self, prompt: str) -> Optional[str]:
        if self.provider == "anthropic":
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout,
            )
            return "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            )

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content
