"""Rewrites the raw idea into a research-friendly search query."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI, OpenAIError

from .config import Settings
from .errors import RephraseError
from .prompts import REPHRASE_SYSTEM_PROMPT, rephrase_prompt
from .schemas import UserProfile

logger = logging.getLogger(__name__)

REPHRASE_TEMPERATURE = 0.3
REPHRASE_MAX_TOKENS = 500


class QueryRephraser:
    """Best-effort completion call; any failure falls back to the idea text."""

    def __init__(self, client: AsyncOpenAI | None, model: str) -> None:
        self._client = client
        self.model = model

    async def rephrase(self, idea: str, profile: UserProfile | None = None) -> str:
        logger.info("Original user message: %s", idea)
        try:
            query = await self._complete(idea, profile)
        except RephraseError as exc:
            logger.warning("Rephrasing failed (%s); using original prompt", exc)
            return idea
        logger.info("Rephrased query: %s", query)
        return query

    async def _complete(self, idea: str, profile: UserProfile | None) -> str:
        if self._client is None:
            raise RephraseError("no completion client configured")
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": REPHRASE_SYSTEM_PROMPT},
                    {"role": "user", "content": rephrase_prompt(idea, profile)},
                ],
                temperature=REPHRASE_TEMPERATURE,
                max_tokens=REPHRASE_MAX_TOKENS,
            )
            message = response.choices[0].message.content if response.choices else None
        except OpenAIError as exc:
            raise RephraseError(str(exc)) from exc
        except Exception as exc:
            # Transport and decoding errors must not escape this stage either.
            raise RephraseError(f"{type(exc).__name__}: {exc}") from exc

        text = (message or "").strip()
        if not text:
            raise RephraseError("empty completion")
        return text


def build_rephraser(settings: Settings) -> QueryRephraser:
    client = None
    if settings.groq_api_key:
        client = AsyncOpenAI(api_key=settings.groq_api_key, base_url=settings.groq_base_url)
    else:
        logger.warning("GROQ_API_KEY is not set; ideas will be searched verbatim.")
    return QueryRephraser(client, settings.rephrase_model)
