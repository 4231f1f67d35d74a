"""Schema-constrained generation on Gemini."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import Settings
from .errors import ProviderError
from .schema_registry import JsonSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingConfig:
    """Sampling parameters for one structured generation call."""

    model: str
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024


def _parse_structured_response(raw_text: str | None) -> Dict[str, Any]:
    text = (raw_text or "").strip()
    if not text:
        raise ValueError("empty response")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


class StructuredGenerator:
    """Single ``(prompt, schema)`` entry point shared by every stage."""

    name = "gemini"

    def __init__(self, client: genai.Client | None) -> None:
        self._client = client

    async def generate(self, prompt: str, schema: JsonSchema, sampling: SamplingConfig) -> Dict[str, Any]:
        if self._client is None:
            raise ProviderError("GEMINI_API_KEY is not set.", provider=self.name, code="NO_API_KEY")

        config = types.GenerateContentConfig(
            temperature=sampling.temperature,
            top_k=sampling.top_k,
            top_p=sampling.top_p,
            max_output_tokens=sampling.max_output_tokens,
            response_mime_type="application/json",
            response_json_schema=schema,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=sampling.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise ProviderError(
                exc.message or str(exc),
                provider=self.name,
                status_code=exc.code,
                code=exc.status,
            ) from exc
        except Exception as exc:
            # Transport failures and timeouts surface as httpx or asyncio errors.
            raise ProviderError(str(exc) or type(exc).__name__, provider=self.name) from exc

        try:
            return _parse_structured_response(response.text)
        except ValueError as exc:
            raise ProviderError(
                f"Unparseable structured response: {exc}",
                provider=self.name,
                code="UNPARSEABLE",
            ) from exc


def build_generator(settings: Settings) -> StructuredGenerator:
    client = None
    if settings.gemini_api_key:
        client = genai.Client(api_key=settings.gemini_api_key)
    else:
        logger.warning("GEMINI_API_KEY is not set; generation stages will fail.")
    return StructuredGenerator(client)
