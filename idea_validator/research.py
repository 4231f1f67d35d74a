"""Market research providers: the live Linkup search and the static fixture."""

from __future__ import annotations

import abc
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict

import httpx
from pydantic import ValidationError

from .config import ExecutionMode, Settings
from .errors import MockFixtureError, ProviderError
from .prompts import research_query
from .schema_registry import SchemaRegistry, schema_registry
from .schemas import MarketResearch, SearchMode, UserProfile

logger = logging.getLogger(__name__)

RESEARCH_FROM_DATE = date(2016, 1, 1)
RESEARCH_TO_DATE = date(2025, 6, 21)


def parse_research(payload: Any, provider: str) -> MarketResearch:
    """Validate a raw research payload into the base result."""

    if not isinstance(payload, dict):
        raise ProviderError(f"Research response is not a JSON object: {type(payload).__name__}", provider=provider)
    try:
        return MarketResearch.model_validate(payload)
    except ValidationError as exc:
        raise ProviderError(
            f"Research response does not match schema: {exc.error_count()} error(s)",
            provider=provider,
            code="SCHEMA_MISMATCH",
        ) from exc


class MarketResearchProvider(abc.ABC):
    """Produces the base market analysis for a (rephrased) idea."""

    name = "research"

    @abc.abstractmethod
    async def research(
        self,
        query: str,
        mode: SearchMode,
        personalized: bool,
        profile: UserProfile | None = None,
    ) -> MarketResearch:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class LinkupResearchProvider(MarketResearchProvider):
    """Schema-constrained search against the Linkup API."""

    name = "linkup"

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        registry: SchemaRegistry = schema_registry,
        timeout: float = 300.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            logger.warning("Linkup API key not provided. Live research calls will fail.")
        self.api_key = api_key or ""
        self.endpoint = base_url.rstrip("/") + "/search"
        self.registry = registry
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def build_payload(
        self,
        query: str,
        mode: SearchMode,
        personalized: bool,
        profile: UserProfile | None,
    ) -> Dict[str, Any]:
        schema = self.registry.research_schema(personalized)
        return {
            "q": research_query(query, profile if personalized else None),
            "depth": mode.value,
            "outputType": "structured",
            "structuredOutputSchema": json.dumps(schema),
            "includeImages": False,
            "fromDate": RESEARCH_FROM_DATE.isoformat(),
            "toDate": RESEARCH_TO_DATE.isoformat(),
        }

    async def research(
        self,
        query: str,
        mode: SearchMode,
        personalized: bool,
        profile: UserProfile | None = None,
    ) -> MarketResearch:
        payload = self.build_payload(query, mode, personalized, profile)
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        logger.info("Linkup search (depth=%s, personalized=%s)", mode.value, personalized)
        try:
            response = await self._client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise self._status_error(exc.response) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(str(exc) or type(exc).__name__, provider=self.name) from exc
        except ValueError as exc:
            raise ProviderError(f"Research response is not valid JSON: {exc}", provider=self.name) from exc
        logger.debug("Linkup raw response: %s", data)
        return parse_research(data, self.name)

    def _status_error(self, response: httpx.Response) -> ProviderError:
        message = response.text or response.reason_phrase
        code = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = body["error"].get("message") or message
            code = body["error"].get("code")
        return ProviderError(message, provider=self.name, status_code=response.status_code, code=code)

    async def aclose(self) -> None:
        await self._client.aclose()


class MockResearchProvider(MarketResearchProvider):
    """Serves a static fixture instead of calling the search provider."""

    name = "mock"

    def __init__(self, fixture_path: Path) -> None:
        self.fixture_path = Path(fixture_path)

    def load_fixture(self) -> Dict[str, Any]:
        try:
            return json.loads(self.fixture_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise MockFixtureError(f"Mock fixture not found: {self.fixture_path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise MockFixtureError(f"Mock fixture unreadable: {exc}") from exc

    async def research(
        self,
        query: str,
        mode: SearchMode,
        personalized: bool,
        profile: UserProfile | None = None,
    ) -> MarketResearch:
        logger.info("Serving %s (USE_LINKUP_MOCK=true)", self.fixture_path.name)
        return parse_research(self.load_fixture(), self.name)


def build_research_provider(settings: Settings) -> MarketResearchProvider:
    if settings.execution_mode is ExecutionMode.MOCK:
        return MockResearchProvider(settings.mock_fixture_path)
    return LinkupResearchProvider(settings.linkup_api_key, settings.linkup_base_url)
