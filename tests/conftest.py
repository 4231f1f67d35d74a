from __future__ import annotations

import asyncio
import copy
import json
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List

import pytest

from idea_validator.config import DEFAULT_FIXTURE_PATH, ExecutionMode, get_settings
from idea_validator.errors import ProviderError
from idea_validator.generation import SamplingConfig, StructuredGenerator
from idea_validator.pipeline import ValidationPipeline
from idea_validator.rephraser import QueryRephraser
from idea_validator.research import MarketResearchProvider, parse_research
from idea_validator.schemas import MarketResearch, SearchMode, UserProfile
from idea_validator.stages import build_stage_registry

FIT_ITEMS = [{"skill": f"Skill {i}", "description": f"Why skill {i} matters."} for i in range(1, 4)]

CANNED_FRAGMENTS: Dict[str, Dict[str, Any]] = {
    "pitch": {
        "pitch": "Collectors lose thousands to fakes. We authenticate every vintage pair. "
        "Resale grows 10% a year. Only we grade wearability. Join the waitlist today."
    },
    "revenueModels": {
        "revenueModels": [
            "Commission on each sale",
            "Paid authentication for off-platform pairs",
            "Premium collector subscription",
        ]
    },
    "mvpDesign": {
        "mvpDesign": "A curated marketplace with expert authentication and condition grading.",
        "mvpFeatures": [
            {
                "feature": "Wearability grade",
                "differentiationFactor": "Grades sole and glue integrity",
                "uniqueImplementation": "Standardized inspection checklist",
                "priority": "High",
                "effort": "Medium",
                "competitiveAdvantage": "Trust data competitors lack",
            }
        ],
    },
    "founderfit": {
        "founderfit": "You bring deep sneaker knowledge but lack marketplace operations experience.",
        "founderfitscore": 6,
        "positivefounderfit": FIT_ITEMS,
        "negativefounderfit": FIT_ITEMS,
    },
}


def fixture_payload() -> Dict[str, Any]:
    return json.loads(DEFAULT_FIXTURE_PATH.read_text(encoding="utf-8"))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Ensure cached settings do not leak between tests."""

    get_settings.cache_clear()


class FakeCompletions:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_completion_client(text: str | None = None, error: Exception | None = None) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(text, error)))


class RecordingResearch(MarketResearchProvider):
    """Returns a fixed payload and records how it was called."""

    name = "fake"

    def __init__(self, payload: Dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.payload = payload if payload is not None else fixture_payload()
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def research(
        self,
        query: str,
        mode: SearchMode,
        personalized: bool,
        profile: UserProfile | None = None,
    ) -> MarketResearch:
        self.calls.append({"query": query, "mode": mode, "personalized": personalized, "profile": profile})
        if self.error:
            raise self.error
        return parse_research(copy.deepcopy(self.payload), self.name)


class FakeGenerator(StructuredGenerator):
    """Answers with canned fragments keyed by the schema's first required field."""

    def __init__(self, fail_on: Iterable[str] = (), hang_on: Iterable[str] = ()) -> None:
        super().__init__(None)
        self.fail_on = set(fail_on)
        self.hang_on = set(hang_on)
        self.calls: List[Dict[str, Any]] = []
        self.cancelled: List[str] = []

    async def generate(self, prompt: str, schema: Dict[str, Any], sampling: SamplingConfig) -> Dict[str, Any]:
        key = schema["required"][0]
        self.calls.append({"key": key, "prompt": prompt, "sampling": sampling})
        if key in self.fail_on:
            raise ProviderError(f"{key} generation unavailable", provider=self.name, status_code=503)
        if key in self.hang_on:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled.append(key)
                raise
        return copy.deepcopy(CANNED_FRAGMENTS[key])

    @property
    def keys(self) -> List[str]:
        return [call["key"] for call in self.calls]


def make_pipeline(
    *,
    research: MarketResearchProvider | None = None,
    generator: StructuredGenerator | None = None,
    completion_client: Any = None,
    mode: ExecutionMode = ExecutionMode.LIVE,
) -> ValidationPipeline:
    client = completion_client if completion_client is not None else fake_completion_client("rephrased query")
    return ValidationPipeline(
        QueryRephraser(client, "test-model"),
        research or RecordingResearch(),
        generator or FakeGenerator(),
        stages=build_stage_registry("gemini-test"),
        mode=mode,
    )


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        firstName="Sam",
        lastName="Rivera",
        location={"city": "Austin", "country": "USA"},
        background="Industrial design",
        technicalSkills="Python, React",
        industry="Fashion resale",
        teamSize=2,
    )
