from __future__ import annotations

import asyncio
import gc
from types import SimpleNamespace

import httpx
import pytest

from conftest import FakeGenerator, RecordingResearch, fake_completion_client, fixture_payload, make_pipeline, run
from idea_validator.config import DEFAULT_FIXTURE_PATH, ExecutionMode
from idea_validator.errors import ProviderError
from idea_validator.generation import StructuredGenerator
from idea_validator.pipeline import PipelineState
from idea_validator.research import MockResearchProvider
from idea_validator.schemas import ChatRequest, SearchMode, UserProfile

MESSAGE = "Build a marketplace for vintage sneakers"


def _request(**overrides) -> ChatRequest:
    payload = {"message": MESSAGE, "model": "Quick Search", "personalized": False, "userProfile": None}
    payload.update(overrides)
    return ChatRequest.model_validate(payload)


def test_standard_run_visits_states_in_order() -> None:
    pipeline = make_pipeline()

    result = run(pipeline.run(_request()))

    assert result.run.states == [
        PipelineState.START,
        PipelineState.REPHRASING,
        PipelineState.MARKET_RESEARCH,
        PipelineState.GENERATING_PITCH,
        PipelineState.GENERATING_REVENUE,
        PipelineState.GENERATING_MVP,
        PipelineState.FOUNDER_FIT_SKIPPED,
        PipelineState.COMPOSING,
        PipelineState.DONE,
    ]
    assert result.run.degraded is False


def test_research_receives_rephrased_query_and_mode() -> None:
    research = RecordingResearch()
    pipeline = make_pipeline(research=research, completion_client=fake_completion_client("sneaker resale demand"))

    run(pipeline.run(_request(model="Comprehensive")))

    assert research.calls[0]["query"] == "sneaker resale demand"
    assert research.calls[0]["mode"] is SearchMode.DEEP


def test_stages_use_original_message_not_rephrased_query() -> None:
    generator = FakeGenerator()
    pipeline = make_pipeline(generator=generator, completion_client=fake_completion_client("rewritten"))

    run(pipeline.run(_request()))

    assert all(f"Startup Idea: {MESSAGE}" in call["prompt"] for call in generator.calls)


def test_personalized_run_adds_founder_fit(profile: UserProfile) -> None:
    generator = FakeGenerator()
    pipeline = make_pipeline(generator=generator)

    result = run(pipeline.run(_request(personalized=True, userProfile=profile.model_dump())))

    reply = result.reply
    assert reply["personalizedstatus"] is True
    assert 1 <= reply["founderfitscore"] <= 10
    assert len(reply["positivefounderfit"]) == len(reply["negativefounderfit"]) == 3
    assert sorted(generator.keys) == sorted(["pitch", "revenueModels", "mvpDesign", "founderfit"])
    founder_fit_call = next(call for call in generator.calls if call["key"] == "founderfit")
    assert founder_fit_call["sampling"].temperature == 0.5
    assert PipelineState.GENERATING_FOUNDER_FIT in result.run.states


def test_unpersonalized_run_has_no_founder_fit_keys() -> None:
    research = RecordingResearch()
    research.payload["personalizedstatus"] = True

    reply = run(make_pipeline(research=research).run(_request())).reply

    assert reply["personalizedstatus"] is False
    assert not [key for key in reply if key.startswith("founderfit")]


def test_rephrase_failure_still_completes() -> None:
    research = RecordingResearch()
    pipeline = make_pipeline(research=research, completion_client=fake_completion_client(error=RuntimeError("down")))

    result = run(pipeline.run(_request()))

    assert research.calls[0]["query"] == MESSAGE
    assert result.run.state is PipelineState.DONE


def test_research_failure_is_fatal() -> None:
    generator = FakeGenerator()
    pipeline = make_pipeline(
        research=RecordingResearch(error=ProviderError("quota exceeded", provider="linkup")),
        generator=generator,
    )

    with pytest.raises(ProviderError, match="quota exceeded"):
        run(pipeline.run(_request()))
    assert generator.calls == []


def test_stage_failure_cancels_siblings_in_live_mode() -> None:
    generator = FakeGenerator(fail_on={"mvpDesign"}, hang_on={"pitch", "revenueModels"})
    pipeline = make_pipeline(generator=generator)

    with pytest.raises(ProviderError, match="mvpDesign"):
        run(pipeline.run(_request()))
    assert sorted(generator.cancelled) == ["pitch", "revenueModels"]


def test_scores_out_of_range_are_clamped() -> None:
    research = RecordingResearch()
    research.payload["score"] = 42
    research.payload["feasibilityscore"] = 0

    reply = run(make_pipeline(research=research).run(_request())).reply

    assert reply["score"] == 10
    assert reply["feasibilityscore"] == 1


def test_mock_mode_degrades_to_bare_fixture() -> None:
    research = RecordingResearch()
    pipeline = make_pipeline(research=research, generator=FakeGenerator(fail_on={"pitch"}), mode=ExecutionMode.MOCK)

    result = run(pipeline.run(_request()))

    assert result.reply == research.payload
    assert result.run.degraded is True
    assert result.run.state is PipelineState.DONE


class _UnreachableModels:
    async def generate_content(self, **kwargs):
        raise httpx.ConnectError("connection refused")


def test_mock_mode_degrades_on_transport_failure() -> None:
    generator = StructuredGenerator(SimpleNamespace(aio=SimpleNamespace(models=_UnreachableModels())))
    pipeline = make_pipeline(
        research=MockResearchProvider(DEFAULT_FIXTURE_PATH),
        generator=generator,
        mode=ExecutionMode.MOCK,
    )

    result = run(pipeline.run(_request()))

    assert result.run.degraded is True
    assert result.reply == fixture_payload()


def test_concurrent_stage_failures_are_all_retrieved() -> None:
    messages: list[str] = []

    async def scenario() -> str:
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda loop, context: messages.append(context["message"]))
        pipeline = make_pipeline(generator=FakeGenerator(fail_on={"pitch", "revenueModels", "mvpDesign"}))
        try:
            await pipeline.run(_request())
        except ProviderError as exc:
            raised = exc.message
        else:
            raised = ""
        gc.collect()
        await asyncio.sleep(0)
        return raised

    raised = run(scenario())

    assert raised == "pitch generation unavailable"
    assert messages == []
