"""Orchestrates rephrase, research, generation and composition for a request."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel

from .config import ExecutionMode, Settings
from .composer import compose
from .errors import ProviderError
from .generation import StructuredGenerator, build_generator
from .rephraser import QueryRephraser, build_rephraser
from .research import MarketResearchProvider, build_research_provider
from .schema_registry import SchemaRegistry, schema_registry
from .schemas import ChatRequest, MarketResearch, UserProfile
from .stages import GenerationStage, StageConfig, build_stage_registry, run_stage, select_stages

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    START = "start"
    REPHRASING = "rephrasing"
    MARKET_RESEARCH = "market_research"
    GENERATING_PITCH = "generating_pitch"
    GENERATING_REVENUE = "generating_revenue"
    GENERATING_MVP = "generating_mvp"
    GENERATING_FOUNDER_FIT = "generating_founder_fit"
    FOUNDER_FIT_SKIPPED = "founder_fit_skipped"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


STAGE_STATES = {
    GenerationStage.PITCH: PipelineState.GENERATING_PITCH,
    GenerationStage.REVENUE_MODELS: PipelineState.GENERATING_REVENUE,
    GenerationStage.MVP: PipelineState.GENERATING_MVP,
    GenerationStage.FOUNDER_FIT: PipelineState.GENERATING_FOUNDER_FIT,
}


@dataclass
class PipelineRun:
    """Per-request trace of the states visited."""

    states: List[PipelineState] = field(default_factory=lambda: [PipelineState.START])
    degraded: bool = False

    def enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s -> %s", self.states[-1].value, state.value)
        self.states.append(state)

    @property
    def state(self) -> PipelineState:
        return self.states[-1]


@dataclass(frozen=True)
class PipelineResult:
    reply: Dict[str, Any]
    run: PipelineRun


class ValidationPipeline:
    """Runs one idea through every stage and returns the composed reply.

    Generation stages only depend on the idea, the research result and the
    profile, so they are launched together. The first failure cancels the
    others and aborts the request; under mock execution a generation
    failure degrades to the bare fixture instead.
    """

    def __init__(
        self,
        rephraser: QueryRephraser,
        research: MarketResearchProvider,
        generator: StructuredGenerator,
        *,
        stages: Dict[GenerationStage, StageConfig],
        mode: ExecutionMode = ExecutionMode.LIVE,
        schemas: SchemaRegistry = schema_registry,
    ) -> None:
        self.rephraser = rephraser
        self.research = research
        self.generator = generator
        self.stages = stages
        self.mode = mode
        self.schemas = schemas

    async def run(self, request: ChatRequest) -> PipelineResult:
        run = PipelineRun()
        try:
            reply = await self._run(request, run)
        except Exception:
            run.enter(PipelineState.FAILED)
            raise
        run.enter(PipelineState.DONE)
        return PipelineResult(reply=reply, run=run)

    async def _run(self, request: ChatRequest, run: PipelineRun) -> Dict[str, Any]:
        profile = request.userProfile

        run.enter(PipelineState.REPHRASING)
        query = await self.rephraser.rephrase(request.message, profile)

        run.enter(PipelineState.MARKET_RESEARCH)
        research = await self.research.research(query, request.mode, request.personalized, profile)
        research = research.model_copy(update={"personalizedstatus": request.personalized})

        selected = select_stages(self.stages, request.personalized)
        try:
            fragments = await self._generate(selected, request.message, research, profile, run)
        except ProviderError as exc:
            if self.mode is not ExecutionMode.MOCK:
                raise
            logger.warning("Generation failed in mock mode (%s); returning bare fixture", exc)
            run.degraded = True
            fragments = []

        run.enter(PipelineState.COMPOSING)
        return compose(research, fragments)

    async def _generate(
        self,
        selected: Sequence[StageConfig],
        idea: str,
        research: MarketResearch,
        profile: UserProfile | None,
        run: PipelineRun,
    ) -> List[BaseModel]:
        tasks = []
        for config in selected:
            run.enter(STAGE_STATES[config.stage])
            tasks.append(
                asyncio.create_task(
                    run_stage(config, self.generator, self.schemas, idea, research, profile),
                    name=config.stage.value,
                )
            )
        if not any(config.stage is GenerationStage.FOUNDER_FIT for config in selected):
            run.enter(PipelineState.FOUNDER_FIT_SKIPPED)

        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Joining every task also retrieves each stored exception.
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        for outcome in outcomes:
            if isinstance(outcome, Exception):
                raise outcome
        return list(outcomes)


def build_pipeline(settings: Settings, schemas: SchemaRegistry = schema_registry) -> ValidationPipeline:
    """Wire the provider clients for the configured execution mode."""

    return ValidationPipeline(
        build_rephraser(settings),
        build_research_provider(settings),
        build_generator(settings),
        stages=build_stage_registry(settings.gemini_model),
        mode=settings.execution_mode,
        schemas=schemas,
    )
