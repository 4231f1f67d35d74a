"""Generation stages that enrich the market research with fragments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .errors import ProviderError
from .generation import SamplingConfig, StructuredGenerator
from .prompts import founder_fit_prompt, mvp_prompt, pitch_prompt, revenue_models_prompt
from .schema_registry import SchemaName, SchemaRegistry
from .schemas import (
    FounderFitFragment,
    MarketResearch,
    MVPFragment,
    PitchFragment,
    RevenueFragment,
    UserProfile,
)

logger = logging.getLogger(__name__)

PromptFn = Callable[[str, MarketResearch, Optional[UserProfile]], str]


class GenerationStage(str, Enum):
    """Enumerate the generation stages in their composition order."""

    PITCH = "pitch"
    REVENUE_MODELS = "revenue_models"
    MVP = "mvp"
    FOUNDER_FIT = "founder_fit"

    @property
    def order(self) -> int:
        stage_order = {
            GenerationStage.PITCH: 1,
            GenerationStage.REVENUE_MODELS: 2,
            GenerationStage.MVP: 3,
            GenerationStage.FOUNDER_FIT: 4,
        }
        return stage_order[self]


@dataclass(frozen=True)
class StageConfig:
    """Immutable runtime definition of one generation stage."""

    stage: GenerationStage
    label: str
    schema: SchemaName
    prompt_builder: PromptFn
    fragment_model: Type[BaseModel]
    sampling: SamplingConfig
    personalized_only: bool = False


def build_stage_registry(model: str) -> Dict[GenerationStage, StageConfig]:
    """Enumerate the stage configurations for the given Gemini model."""

    return {
        GenerationStage.PITCH: StageConfig(
            stage=GenerationStage.PITCH,
            label="Pitch",
            schema=SchemaName.PITCH,
            prompt_builder=pitch_prompt,
            fragment_model=PitchFragment,
            sampling=SamplingConfig(model=model, temperature=0.7),
        ),
        GenerationStage.REVENUE_MODELS: StageConfig(
            stage=GenerationStage.REVENUE_MODELS,
            label="Revenue models",
            schema=SchemaName.REVENUE_MODELS,
            prompt_builder=revenue_models_prompt,
            fragment_model=RevenueFragment,
            sampling=SamplingConfig(model=model, temperature=0.7),
        ),
        GenerationStage.MVP: StageConfig(
            stage=GenerationStage.MVP,
            label="MVP",
            schema=SchemaName.MVP,
            prompt_builder=mvp_prompt,
            fragment_model=MVPFragment,
            sampling=SamplingConfig(model=model, temperature=0.7),
        ),
        GenerationStage.FOUNDER_FIT: StageConfig(
            stage=GenerationStage.FOUNDER_FIT,
            label="Founder fit",
            schema=SchemaName.FOUNDER_FIT,
            prompt_builder=founder_fit_prompt,
            fragment_model=FounderFitFragment,
            sampling=SamplingConfig(model=model, temperature=0.5),
            personalized_only=True,
        ),
    }


def select_stages(registry: Dict[GenerationStage, StageConfig], personalized: bool) -> List[StageConfig]:
    """Stages to run for a request, in composition order."""

    return [
        config
        for config in sorted(registry.values(), key=lambda item: item.stage.order)
        if personalized or not config.personalized_only
    ]


async def run_stage(
    config: StageConfig,
    generator: StructuredGenerator,
    schemas: SchemaRegistry,
    idea: str,
    research: MarketResearch,
    profile: UserProfile | None,
) -> BaseModel:
    """Generate and validate one fragment; any failure raises ProviderError."""

    prompt = config.prompt_builder(idea, research, profile)
    logger.debug("Generating %s", config.label)
    data = await generator.generate(prompt, schemas.get(config.schema), config.sampling)
    try:
        fragment = config.fragment_model.model_validate(data)
    except ValidationError as exc:
        raise ProviderError(
            f"{config.label} response does not match schema: {exc.error_count()} error(s)",
            provider=generator.name,
            code="SCHEMA_MISMATCH",
        ) from exc
    logger.info("%s generated", config.label)
    return fragment
