from __future__ import annotations

import pytest

from conftest import fixture_payload
from idea_validator.prompts import (
    founder_fit_prompt,
    mvp_prompt,
    pitch_prompt,
    rephrase_prompt,
    research_query,
    revenue_models_prompt,
)
from idea_validator.schemas import MarketResearch, SearchMode, UserProfile

IDEA = "Build a marketplace for vintage sneakers"

STAGE_BUILDERS = [pitch_prompt, revenue_models_prompt, mvp_prompt, founder_fit_prompt]


@pytest.fixture
def research() -> MarketResearch:
    return MarketResearch.model_validate(fixture_payload())


@pytest.mark.parametrize("builder", STAGE_BUILDERS)
def test_stage_prompts_skip_founder_block_without_profile(builder, research: MarketResearch) -> None:
    prompt = builder(IDEA, research, None)

    assert f"Startup Idea: {IDEA}" in prompt
    assert "Founder Context" not in prompt
    assert "Founder Profile" not in prompt
    assert "Market Demand Score: 7/10" in prompt


@pytest.mark.parametrize("builder", STAGE_BUILDERS[:3])
def test_stage_prompts_render_missing_profile_fields(builder, research: MarketResearch) -> None:
    prompt = builder(IDEA, research, UserProfile())

    assert "Founder Context:" in prompt
    assert "Not specified" in prompt


def test_pitch_prompt_uses_market_context(research: MarketResearch, profile: UserProfile) -> None:
    prompt = pitch_prompt(IDEA, research, profile)

    assert research.marketDemand.painPoints.primaryPainPoint in prompt
    assert "- Background: Industrial design" in prompt
    assert "- Previous Experience: Not specified" in prompt


def test_revenue_prompt_lists_audience_groups(research: MarketResearch, profile: UserProfile) -> None:
    prompt = revenue_models_prompt(IDEA, research, profile)

    assert "Vintage sneaker collectors, Sneaker resellers" in prompt
    assert "- Team Size: 2" in prompt
    assert "- Funding: Not specified" in prompt


def test_missing_research_values_render_placeholders() -> None:
    prompt = mvp_prompt(IDEA, MarketResearch(), None)

    assert "Primary Pain Point: N/A" in prompt
    assert "Target Audience: Not specified" in prompt


def test_founder_fit_prompt_renders_full_profile(research: MarketResearch, profile: UserProfile) -> None:
    prompt = founder_fit_prompt(IDEA, research, profile)

    assert "Founder Profile:" in prompt
    assert "- Name: Sam Rivera" in prompt
    assert "- Location: Austin, USA" in prompt
    assert "- Customer Type: Not specified" in prompt
    assert "exactly three items" in prompt


def test_rephrase_prompt_forbids_new_details(profile: UserProfile) -> None:
    plain = rephrase_prompt(IDEA)
    personal = rephrase_prompt(IDEA, profile)

    assert f'Original startup idea: "{IDEA}"' in plain
    assert "DO NOT add any new details" in plain
    assert "Founder Context" not in plain
    assert "- Stage: N/A" in personal


def test_research_query_appends_background_only_with_profile(profile: UserProfile) -> None:
    assert research_query("query") == (
        "Based on important market factors, how valid is my startup idea? Here's my startup idea: query"
    )
    personal = research_query("query", profile)
    assert "- Background/Field of Study: Industrial design" in personal
    assert "- Funding Raised: N/A" in personal


def test_profile_coerces_form_values() -> None:
    profile = UserProfile.model_validate(
        {"teamSize": 3, "technicalSkills": ["Go", "SQL"], "location": {"city": "Lagos"}, "extra": "ignored"}
    )

    assert profile.teamSize == "3"
    assert profile.technicalSkills == "Go, SQL"
    assert profile.location_text == "Lagos"


@pytest.mark.parametrize(
    ("label", "mode"),
    [
        ("Quick Search", SearchMode.STANDARD),
        ("Comprehensive", SearchMode.DEEP),
        ("quick search", SearchMode.DEEP),
        (None, SearchMode.DEEP),
    ],
)
def test_search_mode_from_label(label, mode) -> None:
    assert SearchMode.from_label(label) is mode
