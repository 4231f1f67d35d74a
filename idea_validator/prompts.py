"""Prompt builders for the rephrase, research and generation calls.

All builders are pure: the same idea, research result and profile always
produce the same text.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from .schemas import MarketResearch, UserProfile

NOT_SPECIFIED = "Not specified"
NOT_AVAILABLE = "N/A"

ProfileField = Tuple[str, Callable[[UserProfile], Optional[str]]]


def _name(profile: UserProfile) -> str:
    return f"{profile.firstName or NOT_AVAILABLE} {profile.lastName or ''}".rstrip()


NAME: ProfileField = ("Name", _name)
LOCATION: ProfileField = ("Location", lambda p: p.location_text)
BACKGROUND: ProfileField = ("Background", lambda p: p.background)
TECHNICAL_SKILLS: ProfileField = ("Technical Skills", lambda p: p.technicalSkills)
PREVIOUS_EXPERIENCE: ProfileField = ("Previous Experience", lambda p: p.previousExperience)
STARTUP_NAME: ProfileField = ("Startup Name", lambda p: p.startupName)
INDUSTRY: ProfileField = ("Industry", lambda p: p.industry)
CUSTOMER_TYPE: ProfileField = ("Customer Type", lambda p: p.customerType)
STAGE: ProfileField = ("Stage", lambda p: p.stage)
TEAM_SIZE: ProfileField = ("Team Size", lambda p: p.teamSize)
TECH_STACK: ProfileField = ("Tech Stack", lambda p: p.techStack)
FUNDING: ProfileField = ("Funding", lambda p: p.funding)


def profile_block(
    profile: UserProfile | None,
    fields: Iterable[ProfileField],
    *,
    heading: str = "Founder Context",
    placeholder: str = NOT_SPECIFIED,
) -> str:
    """Render the founder block, or an empty string when there is no profile.

    Missing values keep their line with ``placeholder`` so the prompt
    layout does not depend on how complete the profile is.
    """

    if profile is None:
        return ""
    lines = [f"- {label}: {getter(profile) or placeholder}" for label, getter in fields]
    return f"\n\n{heading}:\n" + "\n".join(lines)


def _score(value: float | None) -> str:
    if not value:
        return NOT_AVAILABLE
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _audience(research: MarketResearch) -> str:
    groups = [group.group for group in research.targetAudience if group.group]
    return ", ".join(groups) or NOT_SPECIFIED


def _or_na(value: str | None) -> str:
    return value or NOT_AVAILABLE


# ---------------------------------------------------------------------------
# Rephrase and research
# ---------------------------------------------------------------------------

REPHRASE_SYSTEM_PROMPT = (
    "You are an expert market research query formulator. You help rephrase startup ideas "
    "into detailed, searchable questions without adding new information."
)

REPHRASE_FIELDS: List[ProfileField] = [
    NAME,
    LOCATION,
    BACKGROUND,
    TECHNICAL_SKILLS,
    PREVIOUS_EXPERIENCE,
    STARTUP_NAME,
    INDUSTRY,
    ("Target Customer", CUSTOMER_TYPE[1]),
    STAGE,
    TEAM_SIZE,
    TECH_STACK,
    FUNDING,
]


def rephrase_prompt(idea: str, profile: UserProfile | None = None) -> str:
    context = profile_block(
        profile,
        REPHRASE_FIELDS,
        heading="Founder Context (use this to make the search more relevant)",
        placeholder=NOT_AVAILABLE,
    )
    return "\n".join(
        [
            "You are an expert at rephrasing startup ideas into detailed, search-engine-optimized "
            "queries for market research.",
            "",
            "Your task is to take a user's startup idea and rephrase it into a strictly concise, "
            "comprehensive, detailed question that would be perfect for searching the web to find:",
            "- Market demand and validation",
            "- Competitor analysis",
            "- Industry trends and timing",
            "- Target audience insights",
            "- Pain points and opportunities",
            "",
            "IMPORTANT RULES:",
            "1. DO NOT add any new details or assumptions about the startup idea",
            "2. DO NOT invent features, markets, or business models not mentioned by the user",
            "3. ONLY expand on what the user has explicitly stated if a certain aspect is unclear",
            "4. Make the query more specific and detailed for better search results",
            "5. Format as a comprehensive research question",
            "6. Include relevant industry terms and market research keywords",
            "7. Consider the founder's background and context if provided",
            "",
            f'Original startup idea: "{idea}"{context}',
            "",
            "Rephrase this into a strictly concise, detailed, search-engine-optimized query for "
            "market/competitor research:",
        ]
    )


RESEARCH_FIELDS: List[ProfileField] = [
    NAME,
    LOCATION,
    ("Background/Field of Study", BACKGROUND[1]),
    TECHNICAL_SKILLS,
    ("Previous Startup Experience", PREVIOUS_EXPERIENCE[1]),
    STARTUP_NAME,
    ("Description", lambda p: p.startupDescription),
    ("Target Industry", INDUSTRY[1]),
    ("Target Customer", CUSTOMER_TYPE[1]),
    ("Current Stage", STAGE[1]),
    TEAM_SIZE,
    ("Tech Stack/AI Models", TECH_STACK[1]),
    ("Funding Raised", FUNDING[1]),
]


def research_query(query: str, profile: UserProfile | None = None) -> str:
    """Build the research question; ``profile`` is passed only when personalized."""

    context = ""
    if profile is not None:
        lines = [f"- {label}: {getter(profile) or NOT_AVAILABLE}" for label, getter in RESEARCH_FIELDS]
        context = (
            "\n\nHere is my personal and startup background. Use this information to find results "
            "for maximum relevance and specificity.\n\n"
            + "\n".join(lines)
            + "\n\nPlease place heavy emphasis and consider this rich context when finding results "
            "for analyzing my startup idea. Consider local market conditions, my demonstrated "
            "skills, competitive landscape within my idea's industry, and the feasibility of my "
            "idea given my current stage and team size. Avoid having redundant information across "
            "multiple description fields."
        )
    return f"Based on important market factors, how valid is my startup idea? Here's my startup idea: {query}{context}"


# ---------------------------------------------------------------------------
# Generation stages
# ---------------------------------------------------------------------------


def pitch_prompt(idea: str, research: MarketResearch, profile: UserProfile | None = None) -> str:
    demand = research.marketDemand
    context = profile_block(profile, [BACKGROUND, TECHNICAL_SKILLS, PREVIOUS_EXPERIENCE, INDUSTRY, STAGE])
    return "\n".join(
        [
            "Based on the following startup idea and market analysis, create a compelling "
            "five-sentence pitch that follows these guidelines:",
            "",
            "1. Hook: Start with a compelling statement that grabs attention",
            "2. Value: Clearly state the core value proposition",
            "3. Evidence: Support with market data and validation",
            "4. Differentiator: Explain how it stands out from competitors",
            "5. Call to Action: End with a clear next step or invitation",
            "",
            f"Startup Idea: {idea}",
            "",
            "Market Analysis Context:",
            f"- Market Demand Score: {_score(research.score)}/10",
            f"- Market Summary: {_or_na(research.summary)}",
            f"- Primary Pain Point: {_or_na(demand.painPoints.primaryPainPoint)}",
            f"- Market Readiness: {_or_na(demand.timingTrends.marketReadiness)}{context}",
            "",
            "Create a professional, investor-ready pitch that incorporates the market insights and founder context.",
        ]
    )


def revenue_models_prompt(idea: str, research: MarketResearch, profile: UserProfile | None = None) -> str:
    context = profile_block(profile, [INDUSTRY, STAGE, TEAM_SIZE, FUNDING])
    return "\n".join(
        [
            "Based on the following startup idea and market analysis, suggest 3-5 potential revenue "
            "models that would be viable for this business.",
            "",
            f"Startup Idea: {idea}",
            "",
            "Market Analysis:",
            f"- Target Audience: {_audience(research)}",
            f"- Market Demand Score: {_score(research.score)}/10",
            f"- Industry Context: {_or_na(research.marketDemand.timingTrends.emergingTrends)}{context}",
            "",
            "Provide specific, actionable revenue model suggestions that align with the market "
            "opportunity and business model. Each suggestion should be a concise description of how "
            "the startup could generate revenue.",
        ]
    )


def mvp_prompt(idea: str, research: MarketResearch, profile: UserProfile | None = None) -> str:
    context = profile_block(profile, [TECHNICAL_SKILLS, TECH_STACK, TEAM_SIZE, STAGE])
    return "\n".join(
        [
            "Based on the following startup idea and market analysis, design a highly differentiated "
            "MVP (Minimum Viable Product) that stands out from competitors.",
            "",
            f"Startup Idea: {idea}",
            "",
            "Market Analysis:",
            f"- Primary Pain Point: {_or_na(research.marketDemand.painPoints.primaryPainPoint)}",
            f"- Target Audience: {_audience(research)}",
            f"- Market Demand Score: {_score(research.score)}/10{context}",
            "",
            "Your task is to design an MVP that is NOT just another copy of existing solutions. Focus on:",
            "",
            "1. **Unique Value Proposition**: What makes this MVP fundamentally different from what's already in the market?",
            "2. **Competitive Moats**: What features or approaches create defensible advantages?",
            "3. **Innovation Angles**: How can you solve the problem in a way competitors haven't considered?",
            "",
            "**IMPORTANT**: For the MVP Design section, provide a comprehensive, detailed description "
            "(150-250 words) that thoroughly explains:",
            "- The strategic vision and approach",
            "- Technical architecture and implementation strategy",
            "- User experience design principles",
            "- Competitive positioning and differentiation",
            "- How the MVP addresses identified market needs",
            "- Development timeline and milestones",
            "",
            "For each feature, specify:",
            "- **Feature Name**: Be specific and descriptive",
            "- **Differentiation Factor**: How this feature differs from competitor offerings",
            "- **Unique Implementation**: Specific technical or business approach that sets it apart",
            "- **Priority**: High/Medium/Low based on differentiation impact",
            "- **Implementation Effort**: High/Medium/Low based on technical complexity",
            "- **Competitive Advantage**: Why this feature creates a moat",
            "",
            "Provide 5-8 highly differentiated features that together create a unique product "
            "experience. Avoid generic features that could apply to any startup in the space. Each "
            "feature should have a clear competitive differentiation story.",
        ]
    )


FOUNDER_FIT_FIELDS: List[ProfileField] = [
    NAME,
    LOCATION,
    BACKGROUND,
    TECHNICAL_SKILLS,
    PREVIOUS_EXPERIENCE,
    INDUSTRY,
    CUSTOMER_TYPE,
    STAGE,
    TEAM_SIZE,
    TECH_STACK,
    FUNDING,
]


def founder_fit_prompt(idea: str, research: MarketResearch, profile: UserProfile | None = None) -> str:
    demand = research.marketDemand
    context = profile_block(profile, FOUNDER_FIT_FIELDS, heading="Founder Profile")
    return "\n".join(
        [
            "Evaluate the founder fit for the following startup idea using the market analysis "
            "insight and the founder's profile. Return structured JSON only with the fields specified.",
            "",
            f"Startup Idea: {idea}",
            "",
            "Market Analysis Context (use strictly for evidence and relevance):",
            f"- Primary Pain Point: {_or_na(demand.painPoints.primaryPainPoint)}",
            f"- Timing & Trends: {_or_na(demand.timingTrends.emergingTrends)}",
            f"- Target Audience: {_audience(research)}",
            f"- Market Demand Score: {_score(research.score)}/10{context}",
            "",
            "Instructions:",
            "- Write 'founderfit' as direct, second-person feedback. Be specific and actionable.",
            "- Set 'founderfitscore' from 1-10 based only on demonstrated evidence in the profile; do not be optimistic.",
            "- Provide exactly three items for both 'positivefounderfit' and 'negativefounderfit'.",
            "- Do not invent details beyond the provided profile; if unknown, focus feedback on what's missing.",
            "- Keep each description concise (1-2 sentences).",
        ]
    )
