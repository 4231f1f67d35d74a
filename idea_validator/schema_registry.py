"""Structured-output contracts for the research and generation providers.

Every schema is plain JSON Schema so the same dict can be sent to Linkup
(``structuredOutputSchema``) and to Gemini (``response_json_schema``) and
checked locally with :mod:`jsonschema`.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from .errors import SchemaRegistryError

REGISTRY_VERSION = "2025.06"

JsonSchema = Dict[str, Any]


class SchemaName(str, Enum):
    MARKET_RESEARCH = "market_research"
    MARKET_RESEARCH_PERSONALIZED = "market_research_personalized"
    PITCH = "pitch"
    REVENUE_MODELS = "revenue_models"
    MVP = "mvp"
    FOUNDER_FIT = "founder_fit"


def _string(description: str) -> JsonSchema:
    return {"type": "string", "description": description}


def _number(description: str) -> JsonSchema:
    return {"type": "number", "description": description}


def _level(description: str) -> JsonSchema:
    return {"type": "string", "enum": ["High", "Medium", "Low"], "description": description}


def _market_research_schema(personalized: bool) -> JsonSchema:
    if personalized:
        title = "A short, catchy, descriptive title for the startup idea."
        pain_point = "The most critical pain point the startup is solving."
        competitors = (
            "A list of five to twenty reasonable competitors that are similar to the user's "
            "startup idea. They can be specific and niche. Rank them by popularity, market "
            "share, and other relevant metrics."
        )
        audience = (
            "A list of five target audience groups that the startup is targeting. For each "
            "group, provide a list of online communities/destinations that are relevant to "
            "the target audience."
        )
    else:
        title = "A short, descriptive title for the startup idea."
        pain_point = "The most critical pain point the startup is solving. Based on research"
        competitors = (
            "A list of ten competitors that are similar to the user's startup idea in any "
            "aspect. Rank them by popularity, market share, and other relevant metrics."
        )
        audience = (
            "A list of five target audience groups that the startup is targeting. For each "
            "group, provide a list of online communities/destinations that are specifically "
            "relevant to the target audience."
        )

    competitor_item = {
        "type": "object",
        "properties": {
            "name": _string("Name of the competitor."),
            "description": _string("Description of the competitor's business."),
            "popularity": _level("Popularity of the competitor."),
            "locations": _string("Geographic locations where the competitor operates."),
            "pricing": _string("The competitor's pricing model."),
            "pros": {"type": "array", "items": {"type": "string"}, "description": "Strengths of the competitor."},
            "weaknesses": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Weaknesses of the competitor.",
            },
            "competitiveness": _number(
                "How competitive the competitor is in their market. With 10 being most competitive."
            ),
        },
        "required": ["name", "description", "popularity", "locations", "pricing", "pros", "weaknesses"],
    }
    destination_item = {
        "type": "object",
        "properties": {
            "name": _string("Name of the online community/destination."),
            "type": {
                "type": "string",
                "enum": ["Reddit", "Discord", "Forum", "Facebook Group", "Other"],
                "description": "Type of the online community.",
            },
            "url": _string("URL to the online community."),
            "description": _string("Description of why this is a good place to find the target audience."),
        },
        "required": ["name", "type", "url", "description"],
    }

    return {
        "type": "object",
        "properties": {
            "title": _string(title),
            "overview": _string(
                "A concise, one-paragraph summary of the entire analysis, covering the idea's "
                "potential, market, and key challenges."
            ),
            "score": _number(
                "An extremely strict and realistic score from 1-10 for the idea's market demand and feasibility."
            ),
            "feasibilityscore": _number(
                "An extremely strict and realistic score from 1-10 for the idea's market "
                "competitiveness. With 10 being most competitive."
            ),
            "summary": _string("A multi-source supported summary of the market demand."),
            "details": _string("An extremely detailed analysis of the market demand."),
            "marketDemand": {
                "type": "object",
                "properties": {
                    "painPoints": {
                        "type": "object",
                        "properties": {
                            "primaryPainPoint": _string(pain_point),
                            "urgency": _string("How urgent is this problem for the target audience."),
                            "evidence": _string("Evidence supporting the existence and urgency of the pain point."),
                        },
                        "required": ["primaryPainPoint", "urgency", "evidence"],
                    },
                    "timingTrends": {
                        "type": "object",
                        "properties": {
                            "marketReadiness": _string("Is the market ready for this solution?"),
                            "emergingTrends": _string("What emerging trends support this idea?"),
                            "timingAssessment": _string("Overall assessment of the market timing."),
                        },
                        "required": ["marketReadiness", "emergingTrends", "timingAssessment"],
                    },
                },
                "required": ["painPoints", "timingTrends"],
            },
            "competitors": {"type": "array", "description": competitors, "items": competitor_item},
            "targetAudience": {
                "type": "array",
                "description": audience,
                "items": {
                    "type": "object",
                    "properties": {
                        "group": _string("A specific target audience group."),
                        "onlineDestinations": {"type": "array", "items": destination_item},
                    },
                    "required": ["group", "onlineDestinations"],
                },
            },
            "personalizedstatus": {
                "type": "boolean",
                "default": personalized,
                "description": "Whether or not founder fit/user profile was given.",
            },
        },
        "required": [
            "title",
            "overview",
            "score",
            "summary",
            "details",
            "marketDemand",
            "competitors",
            "targetAudience",
            "personalizedstatus",
        ],
    }


PITCH_SCHEMA: JsonSchema = {
    "type": "object",
    "properties": {
        "pitch": _string(
            "A compelling five-sentence pitch that follows these guidelines: 1. Hook: Start with a "
            "compelling statement that grabs attention 2. Value: Clearly state the core value "
            "proposition 3. Evidence: Support with market data and validation 4. Differentiator: "
            "Explain how it stands out from competitors 5. Call to Action: End with a clear next "
            "step or invitation"
        ),
    },
    "required": ["pitch"],
}

REVENUE_MODELS_SCHEMA: JsonSchema = {
    "type": "object",
    "properties": {
        "revenueModels": {
            "type": "array",
            "items": _string("A concise description of how the startup could generate revenue"),
            "minItems": 3,
            "maxItems": 5,
            "description": "3-5 potential revenue models that would be viable for this business",
        },
    },
    "required": ["revenueModels"],
}

MVP_SCHEMA: JsonSchema = {
    "type": "object",
    "properties": {
        "mvpDesign": _string(
            "A comprehensive, detailed description of the MVP's overall design and approach. This "
            "should be a substantial paragraph (150-250 words) that thoroughly explains the strategic "
            "vision, technical approach, user experience design, and competitive positioning of the "
            "MVP. Include specific details about how the MVP will be built, what makes it unique, and "
            "how it addresses the identified market needs."
        ),
        "mvpFeatures": {
            "type": "array",
            "minItems": 5,
            "maxItems": 8,
            "description": "5-8 highly differentiated features that together create a unique product experience",
            "items": {
                "type": "object",
                "properties": {
                    "feature": _string("A specific, descriptive name for the MVP feature"),
                    "differentiationFactor": _string("How this feature differs from competitor offerings"),
                    "uniqueImplementation": _string("Specific technical or business approach that sets it apart"),
                    "priority": _level("Priority of the feature based on differentiation impact"),
                    "effort": _level("Estimated effort to implement the feature based on technical complexity"),
                    "competitiveAdvantage": _string("Why this feature creates a competitive moat"),
                },
                "required": [
                    "feature",
                    "differentiationFactor",
                    "uniqueImplementation",
                    "priority",
                    "effort",
                    "competitiveAdvantage",
                ],
            },
        },
    },
    "required": ["mvpDesign", "mvpFeatures"],
}


def _fit_items(description: str, skill: str, detail: str) -> JsonSchema:
    return {
        "type": "array",
        "description": description,
        "minItems": 3,
        "maxItems": 3,
        "items": {
            "type": "object",
            "properties": {"skill": _string(skill), "description": _string(detail)},
            "required": ["skill", "description"],
        },
    }


FOUNDER_FIT_SCHEMA: JsonSchema = {
    "type": "object",
    "properties": {
        "founderfit": _string(
            "Direct, second-person feedback about the user's fit for the idea. Concise, specific, and constructive."
        ),
        "founderfitscore": {
            "type": "number",
            "minimum": 1,
            "maximum": 10,
            "description": "Strict evidence-based score from 1 to 10 for the user's fit to the proposed business or product.",
        },
        "positivefounderfit": _fit_items(
            "Three skills/experiences/attributes the founder possesses that are advantageous.",
            "Advantageous founder skill/experience/attribute.",
            "Short explanation why this helps in this market/business.",
        ),
        "negativefounderfit": _fit_items(
            "Three missing skills/experiences/attributes the founder lacks that are necessary.",
            "Missing founder skill/experience/attribute.",
            "Short explanation of relevance and impact of the gap.",
        ),
    },
    "required": ["founderfit", "founderfitscore", "positivefounderfit", "negativefounderfit"],
}


class SchemaRegistry:
    """Versioned, read-only lookup of the structured-output schemas."""

    def __init__(self, schemas: Mapping[SchemaName, JsonSchema], version: str = REGISTRY_VERSION) -> None:
        self.version = version
        self._schemas = dict(schemas)

    def get(self, name: SchemaName) -> JsonSchema:
        """Return a copy so callers can never mutate the registered contract."""

        try:
            return copy.deepcopy(self._schemas[name])
        except KeyError as exc:
            raise SchemaRegistryError(f"Schema '{name.value}' is not registered.") from exc

    def research_schema(self, personalized: bool) -> JsonSchema:
        if personalized:
            return self.get(SchemaName.MARKET_RESEARCH_PERSONALIZED)
        return self.get(SchemaName.MARKET_RESEARCH)

    def names(self) -> list[str]:
        return [name.value for name in self._schemas]

    def validate(self) -> None:
        """Check every schema against the JSON Schema meta-schema."""

        missing = [name.value for name in SchemaName if name not in self._schemas]
        if missing:
            raise SchemaRegistryError(f"Missing schemas: {', '.join(missing)}")
        for name, schema in self._schemas.items():
            if schema.get("type") != "object":
                raise SchemaRegistryError(f"Schema '{name.value}' must describe an object.")
            try:
                Draft202012Validator.check_schema(schema)
            except SchemaError as exc:
                raise SchemaRegistryError(f"Schema '{name.value}' is malformed: {exc.message}") from exc


DEFAULT_SCHEMAS: Dict[SchemaName, JsonSchema] = {
    SchemaName.MARKET_RESEARCH: _market_research_schema(personalized=False),
    SchemaName.MARKET_RESEARCH_PERSONALIZED: _market_research_schema(personalized=True),
    SchemaName.PITCH: PITCH_SCHEMA,
    SchemaName.REVENUE_MODELS: REVENUE_MODELS_SCHEMA,
    SchemaName.MVP: MVP_SCHEMA,
    SchemaName.FOUNDER_FIT: FOUNDER_FIT_SCHEMA,
}

schema_registry = SchemaRegistry(DEFAULT_SCHEMAS)
