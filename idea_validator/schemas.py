"""Pydantic models and enums for the idea validation API."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

QUICK_SEARCH_LABEL = "Quick Search"
SCORE_MIN = 1.0
SCORE_MAX = 10.0

Level = Literal["High", "Medium", "Low"]
DestinationType = Literal["Reddit", "Discord", "Forum", "Facebook Group", "Other"]


def clamp_score(value: float) -> float:
    """Pin a provider score into the 1-10 range."""

    return min(SCORE_MAX, max(SCORE_MIN, float(value)))


class SearchMode(str, Enum):
    """Research depth derived from the caller's model label."""

    STANDARD = "standard"
    DEEP = "deep"

    @classmethod
    def from_label(cls, label: str | None) -> "SearchMode":
        if label == QUICK_SEARCH_LABEL:
            return cls.STANDARD
        return cls.DEEP


class Location(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    def render(self) -> str:
        return ", ".join(part for part in (self.city, self.state, self.country) if part)


class UserProfile(BaseModel):
    """Founder and startup details supplied with a personalized request.

    Every field is optional; prompt builders render gaps with a placeholder
    instead of dropping the line.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    location: Optional[Location] = None
    background: Optional[str] = None
    technicalSkills: Optional[str] = None
    previousExperience: Optional[str] = None
    startupName: Optional[str] = None
    startupDescription: Optional[str] = None
    industry: Optional[str] = None
    customerType: Optional[str] = None
    stage: Optional[str] = None
    teamSize: Optional[str] = None
    techStack: Optional[str] = None
    funding: Optional[str] = None

    @field_validator(
        "firstName",
        "lastName",
        "background",
        "technicalSkills",
        "previousExperience",
        "startupName",
        "startupDescription",
        "industry",
        "customerType",
        "stage",
        "teamSize",
        "techStack",
        "funding",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        # Forms send numbers for team size and funding, lists for skills.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, list):
            return ", ".join(str(item) for item in value if item)
        return value

    @property
    def location_text(self) -> str | None:
        if self.location is None:
            return None
        return self.location.render() or None


class ChatRequest(BaseModel):
    """Payload accepted by ``POST /chat``."""

    message: str = Field(..., min_length=1, description="Freeform startup idea.")
    model: str = Field(
        default=QUICK_SEARCH_LABEL,
        description="Search label; 'Quick Search' selects standard depth, anything else deep.",
    )
    personalized: bool = Field(default=False)
    userProfile: Optional[UserProfile] = Field(default=None)

    @property
    def mode(self) -> SearchMode:
        return SearchMode.from_label(self.model)


class ChatResponse(BaseModel):
    reply: Dict[str, Any]


# ---------------------------------------------------------------------------
# Market research result
# ---------------------------------------------------------------------------


class _ResearchModel(BaseModel):
    # Unknown provider keys are carried through to the response untouched.
    model_config = ConfigDict(extra="allow")


class PainPoints(_ResearchModel):
    primaryPainPoint: str = ""
    urgency: str = ""
    evidence: str = ""


class TimingTrends(_ResearchModel):
    marketReadiness: str = ""
    emergingTrends: str = ""
    timingAssessment: str = ""


class MarketDemand(_ResearchModel):
    painPoints: PainPoints = Field(default_factory=PainPoints)
    timingTrends: TimingTrends = Field(default_factory=TimingTrends)


class Competitor(_ResearchModel):
    name: str
    description: str = ""
    popularity: Level = "Medium"
    locations: str = ""
    pricing: str = ""
    pros: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    competitiveness: Optional[float] = None

    @field_validator("competitiveness")
    @classmethod
    def _clamp(cls, value: Optional[float]) -> Optional[float]:
        return None if value is None else clamp_score(value)


class OnlineDestination(_ResearchModel):
    name: str
    type: DestinationType = "Other"
    url: str = ""
    description: str = ""


class AudienceGroup(_ResearchModel):
    group: str
    onlineDestinations: List[OnlineDestination] = Field(default_factory=list)


class MarketResearch(_ResearchModel):
    """Base result returned by the research provider (or the fixture)."""

    title: str = ""
    overview: str = ""
    score: float = SCORE_MIN
    feasibilityscore: float = SCORE_MIN
    summary: str = ""
    details: str = ""
    marketDemand: MarketDemand = Field(default_factory=MarketDemand)
    competitors: List[Competitor] = Field(default_factory=list)
    targetAudience: List[AudienceGroup] = Field(default_factory=list)
    personalizedstatus: bool = False

    @field_validator("score", "feasibilityscore")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Generation fragments
# ---------------------------------------------------------------------------


class PitchFragment(BaseModel):
    pitch: str = Field(..., min_length=1)


class RevenueFragment(BaseModel):
    revenueModels: List[str] = Field(..., min_length=1)


class MVPFeature(BaseModel):
    feature: str
    differentiationFactor: str = ""
    uniqueImplementation: str = ""
    priority: Level = "Medium"
    effort: Level = "Medium"
    competitiveAdvantage: str = ""


class MVPFragment(BaseModel):
    mvpDesign: str = Field(..., min_length=1)
    mvpFeatures: List[MVPFeature] = Field(..., min_length=1)


class FounderFitItem(BaseModel):
    skill: str
    description: str = ""


class FounderFitFragment(BaseModel):
    founderfit: str = Field(..., min_length=1)
    founderfitscore: float
    positivefounderfit: List[FounderFitItem] = Field(..., min_length=3, max_length=3)
    negativefounderfit: List[FounderFitItem] = Field(..., min_length=3, max_length=3)

    @field_validator("founderfitscore")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)

    @field_validator("positivefounderfit", "negativefounderfit", mode="before")
    @classmethod
    def _first_three(cls, value: Any) -> Any:
        # Models occasionally over-deliver; surplus items are dropped.
        if isinstance(value, list) and len(value) > 3:
            return value[:3]
        return value
