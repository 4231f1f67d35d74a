"""Configuration helpers for the idea validator backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Mapping

from dotenv import load_dotenv

load_dotenv(override=False)

DEFAULT_FIXTURE_PATH = Path(__file__).parent / "fixtures" / "mock_market_research.json"
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
TRUTHY_VALUES = {"1", "true", "yes", "on"}


class ExecutionMode(str, Enum):
    """Whether market research hits the live provider or the static fixture."""

    LIVE = "live"
    MOCK = "mock"


@dataclass(frozen=True)
class Settings:
    """Settings container for provider credentials and runtime switches.

    Three external providers are used: Groq for rephrasing (through the
    OpenAI-compatible API), Linkup for market research and Gemini for the
    structured generation stages.
    """

    groq_api_key: str | None = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    rephrase_model: str = "llama-3.1-8b-instant"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    linkup_api_key: str | None = None
    linkup_base_url: str = "https://api.linkup.so/v1"
    use_mock: bool = False
    mock_fixture_path: Path = DEFAULT_FIXTURE_PATH
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"

    @property
    def execution_mode(self) -> ExecutionMode:
        """Resolve the execution mode once from the mock switch."""

        return ExecutionMode.MOCK if self.use_mock else ExecutionMode.LIVE

    @property
    def missing_keys(self) -> List[str]:
        """Names of provider keys the current mode needs but lacks."""

        missing = []
        if not self.groq_api_key:
            missing.append("GROQ_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if self.execution_mode is ExecutionMode.LIVE and not self.linkup_api_key:
            missing.append("LINKUP_API_KEY")
        return missing


def _bool_env(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY_VALUES


def _origins_env(environ: Mapping[str, str]) -> List[str]:
    raw = environ.get("IDEA_VALIDATOR_ALLOWED_ORIGINS")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return list(DEFAULT_ALLOWED_ORIGINS)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    environ = os.environ
    defaults = Settings()
    fixture = environ.get("MOCK_FIXTURE_PATH")
    return Settings(
        groq_api_key=environ.get("GROQ_API_KEY"),
        groq_base_url=environ.get("GROQ_BASE_URL", defaults.groq_base_url),
        rephrase_model=environ.get("REPHRASE_MODEL", defaults.rephrase_model),
        gemini_api_key=environ.get("GEMINI_API_KEY"),
        gemini_model=environ.get("GEMINI_MODEL", defaults.gemini_model),
        linkup_api_key=environ.get("LINKUP_API_KEY"),
        linkup_base_url=environ.get("LINKUP_BASE_URL", defaults.linkup_base_url),
        use_mock=_bool_env(environ, "USE_LINKUP_MOCK"),
        mock_fixture_path=Path(fixture) if fixture else DEFAULT_FIXTURE_PATH,
        allowed_origins=_origins_env(environ),
        log_level=environ.get("LOG_LEVEL", defaults.log_level).upper(),
    )
