"""
Configuration settings for the interview workflow.
All settings can be overridden via environment variables.
"""
import os
from typing import Dict, Optional
from dataclasses import dataclass, field

from interview_workflow.interview.rounds import RoundScoringConfig, DEFAULT_ROUND_CONFIGS
from interview_workflow.models.schemas import RoundType


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LLMConfig:
    """LLM server configuration."""
    base_url: Optional[str] = field(default_factory=lambda: os.getenv("LLM_URL") or None)
    completion_endpoint: str = "/completion"
    timeout: int = field(default_factory=lambda: int(os.getenv("LLM_TIMEOUT", "60")))
    max_retries: int = 3

    # Default generation parameters
    default_temperature: float = 0.7
    default_top_p: float = 0.9
    default_repeat_penalty: float = 1.2

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    @property
    def completion_url(self) -> str:
        return f"{self.base_url}{self.completion_endpoint}"


@dataclass
class StorageConfig:
    """Durable session/candidate storage."""
    database_url: Optional[str] = field(default_factory=lambda: os.getenv("DATABASE_URL") or None)
    echo: bool = field(default_factory=lambda: _env_bool("SQL_ECHO"))


@dataclass
class LiveStateConfig:
    """Best-effort live-state cache."""
    redis_url: Optional[str] = field(default_factory=lambda: os.getenv("REDIS_URL") or None)
    ttl_seconds: int = field(default_factory=lambda: int(os.getenv("LIVE_STATE_TTL_SECONDS", str(2 * 60 * 60))))
    key_prefix: str = "interview"


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    default_role: str = "backend"
    default_level: str = "mid"

    # Per-round scoring (dimensions, weights, threshold, quota)
    rounds: Dict[RoundType, RoundScoringConfig] = field(default_factory=lambda: dict(DEFAULT_ROUND_CONFIGS))


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.llm = LLMConfig()
        self.storage = StorageConfig()
        self.live_state = LiveStateConfig()
        self.interview = InterviewConfig()
        self.logging = LoggingConfig()


# Global config instance
config = Config()
