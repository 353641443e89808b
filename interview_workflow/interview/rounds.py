"""
Round scoring configuration.
Each round names its dimensions, their weights, a pass threshold and an answer quota.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from interview_workflow.models.schemas import RoundType


@dataclass(frozen=True)
class RoundScoringConfig:
    """Scoring rules for a single interview round."""
    round_type: RoundType
    dimensions: Tuple[str, ...]
    weights: Mapping[str, float]  # must sum to 1
    pass_threshold: int  # 0-100
    questions_per_round: int
    description: str = ""

    def __post_init__(self):
        # private read-only copy of the caller's weights
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    def get_config(self) -> Dict[str, Any]:
        """Get round configuration as dictionary."""
        return {
            "round_type": self.round_type.value,
            "dimensions": list(self.dimensions),
            "weights": dict(self.weights),
            "pass_threshold": self.pass_threshold,
            "questions_per_round": self.questions_per_round,
            "description": self.description,
        }


DEFAULT_ROUND_CONFIGS: Dict[RoundType, RoundScoringConfig] = {
    RoundType.SCREENING: RoundScoringConfig(
        round_type=RoundType.SCREENING,
        dimensions=("communication", "relevance", "presentation"),
        weights={"communication": 0.4, "relevance": 0.35, "presentation": 0.25},
        pass_threshold=60,
        questions_per_round=3,
        description="Background, motivation and communication",
    ),
    RoundType.TECHNICAL: RoundScoringConfig(
        round_type=RoundType.TECHNICAL,
        dimensions=("accuracy", "completeness", "clarity"),
        weights={"accuracy": 0.5, "completeness": 0.3, "clarity": 0.2},
        pass_threshold=60,
        questions_per_round=3,
        description="Technical knowledge assessment",
    ),
    RoundType.SCENARIO: RoundScoringConfig(
        round_type=RoundType.SCENARIO,
        dimensions=("reasoning", "tradeoffs", "communication"),
        weights={"reasoning": 0.4, "tradeoffs": 0.3, "communication": 0.3},
        pass_threshold=60,
        questions_per_round=3,
        description="Hypothetical scenario handling",
    ),
}
