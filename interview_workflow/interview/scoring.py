"""
Decision engine: turns per-answer AI evaluations into a round scorecard and verdict.

Scoring is fully deterministic. Per-dimension scores are the mean across the round's
answers, rounded half-up to an integer; the composite maps those 0-10 scores onto
0-100 using the configured weights and is rounded the same way. The verdict is the
composite compared against the round's pass threshold and nothing else; reasoning
text from the AI is carried for audit only.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, StrictInt, create_model
from pydantic import ValidationError as PydanticValidationError

from interview_workflow.errors import ConfigurationError, ValidationError
from interview_workflow.interview.rounds import RoundScoringConfig
from interview_workflow.models.schemas import RoundType, Scorecard, Verdict

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-6
WEAK_SCORE = 4
STRONG_SCORE = 8


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class RoundResult:
    """Outcome of scoring one round."""
    round_type: RoundType
    scorecard: Scorecard
    verdict: Verdict
    reasons: List[str] = field(default_factory=list)


class DecisionEngine:
    """
    Holds one immutable scoring configuration per round type.
    Construction fails with ConfigurationError if any round's weights do not sum to 1.
    """

    def __init__(self, configs: Mapping[RoundType, RoundScoringConfig]):
        self._configs: Dict[RoundType, RoundScoringConfig] = dict(configs)
        self._schemas: Dict[RoundType, Type[BaseModel]] = {}

        for round_type, cfg in self._configs.items():
            self._validate_config(round_type, cfg)
            self._schemas[round_type] = self._build_schema(cfg)

    @staticmethod
    def _validate_config(round_type: RoundType, cfg: RoundScoringConfig) -> None:
        if cfg.round_type != round_type:
            raise ConfigurationError(f"Config for {round_type.value} declares {cfg.round_type.value}")
        if not cfg.dimensions:
            raise ConfigurationError(f"No dimensions configured for {round_type.value}")
        if set(cfg.weights) != set(cfg.dimensions):
            raise ConfigurationError(
                f"Weights for {round_type.value} do not match dimensions: "
                f"{sorted(cfg.weights)} vs {sorted(cfg.dimensions)}"
            )
        weight_sum = sum(cfg.weights.values())
        if abs(weight_sum - 1) > WEIGHT_TOLERANCE:
            raise ConfigurationError(f"Invalid weights for {round_type.value}: sum={weight_sum}")
        if not 0 <= cfg.pass_threshold <= 100:
            raise ConfigurationError(f"Pass threshold for {round_type.value} must be within 0-100")
        if cfg.questions_per_round < 1:
            raise ConfigurationError(f"Question quota for {round_type.value} must be positive")

    @staticmethod
    def _build_schema(cfg: RoundScoringConfig) -> Type[BaseModel]:
        # Required 0-10 integer per dimension; extra fields are tolerated and ignored.
        fields = {dim: (StrictInt, Field(ge=0, le=10)) for dim in cfg.dimensions}
        return create_model(
            f"{cfg.round_type.value.title()}Evaluation",
            __config__=ConfigDict(extra="allow"),
            **fields,
        )

    def get_config(self, round_type: RoundType) -> RoundScoringConfig:
        try:
            return self._configs[round_type]
        except KeyError:
            raise ConfigurationError(f"No scoring configuration for {round_type.value}") from None

    def parse_evaluation(self, round_type: RoundType, raw: Any) -> Dict[str, int]:
        """
        Validate one raw evaluation against the round's dimensions.

        Returns:
            Mapping of dimension -> score, extra fields dropped
        """
        cfg = self.get_config(round_type)
        try:
            parsed = self._schemas[round_type].model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed {round_type.value} evaluation: {e}") from e
        return {dim: getattr(parsed, dim) for dim in cfg.dimensions}

    def compute_round_result(
        self,
        round_type: RoundType,
        raw_evaluations: Sequence[Any],
        reasoning_texts: Sequence[str],
    ) -> RoundResult:
        """
        Score a completed round.

        Args:
            round_type: The round being scored
            raw_evaluations: Raw AI evaluation payloads, one per answer
            reasoning_texts: AI reasoning texts, carried into the scorecard only

        Returns:
            RoundResult with scorecard, verdict and explainable reasons
        """
        cfg = self.get_config(round_type)

        if not raw_evaluations:
            raise ValidationError("No evaluations provided")

        per_answer = [self.parse_evaluation(round_type, raw) for raw in raw_evaluations]
        n = Decimal(len(per_answer))

        dimensions: Dict[str, int] = {}
        for dim in cfg.dimensions:
            total = sum(Decimal(scores[dim]) for scores in per_answer)
            dimensions[dim] = round_half_up(total / n)

        # dimension/10 * 100 * weight, kept exact in Decimal
        weighted = sum(
            Decimal(dimensions[dim]) * 10 * Decimal(str(cfg.weights[dim]))
            for dim in cfg.dimensions
        )
        weighted_score = round_half_up(weighted)

        verdict = Verdict.PASS if weighted_score >= cfg.pass_threshold else Verdict.FAIL

        reasons = [
            f"Weighted score {weighted_score} (threshold {cfg.pass_threshold}) => {verdict.value}"
        ]
        for dim in cfg.dimensions:
            value = dimensions[dim]
            if value <= WEAK_SCORE:
                reasons.append(f"{dim} is weak ({value}/10)")
            if value >= STRONG_SCORE:
                reasons.append(f"{dim} is strong ({value}/10)")

        unique_reasoning: List[str] = []
        for text in reasoning_texts:
            if text and text not in unique_reasoning:
                unique_reasoning.append(text)

        scorecard = Scorecard(
            dimensions=dimensions,
            weighted_score=weighted_score,
            reasoning="\n\n".join(unique_reasoning),
            raw_evaluation={
                "per_answer": list(raw_evaluations),
                "aggregate": dict(dimensions),
            },
        )

        logger.info(f"Scored {round_type.value}: {weighted_score} vs {cfg.pass_threshold} -> {verdict.value}")

        return RoundResult(round_type=round_type, scorecard=scorecard, verdict=verdict, reasons=reasons)
