"""
Deterministic offline AI capability.

Used when no LLM server is configured and in tests. Questions come from the
per-round question bank; answers are scored from length, structure words and
round-specific keywords. The same inputs always produce the same outputs.
"""
import re
import logging
from typing import Dict, List, Mapping

from interview_workflow.interview.rounds import RoundScoringConfig
from interview_workflow.llm.base import AIProvider
from interview_workflow.llm.prompts import FALLBACK_QUESTIONS
from interview_workflow.models.schemas import (
    EvaluationResult,
    GeneratedQuestion,
    MemoryHints,
    ProfileRequest,
    QuestionContext,
    ResumeAnalysis,
    RoundType,
    StructuredMemory,
)

logger = logging.getLogger(__name__)

# Common technology keywords
TECH_KEYWORDS = (
    'python', 'javascript', 'typescript', 'java', 'go', 'rust', 'c++',
    'react', 'django', 'flask', 'fastapi', 'node.js',
    'sql', 'postgresql', 'mysql', 'mongodb', 'redis', 'kafka', 'elasticsearch',
    'aws', 'azure', 'gcp', 'docker', 'kubernetes', 'terraform',
    'rest', 'graphql', 'grpc', 'microservices',
)

STRUCTURE_PATTERN = re.compile(r'\b(first|second|finally|trade-?off|because|therefore)\b', re.IGNORECASE)

# Extra credit per dimension when the answer touches these ideas
DIMENSION_KEYWORDS: Dict[str, re.Pattern] = {
    "relevance": re.compile(r'\b(experience|project|team|role|customers?)\b', re.IGNORECASE),
    "accuracy": re.compile(r'\b(token|bucket|limit|429|sliding|cache|index|queue|latency)\b', re.IGNORECASE),
    "reasoning": re.compile(r'\b(measure|metrics?|trace|rollback|hypothesis)\b', re.IGNORECASE),
    "tradeoffs": re.compile(r'\b(trade-?offs?|cost|risk|impact)\b', re.IGNORECASE),
}

EDUCATION_PATTERN = re.compile(r'\b(b\.?sc|m\.?sc|bachelor|master|phd|degree|university|college)\b', re.IGNORECASE)
EXPERIENCE_PATTERN = re.compile(r'\b(\d+\+?\s+years?|engineer|developer|lead|intern)\b', re.IGNORECASE)

SHORT_ANSWER = 80


def find_technologies(text: str) -> List[str]:
    """Known technologies in order of first mention."""
    lowered = text.lower()
    found = []
    for tech in TECH_KEYWORDS:
        match = re.search(rf'(?<![\w.+]){re.escape(tech)}(?![\w+])', lowered)
        if match:
            found.append((match.start(), tech))
    return [tech for _, tech in sorted(found)]


def _clamp(score: int) -> int:
    return max(0, min(10, score))


class HeuristicAIProvider(AIProvider):
    supports_resume_analysis = True
    supports_profile = True

    def __init__(self, round_configs: Mapping[RoundType, RoundScoringConfig]):
        self.round_configs = round_configs

    def generate_question(self, context: QuestionContext) -> GeneratedQuestion:
        bank = FALLBACK_QUESTIONS.get(context.round_type.value, [])
        for question in bank[context.question_index:] + bank[:context.question_index]:
            if question not in context.asked_questions:
                return GeneratedQuestion(prompt=question)
        return GeneratedQuestion(
            prompt=f"Tell me more about your experience as a {context.role} "
                   f"({context.round_type.value.lower()} question {context.question_index + 1})."
        )

    def score_dimension(self, dimension: str, answer: str) -> int:
        length = len(answer.strip())
        score = 7 if length > 150 else 5 if length > 60 else 3

        if STRUCTURE_PATTERN.search(answer):
            score += 1
        keywords = DIMENSION_KEYWORDS.get(dimension)
        if keywords and keywords.search(answer):
            score += 1
        return _clamp(score)

    def evaluate_answer(
        self,
        round_type: RoundType,
        question: str,
        answer: str,
        memory: StructuredMemory,
    ) -> EvaluationResult:
        dimensions = self.round_configs[round_type].dimensions
        scores = {dim: self.score_dimension(dim, answer) for dim in dimensions}

        structured = bool(STRUCTURE_PATTERN.search(answer))
        technologies = find_technologies(answer)

        logger.debug(f"Heuristic scores for {round_type.value}: {scores}")

        hints = MemoryHints(
            strengths=["Structured communication"] if structured else None,
            weaknesses=["Insufficient detail"] if len(answer.strip()) < SHORT_ANSWER else None,
            notes=[f"Mentioned {', '.join(technologies)}"] if technologies else None,
        )

        return EvaluationResult(
            raw_scores=scores,
            reasoning_text="Heuristic evaluation based on answer length, structure and keywords.",
            memory_hints=hints,
        )

    def analyze_resume(self, resume_text: str, target_role: str) -> ResumeAnalysis:
        lines = [line.strip() for line in resume_text.splitlines() if line.strip()]
        summary = lines[0][:200] if lines else ""
        return ResumeAnalysis(
            experience=[line for line in lines if EXPERIENCE_PATTERN.search(line)][:10],
            skills=find_technologies(resume_text),
            education=[line for line in lines if EDUCATION_PATTERN.search(line)][:5],
            summary=summary,
        )

    def generate_profile(self, request: ProfileRequest) -> str:
        answers = " ".join(entry.answer for entry in request.transcript)
        technologies = find_technologies(answers)
        answered = sum(1 for entry in request.transcript if entry.answer.strip())

        profile = (
            f"{request.level.value.capitalize()} {request.role} candidate; "
            f"answered {answered} of {len(request.transcript)} screening questions."
        )
        if technologies:
            profile += f" Mentioned {', '.join(technologies)}."
        return profile
