"""
LLM-backed agents for the interview workflow.
Interviewer, evaluator, resume analyst and profile writer, exposed together
as one AIProvider.
"""
import random
import logging
from typing import List, Mapping

from pydantic import ValidationError as PydanticValidationError

from interview_workflow.errors import ValidationError
from interview_workflow.interview.rounds import RoundScoringConfig
from interview_workflow.llm.base import AIProvider
from interview_workflow.llm.client import LLMClient
from interview_workflow.llm.prompts import Prompts, FALLBACK_QUESTIONS
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


def describe_memory(memory: StructuredMemory) -> str:
    """Memory as a short block for prompts."""
    parts = []
    if memory.strengths:
        parts.append(f"Strengths: {'; '.join(memory.strengths[-5:])}")
    if memory.weaknesses:
        parts.append(f"Weaknesses: {'; '.join(memory.weaknesses[-5:])}")
    if memory.notes:
        parts.append(f"Notes: {'; '.join(memory.notes[-5:])}")
    return "\n".join(parts) if parts else "Nothing yet."


class InterviewerAgent:
    """
    Generates interview questions based on round and context.
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def generate_question(self, context: QuestionContext) -> str:
        """
        Generate the next interview question.

        Connection failures propagate; an unusable completion falls back to
        the round's question bank.
        """
        logger.info(f"Generating question {context.question_index} for round: {context.round_type.value}")

        resume_summary = ""
        if context.resume_context and context.resume_context.analysis:
            analysis = context.resume_context.analysis
            resume_summary = analysis.summary
            if analysis.skills:
                resume_summary = f"{resume_summary}\nSkills: {', '.join(analysis.skills[:8])}".strip()

        prompt = Prompts.generate_question(
            round_type=context.round_type.value,
            role=context.role,
            level=context.level.value,
            memory_summary=describe_memory(context.memory),
            asked_questions=context.asked_questions,
            question_index=context.question_index,
            resume_summary=resume_summary,
        )

        question, usable = self.llm.ask_question(prompt)

        if not usable or question in context.asked_questions:
            logger.warning(f"LLM question unusable for {context.round_type.value}, using fallback")
            question = self._get_fallback(context.round_type, context.asked_questions)

        return question

    def _get_fallback(self, round_type: RoundType, asked: List[str]) -> str:
        """Get a fallback question for the round that has not been asked yet."""
        bank = FALLBACK_QUESTIONS.get(round_type.value, ["Could you tell me more about your experience?"])
        unused = [q for q in bank if q not in asked]
        return random.choice(unused or bank)


class EvaluationAgent:
    """
    Scores candidate answers per round dimension.
    """

    def __init__(self, llm: LLMClient, round_configs: Mapping[RoundType, RoundScoringConfig]):
        self.llm = llm
        self.round_configs = round_configs

    def evaluate(
        self,
        round_type: RoundType,
        question: str,
        answer: str,
        memory: StructuredMemory,
    ) -> EvaluationResult:
        """
        Evaluate a candidate's answer.

        Returns:
            EvaluationResult with the raw JSON kept verbatim for the decision engine
        """
        dimensions = self.round_configs[round_type].dimensions
        prompt = Prompts.evaluate_answer(
            round_type=round_type.value,
            dimensions=dimensions,
            question=question,
            answer=answer,
            memory_summary=describe_memory(memory),
        )

        result = self.llm.ask_json(prompt, max_tokens=500)
        if result is None:
            raise ValidationError(f"Evaluation for {round_type.value} answer was not valid JSON")

        summary = result.get("summary", "")
        if not isinstance(summary, str):
            raise ValidationError("Evaluation summary must be a string")

        hints = None
        raw_hints = result.get("memoryHints")
        if raw_hints is not None:
            try:
                hints = MemoryHints.model_validate(raw_hints)
            except PydanticValidationError as e:
                raise ValidationError(f"Malformed memory hints: {e}") from e

        return EvaluationResult(raw_scores=result, reasoning_text=summary, memory_hints=hints)


class ProfileAgent:
    """
    Resume analysis and post-screening candidate profile.
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def analyze_resume(self, resume_text: str, target_role: str) -> ResumeAnalysis:
        result = self.llm.ask_json(Prompts.analyze_resume(resume_text, target_role), max_tokens=600)
        if result is None:
            raise ValidationError("Resume analysis was not valid JSON")
        try:
            return ResumeAnalysis.model_validate(result)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed resume analysis: {e}") from e

    def generate_profile(self, request: ProfileRequest) -> str:
        transcript = "\n".join(
            f"Q: {entry.question}\nA: {entry.answer}" for entry in request.transcript
        )
        prompt = Prompts.generate_profile(request.role, request.level.value, transcript)
        profile = self.llm.ask_text(prompt, max_tokens=400)
        if not profile:
            raise ValidationError("Profile generation returned no text")
        return profile


class LLMAIProvider(AIProvider):
    """
    Orchestrates all agents behind the AIProvider interface.
    """
    supports_resume_analysis = True
    supports_profile = True

    def __init__(self, llm: LLMClient, round_configs: Mapping[RoundType, RoundScoringConfig]):
        self.interviewer = InterviewerAgent(llm)
        self.evaluator = EvaluationAgent(llm, round_configs)
        self.profiler = ProfileAgent(llm)

    def generate_question(self, context: QuestionContext) -> GeneratedQuestion:
        return GeneratedQuestion(prompt=self.interviewer.generate_question(context))

    def evaluate_answer(
        self,
        round_type: RoundType,
        question: str,
        answer: str,
        memory: StructuredMemory,
    ) -> EvaluationResult:
        return self.evaluator.evaluate(round_type, question, answer, memory)

    def analyze_resume(self, resume_text: str, target_role: str) -> ResumeAnalysis:
        return self.profiler.analyze_resume(resume_text, target_role)

    def generate_profile(self, request: ProfileRequest) -> str:
        return self.profiler.generate_profile(request)
