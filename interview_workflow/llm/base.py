"""
AI capability interface.

Question generation and answer evaluation are required. Resume analysis and
profile generation are optional extensions: a provider advertises them through
the `supports_*` flags and callers check the flag before calling.
"""
from abc import ABC, abstractmethod

from interview_workflow.models.schemas import (
    EvaluationResult,
    GeneratedQuestion,
    ProfileRequest,
    QuestionContext,
    ResumeAnalysis,
    RoundType,
    StructuredMemory,
)


class AIProvider(ABC):
    supports_resume_analysis: bool = False
    supports_profile: bool = False

    @abstractmethod
    def generate_question(self, context: QuestionContext) -> GeneratedQuestion:
        ...

    @abstractmethod
    def evaluate_answer(
        self,
        round_type: RoundType,
        question: str,
        answer: str,
        memory: StructuredMemory,
    ) -> EvaluationResult:
        ...

    def analyze_resume(self, resume_text: str, target_role: str) -> ResumeAnalysis:
        raise NotImplementedError(f"{type(self).__name__} does not analyze resumes")

    def generate_profile(self, request: ProfileRequest) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not generate profiles")
