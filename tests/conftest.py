import threading
import time
from typing import Any, Dict, List, Optional

import pytest

from interview_workflow.interview.orchestrator import InterviewOrchestrator
from interview_workflow.interview.rounds import DEFAULT_ROUND_CONFIGS
from interview_workflow.interview.scoring import DecisionEngine
from interview_workflow.llm.base import AIProvider
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
from interview_workflow.persistence import (
    InMemoryCandidateRepository,
    InMemoryLiveStateStore,
    InMemorySessionRepository,
)


def uniform_scores(round_type: RoundType, value: int) -> Dict[str, int]:
    return {dim: value for dim in DEFAULT_ROUND_CONFIGS[round_type].dimensions}


class ScriptedAIProvider(AIProvider):
    """
    Deterministic AI capability for orchestrator tests.

    Every answer in a round gets the same score on every dimension,
    taken from `scores` (default 7).
    """

    def __init__(
        self,
        scores: Optional[Dict[RoundType, int]] = None,
        hints: Optional[MemoryHints] = None,
        resume_analysis: Optional[ResumeAnalysis] = None,
        profile: Optional[str] = None,
        evaluation_delay: float = 0.0,
    ):
        self.scores = scores or {}
        self.hints = hints
        self.resume_analysis = resume_analysis
        self.profile = profile
        self.evaluation_delay = evaluation_delay
        self.supports_resume_analysis = resume_analysis is not None
        self.supports_profile = profile is not None

        self.question_contexts: List[QuestionContext] = []
        self.evaluations: List[str] = []
        self.profile_requests: List[ProfileRequest] = []
        self.fail_evaluation = False
        self.fail_resume = False
        self.fail_profile = False
        # answer text -> raw payload returned instead of the uniform scores
        self.raw_overrides: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def generate_question(self, context: QuestionContext) -> GeneratedQuestion:
        with self._lock:
            self.question_contexts.append(context)
        return GeneratedQuestion(prompt=f"{context.round_type.value} question {context.question_index + 1}?")

    def evaluate_answer(
        self,
        round_type: RoundType,
        question: str,
        answer: str,
        memory: StructuredMemory,
    ) -> EvaluationResult:
        if self.evaluation_delay:
            time.sleep(self.evaluation_delay)
        if self.fail_evaluation:
            raise ConnectionError("evaluator unreachable")
        with self._lock:
            self.evaluations.append(answer)
        if answer in self.raw_overrides:
            raw = self.raw_overrides[answer]
        else:
            raw = uniform_scores(round_type, self.scores.get(round_type, 7))
            raw["comment"] = f"scored {question}"
        return EvaluationResult(
            raw_scores=raw,
            reasoning_text=f"{round_type.value} looks consistent",
            memory_hints=self.hints,
        )

    def analyze_resume(self, resume_text: str, target_role: str) -> ResumeAnalysis:
        if self.fail_resume:
            raise RuntimeError("resume service down")
        return self.resume_analysis

    def generate_profile(self, request: ProfileRequest) -> str:
        if self.fail_profile:
            raise RuntimeError("profile service down")
        self.profile_requests.append(request)
        return self.profile


class FailingLiveStateStore(InMemoryLiveStateStore):
    def set(self, state, ttl_seconds=None):
        raise ConnectionError("redis down")

    def clear(self, session_id):
        raise ConnectionError("redis down")


@pytest.fixture
def decision_engine():
    return DecisionEngine(DEFAULT_ROUND_CONFIGS)


@pytest.fixture
def ai_provider():
    return ScriptedAIProvider()


@pytest.fixture
def candidate_repo():
    return InMemoryCandidateRepository()


@pytest.fixture
def session_repo():
    return InMemorySessionRepository()


@pytest.fixture
def live_state_store():
    return InMemoryLiveStateStore()


@pytest.fixture
def orchestrator(candidate_repo, session_repo, ai_provider, decision_engine, live_state_store):
    return InterviewOrchestrator(
        candidate_repo=candidate_repo,
        session_repo=session_repo,
        ai_provider=ai_provider,
        decision_engine=decision_engine,
        live_state_store=live_state_store,
    )


def answer_round(orchestrator: InterviewOrchestrator, session_id: str, count: int = 3):
    state = None
    for i in range(count):
        state = orchestrator.submit_answer(session_id, f"answer number {i + 1}")
    return state
