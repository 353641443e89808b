"""
Pydantic models for the interview workflow.

Three groups live here:
- the session aggregate (Candidate, InterviewSession and its rounds),
- the contracts exchanged with the AI capability,
- the read projections returned to callers.

Every model serializes with camelCase aliases and accepts either spelling on input,
so the same classes are used for storage and for the HTTP surface.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ================================================================
# Enumerations
# ================================================================

class RoundType(str, Enum):
    SCREENING = "SCREENING"
    TECHNICAL = "TECHNICAL"
    SCENARIO = "SCENARIO"


class InterviewState(str, Enum):
    INIT = "INIT"
    SCREENING = "SCREENING"
    TECHNICAL = "TECHNICAL"
    SCENARIO = "SCENARIO"
    FINAL_DECISION = "FINAL_DECISION"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (InterviewState.FINAL_DECISION, InterviewState.REJECTED)


class CandidateStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"


class Verdict(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class SeniorityLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"


class AuditEventType(str, Enum):
    SESSION_STARTED = "SESSION_STARTED"
    ROUND_STARTED = "ROUND_STARTED"
    QUESTION_ASKED = "QUESTION_ASKED"
    ANSWER_SUBMITTED = "ANSWER_SUBMITTED"
    ANSWER_EVALUATED = "ANSWER_EVALUATED"
    ROUNDED_SCORED = "ROUNDED_SCORED"
    ROUND_VERDICT = "ROUND_VERDICT"
    SESSION_VERDICT = "SESSION_VERDICT"


def new_id() -> str:
    return str(uuid.uuid4())


# ================================================================
# Session aggregate
# ================================================================

class Candidate(ApiModel):
    id: str = Field(default_factory=new_id)
    status: CandidateStatus = CandidateStatus.IN_PROGRESS
    current_round: Optional[RoundType] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class InterviewQuestion(ApiModel):
    id: str = Field(default_factory=new_id)
    round_type: RoundType
    prompt: str
    created_at: datetime = Field(default_factory=datetime.now)


class AnswerEvaluation(ApiModel):
    """Raw AI evaluation kept verbatim; validated only when the round is scored."""
    raw: Any = None
    reasoning_text: str = ""


class InterviewAnswer(ApiModel):
    question_id: str
    answer_text: str
    answered_at: datetime = Field(default_factory=datetime.now)
    evaluation: Optional[AnswerEvaluation] = None


class Scorecard(ApiModel):
    dimensions: Dict[str, int]
    weighted_score: int  # 0-100
    reasoning: str = ""
    raw_evaluation: Dict[str, Any] = Field(default_factory=dict)


class InterviewRound(ApiModel):
    round_type: RoundType
    questions: List[InterviewQuestion] = Field(default_factory=list)
    answers: List[InterviewAnswer] = Field(default_factory=list)
    scorecard: Optional[Scorecard] = None
    verdict: Optional[Verdict] = None
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None

    @property
    def is_scored(self) -> bool:
        return self.verdict is not None

    def active_question(self) -> Optional[InterviewQuestion]:
        """First question that has no answer yet."""
        answered = {a.question_id for a in self.answers}
        for question in self.questions:
            if question.id not in answered:
                return question
        return None


class StructuredMemory(ApiModel):
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)


class AuditEvent(ApiModel):
    at: datetime = Field(default_factory=datetime.now)
    type: AuditEventType
    details: Dict[str, Any] = Field(default_factory=dict)


class ResumeAnalysis(ApiModel):
    experience: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    education: List[str] = Field(default_factory=list)
    summary: str = ""


class ResumeData(ApiModel):
    file_name: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=datetime.now)
    extracted_text: str
    analysis: Optional[ResumeAnalysis] = None


class InterviewContext(ApiModel):
    role: str
    level: SeniorityLevel


class InterviewSession(ApiModel):
    """Aggregate root: one interview process for one candidate."""
    id: str = Field(default_factory=new_id)
    candidate_id: str
    state: InterviewState = InterviewState.INIT
    context: InterviewContext
    resume: Optional[ResumeData] = None
    profile: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None
    rounds: List[InterviewRound] = Field(default_factory=list)
    memory: StructuredMemory = Field(default_factory=StructuredMemory)
    audit_log: List[AuditEvent] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def active_round(self) -> Optional[InterviewRound]:
        return self.rounds[-1] if self.rounds else None

    def asked_prompts(self) -> List[str]:
        """Every prompt asked so far, across all rounds."""
        return [q.prompt for r in self.rounds for q in r.questions]

    def record(self, event_type: AuditEventType, **details: Any) -> AuditEvent:
        event = AuditEvent(type=event_type, details=details)
        self.audit_log.append(event)
        return event


# ================================================================
# AI capability contracts
# ================================================================

class MemoryHints(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    notes: Optional[List[str]] = None


class ResumeContext(ApiModel):
    extracted_text: str
    analysis: Optional[ResumeAnalysis] = None


class QuestionContext(ApiModel):
    round_type: RoundType
    role: str
    level: SeniorityLevel
    memory: StructuredMemory
    asked_questions: List[str] = Field(default_factory=list)
    question_index: int = 0  # 0-based within the current round
    resume_context: Optional[ResumeContext] = None


class GeneratedQuestion(ApiModel):
    prompt: str


class EvaluationResult(ApiModel):
    raw_scores: Any
    reasoning_text: str = ""
    memory_hints: Optional[MemoryHints] = None


class TranscriptEntry(ApiModel):
    question: str
    answer: str


class ProfileRequest(ApiModel):
    transcript: List[TranscriptEntry]
    role: str
    level: SeniorityLevel


# ================================================================
# Projections
# ================================================================

class ActiveQuestion(ApiModel):
    id: str
    prompt: str
    round_type: RoundType


class RoundProgress(ApiModel):
    round_type: RoundType
    answers: int
    questions_asked: int
    verdict: Optional[Verdict] = None
    weighted_score: Optional[int] = None
    feedback: Optional[str] = None
    dimensions: Optional[Dict[str, int]] = None


class PublicState(ApiModel):
    session_id: str
    candidate_id: str
    state: InterviewState
    current_round: Optional[RoundType] = None
    active_question: Optional[ActiveQuestion] = None
    progress: List[RoundProgress] = Field(default_factory=list)
    profile: Optional[str] = None
    memory: StructuredMemory


class RoundSummary(ApiModel):
    round_type: RoundType
    verdict: Optional[Verdict] = None
    scorecard: Optional[Scorecard] = None


class InterviewResult(ApiModel):
    session_id: str
    candidate_id: str
    candidate_status: CandidateStatus
    state: InterviewState
    memory: StructuredMemory
    rounds: List[RoundSummary]
    audit_log: List[AuditEvent]


class LiveState(ApiModel):
    session_id: str
    state: InterviewState
    current_round: Optional[RoundType] = None
    question_index: int = 0
    updated_at: datetime = Field(default_factory=datetime.now)
