"""
Interview orchestrator.

Owns the candidate and session aggregates for the duration of each request:
load, mutate locally, persist at fixed checkpoints. Every answer submission for a
session runs under that session's lock, so a round can never collect more answers
than questions asked or than its quota.

Ordering inside submit_answer is strict:
submit -> live-state checkpoint -> evaluate -> memory -> decide -> persist.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Union

from interview_workflow.errors import InvalidStateError, NotFoundError, ValidationError
from interview_workflow.interview.scoring import DecisionEngine, RoundResult
from interview_workflow.interview.state_machine import (
    can_accept_answer,
    first_round,
    next_round,
    state_for_round,
)
from interview_workflow.llm.base import AIProvider
from interview_workflow.memory import merge_memory
from interview_workflow.models.schemas import (
    ActiveQuestion,
    AnswerEvaluation,
    AuditEventType,
    Candidate,
    CandidateStatus,
    InterviewAnswer,
    InterviewContext,
    InterviewQuestion,
    InterviewResult,
    InterviewRound,
    InterviewSession,
    InterviewState,
    LiveState,
    MemoryHints,
    ProfileRequest,
    PublicState,
    QuestionContext,
    ResumeContext,
    ResumeData,
    RoundProgress,
    RoundSummary,
    RoundType,
    SeniorityLevel,
    TranscriptEntry,
    Verdict,
    new_id,
)
from interview_workflow.persistence.interfaces import (
    CandidateRepository,
    LiveStateStore,
    NoopLiveStateStore,
    SessionRepository,
)

logger = logging.getLogger(__name__)


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class SessionLocks:
    """
    One lock per session id, held only while someone uses it.
    An entry is dropped as soon as its last user leaves.
    """

    def __init__(self):
        self._entries: Dict[str, _LockEntry] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(session_id, _LockEntry())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[session_id]


class InterviewOrchestrator:
    """
    Runs the interview workflow: start, answer, state and result.
    """

    def __init__(
        self,
        candidate_repo: CandidateRepository,
        session_repo: SessionRepository,
        ai_provider: AIProvider,
        decision_engine: DecisionEngine,
        live_state_store: Optional[LiveStateStore] = None,
        live_state_ttl_seconds: Optional[int] = None,
    ):
        self.candidate_repo = candidate_repo
        self.session_repo = session_repo
        self.ai = ai_provider
        self.decision_engine = decision_engine
        self.live_state_store = live_state_store or NoopLiveStateStore()
        self.live_state_ttl_seconds = live_state_ttl_seconds
        self.locks = SessionLocks()

    # ========================================
    # Public operations
    # ========================================

    def start_interview(
        self,
        role: str,
        level: Union[str, SeniorityLevel],
        candidate_id: Optional[str] = None,
        resume_text: Optional[str] = None,
        resume_file_name: Optional[str] = None,
    ) -> PublicState:
        """
        Create a candidate and a session, then open the screening round.

        Returns:
            Public state with the first screening question
        """
        if not role or not role.strip():
            raise ValidationError("role is required")
        try:
            level = SeniorityLevel(level)
        except ValueError:
            raise ValidationError(f"Unknown level: {level}") from None

        now = datetime.now()
        candidate = Candidate(
            id=candidate_id or new_id(),
            status=CandidateStatus.IN_PROGRESS,
            current_round=None,
            created_at=now,
            updated_at=now,
        )
        session = InterviewSession(
            candidate_id=candidate.id,
            state=InterviewState.INIT,
            context=InterviewContext(role=role.strip(), level=level),
            started_at=now,
        )

        if resume_text and resume_text.strip():
            session.resume = ResumeData(
                file_name=resume_file_name,
                uploaded_at=now,
                extracted_text=resume_text,
            )
            self._analyze_resume(session)
            session.record(
                AuditEventType.SESSION_STARTED,
                role=session.context.role,
                level=level.value,
                resume_uploaded=True,
                resume_file_name=resume_file_name,
            )
        else:
            session.record(AuditEventType.SESSION_STARTED, role=session.context.role, level=level.value)

        self.candidate_repo.upsert(candidate)
        self.session_repo.upsert(session)
        logger.info(f"Interview {session.id} started for candidate {candidate.id} ({level.value} {role})")

        self._start_round(session, first_round())
        self._persist_live_state(session)

        return self._to_public_state(session)

    def submit_answer(self, session_id: str, answer: str, question_id: Optional[str] = None) -> PublicState:
        """
        Record an answer to the active question and advance the workflow.

        Returns:
            Public state after the answer was evaluated (and the round decided, if complete)
        """
        if not answer or not answer.strip():
            raise ValidationError("answer must not be empty")

        with self.locks.hold(session_id):
            return self._submit_answer(session_id, answer, question_id)

    def get_state(self, session_id: str) -> PublicState:
        return self._to_public_state(self._get_session(session_id))

    def get_result(self, session_id: str) -> InterviewResult:
        """Decision summary; only available once the interview has ended."""
        session = self._get_session(session_id)
        if not session.is_terminal:
            raise InvalidStateError("Interview not completed")

        candidate = self.candidate_repo.get_by_id(session.candidate_id)

        return InterviewResult(
            session_id=session.id,
            candidate_id=session.candidate_id,
            candidate_status=candidate.status if candidate else CandidateStatus.IN_PROGRESS,
            state=session.state,
            memory=session.memory,
            rounds=[
                RoundSummary(round_type=r.round_type, verdict=r.verdict, scorecard=r.scorecard)
                for r in session.rounds
            ],
            audit_log=session.audit_log,
        )

    def get_live_state(self, session_id: str) -> Optional[LiveState]:
        """Cached progress snapshot, or None when the cache has nothing."""
        try:
            return self.live_state_store.get(session_id)
        except Exception as e:
            logger.warning(f"Live state read failed for {session_id}: {e}")
            return None

    # ========================================
    # Answer handling
    # ========================================

    def _submit_answer(self, session_id: str, answer_text: str, question_id: Optional[str]) -> PublicState:
        session = self._get_session(session_id)

        if not can_accept_answer(session.state):
            raise InvalidStateError(f"Cannot answer in state {session.state.value}")

        round_ = session.active_round()
        if round_ is None or round_.is_scored:
            raise InvalidStateError("No active round")

        question = round_.active_question()
        if question is None:
            raise InvalidStateError("No active question")

        if question_id and question_id != question.id:
            raise ValidationError("questionId does not match active question")

        answer = InterviewAnswer(question_id=question.id, answer_text=answer_text)
        round_.answers.append(answer)
        self._persist_live_state(session)
        session.record(AuditEventType.ANSWER_SUBMITTED, round_type=round_.round_type.value, question_id=question.id)

        evaluation = self.ai.evaluate_answer(
            round_type=round_.round_type,
            question=question.prompt,
            answer=answer_text,
            memory=session.memory,
        )
        answer.evaluation = AnswerEvaluation(raw=evaluation.raw_scores, reasoning_text=evaluation.reasoning_text)
        session.record(AuditEventType.ANSWER_EVALUATED, round_type=round_.round_type.value, question_id=question.id)
        merge_memory(session.memory, evaluation.memory_hints)

        cfg = self.decision_engine.get_config(round_.round_type)
        if len(round_.answers) < cfg.questions_per_round:
            self._ask_next_question(session, round_)
            self.session_repo.upsert(session)
            self._persist_live_state(session)
            return self._to_public_state(session)

        result = self._score_round(session, round_)

        if result.verdict == Verdict.FAIL:
            self._close_session(
                session,
                state=InterviewState.REJECTED,
                status=CandidateStatus.REJECTED,
                message=f"Failed {round_.round_type.value} round",
                reasons=result.reasons,
            )
            self.session_repo.upsert(session)
            self._persist_live_state(session, completed=True)
            return self._to_public_state(session)

        if round_.round_type == RoundType.SCREENING and self.ai.supports_profile:
            self._attach_profile(session, round_)

        upcoming = next_round(round_.round_type)
        if upcoming is None:
            self._close_session(
                session,
                state=InterviewState.FINAL_DECISION,
                status=CandidateStatus.SELECTED,
                message="Passed all rounds",
                reasons=[f"Passed all rounds. Last score: {result.scorecard.weighted_score}"],
            )
            self.session_repo.upsert(session)
            self._persist_live_state(session, completed=True)
            return self._to_public_state(session)

        self.session_repo.upsert(session)
        self._start_round(session, upcoming)
        self._persist_live_state(session)
        return self._to_public_state(session)

    def _score_round(self, session: InterviewSession, round_: InterviewRound) -> RoundResult:
        unevaluated = [a.question_id for a in round_.answers if a.evaluation is None]
        if unevaluated:
            raise InvalidStateError(f"Answers without evaluation: {', '.join(unevaluated)}")

        # Passed through unfiltered; a missing payload fails schema validation.
        raw_evaluations = [a.evaluation.raw for a in round_.answers]
        reasoning_texts = [a.evaluation.reasoning_text for a in round_.answers]

        result = self.decision_engine.compute_round_result(round_.round_type, raw_evaluations, reasoning_texts)

        round_.scorecard = result.scorecard
        round_.verdict = result.verdict
        round_.ended_at = datetime.now()

        session.record(
            AuditEventType.ROUNDED_SCORED,
            round_type=round_.round_type.value,
            weighted_score=result.scorecard.weighted_score,
            dimensions=result.scorecard.dimensions,
        )
        session.record(
            AuditEventType.ROUND_VERDICT,
            round_type=round_.round_type.value,
            verdict=result.verdict.value,
            reasons=result.reasons,
        )
        logger.info(
            f"Session {session.id} {round_.round_type.value} verdict {result.verdict.value} "
            f"({result.scorecard.weighted_score})"
        )
        return result

    # ========================================
    # Rounds and questions
    # ========================================

    def _start_round(self, session: InterviewSession, round_type: RoundType) -> None:
        if session.is_terminal:
            raise InvalidStateError("Interview already completed")
        if any(r.round_type == round_type for r in session.rounds):
            raise InvalidStateError(f"Round {round_type.value} already started")

        candidate = self._get_candidate(session.candidate_id)

        session.state = state_for_round(round_type)
        candidate.current_round = round_type
        candidate.updated_at = datetime.now()

        round_ = InterviewRound(round_type=round_type)
        session.rounds.append(round_)
        session.record(AuditEventType.ROUND_STARTED, round_type=round_type.value)

        self._ask_next_question(session, round_)

        self.candidate_repo.upsert(candidate)
        self.session_repo.upsert(session)

    def _ask_next_question(self, session: InterviewSession, round_: InterviewRound) -> None:
        if round_.active_question() is not None:
            raise InvalidStateError("Round already has an unanswered question")

        quota = self.decision_engine.get_config(round_.round_type).questions_per_round
        if len(round_.questions) >= quota:
            raise InvalidStateError(f"Round {round_.round_type.value} already has {quota} questions")

        resume_context = None
        if session.resume:
            resume_context = ResumeContext(
                extracted_text=session.resume.extracted_text,
                analysis=session.resume.analysis,
            )

        generated = self.ai.generate_question(QuestionContext(
            round_type=round_.round_type,
            role=session.context.role,
            level=session.context.level,
            memory=session.memory,
            asked_questions=session.asked_prompts(),
            question_index=len(round_.questions),
            resume_context=resume_context,
        ))

        prompt = generated.prompt.strip()
        if not prompt:
            raise ValidationError("Question generation returned an empty prompt")

        question = InterviewQuestion(round_type=round_.round_type, prompt=prompt)
        round_.questions.append(question)
        session.record(
            AuditEventType.QUESTION_ASKED,
            round_type=round_.round_type.value,
            question_id=question.id,
            question_index=len(round_.questions) - 1,
        )

    # ========================================
    # Best-effort collaborators
    # ========================================

    def _analyze_resume(self, session: InterviewSession) -> None:
        if not self.ai.supports_resume_analysis or session.resume is None:
            return
        try:
            analysis = self.ai.analyze_resume(session.resume.extracted_text, session.context.role)
        except Exception as e:
            logger.warning(f"Resume analysis failed for session {session.id}: {e}")
            return

        session.resume.analysis = analysis
        if analysis.skills:
            merge_memory(
                session.memory,
                MemoryHints(strengths=[f"Resume skills: {', '.join(analysis.skills[:5])}"]),
            )

    def _attach_profile(self, session: InterviewSession, round_: InterviewRound) -> None:
        answers = {a.question_id: a.answer_text for a in round_.answers}
        transcript = [
            TranscriptEntry(question=q.prompt, answer=answers.get(q.id, ""))
            for q in round_.questions
        ]
        try:
            profile = self.ai.generate_profile(ProfileRequest(
                transcript=transcript,
                role=session.context.role,
                level=session.context.level,
            ))
        except Exception as e:
            logger.warning(f"Profile generation failed for session {session.id}: {e}")
            return

        session.profile = profile
        self.session_repo.upsert(session)

    def _persist_live_state(self, session: InterviewSession, completed: bool = False) -> None:
        # Polling cache only; failures never reach the caller.
        try:
            if completed:
                self.live_state_store.clear(session.id)
                return

            round_ = session.active_round()
            self.live_state_store.set(
                LiveState(
                    session_id=session.id,
                    state=session.state,
                    current_round=round_.round_type if round_ else None,
                    question_index=max(0, len(round_.questions) - 1) if round_ else 0,
                ),
                self.live_state_ttl_seconds,
            )
        except Exception as e:
            logger.warning(f"Live state write failed for session {session.id}: {e}")

    # ========================================
    # Lifecycle helpers
    # ========================================

    def _close_session(
        self,
        session: InterviewSession,
        state: InterviewState,
        status: CandidateStatus,
        message: str,
        reasons: List[str],
    ) -> None:
        now = datetime.now()
        session.state = state
        session.ended_at = now

        candidate = self._get_candidate(session.candidate_id)
        candidate.status = status
        candidate.updated_at = now
        self.candidate_repo.upsert(candidate)

        session.record(AuditEventType.SESSION_VERDICT, verdict=status.value, message=message, reasons=reasons)
        logger.info(f"Session {session.id} closed: {status.value} ({message})")

    def _get_session(self, session_id: str) -> InterviewSession:
        session = self.session_repo.get_by_id(session_id)
        if session is None:
            raise NotFoundError(f"session {session_id} not found")
        return session

    def _get_candidate(self, candidate_id: str) -> Candidate:
        candidate = self.candidate_repo.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError(f"candidate {candidate_id} not found")
        return candidate

    def _to_public_state(self, session: InterviewSession) -> PublicState:
        round_ = session.active_round()
        question = round_.active_question() if round_ else None

        return PublicState(
            session_id=session.id,
            candidate_id=session.candidate_id,
            state=session.state,
            current_round=round_.round_type if round_ else None,
            active_question=ActiveQuestion(
                id=question.id,
                prompt=question.prompt,
                round_type=question.round_type,
            ) if question else None,
            progress=[
                RoundProgress(
                    round_type=r.round_type,
                    answers=len(r.answers),
                    questions_asked=len(r.questions),
                    verdict=r.verdict,
                    weighted_score=r.scorecard.weighted_score if r.scorecard else None,
                    feedback=r.scorecard.reasoning if r.scorecard else None,
                    dimensions=r.scorecard.dimensions if r.scorecard else None,
                )
                for r in session.rounds
            ],
            profile=session.profile,
            memory=session.memory,
        )
