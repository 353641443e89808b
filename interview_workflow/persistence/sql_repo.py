"""
SQLModel-backed repositories.

Tables:
- candidates: one row per interview process
- interview_sessions: session state, context, memory and audit log (JSON columns)
- interview_rounds: one row per (session, round type) with questions, answers and scorecard

A session upsert writes the session row and every round row in one transaction.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine, select

from interview_workflow.models.schemas import Candidate, InterviewRound, InterviewSession
from interview_workflow.persistence.interfaces import CandidateRepository, SessionRepository

logger = logging.getLogger(__name__)


class CandidateRecord(SQLModel, table=True):
    __tablename__ = "candidates"

    id: str = Field(primary_key=True)
    status: str
    current_round: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SessionRecord(SQLModel, table=True):
    __tablename__ = "interview_sessions"

    id: str = Field(primary_key=True)
    candidate_id: str = Field(index=True, foreign_key="candidates.id")
    state: str
    context: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    memory: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    audit_log: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    resume: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    profile: Optional[str] = None
    started_at: datetime
    ended_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.now)


class RoundRecord(SQLModel, table=True):
    __tablename__ = "interview_rounds"

    session_id: str = Field(primary_key=True, foreign_key="interview_sessions.id")
    round_type: str = Field(primary_key=True)
    position: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    verdict: Optional[str] = None
    scorecard: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    answers: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


def create_sql_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite gets settings that work across request threads."""
    kwargs: Dict[str, Any] = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
    logger.info(f"Database schema ready on {engine.url.render_as_string(hide_password=True)}")


class SqlCandidateRepository(CandidateRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, candidate_id: str) -> Optional[Candidate]:
        with Session(self.engine) as db:
            record = db.get(CandidateRecord, candidate_id)
            if record is None:
                return None
            return Candidate(
                id=record.id,
                status=record.status,
                current_round=record.current_round,
                created_at=record.created_at,
                updated_at=record.updated_at,
            )

    def upsert(self, candidate: Candidate) -> None:
        with Session(self.engine) as db:
            db.merge(CandidateRecord(
                id=candidate.id,
                status=candidate.status.value,
                current_round=candidate.current_round.value if candidate.current_round else None,
                created_at=candidate.created_at,
                updated_at=candidate.updated_at,
            ))
            db.commit()


class SqlSessionRepository(SessionRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, session_id: str) -> Optional[InterviewSession]:
        with Session(self.engine) as db:
            record = db.get(SessionRecord, session_id)
            if record is None:
                return None

            rounds = db.exec(
                select(RoundRecord)
                .where(RoundRecord.session_id == session_id)
                .order_by(RoundRecord.position)
            ).all()

            return InterviewSession.model_validate({
                "id": record.id,
                "candidate_id": record.candidate_id,
                "state": record.state,
                "context": record.context,
                "resume": record.resume,
                "profile": record.profile,
                "started_at": record.started_at,
                "ended_at": record.ended_at,
                "memory": record.memory,
                "audit_log": record.audit_log,
                "rounds": [
                    {
                        "round_type": r.round_type,
                        "questions": r.questions,
                        "answers": r.answers,
                        "scorecard": r.scorecard,
                        "verdict": r.verdict,
                        "started_at": r.started_at,
                        "ended_at": r.ended_at,
                    }
                    for r in rounds
                ],
            })

    def upsert(self, session: InterviewSession) -> None:
        data = session.model_dump(mode="json")

        with Session(self.engine) as db:
            db.merge(SessionRecord(
                id=session.id,
                candidate_id=session.candidate_id,
                state=session.state.value,
                context=data["context"],
                memory=data["memory"],
                audit_log=data["audit_log"],
                resume=data["resume"],
                profile=session.profile,
                started_at=session.started_at,
                ended_at=session.ended_at,
                updated_at=datetime.now(),
            ))
            for position, round_ in enumerate(session.rounds):
                db.merge(self._round_record(session.id, position, round_))
            db.commit()

    @staticmethod
    def _round_record(session_id: str, position: int, round_: InterviewRound) -> RoundRecord:
        data = round_.model_dump(mode="json")
        return RoundRecord(
            session_id=session_id,
            round_type=round_.round_type.value,
            position=position,
            started_at=round_.started_at,
            ended_at=round_.ended_at,
            verdict=round_.verdict.value if round_.verdict else None,
            scorecard=data["scorecard"],
            questions=data["questions"],
            answers=data["answers"],
        )
