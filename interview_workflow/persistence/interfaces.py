"""
Storage interfaces required by the orchestrator.

Repositories use full-record replace semantics keyed by identity. The live-state
store is a best-effort polling cache and never the source of truth.
"""
from abc import ABC, abstractmethod
from typing import Optional

from interview_workflow.models.schemas import Candidate, InterviewSession, LiveState


class CandidateRepository(ABC):
    @abstractmethod
    def get_by_id(self, candidate_id: str) -> Optional[Candidate]:
        ...

    @abstractmethod
    def upsert(self, candidate: Candidate) -> None:
        ...


class SessionRepository(ABC):
    @abstractmethod
    def get_by_id(self, session_id: str) -> Optional[InterviewSession]:
        ...

    @abstractmethod
    def upsert(self, session: InterviewSession) -> None:
        """Write the session and all of its rounds as one unit."""
        ...


class LiveStateStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> Optional[LiveState]:
        ...

    @abstractmethod
    def set(self, state: LiveState, ttl_seconds: Optional[int] = None) -> None:
        ...

    @abstractmethod
    def clear(self, session_id: str) -> None:
        ...


class NoopLiveStateStore(LiveStateStore):
    """Used when no cache is configured."""

    def get(self, session_id: str) -> Optional[LiveState]:
        return None

    def set(self, state: LiveState, ttl_seconds: Optional[int] = None) -> None:
        return None

    def clear(self, session_id: str) -> None:
        return None
