"""
In-memory repositories and live-state store.
Records are deep-copied on the way in and out so a loaded aggregate belongs to
the caller until it is upserted again.
"""
import threading
import time
from typing import Dict, Optional, Tuple

from interview_workflow.models.schemas import Candidate, InterviewSession, LiveState
from interview_workflow.persistence.interfaces import (
    CandidateRepository,
    LiveStateStore,
    SessionRepository,
)


class InMemoryCandidateRepository(CandidateRepository):
    def __init__(self):
        self._by_id: Dict[str, Candidate] = {}
        self._lock = threading.Lock()

    def get_by_id(self, candidate_id: str) -> Optional[Candidate]:
        with self._lock:
            candidate = self._by_id.get(candidate_id)
            return candidate.model_copy(deep=True) if candidate else None

    def upsert(self, candidate: Candidate) -> None:
        with self._lock:
            self._by_id[candidate.id] = candidate.model_copy(deep=True)


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._by_id: Dict[str, InterviewSession] = {}
        self._lock = threading.Lock()

    def get_by_id(self, session_id: str) -> Optional[InterviewSession]:
        with self._lock:
            session = self._by_id.get(session_id)
            return session.model_copy(deep=True) if session else None

    def upsert(self, session: InterviewSession) -> None:
        with self._lock:
            self._by_id[session.id] = session.model_copy(deep=True)


class InMemoryLiveStateStore(LiveStateStore):
    def __init__(self, default_ttl_seconds: int = 2 * 60 * 60):
        self.default_ttl_seconds = default_ttl_seconds
        self._entries: Dict[str, Tuple[LiveState, float]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[LiveState]:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            state, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._entries[session_id]
                return None
            return state.model_copy()

    def set(self, state: LiveState, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        with self._lock:
            self._entries[state.session_id] = (state.model_copy(), time.monotonic() + ttl)

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)
