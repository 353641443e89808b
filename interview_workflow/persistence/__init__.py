# Persistence module
from .interfaces import CandidateRepository, SessionRepository, LiveStateStore, NoopLiveStateStore
from .memory_repo import InMemoryCandidateRepository, InMemorySessionRepository, InMemoryLiveStateStore
