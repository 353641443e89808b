"""
Builds an orchestrator from configuration.

- DATABASE_URL set: SQL repositories, otherwise in-memory
- REDIS_URL set: Redis live-state cache, otherwise none
- LLM_URL set: LLM-backed AI provider, otherwise the heuristic one
"""
import logging

from interview_workflow.interview.heuristics import HeuristicAIProvider
from interview_workflow.interview.orchestrator import InterviewOrchestrator
from interview_workflow.interview.scoring import DecisionEngine
from interview_workflow.llm.base import AIProvider
from interview_workflow.persistence import (
    InMemoryCandidateRepository,
    InMemorySessionRepository,
    LiveStateStore,
    NoopLiveStateStore,
)
from interview_workflow.utils.config import Config, config

logger = logging.getLogger(__name__)


def build_ai_provider(cfg: Config) -> AIProvider:
    if cfg.llm.enabled:
        from interview_workflow.interview.agents import LLMAIProvider
        from interview_workflow.llm.client import LLMClient

        return LLMAIProvider(LLMClient(cfg.llm), cfg.interview.rounds)

    logger.info("LLM_URL not set, using heuristic AI provider")
    return HeuristicAIProvider(cfg.interview.rounds)


def build_live_state_store(cfg: Config) -> LiveStateStore:
    if not cfg.live_state.redis_url:
        return NoopLiveStateStore()

    from interview_workflow.persistence.redis_store import RedisLiveStateStore

    logger.info("Live state cached in Redis")
    return RedisLiveStateStore.from_url(
        cfg.live_state.redis_url,
        key_prefix=cfg.live_state.key_prefix,
        default_ttl_seconds=cfg.live_state.ttl_seconds,
    )


def build_orchestrator(cfg: Config = config) -> InterviewOrchestrator:
    # Fails fast on bad round weights or thresholds.
    decision_engine = DecisionEngine(cfg.interview.rounds)

    if cfg.storage.database_url:
        from interview_workflow.persistence.sql_repo import (
            SqlCandidateRepository,
            SqlSessionRepository,
            create_sql_engine,
            init_db,
        )

        engine = create_sql_engine(cfg.storage.database_url, echo=cfg.storage.echo)
        init_db(engine)
        candidate_repo = SqlCandidateRepository(engine)
        session_repo = SqlSessionRepository(engine)
    else:
        logger.info("DATABASE_URL not set, sessions are kept in memory")
        candidate_repo = InMemoryCandidateRepository()
        session_repo = InMemorySessionRepository()

    return InterviewOrchestrator(
        candidate_repo=candidate_repo,
        session_repo=session_repo,
        ai_provider=build_ai_provider(cfg),
        decision_engine=decision_engine,
        live_state_store=build_live_state_store(cfg),
        live_state_ttl_seconds=cfg.live_state.ttl_seconds,
    )
