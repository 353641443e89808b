"""
Redis-backed live-state store.
One hash per session at `<prefix>:session:<id>:state`, written together with its
expiry in a single transactional pipeline.
"""
from datetime import datetime
from typing import Optional

import redis

from interview_workflow.models.schemas import LiveState
from interview_workflow.persistence.interfaces import LiveStateStore


class RedisLiveStateStore(LiveStateStore):
    def __init__(
        self,
        client: "redis.Redis",
        key_prefix: str = "interview",
        default_ttl_seconds: int = 2 * 60 * 60,
    ):
        self.client = client
        self.key_prefix = key_prefix
        self.default_ttl_seconds = default_ttl_seconds

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisLiveStateStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def key(self, session_id: str) -> str:
        return f"{self.key_prefix}:session:{session_id}:state"

    def get(self, session_id: str) -> Optional[LiveState]:
        data = self.client.hgetall(self.key(session_id))
        if not data:
            return None

        try:
            question_index = int(data.get("questionIndex", "0"))
        except ValueError:
            question_index = 0

        return LiveState(
            session_id=session_id,
            state=data["state"],
            current_round=data.get("currentRound") or None,
            question_index=question_index,
            updated_at=data.get("updatedAt") or datetime.now(),
        )

    def set(self, state: LiveState, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        key = self.key(state.session_id)

        pipe = self.client.pipeline(transaction=True)
        pipe.hset(key, mapping={
            "state": state.state.value,
            "currentRound": state.current_round.value if state.current_round else "",
            "questionIndex": str(state.question_index),
            "updatedAt": state.updated_at.isoformat(),
        })
        pipe.expire(key, ttl)
        pipe.execute()

    def clear(self, session_id: str) -> None:
        self.client.delete(self.key(session_id))
