import time

from interview_workflow.models.schemas import InterviewState, LiveState, RoundType
from interview_workflow.persistence import InMemoryLiveStateStore, NoopLiveStateStore
from interview_workflow.persistence.redis_store import RedisLiveStateStore


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.commands = []

    def hset(self, key, mapping):
        self.commands.append(("hset", key, mapping))
        return self

    def expire(self, key, ttl):
        self.commands.append(("expire", key, ttl))
        return self

    def execute(self):
        for name, key, arg in self.commands:
            if name == "hset":
                self.client.hashes.setdefault(key, {}).update(arg)
            else:
                self.client.ttls[key] = arg
        self.client.executed.append([c[0] for c in self.commands])
        return [True] * len(self.commands)


class FakeRedis:
    def __init__(self):
        self.hashes = {}
        self.ttls = {}
        self.executed = []
        self.transactions = []

    def pipeline(self, transaction=True):
        self.transactions.append(transaction)
        return FakePipeline(self)

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def delete(self, key):
        self.hashes.pop(key, None)
        self.ttls.pop(key, None)


def live(session_id="s1", index=1):
    return LiveState(
        session_id=session_id,
        state=InterviewState.TECHNICAL,
        current_round=RoundType.TECHNICAL,
        question_index=index,
    )


def test_in_memory_store():
    store = InMemoryLiveStateStore()
    store.set(live())

    loaded = store.get("s1")
    assert loaded.state == InterviewState.TECHNICAL
    assert loaded.question_index == 1

    store.clear("s1")
    assert store.get("s1") is None


def test_in_memory_store_expires():
    store = InMemoryLiveStateStore(default_ttl_seconds=0)
    store.set(live())
    time.sleep(0.01)
    assert store.get("s1") is None


def test_noop_store():
    store = NoopLiveStateStore()
    store.set(live())
    store.clear("s1")
    assert store.get("s1") is None


def test_redis_store_writes_hash_with_expiry():
    client = FakeRedis()
    store = RedisLiveStateStore(client, default_ttl_seconds=7200)

    store.set(live(index=2))

    key = "interview:session:s1:state"
    assert client.hashes[key]["state"] == "TECHNICAL"
    assert client.hashes[key]["currentRound"] == "TECHNICAL"
    assert client.hashes[key]["questionIndex"] == "2"
    assert client.ttls[key] == 7200
    assert client.transactions == [True]
    assert client.executed == [["hset", "expire"]]


def test_redis_store_round_trip():
    client = FakeRedis()
    store = RedisLiveStateStore(client, key_prefix="test")

    state = live(index=1)
    store.set(state, ttl_seconds=60)

    assert client.ttls["test:session:s1:state"] == 60
    loaded = store.get("s1")
    assert loaded.state == InterviewState.TECHNICAL
    assert loaded.current_round == RoundType.TECHNICAL
    assert loaded.question_index == 1
    assert loaded.updated_at == state.updated_at

    store.clear("s1")
    assert store.get("s1") is None


def test_redis_store_without_round():
    client = FakeRedis()
    store = RedisLiveStateStore(client)
    store.set(LiveState(session_id="s2", state=InterviewState.INIT))

    loaded = store.get("s2")
    assert loaded.current_round is None
    assert loaded.question_index == 0
