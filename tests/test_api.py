import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedAIProvider
from interview_workflow.interview.orchestrator import InterviewOrchestrator
from interview_workflow.main import app, get_orchestrator
from interview_workflow.models.schemas import RoundType
from interview_workflow.persistence import (
    InMemoryCandidateRepository,
    InMemoryLiveStateStore,
    InMemorySessionRepository,
)


@pytest.fixture
def api_ai():
    return ScriptedAIProvider(scores={RoundType.SCREENING: 4})


@pytest.fixture
def client(api_ai, decision_engine):
    orchestrator = InterviewOrchestrator(
        candidate_repo=InMemoryCandidateRepository(),
        session_repo=InMemorySessionRepository(),
        ai_provider=api_ai,
        decision_engine=decision_engine,
        live_state_store=InMemoryLiveStateStore(),
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def start(client, **body):
    response = client.post("/interview/start", json={"role": "backend", "level": "mid", **body})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    root = client.get("/").json()
    assert root["status"] == "running"
    assert [r["round_type"] for r in root["rounds"]] == ["SCREENING", "TECHNICAL", "SCENARIO"]
    assert client.get("/healthz").json() == {"ok": True}


def test_start_returns_camel_case(client):
    data = start(client)

    assert data["state"] == "SCREENING"
    assert data["currentRound"] == "SCREENING"
    assert data["activeQuestion"]["roundType"] == "SCREENING"
    assert data["progress"][0]["questionsAsked"] == 1
    assert data["memory"] == {"strengths": [], "weaknesses": [], "notes": []}


def test_start_defaults(client):
    response = client.post("/interview/start", json={})
    assert response.status_code == 201


def test_start_rejects_unknown_level(client):
    response = client.post("/interview/start", json={"role": "backend", "level": "principal"})
    assert response.status_code == 400


def test_answer_flow_and_result(client):
    data = start(client)
    session_id = data["sessionId"]

    response = client.get("/interview/result", params={"sessionId": session_id})
    assert response.status_code == 409

    for _ in range(3):
        response = client.post("/interview/answer", json={
            "sessionId": session_id,
            "answer": "I like building APIs.",
            "questionId": data["activeQuestion"]["id"],
        })
        assert response.status_code == 200
        data = response.json()

    assert data["state"] == "REJECTED"
    assert data["progress"][0]["weightedScore"] == 40

    response = client.get("/interview/result", params={"sessionId": session_id})
    assert response.status_code == 200
    result = response.json()
    assert result["candidateStatus"] == "REJECTED"
    assert result["rounds"][0]["verdict"] == "FAIL"
    assert result["auditLog"][0]["type"] == "SESSION_STARTED"

    response = client.post("/interview/answer", json={"sessionId": session_id, "answer": "again"})
    assert response.status_code == 409


def test_stale_question_id(client):
    session_id = start(client)["sessionId"]
    response = client.post("/interview/answer", json={
        "sessionId": session_id, "answer": "hello", "questionId": "old",
    })
    assert response.status_code == 400


def test_empty_answer(client):
    session_id = start(client)["sessionId"]
    response = client.post("/interview/answer", json={"sessionId": session_id, "answer": ""})
    assert response.status_code == 400


def test_unknown_session(client):
    assert client.get("/interview/state", params={"sessionId": "nope"}).status_code == 404
    assert client.get("/interview/result", params={"sessionId": "nope"}).status_code == 404
    assert client.get("/interview/live", params={"sessionId": "nope"}).status_code == 404
    response = client.post("/interview/answer", json={"sessionId": "nope", "answer": "hi"})
    assert response.status_code == 404


def test_state_and_live(client):
    session_id = start(client)["sessionId"]

    state = client.get("/interview/state", params={"sessionId": session_id}).json()
    assert state["sessionId"] == session_id

    live = client.get("/interview/live", params={"sessionId": session_id}).json()
    assert live["state"] == "SCREENING"
    assert live["questionIndex"] == 0


def test_evaluator_unreachable(client, api_ai):
    session_id = start(client)["sessionId"]
    api_ai.fail_evaluation = True

    response = client.post("/interview/answer", json={"sessionId": session_id, "answer": "hi"})
    assert response.status_code == 502
