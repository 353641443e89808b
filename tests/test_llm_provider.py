import json

import pytest
import requests

from interview_workflow.errors import ValidationError
from interview_workflow.interview.agents import LLMAIProvider
from interview_workflow.interview.rounds import DEFAULT_ROUND_CONFIGS
from interview_workflow.llm.client import LLMClient
from interview_workflow.llm.prompts import FALLBACK_QUESTIONS
from interview_workflow.models.schemas import (
    ProfileRequest,
    QuestionContext,
    RoundType,
    SeniorityLevel,
    StructuredMemory,
    TranscriptEntry,
)
from interview_workflow.utils.config import LLMConfig


class FakeResponse:
    def __init__(self, content):
        self.content = content

    def raise_for_status(self):
        pass

    def json(self):
        return {"content": self.content, "tokens_predicted": 10}


class FakeSession:
    """Replays completions in order and records every payload."""

    def __init__(self, *completions):
        self.completions = list(completions)
        self.payloads = []

    def post(self, url, json=None, timeout=None):
        self.payloads.append(json)
        completion = self.completions.pop(0)
        if isinstance(completion, Exception):
            raise completion
        return FakeResponse(completion)


def provider(*completions, max_retries=0):
    session = FakeSession(*completions)
    client = LLMClient(LLMConfig(base_url="http://llm.local", max_retries=max_retries), session=session)
    return LLMAIProvider(client, DEFAULT_ROUND_CONFIGS), session


def question_context(asked=None):
    return QuestionContext(
        round_type=RoundType.TECHNICAL,
        role="backend",
        level=SeniorityLevel.MID,
        memory=StructuredMemory(strengths=["Clear"]),
        asked_questions=asked or [],
        question_index=1,
    )


def test_client_requires_base_url():
    with pytest.raises(ValueError):
        LLMClient(LLMConfig(base_url=None))


def test_generate_question_is_cleaned():
    ai, session = provider("<think>they want caching</think>Question: **How would you cache user sessions**")

    question = ai.generate_question(question_context())

    assert question.prompt == "How would you cache user sessions?"
    prompt = session.payloads[0]["prompt"]
    assert "ROUND: TECHNICAL (question 2)" in prompt
    assert "Strengths: Clear" in prompt


def test_unusable_question_falls_back_to_bank():
    ai, _ = provider("Let me think about what to ask")
    asked = FALLBACK_QUESTIONS["TECHNICAL"][:3]

    question = ai.generate_question(question_context(asked=asked))

    assert question.prompt == FALLBACK_QUESTIONS["TECHNICAL"][3]


def test_evaluation_keeps_raw_json():
    payload = {
        "accuracy": 8, "completeness": 6, "clarity": 7,
        "summary": "Solid answer.",
        "memoryHints": {"strengths": ["Knows caching"], "notes": ["Mentioned redis"]},
    }
    ai, session = provider("```json\n" + json.dumps(payload) + "\n```")

    result = ai.evaluate_answer(RoundType.TECHNICAL, "How?", "With redis.", StructuredMemory())

    assert result.raw_scores == payload
    assert result.reasoning_text == "Solid answer."
    assert result.memory_hints.strengths == ["Knows caching"]
    assert result.memory_hints.weaknesses is None
    assert '"accuracy": <integer 0-10>' in session.payloads[0]["prompt"]


def test_evaluation_tolerates_trailing_comma():
    ai, _ = provider('{"accuracy": 5, "completeness": 5, "clarity": 5, "summary": "ok",}')
    result = ai.evaluate_answer(RoundType.TECHNICAL, "q", "a", StructuredMemory())
    assert result.raw_scores["accuracy"] == 5


@pytest.mark.parametrize("completion", [
    "I cannot score this.",
    '{"accuracy": 5, "summary": 3}',
    '{"accuracy": 5, "memoryHints": {"mood": ["happy"]}}',
])
def test_malformed_evaluation(completion):
    ai, _ = provider(completion)
    with pytest.raises(ValidationError):
        ai.evaluate_answer(RoundType.TECHNICAL, "q", "a", StructuredMemory())


def test_unreachable_server_raises_connection_error():
    ai, session = provider(
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.ConnectionError("refused"),
        max_retries=1,
    )
    with pytest.raises(ConnectionError):
        ai.evaluate_answer(RoundType.TECHNICAL, "q", "a", StructuredMemory())
    assert len(session.payloads) == 2


def test_analyze_resume():
    ai, _ = provider(json.dumps({
        "experience": ["Backend engineer at Acme"],
        "skills": ["python", "postgresql"],
        "education": ["BSc"],
        "summary": "Experienced backend engineer.",
    }))

    analysis = ai.analyze_resume("resume text", "backend")

    assert analysis.skills == ["python", "postgresql"]
    assert analysis.summary == "Experienced backend engineer."


def test_generate_profile():
    ai, session = provider("<think>hmm</think> Confident mid-level backend engineer.")

    profile = ai.generate_profile(ProfileRequest(
        role="backend",
        level=SeniorityLevel.MID,
        transcript=[TranscriptEntry(question="Why us?", answer="Great team.")],
    ))

    assert profile == "Confident mid-level backend engineer."
    assert "Q: Why us?\nA: Great team." in session.payloads[0]["prompt"]
