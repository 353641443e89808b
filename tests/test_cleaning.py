import pytest

from interview_workflow.utils.cleaning import ResponseCleaner


def test_strip_reasoning():
    assert ResponseCleaner.strip_reasoning("<think>plan</think>Hello") == "Hello"
    assert ResponseCleaner.strip_reasoning("Hello <think>unfinished") == "Hello"
    assert ResponseCleaner.strip_reasoning("") == ""


@pytest.mark.parametrize("raw,expected", [
    ('"What databases have you used?"', "What databases have you used?"),
    ("Interviewer: describe your last project", "describe your last project?"),
    ("Share a recent success", "Share a recent success."),
    ("Okay, the candidate knows Python. Which Python frameworks do you prefer?",
     "Which Python frameworks do you prefer?"),
])
def test_clean_question(raw, expected):
    assert ResponseCleaner.clean_question(raw) == (expected, True)


def test_reasoning_only_is_invalid():
    assert ResponseCleaner.clean_question("<think>I should ask about SQL</think>") == ("", False)
    assert ResponseCleaner.clean_question("Let me think.") == ("", False)


def test_clean_json_response():
    assert ResponseCleaner.clean_json_response('Sure! ```json\n{"a": {"b": 1}}\n```') == '{"a": {"b": 1}}'
    assert ResponseCleaner.clean_json_response("no json here") == ""
