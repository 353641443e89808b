"""
Round state machine.
Fixed round order and the mapping from rounds to session states.
"""
from typing import List, Optional

from interview_workflow.models.schemas import InterviewState, RoundType


# Round order for progression
ROUND_ORDER: List[RoundType] = [
    RoundType.SCREENING,
    RoundType.TECHNICAL,
    RoundType.SCENARIO,
]

ANSWERABLE_STATES = frozenset({
    InterviewState.SCREENING,
    InterviewState.TECHNICAL,
    InterviewState.SCENARIO,
})


def first_round() -> RoundType:
    return ROUND_ORDER[0]


def state_for_round(round_type: RoundType) -> InterviewState:
    """Round types and mid-interview states share their names."""
    return InterviewState(round_type.value)


def next_round(current: RoundType) -> Optional[RoundType]:
    """
    Get the round that follows `current`.

    Returns:
        The next round, or None if `current` is the last one
    """
    try:
        idx = ROUND_ORDER.index(current)
    except ValueError:
        return None
    if idx < len(ROUND_ORDER) - 1:
        return ROUND_ORDER[idx + 1]
    return None


def can_accept_answer(state: InterviewState) -> bool:
    return state in ANSWERABLE_STATES
