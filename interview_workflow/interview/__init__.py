# Interview module
from .rounds import RoundScoringConfig, DEFAULT_ROUND_CONFIGS
from .state_machine import ROUND_ORDER, first_round, next_round, state_for_round, can_accept_answer
from .scoring import DecisionEngine, RoundResult
from .orchestrator import InterviewOrchestrator
