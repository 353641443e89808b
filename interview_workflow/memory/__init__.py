"""
Memory module for the interview workflow.
Carries the candidate's strengths, weaknesses and notes across rounds.
"""

from .accumulator import merge_memory

__all__ = ['merge_memory']
