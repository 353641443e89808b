"""
Structured memory accumulation.
Append-only, de-duplicated merge of AI-suggested strengths, weaknesses and notes.
"""
from typing import Iterable, List, Optional

from interview_workflow.models.schemas import MemoryHints, StructuredMemory


def _append_unique(target: List[str], incoming: Optional[Iterable[str]]) -> None:
    if not incoming:
        return
    for item in incoming:
        if item and item not in target:
            target.append(item)


def merge_memory(memory: StructuredMemory, hints: Optional[MemoryHints]) -> StructuredMemory:
    """
    Fold memory hints into session memory in place.

    Each list keeps the order of first appearance; nothing is removed or reordered
    and lists are de-duplicated independently of each other.
    """
    if hints is None:
        return memory

    _append_unique(memory.strengths, hints.strengths)
    _append_unique(memory.weaknesses, hints.weaknesses)
    _append_unique(memory.notes, hints.notes)
    return memory
