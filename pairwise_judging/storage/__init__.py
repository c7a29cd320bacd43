"""
Storage implementations.

Provides implementations of the Storage interface for persisting
participants, votes and feedback shared by every judge.

Available implementations:
- JSONLStore: Append-only JSONL log per record kind, seeded from a JSON file
"""

from .jsonl_storage import JSONLStore
from .visibility import MIN_VISIBLE_PARTICIPANTS, visible_participants

__all__ = ["JSONLStore", "MIN_VISIBLE_PARTICIPANTS", "visible_participants"]
