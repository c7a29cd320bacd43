"""
Pairwise Judging - Adaptive Pairwise Rating for Hackathon Judging

Ranks submissions from head-to-head judge votes using a lightweight logistic
rating update, uncertainty-driven pair selection under a linear comparison
budget, and a pooled cross-judge leaderboard.
"""

from .interfaces import Judge, PairSelector, Storage, TextCompletion
from .models import ChatMessage, Comparison, Feedback, Participant, Rating, StoreContents
from .session import JudgingSession, SessionPhase

__version__ = "0.1.0"
__all__ = [
    "ChatMessage",
    "Comparison",
    "Feedback",
    "Participant",
    "Rating",
    "StoreContents",
    "Judge",
    "PairSelector",
    "Storage",
    "TextCompletion",
    "JudgingSession",
    "SessionPhase",
]
