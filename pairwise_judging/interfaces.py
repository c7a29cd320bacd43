"""
Abstract base classes defining the interfaces for the pairwise judging system.

Rating, selection and session state are synchronous; only the
text-completion collaborator is async.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence

from .models import ChatMessage, Comparison, Participant, Rating, StoreContents


class Storage(ABC):
    """Interface for the durable cross-judge store."""

    @abstractmethod
    def load_all(self) -> StoreContents:
        """Return every participant, comparison and feedback entry."""
        pass

    @abstractmethod
    def append_comparison(self, comparison: Comparison) -> None:
        """Persist one judged comparison."""
        pass

    @abstractmethod
    def append_feedback(self, participant_id: str, strengths: Sequence[str], weaknesses: Sequence[str]) -> None:
        """
        Persist a round of feedback for a participant.

        Merges by concatenation with what is already stored, never replaces.
        """
        pass

    @abstractmethod
    def add_participant(self, participant: Participant) -> None:
        """Persist a newly submitted participant."""
        pass


class PairSelector(ABC):
    """Interface for choosing the next pair to compare."""

    @abstractmethod
    def select_next(
        self,
        ratings: Mapping[str, Rating],
        history: Sequence[Comparison],
        budget: int,
    ) -> tuple[str, str] | None:
        """
        Select the next pair of participant IDs.

        Args:
            ratings: Current rating for every participant in the population
            history: Comparisons already made in this session
            budget: Total number of comparisons allowed

        Returns:
            Pair of participant IDs, or None when judging is over
        """
        pass


class Judge(ABC):
    """Interface for something that picks a winner between two participants."""

    @abstractmethod
    def pick_winner(self, first: Participant, second: Participant) -> str:
        """Return the id of the preferred participant."""
        pass


class TextCompletion(ABC):
    """Interface for the chat-style text-completion service."""

    @abstractmethod
    def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """Yield incremental text deltas until the service signals the end."""
        pass

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Return the full response text in one piece."""
        pass
