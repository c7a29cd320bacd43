"""
Judging session for one judge.

Owns the judge's private ratings, comparison log and current pair, and drives
the select/vote/update loop. Votes, feedback and submissions are mirrored to
the shared store on a best-effort basis.
"""

import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .exceptions import InvalidStateError, UnknownParticipantError, ValidationError
from .interfaces import PairSelector, Storage
from .logging_config import get_logger
from .models import Comparison, Feedback, Participant, Rating
from .pair_selectors import UncertaintyPairSelector, total_comparisons
from .rankers.aggregate import RankedEntry, rank
from .rankers.bradley_terry import update_ratings


class SessionPhase(str, Enum):
    """Lifecycle of a judging session."""

    DASHBOARD = "dashboard"
    JUDGING = "judging"
    LEADERBOARD = "leaderboard"


class JudgingSession:
    """
    Single-judge session state machine: dashboard -> judging -> leaderboard.

    Operations must be called sequentially by the one judge driving the
    session; there is no locking. Ratings are never mutated in place: each
    vote builds a new ratings mapping and the session swaps it in.
    """

    def __init__(
        self,
        participants: Sequence[Participant],
        storage: Storage | None = None,
        selector: PairSelector | None = None,
        judge_id: str = "anonymous",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize session.

        Args:
            participants: Visible population to judge
            storage: Shared store to mirror votes into (optional)
            selector: Pair selection policy (default: UncertaintyPairSelector)
            judge_id: Identifier recorded on every comparison
            clock: Source of wall-clock timestamps for comparisons
        """
        ids = [p.id for p in participants]
        if len(set(ids)) != len(ids):
            raise ValidationError("participant ids must be unique")

        self.storage: Storage | None = storage
        self.selector: PairSelector = selector or UncertaintyPairSelector()
        self.judge_id: str = judge_id
        self.clock: Callable[[], float] = clock

        self._participants: list[Participant] = list(participants)
        self._ratings: dict[str, Rating] = {p.id: Rating() for p in participants}
        self._history: list[Comparison] = []
        self._feedback: dict[str, Feedback] = {}
        self._current_pair: tuple[str, str] | None = None
        self._phase: SessionPhase = SessionPhase.DASHBOARD
        self._budget: int = total_comparisons(len(self._participants))

        self.logger: Logger = get_logger("session")

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def current_pair(self) -> tuple[str, str] | None:
        return self._current_pair

    @property
    def ratings(self) -> dict[str, Rating]:
        return dict(self._ratings)

    @property
    def history(self) -> tuple[Comparison, ...]:
        return tuple(self._history)

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants)

    @property
    def feedback(self) -> dict[str, Feedback]:
        return dict(self._feedback)

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def progress(self) -> tuple[int, int]:
        """(comparisons made, comparisons allowed)."""
        return len(self._history), self._budget

    def get_participant(self, participant_id: str) -> Participant:
        for participant in self._participants:
            if participant.id == participant_id:
                return participant
        raise UnknownParticipantError(f"Unknown participant: {participant_id}")

    def start_judging(self) -> tuple[str, str] | None:
        """
        Enter judging with the first pair, or go straight to the leaderboard.

        Returns:
            The first pair to compare, or None when there is nothing to judge
        """
        if self._phase != SessionPhase.DASHBOARD:
            raise InvalidStateError(f"Judging can only start from the dashboard, session is in {self._phase.value}")

        self._budget = total_comparisons(len(self._participants))
        self.logger.info(f"Starting judging for {len(self._participants)} participants with budget {self._budget}")

        pair = self.selector.select_next(self._ratings, self._history, self._budget)
        self._advance(pair)
        return pair

    def record_vote(self, winner_id: str) -> tuple[str, str] | None:
        """
        Record the judge's pick for the current pair and move on.

        Args:
            winner_id: Id of the preferred member of the current pair

        Returns:
            The next pair, or None when judging is over
        """
        if self._current_pair is None:
            raise InvalidStateError("No pair is being judged")
        if winner_id not in self._current_pair:
            raise InvalidStateError(f"{winner_id} is not part of the current pair {self._current_pair}")

        first, second = self._current_pair
        loser_id = second if winner_id == first else first

        for participant_id in (winner_id, loser_id):
            if participant_id not in self._ratings:
                raise UnknownParticipantError(f"No rating for participant {participant_id}")

        winner, loser = self._ratings[winner_id], self._ratings[loser_id]
        new_winner, new_loser = update_ratings(winner, loser)
        self._ratings = {**self._ratings, winner_id: new_winner, loser_id: new_loser}

        comparison = Comparison(
            winner_id=winner_id,
            loser_id=loser_id,
            timestamp=self.clock(),
            judge_id=self.judge_id,
        )
        self._history.append(comparison)

        self.logger.info(f"Vote {len(self._history)}/{self._budget}: {winner_id} beat {loser_id}")
        self.logger.info(f"  {winner_id}: {winner.strength:.3f}->{new_winner.strength:.3f} (σ: {winner.uncertainty:.3f}->{new_winner.uncertainty:.3f})")
        self.logger.info(f"  {loser_id}: {loser.strength:.3f}->{new_loser.strength:.3f} (σ: {loser.uncertainty:.3f}->{new_loser.uncertainty:.3f})")

        self._persist("vote", lambda storage: storage.append_comparison(comparison))

        pair = self.selector.select_next(self._ratings, self._history, self._budget)
        self._advance(pair)
        return pair

    def add_participant(self, participant: Participant) -> None:
        """Register a late submission with a fresh prior."""
        if participant.id in self._ratings:
            raise ValidationError(f"Participant {participant.id} already exists")

        self._participants.append(participant)
        self._ratings = {**self._ratings, participant.id: Rating()}
        self.logger.info(f"Added participant {participant.id} ({participant.project_name})")

        self._persist("participant", lambda storage: storage.add_participant(participant))

    def add_feedback(self, participant_id: str, feedback: Feedback) -> None:
        """Append a round of feedback for a participant."""
        existing = self._feedback.get(participant_id, Feedback())
        self._feedback[participant_id] = existing.merged(feedback)

        self._persist(
            "feedback",
            lambda storage: storage.append_feedback(participant_id, feedback.strengths, feedback.weaknesses),
        )

    def ranked(self) -> list[RankedEntry]:
        """Session leaderboard from this judge's votes only."""
        return rank(self._ratings, self._participants)

    def _advance(self, pair: tuple[str, str] | None) -> None:
        """Set the next pair and phase."""
        self._current_pair = pair
        if pair is None:
            self._phase = SessionPhase.LEADERBOARD
            self.logger.info(f"Judging complete after {len(self._history)} comparisons")
        else:
            self._phase = SessionPhase.JUDGING
            self.logger.debug(f"Next pair: {pair[0]} vs {pair[1]}")

    def _persist(self, what: str, write: Callable[[Storage], None]) -> None:
        """Best-effort write to the shared store; failures never reach the judge."""
        if self.storage is None:
            return
        try:
            write(self.storage)
        except Exception as e:
            self.logger.warning(f"Failed to persist {what}, continuing with in-memory state: {e}")
