"""
Aggregate ranking.

Turns raw strengths into 0-100 display scores, both for one judge's session
and for the pooled view that replays every judge's votes.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..exceptions import UnknownParticipantError
from ..logging_config import get_logger
from ..models import Feedback, Participant, Rating, StoreContents
from ..storage.visibility import MIN_VISIBLE_PARTICIPANTS, visible_participants
from .bradley_terry import replay

# Module-level logger
logger = get_logger("aggregate")

# Score given to everyone when all strengths are equal
UNIFORM_SCORE = 50


@dataclass
class RankedEntry:
    """A participant with its normalized score."""

    participant: Participant
    score: int
    strength: float
    uncertainty: float


@dataclass
class PooledLeaderboard:
    """Cross-judge leaderboard rebuilt from the durable store."""

    entries: list[RankedEntry]
    total_votes: int
    feedback: dict[str, Feedback] = field(default_factory=dict)


def normalize(strength: float, all_strengths: Sequence[float]) -> int:
    """
    Map a strength onto 0..100 relative to the population's min and max.

    Rounds half up. When every strength is equal the population is
    indistinguishable and everyone gets UNIFORM_SCORE.
    """
    low = min(all_strengths)
    high = max(all_strengths)
    if high == low:
        return UNIFORM_SCORE
    return math.floor((strength - low) / (high - low) * 100 + 0.5)


def rank(ratings: Mapping[str, Rating], participants: Sequence[Participant]) -> list[RankedEntry]:
    """
    Rank participants by normalized score, highest first.

    Normalization runs over the given participants only; ties keep input order.
    """
    if not participants:
        return []

    try:
        population = [(p, ratings[p.id]) for p in participants]
    except KeyError as e:
        raise UnknownParticipantError(f"No rating for participant {e.args[0]}") from e

    strengths = [rating.strength for _, rating in population]
    entries = [
        RankedEntry(
            participant=participant,
            score=normalize(rating.strength, strengths),
            strength=rating.strength,
            uncertainty=rating.uncertainty,
        )
        for participant, rating in population
    ]
    entries.sort(key=lambda entry: entry.score, reverse=True)
    return entries


def pooled_ranking(contents: StoreContents, min_visible: int = MIN_VISIBLE_PARTICIPANTS) -> PooledLeaderboard:
    """
    Rank the visible population using every judge's persisted votes.

    Ratings are rebuilt from fresh priors on each call by replaying votes in
    timestamp order; nothing is cached between calls.
    """
    visible = visible_participants(contents.participants, min_visible)
    chronological = sorted(contents.comparisons, key=lambda c: c.timestamp)
    ratings = replay(chronological, [p.id for p in visible])

    logger.info(f"Pooled ranking over {len(visible)} participants from {len(chronological)} votes")
    return PooledLeaderboard(
        entries=rank(ratings, visible),
        total_votes=len(contents.comparisons),
        feedback=dict(contents.feedback),
    )
