"""
Bradley-Terry style online rating update.

A deliberately simple logistic update: the winner gains K times how surprised
we were, the loser loses K times how expected the win was, and both sides'
uncertainty decays because they have now been compared.
"""

from collections.abc import Iterable, Mapping

import numpy as np

from ..logging_config import get_logger
from ..models import Comparison, Rating

# Module-level logger
logger = get_logger("bradley_terry")

K = 0.4
UNCERTAINTY_DECAY = 0.9


def win_probability(strength: float, opponent_strength: float) -> float:
    """
    Logistic probability that ``strength`` beats ``opponent_strength``.

    Equal to exp(a) / (exp(a) + exp(b)), written as 1 / (1 + exp(b - a)) so
    that large unclamped strengths saturate to 0 or 1 instead of overflowing.
    """
    with np.errstate(over="ignore"):
        return float(1.0 / (1.0 + np.exp(opponent_strength - strength)))


def update_ratings(winner: Rating, loser: Rating) -> tuple[Rating, Rating]:
    """
    Apply one win/loss outcome.

    Args:
        winner: Rating of the participant that won
        loser: Rating of the participant that lost

    Returns:
        (new winner rating, new loser rating)
    """
    p_win = win_probability(winner.strength, loser.strength)

    new_winner = Rating(
        strength=winner.strength + K * (1.0 - p_win),
        uncertainty=winner.uncertainty * UNCERTAINTY_DECAY,
    )
    new_loser = Rating(
        strength=loser.strength - K * p_win,
        uncertainty=loser.uncertainty * UNCERTAINTY_DECAY,
    )
    return new_winner, new_loser


def initial_ratings(participant_ids: Iterable[str]) -> dict[str, Rating]:
    """Fresh prior (strength 0, uncertainty 1) for every id."""
    return {participant_id: Rating() for participant_id in participant_ids}


def apply_comparison(ratings: Mapping[str, Rating], comparison: Comparison) -> dict[str, Rating]:
    """Return a copy of ``ratings`` with one comparison applied."""
    winner = ratings[comparison.winner_id]
    loser = ratings[comparison.loser_id]
    new_winner, new_loser = update_ratings(winner, loser)

    logger.debug(
        f"{comparison.winner_id} beat {comparison.loser_id}: "
        f"{winner.strength:.3f}->{new_winner.strength:.3f}, "
        f"{loser.strength:.3f}->{new_loser.strength:.3f}"
    )

    updated = dict(ratings)
    updated[comparison.winner_id] = new_winner
    updated[comparison.loser_id] = new_loser
    return updated


def replay(comparisons: Iterable[Comparison], participant_ids: Iterable[str]) -> dict[str, Rating]:
    """
    Rebuild ratings from scratch by replaying comparisons in the given order.

    The update is order dependent, so callers decide the order (normally
    chronological). Comparisons involving an id outside ``participant_ids``
    are skipped.
    """
    ratings = initial_ratings(participant_ids)
    skipped = 0
    for comparison in comparisons:
        if comparison.winner_id not in ratings or comparison.loser_id not in ratings:
            skipped += 1
            continue
        ratings = apply_comparison(ratings, comparison)

    if skipped:
        logger.debug(f"Replay skipped {skipped} comparisons with participants outside the population")
    return ratings
