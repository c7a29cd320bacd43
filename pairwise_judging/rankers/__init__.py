"""
Ranker implementations.

Provides the online rating update and the aggregate 0-100 leaderboard
built on top of it.

Available implementations:
- bradley_terry: Logistic strength update with decaying uncertainty
- aggregate: Normalized session and pooled cross-judge rankings
"""

from .aggregate import PooledLeaderboard, RankedEntry, normalize, pooled_ranking, rank
from .bradley_terry import K, UNCERTAINTY_DECAY, replay, update_ratings, win_probability

__all__ = [
    "K",
    "UNCERTAINTY_DECAY",
    "PooledLeaderboard",
    "RankedEntry",
    "normalize",
    "pooled_ranking",
    "rank",
    "replay",
    "update_ratings",
    "win_probability",
]
