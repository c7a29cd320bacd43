"""
Uncertainty pair selector implementation.

Picks the unseen pair whose combined uncertainty is largest.
"""

from collections.abc import Mapping, Sequence

import numpy as np
from typing_extensions import override

from ..interfaces import PairSelector
from ..logging_config import get_logger
from ..models import Comparison, Rating


class UncertaintyPairSelector(PairSelector):
    """
    Greedy uncertainty-based selector.

    Each unordered pair is asked at most once. Among the pairs left, the one
    with the greatest sum of uncertainties wins; ties go to the first pair
    when ids are enumerated in ascending order (outer loop over the first
    id, inner loop over the second), so selection is reproducible.
    """

    def __init__(self) -> None:
        self.logger = get_logger("uncertainty_selector")

    def _asked_mask(self, ids: list[str], history: Sequence[Comparison]) -> np.ndarray:
        """Boolean matrix marking pairs already present in history."""
        index = {participant_id: i for i, participant_id in enumerate(ids)}
        asked = np.zeros((len(ids), len(ids)), dtype=bool)
        for comparison in history:
            i = index.get(comparison.winner_id)
            j = index.get(comparison.loser_id)
            if i is None or j is None:
                continue  # participant no longer in the population
            asked[i, j] = True
            asked[j, i] = True
        return asked

    @override
    def select_next(
        self,
        ratings: Mapping[str, Rating],
        history: Sequence[Comparison],
        budget: int,
    ) -> tuple[str, str] | None:
        """Return the most informative unseen pair, or None when done."""
        if len(history) >= budget:
            self.logger.debug(f"Budget exhausted: {len(history)}/{budget} comparisons")
            return None

        ids = sorted(ratings)
        if len(ids) < 2:
            self.logger.debug("Fewer than two participants, nothing to compare")
            return None

        sigmas = np.array([ratings[participant_id].uncertainty for participant_id in ids], dtype=float)
        scores = sigmas[:, None] + sigmas[None, :]

        # Only i < j, and only pairs never asked
        eligible = np.triu(np.ones_like(scores, dtype=bool), k=1) & ~self._asked_mask(ids, history)
        if not eligible.any():
            self.logger.info(f"All pairs asked after {len(history)} comparisons (budget {budget})")
            return None

        scores[~eligible] = -np.inf
        # argmax returns the first maximum in row-major order
        flat_index = int(np.argmax(scores))
        i, j = divmod(flat_index, len(ids))

        pair = (ids[i], ids[j])
        self.logger.debug(f"Selected pair {pair} with combined uncertainty {scores[i, j]:.3f}")
        return pair
