"""
Simulated judge implementation.

Picks pair winners from latent quality scores with a noise parameter, for
demos and tests.
"""

import random

from typing_extensions import override

from ..interfaces import Judge
from ..models import Participant


class SimulatedJudge(Judge):
    """
    Simulated judge for testing purposes.

    Compares ground-truth quality with added Gaussian noise.
    """

    def __init__(self, ground_truth: dict[str, float], noise: float = 0.1, seed: int | None = None):
        """
        Initialize simulated judge.

        Args:
            ground_truth: Dict mapping participant_id to true quality
            noise: Amount of noise to add (0-1, where 1 = full noise)
            seed: Random seed for reproducible verdicts (optional)
        """
        self.ground_truth = ground_truth
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self.judge_id = "simulated"
        self._random = random.Random(seed)

    def _noisy_score(self, participant_id: str) -> float:
        """Ground truth plus Gaussian noise scaled by its magnitude."""
        score = self.ground_truth.get(participant_id, 0.0)
        if self.noise == 0:
            return score
        return score + self._random.gauss(0, abs(score) * self.noise)

    @override
    def pick_winner(self, first: Participant, second: Participant) -> str:
        """Return the id of whichever participant scores higher after noise; ties go to ``first``."""
        first_score = self._noisy_score(first.id)
        second_score = self._noisy_score(second.id)
        return first.id if first_score >= second_score else second.id

    def get_ground_truth(self) -> dict[str, float]:
        """Get ground truth scores for debugging."""
        return self.ground_truth.copy()
