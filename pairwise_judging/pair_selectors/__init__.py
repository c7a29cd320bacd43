"""
Pair selector implementations.

Provides implementations of the PairSelector interface for choosing which
pair of participants a judge sees next.

Available implementations:
- UncertaintyPairSelector: Compares the two least-understood participants
  among pairs not yet asked
"""

from .budget import total_comparisons
from .uncertainty_selector import UncertaintyPairSelector

__all__ = ["UncertaintyPairSelector", "total_comparisons"]
