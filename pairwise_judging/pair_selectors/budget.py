"""
Comparison budget.

Roughly three comparisons of coverage per participant, so judging time grows
linearly with the population instead of with every possible pair.
"""


def total_comparisons(n: int) -> int:
    """Return ceil(3n / 2), the number of comparisons allowed for n participants."""
    if n < 0:
        raise ValueError(f"population size cannot be negative, got {n}")
    return (3 * n + 1) // 2
