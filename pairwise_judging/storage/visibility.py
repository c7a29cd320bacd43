"""
Visibility rule for the judged population.

Real submissions are shown alone once there are enough of them; until then
seed participants pad the list up to the minimum.
"""

from collections.abc import Sequence

from ..models import Participant

MIN_VISIBLE_PARTICIPANTS = 10


def visible_participants(
    participants: Sequence[Participant],
    min_visible: int = MIN_VISIBLE_PARTICIPANTS,
) -> list[Participant]:
    """Return the participants judges should see, in storage order."""
    real = [p for p in participants if not p.seed]
    if len(real) >= min_visible:
        return real

    seeds = [p for p in participants if p.seed]
    needed = min_visible - len(real)
    return real + seeds[:needed]
