"""
Core dataclasses for the pairwise judging system.

Defines Participant, Rating, Comparison, Feedback and ChatMessage models
with validation.
"""

import time
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any, Literal

from .exceptions import ValidationError

ChatRole = Literal["system", "user", "assistant"]

# Accepted spellings for participant fields in stored JSON
_PARTICIPANT_KEYS = {
    "project_name": ("projectName", "project_name"),
    "team_name": ("teamName", "team_name"),
    "team_members": ("teamMembers", "team_members"),
    "demo_url": ("demoUrl", "demo_url"),
    "presentation_url": ("presentationUrl", "presentation_url"),
}


def new_participant_id(taken: Collection[str] = ()) -> str:
    """Generate a submission id of the form ``team-<epoch millis>`` not already in ``taken``."""
    millis = int(time.time() * 1000)
    while f"team-{millis}" in taken:
        millis += 1
    return f"team-{millis}"


@dataclass
class Participant:
    """A submitted project competing for a place on the leaderboard."""

    id: str
    project_name: str
    team_name: str = ""
    team_members: list[str] = field(default_factory=list)
    description: str = ""
    demo_url: str = ""
    presentation_url: str = ""
    seed: bool = False

    def __post_init__(self) -> None:
        """Validate participant data."""
        if not self.id:
            raise ValidationError("id cannot be empty")
        if not self.project_name:
            raise ValidationError("project_name cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys of the participant store."""
        return {
            "id": self.id,
            "projectName": self.project_name,
            "teamName": self.team_name,
            "teamMembers": list(self.team_members),
            "description": self.description,
            "demoUrl": self.demo_url,
            "presentationUrl": self.presentation_url,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        """Build a participant from either camelCase or snake_case keys."""
        values: dict[str, Any] = {}
        for attr, keys in _PARTICIPANT_KEYS.items():
            for key in keys:
                if key in data:
                    values[attr] = data[key]
                    break

        members = values.get("team_members", [])
        if not isinstance(members, list):
            raise ValidationError("teamMembers must be a list")

        seed = data.get("seed", False)
        if not isinstance(seed, bool):
            raise ValidationError(f"seed must be a boolean, got {seed!r}")

        return cls(
            id=str(data.get("id", "")),
            project_name=str(values.get("project_name", "")),
            team_name=str(values.get("team_name", "")),
            team_members=[str(m) for m in members],
            description=str(data.get("description", "")),
            demo_url=str(values.get("demo_url", "")),
            presentation_url=str(values.get("presentation_url", "")),
            seed=seed,
        )


@dataclass(frozen=True)
class Rating:
    """Relative strength estimate plus a decaying uncertainty."""

    strength: float = 0.0
    uncertainty: float = 1.0

    def __post_init__(self) -> None:
        if self.uncertainty < 0:
            raise ValidationError(f"uncertainty cannot be negative, got {self.uncertainty}")


@dataclass(frozen=True)
class Comparison:
    """A single logged judgment: winner beat loser."""

    winner_id: str
    loser_id: str
    timestamp: float = field(default_factory=time.time)
    judge_id: str = "anonymous"

    def __post_init__(self) -> None:
        """Validate comparison data."""
        if not self.winner_id or not self.loser_id:
            raise ValidationError("winner_id and loser_id cannot be empty")
        if self.winner_id == self.loser_id:
            raise ValidationError(f"participant {self.winner_id} cannot be compared with itself")

    @property
    def pair_key(self) -> tuple[str, str]:
        """Order-independent key for the compared pair."""
        a, b = sorted((self.winner_id, self.loser_id))
        return (a, b)

    def to_dict(self) -> dict[str, Any]:
        return {
            "winnerId": self.winner_id,
            "loserId": self.loser_id,
            "timestamp": self.timestamp,
            "judgeId": self.judge_id,
        }


@dataclass
class Feedback:
    """Free-text strengths and weaknesses collected for one participant."""

    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)

    def merged(self, other: "Feedback") -> "Feedback":
        """Concatenate another round of feedback onto this one."""
        return Feedback(
            strengths=[*self.strengths, *other.strengths],
            weaknesses=[*self.weaknesses, *other.weaknesses],
        )

    def deduplicated(self) -> "Feedback":
        """Drop repeated points, keeping first-seen order (for display only)."""
        return Feedback(
            strengths=list(dict.fromkeys(self.strengths)),
            weaknesses=list(dict.fromkeys(self.weaknesses)),
        )

    def is_empty(self) -> bool:
        return not self.strengths and not self.weaknesses


@dataclass(frozen=True)
class ChatMessage:
    """Role-tagged message sent to the text-completion service."""

    role: ChatRole
    content: str

    def __post_init__(self) -> None:
        if self.role not in ("system", "user", "assistant"):
            raise ValidationError(f"Unknown chat role: {self.role}")

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class StoreContents:
    """Everything the durable store knows, as returned by ``load_all``."""

    participants: list[Participant] = field(default_factory=list)
    comparisons: list[Comparison] = field(default_factory=list)
    feedback: dict[str, Feedback] = field(default_factory=dict)
