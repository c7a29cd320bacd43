"""
JSONL storage implementation.

Persists participants, comparisons and feedback to one append-only JSONL log
per record kind. Appending a single line per mutation means concurrent judge
sessions never overwrite each other's records the way a whole-store
read-modify-write would.
"""

import json
import threading
import typing
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from typing_extensions import override

from ..exceptions import ValidationError
from ..interfaces import Storage
from ..logging_config import get_logger
from ..models import Comparison, Feedback, Participant, StoreContents

# Module-level logger
logger = get_logger("jsonl_storage")


class JSONLStore(Storage):
    """
    JSONL-based storage implementation.

    Every write is a single appended line under an in-process lock, so one
    process acts as a single writer. Writers in separate processes are not
    coordinated beyond the atomicity of small appends.
    """

    data_dir: Path
    participants_path: Path
    comparisons_path: Path
    feedback_path: Path
    seed_path: Path | None

    def __init__(self, data_dir: Path | str, seed_path: Path | str | None = None):
        """
        Initialize JSONL store.

        Args:
            data_dir: Directory holding the JSONL logs
            seed_path: JSON file with placeholder participants loaded on first use (optional)
        """
        self.data_dir = Path(data_dir)
        self.participants_path = self.data_dir / "participants.jsonl"
        self.comparisons_path = self.data_dir / "comparisons.jsonl"
        self.feedback_path = self.data_dir / "feedback.jsonl"
        self.seed_path = Path(seed_path) if seed_path is not None else None

        self._lock: threading.Lock = threading.Lock()

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"JSONL store initialized: participants={self.participants_path}, comparisons={self.comparisons_path}, feedback={self.feedback_path}, seed={self.seed_path}"
        )

    def _append(self, path: Path, data: dict[str, Any]) -> None:
        """Append one JSON record as a line."""
        self._append_many(path, [data])

    def _append_many(self, path: Path, records: Sequence[dict[str, Any]]) -> None:
        """Append several JSON records in a single write."""
        lines = "".join(json.dumps(data, ensure_ascii=False) + "\n" for data in records)
        with self._lock:
            with open(path, "a", encoding="utf-8") as f:
                f.write(lines)

    def _read_records(self, path: Path) -> Iterator[dict[str, Any]]:
        """Yield decoded records, skipping corrupted lines."""
        if not path.exists():
            return

        with open(path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)
                    assert isinstance(data, dict), "record must be a JSON object"
                    yield typing.cast(dict[str, Any], data)
                except (json.JSONDecodeError, AssertionError) as e:
                    logger.warning(f"Skipping invalid JSON line {line_number} in {path}: {e}")
                    continue

    def _seed_if_empty(self) -> None:
        """Copy seed participants into the participants log on first use."""
        if self.participants_path.exists() or self.seed_path is None:
            return
        if not self.seed_path.exists():
            logger.warning(f"Seed file does not exist: {self.seed_path}")
            return

        with open(self.seed_path, "r", encoding="utf-8") as f:
            seed_data = json.load(f)
        if not isinstance(seed_data, list):
            raise ValidationError(f"Seed file must contain a list of participants: {self.seed_path}")

        # Validate every record before writing, so a bad seed file writes nothing
        participants = list[Participant]()
        for position, raw in enumerate(seed_data):
            if not isinstance(raw, dict):
                raise ValidationError(f"Seed record {position} in {self.seed_path} is not an object")
            record = dict(raw)
            record.setdefault("seed", True)
            try:
                participants.append(Participant.from_dict(record))
            except ValidationError as e:
                raise ValidationError(f"Invalid seed record {position} in {self.seed_path}: {e}") from e

        self._append_many(self.participants_path, [p.to_dict() for p in participants])
        logger.info(f"Seeded {len(participants)} participants from {self.seed_path}")

    def load_participants(self) -> list[Participant]:
        """Load participants in submission order, last write per id wins."""
        self._seed_if_empty()
        by_id: dict[str, Participant] = {}
        for data in self._read_records(self.participants_path):
            try:
                participant = Participant.from_dict(data)
            except ValidationError as e:
                logger.warning(f"Skipping invalid participant record: {e}")
                continue
            by_id[participant.id] = participant
        return list(by_id.values())

    def load_comparisons(self) -> list[Comparison]:
        """Load comparisons in the order they were appended."""
        comparisons = list[Comparison]()
        for data in self._read_records(self.comparisons_path):
            try:
                assert "winnerId" in data, "Missing required field: winnerId"
                assert "loserId" in data, "Missing required field: loserId"
                timestamp = data.get("timestamp", 0.0)
                assert isinstance(timestamp, (int, float)), "timestamp must be a number"

                comparisons.append(Comparison(
                    winner_id=str(data["winnerId"]),
                    loser_id=str(data["loserId"]),
                    timestamp=float(timestamp),
                    judge_id=str(data.get("judgeId", "anonymous")),
                ))
            except (AssertionError, ValidationError) as e:
                logger.warning(f"Skipping invalid comparison record in {self.comparisons_path}: {e}")
                continue
        return comparisons

    def load_feedback(self) -> dict[str, Feedback]:
        """Fold feedback records per participant by concatenation."""
        feedback = dict[str, Feedback]()
        for data in self._read_records(self.feedback_path):
            participant_id = data.get("participantId")
            strengths = data.get("strengths", [])
            weaknesses = data.get("weaknesses", [])
            if not participant_id or not isinstance(strengths, list) or not isinstance(weaknesses, list):
                logger.warning(f"Skipping invalid feedback record in {self.feedback_path}")
                continue

            entry = Feedback(strengths=[str(s) for s in strengths], weaknesses=[str(w) for w in weaknesses])
            existing = feedback.get(participant_id, Feedback())
            feedback[participant_id] = existing.merged(entry)
        return feedback

    @override
    def load_all(self) -> StoreContents:
        """Load the whole store."""
        contents = StoreContents(
            participants=self.load_participants(),
            comparisons=self.load_comparisons(),
            feedback=self.load_feedback(),
        )
        logger.debug(
            f"Loaded {len(contents.participants)} participants, {len(contents.comparisons)} comparisons, feedback for {len(contents.feedback)} participants"
        )
        return contents

    @override
    def append_comparison(self, comparison: Comparison) -> None:
        """Append one vote to the comparisons log."""
        logger.debug(f"Persisting comparison: {comparison.winner_id} > {comparison.loser_id}")
        self._append(self.comparisons_path, comparison.to_dict())

    @override
    def append_feedback(self, participant_id: str, strengths: Sequence[str], weaknesses: Sequence[str]) -> None:
        """Append one round of feedback; reads merge rounds by concatenation."""
        logger.debug(f"Persisting feedback for {participant_id}: {len(strengths)} strengths, {len(weaknesses)} weaknesses")
        self._append(self.feedback_path, {
            "participantId": participant_id,
            "strengths": list(strengths),
            "weaknesses": list(weaknesses),
        })

    @override
    def add_participant(self, participant: Participant) -> None:
        """Append a submitted participant."""
        self._seed_if_empty()
        logger.info(f"Persisting participant {participant.id} ({participant.project_name})")
        self._append(self.participants_path, participant.to_dict())

    def get_comparison_count(self) -> int:
        """Get number of stored comparisons."""
        if not self.comparisons_path.exists():
            return 0

        count = 0
        with open(self.comparisons_path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    count += 1
        return count
