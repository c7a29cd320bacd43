"""
Fire-and-forget feedback collection.

After a vote, each participant's conversation is summarized in the
background and the result handed to a sink (normally
``JudgingSession.add_feedback``, which mirrors it to the store). Voting never
waits for it.
"""

import asyncio
from collections.abc import Callable, Sequence

from ..logging_config import get_logger
from ..models import ChatMessage, Feedback, Participant
from .latest_wins import LatestWinsScheduler
from .summarizer import FeedbackSummarizer

# Module-level logger
logger = get_logger("feedback_collector")

FeedbackSink = Callable[[str, Feedback], None]


class FeedbackCollector:
    """Schedules one summarization per participant, latest request wins."""

    def __init__(
        self,
        summarizer: FeedbackSummarizer,
        sink: FeedbackSink,
        scheduler: LatestWinsScheduler | None = None,
    ):
        """
        Initialize collector.

        Args:
            summarizer: Produces Feedback from a transcript
            sink: Receives (participant_id, feedback) for non-empty results
            scheduler: Task registry keyed by participant id (default: a new one)
        """
        self.summarizer = summarizer
        self.sink = sink
        self.scheduler = scheduler or LatestWinsScheduler()

    def collect(self, participant: Participant, transcript: Sequence[ChatMessage]) -> "asyncio.Task[Feedback | None]":
        """Start summarizing in the background and return the task."""
        messages = list(transcript)
        logger.debug(f"Collecting feedback for {participant.id} from {len(messages)} messages")
        return self.scheduler.submit(
            participant.id,
            lambda: self.summarizer.summarize(messages, participant.project_name),
            on_result=lambda feedback: self._deliver(participant.id, feedback),
        )

    def _deliver(self, participant_id: str, feedback: Feedback | None) -> None:
        if feedback is None or feedback.is_empty():
            logger.debug(f"No feedback to record for {participant_id}")
            return
        self.sink(participant_id, feedback)

    async def wait_idle(self) -> None:
        await self.scheduler.wait_idle()
