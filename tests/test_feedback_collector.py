"""
Tests for FeedbackCollector.

Focus on background delivery to the sink and per-participant supersession.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence

from typing_extensions import override

from pairwise_judging.assistant.feedback_collector import FeedbackCollector
from pairwise_judging.assistant.summarizer import FeedbackSummarizer
from pairwise_judging.interfaces import TextCompletion
from pairwise_judging.models import ChatMessage, Feedback, Participant
from pairwise_judging.session import JudgingSession


class GatedCompletion(TextCompletion):
    """Answers each request once its gate opens, in the order requests arrived."""

    def __init__(self, replies: list[str]):
        self.replies = list(replies)
        self.gates: list[asyncio.Event] = []

    @override
    async def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        yield ""

    @override
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        gate = asyncio.Event()
        self.gates.append(gate)
        reply = self.replies.pop(0)
        await gate.wait()
        return reply


def feedback_json(strength: str) -> str:
    return f'{{"strengths": ["{strength}"], "weaknesses": ["Needs tests"]}}'


ALPHA = Participant(id="alpha", project_name="Alpha")
BETA = Participant(id="beta", project_name="Beta")
TRANSCRIPT = [ChatMessage(role="user", content="Analyze this project.")]


class TestFeedbackCollector:
    """Test FeedbackCollector behavior through public interface."""

    def test_collected_feedback_reaches_sink(self) -> None:
        # Arrange
        received: list[tuple[str, Feedback]] = []

        async def scenario() -> None:
            completion = GatedCompletion([feedback_json("Clean UI")])
            collector = FeedbackCollector(FeedbackSummarizer(completion), sink=lambda pid, fb: received.append((pid, fb)))

            # Act
            task = collector.collect(ALPHA, TRANSCRIPT)
            await asyncio.sleep(0)
            assert not task.done()  # collect returned before the summary exists
            completion.gates[0].set()
            await collector.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert received == [("alpha", Feedback(strengths=["Clean UI"], weaknesses=["Needs tests"]))]

    def test_second_request_for_same_participant_supersedes_first(self) -> None:
        # Arrange
        received: list[tuple[str, Feedback]] = []

        async def scenario() -> None:
            completion = GatedCompletion([feedback_json("Old take"), feedback_json("New take")])
            collector = FeedbackCollector(FeedbackSummarizer(completion), sink=lambda pid, fb: received.append((pid, fb)))

            # Act
            _ = collector.collect(ALPHA, TRANSCRIPT)
            await asyncio.sleep(0)
            _ = collector.collect(ALPHA, TRANSCRIPT)
            await asyncio.sleep(0)
            for gate in completion.gates:
                gate.set()
            await collector.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert [fb.strengths for _, fb in received] == [["New take"]]

    def test_participants_are_summarized_independently(self) -> None:
        # Arrange
        received: dict[str, list[str]] = {}

        async def scenario() -> None:
            completion = GatedCompletion([feedback_json("Alpha point"), feedback_json("Beta point")])
            collector = FeedbackCollector(
                FeedbackSummarizer(completion),
                sink=lambda pid, fb: received.setdefault(pid, []).extend(fb.strengths),
            )

            # Act
            _ = collector.collect(ALPHA, TRANSCRIPT)
            _ = collector.collect(BETA, TRANSCRIPT)
            await asyncio.sleep(0)
            for gate in completion.gates:
                gate.set()
            await collector.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert received == {"alpha": ["Alpha point"], "beta": ["Beta point"]}

    def test_empty_or_failed_summary_is_not_recorded(self) -> None:
        # Arrange
        received: list[str] = []

        async def scenario() -> None:
            completion = GatedCompletion(['{"strengths": [], "weaknesses": []}', "no json here"])
            collector = FeedbackCollector(FeedbackSummarizer(completion), sink=lambda pid, fb: received.append(pid))

            # Act
            _ = collector.collect(ALPHA, TRANSCRIPT)
            _ = collector.collect(BETA, TRANSCRIPT)
            await asyncio.sleep(0)
            for gate in completion.gates:
                gate.set()
            await collector.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert received == []

    def test_feeds_session_feedback(self) -> None:
        """Wired to a session, background summaries land in the session's feedback."""
        # Arrange
        session = JudgingSession([ALPHA, BETA])

        async def scenario() -> None:
            completion = GatedCompletion([feedback_json("Great pitch")])
            collector = FeedbackCollector(FeedbackSummarizer(completion), sink=session.add_feedback)

            # Act
            pair = session.start_judging()
            assert pair is not None
            _ = collector.collect(ALPHA, TRANSCRIPT)
            _ = session.record_vote("alpha")
            await asyncio.sleep(0)
            completion.gates[0].set()
            await collector.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert session.feedback["alpha"].strengths == ["Great pitch"]
        assert len(session.history) == 1
