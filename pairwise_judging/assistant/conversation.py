"""
Per-project assistant conversation.

Keeps the transcript a judge builds while asking about one project, so it can
later be summarized into feedback.
"""

from collections.abc import Callable

from ..interfaces import TextCompletion
from ..logging_config import get_logger
from ..models import ChatMessage, Participant
from .prompts import INITIAL_PROMPT, build_system_message

# Module-level logger
logger = get_logger("conversation")


class AssistantConversation:
    """Transcript plus streaming question/answer turns for one participant."""

    def __init__(self, participant: Participant, completion: TextCompletion):
        self.participant = participant
        self.completion = completion
        self._messages: list[ChatMessage] = [
            build_system_message(participant),
            ChatMessage(role="user", content=INITIAL_PROMPT),
        ]
        self._opened: bool = False

    def transcript(self) -> list[ChatMessage]:
        """Full message list, system prompt included."""
        return list(self._messages)

    async def ask(
        self,
        question: str | None = None,
        on_delta: Callable[[str], None] | None = None,
    ) -> str:
        """
        Stream the assistant's reply and append the turn to the transcript.

        The first call without a question answers the opening analysis
        prompt. The transcript only changes once the reply is complete.

        Args:
            question: Judge's follow-up question
            on_delta: Called with every text delta as it arrives

        Returns:
            The complete reply
        """
        request = list(self._messages)
        if question is not None:
            request.append(ChatMessage(role="user", content=question))
        elif self._opened:
            raise ValueError("question is required after the opening analysis")

        parts = list[str]()
        async for delta in self.completion.stream(request):
            parts.append(delta)
            if on_delta is not None:
                on_delta(delta)

        reply = "".join(parts)
        self._messages = [*request, ChatMessage(role="assistant", content=reply)]
        self._opened = True
        logger.debug(f"Conversation for {self.participant.id}: {len(self._messages)} messages")
        return reply
