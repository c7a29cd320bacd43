"""
Feedback summarizer.

Asks the completion service to boil a judging conversation down to a few
short strengths and weaknesses. Best-effort: any failure yields None.
"""

import json
from collections.abc import Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import TypedDict

from ..exceptions import CompletionError, NoStructuredBlockError
from ..interfaces import TextCompletion
from ..logging_config import get_logger
from ..models import ChatMessage, Feedback
from .prompts import build_summary_request

# Module-level logger
logger = get_logger("summarizer")


class FeedbackPayload(TypedDict):
    strengths: list[str]
    weaknesses: list[str]


_payload_adapter = TypeAdapter(FeedbackPayload)


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Return the first well-formed JSON object found anywhere in ``text``.

    Tolerates markdown fences and prose around the object.

    Raises:
        NoStructuredBlockError: If no JSON object can be decoded
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    raise NoStructuredBlockError("No JSON object found in completion output")


def parse_feedback(text: str) -> Feedback:
    """
    Parse a summarizer reply into Feedback.

    Raises:
        NoStructuredBlockError: If the reply has no valid feedback object
    """
    raw = extract_json_object(text)
    try:
        payload = _payload_adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise NoStructuredBlockError(f"Feedback JSON has the wrong shape: {e}") from e

    return Feedback(
        strengths=[s.strip() for s in payload["strengths"] if s.strip()],
        weaknesses=[w.strip() for w in payload["weaknesses"] if w.strip()],
    )


class FeedbackSummarizer:
    """Turns a conversation transcript into short structured feedback."""

    def __init__(self, completion: TextCompletion):
        self.completion = completion

    async def summarize(self, transcript: Sequence[ChatMessage], project_name: str) -> Feedback | None:
        """
        Summarize a conversation about one project.

        Args:
            transcript: Full conversation, system prompt included
            project_name: Project the feedback is about

        Returns:
            Feedback, or None if the service failed or answered unparseably
        """
        messages = [*transcript, build_summary_request(project_name)]
        try:
            text = await self.completion.complete(messages)
            feedback = parse_feedback(text)
        except CompletionError as e:
            logger.warning(f"Summarization for {project_name!r} failed, feedback not recorded: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected summarization error for {project_name!r}: {type(e).__name__}: {e}")
            return None

        logger.info(
            f"Summarized {project_name!r}: {len(feedback.strengths)} strengths, {len(feedback.weaknesses)} weaknesses"
        )
        return feedback
