"""
Judging assistant.

Streaming chat-completion client, per-project conversations, and background
summarization of conversations into strengths/weaknesses feedback.
"""

from .completion_client import ChatCompletionClient
from .conversation import AssistantConversation
from .feedback_collector import FeedbackCollector
from .latest_wins import LatestWinsScheduler
from .stream_decoder import StreamDecoder, StreamEvent
from .summarizer import FeedbackSummarizer, extract_json_object, parse_feedback

__all__ = [
    "AssistantConversation",
    "ChatCompletionClient",
    "FeedbackCollector",
    "FeedbackSummarizer",
    "LatestWinsScheduler",
    "StreamDecoder",
    "StreamEvent",
    "extract_json_object",
    "parse_feedback",
]
