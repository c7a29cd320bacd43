"""
Incremental decoder for streamed chat-completion responses.

Consumes server-sent-event text in arbitrary chunks and yields the content
deltas it carries. One decoder per request.
"""

import codecs
import json
from dataclasses import dataclass
from typing import Literal

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import NotRequired, TypedDict

from ..logging_config import get_logger

# Module-level logger
logger = get_logger("stream_decoder")

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class Delta(TypedDict):
    content: NotRequired[str | None]


class StreamChoice(TypedDict):
    delta: Delta


class StreamChunk(TypedDict):
    choices: list[StreamChoice]


_chunk_adapter = TypeAdapter(StreamChunk)


@dataclass(frozen=True)
class StreamEvent:
    """A decoded stream event: a text delta, or the end marker."""

    kind: Literal["delta", "done"]
    text: str = ""


class StreamDecoder:
    """
    Line-buffered SSE decoder.

    Feed it raw chunks as they arrive; complete lines are parsed, a partial
    trailing line waits for the next chunk. Malformed payloads are skipped
    individually. After the end marker the decoder ignores further input.
    """

    def __init__(self) -> None:
        self._bytes_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer: str = ""
        self._done: bool = False

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk: str | bytes) -> list[StreamEvent]:
        """Add a chunk and return the events completed by it."""
        if self._done:
            return []

        if isinstance(chunk, bytes):
            chunk = self._bytes_decoder.decode(chunk)
        self._buffer += chunk

        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._parse_lines(lines)

    def close(self) -> list[StreamEvent]:
        """Flush any trailing unterminated line at transport close."""
        if self._done:
            return []

        tail = self._buffer + self._bytes_decoder.decode(b"", final=True)
        self._buffer = ""
        return self._parse_lines(tail.split("\n"))

    def _parse_lines(self, lines: list[str]) -> list[StreamEvent]:
        events = list[StreamEvent]()
        for line in lines:
            event = self._parse_line(line.rstrip("\r"))
            if event is None:
                continue
            events.append(event)
            if event.kind == "done":
                self._done = True
                break
        return events

    def _parse_line(self, line: str) -> StreamEvent | None:
        if not line.startswith(DATA_PREFIX):
            return None  # comments, event names, keep-alives

        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_MARKER:
            return StreamEvent(kind="done")

        try:
            chunk = _chunk_adapter.validate_python(json.loads(payload))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.debug(f"Skipping malformed stream chunk {payload[:100]!r}: {e}")
            return None

        if not chunk["choices"]:
            return None
        content = chunk["choices"][0]["delta"].get("content")
        if not content:
            return None
        return StreamEvent(kind="delta", text=content)
