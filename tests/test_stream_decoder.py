"""
Tests for StreamDecoder.

Focus on chunk boundaries, the end marker and malformed payloads.
"""

import json

from pairwise_judging.assistant.stream_decoder import StreamDecoder, StreamEvent


def data_line(content: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n"


def texts(events: list[StreamEvent]) -> list[str]:
    return [e.text for e in events if e.kind == "delta"]


class TestStreamDecoder:
    """Test StreamDecoder behavior through public interface."""

    def test_decodes_complete_lines(self) -> None:
        # Arrange
        decoder = StreamDecoder()

        # Act
        events = decoder.feed(data_line("Hello") + data_line(", world"))

        # Assert
        assert texts(events) == ["Hello", ", world"]
        assert not decoder.done

    def test_line_split_across_chunks(self) -> None:
        """A partial line waits for the rest of it."""
        # Arrange
        decoder = StreamDecoder()
        line = data_line("split")
        middle = len(line) // 2

        # Act
        first = decoder.feed(line[:middle])
        second = decoder.feed(line[middle:])

        # Assert
        assert first == []
        assert texts(second) == ["split"]

    def test_multibyte_character_split_across_byte_chunks(self) -> None:
        # Arrange
        decoder = StreamDecoder()
        raw = ("data: " + json.dumps({"choices": [{"delta": {"content": "café ☕"}}]}, ensure_ascii=False) + "\n").encode()
        cut = raw.index("☕".encode()) + 1

        # Act
        events = decoder.feed(raw[:cut]) + decoder.feed(raw[cut:])

        # Assert
        assert texts(events) == ["café ☕"]

    def test_done_marker_ends_stream(self) -> None:
        """Nothing after the end marker is emitted."""
        # Arrange
        decoder = StreamDecoder()

        # Act
        events = decoder.feed(data_line("a") + "data: [DONE]\n" + data_line("late"))
        after = decoder.feed(data_line("later"))

        # Assert
        assert [e.kind for e in events] == ["delta", "done"]
        assert decoder.done
        assert after == []
        assert decoder.close() == []

    def test_malformed_chunks_are_skipped(self) -> None:
        """A bad payload drops only itself."""
        # Arrange
        decoder = StreamDecoder()
        stream = (
            data_line("one")
            + "data: {not json\n"
            + 'data: {"unexpected": true}\n'
            + 'data: {"choices": []}\n'
            + data_line("two")
        )

        # Act
        events = decoder.feed(stream)

        # Assert
        assert texts(events) == ["one", "two"]

    def test_non_data_and_empty_content_lines_ignored(self) -> None:
        # Arrange
        decoder = StreamDecoder()
        stream = (
            ": keep-alive\n"
            + "event: message\n"
            + "\n"
            + 'data: {"choices": [{"delta": {"role": "assistant"}}]}\n'
            + data_line("")
            + data_line("text")
        )

        # Act
        events = decoder.feed(stream)

        # Assert
        assert texts(events) == ["text"]

    def test_crlf_line_endings(self) -> None:
        decoder = StreamDecoder()
        events = decoder.feed(data_line("crlf").replace("\n", "\r\n"))
        assert texts(events) == ["crlf"]

    def test_close_flushes_unterminated_last_line(self) -> None:
        # Arrange
        decoder = StreamDecoder()
        pending = decoder.feed(data_line("tail").rstrip("\n"))

        # Act
        flushed = decoder.close()

        # Assert
        assert pending == []
        assert texts(flushed) == ["tail"]
