"""
Chat-completion client.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint (Perplexity by
default) over httpx, either streaming deltas or returning the whole reply.
"""

from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import TypedDict, override

from ..config import AssistantConfig
from ..exceptions import CompletionError
from ..interfaces import TextCompletion
from ..logging_config import get_logger
from ..models import ChatMessage
from .stream_decoder import StreamDecoder

# Module-level logger
logger = get_logger("completion_client")


class ResponseMessage(TypedDict):
    content: str


class ResponseChoice(TypedDict):
    message: ResponseMessage


class CompletionResponse(TypedDict):
    choices: list[ResponseChoice]


_response_adapter = TypeAdapter(CompletionResponse)


class ChatCompletionClient(TextCompletion):
    """
    httpx-backed chat-completion client.

    Each streamed request gets its own StreamDecoder. Cancelling the task
    that iterates ``stream`` closes the underlying response.
    """

    def __init__(self, config: AssistantConfig, client: httpx.AsyncClient | None = None):
        """
        Initialize client.

        Args:
            config: Service URL, key, model and timeout
            client: Pre-built httpx client (optional, mainly for tests)
        """
        self.config: AssistantConfig = config
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=config.timeout)
        self._owns_client: bool = client is None

    async def __aenter__(self) -> "ChatCompletionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def url(self) -> str:
        return f"{self.config.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: Sequence[ChatMessage], stream: bool) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "stream": stream,
        }

    @override
    async def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """Yield text deltas until the end marker or the transport closes."""
        decoder = StreamDecoder()
        logger.info(f"Streaming completion with {len(messages)} messages (model={self.config.model})")

        try:
            async with self._client.stream(
                "POST", self.url, json=self._payload(messages, stream=True), headers=self._headers()
            ) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise CompletionError(f"Completion request failed with status {response.status_code}: {body}")

                async for chunk in response.aiter_bytes():
                    for event in decoder.feed(chunk):
                        if event.kind == "done":
                            logger.debug("Stream finished with end marker")
                            return
                        yield event.text

                for event in decoder.close():
                    if event.kind == "done":
                        return
                    yield event.text
                logger.debug("Stream finished at transport close")
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion transport error: {e}") from e

    @override
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Return the full reply of a non-streaming request."""
        logger.info(f"Requesting completion with {len(messages)} messages (model={self.config.model})")

        try:
            response = await self._client.post(
                self.url, json=self._payload(messages, stream=False), headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion transport error: {e}") from e

        if not response.is_success:
            raise CompletionError(f"Completion request failed with status {response.status_code}: {response.text}")

        try:
            data = _response_adapter.validate_python(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise CompletionError(f"Unexpected completion response: {e}") from e

        if not data["choices"]:
            raise CompletionError("Completion response has no choices")

        content = data["choices"][0]["message"]["content"]
        logger.debug(f"Completion returned {len(content)} chars")
        return content
