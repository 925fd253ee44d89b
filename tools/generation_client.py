"""Generation provider interface and its Claude Agent SDK implementation."""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from claude_agent_sdk import (
    query,
    ClaudeAgentOptions,
    ResultMessage,
    AssistantMessage,
)
from claude_agent_sdk.types import StreamEvent

from config.exceptions import ProviderError, ProviderFailureError, RateLimitedError
from config.settings import Settings
from tools.image_client import HttpImageClient, ImagePayload
from tools.retry import is_rate_limit_error

logger = logging.getLogger(__name__)

# Allow launching Agent SDK even when running inside a Claude Code session.
# The SDK checks for this env var and refuses to start if set.
os.environ.pop("CLAUDECODE", None)


@dataclass
class GenerationRequest:
    """One prompt sent to the provider."""
    prompt: str
    system_prompt: Optional[str] = None
    model: Optional[str] = None


@runtime_checkable
class GenerationProvider(Protocol):
    """External text and image generation capability.

    ``generate_stream`` is awaited to open the call; rate limits while
    opening surface from that await, so callers can retry the opening
    alone. The returned iterator then yields text fragments.
    """

    async def generate_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        ...

    async def generate_once(self, request: GenerationRequest) -> str:
        ...

    async def generate_image(self, prompt: str) -> ImagePayload:
        ...


def classify_provider_error(error: BaseException, context: str) -> ProviderError:
    """Translate an arbitrary SDK failure into the provider error taxonomy."""
    if isinstance(error, ProviderError):
        return error
    if is_rate_limit_error(error):
        return RateLimitedError(f"{context}: {error}")
    return ProviderFailureError(f"{context}: {error}")


async def _prepend(first: str, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    yield first
    async for fragment in rest:
        yield fragment


async def _empty() -> AsyncIterator[str]:
    return
    yield  # Make it an async generator


class ClaudeGenerationProvider:
    """Claude Agent SDK text generation plus an HTTP image client.

    Uses claude_agent_sdk.query() for all text interactions.
    Authentication is handled automatically by Claude Code CLI.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        image_client: Optional[HttpImageClient] = None,
    ):
        self.settings = settings or Settings()
        self.image_client = image_client or HttpImageClient.from_settings(self.settings)
        self.total_calls = 0

    def _options(self, request: GenerationRequest, stream: bool) -> ClaudeAgentOptions:
        options_kwargs = {
            "model": request.model or self.settings.llm_model_writing,
            "max_turns": 1,
        }
        if request.system_prompt:
            options_kwargs["system_prompt"] = request.system_prompt
        if stream:
            options_kwargs["include_partial_messages"] = True
        return ClaudeAgentOptions(**options_kwargs)

    async def _fragments(self, request: GenerationRequest) -> AsyncIterator[str]:
        self.total_calls += 1
        logger.debug("Stream call: model=%s, prompt=%d chars", request.model, len(request.prompt))

        streamed = False
        emitted = 0
        try:
            # Exhaust the query() generator fully; leaving it early breaks
            # the anyio cancel scopes it uses internally.
            async for message in query(prompt=request.prompt, options=self._options(request, stream=True)):
                if isinstance(message, StreamEvent):
                    event = message.event or {}
                    delta = event.get("delta") or {}
                    if event.get("type") == "content_block_delta" and delta.get("type") == "text_delta":
                        text = delta.get("text", "")
                        if text:
                            streamed = True
                            emitted += len(text)
                            yield text
                elif isinstance(message, AssistantMessage) and not streamed:
                    for block in message.content:
                        text = getattr(block, "text", None)
                        if text:
                            emitted += len(text)
                            yield text
                elif isinstance(message, ResultMessage):
                    if message.is_error:
                        raise classify_provider_error(
                            RuntimeError(message.result or "unknown error"), "Stream failed",
                        )
                    if not emitted and message.result:
                        emitted += len(message.result)
                        yield message.result
        except ProviderError:
            raise
        except Exception as e:
            raise classify_provider_error(e, "Stream failed") from e

        logger.debug("Stream complete: %d chars", emitted)

    async def generate_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Open a streamed call and return its fragment iterator.

        The first fragment is pulled before returning, so connection-time
        failures (including rate limits) are raised by this await.
        """
        fragments = self._fragments(request)
        try:
            first = await fragments.__anext__()
        except StopAsyncIteration:
            logger.warning("Stream returned no content")
            return _empty()
        return _prepend(first, fragments)

    async def generate_once(self, request: GenerationRequest) -> str:
        """Send a request and return the complete text result.

        Raises:
            RateLimitedError: The provider rejected the call for quota.
            ProviderFailureError: Any other failure.
        """
        self.total_calls += 1
        logger.debug("Single call: model=%s, prompt=%d chars", request.model, len(request.prompt))

        result_text = ""
        try:
            async for message in query(prompt=request.prompt, options=self._options(request, stream=False)):
                if isinstance(message, ResultMessage):
                    if message.is_error:
                        raise classify_provider_error(
                            RuntimeError(message.result or "unknown error"), "Query failed",
                        )
                    result_text = message.result or result_text
                    logger.debug(
                        "Query result: %d chars, cost=$%s", len(result_text), message.total_cost_usd,
                    )
                elif isinstance(message, AssistantMessage) and not result_text:
                    parts = [block.text for block in message.content if getattr(block, "text", None)]
                    if parts:
                        result_text = "".join(parts)
        except ProviderError:
            raise
        except Exception as e:
            raise classify_provider_error(e, "Query failed") from e

        if not result_text:
            logger.warning("Query returned no content")
        return result_text

    async def generate_image(self, prompt: str) -> ImagePayload:
        self.total_calls += 1
        return await asyncio.to_thread(self.image_client.generate, prompt)

    def get_usage_summary(self) -> dict:
        """Return call count statistics."""
        return {"total_calls": self.total_calls}
