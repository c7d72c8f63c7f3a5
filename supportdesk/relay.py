"""
Relay: the core of SupportDesk.
Takes the client's conversation, puts the support persona in front of it,
asks the provider for a streamed completion and re-emits every text fragment
as UTF-8 bytes the moment it arrives.

The relay holds no state between calls. Each call to open_stream() gets its
own provider stream.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from supportdesk.models import Message
from supportdesk.providers.base import BaseProvider

logger = logging.getLogger(__name__)


class Relay:
    """Streaming bridge between the chat client and the completion provider."""

    def __init__(self, provider: BaseProvider, system_prompt: str, model: str):
        self.provider = provider
        self.system_prompt = system_prompt
        self.model = model

    def build_messages(self, history: list[Message]) -> list[dict]:
        """The provider request: persona instruction first, then the conversation as received."""
        system = Message(role="system", content=self.system_prompt)
        return [system.to_dict()] + [m.to_dict() for m in history]

    async def fragments(self, history: list[Message]) -> AsyncIterator[str]:
        """Yield non-empty text fragments from the provider, in arrival order."""
        messages = self.build_messages(history)
        logger.debug(
            "Relaying %d messages to %s (model=%s)",
            len(messages), self.provider.name, self.model,
        )
        async for text in self.provider.stream_text(messages, self.model):
            if text:
                yield text

    async def open_stream(self, history: list[Message]) -> AsyncIterator[bytes]:
        """
        Start the provider stream and wait for its first fragment.

        Failures before the first fragment (unreachable provider, bad key)
        raise ProviderError here, so the caller can fail the whole request.
        Failures after that surface from the returned iterator and abort
        the outgoing stream.
        """
        fragments = self.fragments(history)
        try:
            first = await anext(fragments)
        except StopAsyncIteration:
            first = None
        return self._encode(first, fragments)

    async def _encode(self, first: str | None, fragments: AsyncIterator[str]):
        try:
            if first is not None:
                yield first.encode("utf-8")
            async for text in fragments:
                yield text.encode("utf-8")
        except Exception as e:
            logger.warning("Provider stream aborted mid-reply: %s", e)
            raise
        finally:
            await fragments.aclose()
