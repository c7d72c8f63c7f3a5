"""
Base provider abstraction.
A provider turns a list of OpenAI-format messages into a stream of text
fragments. The relay only ever talks to this interface.
"""

from __future__ import annotations

import abc
from collections.abc import AsyncIterator


class BaseProvider(abc.ABC):
    """
    Abstract base for completion providers.
    Each provider knows how to stream a chat completion and report health.
    """

    def __init__(self, name: str, url: str, timeout: int = 120):
        self.name = name
        self.url = url.rstrip("/")
        self.timeout = timeout

    @abc.abstractmethod
    def stream_text(self, messages: list[dict], model: str) -> AsyncIterator[str]:
        """
        Request a streamed chat completion.
        Yields the text of each content delta, in arrival order.
        Raises ProviderError on transport failure or an error response.
        """
        ...

    @abc.abstractmethod
    async def health_check(self) -> bool:
        """Check if this provider is reachable and responsive."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} url={self.url!r}>"
