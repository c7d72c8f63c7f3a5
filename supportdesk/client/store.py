"""
Conversation store — the client's single source of truth.

All mutation goes through append_message() and append_to_last(); every
mutation notifies subscribers so the UI can re-render per streamed chunk.
A request token guards the in-progress assistant message: only the send
that currently owns the token may extend it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from uuid import uuid4

from supportdesk.errors import SendInFlightError
from supportdesk.models import Message

logger = logging.getLogger(__name__)

Listener = Callable[[tuple[Message, ...]], None]


class ConversationStore:
    """Ordered, in-memory conversation with an explicit mutation API."""

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = list(messages)
        self._listeners: list[Listener] = []
        self._token: str | None = None

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    @property
    def in_flight(self) -> bool:
        return self._token is not None

    def __len__(self) -> int:
        return len(self._messages)

    def history(self) -> list[dict]:
        """The conversation as a relay request body."""
        return [m.to_dict() for m in self._messages]

    # ── Subscriptions ────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snapshot = self.messages
        for listener in list(self._listeners):
            listener(snapshot)

    # ── Mutations ────────────────────────────────────────────────────────────

    def append_message(self, message: Message):
        self._messages.append(message)
        self._notify()

    def append_to_last(self, text: str, token: str | None = None) -> bool:
        """
        Replace the last message with a copy whose content has text appended.
        Earlier messages are untouched and the role is preserved.

        When token is given it must match the active request; chunks from a
        finished or abandoned request are dropped and False is returned.
        """
        if token is not None and token != self._token:
            logger.debug("Dropping %d chars from stale request %s", len(text), token[:8])
            return False
        if not self._messages:
            raise IndexError("append_to_last on an empty conversation")
        if not text:
            return True
        self._messages[-1] = self._messages[-1].extended(text)
        self._notify()
        return True

    # ── Request tokens ───────────────────────────────────────────────────────

    def begin_request(self) -> str:
        """Claim the conversation for one send. Raises SendInFlightError if taken."""
        if self._token is not None:
            raise SendInFlightError("A reply is still streaming")
        self._token = uuid4().hex
        return self._token

    def finish_request(self, token: str):
        if token == self._token:
            self._token = None

    def abandon_request(self):
        """Release the active request; its remaining chunks will be discarded."""
        self._token = None
