"""
Conversation widgets.
ConversationView owns one MessageRow per message and re-renders from store
snapshots: new messages are mounted, changed ones (the streaming reply) are
updated in place.
"""
from __future__ import annotations
from collections.abc import Sequence
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Static
from supportdesk.models import Message

# Shown while the assistant placeholder is still empty
_PENDING = "…"


class MessageRow(Horizontal):
    """One chat bubble, aligned left for the assistant and right for the user."""
    def __init__(self, message: Message, **kwargs):
        super().__init__(classes=message.role, **kwargs)
        self.message = message
        self._bubble = Static(self._text(message), classes="bubble", markup=False)

    @staticmethod
    def _text(message: Message) -> str:
        return message.content or _PENDING

    def compose(self) -> ComposeResult:
        yield self._bubble

    def set_message(self, message: Message) -> None:
        if message == self.message:
            return
        if message.role != self.message.role:
            self.remove_class(self.message.role)
            self.add_class(message.role)
        self.message = message
        self._bubble.update(self._text(message))


class ConversationView(VerticalScroll):
    """Scrolling message list, oldest at the top."""
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._rows: list[MessageRow] = []

    @property
    def rows(self) -> list[MessageRow]:
        return list(self._rows)

    def show(self, messages: Sequence[Message]) -> None:
        if len(messages) < len(self._rows):
            for row in self._rows:
                row.remove()
            self._rows = []
        for row, message in zip(self._rows, messages):
            row.set_message(message)
        for message in messages[len(self._rows):]:
            row = MessageRow(message)
            self._rows.append(row)
            self.mount(row)
        self.scroll_end(animate=False)
