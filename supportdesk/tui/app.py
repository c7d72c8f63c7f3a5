"""
SupportDesk chat window — Textual front end for ChatSession.
Every store mutation re-renders the conversation, so the reply grows on
screen chunk by chunk.
Entry point: supportdesk chat (alias: tui, console)
"""
from __future__ import annotations
from pathlib import Path
from typing import ClassVar
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Footer, Header, Input
from supportdesk.client.session import ChatSession
from supportdesk.errors import SendInFlightError
from supportdesk.models import Message
from supportdesk.tui.widgets import ConversationView


class SupportChatApp(App):
    """Customer support chat."""
    CSS_PATH = str(Path(__file__).parent / "styles" / "main.tcss")
    TITLE = "SupportDesk"
    SUB_TITLE = "ask us anything"
    BINDINGS: ClassVar[list[Binding]] = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+l", "focus_input", "Focus input", show=True),
    ]

    def __init__(self, session: ChatSession, **kwargs):
        super().__init__(**kwargs)
        self.session = session
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ConversationView(id="conversation")
        with Horizontal(id="composer"):
            yield Input(placeholder="Message", id="message")
            yield Button("Ask!", id="ask", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(ConversationView).show(self.session.store.messages)
        self._unsubscribe = self.session.store.subscribe(self._on_conversation_changed)
        self.action_focus_input()

    def on_unmount(self) -> None:
        # Closing the window abandons the reply; late chunks are dropped.
        self.workers.cancel_group(self, "send")
        self.session.store.abandon_request()
        if self._unsubscribe:
            self._unsubscribe()

    def _on_conversation_changed(self, messages: tuple[Message, ...]) -> None:
        self.query_one(ConversationView).show(messages)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_send()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ask":
            self.action_send()

    def action_focus_input(self) -> None:
        self.query_one("#message", Input).focus()

    def action_send(self) -> None:
        field = self.query_one("#message", Input)
        text = field.value
        if not text.strip():
            return
        try:
            pending = self.session.submit(text)
        except SendInFlightError:
            self.notify("Still answering your last question", severity="warning")
            return
        field.value = ""
        self.run_worker(self.session.stream_reply(pending), group="send")
