"""
Data models for the conversation.
These define the shape of messages flowing between client, relay and provider.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from supportdesk.errors import InvalidConversationError

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""
    role: str
    content: str = ""

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role!r}")
        if not isinstance(self.content, str):
            raise ValueError("Message content must be a string")

    def extended(self, text: str) -> Message:
        """Return a copy with text appended to the content."""
        return replace(self, content=self.content + text)

    def to_dict(self) -> dict:
        """Export in OpenAI messages array format."""
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        return cls(role=data.get("role", ""), content=data.get("content", ""))


def parse_messages(payload) -> list[Message]:
    """
    Validate a relay request body: a JSON array of {role, content} objects.
    Raises InvalidConversationError naming the first bad entry.
    """
    if not isinstance(payload, list):
        raise InvalidConversationError("Request body must be a JSON array of messages")

    messages = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise InvalidConversationError(f"Message {i} is not an object")
        try:
            messages.append(Message.from_dict(item))
        except ValueError as e:
            raise InvalidConversationError(f"Message {i}: {e}") from e
    return messages
