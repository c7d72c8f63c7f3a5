"""
Chat client: conversation state plus the streaming send action.
"""

from supportdesk.client.session import ChatSession
from supportdesk.client.store import ConversationStore

__all__ = ["ChatSession", "ConversationStore"]
