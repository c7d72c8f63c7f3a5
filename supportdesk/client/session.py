"""
Chat session — the client's send action.

submit() appends the user message and an empty assistant placeholder;
stream_reply() POSTs the conversation to the relay and folds each streamed chunk into the
placeholder as it arrives. Bytes are decoded with an incremental UTF-8
decoder so characters split across chunks come out whole.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass

import httpx

from supportdesk.config import DEFAULT_GREETING
from supportdesk.models import Message
from supportdesk.client.store import ConversationStore

logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "http://localhost:8000/api/chat"


@dataclass(frozen=True)
class PendingReply:
    """A claimed send: the request token and the body to POST."""
    token: str
    payload: list[dict]


class ChatSession:
    """One user's conversation with the relay."""

    def __init__(
        self,
        relay_url: str = DEFAULT_RELAY_URL,
        store: ConversationStore | None = None,
        timeout: float = 120,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.relay_url = relay_url
        self.store = store if store is not None else ConversationStore()
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(cls, cfg: dict, **kwargs) -> ChatSession:
        client_cfg = cfg.get("client", {}) or {}
        greeting = client_cfg.get("greeting", DEFAULT_GREETING)
        store = ConversationStore([Message("assistant", greeting)] if greeting else [])
        return cls(
            relay_url=client_cfg.get("relay_url", DEFAULT_RELAY_URL),
            store=store,
            timeout=client_cfg.get("timeout", 120),
            **kwargs,
        )

    def submit(self, text: str) -> PendingReply | None:
        """
        Claim the conversation for text and append the user message plus an
        empty assistant placeholder. Runs synchronously, so a UI can refuse a
        second submit before any network I/O starts.

        Returns None for empty text. Raises SendInFlightError if a previous
        reply is still streaming.
        """
        if not text or not text.strip():
            logger.debug("Ignoring empty message")
            return None

        token = self.store.begin_request()
        try:
            payload = self.store.history() + [Message("user", text).to_dict()]
            self.store.append_message(Message("user", text))
            self.store.append_message(Message("assistant", ""))
        except Exception:
            self.store.finish_request(token)
            raise
        return PendingReply(token=token, payload=payload)

    async def stream_reply(self, pending: PendingReply) -> str:
        """Stream the relay's reply into the placeholder claimed by submit()."""
        try:
            await self._stream_reply(pending.payload, pending.token)
        finally:
            self.store.finish_request(pending.token)
        return self.store.last.content

    async def send(self, text: str) -> str | None:
        """
        Send text and stream the reply into the conversation.

        Returns the final assistant content (possibly partial if the stream
        broke), or None if text was empty. Raises SendInFlightError if a
        previous reply is still streaming. Network and relay errors are
        logged and end the read loop; they are not raised.
        """
        pending = self.submit(text)
        if pending is None:
            return None
        return await self.stream_reply(pending)

    async def _stream_reply(self, payload: list[dict], token: str):
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        client = self._http_client or httpx.AsyncClient(timeout=self.timeout)
        try:
            async with client.stream("POST", self.relay_url, json=payload) as resp:
                if resp.status_code >= 400:
                    await resp.aread()
                    logger.warning(
                        "Relay rejected request: HTTP %s %s",
                        resp.status_code, resp.text[:200],
                    )
                    return
                async for chunk in resp.aiter_bytes():
                    text = decoder.decode(chunk)
                    if text:
                        self.store.append_to_last(text, token)
            tail = decoder.decode(b"", final=True)
            if tail:
                self.store.append_to_last(tail, token)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Reply stream aborted: %s", e)
        finally:
            if self._http_client is None:
                await client.aclose()
