"""
Shared fixtures: a scripted provider and config helpers.
"""

import pytest

from supportdesk import config as cfg_mod
from supportdesk.errors import ProviderError
from supportdesk.providers.base import BaseProvider


class FakeProvider(BaseProvider):
    """
    Provider that streams a fixed list of fragments.
    fail_after=N raises ProviderError after N fragments (0 = before any).
    """

    def __init__(self, fragments=(), fail_after=None, healthy=True):
        super().__init__(name="fake", url="http://fake")
        self.healthy = healthy
        self.fragments = list(fragments)
        self.fail_after = fail_after
        self.calls: list[dict] = []

    async def stream_text(self, messages, model):
        self.calls.append({"messages": messages, "model": model})
        emitted = self.fragments if self.fail_after is None else self.fragments[:self.fail_after]
        for text in emitted:
            yield text
        if self.fail_after is not None:
            raise ProviderError("provider went away")

    async def health_check(self):
        return self.healthy


@pytest.fixture
def fake_provider():
    return FakeProvider(["We cover ", "algorithms, ", "data structures..."])


@pytest.fixture
def test_config(tmp_path):
    """Install a minimal in-memory config for the duration of a test."""
    cfg_data = {
        "server": {"host": "127.0.0.1", "port": 8000},
        "provider": {"type": "openai", "url": "http://fake", "api_key": "sk-test", "model": "gpt-4o-mini"},
        "persona": {"system_prompt": "You are the test support agent."},
        "client": {"relay_url": "http://testserver/api/chat", "greeting": "Hello!"},
        "logging": {"level": "WARNING"},
    }
    orig = cfg_mod._config
    cfg_mod._config = cfg_data
    yield cfg_data
    cfg_mod._config = orig
