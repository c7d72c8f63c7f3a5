"""
Tests for the config loader.
Run with: pytest tests/test_config.py
"""

import pytest

from supportdesk import config as cfg_mod


@pytest.fixture
def fresh_config():
    """Clear the cached config so load_config() reads from disk."""
    orig = cfg_mod._config
    cfg_mod._config = None
    yield
    cfg_mod._config = orig


def test_resolve_env_vars(monkeypatch):
    monkeypatch.setenv("SD_TEST_KEY", "sk-abc")
    assert cfg_mod._resolve_env_vars("Bearer ${SD_TEST_KEY}") == "Bearer sk-abc"


def test_resolve_missing_env_var_is_empty(monkeypatch):
    monkeypatch.delenv("SD_MISSING_KEY", raising=False)
    assert cfg_mod._resolve_env_vars("${SD_MISSING_KEY}") == ""


def test_walk_and_resolve_nested(monkeypatch):
    monkeypatch.setenv("SD_TEST_MODEL", "gpt-4o-mini")
    raw = {"provider": {"model": "${SD_TEST_MODEL}", "timeout": 30}, "list": ["${SD_TEST_MODEL}"]}
    resolved = cfg_mod._walk_and_resolve(raw)
    assert resolved["provider"]["model"] == "gpt-4o-mini"
    assert resolved["provider"]["timeout"] == 30
    assert resolved["list"] == ["gpt-4o-mini"]


def test_load_config_from_path(tmp_path, fresh_config, monkeypatch):
    monkeypatch.setenv("SD_TEST_KEY", "sk-from-env")
    path = tmp_path / "config.yaml"
    path.write_text("provider:\n  api_key: ${SD_TEST_KEY}\n  model: gpt-4o-mini\n")

    cfg = cfg_mod.load_config(path)
    assert cfg["provider"]["api_key"] == "sk-from-env"
    # Cached after first load
    assert cfg_mod.get_config() is cfg


def test_load_config_from_env_path(tmp_path, fresh_config, monkeypatch):
    path = tmp_path / "alt.yaml"
    path.write_text("server:\n  port: 9001\n")
    monkeypatch.setenv("SUPPORTDESK_CONFIG", str(path))
    assert cfg_mod.load_config()["server"]["port"] == 9001


def test_load_config_missing_file(tmp_path, fresh_config):
    with pytest.raises(FileNotFoundError):
        cfg_mod.load_config(tmp_path / "nope.yaml")


def test_repo_config_loads(fresh_config, monkeypatch):
    """The shipped config.yaml parses and has the sections the app reads."""
    monkeypatch.delenv("SUPPORTDESK_CONFIG", raising=False)
    cfg = cfg_mod.load_config()
    for section in ("server", "provider", "persona", "client", "logging"):
        assert section in cfg
    assert cfg["provider"]["model"] == "gpt-4o-mini"


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

def test_system_prompt_from_config():
    cfg = {"persona": {"system_prompt": "Be brief."}}
    assert cfg_mod.get_system_prompt(cfg) == "Be brief."


def test_system_prompt_from_file(tmp_path):
    prompt_file = tmp_path / "persona.txt"
    prompt_file.write_text("You help with billing.", encoding="utf-8")
    cfg = {"persona": {"system_prompt": "", "prompt_file": str(prompt_file)}}
    assert cfg_mod.get_system_prompt(cfg) == "You help with billing."


def test_system_prompt_default():
    prompt = cfg_mod.get_system_prompt({})
    assert prompt == cfg_mod.DEFAULT_SYSTEM_PROMPT
    assert "HeadStarterAI" in prompt
