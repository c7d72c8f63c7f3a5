"""
Completion providers.

Usage:
    from supportdesk.providers import make_provider
    provider = make_provider(cfg["provider"])

Adding a new provider:
    1. Create supportdesk/providers/<name>.py implementing BaseProvider.
    2. Add an entry to _REGISTRY below.
    3. Set  provider.type: <name>  in config.yaml.
"""

from supportdesk.providers.base import BaseProvider
from supportdesk.providers.openai_compat import OpenAICompatibleProvider

_REGISTRY: dict[str, type[BaseProvider]] = {
    "openai": OpenAICompatibleProvider,
}


def make_provider(provider_cfg: dict) -> BaseProvider:
    """
    Instantiate the configured provider.

    Raises:
        ValueError: If provider.type is not registered.
    """
    provider_type = provider_cfg.get("type", "openai")
    cls = _REGISTRY.get(provider_type)
    if cls is None:
        available = ", ".join(_REGISTRY.keys())
        raise ValueError(
            f"Unknown provider: '{provider_type}'. "
            f"Available: {available}"
        )
    return cls(
        name=provider_cfg.get("name", provider_type),
        url=provider_cfg.get("url", "https://api.openai.com"),
        timeout=provider_cfg.get("timeout", 120),
        api_key=provider_cfg.get("api_key", ""),
    )


__all__ = ["BaseProvider", "OpenAICompatibleProvider", "make_provider"]
