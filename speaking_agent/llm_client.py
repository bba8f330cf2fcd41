"""Model provider selection and OpenAI-compatible client factory."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from speaking_agent.config import Settings, settings
from speaking_agent.errors import ConfigurationError

OPENAI_PROVIDER = "openai"
OPENROUTER_PROVIDER = "openrouter"
HEURISTIC_PROVIDER = "heuristic"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    name: str
    api_key: str
    model: str
    base_url: str | None = None


def _openai(config: Settings) -> ProviderConfig:
    return ProviderConfig(
        name=OPENAI_PROVIDER,
        api_key=config.openai_api_key,
        model=config.openai_model,
    )


def _openrouter(config: Settings) -> ProviderConfig:
    return ProviderConfig(
        name=OPENROUTER_PROVIDER,
        api_key=config.openrouter_api_key,
        model=config.llm_model,
        base_url=config.openrouter_base_url.strip() or "https://openrouter.ai/api/v1",
    )


def resolve_providers(config: Settings | None = None) -> tuple[ProviderConfig, ...]:
    """Resolve the model providers to try, in preference order.

    An explicit ``LLM_PROVIDER`` pins a single provider (or none for
    ``heuristic``). Otherwise every provider with a key is registered, OpenAI
    first. An empty result means heuristic-only extraction.
    """
    config = config or settings
    provider = config.llm_provider.lower().strip()

    if provider == HEURISTIC_PROVIDER:
        return ()

    if provider == OPENAI_PROVIDER:
        if not config.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")
        return (_openai(config),)

    if provider == OPENROUTER_PROVIDER:
        if not config.openrouter_api_key:
            raise ConfigurationError("OPENROUTER_API_KEY is not configured")
        return (_openrouter(config),)

    if provider:
        raise ConfigurationError(f"Unsupported LLM_PROVIDER: {config.llm_provider}")

    resolved: list[ProviderConfig] = []
    if config.openai_api_key:
        resolved.append(_openai(config))
    if config.openrouter_api_key:
        resolved.append(_openrouter(config))
    return tuple(resolved)


def get_client(provider: ProviderConfig) -> Any:
    """Create an ``AsyncOpenAI`` client for the given provider."""
    from openai import AsyncOpenAI

    if provider.base_url:
        return AsyncOpenAI(api_key=provider.api_key, base_url=provider.base_url)
    return AsyncOpenAI(api_key=provider.api_key)
