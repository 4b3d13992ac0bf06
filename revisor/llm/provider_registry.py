"""Build the ordered provider chain from arguments and environment hints.

``LLM_PRIMARY`` names the first provider and ``LLM_FALLBACK`` holds a
comma-separated list tried after it on quota exhaustion. With neither set
only Gemini is used.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .gemini_llm import GeminiLLM
from .mistral_llm import MistralLLM
from .provider import LLMProvider, ProviderFactory

DEFAULT_PROVIDERS = ("gemini",)


def _gemini_factory(
    *,
    system_prompt: str | Path,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return GeminiLLM(system_prompt, filter_json=filter_json, dotenv_path=dotenv_path)


def _mistral_factory(
    *,
    system_prompt: str | Path,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return MistralLLM(system_prompt, filter_json=filter_json, dotenv_path=dotenv_path)


_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "gemini": _gemini_factory,
    "mistral": _mistral_factory,
}


def _split_names(value: str | None) -> list[str]:
    """``" Gemini, mistral "`` -> ``["gemini", "mistral"]``."""
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def resolve_provider_names(
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[str]:
    """Return de-duplicated provider names; arguments win over the environment.

    Raises:
        ValueError: If a name has no registered factory.
    """
    requested: list[str] = [
        *(_split_names(primary) if primary else _split_names(os.environ.get("LLM_PRIMARY"))),
        *(
            [name.strip().lower() for name in fallbacks]
            if fallbacks
            else _split_names(os.environ.get("LLM_FALLBACK"))
        ),
    ]

    names: list[str] = []
    for name in requested or DEFAULT_PROVIDERS:
        if name not in _PROVIDER_FACTORIES:
            raise ValueError(f"Unknown LLM provider '{name}'")
        if name not in names:
            names.append(name)
    return names


def create_provider_chain(
    *,
    system_prompt: str | Path,
    filter_json: bool = False,
    dotenv_path: str | Path | None = None,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[LLMProvider]:
    """Instantiate every provider named by :func:`resolve_provider_names`.

    Raises:
        ValueError: For an unknown provider name.
        LLMProviderConfigurationError: If a provider is missing credentials.
    """
    # The .env file may carry LLM_PRIMARY/LLM_FALLBACK as well as API keys
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    return [
        _PROVIDER_FACTORIES[name](
            system_prompt=system_prompt,
            filter_json=filter_json,
            dotenv_path=dotenv_path,
        )
        for name in resolve_provider_names(primary, fallbacks)
    ]
