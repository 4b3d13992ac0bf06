from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from .provider import (
    LLMProvider,
    LLMProviderError,
    LLMQuotaError,
    ProviderReporter,
    ProviderStatus,
)

logger = logging.getLogger(__name__)


class LLMService:
    """Send one proofreading request through an ordered list of providers.

    Every provider gets a single attempt. Quota exhaustion moves the request
    on to the next provider; any other provider error is raised to the caller
    unchanged so the page can be recorded as failed.
    """

    def __init__(
        self,
        providers: Sequence[LLMProvider],
        *,
        reporter: ProviderReporter | None = None,
    ) -> None:
        if not providers:
            raise ValueError("LLMService requires at least one provider")
        self._providers = tuple(providers)
        self._reporter = reporter
        self.last_provider: str | None = None

    def provider_order(self) -> list[str]:
        return [provider.name for provider in self._providers]

    def health_check(self) -> list[tuple[str, bool]]:
        """Run each provider's health check in configured order."""
        return [(provider.name, provider.health_check()) for provider in self._providers]

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool = False,
        response_schema: Mapping[str, Any] | None = None,
    ) -> Any:
        """Return the first provider answer, falling through only on quota errors.

        Raises:
            LLMQuotaError: If every provider reported quota exhaustion.
            LLMProviderError: If a provider fails for any other reason.
        """
        self.last_provider = None
        quota_errors: list[LLMQuotaError] = []

        for position, provider in enumerate(self._providers):
            try:
                answer = provider.generate(
                    user_prompts,
                    filter_json=filter_json,
                    response_schema=response_schema,
                )
            except LLMQuotaError as exc:
                quota_errors.append(exc)
                self._notify(provider.name, ProviderStatus.QUOTA, exc)
                remaining = self._providers[position + 1 :]
                if remaining:
                    logger.warning(
                        "Provider %s is out of quota; trying %s",
                        provider.name,
                        remaining[0].name,
                    )
                continue
            except LLMProviderError as exc:
                self._notify(provider.name, ProviderStatus.FAILURE, exc)
                raise

            self._notify(provider.name, ProviderStatus.SUCCESS)
            self.last_provider = provider.name
            return answer

        raise LLMQuotaError(
            f"All providers exceeded quota ({', '.join(self.provider_order())})"
        ) from quota_errors[-1]

    def _notify(
        self,
        provider_name: str,
        status: ProviderStatus,
        error: Exception | None = None,
    ) -> None:
        if self._reporter is not None:
            self._reporter(provider_name, status, error)
