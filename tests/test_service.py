from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from revisor.llm.provider import (
    LLMProvider,
    LLMProviderError,
    LLMQuotaError,
    ProviderStatus,
)
from revisor.llm.service import LLMService


class _Provider(LLMProvider):
    def __init__(self, name: str, *, result: Any = None, error: Exception | None = None) -> None:
        self.name = name
        self._result = result
        self._error = error
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool = False,
        response_schema: Mapping[str, Any] | None = None,
    ) -> Any:
        self.calls.append(
            {
                "prompts": list(user_prompts),
                "filter_json": filter_json,
                "response_schema": response_schema,
            }
        )
        if self._error is not None:
            raise self._error
        return self._result

    def health_check(self) -> bool:
        return True


def test_generate_returns_first_success_and_forwards_arguments() -> None:
    primary = _Provider("primary", result=["ok"])
    fallback = _Provider("fallback", result=["unused"])
    service = LLMService([primary, fallback])

    result = service.generate(["p"], filter_json=True, response_schema={"type": "ARRAY"})

    assert result == ["ok"]
    assert primary.calls == [
        {"prompts": ["p"], "filter_json": True, "response_schema": {"type": "ARRAY"}}
    ]
    assert fallback.calls == []


def test_generate_falls_back_on_quota() -> None:
    reports: list[tuple[str, ProviderStatus]] = []
    service = LLMService(
        [
            _Provider("primary", error=LLMQuotaError("quota")),
            _Provider("fallback", result="fallback-result"),
        ],
        reporter=lambda name, status, error: reports.append((name, status)),
    )

    assert service.generate(["p"]) == "fallback-result"
    assert service.last_provider == "fallback"
    assert reports == [
        ("primary", ProviderStatus.QUOTA),
        ("fallback", ProviderStatus.SUCCESS),
    ]


def test_generate_raises_when_all_quotas_exhausted() -> None:
    service = LLMService(
        [
            _Provider("a", error=LLMQuotaError("quota")),
            _Provider("b", error=LLMQuotaError("quota")),
        ]
    )

    with pytest.raises(LLMQuotaError, match="All providers exceeded quota"):
        service.generate(["p"])


def test_generate_does_not_fall_back_on_provider_failure() -> None:
    fallback = _Provider("fallback", result="unused")
    service = LLMService([_Provider("primary", error=LLMProviderError("boom")), fallback])

    with pytest.raises(LLMProviderError, match="boom"):
        service.generate(["p"])
    assert fallback.calls == []


def test_provider_order_and_health_check() -> None:
    service = LLMService([_Provider("gemini"), _Provider("mistral")])

    assert service.provider_order() == ["gemini", "mistral"]
    assert service.health_check() == [("gemini", True), ("mistral", True)]


def test_requires_at_least_one_provider() -> None:
    with pytest.raises(ValueError):
        LLMService([])


def test_quota_fallback_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    service = LLMService(
        [_Provider("gemini", error=LLMQuotaError("quota")), _Provider("mistral", result=[])]
    )

    with caplog.at_level("WARNING", logger="revisor.llm.service"):
        service.generate(["p"])

    assert "Provider gemini is out of quota; trying mistral" in caplog.text
