"""Tests for the sequential proofreading driver."""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from revisor.llm.provider import LLMParseError, LLMProviderError, LLMQuotaError
from revisor.llm.service import LLMService
from revisor.models import PageContent
from revisor.proofreader import (
    Cancelled,
    CancellationToken,
    PageProcessingFailure,
    ProofreadingDriver,
    decode_page_response,
)


def _item(original: str, *, pagina: int = 99, **extra: Any) -> dict[str, Any]:
    data = {
        "tipoErro": "Ortografia",
        "pagina": pagina,
        "de": original,
        "para": original.upper(),
        "explicacao": "Explicação.",
    }
    data.update(extra)
    return data


class _ScriptedProvider:
    """Returns (or raises) one scripted value per call, keyed by page number."""

    name = "scripted"

    def __init__(
        self,
        responses: Mapping[int, Any],
        *,
        on_call: Callable[[int], None] | None = None,
    ) -> None:
        self._responses = responses
        self._on_call = on_call
        self.pages_requested: list[int] = []
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool = False,
        response_schema: Mapping[str, Any] | None = None,
    ) -> Any:
        page_number = self._page_from_prompt(user_prompts[-1])
        self.pages_requested.append(page_number)
        self.calls.append(
            {"filter_json": filter_json, "response_schema": response_schema}
        )
        if self._on_call is not None:
            self._on_call(page_number)
        result = self._responses.get(page_number, [])
        if isinstance(result, Exception):
            raise result
        return result

    def health_check(self) -> bool:
        return True

    @staticmethod
    def _page_from_prompt(prompt: str) -> int:
        marker = "TEXTO PARA REVISÃO (Página "
        start = prompt.index(marker) + len(marker)
        return int(prompt[start : prompt.index(")", start)])


def _pages(count: int) -> list[PageContent]:
    return [PageContent(page_number=i, text=f"Texto {i}") for i in range(1, count + 1)]


def _driver(provider: _ScriptedProvider) -> ProofreadingDriver:
    return ProofreadingDriver(LLMService([provider]))


@pytest.fixture
def capture_logs():
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

    logger = logging.getLogger("revisor.proofreader.driver")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)


class TestDecodePageResponse:
    def test_empty_list_means_no_errors(self) -> None:
        assert decode_page_response([], 1) == []

    def test_non_list_fails_page(self) -> None:
        with pytest.raises(PageProcessingFailure) as exc_info:
            decode_page_response({"tipoErro": "x"}, 4)
        assert exc_info.value.page_number == 4

    def test_one_bad_item_fails_whole_page(self) -> None:
        bad = _item("b")
        del bad["explicacao"]
        with pytest.raises(PageProcessingFailure, match="index 1"):
            decode_page_response([_item("a"), bad], 2)

    def test_non_object_item_fails_page(self) -> None:
        with pytest.raises(PageProcessingFailure):
            decode_page_response(["texto"], 2)


class TestRun:
    def test_example_single_page(self) -> None:
        provider = _ScriptedProvider(
            {
                1: [
                    {
                        "tipoErro": "Concordância",
                        "pagina": 1,
                        "de": "Ele fazem",
                        "para": "Ele faz",
                        "explicacao": "Sujeito singular.",
                    }
                ]
            }
        )

        entries = _driver(provider).run(
            [PageContent(page_number=1, text="Ele fazem")], ""
        )

        assert len(entries) == 1
        assert entries[0].page == 1
        assert entries[0].status == ""
        assert entries[0].suggestion == "Ele faz"

    def test_requests_json_with_schema(self) -> None:
        provider = _ScriptedProvider({})
        _driver(provider).run(_pages(1), "")

        assert provider.calls[0]["filter_json"] is True
        assert provider.calls[0]["response_schema"]["type"] == "ARRAY"

    def test_page_number_overrides_model_report(self) -> None:
        provider = _ScriptedProvider(
            {1: [_item("a", pagina=7)], 2: [_item("b", pagina=1), _item("c", pagina=0)]}
        )

        entries = _driver(provider).run(_pages(2), "")

        assert [(e.page, e.original) for e in entries] == [(1, "a"), (2, "b"), (2, "c")]

    def test_page_numbers_follow_input_even_with_gaps(self) -> None:
        pages = [PageContent(page_number=3, text="x"), PageContent(page_number=8, text="y")]
        provider = _ScriptedProvider({3: [_item("a")], 8: [_item("b")]})

        entries = _driver(provider).run(pages, "")

        assert [e.page for e in entries] == [3, 8]
        assert provider.pages_requested == [3, 8]

    def test_order_within_page_is_model_order(self) -> None:
        provider = _ScriptedProvider({1: [_item("z"), _item("a"), _item("m")]})

        entries = _driver(provider).run(_pages(1), "")

        assert [e.original for e in entries] == ["z", "a", "m"]

    def test_progress_reported_before_each_request(self) -> None:
        events: list[tuple[str, int]] = []
        provider = _ScriptedProvider({}, on_call=lambda page: events.append(("request", page)))

        _driver(provider).run(
            _pages(3), "", on_progress=lambda cur, total: events.append(("progress", cur))
        )

        assert events == [
            ("progress", 1),
            ("request", 1),
            ("progress", 2),
            ("request", 2),
            ("progress", 3),
            ("request", 3),
        ]

    def test_progress_includes_total(self) -> None:
        progress: list[tuple[int, int]] = []
        _driver(_ScriptedProvider({})).run(_pages(2), "", on_progress=lambda c, t: progress.append((c, t)))
        assert progress == [(1, 2), (2, 2)]

    @pytest.mark.parametrize(
        "failure",
        [
            LLMProviderError("boom"),
            LLMQuotaError("quota"),
            LLMParseError("not json", response_text="???"),
            RuntimeError("transport"),
            {"not": "a list"},
        ],
    )
    def test_failed_page_contributes_nothing_and_run_continues(self, failure: Any) -> None:
        provider = _ScriptedProvider(
            {1: [_item("a")], 2: failure, 3: [_item("c1"), _item("c2")]}
        )
        driver = _driver(provider)

        entries = driver.run(_pages(3), "")

        assert [(e.page, e.original) for e in entries] == [(1, "a"), (3, "c1"), (3, "c2")]
        assert provider.pages_requested == [1, 2, 3]
        assert driver.last_stats.failed_pages == [2]
        assert driver.last_stats.pages_processed == 3
        assert driver.last_stats.entries == 3

    def test_page_failure_is_logged_with_traceback(self, capture_logs) -> None:
        provider = _ScriptedProvider({1: LLMProviderError("provider exploded")})

        _driver(provider).run(_pages(1), "")

        output = capture_logs.getvalue()
        assert "ERROR" in output
        assert "page 1 of 1" in output
        assert "provider exploded" in output

    def test_failed_page_is_not_retried(self) -> None:
        provider = _ScriptedProvider({1: LLMProviderError("boom")})
        _driver(provider).run(_pages(1), "")
        assert provider.pages_requested == [1]

    def test_all_pages_failing_returns_empty(self) -> None:
        provider = _ScriptedProvider({1: RuntimeError("x"), 2: RuntimeError("y")})
        assert _driver(provider).run(_pages(2), "") == []

    def test_no_pages_returns_empty(self) -> None:
        provider = _ScriptedProvider({})
        assert _driver(provider).run([], "") == []
        assert provider.pages_requested == []

    def test_reference_text_reaches_each_request(self) -> None:
        seen: list[str] = []

        class _Recorder(_ScriptedProvider):
            def generate(self, user_prompts, **kwargs):
                seen.append(user_prompts[-1])
                return super().generate(user_prompts, **kwargs)

        _driver(_Recorder({})).run(_pages(2), "\n--- Documento de Referência: A.pdf ---\nRegra X")

        assert len(seen) == 2
        assert all("Regra X" in prompt for prompt in seen)


class TestCancellation:
    def test_cancelled_before_start_dispatches_nothing(self) -> None:
        provider = _ScriptedProvider({})
        progress: list[tuple[int, int]] = []
        token = CancellationToken()
        token.cancel()

        with pytest.raises(Cancelled) as exc_info:
            _driver(provider).run(_pages(3), "", lambda c, t: progress.append((c, t)), token)

        assert provider.pages_requested == []
        assert progress == []
        assert exc_info.value.pages_completed == 0
        assert exc_info.value.total_pages == 3

    def test_cancel_after_page_two_of_five(self) -> None:
        token = CancellationToken()
        progress: list[tuple[int, int]] = []

        def _cancel_after_two(page: int) -> None:
            if page == 2:
                token.cancel()

        provider = _ScriptedProvider({1: [_item("a")], 2: [_item("b")]}, on_call=_cancel_after_two)

        with pytest.raises(Cancelled) as exc_info:
            _driver(provider).run(_pages(5), "", lambda c, t: progress.append((c, t)), token)

        assert provider.pages_requested == [1, 2]
        assert progress[-1] == (2, 5)
        assert exc_info.value.pages_completed == 2

    def test_failure_while_cancelling_raises_cancelled(self) -> None:
        token = CancellationToken()

        def _cancel(page: int) -> None:
            token.cancel()

        provider = _ScriptedProvider({1: LLMProviderError("aborted")}, on_call=_cancel)

        with pytest.raises(Cancelled):
            _driver(provider).run(_pages(3), "", None, token)
        assert provider.pages_requested == [1]

    def test_token_set_twice_is_harmless(self) -> None:
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.cancelled

    def test_unset_token_does_not_interfere(self) -> None:
        provider = _ScriptedProvider({1: [_item("a")]})
        entries = _driver(provider).run(_pages(2), "", None, CancellationToken())
        assert len(entries) == 1
