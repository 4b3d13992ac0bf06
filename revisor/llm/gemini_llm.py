from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Mapping, Sequence

from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .json_utils import parse_json_response
from .provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMQuotaError,
    load_system_prompt,
)


class GeminiLLM:
    """Wrapper around the Gemini SDK with system instructions.

    The system prompt can be provided either as a string directly or as a Path to a file.
    When a ``response_schema`` is supplied to :meth:`generate` the request asks
    Gemini for ``application/json`` output constrained to that schema.
    """

    name = "gemini"
    MODEL = "gemini-2.5-flash"
    MAX_THINKING_BUDGET = 24576

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        client: genai.Client | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
        min_request_interval: float | None = None,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        if client is None:
            try:
                client = genai.Client()
            except ValueError as exc:
                # Raised by the SDK when no API key is configured
                raise LLMProviderConfigurationError(
                    f"Gemini provider could not be configured: {exc}"
                ) from exc
        self._client = client
        self._filter_json = filter_json
        self._model = model or os.environ.get("GEMINI_MODEL") or self.MODEL

        if min_request_interval is None:
            try:
                min_request_interval = float(
                    os.environ.get("GEMINI_MIN_REQUEST_INTERVAL", "0")
                )
            except ValueError:
                min_request_interval = 0.0
        self._min_request_interval = max(0.0, min_request_interval)

        # 0 so the first request is never delayed
        self._last_request_time = 0.0

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def model(self) -> str:
        return self._model

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        response_schema: Mapping[str, Any] | None = None,
    ) -> Any:
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        apply_filter = self._filter_json if filter_json is None else filter_json

        contents = "\n".join(user_prompts)
        config_kwargs: dict[str, Any] = dict(
            system_instruction=self._system_prompt,
            thinking_config=types.ThinkingConfig(
                thinking_budget=self.MAX_THINKING_BUDGET
            ),
            temperature=0.2,
        )
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = dict(response_schema)

        config = types.GenerateContentConfig(**config_kwargs)

        self._enforce_rate_limit()
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            if getattr(exc, "code", None) == 429:
                raise LLMQuotaError(
                    "Gemini provider: quota exhausted or rate limited"
                ) from exc
            raise
        finally:
            self._last_request_time = time.time()

        if not apply_filter:
            return response
        return self._parse_response_json(response, prompts=list(user_prompts))

    def health_check(self) -> bool:
        return True

    def _parse_response_json(
        self, response: Any, prompts: list[str] | None = None
    ) -> Any:
        """Extract and repair JSON content from a Gemini response.

        Raises:
            LLMParseError: If JSON parsing fails, with response text and prompts attached
        """
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise LLMParseError(
                "Response object does not expose a text attribute for JSON parsing.",
                response_text=str(response),
                prompts=prompts,
            )

        try:
            return parse_json_response(text)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            raise LLMParseError(
                str(exc),
                response_text=text,
                prompts=prompts,
            ) from exc

    def _enforce_rate_limit(self) -> None:
        """Enforce minimum interval between API requests."""
        if self._min_request_interval <= 0:
            return

        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
