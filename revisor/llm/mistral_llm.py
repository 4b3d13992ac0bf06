from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Sequence, cast

from dotenv import load_dotenv
from mistralai import Mistral, models

from .json_utils import parse_json_response
from .provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMQuotaError,
    load_system_prompt,
)


class MistralLLM:
    """Wrapper around the Mistral SDK with system instructions.

    Mistral has no schema-constrained output on the conversations API, so the
    ``response_schema`` hint is ignored and the JSON shape is enforced by the
    prompt plus :func:`parse_json_response`.
    """

    name = "mistral"
    MODEL = "mistral-medium-latest"

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        client: Mistral | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            # Explicit environment values take precedence over the file
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        # The SDK does not read MISTRAL_API_KEY on its own
        if client is None:
            api_key = os.environ.get("MISTRAL_API_KEY")
            if not api_key:
                raise LLMProviderConfigurationError(
                    "MISTRAL_API_KEY environment variable is required but not set. "
                    "Please set it in your .env file or environment."
                )
            client = Mistral(api_key=api_key)
        self._client = client
        self._filter_json = filter_json
        self._model = model or os.environ.get("MISTRAL_MODEL") or self.MODEL

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

        inputs = cast(
            models.ConversationInputs,
            [
                models.MessageInputEntry(
                    role="user",
                    content="\n".join(user_prompts),
                )
            ],
        )

        try:
            response = self._client.beta.conversations.start(
                inputs=inputs,
                instructions=self._system_prompt,
                model=self._model,
                completion_args={"temperature": 0.2},
                tools=[],
            )
        except Exception as exc:
            if getattr(exc, "status_code", None) == 429:
                raise LLMQuotaError(
                    "Mistral provider: quota exhausted or rate limited"
                ) from exc
            raise

        if not apply_filter:
            return response
        return self._parse_response_json(response, prompts=list(user_prompts))

    def health_check(self) -> bool:
        return True

    def _parse_response_json(
        self, response: Any, prompts: list[str] | None = None
    ) -> Any:
        """Extract and repair JSON content from a Mistral response.

        Supports the ``outputs`` shape returned by ``beta.conversations.start``
        and the older ``choices[0].message.content`` shape, in that order.

        Raises:
            LLMParseError: If JSON parsing fails, with response text and prompts attached
        """
        text: str | None = None

        outputs = getattr(response, "outputs", None)
        if isinstance(outputs, list):
            for entry in outputs:
                if isinstance(entry, dict):
                    content_val = entry.get("content")
                else:
                    content_val = getattr(entry, "content", None)
                if isinstance(content_val, str) and content_val.strip():
                    text = content_val
                    break

        if text is None and getattr(response, "choices", None):
            message = getattr(response.choices[0], "message", None)
            maybe = getattr(message, "content", None)
            if isinstance(maybe, str):
                text = maybe

        if not isinstance(text, str):
            raise LLMParseError(
                "Response message content is not a string for JSON parsing; "
                "expected `outputs` or `choices` shapes.",
                response_text=str(response),
                prompts=prompts,
            )

        try:
            return parse_json_response(text)
        except ValueError as exc:
            raise LLMParseError(
                str(exc),
                response_text=text,
                prompts=prompts,
            ) from exc
