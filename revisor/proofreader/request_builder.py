"""Build the per-page proofreading request.

Each request carries, in order: the reviewer persona (system prompt), the
reference corpus labelled by priority, the priority-resolution directive, the
page text tagged with its number, and the declared output shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from revisor.models import PageContent
from revisor.prompt.render_prompt import render_prompts

SYSTEM_TEMPLATE = "system_proofreader.md"
USER_TEMPLATE = "user_proofreader.md"

# Gemini structured-output schema for one page's corrections.
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "tipoErro": {
                "type": "STRING",
                "description": "Tipo de erro (ex: Ortografia, Concordância, Pontuação)",
            },
            "capitulo": {
                "type": "STRING",
                "description": "Capítulo ou Seção onde o erro foi encontrado",
            },
            "pagina": {
                "type": "NUMBER",
                "description": "Número da página atual",
            },
            "de": {
                "type": "STRING",
                "description": "Trecho original com erro",
            },
            "para": {
                "type": "STRING",
                "description": "Trecho sugerido corrigido",
            },
            "explicacao": {
                "type": "STRING",
                "description": "Explicação técnica da correção",
            },
            "arquivoReferencia": {
                "type": "STRING",
                "description": "Nome do arquivo de referência utilizado como base para esta correção",
            },
        },
        "required": ["tipoErro", "pagina", "de", "para", "explicacao"],
    },
}


@dataclass(frozen=True)
class PageRequest:
    """Everything sent to the model for one page."""

    page_number: int
    system_prompt: str
    user_prompt: str
    response_schema: Mapping[str, Any] = field(default_factory=lambda: RESPONSE_SCHEMA)

    @property
    def prompts(self) -> list[str]:
        return [self.system_prompt, self.user_prompt]


def build_page_request(reference_text: str, page: PageContent) -> PageRequest:
    """Render the request for ``page`` against the combined reference corpus.

    A blank ``reference_text`` means "no reference constraints": the reference
    block and the priority directive are left out.
    """
    has_references = bool(reference_text and reference_text.strip())
    context = {
        "page_number": page.page_number,
        "page_text": page.text,
        "has_references": has_references,
        "reference_text": reference_text if has_references else "",
    }
    system_prompt, user_prompt = render_prompts(SYSTEM_TEMPLATE, USER_TEMPLATE, context)
    return PageRequest(
        page_number=page.page_number,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
    )


def get_system_prompt_text() -> str:
    """Return the rendered system prompt for configuring providers."""
    system_prompt, _ = render_prompts(SYSTEM_TEMPLATE, USER_TEMPLATE, {})
    return system_prompt
