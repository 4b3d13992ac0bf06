"""Correction entry model produced from one item of a proofreading response.

The model replies with Portuguese field names (``tipoErro``, ``de``, ``para``
and so on). :meth:`CorrectionEntry.from_llm_response` maps that wire shape onto
the Python field names and pins the page number to the page that was actually
sent.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Wire key -> model field
WIRE_FIELDS: dict[str, str] = {
    "tipoErro": "error_type",
    "capitulo": "chapter",
    "pagina": "page",
    "de": "original",
    "para": "suggestion",
    "explicacao": "explanation",
    "arquivoReferencia": "source_reference",
}

# Keys whose values are used and therefore must be present in every item.
# ``pagina`` is requested from the model but always overridden.
REQUIRED_WIRE_FIELDS: tuple[str, ...] = ("tipoErro", "de", "para", "explicacao")


class CorrectionEntry(BaseModel):
    """One issue reported by the proofreader for a single page.

    Fields:
    - error_type: Category chosen by the model (e.g. "Concordância")
    - chapter: Chapter or section inferred from context; empty when unknown
    - page: Page number of the page that produced the entry
    - original: Excerpt containing the error
    - suggestion: Corrected excerpt (empty means "delete")
    - explanation: Technical explanation of the correction
    - source_reference: Reference document the correction is based on, if any
    - status: Reserved for manual annotation downstream; always empty
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    error_type: str
    chapter: str = ""
    page: int = Field(ge=1)
    original: str
    suggestion: str
    explanation: str
    source_reference: str = ""
    status: str = ""

    @field_validator(
        "error_type",
        "chapter",
        "original",
        "suggestion",
        "explanation",
        "source_reference",
        mode="before",
    )
    def _strip_strings(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("status", mode="before")
    def _blank_status(cls, value: object) -> str:
        return ""

    @model_validator(mode="after")
    def final_checks(self) -> "CorrectionEntry":
        if not self.error_type:
            raise ValueError("error_type must not be empty")
        if not self.original:
            raise ValueError("original must not be empty")
        if not self.explanation:
            raise ValueError("explanation must not be empty")
        return self

    @classmethod
    def from_llm_response(
        cls, data: Mapping[str, Any], *, page_number: int
    ) -> "CorrectionEntry":
        """Create an entry from one object of the model's JSON array.

        Args:
            data: Object using the wire field names
            page_number: Page that was sent; replaces whatever ``pagina`` says

        Raises:
            ValueError: If ``data`` is not an object or a required field is
                missing (pydantic's ``ValidationError`` is a ``ValueError``).
        """
        if not isinstance(data, Mapping):
            raise ValueError(
                f"Expected a JSON object for each correction, got {type(data).__name__}"
            )

        missing = [key for key in REQUIRED_WIRE_FIELDS if data.get(key) is None]
        if missing:
            raise ValueError(f"Missing required field(s): {', '.join(missing)}")

        fields = {field: data.get(key) for key, field in WIRE_FIELDS.items()}
        fields["page"] = page_number
        return cls(**fields)
