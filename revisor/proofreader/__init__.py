"""The proofreading pipeline: references, per-page requests and the driver."""

from __future__ import annotations

from .cancellation import CancellationToken
from .driver import DriverStats, ProofreadingDriver, decode_page_response
from .errors import Cancelled, FatalPipelineFailure, PageProcessingFailure
from .pipeline import run_proofreading
from .references import (
    build_reference_corpus,
    combine_references,
    load_reference_documents,
)
from .request_builder import RESPONSE_SCHEMA, PageRequest, build_page_request

__all__ = [
    "Cancelled",
    "CancellationToken",
    "DriverStats",
    "FatalPipelineFailure",
    "PageProcessingFailure",
    "PageRequest",
    "ProofreadingDriver",
    "RESPONSE_SCHEMA",
    "build_page_request",
    "build_reference_corpus",
    "combine_references",
    "decode_page_response",
    "load_reference_documents",
    "run_proofreading",
]
