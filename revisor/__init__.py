"""Revisor: LLM-backed proofreading of PDF documents against reference rules."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "export",
    "extraction",
    "llm",
    "models",
    "proofreader",
]
