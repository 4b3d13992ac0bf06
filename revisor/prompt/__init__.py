"""Prompt templates and their pystache renderer."""

from __future__ import annotations

from .render_prompt import PROMPTS_DIR, render_prompts, render_template

__all__ = ["PROMPTS_DIR", "render_prompts", "render_template"]
