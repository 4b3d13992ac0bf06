"""Render prompt templates in revisor/prompt/promptFiles using pystache.

Templates may include partials (``{{> name}}``); each partial is loaded from
``promptFiles/<name>.md`` with any wrapping code fence stripped, so prompt
files written as fenced markdown blocks still work as partials.

Usage:
    python -m revisor.prompt.render_prompt [template_filename] [context.json]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pystache

PROMPTS_DIR = Path(__file__).parent / "promptFiles"

# Partials needed by each template
TEMPLATE_PARTIALS: dict[str, list[str]] = {
    "system_proofreader.md": [],
    "user_proofreader.md": ["priority_directive", "output_format"],
}


def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


def _strip_code_fences(s: str) -> str:
    """Strip a single leading and trailing code-fence block if present.

    Handles fences like ``` or ```` optionally followed by a language tag.
    """
    lines = s.splitlines()
    if not lines:
        return s
    first = lines[0].lstrip()
    last = lines[-1].lstrip()
    if first.startswith("```"):
        lines = lines[1:]
    if lines and last.startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _load_partials(template_names: list[str]) -> dict[str, str]:
    partial_names: set[str] = set()
    for name in template_names:
        partial_names.update(TEMPLATE_PARTIALS.get(name, []))
    return {
        name: _strip_code_fences(_read_prompt(f"{name}.md"))
        for name in sorted(partial_names)
    }


def render_template(template_name: str, context: dict | None = None) -> str:
    renderer = pystache.Renderer(partials=_load_partials([template_name]))
    return renderer.render(_read_prompt(template_name), context or {}).strip()


def render_prompts(
    system_template: str = "system_proofreader.md",
    user_template: str = "user_proofreader.md",
    context: dict | None = None,
) -> tuple[str, str]:
    """Render a system and user prompt pair from two separate templates.

    Returns:
        (system_prompt, user_prompt)
    """
    renderer = pystache.Renderer(
        partials=_load_partials([system_template, user_template])
    )

    rendered_system = renderer.render(_read_prompt(system_template), context or {})
    rendered_user = renderer.render(_read_prompt(user_template), context or {})
    return rendered_system.strip(), rendered_user.strip()


def _load_context(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


if __name__ == "__main__":
    tpl = sys.argv[1] if len(sys.argv) > 1 else "user_proofreader.md"
    ctx = None
    if len(sys.argv) > 2:
        ctx = _load_context(sys.argv[2])
    print(render_template(tpl, ctx))
