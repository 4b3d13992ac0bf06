"""JSON extraction and repair for LLM responses.

Models occasionally wrap their JSON in commentary or code fences, or emit
trailing commas. :func:`parse_json_response` locates the outermost JSON
fragment and repairs it before parsing.
"""

from __future__ import annotations

import json
from typing import Any

from json_repair import repair_json


def parse_json_response(text: str) -> Any:
    """Extract and repair JSON content from LLM response text.

    Args:
        text: The response text from an LLM that should contain JSON

    Returns:
        The parsed JSON value (a list for proofreading responses)

    Raises:
        ValueError: If JSON delimiters are not found or text is invalid
        json.JSONDecodeError: If the repaired text still cannot be parsed

    Example:
        >>> parse_json_response('Resultado: [{"tipoErro": "Ortografia"}]')
        [{'tipoErro': 'Ortografia'}]
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    # Whichever top-level delimiter appears first wins.
    start_obj = text.find("{")
    start_arr = text.find("[")

    if start_obj == -1 and start_arr == -1:
        raise ValueError(
            "Response text does not contain JSON object or array delimiters."
        )

    if start_obj == -1 or (start_arr != -1 and start_arr < start_obj):
        start = start_arr
        end_char = "]"
    else:
        start = start_obj
        end_char = "}"

    end = text.rfind(end_char)
    if end == -1 or end <= start:
        raise ValueError("Response text does not contain matching JSON delimiters.")

    json_fragment = text[start : end + 1]
    repaired = repair_json(json_fragment)
    return json.loads(repaired)
