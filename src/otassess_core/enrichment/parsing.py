"""Decoding structured JSON out of free-form model replies.

Models wrap JSON in markdown fences or surround it with prose.  We strip
fences, decode the first complete JSON object in the text, and validate
it against the expected pydantic schema.  Every failure raises
``StructuredOutputError``; nothing is partially accepted.
"""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from otassess_core.errors import StructuredOutputError

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or ``text`` unchanged."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Decode the first JSON object embedded in ``text``."""
    body = strip_code_fences(text or "")
    decoder = json.JSONDecoder()
    start = body.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(body, start)
        except json.JSONDecodeError:
            start = body.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = body.find("{", start + 1)
    raise StructuredOutputError("Model reply contains no JSON object")


def parse_structured(text: str, schema: type[T]) -> T:
    """Extract a JSON object from ``text`` and validate it as ``schema``."""
    payload = extract_json_object(text)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise StructuredOutputError(
            f"Model reply does not match {schema.__name__}: {exc.error_count()} error(s)"
        ) from exc
