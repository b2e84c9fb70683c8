"""
ClauseGuard Backend — Lenient JSON Extraction
==============================================

What:  Pulls a JSON object out of free-form model output.
How:   Two stages, first success wins:
           1. Balanced-brace scan: from each '{', track depth (ignoring braces
              inside string literals) until it closes; decode the candidate.
           2. Fence strip: remove ``` / ```json markers and decode the rest.
       The result is a JsonExtraction value: callers branch on `parsed`
       instead of catching exceptions.
Who:   Used by ClauseClassifier on the classification completion.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


@dataclass(frozen=True)
class JsonExtraction:
    """Outcome of extract_json_object: either a decoded object or a reason it failed."""

    parsed: bool
    value: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: Dict[str, Any]) -> "JsonExtraction":
        return cls(parsed=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "JsonExtraction":
        return cls(parsed=False, reason=reason)


def _decode_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def _balanced_candidates(text: str) -> Iterator[str]:
    """Yields every balanced {...} substring, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    yield text[start:index + 1]
                    break
        start = text.find("{", start + 1)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def extract_json_object(text: Optional[str]) -> JsonExtraction:
    """
    Find and decode the first JSON object in `text`.

    Examples:
        'blah {"seguras": [], "riscos": []} blah' → parsed, value={"seguras": [], "riscos": []}
        '```json\\n{"a": 1}\\n```'                → parsed, value={"a": 1}
        'no json here'                            → not parsed, reason set
    """
    if not text or not text.strip():
        return JsonExtraction.failure("empty response")

    for candidate in _balanced_candidates(text):
        value = _decode_object(candidate)
        if value is not None:
            return JsonExtraction.success(value)

    value = _decode_object(strip_code_fences(text))
    if value is not None:
        return JsonExtraction.success(value)

    return JsonExtraction.failure("no JSON object found in response")
