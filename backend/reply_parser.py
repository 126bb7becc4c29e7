"""Turn a free-form model reply into a validated AuditReport.

The model is asked for raw JSON but may wrap it in prose or code
fences, use typographic quotes, or leave inner quotes unescaped.
Parsing is attempted strictly first, then on the outermost {...}
slice, then on a repaired copy of that slice.
"""

import json
import logging

from pydantic import ValidationError

from errors import MalformedReply
from models import AuditReport

log = logging.getLogger("commerce-audit")

_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
}


def _escape_inner_quotes(value: str) -> str:
    """
    Escape likely unescaped quotes inside JSON strings.
    Keeps closing quotes intact by checking the next non-space token.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(value)

    for i, ch in enumerate(value):
        if escaped:
            out.append(ch)
            escaped = False
            continue

        if ch == "\\":
            out.append(ch)
            escaped = True
            continue

        if ch != '"':
            out.append(ch)
            continue

        if not in_string:
            in_string = True
            out.append(ch)
            continue

        j = i + 1
        while j < length and value[j].isspace():
            j += 1
        next_char = value[j] if j < length else ""

        # Valid string-close chars in JSON: key close before ":", value close before ",", "}", "]"
        if next_char in {":", ",", "}", "]", ""}:
            in_string = False
            out.append(ch)
        else:
            out.append('\\"')

    return "".join(out)


def _repair(json_str: str) -> str:
    for smart, plain in _SMART_QUOTES.items():
        json_str = json_str.replace(smart, plain)
    return _escape_inner_quotes(json_str)


def extract_json(text: str) -> object:
    """Locate and decode the JSON value in `text`. Raises MalformedReply."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise MalformedReply("empty reply", text)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None
    # A bare array or scalar may still wrap the object we want.
    if isinstance(parsed, dict):
        return parsed

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        if parsed is not None:
            raise MalformedReply(f"expected a JSON object, got {type(parsed).__name__}", text)
        raise MalformedReply("no JSON object found in reply", text)

    json_str = cleaned[start : end + 1]
    log.debug("Reply is not bare JSON, parsing characters %s..%s", start, end)
    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        pass

    try:
        parsed = json.loads(_repair(json_str))
    except json.JSONDecodeError as e:
        raise MalformedReply(f"JSON object could not be decoded: {e}", text) from e
    log.info("Reply JSON needed quote repair before parsing")
    return parsed


def _drop_nulls(value: object) -> object:
    if isinstance(value, dict):
        return {k: _drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_nulls(v) for v in value if v is not None]
    return value


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors()[:5]:
        location = ".".join(str(p) for p in item["loc"]) or "report"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def normalize(raw_text: str) -> AuditReport:
    """
    Parse a model reply into an AuditReport. Missing fields take their
    defaults; an unlocatable object or a schema violation raises MalformedReply.
    """
    parsed = extract_json(raw_text)
    if not isinstance(parsed, dict):
        raise MalformedReply(f"expected a JSON object, got {type(parsed).__name__}", raw_text)

    try:
        return AuditReport.model_validate(_drop_nulls(parsed))
    except ValidationError as e:
        raise MalformedReply(f"report failed validation: {_describe(e)}", raw_text) from e
