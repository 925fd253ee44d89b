"""Parsing helpers for JSON embedded in model output."""

import json
import re
from typing import Any

from config.exceptions import ProviderResponseParseError

# Precompiled regex for JSON extraction
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Lenient decoder that allows control characters (raw newlines, tabs) inside
# JSON strings; models often emit these instead of proper \n escapes.
_LENIENT_DECODER = json.JSONDecoder(strict=False)


def _try_loads(text: str) -> Any:
    """Try parsing JSON, first strictly then leniently."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    return _LENIENT_DECODER.decode(text)


def _candidates(text: str):
    yield text
    match = _JSON_FENCE_RE.search(text)
    if match:
        yield match.group(1).strip()
    for start_char, end_char in (("{", "}"), ("[", "]")):
        start = text.find(start_char)
        end = text.rfind(end_char)
        if start != -1 and end > start:
            yield text[start:end + 1]


def parse_json_payload(text: str) -> Any:
    """Extract and parse the JSON value carried by a model response.

    Handles markdown code fences, prose around the JSON, and unescaped
    newlines inside string values.

    Raises:
        ProviderResponseParseError: No JSON value could be recovered.
    """
    text = text.strip()
    for candidate in _candidates(text):
        try:
            return _try_loads(candidate)
        except json.JSONDecodeError:
            continue
    raise ProviderResponseParseError("Failed to parse JSON from response", raw_response=text)


def parse_json_object(text: str) -> dict:
    """Parse a JSON object; a list holding one object is unwrapped."""
    result = parse_json_payload(text)
    if isinstance(result, list):
        result = next((item for item in result if isinstance(item, dict)), None)
    if not isinstance(result, dict):
        raise ProviderResponseParseError("Expected a JSON object", raw_response=text)
    return result


def parse_json_array(text: str) -> list:
    """Parse a JSON array; a single object is wrapped into a list."""
    result = parse_json_payload(text)
    if isinstance(result, dict):
        return [result]
    if not isinstance(result, list):
        raise ProviderResponseParseError("Expected a JSON array", raw_response=text)
    return result
