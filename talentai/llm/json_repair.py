"""
Best-effort repair of model JSON output.

Models asked for "only JSON" still wrap it in Markdown fences, prepend
a sentence of prose or leave a trailing comma behind.  The helpers here
recover the JSON value where that is possible and raise
:class:`MalformedResponseError` where it is not.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_TRUE_WORDS = {"true", "yes", "pass", "passed"}
_FALSE_WORDS = {"false", "no", "fail", "failed"}


class MalformedResponseError(ValueError):
    """Raised when a model response cannot be turned into the expected JSON."""


def strip_code_fences(text: str) -> str:
    """Return the contents of the first Markdown code fence, or ``text`` unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _outermost_block(text: str) -> Optional[str]:
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    return text[start:end + 1]


def extract_json(text: Optional[str]) -> Any:
    """Parse a JSON value out of raw model text.

    The following are attempted in order: the text as-is, the contents
    of a Markdown code fence, the outermost ``{...}`` or ``[...]``
    block, and that block with trailing commas removed.

    Raises:
        MalformedResponseError: If the text is empty or no attempt parses.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from model")
    candidates: List[str] = [text.strip()]
    unfenced = strip_code_fences(text)
    if unfenced != text:
        candidates.append(unfenced)
    block = _outermost_block(unfenced)
    if block:
        candidates.append(block)
        candidates.append(_TRAILING_COMMA_RE.sub(r"\1", block))
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    logger.debug("Unparseable model output: %s", text[:200])
    raise MalformedResponseError("Model response was not valid JSON")


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` if it is not numeric.

    Numeric strings such as ``"75"`` are accepted; booleans are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_bool(value: Any) -> Optional[bool]:
    """Return ``value`` as a bool, accepting common yes/no words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def find_array(data: Any, keys: Iterable[str]) -> Optional[list]:
    """Return the result array from a response.

    A bare list is returned unchanged.  For an object, the first list
    under one of ``keys`` is returned.  Anything else yields ``None``.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
    return None
