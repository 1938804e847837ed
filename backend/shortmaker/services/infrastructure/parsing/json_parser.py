"""
JSON parsing for text-provider responses.

Providers are asked for JSON but routinely wrap it in markdown fences, add
chatter around it, emit invalid escapes, or get cut off mid-object. This
module recovers what it can and otherwise raises a typed, retryable error:

- empty or unparseable text  -> ``MalformedOutputError``
- unparseable and oversized / visibly truncated -> ``OutputTooLongError``
"""

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from shortmaker.config.constants import MAX_SCRIPT_RESPONSE_CHARS
from shortmaker.core.exceptions import MalformedOutputError, OutputTooLongError

_PAIRS = {"}": "{", "]": "["}
_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*$")


def _scan_structure(text: str) -> Iterator[Tuple[int, str, int, bool]]:
    """Yield ``(index, char, depth_after, in_string)`` for bracket characters.

    JSON string literals and escapes are skipped; a mismatched closer is reported
    with depth ``-1`` so callers can reset.
    """
    in_string = False
    string_char = ""
    escape = False
    stack: List[str] = []

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == string_char:
                in_string = False
            continue

        if ch == "\"":
            in_string = True
            string_char = ch
        elif ch in "{[":
            stack.append(ch)
            yield i, ch, len(stack), False
        elif ch in "}]" and stack:
            if stack[-1] == _PAIRS[ch]:
                stack.pop()
                yield i, ch, len(stack), False
            else:
                stack.clear()
                yield i, ch, -1, False

    # Final sentinel: remaining open depth and whether a string is unterminated
    yield len(text), "", len(stack), in_string


def extract_largest_balanced_json(text: str, expect_array: bool = False) -> Optional[str]:
    """Extract the largest balanced JSON object/array from text.

    Args:
        text: Source text potentially containing JSON.
        expect_array: If True, only return a JSON array (starts with '[').

    Returns:
        The largest balanced JSON substring, or None if not found.
    """
    if not text:
        return None

    start_idx: Optional[int] = None
    best: Optional[str] = None

    for i, ch, depth, _ in _scan_structure(text):
        if not ch:
            break
        if depth < 0:
            start_idx = None
        elif ch in "{[" and depth == 1:
            start_idx = i
        elif ch in "}]" and depth == 0 and start_idx is not None:
            candidate = text[start_idx:i + 1]
            start_idx = None
            if expect_array and not candidate.startswith("["):
                continue
            if best is None or len(candidate) > len(best):
                best = candidate

    return best


def is_likely_truncated_json(text: str) -> bool:
    """Heuristic check for truncated JSON payloads.

    Detects unterminated strings or unbalanced braces/brackets.
    """
    if not text:
        return False
    for _, ch, depth, in_string in _scan_structure(text):
        if ch and depth < 0:
            return False
        if not ch:
            return depth > 0 or in_string
    return False


def fix_json_escapes(text: str) -> str:
    """Escape lone backslashes while preserving valid JSON escapes."""
    return re.sub(r'\\(?!["\\/bfnrt]|u[0-9a-fA-F]{4})', r"\\\\", text)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence lines (```json ... ```)."""
    text = text.strip()
    if "```" not in text:
        return text
    lines = [line for line in text.split("\n") if not _FENCE_RE.match(line.strip())]
    return "\n".join(lines).strip()


def _try_load(candidate: str) -> Optional[Any]:
    for attempt in (candidate, fix_json_escapes(candidate)):
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue
    return None


def parse_json_response(text: str, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Parse a JSON object from a response, returning ``default`` on failure."""
    if default is None:
        default = {}
    if not text or not text.strip():
        return default

    cleaned = strip_code_fences(text)
    result = _try_load(cleaned)
    if result is None:
        candidate = extract_largest_balanced_json(cleaned)
        if candidate:
            result = _try_load(candidate)

    return result if isinstance(result, dict) else default


def parse_provider_json(text: Optional[str], max_chars: int = MAX_SCRIPT_RESPONSE_CHARS) -> Dict[str, Any]:
    """Parse provider output as a JSON object or raise a typed error.

    Args:
        text: Raw provider text.
        max_chars: Size ceiling; an unparseable response above it is reported
            as "output too long".

    Raises:
        MalformedOutputError: Empty text, or no JSON object could be recovered.
        OutputTooLongError: Recovery failed and the text is oversized or cut off.
    """
    if text is None or not text.strip():
        raise MalformedOutputError("Provider returned an empty response")

    parsed = parse_json_response(text, default=None)
    if parsed:
        return parsed

    cleaned = strip_code_fences(text)
    if len(text) > max_chars or is_likely_truncated_json(cleaned):
        raise OutputTooLongError(
            f"Provider output too long or truncated ({len(text)} chars); "
            "try a shorter duration"
        )
    raise MalformedOutputError(f"Provider returned invalid JSON: {cleaned[:120]!r}")


__all__ = [
    "extract_largest_balanced_json",
    "is_likely_truncated_json",
    "fix_json_escapes",
    "strip_code_fences",
    "parse_json_response",
    "parse_provider_json",
]
