"""
Model Response Recovery Parser
==============================

Turns the free-form text returned by the model into JSON.

Strategy:
---------
1. Strip an optional Markdown code fence (```json ... ```).
2. Strict ``json.loads`` on what is left.
3. Only when a list is expected: a single left-to-right scan collects every
   balanced top-level ``{...}`` substring (string literals and escapes are
   honoured, so braces inside values do not count). Each substring is parsed
   on its own; the ones that fail, and a trailing object that never closes,
   are dropped.

The outcome is a tagged ``ParseResult`` so callers can tell a clean parse
from a salvaged list from a failure.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from autommr.errors import ResponseParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL | re.IGNORECASE)

PREVIEW_CHARS = 100


class ParseStatus(str, Enum):
    """Outcome of a parse attempt."""
    SUCCESS = "success"
    PARTIAL_RECOVERY = "partial_recovery"
    FAILURE = "failure"


@dataclass
class ParseResult:
    """Tagged result of ``parse_json_response``."""
    status: ParseStatus
    value: Any = None
    dropped_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != ParseStatus.FAILURE

    def unwrap(self) -> Any:
        """Return the parsed value or raise ResponseParseError."""
        if self.status == ParseStatus.FAILURE:
            raise ResponseParseError(self.error or "Failed to parse the model's JSON response.")
        return self.value

    @classmethod
    def success(cls, value: Any) -> "ParseResult":
        return cls(status=ParseStatus.SUCCESS, value=value)

    @classmethod
    def partial(cls, values: List[Any], dropped_count: int) -> "ParseResult":
        return cls(status=ParseStatus.PARTIAL_RECOVERY, value=values, dropped_count=dropped_count)

    @classmethod
    def failure(cls, error: str, dropped_count: int = 0) -> "ParseResult":
        return cls(status=ParseStatus.FAILURE, error=error, dropped_count=dropped_count)


def strip_code_fence(text: str) -> str:
    """Remove surrounding whitespace and a single enclosing Markdown code fence."""
    cleaned = (text or "").strip()
    match = _FENCE_RE.match(cleaned)
    if match and match.group(1):
        cleaned = match.group(1).strip()
    return cleaned


def scan_object_candidates(text: str) -> Tuple[List[str], bool]:
    """
    Collect balanced top-level ``{...}`` substrings in one pass.

    String literals are skipped both inside and between objects, so braces
    in a stray top-level string never open a candidate.

    Returns:
        Tuple of (candidate substrings, whether an object was left unterminated)
    """
    candidates = []
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            if depth == 0:
                start = index
            depth += 1
        elif char == '}' and depth > 0:
            depth -= 1
            if depth == 0:
                candidates.append(text[start:index + 1])
                start = -1

    return candidates, depth > 0


def recover_objects(text: str) -> Tuple[List[Any], int]:
    """
    Parse every balanced object substring independently.

    Returns:
        Tuple of (recovered objects, number of dropped fragments)
    """
    candidates, unterminated = scan_object_candidates(text)
    recovered = []
    dropped = 1 if unterminated else 0

    for candidate in candidates:
        try:
            recovered.append(json.loads(candidate))
        except json.JSONDecodeError as e:
            dropped += 1
            logger.warning(f"JSON recovery: could not parse suspected object: {candidate[:100]}... ({e})")

    return recovered, dropped


def _failure_message(original: str) -> str:
    return (
        "Failed to parse the model's JSON response. "
        f"Response (start): {(original or '')[:PREVIEW_CHARS]}..."
    )


def parse_json_response(text: str, expect_array: bool = False) -> ParseResult:
    """
    Parse a model answer, salvaging individual objects when a list is expected.

    Args:
        text: Raw model text
        expect_array: Whether the caller expects a JSON array of objects

    Returns:
        ParseResult tagged SUCCESS, PARTIAL_RECOVERY or FAILURE
    """
    cleaned = strip_code_fence(text)

    try:
        return ParseResult.success(json.loads(cleaned))
    except json.JSONDecodeError as initial_error:
        logger.warning(
            f"Initial JSON parse failed: {initial_error}. "
            f"Attempting recovery for string (first 300 chars): {cleaned[:300]}..."
        )

    if not expect_array:
        logger.error(f"Failed to parse JSON object response: {(text or '')[:300]}")
        return ParseResult.failure(_failure_message(text))

    recovered, dropped = recover_objects(cleaned)
    if recovered:
        logger.info(
            f"JSON recovery: parsed {len(recovered)} individual object(s), dropped {dropped} fragment(s)"
        )
        return ParseResult.partial(recovered, dropped)

    logger.error(f"JSON recovery found no valid objects. Original string (first 300 chars): {(text or '')[:300]}")
    return ParseResult.failure(_failure_message(text), dropped_count=dropped)
