# src/allocprep/decoder/field_decoder.py
"""
@brief
Decoders for the ambiguous per-field encodings found in uploaded sheets.

@details
Spreadsheet users mix encodings for the same logical field: a list of slots
may arrive as a JSON array or as "1, 2, 3", preferred phases may also be a
range such as "2-4". Each encoding is a small strategy returning a
DecodeResult; `first_applicable` runs strategies in order and stops at the
first one that applies. Strategies never raise for bad content, they report
problems instead so the caller can turn them into findings.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

_INT_RE = re.compile(r"^[+-]?\d+$")


# ----------------------------
# RESULT TYPES
# ----------------------------
@dataclass(frozen=True)
class DecodeResult:
    """
    @brief
    Outcome of one decode attempt.

    @details
    Exactly one of three states:
      - success: `ok` is True and `value` holds the decoded value;
      - failure: `ok` is False and `problems` lists what was wrong;
      - not applicable: `applicable` is False, the next strategy should run.
    """

    ok: bool
    value: Any = None
    problems: tuple[str, ...] = field(default_factory=tuple)
    applicable: bool = True

    @classmethod
    def success(cls, value: Any) -> DecodeResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, *problems: str) -> DecodeResult:
        return cls(ok=False, problems=tuple(problems))


NOT_APPLICABLE = DecodeResult(ok=False, applicable=False)

Strategy = Callable[[str], DecodeResult]


@dataclass(frozen=True)
class RawText:
    """JSON blob that did not parse; kept verbatim for display."""

    text: str
    error: str | None = None


@dataclass(frozen=True)
class ParsedJson:
    """JSON blob that parsed; `value` has no fixed schema."""

    text: str
    value: Any


JsonBlob = RawText | ParsedJson


# ----------------------------
# SCALAR HELPERS
# ----------------------------
def parse_int(value: Any) -> int | None:
    """
    @brief
    Strict integer coercion used by decoders and record models.

    @details
    Accepts ints (bools excluded), integral floats, and strings holding a
    signed integer after trimming. Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        s = value.strip()
        if _INT_RE.match(s):
            return int(s)
    return None


def split_list(raw: str | None) -> list[str]:
    """Comma split with trimming; empty tokens dropped. Never fails."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


# ----------------------------
# STRATEGIES
# ----------------------------
def json_int_array(minimum: int = 1) -> Strategy:
    """
    @brief
    Build a strategy decoding a JSON array of integers.

    @details
    Declines (NOT_APPLICABLE) when the text is not JSON or the JSON value is
    not an array. For an array, every element must be an integer >= minimum;
    each offending element yields its own problem.
    """

    def _decode(raw: str) -> DecodeResult:
        try:
            parsed = json.loads(raw)
        except (ValueError, TypeError):
            return NOT_APPLICABLE
        if not isinstance(parsed, list):
            return NOT_APPLICABLE

        values: list[int] = []
        problems: list[str] = []
        for item in parsed:
            number = parse_int(item) if not isinstance(item, str) else None
            if number is None or number < minimum:
                problems.append(f"{item!r} is not an integer >= {minimum}")
            else:
                values.append(number)
        if problems:
            return DecodeResult.failure(*problems)
        return DecodeResult.success(values)

    return _decode


def int_range(raw: str) -> DecodeResult:
    """
    Decode "start-end" into the inclusive list of integers. Declines when the
    text has no hyphen.
    """
    if "-" not in raw:
        return NOT_APPLICABLE
    tokens = raw.split("-")
    if len(tokens) != 2:
        return DecodeResult.failure(f"range {raw!r} must have exactly two bounds")
    start, end = parse_int(tokens[0]), parse_int(tokens[1])
    if start is None or end is None:
        return DecodeResult.failure(f"range {raw!r} has a non-numeric bound")
    if start > end:
        return DecodeResult.failure(f"range {raw!r} starts after it ends")
    return DecodeResult.success(list(range(start, end + 1)))


def comma_int_list(minimum: int = 1) -> Strategy:
    """Build a strategy decoding "1, 2, 3"; one problem per bad token."""

    def _decode(raw: str) -> DecodeResult:
        values: list[int] = []
        problems: list[str] = []
        for token in raw.split(","):
            token = token.strip()
            number = parse_int(token)
            if number is None or number < minimum:
                problems.append(f"{token!r} is not an integer >= {minimum}")
            else:
                values.append(number)
        if problems:
            return DecodeResult.failure(*problems)
        return DecodeResult.success(values)

    return _decode


def first_applicable(raw: str, strategies: Sequence[Strategy]) -> DecodeResult:
    """
    @brief
    Try-in-order combinator.

    @details
    Runs each strategy on `raw` and returns the first result that applies,
    successful or not. If every strategy declines, returns a failure.
    """
    for strategy in strategies:
        result = strategy(raw)
        if result.applicable:
            return result
    return DecodeResult.failure(f"{raw!r} matches no supported encoding")


# ----------------------------
# FIELD DECODERS
# ----------------------------
_SLOT_STRATEGIES: tuple[Strategy, ...] = (json_int_array(1), comma_int_list(1))
_PHASE_STRATEGIES: tuple[Strategy, ...] = (json_int_array(1), int_range, comma_int_list(1))


def decode_available_slots(raw: str) -> DecodeResult:
    """AvailableSlots: JSON array, then comma list."""
    return first_applicable(raw, _SLOT_STRATEGIES)


def decode_preferred_phases(raw: str) -> DecodeResult:
    """PreferredPhases: JSON array, then "start-end" range, then comma list."""
    return first_applicable(raw, _PHASE_STRATEGIES)


def decode_json_blob(raw: str) -> JsonBlob:
    """Generic JSON parse; failures come back as RawText with the parser message."""
    try:
        return ParsedJson(text=raw, value=json.loads(raw))
    except ValueError as e:
        return RawText(text=raw, error=str(e))


__all__ = [
    "NOT_APPLICABLE",
    "DecodeResult",
    "JsonBlob",
    "ParsedJson",
    "RawText",
    "comma_int_list",
    "decode_available_slots",
    "decode_json_blob",
    "decode_preferred_phases",
    "first_applicable",
    "int_range",
    "json_int_array",
    "parse_int",
    "split_list",
]
