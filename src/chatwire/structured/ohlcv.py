"""structured.ohlcv

Coerces free-form model output into a validated list of `OHLCVRecord`.

Element indices in error messages are 0-based.
"""

from __future__ import annotations

import json
import math
from typing import Any

from chatwire.core.exceptions import ParseError
from chatwire.core.types import OHLCVRecord

OHLCV_FIELDS: tuple[str, ...] = ('open', 'high', 'low', 'close', 'volume')

#: json.loads failures worth reporting as a ParseError (deep nesting exhausts the recursion limit).
JSON_ERRORS: tuple[type[Exception], ...] = (ValueError, RecursionError)


def reject_constant(name: str) -> float:
    raise ValueError(f'non-finite number {name} is not valid JSON')


def locate_span(text: str, opening: str, closing: str) -> str:
    """Return *text* from the first *opening* to the last *closing*, or *text* itself.

    Greedy, so prose around the payload is tolerated.
    """
    start = text.find(opening)
    end = text.rfind(closing)
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def locate_array(text: str) -> str:
    """Return the bracket-delimited array inside *text*, or *text* itself."""
    return locate_span(text, '[', ']')


def _number(element: dict[str, Any], index: int, field: str) -> float:
    value = element.get(field)
    # bool is an int subclass but never a valid price or volume
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ParseError(f"Element {index} missing or invalid '{field}' field")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise ParseError(f"Element {index} missing or invalid '{field}' field")
    return number


def _record(element: Any, index: int) -> OHLCVRecord:
    if not isinstance(element, dict):
        raise ParseError(f'Element {index} is not an object')
    open_, high, low, close, volume = (_number(element, index, field) for field in OHLCV_FIELDS)

    if high < low:
        raise ParseError(f'Element {index}: high cannot be lower than low')
    if close < low or close > high:
        raise ParseError(f'Element {index}: close must be between low and high')
    if volume < 0:
        raise ParseError(f'Element {index}: volume must be non-negative')

    return OHLCVRecord(open=open_, high=high, low=low, close=close, volume=volume)


def parse_ohlcv(text: str, expected_count: int) -> list[OHLCVRecord]:
    """Extract, validate and count-check OHLCV records from model output.

    Parameters
    ----------
    text
        Raw generated text expected to contain a JSON array of objects.
    expected_count
        Exact number of records the caller asked for. Checked only after
        every element parsed, so the error reports the true element count.

    Raises
    ------
    ParseError
        On invalid JSON, a non-array document, a non-object element, a
        missing or non-numeric field, a violated candle invariant, or a
        count mismatch.

    """
    try:
        parsed = json.loads(locate_array(text), parse_constant=reject_constant)
    except JSON_ERRORS as exc:
        raise ParseError(f'Failed to parse JSON: {exc}') from exc
    if not isinstance(parsed, list):
        raise ParseError(f'Expected a JSON array, got {type(parsed).__name__}')

    records = [_record(element, index) for index, element in enumerate(parsed)]

    if len(records) != expected_count:
        raise ParseError(f'AI returned {len(records)} OHLCV objects, but expected {expected_count}')
    return records
