"""structured.analysis

Parses the structured form of an OHLCV analysis reply into `OHLCVAnalysis`.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from chatwire.core.exceptions import ParseError
from chatwire.core.types import OHLCVAnalysis
from chatwire.structured.ohlcv import JSON_ERRORS, locate_span, reject_constant


def locate_object(text: str) -> str:
    """Return the brace-delimited object inside *text*, or *text* itself."""
    return locate_span(text, '{', '}')


def parse_analysis(text: str) -> OHLCVAnalysis:
    """Extract ``{"summary", "details", "recommendations"}`` from model output.

    Raises
    ------
    ParseError
        On invalid JSON, a non-object document, an empty summary, or
        ``details``/``recommendations`` that are not arrays of strings.

    """
    try:
        parsed = json.loads(locate_object(text), parse_constant=reject_constant)
    except JSON_ERRORS as exc:
        raise ParseError(f'Failed to parse JSON: {exc}') from exc
    if not isinstance(parsed, dict):
        raise ParseError(f'Expected a JSON object, got {type(parsed).__name__}')

    try:
        return OHLCVAnalysis.model_validate(parsed)
    except ValidationError as exc:
        fields = ', '.join(dict.fromkeys(str(err['loc'][0]) for err in exc.errors() if err['loc']))
        raise ParseError(f'Invalid analysis structure: {fields}') from exc
