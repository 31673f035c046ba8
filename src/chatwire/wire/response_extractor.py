"""wire.response_extractor

Locates the generated text inside a full (non-streaming) response document.
"""

from __future__ import annotations

from typing import Any

from chatwire.core.exceptions import ParseError
from chatwire.core.json_path import JsonPath, first_string

#: Tried in this order; the first path holding a string wins.
CONTENT_PATHS: tuple[JsonPath, ...] = (
    JsonPath.of('choices', 0, 'message', 'content'),  # generic chat envelope
    JsonPath.of('output', 'choices', 0, 'message', 'content'),  # native, result_format=message
    JsonPath.of('output', 'text'),  # native, result_format=text
)


def extract_content(document: Any) -> str:
    """Return the generated text of *document*.

    Raises
    ------
    ParseError
        If none of `CONTENT_PATHS` resolves to a string.

    """
    if (found := first_string(document, CONTENT_PATHS)) is None:
        raise ParseError('Unable to parse response content')
    return found[1]
