"""core.json_path

Minimal typed navigation over decoded JSON documents.

A `JsonPath` is a sequence of object keys (``str``) and array indices
(``int``). `first_string()` tries several paths in a fixed priority order and
returns the first one that resolves to a string, which keeps the order of
envelope shapes explicit instead of hiding it in nested ``.get()`` chains.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Sequence

#: Sentinel returned by `JsonPath.resolve` when a hop does not exist.
MISSING: Any = object()


class JsonPath(NamedTuple):
    """Path into a JSON tree, e.g. ``JsonPath.of('choices', 0, 'message')``."""

    segments: tuple[str | int, ...]

    @classmethod
    def of(cls, *segments: str | int) -> JsonPath:
        return cls(tuple(segments))

    def resolve(self, document: Any) -> Any:
        """Return the value at this path, or `MISSING` if any hop fails."""
        node = document
        for segment in self.segments:
            if isinstance(segment, int):
                if not isinstance(node, list) or not 0 <= segment < len(node):
                    return MISSING
            elif not isinstance(node, dict) or segment not in node:
                return MISSING
            node = node[segment]
        return node

    def __str__(self) -> str:
        out = ''
        for segment in self.segments:
            if isinstance(segment, int):
                out += f'[{segment}]'
            else:
                out += f'.{segment}' if out else segment
        return out


def first_string(document: Any, paths: Sequence[JsonPath]) -> tuple[JsonPath, str] | None:
    """Return ``(path, value)`` for the first path resolving to a ``str``."""
    for path in paths:
        value = path.resolve(document)
        if isinstance(value, str):
            return path, value
    return None
