"""Source location extraction from node metadata."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from exfacts.models.locations import SourceLocation
from exfacts.syntax.helpers import is_node

if TYPE_CHECKING:
    from exfacts.config import ExtractionOptions


def _position(meta: Any) -> tuple[int, int] | None:
    if not isinstance(meta, Mapping):
        return None
    line = meta.get("line")
    column = meta.get("column")
    if (
        isinstance(line, int)
        and isinstance(column, int)
        and not isinstance(line, bool)
        and not isinstance(column, bool)
        and line > 0
        and column > 0
    ):
        return line, column
    return None


def _end_position(meta: Mapping[str, Any]) -> tuple[int | None, int | None]:
    # Block constructs carry `end`; parenthesized calls carry `closing`.
    for key in ("end", "closing"):
        position = _position(meta.get(key))
        if position is not None:
            return position
    return None, None


def extract_location(node: Any) -> SourceLocation | None:
    """Return the source location of ``node`` or None when it has none.

    A location needs both a positive ``line`` and ``column`` in the node's
    metadata; a node parsed without column tracking has no location.
    """
    if not is_node(node):
        return None

    meta = node[1]
    start = _position(meta)
    if start is None:
        return None

    end_line, end_column = _end_position(meta)
    return SourceLocation(
        start_line=start[0],
        start_column=start[1],
        end_line=end_line,
        end_column=end_column,
    )


def location_if(node: Any, options: ExtractionOptions) -> SourceLocation | None:
    """Return the location of ``node`` when ``options.include_location`` is set."""
    if not options.include_location:
        return None
    return extract_location(node)


__all__ = ["extract_location", "location_if"]
