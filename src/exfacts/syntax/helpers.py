"""Shared helpers for reading tagged-tuple syntax trees."""

from __future__ import annotations

import reprlib
from collections.abc import Mapping
from typing import Any

_ERROR_REPR = reprlib.Repr()
_ERROR_REPR.maxlevel = 4
_ERROR_REPR.maxlist = 20
_ERROR_REPR.maxtuple = 20
_ERROR_REPR.maxdict = 10
_ERROR_REPR.maxstring = 100
_ERROR_REPR.maxother = 100


def is_node(value: Any) -> bool:
    """Return True for a ``(tag, meta, children)`` tree node.

    A tag is a string or, for dotted calls, another node; nested tags are
    followed iteratively.
    """
    while isinstance(value, tuple) and len(value) == 3 and isinstance(value[1], Mapping):
        if isinstance(value[0], str):
            return True
        value = value[0]
    return False


def normalize_body(body: Any) -> list[Any]:
    """Normalize a module or function body to a list of statements.

    Examples:
        >>> normalize_body(("__block__", {}, ["a", "b"]))
        ['a', 'b']
        >>> normalize_body(None)
        []
        >>> normalize_body(("foo", {}, []))
        [('foo', {}, [])]
    """
    if body is None:
        return []
    if isinstance(body, list):
        return list(body)
    if is_node(body) and body[0] == "__block__" and isinstance(body[2], list):
        return list(body[2])
    return [body]


def keyword_values(value: Any) -> list[Any]:
    """Return the values of a ``[do: ..., else: ...]`` keyword list.

    Items that are not ``(key, value)`` pairs are returned as-is so that
    nothing inside a malformed keyword list is lost.
    """
    if not isinstance(value, list):
        return [value]

    values: list[Any] = []
    for item in value:
        if isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str):
            values.append(item[1])
        else:
            values.append(item)
    return values


def keyword_pairs(value: Any) -> list[tuple[str, int]]:
    """Return the ``(name, arity)`` pairs of a keyword list like ``[foo: 1]``."""
    if not isinstance(value, list):
        return []
    return [
        (item[0], item[1])
        for item in value
        if isinstance(item, tuple)
        and len(item) == 2
        and isinstance(item[0], str)
        and isinstance(item[1], int)
        and not isinstance(item[1], bool)
    ]


def module_name(value: Any) -> str | None:
    """Render a module reference as a dotted name.

    Examples:
        >>> module_name(("__aliases__", {}, ["MyApp", "Worker"]))
        'MyApp.Worker'
        >>> module_name("gen_server")
        'gen_server'
        >>> module_name(42) is None
        True
    """
    if isinstance(value, str):
        return value
    if is_node(value) and value[0] == "__aliases__" and isinstance(value[2], list):
        parts = value[2]
        if parts and all(isinstance(part, str) for part in parts):
            return ".".join(parts)
        return None
    if is_node(value) and value[0] == "__MODULE__" and not isinstance(value[2], list):
        return "__MODULE__"
    return None


def format_error(message: str, node: Any) -> str:
    """Format an error message with a size-limited rendering of ``node``."""
    return f"{message}: {_ERROR_REPR.repr(node)}"


__all__ = [
    "format_error",
    "is_node",
    "keyword_pairs",
    "keyword_values",
    "module_name",
    "normalize_body",
]
