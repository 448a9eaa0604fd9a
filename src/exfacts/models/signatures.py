"""Function and callback signature records."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from exfacts.models.locations import SourceLocation

SpecKind = Literal["spec", "callback", "macrocallback"]


def flatten_union(type_expr: Any) -> list[Any]:
    """Flatten a ``a | b | c`` type expression into its alternatives.

    Alternatives come back leftmost first, whichever way the chain
    associates. A non-union expression yields a single-element list.
    """
    alternatives: list[Any] = []
    stack = [type_expr]
    while stack:
        current = stack.pop()
        if _is_union(current):
            left, right = current[2]
            stack.append(right)
            stack.append(left)
        else:
            alternatives.append(current)
    return alternatives


def _is_union(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 3
        and value[0] == "|"
        and isinstance(value[2], list)
        and len(value[2]) == 2
    )


class FunctionSignatureRecord(BaseModel):
    """A decomposed ``@spec``, ``@callback`` or ``@macrocallback``.

    Parameter and return types are raw subtrees; nothing is evaluated.
    ``parameter_types`` is a tuple and ``type_constraints`` a copy owned by
    the record.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arity: int
    spec_kind: SpecKind = "spec"
    parameter_types: tuple[Any, ...] = Field(default_factory=tuple)
    return_type: Any = None
    type_constraints: dict[str, Any] = Field(default_factory=dict)
    has_type_constraints: bool = False
    location: SourceLocation | None = None

    @property
    def spec_id(self) -> str:
        return f"{self.name}/{self.arity}"

    @property
    def is_union_return(self) -> bool:
        return _is_union(self.return_type)

    def return_alternatives(self) -> list[Any]:
        return flatten_union(self.return_type)


__all__ = ["FunctionSignatureRecord", "SpecKind", "flatten_union"]
