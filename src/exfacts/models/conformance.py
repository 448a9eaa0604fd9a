"""Records describing the behaviour contracts a module fulfils."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from exfacts.models.locations import SourceLocation


class OverrideSource(str, Enum):
    """How an override marker names its functions."""

    EXPLICIT_LIST = "explicit_list"
    MODULE_REFERENCE = "module_reference"


class ConformanceDeclaration(BaseModel):
    """One ``@behaviour Target`` declaration."""

    model_config = ConfigDict(frozen=True)

    target: str
    location: SourceLocation | None = None


class OverrideMarker(BaseModel):
    """One entry of a ``defoverridable`` form.

    Module-reference markers have no arity: they stand for every function
    of the referenced contract.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arity: int | None = None
    source: OverrideSource = OverrideSource.EXPLICIT_LIST


class ConformanceSet(BaseModel):
    """Declarations, defined functions and override markers of a module body."""

    model_config = ConfigDict(frozen=True)

    declarations: tuple[ConformanceDeclaration, ...] = Field(default_factory=tuple)
    functions: tuple[tuple[str, int], ...] = Field(
        default_factory=tuple,
        description="Unique (name, arity) pairs in order of first definition",
    )
    overrides: tuple[OverrideMarker, ...] = Field(default_factory=tuple)

    def implemented_targets(self) -> list[str]:
        return [declaration.target for declaration in self.declarations]

    def implements(self, target: str) -> bool:
        return any(declaration.target == target for declaration in self.declarations)

    def overridable_functions(self) -> list[tuple[str, int]]:
        return [
            (marker.name, marker.arity)
            for marker in self.overrides
            if marker.source is OverrideSource.EXPLICIT_LIST and marker.arity is not None
        ]

    def is_overridable(self, name: str, arity: int) -> bool:
        return (name, arity) in self.overridable_functions()

    def defines(self, name: str, arity: int) -> bool:
        return (name, arity) in self.functions

    def missing_callbacks(
        self, required: Iterable[tuple[str, int]]
    ) -> list[tuple[str, int]]:
        """Return the entries of ``required`` with no matching definition."""
        defined = set(self.functions)
        return [(name, arity) for name, arity in required if (name, arity) not in defined]

    def matching_callbacks(
        self, required: Iterable[tuple[str, int]]
    ) -> list[tuple[str, int]]:
        """Return the entries of ``required`` that are defined."""
        defined = set(self.functions)
        return [(name, arity) for name, arity in required if (name, arity) in defined]


__all__ = [
    "ConformanceDeclaration",
    "ConformanceSet",
    "OverrideMarker",
    "OverrideSource",
]
