"""Extraction failures and the checked result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from exfacts.syntax.helpers import format_error

T = TypeVar("T")


class ExtractionError(Exception):
    """Base class for shape mismatches reported by the extractors."""

    kind: ClassVar[str] = "extraction_error"
    default_message: ClassVar[str] = "Not extractable"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def for_node(cls, node: Any, message: str | None = None) -> ExtractionError:
        return cls(format_error(message or cls.default_message, node))


class NotASignature(ExtractionError):
    kind = "not_a_signature"
    default_message = "Not a signature"


class NotACallExpression(ExtractionError):
    kind = "not_a_call_expression"
    default_message = "Not a call expression"


class NotABehaviorDeclaration(ExtractionError):
    kind = "not_a_behavior_declaration"
    default_message = "Not a @behaviour declaration"


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """Outcome of a checked extraction: a value or an error, never both."""

    value: T | None = None
    error: ExtractionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> ExtractionResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ExtractionError) -> ExtractionResult[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "NotABehaviorDeclaration",
    "NotACallExpression",
    "NotASignature",
]
