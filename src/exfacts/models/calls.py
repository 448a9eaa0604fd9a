"""Call-site records."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from exfacts.models.locations import SourceLocation

CallKind = Literal["local", "remote", "dynamic"]


class FunctionCallRecord(BaseModel):
    """A call expression found in a tree.

    ``arguments`` holds the raw argument subtrees in source order and
    ``arity`` is always their count. ``metadata`` is a copy owned by the
    record.
    """

    model_config = ConfigDict(frozen=True)

    kind: CallKind
    name: str
    arity: int
    module: str | None = Field(
        default=None, description="Target module or receiver for remote calls"
    )
    arguments: tuple[Any, ...] = Field(default_factory=tuple)
    location: SourceLocation | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CallWalk(BaseModel):
    """Calls collected by one traversal."""

    model_config = ConfigDict(frozen=True)

    calls: tuple[FunctionCallRecord, ...] = Field(default_factory=tuple)
    truncated: bool = Field(
        default=False,
        description="True when the depth bound cut off part of the tree",
    )


__all__ = ["CallKind", "CallWalk", "FunctionCallRecord"]
