"""Source location model shared by all records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SourceLocation(BaseModel):
    """Start (and, when known, end) position of a node. All values are 1-based."""

    model_config = ConfigDict(frozen=True)

    start_line: int
    start_column: int
    end_line: int | None = None
    end_column: int | None = None


__all__ = ["SourceLocation"]
