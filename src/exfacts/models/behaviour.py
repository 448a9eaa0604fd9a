"""Records describing the callback contracts a module declares."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from exfacts.models.locations import SourceLocation

CallbackKind = Literal["callback", "macrocallback"]


class CallbackRecord(BaseModel):
    """A single ``@callback`` or ``@macrocallback`` declaration.

    Identity is ``(name, arity)``: the same name may be declared at several
    arities.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arity: int
    kind: CallbackKind = "callback"
    signature: Any = Field(default=None, description="Raw signature subtree")
    parameter_types: tuple[Any, ...] = Field(default_factory=tuple)
    return_type: Any = None
    type_constraints: dict[str, Any] = Field(default_factory=dict)
    is_optional: bool = False
    documentation: str | None = None
    location: SourceLocation | None = None

    @property
    def identity(self) -> tuple[str, int]:
        return self.name, self.arity


class ContractSet(BaseModel):
    """Everything a module body declares about its behaviour contract."""

    model_config = ConfigDict(frozen=True)

    documentation: str | None = None
    documentation_disabled: bool = Field(
        default=False, description="True for `@moduledoc false`"
    )
    callbacks: tuple[CallbackRecord, ...] = Field(default_factory=tuple)
    macrocallbacks: tuple[CallbackRecord, ...] = Field(default_factory=tuple)
    optional_callbacks: tuple[tuple[str, int], ...] = Field(default_factory=tuple)

    def all_callbacks(self) -> list[CallbackRecord]:
        return [*self.callbacks, *self.macrocallbacks]

    def callback_names(self) -> list[str]:
        return [callback.name for callback in self.all_callbacks()]

    def required_callback_names(self) -> list[str]:
        return [cb.name for cb in self.all_callbacks() if not cb.is_optional]

    def optional_callback_names(self) -> list[str]:
        return [cb.name for cb in self.all_callbacks() if cb.is_optional]

    def get_callback(self, name: str, arity: int | None = None) -> CallbackRecord | None:
        """Return the first callback named ``name`` (at ``arity`` if given)."""
        for callback in self.all_callbacks():
            if callback.name == name and (arity is None or callback.arity == arity):
                return callback
        return None

    def is_optional(self, name: str, arity: int) -> bool:
        return (name, arity) in self.optional_callbacks

    @property
    def is_empty(self) -> bool:
        return not self.callbacks and not self.macrocallbacks


__all__ = ["CallbackKind", "CallbackRecord", "ContractSet"]
