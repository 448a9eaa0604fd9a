"""Record models produced by the extractors."""

from exfacts.models.behaviour import CallbackKind, CallbackRecord, ContractSet
from exfacts.models.calls import CallKind, CallWalk, FunctionCallRecord
from exfacts.models.conformance import (
    ConformanceDeclaration,
    ConformanceSet,
    OverrideMarker,
    OverrideSource,
)
from exfacts.models.locations import SourceLocation
from exfacts.models.signatures import FunctionSignatureRecord, SpecKind, flatten_union

__all__ = [
    "CallKind",
    "CallWalk",
    "CallbackKind",
    "CallbackRecord",
    "ConformanceDeclaration",
    "ConformanceSet",
    "ContractSet",
    "FunctionCallRecord",
    "FunctionSignatureRecord",
    "OverrideMarker",
    "OverrideSource",
    "SourceLocation",
    "SpecKind",
    "flatten_union",
]
