"""Extractors for behaviour contracts, conformance, call sites and signatures."""

from exfacts.extract.behaviour import (
    defines_contracts,
    extract_callback,
    extract_callback_or_raise,
    extract_contracts,
)
from exfacts.extract.calls import (
    extract_all_calls,
    extract_call,
    extract_call_or_raise,
    extract_dynamic_call,
    extract_dynamic_call_or_raise,
    extract_dynamic_calls,
    extract_local_calls,
    extract_remote_call,
    extract_remote_call_or_raise,
    extract_remote_calls,
    walk_calls,
)
from exfacts.extract.conformance import (
    extract_behaviour_declaration,
    extract_behaviour_declaration_or_raise,
    extract_conformance,
    extract_overrides,
    implements_contracts,
)
from exfacts.extract.errors import (
    ExtractionError,
    ExtractionResult,
    NotABehaviorDeclaration,
    NotACallExpression,
    NotASignature,
)
from exfacts.extract.signatures import (
    decompose_signature,
    decompose_signature_or_raise,
    extract_signatures,
    flatten_union,
    is_signature,
)

__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "NotABehaviorDeclaration",
    "NotACallExpression",
    "NotASignature",
    "decompose_signature",
    "decompose_signature_or_raise",
    "defines_contracts",
    "extract_all_calls",
    "extract_behaviour_declaration",
    "extract_behaviour_declaration_or_raise",
    "extract_call",
    "extract_call_or_raise",
    "extract_callback",
    "extract_callback_or_raise",
    "extract_conformance",
    "extract_contracts",
    "extract_dynamic_call",
    "extract_dynamic_call_or_raise",
    "extract_dynamic_calls",
    "extract_local_calls",
    "extract_overrides",
    "extract_remote_call",
    "extract_remote_call_or_raise",
    "extract_remote_calls",
    "extract_signatures",
    "flatten_union",
    "implements_contracts",
    "is_signature",
    "walk_calls",
]
