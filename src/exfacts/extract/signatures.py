"""Decomposition of typespec signatures into canonical records.

Two surface shapes are recognized:

- ``name(params) :: return``
- ``(name(params) :: return) when [var: constraint, ...]``

Both ``@spec`` / ``@callback`` / ``@macrocallback`` annotations and the bare
signature expression inside them are accepted. Decomposition is purely
structural; types are kept as raw subtrees.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple

from exfacts.config import ExtractionOptions, resolve_options
from exfacts.extract.errors import ExtractionResult, NotASignature
from exfacts.models.signatures import FunctionSignatureRecord, SpecKind, flatten_union
from exfacts.syntax.classify import attribute, is_excluded_name, is_signature_annotation
from exfacts.syntax.helpers import is_node, normalize_body
from exfacts.syntax.location import location_if

logger = logging.getLogger(__name__)


class SignatureParts(NamedTuple):
    name: str
    parameters: list[Any]
    return_type: Any
    constraints: dict[str, Any]


def _constraints(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, list):
        return {}
    constraints: dict[str, Any] = {}
    for item in raw:
        if isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str):
            constraints[item[0]] = item[1]
    return constraints


def split_signature(expr: Any) -> SignatureParts | None:
    """Split a bare signature expression, or return None if it is not one."""
    constraints: dict[str, Any] = {}
    if is_node(expr) and expr[0] == "when" and isinstance(expr[2], list):
        if len(expr[2]) != 2:
            return None
        expr, raw_constraints = expr[2]
        constraints = _constraints(raw_constraints)

    if not (is_node(expr) and expr[0] == "::" and isinstance(expr[2], list)):
        return None
    if len(expr[2]) != 2:
        return None

    head, return_type = expr[2]
    if not (is_node(head) and isinstance(head[0], str)) or is_excluded_name(head[0]):
        return None

    # `now :: t` has no parentheses and therefore no parameters.
    parameters = list(head[2]) if isinstance(head[2], list) else []
    return SignatureParts(head[0], parameters, return_type, constraints)


def _signature_source(node: Any, spec_kind: SpecKind) -> tuple[Any, SpecKind]:
    if is_signature_annotation(node):
        parts = attribute(node)
        if parts is not None:
            return parts[1], parts[0]  # type: ignore[return-value]
    return node, spec_kind


def is_signature(node: Any) -> bool:
    """Return True when ``node`` would decompose without error."""
    expr, _kind = _signature_source(node, "spec")
    return split_signature(expr) is not None


def decompose_signature(
    node: Any,
    options: ExtractionOptions | None = None,
    *,
    spec_kind: SpecKind = "spec",
) -> ExtractionResult[FunctionSignatureRecord]:
    """Decompose a signature annotation or bare signature expression.

    ``spec_kind`` applies to bare expressions only; annotations carry their
    own kind.
    """
    options = resolve_options(options)
    expr, kind = _signature_source(node, spec_kind)
    parts = split_signature(expr)
    if parts is None:
        return ExtractionResult.failure(NotASignature.for_node(node))

    return ExtractionResult.success(
        FunctionSignatureRecord(
            name=parts.name,
            arity=len(parts.parameters),
            spec_kind=kind,
            parameter_types=parts.parameters,
            return_type=parts.return_type,
            type_constraints=parts.constraints,
            has_type_constraints=bool(parts.constraints),
            location=location_if(node, options),
        )
    )


def decompose_signature_or_raise(
    node: Any,
    options: ExtractionOptions | None = None,
    *,
    spec_kind: SpecKind = "spec",
) -> FunctionSignatureRecord:
    return decompose_signature(node, options, spec_kind=spec_kind).unwrap()


def extract_signatures(
    body: Any, options: ExtractionOptions | None = None
) -> list[FunctionSignatureRecord]:
    """Extract every signature annotation from a module body, in order."""
    signatures: list[FunctionSignatureRecord] = []
    for statement in normalize_body(body):
        if not is_signature_annotation(statement):
            continue
        result = decompose_signature(statement, options)
        if result.value is not None:
            signatures.append(result.value)
        else:
            logger.debug("Skipping signature annotation: %s", result.error)
    return signatures


__all__ = [
    "SignatureParts",
    "decompose_signature",
    "decompose_signature_or_raise",
    "extract_signatures",
    "flatten_union",
    "is_signature",
    "split_signature",
]
