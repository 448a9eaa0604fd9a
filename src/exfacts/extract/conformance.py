"""Extraction of the behaviour contracts a module body fulfils."""

from __future__ import annotations

import logging
from typing import Any

from exfacts.config import ExtractionOptions, resolve_options
from exfacts.extract.errors import ExtractionResult, NotABehaviorDeclaration
from exfacts.models.conformance import (
    ConformanceDeclaration,
    ConformanceSet,
    OverrideMarker,
    OverrideSource,
)
from exfacts.syntax.classify import (
    attribute,
    function_head,
    is_behaviour_declaration,
    is_overridable,
)
from exfacts.syntax.helpers import keyword_pairs, module_name, normalize_body
from exfacts.syntax.location import location_if

logger = logging.getLogger(__name__)


def _declaration_target(node: Any) -> str | None:
    if not is_behaviour_declaration(node):
        return None
    parts = attribute(node)
    if parts is None:
        return None
    return module_name(parts[1])


def extract_behaviour_declaration(
    node: Any, options: ExtractionOptions | None = None
) -> ExtractionResult[ConformanceDeclaration]:
    """Extract the target of a ``@behaviour Target`` annotation."""
    options = resolve_options(options)
    target = _declaration_target(node)
    if target is None:
        return ExtractionResult.failure(NotABehaviorDeclaration.for_node(node))
    return ExtractionResult.success(
        ConformanceDeclaration(target=target, location=location_if(node, options))
    )


def extract_behaviour_declaration_or_raise(
    node: Any, options: ExtractionOptions | None = None
) -> ConformanceDeclaration:
    return extract_behaviour_declaration(node, options).unwrap()


def extract_overrides(node: Any) -> list[OverrideMarker]:
    """Normalize a ``defoverridable`` form into override markers.

    ``defoverridable [init: 1, call: 2]`` yields one marker per pair;
    ``defoverridable SomeBehaviour`` yields a single marker without arity.
    Anything else yields an empty list.
    """
    if not is_overridable(node):
        return []

    value = node[2][0]
    if isinstance(value, list):
        return [
            OverrideMarker(name=name, arity=arity, source=OverrideSource.EXPLICIT_LIST)
            for name, arity in keyword_pairs(value)
        ]

    reference = module_name(value)
    if reference is None:
        return []
    return [OverrideMarker(name=reference, source=OverrideSource.MODULE_REFERENCE)]


def function_identity(node: Any) -> tuple[str, int] | None:
    """Return ``(name, arity)`` for a ``def``/``defp`` form."""
    head = function_head(node)
    if head is None:
        return None
    name, params, _guards = head
    return name, len(params)


def extract_conformance(
    body: Any, options: ExtractionOptions | None = None
) -> ConformanceSet:
    """Collect declarations, defined functions and override markers.

    Declarations and override markers keep source order and duplicates.
    Functions are unique ``(name, arity)`` pairs in order of first
    definition; multi-clause functions appear once.
    """
    options = resolve_options(options)

    declarations: list[ConformanceDeclaration] = []
    functions: list[tuple[str, int]] = []
    seen_functions: set[tuple[str, int]] = set()
    overrides: list[OverrideMarker] = []

    for statement in normalize_body(body):
        if is_behaviour_declaration(statement):
            result = extract_behaviour_declaration(statement, options)
            if result.value is not None:
                declarations.append(result.value)
            else:
                logger.debug("Skipping @behaviour declaration: %s", result.error)
            continue

        identity = function_identity(statement)
        if identity is not None:
            if identity not in seen_functions:
                seen_functions.add(identity)
                functions.append(identity)
            continue

        if is_overridable(statement):
            overrides.extend(extract_overrides(statement))

    return ConformanceSet(
        declarations=declarations,
        functions=functions,
        overrides=overrides,
    )


def implements_contracts(body: Any) -> bool:
    """Return True if the body declares at least one ``@behaviour``."""
    return any(
        _declaration_target(statement) is not None
        for statement in normalize_body(body)
    )


__all__ = [
    "extract_behaviour_declaration",
    "extract_behaviour_declaration_or_raise",
    "extract_conformance",
    "extract_overrides",
    "function_identity",
    "implements_contracts",
]
