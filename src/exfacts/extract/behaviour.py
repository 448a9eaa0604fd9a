"""Extraction of the callback contracts a module body declares.

A module body is walked twice. The first pass collects every
``@optional_callbacks`` pair, so an optional marker applies no matter where
it sits relative to the callback. The second pass builds callback records in
source order and threads a single pending-documentation slot: ``@doc`` fills
it, the next ``@callback``/``@macrocallback`` consumes it.
"""

from __future__ import annotations

import logging
from typing import Any

from exfacts.config import ExtractionOptions, resolve_options
from exfacts.extract.errors import ExtractionResult, NotASignature
from exfacts.extract.signatures import split_signature
from exfacts.models.behaviour import CallbackKind, CallbackRecord, ContractSet
from exfacts.syntax.classify import (
    attribute,
    is_callback,
    is_doc,
    is_macrocallback,
    is_moduledoc,
    is_optional_callbacks,
)
from exfacts.syntax.helpers import keyword_pairs, normalize_body
from exfacts.syntax.location import location_if

logger = logging.getLogger(__name__)


def _callback_kind(node: Any) -> CallbackKind | None:
    if is_callback(node):
        return "callback"
    if is_macrocallback(node):
        return "macrocallback"
    return None


def _build_callback(
    node: Any,
    kind: CallbackKind,
    *,
    documentation: str | None,
    optional: frozenset[tuple[str, int]],
    options: ExtractionOptions,
) -> CallbackRecord | None:
    parts = attribute(node)
    if parts is None:
        return None
    signature = parts[1]
    split = split_signature(signature)
    if split is None:
        return None

    arity = len(split.parameters)
    return CallbackRecord(
        name=split.name,
        arity=arity,
        kind=kind,
        signature=signature,
        parameter_types=split.parameters,
        return_type=split.return_type,
        type_constraints=split.constraints,
        is_optional=(split.name, arity) in optional,
        documentation=documentation,
        location=location_if(node, options),
    )


def collect_optional_callbacks(statements: list[Any]) -> list[tuple[str, int]]:
    """Return the ``(name, arity)`` pairs of every ``@optional_callbacks``."""
    optional: list[tuple[str, int]] = []
    for statement in statements:
        if is_optional_callbacks(statement):
            parts = attribute(statement)
            if parts is not None:
                optional.extend(keyword_pairs(parts[1]))
    return optional


def _module_documentation(statements: list[Any]) -> tuple[str | None, bool]:
    # The first @moduledoc wins; `@moduledoc false` hides the module.
    for statement in statements:
        if not is_moduledoc(statement):
            continue
        parts = attribute(statement)
        value = parts[1] if parts is not None else None
        if isinstance(value, str):
            return value, False
        if value is False:
            return None, True
    return None, False


def extract_contracts(
    body: Any, options: ExtractionOptions | None = None
) -> ContractSet:
    """Extract callbacks, macro callbacks and documentation from a module body.

    ``body`` may be a ``__block__`` node, a list of forms, a single form or
    None. Callback annotations whose signature cannot be decomposed are
    skipped.
    """
    options = resolve_options(options)
    statements = normalize_body(body)

    optional_list = collect_optional_callbacks(statements)
    optional = frozenset(optional_list)

    callbacks: list[CallbackRecord] = []
    macrocallbacks: list[CallbackRecord] = []
    pending_doc: str | None = None

    for statement in statements:
        if is_doc(statement):
            parts = attribute(statement)
            value = parts[1] if parts is not None else None
            pending_doc = value if isinstance(value, str) else None
            continue

        kind = _callback_kind(statement)
        if kind is None:
            continue

        record = _build_callback(
            statement,
            kind,
            documentation=pending_doc,
            optional=optional,
            options=options,
        )
        pending_doc = None
        if record is None:
            logger.debug("Skipping malformed @%s declaration", kind)
            continue

        if kind == "callback":
            callbacks.append(record)
        else:
            macrocallbacks.append(record)

    documentation, documentation_disabled = _module_documentation(statements)
    return ContractSet(
        documentation=documentation,
        documentation_disabled=documentation_disabled,
        callbacks=callbacks,
        macrocallbacks=macrocallbacks,
        optional_callbacks=optional_list,
    )


def defines_contracts(body: Any) -> bool:
    """Return True if ``extract_contracts(body)`` would yield any callback."""
    for statement in normalize_body(body):
        if _callback_kind(statement) is None:
            continue
        parts = attribute(statement)
        if parts is not None and split_signature(parts[1]) is not None:
            return True
    return False


def extract_callback(
    node: Any, options: ExtractionOptions | None = None
) -> ExtractionResult[CallbackRecord]:
    """Extract a single ``@callback`` or ``@macrocallback`` annotation.

    Outside a module body there is no optional marker or pending
    documentation, so the record is required and undocumented.
    """
    options = resolve_options(options)
    kind = _callback_kind(node)
    if kind is None:
        return ExtractionResult.failure(NotASignature.for_node(node, "Not a callback"))

    record = _build_callback(
        node, kind, documentation=None, optional=frozenset(), options=options
    )
    if record is None:
        return ExtractionResult.failure(
            NotASignature.for_node(node, "Invalid callback signature")
        )
    return ExtractionResult.success(record)


def extract_callback_or_raise(
    node: Any, options: ExtractionOptions | None = None
) -> CallbackRecord:
    return extract_callback(node, options).unwrap()


__all__ = [
    "collect_optional_callbacks",
    "defines_contracts",
    "extract_callback",
    "extract_callback_or_raise",
    "extract_contracts",
]
