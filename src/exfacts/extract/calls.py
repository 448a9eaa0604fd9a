"""Depth-bounded call-site extraction.

The walk uses an explicit work stack whose entries carry their depth, so
deeply nested input cannot exhaust the interpreter stack. A call record is
emitted before the call's own arguments are visited, which keeps the output
in source order.

Excluded forms (definitions, conditionals, pattern dispatch, resource
blocks) are never emitted. Their significant child positions are listed per
form in ``_FORM_POSITIONS``; every other excluded form (operators, data
constructors, ``=``, ``<-``, ``|>``) visits its arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

from exfacts.config import ExtractionOptions, resolve_options
from exfacts.extract.errors import ExtractionResult, NotACallExpression
from exfacts.models.calls import CallWalk, FunctionCallRecord
from exfacts.syntax.classify import (
    DEFINITION_FORMS,
    is_binding_reference,
    is_dynamic_call,
    is_local_call,
    is_remote_call,
    remote_target,
)
from exfacts.syntax.helpers import is_node, keyword_values, module_name
from exfacts.syntax.location import location_if

logger = logging.getLogger(__name__)

CallMode = Literal["local", "remote", "dynamic", "all"]

_MODE_KINDS: dict[str, frozenset[str]] = {
    "local": frozenset({"local"}),
    "remote": frozenset({"remote"}),
    "dynamic": frozenset({"dynamic"}),
    "all": frozenset({"local", "remote", "dynamic"}),
}


# ---------------------------------------------------------------------------
# Record construction
# ---------------------------------------------------------------------------


def _build_local(node: Any, options: ExtractionOptions) -> FunctionCallRecord:
    name, _meta, args = node
    return FunctionCallRecord(
        kind="local",
        name=name,
        arity=len(args),
        arguments=args,
        location=location_if(node, options),
    )


def _build_remote(node: Any, options: ExtractionOptions) -> FunctionCallRecord | None:
    target = remote_target(node)
    if target is None:
        return None
    receiver, function_name = target
    args = node[2]

    metadata: dict[str, Any] = {}
    if isinstance(receiver, str):
        module = receiver
        metadata["erlang_module"] = True
    elif receiver[0] == "__MODULE__":
        module = "__MODULE__"
        metadata["current_module"] = True
    elif receiver[0] == "__aliases__":
        module = module_name(receiver)
    else:
        module = receiver[0]
        metadata["dynamic_receiver"] = True
        metadata["receiver_variable"] = receiver[0]

    return FunctionCallRecord(
        kind="remote",
        name=function_name,
        arity=len(args),
        module=module,
        arguments=args,
        location=location_if(node, options),
        metadata=metadata,
    )


def _variable_name(value: Any) -> str | None:
    if is_binding_reference(value):
        return value[0]
    return None


def _apply_metadata(apply_args: list[Any]) -> dict[str, Any]:
    if len(apply_args) == 3:
        target_module, target_function, _args = apply_args
        metadata: dict[str, Any] = {"dynamic_type": "apply_3"}
        variable = _variable_name(target_module)
        if variable is not None:
            metadata["module_variable"] = variable
        elif (known := module_name(target_module)) is not None:
            metadata["known_module"] = known
        if isinstance(target_function, str):
            metadata["known_function"] = target_function
        elif (variable := _variable_name(target_function)) is not None:
            metadata["function_variable"] = variable
        return metadata

    function, _args = apply_args
    metadata = {"dynamic_type": "apply_2"}
    if (variable := _variable_name(function)) is not None:
        metadata["function_variable"] = variable
    elif is_node(function) and function[0] == "&":
        metadata["function_capture"] = function
    return metadata


def _build_dynamic(node: Any, options: ExtractionOptions) -> FunctionCallRecord:
    tag, _meta, args = node

    if tag == "apply" or (is_node(tag) and len(tag[2]) == 2):
        # apply(fun, args), apply(mod, fun, args) and Kernel.apply/2,3:
        # the applied function's arguments are the trailing list.
        target_args = args[-1]
        return FunctionCallRecord(
            kind="dynamic",
            name="apply",
            arity=len(target_args),
            arguments=target_args,
            location=location_if(node, options),
            metadata=_apply_metadata(args),
        )

    receiver = tag[2][0]
    return FunctionCallRecord(
        kind="dynamic",
        name="anonymous",
        arity=len(args),
        arguments=args,
        location=location_if(node, options),
        metadata={"dynamic_type": "anonymous_call", "function_variable": receiver[0]},
    )


def _emit(node: Any, kinds: frozenset[str], options: ExtractionOptions) -> FunctionCallRecord | None:
    if is_dynamic_call(node):
        return _build_dynamic(node, options) if "dynamic" in kinds else None
    if is_remote_call(node):
        return _build_remote(node, options) if "remote" in kinds else None
    if is_local_call(node):
        return _build_local(node, options) if "local" in kinds else None
    return None


# ---------------------------------------------------------------------------
# Single-node extraction
# ---------------------------------------------------------------------------


def extract_call(
    node: Any, options: ExtractionOptions | None = None
) -> ExtractionResult[FunctionCallRecord]:
    """Extract a local call ``name(args)``.

    Variables, excluded keywords, operators and dynamic calls fail with
    :class:`NotACallExpression`.
    """
    options = resolve_options(options)
    if not is_local_call(node):
        return ExtractionResult.failure(
            NotACallExpression.for_node(node, "Not a local function call")
        )
    return ExtractionResult.success(_build_local(node, options))


def extract_call_or_raise(
    node: Any, options: ExtractionOptions | None = None
) -> FunctionCallRecord:
    return extract_call(node, options).unwrap()


def extract_remote_call(
    node: Any, options: ExtractionOptions | None = None
) -> ExtractionResult[FunctionCallRecord]:
    """Extract ``Module.fun(args)``, ``:erlang_mod.fun(args)`` or ``var.fun(args)``."""
    options = resolve_options(options)
    record = _build_remote(node, options) if is_remote_call(node) else None
    if record is None:
        return ExtractionResult.failure(
            NotACallExpression.for_node(node, "Not a remote function call")
        )
    return ExtractionResult.success(record)


def extract_remote_call_or_raise(
    node: Any, options: ExtractionOptions | None = None
) -> FunctionCallRecord:
    return extract_remote_call(node, options).unwrap()


def extract_dynamic_call(
    node: Any, options: ExtractionOptions | None = None
) -> ExtractionResult[FunctionCallRecord]:
    """Extract ``apply/2``, ``apply/3``, ``Kernel.apply`` or ``fun.(args)``."""
    options = resolve_options(options)
    if not is_dynamic_call(node):
        return ExtractionResult.failure(
            NotACallExpression.for_node(node, "Not a dynamic function call")
        )
    return ExtractionResult.success(_build_dynamic(node, options))


def extract_dynamic_call_or_raise(
    node: Any, options: ExtractionOptions | None = None
) -> FunctionCallRecord:
    return extract_dynamic_call(node, options).unwrap()


# ---------------------------------------------------------------------------
# Form-specific child positions
# ---------------------------------------------------------------------------


def _keyword_bodies(args: list[Any]) -> list[Any]:
    positions: list[Any] = []
    for arg in args:
        positions.extend(keyword_values(arg))
    return positions


def _definition_positions(args: list[Any]) -> list[Any]:
    # The head is a pattern; only its guard and the bodies are evaluated.
    if not args:
        return []
    head = args[0]
    positions: list[Any] = []
    if is_node(head) and head[0] == "when" and isinstance(head[2], list):
        positions.extend(head[2][1:])
    positions.extend(_keyword_bodies(args[1:]))
    return positions


def _branch_positions(args: list[Any]) -> list[Any]:
    # if/unless/case: condition or subject, then the do/else bodies.
    if not args:
        return []
    return [args[0], *_keyword_bodies(args[1:])]


def _cond_positions(args: list[Any]) -> list[Any]:
    positions: list[Any] = []
    for body in _keyword_bodies(args):
        arms = body if isinstance(body, list) else [body]
        for arm in arms:
            if is_node(arm) and arm[0] == "->" and isinstance(arm[2], list):
                # Conditions are expressions here, not patterns.
                positions.extend(arm[2])
            else:
                positions.append(arm)
    return positions


def _clause_body_positions(args: list[Any]) -> list[Any]:
    # with/for/try/receive: generators, filters and keyword bodies in order.
    positions: list[Any] = []
    for arg in args:
        if isinstance(arg, list):
            positions.extend(keyword_values(arg))
        else:
            positions.append(arg)
    return positions


def _arm_positions(args: list[Any]) -> list[Any]:
    if len(args) != 2:
        return list(args)
    patterns, body = args
    if (
        isinstance(patterns, list)
        and len(patterns) == 1
        and is_node(patterns[0])
        and patterns[0][0] == "when"
        and isinstance(patterns[0][2], list)
        and patterns[0][2]
    ):
        return [patterns[0][2][-1], body]
    return [body]


def _module_positions(args: list[Any]) -> list[Any]:
    return _keyword_bodies(args[1:])


_FORM_POSITIONS: dict[str, Callable[[list[Any]], list[Any]]] = {
    **{form: _definition_positions for form in DEFINITION_FORMS},
    "if": _branch_positions,
    "unless": _branch_positions,
    "case": _branch_positions,
    "cond": _cond_positions,
    "with": _clause_body_positions,
    "for": _clause_body_positions,
    "try": _clause_body_positions,
    "receive": _clause_body_positions,
    "fn": list,
    "->": _arm_positions,
    "defmodule": _module_positions,
}


def _child_positions(node: Any) -> list[Any]:
    tag, _meta, args = node
    if not isinstance(args, list):
        return []

    if is_node(tag):
        # Dotted call: walk a computed receiver such as foo().bar().
        receivers = [
            receiver
            for receiver in (tag[2] if isinstance(tag[2], list) else [])
            if is_node(receiver)
            and not is_binding_reference(receiver)
            and receiver[0] != "__aliases__"
        ]
        return [*receivers, *args]

    handler = _FORM_POSITIONS.get(tag)
    if handler is not None:
        return handler(args)
    return args


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def walk_calls(
    ast: Any,
    options: ExtractionOptions | None = None,
    *,
    mode: CallMode = "local",
) -> CallWalk:
    """Collect call records from ``ast`` and report whether depth cut the walk.

    ``ast`` may be a single node, a list of nodes, a ``__block__`` or None.
    Lists and ``__block__`` do not add depth; every other nesting step does.
    Nodes deeper than ``options.max_depth`` are not visited.
    """
    options = resolve_options(options)
    kinds = _MODE_KINDS[mode]
    max_depth = options.max_depth

    calls: list[FunctionCallRecord] = []
    truncated = False
    stack: list[tuple[Any, int]] = [(ast, 0)]

    while stack:
        value, depth = stack.pop()

        if depth > max_depth:
            if isinstance(value, tuple) or (isinstance(value, list) and value):
                truncated = True
            continue

        if isinstance(value, list):
            stack.extend((item, depth) for item in reversed(value))
            continue

        if not is_node(value):
            if isinstance(value, tuple):
                stack.extend((item, depth + 1) for item in reversed(value))
            continue

        if value[0] == "__block__" and isinstance(value[2], list):
            stack.extend((item, depth) for item in reversed(value[2]))
            continue

        record = _emit(value, kinds, options)
        if record is not None:
            calls.append(record)

        stack.extend((child, depth + 1) for child in reversed(_child_positions(value)))

    if truncated:
        logger.debug("Call extraction truncated at max_depth=%d", max_depth)
    return CallWalk(calls=calls, truncated=truncated)


def extract_local_calls(
    ast: Any, options: ExtractionOptions | None = None
) -> list[FunctionCallRecord]:
    """Extract every local call in ``ast``, in source order."""
    return list(walk_calls(ast, options, mode="local").calls)


def extract_remote_calls(
    ast: Any, options: ExtractionOptions | None = None
) -> list[FunctionCallRecord]:
    return list(walk_calls(ast, options, mode="remote").calls)


def extract_dynamic_calls(
    ast: Any, options: ExtractionOptions | None = None
) -> list[FunctionCallRecord]:
    return list(walk_calls(ast, options, mode="dynamic").calls)


def extract_all_calls(
    ast: Any, options: ExtractionOptions | None = None
) -> list[FunctionCallRecord]:
    """Extract local, remote and dynamic calls together, in source order."""
    return list(walk_calls(ast, options, mode="all").calls)


__all__ = [
    "CallMode",
    "extract_all_calls",
    "extract_call",
    "extract_call_or_raise",
    "extract_dynamic_call",
    "extract_dynamic_call_or_raise",
    "extract_dynamic_calls",
    "extract_local_calls",
    "extract_remote_call",
    "extract_remote_call_or_raise",
    "extract_remote_calls",
    "walk_calls",
]
