"""Node classification for tagged-tuple syntax trees.

Every value in a tree maps to exactly one :class:`NodeKind`. The predicates
in this module never raise: malformed input, non-tuples and partial nodes
classify as :attr:`NodeKind.UNRECOGNIZED` (or ``False``).

The keyword and operator sets below are the only definition of what is *not*
a call. Extractors import them from here.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from exfacts.syntax.helpers import is_node

SPECIAL_FORMS: frozenset[str] = frozenset(
    {
        # Language special forms
        "__block__",
        "__aliases__",
        "__MODULE__",
        "__DIR__",
        "__ENV__",
        "__CALLER__",
        "__STACKTRACE__",
        "fn",
        "do",
        "else",
        "catch",
        "rescue",
        "after",
        # Definitions
        "def",
        "defp",
        "defmacro",
        "defmacrop",
        "defmodule",
        "defprotocol",
        "defimpl",
        "defstruct",
        "defdelegate",
        "defguard",
        "defguardp",
        "defexception",
        "defoverridable",
        # Directives
        "import",
        "require",
        "use",
        "alias",
        # Control flow
        "if",
        "unless",
        "case",
        "cond",
        "with",
        "for",
        "try",
        "receive",
        "raise",
        "throw",
        "quote",
        "unquote",
        "unquote_splicing",
        # Syntax
        "super",
        "&",
        "^",
        "=",
        "|>",
        ".",
        "|",
        "::",
        "<<>>",
        "{}",
        "%{}",
        "%",
    }
)

OPERATORS: frozenset[str] = frozenset(
    {
        "+",
        "-",
        "*",
        "/",
        "==",
        "!=",
        "===",
        "!==",
        "<",
        ">",
        "<=",
        ">=",
        "&&",
        "||",
        "!",
        "and",
        "or",
        "not",
        "++",
        "--",
        "<>",
        "in",
        "not in",
        "@",
        "when",
        "=~",
        "..",
        "<-",
        "->",
        "\\\\",
    }
)

EXCLUDED_CALL_NAMES: frozenset[str] = SPECIAL_FORMS | OPERATORS

DEFINITION_FORMS: frozenset[str] = frozenset({"def", "defp", "defmacro", "defmacrop"})
FUNCTION_FORMS: frozenset[str] = frozenset({"def", "defp"})
CONTROL_FORMS: frozenset[str] = frozenset(
    {"if", "unless", "case", "cond", "with", "for", "try", "receive", "fn", "|>"}
)
SIGNATURE_ATTRIBUTES: frozenset[str] = frozenset({"spec", "callback", "macrocallback"})


class NodeKind(str, Enum):
    """Closed set of node categories recognized in a tree."""

    CALLBACK = "callback"
    MACROCALLBACK = "macrocallback"
    SPEC = "spec"
    OPTIONAL_CALLBACKS = "optional_callbacks"
    BEHAVIOUR = "behaviour"
    OVERRIDABLE = "overridable"
    DOC = "doc"
    MODULEDOC = "moduledoc"
    FUNCTION_DEF = "function_def"
    LOCAL_CALL = "local_call"
    REMOTE_CALL = "remote_call"
    DYNAMIC_CALL = "dynamic_call"
    CONTROL_FORM = "control_form"
    CLAUSE = "clause"
    BLOCK = "block"
    BINDING = "binding"
    OPERATOR = "operator"
    UNRECOGNIZED = "unrecognized"


def attribute(node: Any) -> tuple[str, Any] | None:
    """Return ``(name, value)`` for a module attribute ``@name value``.

    Returns None for anything that is not a single-valued attribute.
    """
    if not (is_node(node) and node[0] == "@" and isinstance(node[2], list)):
        return None
    if len(node[2]) != 1:
        return None

    inner = node[2][0]
    if not (is_node(inner) and isinstance(inner[0], str)):
        return None
    args = inner[2]
    if not (isinstance(args, list) and len(args) == 1):
        return None
    return inner[0], args[0]


def _attribute_name(node: Any) -> str | None:
    parts = attribute(node)
    return parts[0] if parts is not None else None


def is_callback(node: Any) -> bool:
    return _attribute_name(node) == "callback"


def is_macrocallback(node: Any) -> bool:
    return _attribute_name(node) == "macrocallback"


def is_spec(node: Any) -> bool:
    return _attribute_name(node) == "spec"


def is_signature_annotation(node: Any) -> bool:
    """Return True for ``@spec``, ``@callback`` and ``@macrocallback``."""
    return _attribute_name(node) in SIGNATURE_ATTRIBUTES


def is_optional_callbacks(node: Any) -> bool:
    return _attribute_name(node) == "optional_callbacks"


def is_behaviour_declaration(node: Any) -> bool:
    return _attribute_name(node) == "behaviour"


def is_doc(node: Any) -> bool:
    return _attribute_name(node) == "doc"


def is_moduledoc(node: Any) -> bool:
    return _attribute_name(node) == "moduledoc"


def is_overridable(node: Any) -> bool:
    """Return True for ``defoverridable`` with a keyword list or module."""
    return (
        is_node(node)
        and node[0] == "defoverridable"
        and isinstance(node[2], list)
        and len(node[2]) == 1
    )


def function_head(node: Any) -> tuple[str, list[Any], list[Any]] | None:
    """Return ``(name, params, guards)`` for a ``def``/``defp`` form.

    ``def name(params) when guard`` unwraps the guard. A head without
    parentheses has no parameters.
    """
    if not (is_node(node) and isinstance(node[0], str) and isinstance(node[2], list)):
        return None
    if node[0] not in FUNCTION_FORMS:
        return None
    if not node[2]:
        return None

    head = node[2][0]
    guards: list[Any] = []
    if is_node(head) and head[0] == "when" and isinstance(head[2], list) and head[2]:
        guards = list(head[2][1:])
        head = head[2][0]

    if not (is_node(head) and isinstance(head[0], str)):
        return None
    params = head[2] if isinstance(head[2], list) else []
    return head[0], list(params), guards


def is_function_definition(node: Any) -> bool:
    return function_head(node) is not None


def is_binding_reference(node: Any) -> bool:
    """Return True for a variable: an identifier with no argument list."""
    return (
        is_node(node)
        and isinstance(node[0], str)
        and node[0] not in EXCLUDED_CALL_NAMES
        and (node[2] is None or isinstance(node[2], str))
    )


def is_excluded_name(name: Any) -> bool:
    return isinstance(name, str) and name in EXCLUDED_CALL_NAMES


def is_dynamic_call(node: Any) -> bool:
    """Return True for ``apply/2``, ``apply/3``, ``Kernel.apply`` and ``fun.()``."""
    if not (is_node(node) and isinstance(node[2], list)):
        return False

    tag, _meta, args = node
    if tag == "apply":
        return len(args) in (2, 3) and isinstance(args[-1], list)

    if not (is_node(tag) and tag[0] == "." and isinstance(tag[2], list)):
        return False

    dot_args = tag[2]
    if len(dot_args) == 1:
        receiver = dot_args[0]
        return is_binding_reference(receiver) and receiver[0] not in (
            "__aliases__",
            "__MODULE__",
        )
    if len(dot_args) == 2 and dot_args[1] == "apply":
        receiver = dot_args[0]
        return (
            is_node(receiver)
            and receiver[0] == "__aliases__"
            and receiver[2] == ["Kernel"]
            and len(args) in (2, 3)
            and isinstance(args[-1], list)
        )
    return False


def remote_target(node: Any) -> tuple[Any, str] | None:
    """Return ``(receiver, function_name)`` for ``Receiver.fun(args)``."""
    if not (is_node(node) and isinstance(node[2], list)):
        return None
    tag = node[0]
    if not (is_node(tag) and tag[0] == "." and isinstance(tag[2], list)):
        return None
    if len(tag[2]) != 2 or not isinstance(tag[2][1], str):
        return None

    receiver, function_name = tag[2]
    if isinstance(receiver, str):
        return receiver, function_name
    if is_node(receiver) and receiver[0] in ("__aliases__", "__MODULE__"):
        return receiver, function_name
    if is_binding_reference(receiver):
        return receiver, function_name
    return None


def is_remote_call(node: Any) -> bool:
    return remote_target(node) is not None and not is_dynamic_call(node)


def is_local_call(node: Any) -> bool:
    """Return True for ``name(args)`` that is not a keyword, operator or variable."""
    return (
        is_node(node)
        and isinstance(node[0], str)
        and isinstance(node[2], list)
        and not is_excluded_name(node[0])
        and not is_dynamic_call(node)
    )


def classify(value: Any) -> NodeKind:
    """Classify any value into a :class:`NodeKind`.

    Annotation kinds are checked first, then definitions, calls and forms.
    """
    if not is_node(value):
        return NodeKind.UNRECOGNIZED

    name = _attribute_name(value)
    if name is not None:
        # Attributes outside the recognized set (@type, @impl, ...) are
        # plain uses of the @ operator.
        return _ATTRIBUTE_KINDS.get(name, NodeKind.OPERATOR)

    tag = value[0]
    if is_function_definition(value):
        return NodeKind.FUNCTION_DEF
    if is_overridable(value):
        return NodeKind.OVERRIDABLE
    if is_dynamic_call(value):
        return NodeKind.DYNAMIC_CALL
    if is_remote_call(value):
        return NodeKind.REMOTE_CALL
    if not isinstance(tag, str):
        return NodeKind.UNRECOGNIZED
    if is_binding_reference(value):
        return NodeKind.BINDING
    if is_local_call(value):
        return NodeKind.LOCAL_CALL
    if tag == "__block__":
        return NodeKind.BLOCK
    if tag == "->":
        return NodeKind.CLAUSE
    if tag in CONTROL_FORMS:
        return NodeKind.CONTROL_FORM
    if tag in OPERATORS:
        return NodeKind.OPERATOR
    if tag in SPECIAL_FORMS:
        return NodeKind.CONTROL_FORM
    return NodeKind.UNRECOGNIZED


_ATTRIBUTE_KINDS: dict[str, NodeKind] = {
    "callback": NodeKind.CALLBACK,
    "macrocallback": NodeKind.MACROCALLBACK,
    "spec": NodeKind.SPEC,
    "optional_callbacks": NodeKind.OPTIONAL_CALLBACKS,
    "behaviour": NodeKind.BEHAVIOUR,
    "doc": NodeKind.DOC,
    "moduledoc": NodeKind.MODULEDOC,
}


__all__ = [
    "CONTROL_FORMS",
    "DEFINITION_FORMS",
    "EXCLUDED_CALL_NAMES",
    "FUNCTION_FORMS",
    "OPERATORS",
    "SIGNATURE_ATTRIBUTES",
    "SPECIAL_FORMS",
    "NodeKind",
    "attribute",
    "classify",
    "function_head",
    "is_behaviour_declaration",
    "is_binding_reference",
    "is_callback",
    "is_doc",
    "is_dynamic_call",
    "is_excluded_name",
    "is_function_definition",
    "is_local_call",
    "is_macrocallback",
    "is_moduledoc",
    "is_optional_callbacks",
    "is_overridable",
    "is_remote_call",
    "is_signature_annotation",
    "is_spec",
    "remote_target",
]
