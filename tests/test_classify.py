from __future__ import annotations

from typing import Any

import pytest

from exfacts.syntax.classify import (
    EXCLUDED_CALL_NAMES,
    OPERATORS,
    SPECIAL_FORMS,
    NodeKind,
    classify,
    function_head,
    is_behaviour_declaration,
    is_binding_reference,
    is_callback,
    is_doc,
    is_dynamic_call,
    is_function_definition,
    is_local_call,
    is_macrocallback,
    is_moduledoc,
    is_optional_callbacks,
    is_overridable,
    is_remote_call,
    is_signature_annotation,
)
from exfacts.syntax.helpers import keyword_pairs, module_name, normalize_body


def _call(name: Any, *args: Any) -> tuple[Any, dict[str, Any], list[Any]]:
    return (name, {}, list(args))


def _var(name: str, context: str | None = None) -> tuple[str, dict[str, Any], Any]:
    return (name, {}, context)


def _attr(name: str, value: Any) -> tuple[str, dict[str, Any], list[Any]]:
    return ("@", {}, [(name, {}, [value])])


def _alias(*parts: str) -> tuple[str, dict[str, Any], list[str]]:
    return ("__aliases__", {}, list(parts))


def _signature(name: str, *params: Any, returns: Any = "ok") -> Any:
    return ("::", {}, [_call(name, *params), returns])


def test_excluded_names_is_union_of_special_forms_and_operators() -> None:
    assert EXCLUDED_CALL_NAMES == SPECIAL_FORMS | OPERATORS
    assert "if" in EXCLUDED_CALL_NAMES
    assert "|>" in EXCLUDED_CALL_NAMES
    assert "+" in EXCLUDED_CALL_NAMES


@pytest.mark.parametrize(
    ("node", "expected"),
    [
        (_attr("callback", _signature("foo")), NodeKind.CALLBACK),
        (_attr("macrocallback", _signature("foo")), NodeKind.MACROCALLBACK),
        (_attr("spec", _signature("foo")), NodeKind.SPEC),
        (_attr("optional_callbacks", [("foo", 1)]), NodeKind.OPTIONAL_CALLBACKS),
        (_attr("behaviour", _alias("GenServer")), NodeKind.BEHAVIOUR),
        (_attr("doc", "text"), NodeKind.DOC),
        (_attr("moduledoc", "text"), NodeKind.MODULEDOC),
        (_attr("type", "t"), NodeKind.OPERATOR),
        (("defoverridable", {}, [[("init", 1)]]), NodeKind.OVERRIDABLE),
        (("def", {}, [_var("foo"), [("do", "ok")]]), NodeKind.FUNCTION_DEF),
        (("defp", {}, [_call("foo", _var("a")), [("do", "ok")]]), NodeKind.FUNCTION_DEF),
        (_call("foo"), NodeKind.LOCAL_CALL),
        (_call((".", {}, [_alias("String"), "upcase"]), "x"), NodeKind.REMOTE_CALL),
        (_call("apply", _var("fun"), [1]), NodeKind.DYNAMIC_CALL),
        (_call((".", {}, [_var("fun")]), 1), NodeKind.DYNAMIC_CALL),
        (_var("x"), NodeKind.BINDING),
        (_var("x", "Elixir"), NodeKind.BINDING),
        (_call("if", True, [("do", 1)]), NodeKind.CONTROL_FORM),
        (_call("->", ["ok"], 1), NodeKind.CLAUSE),
        (("__block__", {}, []), NodeKind.BLOCK),
        (_call("+", 1, 2), NodeKind.OPERATOR),
        (_call("=", _var("x"), 1), NodeKind.CONTROL_FORM),
    ],
)
def test_classify_recognizes_node_kinds(node: Any, expected: NodeKind) -> None:
    assert classify(node) is expected


@pytest.mark.parametrize(
    "value",
    [None, 42, "atom", [], [1, 2], {"a": 1}, (1, 2), ("foo", "not-meta", []), ("a",), object()],
)
def test_classify_is_total_on_malformed_input(value: Any) -> None:
    assert classify(value) is NodeKind.UNRECOGNIZED


@pytest.mark.parametrize(
    "predicate",
    [
        is_callback,
        is_macrocallback,
        is_signature_annotation,
        is_optional_callbacks,
        is_behaviour_declaration,
        is_doc,
        is_moduledoc,
        is_overridable,
        is_function_definition,
        is_local_call,
        is_remote_call,
        is_dynamic_call,
        is_binding_reference,
    ],
)
@pytest.mark.parametrize(
    "value",
    [None, 0, "x", [], ({}, {}, []), ("@", {}, "bad"), ("@", {}, [1]), (["list"], {}, [])],
)
def test_predicates_never_raise(predicate: Any, value: Any) -> None:
    assert predicate(value) is False


def test_local_call_requires_argument_list() -> None:
    assert is_local_call(_call("foo"))
    assert is_local_call(_call("bar", 1, 2))
    assert not is_local_call(_var("x"))
    assert not is_local_call(_var("x", "Elixir"))


@pytest.mark.parametrize("name", ["def", "defp", "if", "case", "import", "fn", "quote", "+", "==", "and", "|>"])
def test_local_call_rejects_excluded_names(name: str) -> None:
    assert not is_local_call(_call(name, 1, 2))


def test_apply_is_dynamic_not_local() -> None:
    node = _call("apply", _alias("Mod"), "fun", [1, 2])
    assert is_dynamic_call(node)
    assert not is_local_call(node)


def test_apply_with_non_list_arguments_is_local() -> None:
    node = _call("apply", _var("fun"), _var("args"))
    assert not is_dynamic_call(node)
    assert is_local_call(node)


def test_kernel_apply_is_dynamic() -> None:
    node = _call((".", {}, [_alias("Kernel"), "apply"]), _var("fun"), [1])
    assert is_dynamic_call(node)
    assert not is_remote_call(node)


@pytest.mark.parametrize(
    "receiver",
    [_alias("String"), "ets", ("__MODULE__", {}, None), _var("conn")],
)
def test_remote_call_receivers(receiver: Any) -> None:
    assert is_remote_call(_call((".", {}, [receiver, "fun"]), 1))


def test_anonymous_call_on_alias_is_not_dynamic() -> None:
    assert not is_dynamic_call(_call((".", {}, [_alias("Mod")]), 1))


def test_function_head_unwraps_guards() -> None:
    guard = _call("is_integer", _var("x"))
    node = ("def", {}, [("when", {}, [_call("double", _var("x")), guard]), [("do", 1)]])

    assert function_head(node) == ("double", [_var("x")], [guard])


def test_function_head_without_parentheses_has_no_params() -> None:
    node = ("def", {}, [_var("ping"), [("do", "pong")]])
    assert function_head(node) == ("ping", [], [])


def test_function_head_rejects_macros_and_malformed_definitions() -> None:
    assert function_head(("defmacro", {}, [_call("m"), [("do", 1)]])) is None
    assert function_head(("def", {}, [])) is None
    assert function_head(("def", {}, [42])) is None


def test_normalize_body_shapes() -> None:
    assert normalize_body(None) == []
    assert normalize_body(("__block__", {}, [_call("a"), _call("b")])) == [_call("a"), _call("b")]
    assert normalize_body([_call("a")]) == [_call("a")]
    assert normalize_body(_call("a")) == [_call("a")]


def test_module_name_renders_references() -> None:
    assert module_name(_alias("MyApp", "Worker")) == "MyApp.Worker"
    assert module_name("gen_server") == "gen_server"
    assert module_name(("__MODULE__", {}, None)) == "__MODULE__"
    assert module_name(_alias()) is None
    assert module_name(3) is None


def test_keyword_pairs_skips_non_pairs() -> None:
    assert keyword_pairs([("foo", 1), ("bar", "x"), "baz", ("qux", 2), ("flag", True)]) == [
        ("foo", 1),
        ("qux", 2),
    ]
    assert keyword_pairs("nope") == []


@pytest.mark.parametrize(
    "node",
    [
        _call((".", {}, [_alias("Logger"), "info"]), "hi"),
        _call((".", {}, [_var("fun")]), 1),
    ],
)
def test_dotted_calls_are_not_function_definitions(node: Any) -> None:
    assert function_head(node) is None
    assert not is_function_definition(node)


def _nested_tag(depth: int) -> Any:
    node: Any = ("x", {}, [])
    for _ in range(depth):
        node = (node, {}, [])
    return node


def test_deeply_nested_tag_is_classified_without_recursion() -> None:
    node = _nested_tag(5000)

    assert classify(node) is NodeKind.UNRECOGNIZED
    assert not is_local_call(node)
    assert not is_remote_call(node)
    assert not is_dynamic_call(node)
