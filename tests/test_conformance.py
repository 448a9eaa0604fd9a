from __future__ import annotations

from typing import Any

import pytest

from exfacts.extract.conformance import (
    extract_behaviour_declaration,
    extract_behaviour_declaration_or_raise,
    extract_conformance,
    extract_overrides,
    function_identity,
    implements_contracts,
)
from exfacts.extract.errors import NotABehaviorDeclaration
from exfacts.models.conformance import ConformanceSet, OverrideSource


def _var(name: str) -> tuple[str, dict[str, Any], None]:
    return (name, {}, None)


def _call(name: str, *args: Any) -> tuple[str, dict[str, Any], list[Any]]:
    return (name, {}, list(args))


def _alias(*parts: str) -> tuple[str, dict[str, Any], list[str]]:
    return ("__aliases__", {}, list(parts))


def _attr(name: str, value: Any, **meta: Any) -> tuple[str, dict[str, Any], list[Any]]:
    return ("@", dict(meta), [(name, {}, [value])])


def _def(name: str, *params: Any, form: str = "def", guard: Any = None) -> Any:
    head: Any = _call(name, *params)
    if guard is not None:
        head = ("when", {}, [head, guard])
    return (form, {}, [head, [("do", "ok")]])


def _block(*statements: Any) -> tuple[str, dict[str, Any], list[Any]]:
    return ("__block__", {}, list(statements))


def test_declarations_keep_order_and_duplicates() -> None:
    conformance = extract_conformance(
        _block(
            _attr("behaviour", _alias("GenServer")),
            _attr("behaviour", "gen_statem"),
            _attr("behaviour", _alias("GenServer")),
        )
    )

    assert conformance.implemented_targets() == ["GenServer", "gen_statem", "GenServer"]
    assert conformance.implements("gen_statem")
    assert not conformance.implements("Supervisor")


def test_nested_alias_target() -> None:
    declaration = extract_behaviour_declaration_or_raise(
        _attr("behaviour", _alias("MyApp", "Worker"), line=2, column=3)
    )

    assert declaration.target == "MyApp.Worker"
    assert declaration.location is not None
    assert declaration.location.start_line == 2


@pytest.mark.parametrize(
    "node",
    [
        None,
        _attr("doc", "text"),
        _attr("behaviour", 42),
        _attr("behaviour", _alias()),
        _call("behaviour", _alias("GenServer")),
    ],
)
def test_non_declarations_fail(node: Any) -> None:
    result = extract_behaviour_declaration(node)

    assert not result.ok
    assert isinstance(result.error, NotABehaviorDeclaration)
    assert result.error.message.startswith("Not a @behaviour declaration")

    with pytest.raises(NotABehaviorDeclaration):
        extract_behaviour_declaration_or_raise(node)


def test_functions_are_unique_in_first_definition_order() -> None:
    guard = _call("is_integer", _var("x"))
    conformance = extract_conformance(
        _block(
            _def("init", _var("args")),
            _def("handle_call", _var("msg"), _var("from"), _var("state")),
            _def("init", _var("other")),
            _def("helper", _var("x"), form="defp", guard=guard),
            ("def", {}, [_var("ping"), [("do", "pong")]]),
        )
    )

    assert conformance.functions == (
        ("init", 1),
        ("handle_call", 3),
        ("helper", 1),
        ("ping", 0),
    )
    assert conformance.defines("helper", 1)
    assert not conformance.defines("helper", 2)


def test_macro_definitions_are_not_functions() -> None:
    conformance = extract_conformance(_block(_def("m", _var("x"), form="defmacro")))
    assert conformance.functions == ()


def test_function_identity() -> None:
    assert function_identity(_def("run", _var("a"), _var("b"))) == ("run", 2)
    assert function_identity(_call("run", 1)) is None


def test_overridable_explicit_list() -> None:
    node = ("defoverridable", {}, [[("init", 1), ("handle_call", 3)]])

    markers = extract_overrides(node)

    assert [(m.name, m.arity, m.source) for m in markers] == [
        ("init", 1, OverrideSource.EXPLICIT_LIST),
        ("handle_call", 3, OverrideSource.EXPLICIT_LIST),
    ]


def test_overridable_module_reference() -> None:
    markers = extract_overrides(("defoverridable", {}, [_alias("GenServer")]))

    assert len(markers) == 1
    assert markers[0].name == "GenServer"
    assert markers[0].arity is None
    assert markers[0].source is OverrideSource.MODULE_REFERENCE


def test_overridable_functions_come_from_explicit_lists_only() -> None:
    conformance = extract_conformance(
        _block(
            ("defoverridable", {}, [[("init", 1)]]),
            ("defoverridable", {}, [_alias("GenServer")]),
        )
    )

    assert len(conformance.overrides) == 2
    assert conformance.overridable_functions() == [("init", 1)]
    assert conformance.is_overridable("init", 1)
    assert not conformance.is_overridable("init", 2)


def test_malformed_overridable_yields_nothing() -> None:
    assert extract_overrides(("defoverridable", {}, [42])) == []
    assert extract_overrides(_call("foo")) == []


def test_missing_and_matching_callbacks() -> None:
    conformance = ConformanceSet(functions=[("init", 1)])
    required = [("init", 1), ("handle_call", 3)]

    assert conformance.missing_callbacks(required) == [("handle_call", 3)]
    assert conformance.matching_callbacks(required) == [("init", 1)]


def test_missing_callbacks_from_extracted_body() -> None:
    conformance = extract_conformance(
        _block(_attr("behaviour", _alias("GenServer")), _def("init", _var("args")))
    )
    required = [("init", 1), ("handle_call", 3), ("handle_cast", 2)]

    assert conformance.missing_callbacks(required) == [("handle_call", 3), ("handle_cast", 2)]
    assert conformance.matching_callbacks(required) == [("init", 1)]


@pytest.mark.parametrize("body", [None, [], _block()])
def test_empty_body(body: Any) -> None:
    conformance = extract_conformance(body)

    assert conformance.declarations == ()
    assert conformance.functions == ()
    assert conformance.overrides == ()
    assert not implements_contracts(body)


def test_implements_contracts() -> None:
    assert implements_contracts(_block(_def("init", _var("a")), _attr("behaviour", "gen_server")))
    assert not implements_contracts(_block(_attr("behaviour", 42)))


def test_extract_conformance_is_repeatable() -> None:
    body = _block(
        _attr("behaviour", _alias("GenServer")),
        _def("init", _var("a")),
        ("defoverridable", {}, [[("init", 1)]]),
    )
    assert extract_conformance(body) == extract_conformance(body)


def test_body_with_dotted_calls() -> None:
    register = (
        (".", {}, [_alias("Module"), "register_attribute"]),
        {},
        [("__MODULE__", {}, None), "hooks", [("accumulate", True)]],
    )
    anonymous = ((".", {}, [_var("setup")]), {}, [])

    conformance = extract_conformance(
        _block(_attr("behaviour", _alias("GenServer")), register, anonymous, _def("init", _var("a")))
    )

    assert conformance.implemented_targets() == ["GenServer"]
    assert conformance.functions == (("init", 1),)
    assert implements_contracts(_block(register, _attr("behaviour", "gen_server")))
