import pytest

from jeko.runtime.environment import Environment
from jeko.runtime.value import (
    FALSE,
    NIL,
    TRUE,
    VArray,
    VClass,
    VFunction,
    VInstance,
    VNative,
    VNumber,
    VString,
    from_literal,
    is_truthy,
    to_string,
    to_type,
    values_equal,
)
from jeko.syntax.tokens import Token
from jeko.utils.location import Location


def _method(name: str, params: int = 0) -> VFunction:
    tokens = [Token("IDENT", f"p{i}", Location(1, 1)) for i in range(params)]
    return VFunction(name, tokens, [], Environment())


def test_number_formatting() -> None:
    assert to_string(VNumber(3.0)) == "3"
    assert to_string(VNumber(-0.5)) == "-0.5"
    assert to_string(VNumber(1e20)) == "100000000000000000000"


def test_from_literal() -> None:
    assert from_literal(None) is NIL
    assert from_literal(True) is TRUE
    assert from_literal(2.0) == VNumber(2.0)
    assert from_literal("s") == VString("s")


def test_truthiness() -> None:
    assert not is_truthy(NIL)
    assert not is_truthy(FALSE)
    assert is_truthy(TRUE)
    assert is_truthy(VNumber(0))
    assert is_truthy(VString(""))
    assert is_truthy(VArray([]))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (NIL, "Nil"),
        (TRUE, "Boolean"),
        (VNumber(1), "Number"),
        (VString("a"), "String"),
        (VArray([]), "Array"),
        (VNative("f", 0, lambda _args: NIL), "Callable"),
        (VClass("C", {}), "Class"),
        (VInstance(VClass("C", {})), "Instance"),
    ],
)
def test_to_type(value, expected: str) -> None:
    assert to_type(value) == expected


def test_values_equal() -> None:
    assert values_equal(VArray([VNumber(1), VString("a")]), VArray([VNumber(1), VString("a")]))
    assert not values_equal(VArray([VNumber(1)]), VArray([VNumber(1), VNumber(2)]))
    assert not values_equal(NIL, FALSE)
    klass = VClass("C", {})
    instance = VInstance(klass)
    assert values_equal(instance, instance)
    assert not values_equal(instance, VInstance(klass))


def test_find_method_walks_superclass_chain() -> None:
    base = VClass("Base", {"hello": _method("hello"), "init": _method("init", 2)})
    child = VClass("Child", {"own": _method("own")}, base)
    assert child.find_method("hello") is base.methods["hello"]
    assert child.find_method("own") is child.methods["own"]
    assert child.find_method("missing") is None
    assert child.arity == 2
    assert VClass("Empty", {}).arity == 0


def test_bind_attaches_instance() -> None:
    method = _method("m", 1)
    instance = VInstance(VClass("C", {}))
    bound = method.bind(instance)
    assert bound.bound_self is instance
    assert method.bound_self is None
    assert bound.arity == 1
    assert values_equal(bound, method.bind(instance))
