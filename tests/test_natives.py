import pytest

from jeko.runtime.environment import Environment
from jeko.runtime.errors import JekoRuntimeError, JekoTypeError
from jeko.runtime.natives import native_pop, native_push, register_natives
from jeko.runtime.value import NIL, VArray, VNumber


def test_register_natives_defines_the_library() -> None:
    env = Environment()
    register_natives(env)
    assert set(env.names()) == {
        "sin",
        "asin",
        "cos",
        "acos",
        "tan",
        "atan",
        "round",
        "floor",
        "to_degrees",
        "to_radians",
        "push",
        "pop",
        "shift",
        "join",
        "len",
        "at",
        "exec",
    }


def test_round_goes_half_away_from_zero(run) -> None:
    assert run("print round(2.5); print round(-2.5); print round(1.4); print floor(-1.5);") == [
        "3",
        "-3",
        "1",
        "-2",
    ]


def test_trigonometry_and_angles(run) -> None:
    assert run("print sin(0); print round(to_degrees(3.141592653589793)); print cos(0);") == [
        "0",
        "180",
        "1",
    ]


def test_math_domain_error(run) -> None:
    with pytest.raises(JekoRuntimeError, match="asin"):
        run("asin(2);")


def test_math_rejects_non_numbers(run) -> None:
    with pytest.raises(JekoTypeError, match="sin expects a Number, not String"):
        run('sin("x");')


def test_push_mutates_and_returns_the_array(run) -> None:
    assert run("var a = [1]; var b = push(a, 2); print a; print b == a; print len(a);") == [
        "[1, 2]",
        "true",
        "2",
    ]


def test_pop_and_shift(run) -> None:
    source = """
    var a = [1, 2, 3];
    print pop(a);
    print shift(a);
    print a;
    print pop([]);
    print shift([]);
    """
    assert run(source) == ["3", "1", "[2]", "nil", "nil"]


def test_join_concatenates_without_separator(run) -> None:
    assert run('print join([1, "a", true, nil]);') == ["1atruenil"]


def test_len_of_strings_and_arrays(run) -> None:
    assert run('print len("abc"); print len([]);') == ["3", "0"]
    with pytest.raises(JekoTypeError, match="len expects an Array or String"):
        run("len(1);")


def test_at_supports_negative_indexes(run) -> None:
    assert run("var a = [1, 2, 3]; print at(a, 0); print at(a, -1);") == ["1", "3"]


def test_at_out_of_range(run) -> None:
    with pytest.raises(JekoRuntimeError, match="Index 3 out of range for array of length 3"):
        run("at([1, 2, 3], 3);")
    with pytest.raises(JekoTypeError, match="integral index"):
        run("at([1], 0.5);")


def test_array_natives_called_directly() -> None:
    array = VArray([])
    assert native_push([array, VNumber(7)]) is array
    assert native_pop([array]) == VNumber(7)
    assert native_pop([array]) is NIL
    with pytest.raises(JekoTypeError, match="push expects an Array, not Number"):
        native_push([VNumber(1), VNumber(2)])
