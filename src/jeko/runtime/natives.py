"""Built-in native functions and their registration.

``Environment.define`` is the only integration point: each ``include_*``
function binds natives into the environment it is given, normally the global
scope before the program starts.
"""

from __future__ import annotations

import math
from typing import Callable

from jeko.runtime.commands import native_exec
from jeko.runtime.environment import Environment
from jeko.runtime.errors import JekoRuntimeError, JekoTypeError
from jeko.runtime.value import NIL, VArray, VNative, VNumber, VString, Value, to_string, to_type


def _number(name: str, value: Value) -> float:
    if not isinstance(value, VNumber):
        raise JekoTypeError(f"{name} expects a Number, not {to_type(value)}")
    return value.value


def _array(name: str, value: Value) -> VArray:
    if not isinstance(value, VArray):
        raise JekoTypeError(f"{name} expects an Array, not {to_type(value)}")
    return value


def _unary_math(name: str, fn: Callable[[float], float]) -> VNative:
    def _native(args: list[Value]) -> Value:
        try:
            return VNumber(float(fn(_number(name, args[0]))))
        except (ValueError, OverflowError) as exc:
            raise JekoRuntimeError(f"{name}: {exc}") from exc

    return VNative(name, 1, _native)


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


MATH_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "asin": math.asin,
    "cos": math.cos,
    "acos": math.acos,
    "tan": math.tan,
    "atan": math.atan,
    "round": _round_half_away,
    "floor": math.floor,
    "to_degrees": math.degrees,
    "to_radians": math.radians,
}


def include_math_natives(environment: Environment) -> None:
    for name, fn in MATH_FUNCTIONS.items():
        environment.define(name, _unary_math(name, fn))


# =============================================================================
# Arrays
# =============================================================================


def native_push(args: list[Value]) -> Value:
    """``push(array, value)``: append in place and return the array."""
    array = _array("push", args[0])
    array.elements.append(args[1])
    return array


def native_pop(args: list[Value]) -> Value:
    """``pop(array)``: remove and return the last element, nil when empty."""
    array = _array("pop", args[0])
    return array.elements.pop() if array.elements else NIL


def native_shift(args: list[Value]) -> Value:
    """``shift(array)``: remove and return the first element, nil when empty."""
    array = _array("shift", args[0])
    return array.elements.pop(0) if array.elements else NIL


def native_join(args: list[Value]) -> Value:
    """``join(array)``: concatenate the textual forms of the elements."""
    array = _array("join", args[0])
    return VString("".join(to_string(element) for element in array.elements))


def native_len(args: list[Value]) -> Value:
    match args[0]:
        case VArray(elements):
            return VNumber(float(len(elements)))
        case VString(text):
            return VNumber(float(len(text)))
        case other:
            raise JekoTypeError(f"len expects an Array or String, not {to_type(other)}")


def native_at(args: list[Value]) -> Value:
    """``at(array, index)``: element at ``index``; negative indexes count from the end."""
    array = _array("at", args[0])
    index = _number("at", args[1])
    if not index.is_integer():
        raise JekoTypeError(f"at expects an integral index, not {index}")
    try:
        return array.elements[int(index)]
    except IndexError:
        raise JekoRuntimeError(
            f"Index {int(index)} out of range for array of length {len(array.elements)}"
        ) from None


ARRAY_FUNCTIONS: list[VNative] = [
    VNative("push", 2, native_push),
    VNative("pop", 1, native_pop),
    VNative("shift", 1, native_shift),
    VNative("join", 1, native_join),
    VNative("len", 1, native_len),
    VNative("at", 2, native_at),
]


def include_array_natives(environment: Environment) -> None:
    for native in ARRAY_FUNCTIONS:
        environment.define(native.name, native)


def include_command_natives(environment: Environment) -> None:
    environment.define("exec", VNative("exec", 1, native_exec))


def register_natives(environment: Environment) -> None:
    """Install every built-in library into ``environment``."""
    include_math_natives(environment)
    include_array_natives(environment)
    include_command_natives(environment)
