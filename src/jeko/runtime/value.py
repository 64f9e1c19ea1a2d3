"""Runtime values for the Jeko interpreter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Union

from jeko.syntax.tokens import Token

if TYPE_CHECKING:
    from jeko.runtime.environment import Environment
    from jeko.syntax.ast import Stmt


@dataclass(frozen=True)
class VNil:
    def __str__(self) -> str:
        return "nil"


@dataclass(frozen=True)
class VBool:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class VNumber:
    """Numbers are floats; integral values print without a fraction."""

    value: float

    def __str__(self) -> str:
        if self.value.is_integer():
            return str(int(self.value))
        return repr(self.value)


@dataclass(frozen=True)
class VString:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class VArray:
    """Mutable array; natives such as ``push`` update it in place."""

    elements: list[Value]

    def __str__(self) -> str:
        return "[" + ", ".join(str(element) for element in self.elements) + "]"


@dataclass(frozen=True, eq=False)
class VFunction:
    """User-defined function closing over the environment it was declared in.

    ``closure`` is shared, not copied: later writes to the captured scope are
    visible to the function. ``bound_self`` is set on methods fetched from an
    instance.
    """

    name: str
    params: list[Token]
    body: list[Stmt]
    closure: Environment
    bound_self: VInstance | None = None

    @property
    def arity(self) -> int:
        return len(self.params)

    def bind(self, instance: VInstance) -> VFunction:
        return VFunction(self.name, self.params, self.body, self.closure, instance)

    def __str__(self) -> str:
        return f"<fn {self.name}>"


@dataclass(frozen=True, eq=False)
class VNative:
    """Host-provided function with a fixed arity."""

    name: str
    arity: int
    fun: Callable[[list[Value]], Value]

    def __str__(self) -> str:
        return f"<native fn {self.name}>"


@dataclass(frozen=True, eq=False)
class VClass:
    """Class value: method table plus an optional superclass."""

    name: str
    methods: dict[str, VFunction]
    superclass: VClass | None = None

    def find_method(self, name: str) -> VFunction | None:
        """Look up a method here, then along the superclass chain."""
        klass: VClass | None = self
        while klass is not None:
            method = klass.methods.get(name)
            if method is not None:
                return method
            klass = klass.superclass
        return None

    @property
    def arity(self) -> int:
        initializer = self.find_method("init")
        return initializer.arity if initializer is not None else 0

    def __str__(self) -> str:
        return f"<class {self.name}>"


@dataclass(eq=False)
class VInstance:
    klass: VClass
    fields: dict[str, Value] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"<{self.klass.name} instance>"


# Sum type for all values
Value = Union[VNil, VBool, VNumber, VString, VArray, VFunction, VNative, VClass, VInstance]

NIL = VNil()
TRUE = VBool(True)
FALSE = VBool(False)


def from_literal(literal: object) -> Value:
    """Convert a parsed literal (None, bool, float, str) to a runtime value."""
    match literal:
        case None:
            return NIL
        case bool(flag):
            return TRUE if flag else FALSE
        case int() | float():
            return VNumber(float(literal))
        case str(text):
            return VString(text)
        case _:
            raise TypeError(f"Unsupported literal: {literal!r}")


def to_string(value: Value) -> str:
    """Textual form used by ``print`` and string concatenation."""
    return str(value)


def to_type(value: Value) -> str:
    """Name of the runtime type, used in error messages."""
    match value:
        case VNil():
            return "Nil"
        case VBool():
            return "Boolean"
        case VNumber():
            return "Number"
        case VString():
            return "String"
        case VArray():
            return "Array"
        case VFunction() | VNative():
            return "Callable"
        case VClass():
            return "Class"
        case VInstance():
            return "Instance"
    raise TypeError(f"Not a Jeko value: {value!r}")


def is_truthy(value: Value) -> bool:
    """``nil`` and ``false`` are falsy, everything else is truthy."""
    match value:
        case VNil():
            return False
        case VBool(flag):
            return flag
        case _:
            return True


def values_equal(left: Value, right: Value) -> bool:
    match (left, right):
        case (VNil(), VNil()):
            return True
        case (VBool(a), VBool(b)):
            return a == b
        case (VNumber(a), VNumber(b)):
            return a == b
        case (VString(a), VString(b)):
            return a == b
        case (VArray(a), VArray(b)):
            return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
        case (VFunction(), VFunction()):
            return (
                left.name == right.name
                and left.body is right.body
                and left.closure is right.closure
                and left.bound_self is right.bound_self
            )
        case _:
            return left is right
