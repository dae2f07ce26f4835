"""Built-ins available at startup: the four integer operators and the two boolean literals.

The table is created once per process and is read-only. It forms the outermost frame of every ScopeStack.
Integers are fixed-width: every arithmetic result wraps to INT_BITS-bit two's complement.
"""

from types import MappingProxyType

from minilisp.lang.error import DivisionByZero
from minilisp.pure.node import Node, NodeKind


INT_BITS = 32
INT_MAX = 2 ** (INT_BITS - 1) - 1


def wrap(number):
    """Wraps number to a signed INT_BITS-bit integer."""
    number &= 2 ** INT_BITS - 1
    return number - 2 ** INT_BITS if number > INT_MAX else number


def add(x, y):
    return wrap(x + y)


def sub(x, y):
    return wrap(x - y)


def mul(x, y):
    return wrap(x * y)


def div(x, y):
    """Integer division truncating toward zero."""
    if y == 0:
        raise DivisionByZero()
    quotient = abs(x) // abs(y)
    return wrap(quotient if (x < 0) == (y < 0) else -quotient)


def _builtin_op(name, func):
    return Node(NodeKind.BUILTIN_OP, name, func)


def _boolean(name, value):
    return Node(NodeKind.BOOLEAN, name, value)


BUILTINS = MappingProxyType({
    "+": _builtin_op("+", add),
    "-": _builtin_op("-", sub),
    "*": _builtin_op("*", mul),
    "/": _builtin_op("/", div),
    "True": _boolean("True", True),
    "False": _boolean("False", False),
})
