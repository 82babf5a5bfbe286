## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math
import operator
import itertools
from typing import Callable

from .types import Array, Numeric, Stack
from .errors import ArrTypeError, ArrValueError


def broadcast(b: Numeric, a: Numeric, fn: Callable[[float, float], float]) -> Numeric:
    """Elementwise `fn(b[i], a[i])` where the shorter operand cycles to the length of the longer one."""
    if len(b) == 0 or len(a) == 0:
        return Numeric()
    n = max(len(b), len(a))
    lhs, rhs = itertools.islice(itertools.cycle(b), n), itertools.islice(itertools.cycle(a), n)
    return Numeric(tuple(float(fn(x, y)) for x, y in zip(lhs, rhs)))


def _divide(x: float, y: float) -> float:
    if y != 0: return x / y
    # IEEE-754 semantics rather than ZeroDivisionError.
    if x == 0 or math.isnan(x): return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)

def _truthy(x: float) -> bool: return x > 0


## ARITHMETIC
def op_plus(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise addition between the top two stack elements."""
    return broadcast(b, a, operator.add)

def op_minus(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise subtraction between the top two stack elements."""
    return broadcast(b, a, operator.sub)

def op_multiply(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise multiplication between the top two stack elements."""
    return broadcast(b, a, operator.mul)

def op_divide(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise division between the top two stack elements."""
    return broadcast(b, a, _divide)

## EQUALITY & LOGIC
def op_equal(b: Array, a: Array) -> Numeric:
    """Test deep equality between the top two stack elements, pushing 1 or 0."""
    same = type(b) is type(a) and len(b) == len(a) and all(x == y for x, y in zip(b, a))
    return Numeric.scalar(1.0 if same else 0.0)

def op_and(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise logical and, where positive numbers are true."""
    return broadcast(b, a, lambda x, y: _truthy(x) and _truthy(y))

def op_or(b: Numeric, a: Numeric) -> Numeric:
    """Value-wise logical or, where positive numbers are true."""
    return broadcast(b, a, lambda x, y: _truthy(x) or _truthy(y))

## ARRAY MANIPULATION
def op_concat(b: Array, a: Array) -> Array:
    """Concatenate the top stack element to the one below it."""
    if len(b) == 0 or len(a) == 0:
        raise ArrValueError("Cannot concatenate an empty array.")
    if type(b) is not type(a):
        raise ArrTypeError(f"Cannot concatenate {type(b).__name__.lower()} with {type(a).__name__.lower()}.")
    return type(b)(b.items + a.items)

def op_len(s: Stack) -> None:
    """Push the length of the top stack element, leaving it in place."""
    if s: s.append(Numeric.scalar(len(s[-1])))

def op_transmute(x: Array) -> tuple[Array, ...]:
    """Transmute the top stack element into individual elements."""
    return x.split()

## STACK MANIPULATION
def op_duplicate(x: Array) -> tuple[Array, Array]:
    """Duplicate the top stack element."""
    return (x, x)

def op_swap(b: Array, a: Array) -> tuple[Array, Array]:
    """Swap the top two stack elements."""
    return (a, b)

def op_pop(_: Array) -> None:
    """Pop the top stack element."""
    return None

def op_rotate(s: Stack) -> None:
    """Move the bottom stack element to the top."""
    if s: s.append(s.pop(0))

def op_clear(s: Stack) -> None:
    """Clear the stack."""
    s.clear()

def op_clear_but_one(s: Stack) -> None:
    """Clear all but the top stack element."""
    del s[:-1]


def as_count(x: Array) -> int:
    """Repeat count for `do`, truncated towards zero."""
    if not isinstance(x, Numeric):
        raise ArrTypeError("`do` expects a numeric repeat count.")
    if len(x) == 0:
        raise ArrValueError("`do` expects a non-empty repeat count.")
    return int(x[0]) if math.isfinite(x[0]) else 0

def is_true(x: Array) -> bool:
    """A condition holds when any of its elements is positive; characters never are."""
    return isinstance(x, Numeric) and any(_truthy(v) for v in x)
