## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# arrfl — A concatenative stack language over typed one-dimensional arrays.
#

import inspect
from typing import Any, Callable, get_origin, get_args

from .types import Stack
from .errors import ArrStackError, ArrTypeError


_FUNCTION_SIGNATURES = {}

def _normalize_expected_type(tp):
    if tp is inspect._empty: assert False, "Operators must annotate all of their parameters."
    return tp if isinstance(tp, type) else Any

def get_stack_effects(*, fn: Callable = None, name: str = None) -> dict:
    if name in _FUNCTION_SIGNATURES:
        return _FUNCTION_SIGNATURES[name]
    assert fn is not None, "Must specify the function if name is not in signature cache."

    sig = inspect.signature(fn)
    params = list(sig.parameters.values())
    inputs = [_normalize_expected_type(p.annotation) for p in params]

    ret_ann = sig.return_annotation
    returns_none = (ret_ann is inspect.Signature.empty or ret_ann is type(None) or ret_ann is None)
    returns_tuple = (ret_ann is tuple or get_origin(ret_ann) is tuple)
    if returns_none:
        valency = 0
    elif returns_tuple:
        args = get_args(ret_ann)
        valency = -1 if (not args or Ellipsis in args) else len(args)
    else:
        valency = 1

    # Operators taking the whole stack manage it themselves.
    takes_stack = len(inputs) == 1 and inputs[0] is Stack

    meta = {
        'arity': -2 if takes_stack else len(inputs),
        'valency': valency,
        'inputs': [] if takes_stack else list(reversed(inputs)),
        'doc': inspect.getdoc(fn) or '',
    }
    _FUNCTION_SIGNATURES[name] = meta
    return meta


def validate_stack(name: str, effects: dict, stack: Stack) -> None:
    """Check depth and operand variants before anything is popped, top of stack first."""
    inputs = effects['inputs']
    if (depth := len(stack)) < len(inputs):
        raise ArrStackError(f"`{name}` needs at least {len(inputs)} item(s) on the stack, but {depth} available.")

    for i, expected_type in enumerate(inputs):
        if expected_type in (Any, None): continue
        actual = stack[-1 - i]
        if not isinstance(actual, expected_type):
            raise ArrTypeError(f"`{name}` expects {expected_type.__name__.lower()} at position {i+1} from top, "
                               f"got {type(actual).__name__.lower()}.")
