## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Builtin, Stack
from .errors import ArrStackError, ArrControlError
from .operators import as_count, is_true
from .formatting import format_value
from .interpreter import Context, interpret_step


def comb_print(this: Builtin, ast: list, ip: int, stack: Stack, ctx: Context) -> int:
    """Print the top stack value, leaving it in place."""
    if stack:
        print(format_value(stack[-1], raw=True), file=ctx.out)
    return ip + 1

def comb_if(this: Builtin, ast: list, ip: int, stack: Stack, ctx: Context) -> int:
    """Pop a condition; unless one of its values is positive, continue after the matching `then`.
    """
    if not stack:
        raise ArrStackError(f"`{this.spelling}` needs a condition on the stack.")
    if is_true(stack.pop()):
        return ip + 1
    if this.target is None:
        raise ArrControlError(f"`{this.spelling}` has no matching `then` to skip to.")
    return this.target + 1

def comb_forward(this: Builtin, ast: list, ip: int, stack: Stack, ctx: Context) -> int:
    """Marker to identify the end of a conditional branch."""
    return ip + 1

def comb_do(this: Builtin, ast: list, ip: int, stack: Stack, ctx: Context) -> int:
    """Repeat the following token n times, where n is popped from the stack.  Only that single token
    is repeated; evaluation then resumes after it.
    """
    if not stack:
        raise ArrStackError(f"`{this.spelling}` needs a repeat count on the stack.")
    count = as_count(stack[-1])
    if ip + 1 >= len(ast):
        raise ArrControlError(f"`{this.spelling}` needs a token after it to repeat.")
    if isinstance(body := ast[ip + 1], Builtin) and body.name in ('if', 'do'):
        raise ArrControlError(f"`{this.spelling}` cannot repeat the control-flow builtin `{body.spelling}`.")

    stack.pop()
    for _ in range(count):
        interpret_step(ast, ip + 1, stack, ctx)
    return ip + 2
