## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
from dataclasses import dataclass, replace

from .types import Stack, Word, Data, Builtin, Definition, token_text
from .errors import ArrError, ArrNameError, ArrRecursionError
from .library import Library
from .formatting import show_program_and_stack


DEFAULT_MAX_DEPTH = 200


@dataclass(frozen=True)
class Context:
    """Read-only state shared by every step of one line, including nested word calls."""
    words: dict
    lib: Library
    out: object = None
    verbosity: int = 0
    strict: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    stats: dict | None = None
    depth: int = 0


def _trace(ast, ip, stack, ctx: Context, label=None):
    label = label or f"{ctx.stats['steps'] if ctx.stats else ip:>3}"
    print(f"\033[90m{'  ' * ctx.depth}{label} :\033[0m  ", end='', file=ctx.out)
    show_program_and_stack(ast[ip:], stack, file=ctx.out)


def call_word(name: str, body: list, stack: Stack, ctx: Context) -> None:
    if ctx.depth >= ctx.max_depth:
        raise ArrRecursionError(f"Word `{name}` exceeded the maximum call depth of {ctx.max_depth}.")
    if ctx.verbosity == 1:
        _trace(body, 0, stack, ctx, label=f"{name:>3}")
    run_program(body, stack, replace(ctx, depth=ctx.depth + 1))


def interpret_step(ast: list, ip: int, stack: Stack, ctx: Context) -> int:
    """Execute the token at `ip` and return the index of the next one."""
    match ast[ip]:
        case Data(value=value):
            stack.append(value)
        case Word(name=name):
            if (body := ctx.words.get(name)) is not None:
                call_word(name, body, stack, ctx)
            elif ctx.strict:
                raise ArrNameError(f"Word `{name}` is not defined.", arr_token=name)
        case Definition():
            pass
        case Builtin(name=name) as op:
            if (combinator := ctx.lib.get_combinator(name)) is not None:
                return combinator(op, ast, ip, stack, ctx)
            ctx.lib.get_function(name)(stack)
    return ip + 1


def run_program(ast: list, stack: Stack, ctx: Context) -> Stack:
    ip = 0
    while ip < len(ast):
        if ctx.verbosity == 2:
            _trace(ast, ip, stack, ctx)
        if ctx.stats is not None:
            ctx.stats['steps'] = ctx.stats.get('steps', 0) + 1

        try:
            ip = interpret_step(ast, ip, stack, ctx)
        except ArrError as exc:
            # Innermost token wins when the error passes through nested word calls.
            if getattr(exc, 'arr_stack', None) is None:
                token = ast[ip]
                exc.arr_token = exc.arr_token or token_text(token)
                exc.arr_meta = exc.arr_meta or token.meta
                exc.arr_stack = Stack(stack)
            raise
    return stack


def interpret(ast: list, stack: Stack | None = None, *, words: dict | None = None, lib: Library,
              out=None, verbosity=0, strict=False, max_depth=DEFAULT_MAX_DEPTH, stats=None) -> Stack:
    stack = Stack() if stack is None else stack
    ctx = Context(words={} if words is None else words, lib=lib, out=out or sys.stdout,
                  verbosity=verbosity, strict=strict, max_depth=max_depth, stats=stats)
    run_program(ast, stack, ctx)
    if verbosity > 0:
        _trace(ast, len(ast), stack, ctx, label="  ✓")
    return stack
