## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import math

from .types import Array, Numeric, Character, Word, Data, Builtin, Definition


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_number(x: float) -> str:
    if math.isfinite(x) and abs(x) < 1e16 and x == int(x): return str(int(x))
    return repr(x)

def format_value(it: Array, raw: bool = False) -> str:
    """Numeric scalars print bare, other numeric arrays in brackets, character arrays quoted
    unless `raw` output is requested.
    """
    if isinstance(it, Character):
        return it.text if raw else '"' + it.text.replace('\\', '\\\\').replace('"', '\\"') + '"'
    if isinstance(it, Numeric) and len(it) == 1:
        return format_number(it[0])
    return '[' + ' '.join(format_number(x) for x in it) + ']'

def format_token(token) -> str:
    match token:
        case Word(name=name): return name
        case Data(value=value): return format_value(value)
        case Builtin(): return token.spelling
        case Definition(name=name, body=body): return f": {name} {format_ast(body)} ;"
    return str(token)

def format_ast(ast: list) -> str:
    return ' '.join(format_token(t) for t in ast)


def show_stack(stack, width=72, end='\n', file=None):
    if not stack:
        stack_str = '∅'
    else:
        stack_str = ' '.join(format_value(s) for s in stack)

    if width is not None and len(stack_str) > width:
        stack_str = '… ' + stack_str[-width+2:]
    print(f"{stack_str:>{width}}" if width else stack_str, end=end, file=file)

def show_words(words: dict, file=None):
    if not words:
        print("\033[90m(no words defined)\033[0m", file=file)
    for name, body in words.items():
        print(f"\033[36m:\033[0m \033[97m{name}\033[0m {format_ast(body)} \033[36m;\033[0m", file=file)

def show_program_and_stack(program, stack, width=72, file=None):
    prog_str = format_ast(program) if program else '∅'
    if len(prog_str) > width:
        prog_str = prog_str[:+width-2] + ' …'
    show_stack(stack, end='', width=width, file=file)
    print(f" \033[36m <=> \033[0m {prog_str:<{width}}", file=file)
