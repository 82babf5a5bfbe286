## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from . import operators
from . import combinators as C
from .library import Library


def get_builtin_name(py_name: str) -> str:
    """Map an `op_` function name to the builtin it implements."""
    return py_name[3:].replace('_', '-')


def load_builtins_library():
    # Control flow and output, which need the program or the output sink.
    combinators = {
        'print': C.comb_print,
        'if': C.comb_if,
        'forward': C.comb_forward,
        'do': C.comb_do,
    }
    lib = Library(functions={}, combinators=combinators)

    # Functions (wrapped via Library helper)
    for k in dir(operators):
        if not k.startswith('op_'): continue
        lib.add_function(get_builtin_name(k), getattr(operators, k))

    lib.ensure_consistent()
    return lib
