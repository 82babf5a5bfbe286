## arrfl — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import arrfl.api as A


def test_run_line_through_module():
    A.reset()
    assert A.run_line('2 3 +')
    assert A.to_values() == [5.0]


def test_definitions_shared_by_module_runtime():
    A.reset()
    A.run_line(': twice dup + ;')
    A.run_line('[ 1 2 ] twice')
    assert A.top() == A.Numeric.of([2, 4])


def test_errors_exported():
    assert issubclass(A.ArrStackError, A.ArrEvalError)
    assert issubclass(A.ArrParseError, A.ArrError)
