## arrfl — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io
import pytest

from arrfl.runtime import Runtime
from arrfl.types import Numeric, Character
from arrfl.errors import ArrParseError, ArrStackError


def make_runtime(**kwargs):
    out, err = io.StringIO(), io.StringIO()
    return Runtime(out=out, err=err, **kwargs), out, err


def test_stack_and_words_persist_across_lines():
    rt, out, _ = make_runtime()
    assert rt.run_line(': sq dup * ;')
    assert rt.run_line('5')
    assert rt.run_line('sq _')
    assert out.getvalue() == '25\n'
    assert rt.to_values() == [25.0]


def test_parse_failure_leaves_state_untouched():
    rt, _, err = make_runtime()
    rt.run_line(': keep 1 ; 2 3')
    before_stack, before_words = list(rt.stack), dict(rt.words)

    assert rt.run_line(': other 4 ; 5 [ 6') is False
    assert rt.stack == before_stack
    assert rt.words == before_words
    assert 'other' not in rt.words
    assert err.getvalue().startswith('ArrUnmatchedDelimiter:')


def test_non_breaking_space_is_whitespace():
    rt, _, err = make_runtime()
    assert rt.run_line("1\xa02 +")
    assert rt.run_line("4\x0b1 -")
    assert rt.to_values() == [3.0, 3.0]
    assert err.getvalue() == ''


def test_eval_failure_keeps_partial_mutation_and_definitions():
    rt, _, err = make_runtime()
    assert rt.run_line(': two 2 ; 1 pop pop 9') is False
    assert 'two' in rt.words
    assert rt.stack == []
    assert err.getvalue().strip().startswith('ArrStackError:')

    # The session continues with the next line.
    assert rt.run_line('two two +')
    assert rt.to_values() == [4.0]


def test_execute_raises():
    rt, _, _ = make_runtime()
    with pytest.raises(ArrStackError):
        rt.execute('+')
    with pytest.raises(ArrParseError):
        rt.execute('"open')


def test_redefinition_takes_effect_on_next_line():
    rt, _, _ = make_runtime()
    rt.run_line(': f 1 ;')
    rt.run_line(': f 2 ; f')
    assert rt.to_values() == [2.0]


def test_debug_dumps_stack_and_words_after_each_line():
    rt, out, _ = make_runtime(debug=True)
    rt.run_line(': sq dup * ; 3')
    text = out.getvalue()
    assert 'stack:' in text
    assert '3' in text
    assert 'sq' in text and 'dup *' in text


def test_load_runs_every_line_and_counts_failures():
    rt, out, err = make_runtime()
    source = "# a small program\n: inc 1 + ;\n1 inc inc _\npop pop\n\"done\" _\n"
    assert rt.load(source, filename='prog.arr') == 1
    assert out.getvalue() == '3\ndone\n'
    assert 'ArrStackError' in err.getvalue()


def test_strict_runtime_rejects_unknown_words():
    rt, _, err = make_runtime(strict=True)
    assert rt.run_line('missing') is False
    assert 'ArrNameError' in err.getvalue()


def test_max_depth_is_configurable():
    rt, _, err = make_runtime(max_depth=10)
    assert rt.run_line(': deep deep ; deep') is False
    assert 'ArrRecursionError' in err.getvalue()


def test_push_and_values():
    rt, _, _ = make_runtime()
    rt.push(1, "ab", [1, 2], Numeric.scalar(4))
    assert rt.stack == [Numeric.scalar(1), Character.of("ab"), Numeric.of([1, 2]), Numeric.scalar(4)]
    assert rt.to_values() == [1.0, "ab", [1.0, 2.0], 4.0]
    assert rt.top() == Numeric.scalar(4)


def test_reset():
    rt, _, _ = make_runtime()
    rt.run_line(': f 1 ; 2')
    rt.reset()
    assert rt.stack == [] and rt.words == {}
    assert rt.top() is None
