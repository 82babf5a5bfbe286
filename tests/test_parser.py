## arrfl — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from arrfl import parser
from arrfl.types import Numeric, Character, Word, Data, Builtin, Definition
from arrfl.errors import ArrParseError, ArrUnmatchedDelimiter


def _kinds(source: str):
    return [(l.text, l.kind) for l in parser.lex(source)]


def test_lex_classifies_literals_and_symbols():
    assert _kinds('1 2.5 "hi there" [ 1 2 ] : sq dup * ; foo +') == [
        ('1', 'number'), ('2.5', 'number'), ('hi there', 'string'), ('1 2', 'array'),
        (' sq dup * ', 'definition'), ('foo', 'word'), ('+', 'plus'),
    ]


def test_lex_operator_spellings():
    source = '_ ? if -> then do + - * / = eql ^ and v or , cat len trm dup <> swp >< rot clr clr1 pop <<'
    kinds = [kind for _, kind in _kinds(source)]
    assert kinds == [
        'print', 'if', 'if', 'forward', 'forward', 'do', 'plus', 'minus', 'multiply', 'divide',
        'equal', 'equal', 'and', 'and', 'or', 'or', 'concat', 'concat', 'len', 'transmute',
        'duplicate', 'duplicate', 'swap', 'swap', 'rotate', 'clear', 'clear-but-one', 'pop', 'pop',
    ]


def test_lex_is_case_sensitive():
    assert _kinds('DUP Dup') == [('DUP', 'word'), ('Dup', 'word')]


def test_comment_ends_the_line():
    assert _kinds('1 2 # + "unterminated [') == [('1', 'number'), ('2', 'number')]
    assert _kinds('# only a comment') == []


def test_number_consumes_whole_run():
    assert _kinds('12abc') == [('12abc', 'number')]
    assert _kinds('-5') == [('-5', 'word')]


def test_string_escapes():
    [(text, kind)] = _kinds(r'"say \"hi\""')
    assert kind == 'string'
    assert text == 'say "hi"'


def test_any_unicode_whitespace_separates_lexemes():
    assert _kinds("1\x0b2\xa03") == [('1', 'number'), ('2', 'number'), ('3', 'number')]
    assert _kinds("dup\u2003+") == [('dup', 'duplicate'), ('+', 'plus')]


def test_lex_positions():
    lexemes = parser.lex('1  dup', filename='<test>')
    assert [l.meta['column'] for l in lexemes] == [1, 4]
    assert lexemes[1].meta['filename'] == '<test>'


@pytest.mark.parametrize("source, token", [('1 [ 2 3', '['), ('"abc', '"'), (': sq dup *', ':')])
def test_unmatched_delimiters_are_parse_errors(source, token):
    with pytest.raises(ArrUnmatchedDelimiter) as exc:
        parser.parse(source)
    assert exc.value.token == token
    assert exc.value.column == source.index(token) + 1


def test_parse_literals():
    ast, words = parser.parse('3 "ab" [ 1 -2 3.5 ]')
    assert ast == [Data(Numeric.scalar(3)), Data(Character.of("ab")), Data(Numeric.of([1, -2, 3.5]))]
    assert words == {}


def test_parse_empty_array_literal():
    ast, _ = parser.parse('[ ]')
    assert ast == [Data(Numeric())]


def test_malformed_numbers_fail_the_line():
    with pytest.raises(ArrParseError):
        parser.parse('1x')
    with pytest.raises(ArrParseError):
        parser.parse('[ 1 two 3 ]')


def test_definition_is_harvested():
    ast, words = parser.parse(': sq dup * ; 5 sq')
    assert ast == [Definition('sq', [Builtin('duplicate'), Builtin('multiply')]), Data(Numeric.scalar(5)), Word('sq')]
    assert words == {'sq': [Builtin('duplicate'), Builtin('multiply')]}


def test_definition_body_keeps_literals_and_references():
    _, words = parser.parse(': greet "hello" _ other [ 1 2 ] ;')
    assert words['greet'] == [Data(Character.of("hello")), Builtin('print'), Word('other'), Data(Numeric.of([1, 2]))]


def test_last_definition_wins():
    _, words = parser.parse(': f 1 ; : f 2 ;')
    assert words == {'f': [Data(Numeric.scalar(2))]}


@pytest.mark.parametrize("source", [': ;', ':  ;', ': dup 1 ;', ': 7up 1 ;', ': "x" 1 ;'])
def test_malformed_definition_header(source):
    with pytest.raises(ArrParseError):
        parser.parse(source)


def test_definition_body_positions_are_absolute():
    [definition], _ = parser.parse('  : f 1 dup ;')
    assert [t.meta['column'] for t in definition.body] == [7, 9]


def test_conditionals_are_paired():
    ast, _ = parser.parse('1 ? 2 -> 3')
    assert ast[1] == Builtin('if', target=3)
    assert ast[3] == Builtin('forward')


def test_conditionals_nest():
    ast, _ = parser.parse('if if then then')
    assert ast[0].target == 3
    assert ast[1].target == 2


def test_unpaired_conditional_has_no_target():
    ast, _ = parser.parse('then 1 if 2')
    assert ast[2] == Builtin('if', target=None)


def test_definition_bodies_pair_their_own_conditionals():
    _, words = parser.parse(': f ? 1 -> ; ?')
    assert words['f'][0].target == 2


def test_resolve_words_ignores_nested_levels():
    ast = [Definition('a', [Definition('b', [])]), Word('a')]
    assert parser.resolve_words(ast) == {'a': [Definition('b', [])]}


def test_parse_error_context_highlights_token():
    context = parser.format_parse_error_context('<test>', 1, 3, '[', source='1 [ 2')
    assert 'File "<test>", line 1' in context
    assert '    1 |' in context
