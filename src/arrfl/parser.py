## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re

import lark
from .types import Lexeme, Numeric, Character, Word, Data, Builtin, Definition, SPELLINGS
from .errors import ArrParseError, ArrUnmatchedDelimiter


GRAMMAR = r"""start: (STRING | ARRAY | DEFINITION | NUMBER | SYMBOL)*

// COMMENTS
COMMENT.11: /#[^\n]*/

// TOKENS
STRING.9: /"(?:[^"\\]|\\.)*"/
ARRAY.9: /\[[^\]]*\]/
DEFINITION.9: /:[^;]*;/
NUMBER.8: /[0-9]\S*/
SYMBOL: /[^\s"\[:#0-9]\S*/

// WHITESPACE
WS: /\s+/
%ignore WS
%ignore COMMENT
"""

_DELIMITERS = {
    '"': "String literal is missing its closing `\"`.",
    '[': "Array literal is missing its closing `]`.",
    ':': "Word definition is missing its closing `;`.",
}

_PARSER = None

def _get_parser() -> lark.Lark:
    global _PARSER
    if _PARSER is None:
        _PARSER = lark.Lark(GRAMMAR, start='start', parser="lalr", lexer="contextual", propagate_positions=True)
    return _PARSER


def lex(source: str, filename=None, *, offset=(0, 0)) -> list[Lexeme]:
    """Split one line (or a whole file) of source into classified lexemes.  The `offset` shifts the
    reported line and column, for text that was cut out of a larger source like definition bodies.
    """
    line_offset, column_offset = offset

    def _position(line, column):
        return line + line_offset, column + (column_offset if line == 1 else 0)

    try:
        tree = _get_parser().parse(source)
    except lark.exceptions.UnexpectedInput as exc:
        line, column = _position(getattr(exc, 'line', 1), getattr(exc, 'column', 1))
        char = getattr(exc, 'char', None) or ''
        if char in _DELIMITERS:
            raise ArrUnmatchedDelimiter(_DELIMITERS[char], filename=filename, line=line, column=column, token=char) from None
        message = f"Unexpected character {char!r}." if char else "Unexpected input."
        raise ArrParseError(message, filename=filename, line=line, column=column, token=char) from None

    result = []
    for tok in tree.children:
        line, column = _position(tok.line, tok.column)
        meta = {'filename': filename, 'line': line, 'column': column, 'text': tok.value}
        match tok.type:
            case 'STRING':
                text = re.sub(r'\\(.)', r'\1', tok.value[1:-1], flags=re.S).strip()
                result.append(Lexeme(text, 'string', meta))
            case 'ARRAY':
                result.append(Lexeme(tok.value[1:-1].strip(), 'array', meta))
            case 'DEFINITION':
                result.append(Lexeme(tok.value[1:-1], 'definition', meta))
            case 'NUMBER':
                result.append(Lexeme(tok.value, 'number', meta))
            case 'SYMBOL':
                result.append(Lexeme(tok.value, SPELLINGS.get(tok.value, 'word'), meta))
    return result


def _parse_number(text: str, meta: dict) -> float:
    try:
        return float(text)
    except ValueError:
        raise ArrParseError(f"Malformed number `{text}`.", filename=meta['filename'],
                            line=meta['line'], column=meta['column'], token=text) from None


def parse_definition(lexeme: Lexeme) -> Definition:
    meta = lexeme.meta
    # The body starts one column after the opening `:`.
    inner = lex(lexeme.text, meta['filename'], offset=(meta['line'] - 1, meta['column']))
    if not inner:
        raise ArrParseError("Word definition needs a name.", filename=meta['filename'],
                            line=meta['line'], column=meta['column'], token=':')
    (name, kind, name_meta), body = inner[0], inner[1:]
    if kind != 'word':
        raise ArrParseError(f"Cannot define `{name}`, not a valid word name.", filename=meta['filename'],
                            line=name_meta['line'], column=name_meta['column'], token=name)
    return Definition(name, parse_ast(body), meta)


def parse_token(lexeme: Lexeme):
    text, kind, meta = lexeme
    match kind:
        case 'number':
            return Data(Numeric.scalar(_parse_number(text, meta)), meta)
        case 'string':
            return Data(Character.of(text), meta)
        case 'array':
            return Data(Numeric.of(_parse_number(piece, meta) for piece in text.split()), meta)
        case 'definition':
            return parse_definition(lexeme)
        case 'word':
            return Word(text, meta)
    return Builtin(kind, meta=meta)


def pair_conditionals(ast: list) -> list:
    """Link each `if` to its nearest unmatched `forward` marker, so that conditionals nest.
    Unpaired `if` tokens are left without a target and fail only when their condition is false.
    """
    pending = []
    for i, token in enumerate(ast):
        if not isinstance(token, Builtin): continue
        if token.name == 'if':
            pending.append(i)
        elif token.name == 'forward' and pending:
            j = pending.pop()
            ast[j] = Builtin(ast[j].name, target=i, meta=ast[j].meta)
    return ast


def parse_ast(lexemes: list[Lexeme]) -> list:
    return pair_conditionals([parse_token(l) for l in lexemes])


def resolve_words(ast: list) -> dict[str, list]:
    """Collect definitions from the top level only; bodies refer to other words by name."""
    return {token.name: token.body for token in ast if isinstance(token, Definition)}


def parse(source: str, filename=None, lineno: int = 1) -> tuple[list, dict[str, list]]:
    ast = parse_ast(lex(source, filename, offset=(lineno - 1, 0)))
    return ast, resolve_words(ast)


def format_parse_error_context(filename, line, column, token_value, source=None):
    lines = source.splitlines(keepends=True) if source else open(filename, 'r').readlines()
    line = line or 1
    start_line, end_line = max(0, line - 3), min(len(lines), line + 2)
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]

    for i in range(start_line, end_line):
        line_content = lines[i].rstrip('\n')
        line_color = '\033[90m'
        if i+1 == line:
            line_color = '\033[97m'
            width = max(1, len(token_value or ''))
            if column and 0 < column <= len(line_content):
                line_content = (
                    line_content[:column-1] +
                    f"\033[48;5;30m\033[1;97m{line_content[column-1:column+width-1]}\033[0m" +
                    line_content[column+width-1:]
                )
        result.append(f"{line_color}{i+1:>5} |\033[0m {line_content}")
    return '\n' + '\n'.join(result) + '\n'
