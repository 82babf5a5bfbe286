## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any
from collections import namedtuple
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Array:
    """Rank-1 array of homogeneous items.  Only the two subclasses below are ever instantiated,
    and equality compares the variant as well as the items.
    """
    items: tuple

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def split(self) -> tuple["Array", ...]:
        """Each item wrapped back into its own length-1 array of the same variant."""
        return tuple(type(self)((x,)) for x in self.items)


@dataclass(frozen=True)
class Numeric(Array):
    items: tuple[float, ...] = ()

    @classmethod
    def of(cls, values) -> "Numeric":
        return cls(tuple(float(v) for v in values))

    @classmethod
    def scalar(cls, value) -> "Numeric":
        return cls((float(value),))


@dataclass(frozen=True)
class Character(Array):
    items: tuple[str, ...] = ()

    @classmethod
    def of(cls, text: str) -> "Character":
        return cls(tuple(text))

    @property
    def text(self) -> str:
        return ''.join(self.items)


class Stack(list):
    """Value stack, with the bottom at index 0 and the top at the tail."""


# Source spelling → builtin name.  Matching is exact and case-sensitive.
SPELLINGS: dict[str, str] = {
    '_': 'print',
    '?': 'if', 'if': 'if',
    '->': 'forward', 'then': 'forward',
    'do': 'do',
    '+': 'plus', '-': 'minus', '*': 'multiply', '/': 'divide',
    '=': 'equal', 'eql': 'equal',
    '^': 'and', 'and': 'and',
    'v': 'or', 'or': 'or',
    ',': 'concat', 'cat': 'concat',
    'len': 'len',
    'trm': 'transmute',
    'dup': 'duplicate', '<>': 'duplicate',
    'swp': 'swap', '><': 'swap',
    'rot': 'rotate',
    'clr': 'clear',
    'clr1': 'clear-but-one',
    'pop': 'pop', '<<': 'pop',
}

# Builtin name → the spelling used when showing tokens back to the user.
CANONICAL: dict[str, str] = {
    'print': '_', 'if': 'if', 'forward': 'then', 'do': 'do',
    'plus': '+', 'minus': '-', 'multiply': '*', 'divide': '/',
    'equal': 'eql', 'and': 'and', 'or': 'or', 'concat': 'cat',
    'len': 'len', 'transmute': 'trm', 'duplicate': 'dup', 'swap': 'swp',
    'rotate': 'rot', 'clear': 'clr', 'clear-but-one': 'clr1', 'pop': 'pop',
}


# Lexemes are transient: (source text, kind, location meta).
Lexeme = namedtuple('Lexeme', ['text', 'kind', 'meta'])


@dataclass(frozen=True)
class Word:
    name: str
    meta: dict = field(default_factory=dict, compare=False, repr=False)

@dataclass(frozen=True)
class Data:
    value: Array
    meta: dict = field(default_factory=dict, compare=False, repr=False)

@dataclass(frozen=True)
class Builtin:
    name: str
    target: int | None = None      # Index of the paired `forward` marker, for `if` only.
    meta: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def spelling(self) -> str:
        return self.meta.get('text', CANONICAL[self.name])

@dataclass(frozen=True)
class Definition:
    name: str
    body: list                     # Word, Data, Builtin or Definition tokens.
    meta: dict = field(default_factory=dict, compare=False, repr=False)


def token_text(token: Any) -> str:
    """Short name of a token for error messages and traces."""
    match token:
        case Word(name=name) | Definition(name=name): return name
        case Builtin(): return token.spelling
        case Data(meta=meta): return meta.get('text', '<data>')
    return str(token)
