## arrfl — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
from typing import Any

from .types import Stack, Array, Numeric, Character
from .errors import ArrError
from .parser import parse
from .library import Library
from .builtins import load_builtins_library
from .formatting import show_stack, show_words
from .interpreter import interpret, DEFAULT_MAX_DEPTH


class Runtime:
    """Persistent session state: one value stack and one word dictionary shared by all lines."""

    def __init__(self, library: Library | None = None, *, out=None, err=None, debug: bool = False,
                 strict: bool = False, max_depth: int = DEFAULT_MAX_DEPTH):
        self.library = library or load_builtins_library()
        self.stack = Stack()
        self.words: dict[str, list] = {}

        self.out = out
        self.err = err
        self.debug = debug
        self.strict = strict
        self.max_depth = max_depth

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def execute(self, line: str, filename: str | None = None, lineno: int = 1,
                verbosity: int = 0, stats: dict | None = None) -> Stack:
        """Parse and evaluate one line, raising on failure.  Definitions are merged only once the
        whole line parsed; evaluation errors keep whatever the line already did to the stack.
        """
        ast, words = parse(line, filename=filename, lineno=lineno)
        self.words.update(words)
        return interpret(ast, self.stack, words=self.words, lib=self.library, out=self.out or sys.stdout,
                         verbosity=verbosity, strict=self.strict, max_depth=self.max_depth, stats=stats)

    def run_line(self, line: str, filename: str | None = None, lineno: int = 1) -> bool:
        try:
            self.execute(line, filename=filename, lineno=lineno)
            return True
        except ArrError as exc:
            print(f"{type(exc).__name__}: {exc}", file=self.err or sys.stderr)
            return False
        finally:
            if self.debug:
                self.dump()

    def load(self, source: str, filename: str | None = None) -> int:
        """Feed a file through `run_line` line by line, returning the number of failed lines."""
        return sum(not self.run_line(line, filename=filename, lineno=i)
                   for i, line in enumerate(source.splitlines(), start=1))

    def reset(self) -> None:
        self.stack.clear()
        self.words.clear()

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def dump(self) -> None:
        out = self.out or sys.stdout
        print("\033[90mstack:\033[0m ", end='', file=out)
        show_stack(self.stack, width=None, file=out)
        show_words(self.words, file=out)

    def top(self) -> Array | None:
        return self.stack[-1] if self.stack else None

    def to_values(self) -> list[Any]:
        """Stack contents bottom first, as floats, lists of floats or strings."""
        def _plain(v: Array):
            if isinstance(v, Character): return v.text
            return v[0] if len(v) == 1 else list(v)
        return [_plain(v) for v in self.stack]

    def push(self, *values) -> None:
        for v in values:
            match v:
                case Array(): self.stack.append(v)
                case str(): self.stack.append(Character.of(v))
                case int() | float(): self.stack.append(Numeric.scalar(v))
                case _: self.stack.append(Numeric.of(v))
