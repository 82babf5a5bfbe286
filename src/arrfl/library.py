## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any, Callable
from dataclasses import dataclass, field

from .types import Stack, SPELLINGS
from .errors import ArrNameError
from .validating import get_stack_effects, validate_stack


@dataclass
class Library:
    functions: dict[str, Callable[..., Any]]
    combinators: dict[str, Callable[..., Any]]
    aliases: dict[str, str] = field(default_factory=lambda: dict(SPELLINGS))

    # Registration helpers
    def add_function(self, name: str, fn: Callable[..., Any]) -> None:
        fn, meta = _make_wrapper(fn, name)
        fn.__arr_meta__ = meta
        self.functions[name] = fn

    def ensure_consistent(self) -> None:
        for _, fn in list(self.functions.items()):
            assert hasattr(fn, '__arr_meta__')
        missing = set(self.aliases.values()) - set(self.functions) - set(self.combinators)
        assert not missing, f"Builtins without implementation: {sorted(missing)}"

    def get_function(self, name: str) -> Callable[..., Any]:
        resolved_name = self.aliases.get(name, name)
        if (function := self.functions.get(resolved_name)) is not None:
            return function
        raise ArrNameError(f"Builtin `{name}` not found in library.", arr_token=name)

    def get_combinator(self, name: str) -> Callable[..., Any] | None:
        return self.combinators.get(self.aliases.get(name, name))

    def describe(self) -> list[tuple[list[str], str]]:
        """Spellings and one-line description of every builtin, in registration order."""
        spellings: dict[str, list[str]] = {}
        for spelling, name in self.aliases.items():
            spellings.setdefault(name, []).append(spelling)
        result = []
        for name, spelled in spellings.items():
            impl = self.functions.get(name) or self.combinators.get(name)
            doc = impl.__arr_meta__['doc'] if hasattr(impl, '__arr_meta__') else (impl.__doc__ or '')
            result.append((spelled, doc.strip().split('\n')[0]))
        return result


def _make_wrapper(fn: Callable[..., Any], name: str) -> Callable[..., Any]:
    meta = get_stack_effects(fn=fn, name=name)

    match meta['valency']:
        case 0:
            def push(base, _): pass
        case 1:
            def push(base, res): base.append(res)
        case _:
            def push(base, res): base.extend(res)

    match meta['arity']:
        case -2: # pass stack as-is
            def w_s(stk: Stack):
                fn(stk)
            return w_s, meta
        case 1:
            def w_1(stk: Stack):
                validate_stack(name, meta, stk)
                a = stk.pop()
                push(stk, fn(a))
            return w_1, meta
        case 2:
            def w_2(stk: Stack):
                validate_stack(name, meta, stk)
                a = stk.pop()
                b = stk.pop()
                push(stk, fn(b, a))
            return w_2, meta
        case _:
            raise NotImplementedError(f"Operator `{name}` takes {meta['arity']} arguments, only 1 or 2 or the stack are supported.")
