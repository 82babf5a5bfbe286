## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import lark


class ArrError(Exception):
    """Base class for all errors raised while parsing or evaluating a line."""
    def __init__(self, message: str = "", *, arr_token=None, arr_meta=None):
        super().__init__(message)
        self.arr_token: str = arr_token
        self.arr_meta: dict = arr_meta

class ArrParseError(ArrError):
    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message, arr_token=token)
        self.filename = filename
        self.line = line
        self.column = column
        self.token = token

class ArrUnmatchedDelimiter(ArrParseError, lark.exceptions.LexError):
    pass


class ArrEvalError(ArrError):
    """Runtime failures found while walking the tokens of a line."""
    def __init__(self, message: str = "", *, arr_token=None, arr_meta=None, arr_stack=None):
        super().__init__(message, arr_token=arr_token, arr_meta=arr_meta)
        self.arr_stack = arr_stack

class ArrStackError(ArrEvalError, IndexError):
    pass

class ArrTypeError(ArrEvalError, TypeError):
    pass

class ArrValueError(ArrEvalError, ValueError):
    pass

class ArrControlError(ArrEvalError, RuntimeError):
    pass

class ArrNameError(ArrEvalError, NameError):
    pass

class ArrRecursionError(ArrEvalError, RecursionError):
    pass
