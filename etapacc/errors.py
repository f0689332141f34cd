"""Semantic error codes and the exception that carries them."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    ERR_UNDECLARED = 10
    ERR_DECLARED = 11
    ERR_VARIABLE = 20
    ERR_VECTOR = 21
    ERR_FUNCTION = 22
    ERR_WRONG_TYPE = 30
    ERR_STRING_TO_X = 31
    ERR_CHAR_TO_X = 32
    ERR_STRING_SIZE = 33
    ERR_MISSING_ARGS = 40
    ERR_EXCESS_ARGS = 41
    ERR_WRONG_TYPE_ARGS = 42
    ERR_WRONG_PAR_INPUT = 50
    ERR_WRONG_PAR_OUTPUT = 51
    ERR_WRONG_PAR_RETURN = 52
    ERR_WRONG_PAR_SHIFT = 53


class SemanticError(Exception):
    """A semantic check failed; ``code`` is the program's exit status."""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = ErrorCode(code)