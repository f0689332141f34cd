"""Token codes produced by the scanner and their textual listing."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable

SPECIAL_CHARACTERS = frozenset("~@`,;:()[]{}+-*/<>=!&.%#^|$?")


class Token(IntEnum):
    """Codes of multi-character tokens; single characters use their own code."""

    TK_PR_INT = 256
    TK_PR_FLOAT = 257
    TK_PR_BOOL = 258
    TK_PR_CHAR = 259
    TK_PR_STRING = 260
    TK_PR_IF = 261
    TK_PR_THEN = 262
    TK_PR_ELSE = 263
    TK_PR_WHILE = 264
    TK_PR_DO = 265
    TK_PR_INPUT = 266
    TK_PR_OUTPUT = 267
    TK_PR_RETURN = 268
    TK_PR_CONST = 269
    TK_PR_STATIC = 270
    TK_PR_FOREACH = 271
    TK_PR_FOR = 272
    TK_PR_SWITCH = 273
    TK_PR_CASE = 274
    TK_PR_BREAK = 275
    TK_PR_CONTINUE = 276
    TK_PR_CLASS = 277
    TK_PR_PRIVATE = 278
    TK_PR_PUBLIC = 279
    TK_PR_PROTECTED = 280
    TK_OC_LE = 281
    TK_OC_GE = 282
    TK_OC_EQ = 283
    TK_OC_NE = 284
    TK_OC_AND = 285
    TK_OC_OR = 286
    TK_OC_SL = 287
    TK_OC_SR = 288
    TK_OC_FORWARD_PIPE = 289
    TK_OC_BASH_PIPE = 290
    TK_LIT_INT = 291
    TK_LIT_FLOAT = 292
    TK_LIT_FALSE = 293
    TK_LIT_TRUE = 294
    TK_LIT_CHAR = 295
    TK_LIT_STRING = 296
    TK_IDENTIFICADOR = 297
    TOKEN_ERRO = 298
    TK_PR_END = 299
    TK_PR_DEFAULT = 300


class InvalidTokenError(Exception):
    """Raised when the token stream holds an error token or an unknown code.

    ``lines`` holds everything rendered before the stream was abandoned,
    including the line describing the offending token.
    """

    def __init__(self, code: int, message: str, lines: list[str] | None = None):
        super().__init__(message)
        self.code = code
        self.lines = list(lines) if lines else []


def is_special_character(code: int) -> bool:
    """Tell whether a token code is one of the single special characters."""
    return 0 <= code < 256 and chr(code) in SPECIAL_CHARACTERS


def format_token(code: int, line: int, text: str) -> str:
    """Render one token the way the token listing shows it."""
    if is_special_character(code):
        return f"{line} TK_ESPECIAL [{chr(code)}]"
    try:
        token = Token(code)
    except ValueError:
        message = f"<Invalid Token with code {code}>"
        raise InvalidTokenError(code, message, [message]) from None
    return f"{line} {token.name} [{text}]"


def render_tokens(tokens: Iterable[tuple[int, int, str]]) -> list[str]:
    """Render a stream of ``(code, line, text)`` tokens as listing lines.

    The listing stops at the first error token or unknown code, which is
    reported by raising :class:`InvalidTokenError`.
    """
    lines: list[str] = []
    for code, line, text in tokens:
        try:
            rendered = format_token(code, line, text)
        except InvalidTokenError as error:
            lines.extend(error.lines)
            raise InvalidTokenError(code, str(error), lines) from None
        lines.append(rendered)
        if code == Token.TOKEN_ERRO:
            raise InvalidTokenError(code, rendered, lines)
    return lines