"""Lexical values attached to tokens by the scanner."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class TokenType(Enum):
    SPECIAL_CHAR = auto()
    COMPOSITE_OP = auto()
    IDENTIFIER = auto()
    LITERAL = auto()


class LiteralType(Enum):
    INTEGER = auto()
    FLOAT = auto()
    CHAR = auto()
    BOOL = auto()
    STRING = auto()
    NOT_LITERAL = auto()


def _single_precision(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


@dataclass
class LexicalValue:
    """A token's line, kind and value."""

    line_number: int
    token_type: TokenType
    value: Union[int, float, str, bool]
    literal_type: LiteralType = LiteralType.NOT_LITERAL

    def text(self) -> str:
        """Return the value as it is shown in tree labels."""
        if self.token_type is not TokenType.LITERAL:
            return str(self.value)
        if self.literal_type is LiteralType.INTEGER:
            return str(int(self.value))
        if self.literal_type is LiteralType.BOOL:
            return "true" if self.value else "false"
        if self.literal_type is LiteralType.FLOAT:
            return f"{_single_precision(float(self.value)):f}"
        if self.literal_type is LiteralType.NOT_LITERAL:
            return ""
        return str(self.value)