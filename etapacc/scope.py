"""Symbol tables, the stack of nested scopes and type helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from etapacc.lexical import LiteralType
from etapacc.tree import NodeType


class EntryNature(Enum):
    LIT = auto()
    VAR = auto()
    VEC = auto()
    FUNC = auto()


class SymbolType(Enum):
    INTEGER = auto()
    FLOAT = auto()
    CHAR = auto()
    BOOL = auto()
    STRING = auto()
    INDEF = auto()


_SIZES = {
    SymbolType.INTEGER: 4,
    SymbolType.FLOAT: 8,
    SymbolType.CHAR: 1,
    SymbolType.BOOL: 1,
    SymbolType.STRING: -1,
}

_LITERAL_TO_SYMBOL = {
    LiteralType.INTEGER: SymbolType.INTEGER,
    LiteralType.FLOAT: SymbolType.FLOAT,
    LiteralType.CHAR: SymbolType.CHAR,
    LiteralType.BOOL: SymbolType.BOOL,
    LiteralType.STRING: SymbolType.STRING,
}

_INT_TO_SYMBOL = {
    1: SymbolType.INTEGER,
    2: SymbolType.FLOAT,
    3: SymbolType.CHAR,
    4: SymbolType.BOOL,
    5: SymbolType.STRING,
}

_NODE_TO_SYMBOL = {
    NodeType.INT: SymbolType.INTEGER,
    NodeType.FLOAT: SymbolType.FLOAT,
    NodeType.CHAR: SymbolType.CHAR,
    NodeType.BOOL: SymbolType.BOOL,
    NodeType.STRING: SymbolType.STRING,
}

_SYMBOL_TO_NODE = {symbol: node for node, symbol in _NODE_TO_SYMBOL.items()}

_NUMERIC = frozenset({SymbolType.INTEGER, SymbolType.FLOAT, SymbolType.BOOL})


def size_from_symbol_type(symbol_type: SymbolType) -> int:
    """Return the storage size of one value of a type; strings report -1."""
    return _SIZES.get(symbol_type, 0)


def literal_type_to_symbol_type(literal_type: LiteralType) -> SymbolType:
    return _LITERAL_TO_SYMBOL.get(literal_type, SymbolType.INDEF)


def int_to_symbol_type(value: int) -> SymbolType:
    """Map the grammar's numeric type codes 1..5 to a symbol type."""
    return _INT_TO_SYMBOL.get(value, SymbolType.INDEF)


def node_type_to_symbol_type(node_type: NodeType) -> SymbolType:
    return _NODE_TO_SYMBOL.get(node_type, SymbolType.INDEF)


def symbol_type_to_node_type(symbol_type: SymbolType) -> NodeType:
    return _SYMBOL_TO_NODE.get(symbol_type, NodeType.INDEF)


def implicit_conversion_possible(first: SymbolType, second: SymbolType) -> bool:
    """Tell whether a value of one type may stand where the other is expected.

    Integers, floats and booleans convert among themselves; chars and
    strings only match their own type.
    """
    if first in _NUMERIC:
        return second in _NUMERIC
    if first in (SymbolType.CHAR, SymbolType.STRING):
        return second is first
    return False


@dataclass
class FuncArgument:
    """A declared parameter of a function."""

    name: Optional[str]
    type: SymbolType


@dataclass
class SymbolTableEntry:
    """What the table records about one declared name.

    ``arguments`` is None for anything but functions; ``vector_size`` is 0
    for anything but vectors, whose ``size`` covers every element.
    """

    symbol_type: SymbolType
    line: int
    nature: EntryNature
    arguments: Optional[list[FuncArgument]] = None
    vector_size: int = 0
    offset: int = 0
    size: int = field(init=False)

    def __post_init__(self):
        self.size = size_from_symbol_type(self.symbol_type)
        if self.nature is EntryNature.VEC:
            self.size *= self.vector_size


@dataclass
class Scope:
    """One symbol table; the global scope has no name."""

    name: Optional[str] = None
    offset: int = 0
    table: dict[str, SymbolTableEntry] = field(default_factory=dict)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.table


class ScopeStack:
    """Nested scopes, innermost last, starting with the global scope."""

    def __init__(self):
        self.scopes: list[Scope] = [Scope(None, 0)]

    def push(self, scope: Scope) -> None:
        self.scopes.append(scope)

    def pop(self) -> Scope:
        """Remove and return the innermost scope."""
        if not self.scopes:
            raise IndexError("pop from an empty scope stack")
        return self.scopes.pop()

    def lookup(self, symbol: str) -> Optional[SymbolTableEntry]:
        """Return the entry of the innermost scope declaring ``symbol``, or None."""
        for scope in reversed(self.scopes):
            if symbol in scope:
                return scope.table[symbol]
        return None

    def is_global(self, symbol: str) -> bool:
        """Tell whether the visible declaration of ``symbol`` is in the global scope."""
        for scope in reversed(self.scopes):
            if symbol in scope:
                return scope.name is None
        return False