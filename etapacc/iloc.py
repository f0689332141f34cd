"""ILOC intermediate code: instructions, name generation and listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from itertools import count
from typing import Iterable, Optional


class Operation(Enum):
    HALT = auto()
    NOP = auto()
    ADD = auto()
    SUB = auto()
    MULT = auto()
    DIV = auto()
    ADDI = auto()
    LOADI = auto()
    LOADAI = auto()
    STOREAI = auto()
    I2I = auto()
    JUMPI = auto()
    JUMP = auto()
    CBR = auto()
    CMP_LT = auto()
    CMP_LE = auto()
    CMP_EQ = auto()
    CMP_GE = auto()
    CMP_GT = auto()
    CMP_NE = auto()


_THREE_ADDRESS = {
    Operation.ADD: "add",
    Operation.SUB: "sub",
    Operation.MULT: "mult",
    Operation.DIV: "div",
    Operation.ADDI: "addI",
    Operation.LOADAI: "loadAI",
}

_COMPARISONS = {
    Operation.CMP_LT: "cmp_LT",
    Operation.CMP_LE: "cmp_LE",
    Operation.CMP_EQ: "cmp_EQ",
    Operation.CMP_GE: "cmp_GE",
    Operation.CMP_GT: "cmp_GT",
    Operation.CMP_NE: "cmp_NE",
}


@dataclass
class IlocInstruction:
    """One ILOC instruction with up to three operands and an optional label."""

    opcode: Operation
    first: str = ""
    second: str = ""
    third: str = ""
    label: Optional[str] = None

    def render(self) -> str:
        """Return the instruction in ILOC listing syntax."""
        prefix = f"{self.label}: " if self.label is not None else ""
        op, a, b, c = self.opcode, self.first, self.second, self.third
        if op in _THREE_ADDRESS:
            body = f"{_THREE_ADDRESS[op]} {a}, {b} => {c}"
        elif op in _COMPARISONS:
            body = f"{_COMPARISONS[op]} {a}, {b} -> {c}"
        elif op is Operation.HALT:
            body = "halt"
        elif op is Operation.LOADI:
            body = f"loadI {a} => {c}"
        elif op is Operation.STOREAI:
            body = f"storeAI {c} => {a}, {b}"
        elif op is Operation.I2I:
            body = f"i2i {a} => {c}"
        elif op is Operation.JUMPI:
            body = f"jumpI -> {a}"
        elif op is Operation.JUMP:
            body = f"jump -> {a}"
        elif op is Operation.CBR:
            body = f"cbr {a} -> {b}, {c}"
        else:
            body = ""
        return prefix + body


@dataclass
class NameGenerator:
    """Hands out fresh label names (L0, L1, ...) and register names (r0, r1, ...)."""

    _labels: "count[int]" = field(default_factory=count, repr=False)
    _registers: "count[int]" = field(default_factory=count, repr=False)

    def label(self) -> str:
        return f"L{next(self._labels)}"

    def register(self) -> str:
        return f"r{next(self._registers)}"


def format_iloc(code: Iterable[IlocInstruction]) -> str:
    """Render a sequence of instructions, one per line."""
    return "".join(f"{instruction.render()}\n" for instruction in code)