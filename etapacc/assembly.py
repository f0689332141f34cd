"""Translation of ILOC code into x86-64 assembly in AT&T syntax."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Mapping

from etapacc.iloc import IlocInstruction, Operation
from etapacc.scope import EntryNature, Scope

ASM_REGISTERS = (
    "%eax", "%ecx", "%edx", "%ebx", "%esi", "%edi", "%r8d",
    "%r9d", "%r10d", "%r11d", "%r12d", "%r13d", "%r14d", "%r15d",
)

# Instructions before the first function: register setup and the call to main.
PROLOGUE_LENGTH = 9

_ARITHMETIC = {
    Operation.ADD: "addl",
    Operation.SUB: "subl",
    Operation.MULT: "imul",
}

# Jump taken when the comparison holds, and the one taken when it does not.
_JUMPS = {
    Operation.CMP_LT: ("jl", "jge"),
    Operation.CMP_LE: ("jle", "jg"),
    Operation.CMP_EQ: ("je", "jne"),
    Operation.CMP_GE: ("jge", "jl"),
    Operation.CMP_GT: ("jg", "jle"),
    Operation.CMP_NE: ("jne", "je"),
}


@dataclass
class AsmInstruction:
    """One assembly line: either a label or an opcode with up to two operands."""

    opcode: str = ""
    first: str = ""
    second: str = ""
    label: str = ""

    def render(self) -> str:
        """Return the line as it appears in the assembly listing."""
        if self.label:
            return f"{self.label}:"
        text = f"\t{self.opcode}"
        if self.first:
            text += f"\t{self.first}"
        if self.second:
            text += f", {self.second}"
        return text


class AssemblyGenerationError(Exception):
    """The ILOC code holds something the translation cannot handle."""


class RegisterAllocator:
    """Maps ILOC registers onto the x86-64 general purpose registers.

    Free registers are handed out in name order. Releasing a machine
    register makes it available again without forgetting which ILOC
    register last used it.
    """

    def __init__(self) -> None:
        self.mapping: dict[str, str] = {}
        self.in_use: dict[str, bool] = dict.fromkeys(ASM_REGISTERS, False)

    def translate(self, iloc_register: str, remaining: Iterable[IlocInstruction]) -> str:
        """Return the machine register standing for an ILOC register."""
        if iloc_register == "rsp":
            return "%rsp"
        if iloc_register == "rfp":
            return "%rbp"
        if iloc_register in self.mapping:
            return self.mapping[iloc_register]
        return self.allocate(iloc_register, remaining)

    def allocate(self, iloc_register: str, remaining: Iterable[IlocInstruction]) -> str:
        """Bind a free machine register to ``iloc_register``.

        When none is free, the first mapped ILOC register that the remaining
        code never mentions gives its machine register back, and an empty
        string is returned: values are never spilled to memory.
        """
        for register in sorted(self.in_use):
            if not self.in_use[register]:
                self.in_use[register] = True
                self.mapping[iloc_register] = register
                return register
        rest = tuple(remaining)
        any(self.release_if_dead(name, rest) for name in sorted(self.mapping))
        return ""

    def release(self, asm_register: str) -> None:
        """Make a machine register available again."""
        self.in_use[asm_register] = False

    def release_if_dead(self, iloc_register: str, remaining: Iterable[IlocInstruction]) -> bool:
        """Release the register of ``iloc_register`` if no remaining instruction uses it."""
        for instruction in remaining:
            if iloc_register in (instruction.first, instruction.second, instruction.third):
                return False
        self.release(self.mapping.setdefault(iloc_register, ""))
        return True


def find_function_by_label(function_labels: Mapping[str, str], label: str) -> str:
    """Return the name of the function whose entry label is ``label``, or ""."""
    for name in sorted(function_labels):
        if function_labels[name] == label:
            return name
    return ""


def global_name_from_offset(global_scope: Scope, offset: str) -> str:
    """Return the global name stored at ``offset`` in the data segment, or ""."""
    for name in sorted(global_scope.table):
        if str(global_scope.table[name].offset) == offset:
            return name
    return ""


def _front(queue: deque[IlocInstruction]) -> IlocInstruction:
    if not queue:
        raise AssemblyGenerationError("unexpected end of ILOC code")
    return queue[0]


def _drop(queue: deque[IlocInstruction], count: int = 1) -> None:
    for _ in range(count):
        if not queue:
            raise AssemblyGenerationError("unexpected end of ILOC code")
        queue.popleft()


def _global_declarations(global_scope: Scope) -> list[AsmInstruction]:
    lines: list[AsmInstruction] = []
    for name in sorted(global_scope.table):
        if global_scope.table[name].nature is not EntryNature.VAR:
            continue
        lines += [
            AsmInstruction(".globl", name),
            AsmInstruction(".data"),
            AsmInstruction(".align", "4"),
            AsmInstruction(".type", name, "@object"),
            AsmInstruction(".size", name, "4"),
            AsmInstruction(label=name),
            AsmInstruction(".long", "0"),
        ]
    if lines:
        lines.append(AsmInstruction(".text"))
    return lines


def _memory_operand(
    base: str,
    offset: str,
    global_scope: Scope,
    registers: RegisterAllocator,
    remaining: deque[IlocInstruction],
) -> str:
    if base == "rbss":
        return f"{global_name_from_offset(global_scope, offset)}(%rip)"
    return f"-{offset}({registers.translate(base, remaining)})"


def _translate_function(
    queue: deque[IlocInstruction],
    name: str,
    global_scope: Scope,
    function_labels: Mapping[str, str],
    registers: RegisterAllocator,
    out: list[AsmInstruction],
) -> None:
    """Translate instructions until the entry label of the next function."""
    while queue:
        inst = queue[0]
        label = inst.label or ""
        first, second, third = inst.first, inst.second, inst.third
        op = inst.opcode

        if op is Operation.NOP:
            if find_function_by_label(function_labels, label):
                return
            out.append(AsmInstruction(label=label))
            _drop(queue)

        elif op in _ARITHMETIC:
            source = registers.translate(second, queue)
            out.append(AsmInstruction(_ARITHMETIC[op], source, registers.translate(third, queue)))
            registers.release(source)
            _drop(queue)

        elif op is Operation.DIV:
            out.append(AsmInstruction("pushq", "%rax"))
            out.append(AsmInstruction("pushq", "%rdx"))
            divisor = registers.translate(second, queue)
            out.append(AsmInstruction("movl", registers.translate(first, queue), "%eax"))
            out.append(AsmInstruction("cltd"))
            out.append(AsmInstruction("idivl", divisor))
            out.append(AsmInstruction("movl", "%eax", registers.translate(third, queue)))
            out.append(AsmInstruction("popq", "%rdx"))
            out.append(AsmInstruction("popq", "%rax"))
            registers.release(divisor)
            _drop(queue)

        elif op is Operation.ADDI:
            if first == "rpc":
                # Return address and saved frame are handled by call and the callee.
                _drop(queue, 4)
                out.append(AsmInstruction("pushq", "%rax"))
                target = find_function_by_label(function_labels, _front(queue).first)
                out.append(AsmInstruction("call", target))
                out.append(AsmInstruction("movl", "%eax", "-12(%rsp)"))
                out.append(AsmInstruction("popq", "%rax"))
                _drop(queue)
            else:
                # The machine stack grows downwards.
                out.append(AsmInstruction("subq", f"${second}", registers.translate(third, queue)))
                _drop(queue)

        elif op is Operation.LOADI:
            out.append(AsmInstruction("movl", f"${first}", registers.translate(third, queue)))
            _drop(queue)

        elif op is Operation.LOADAI:
            if first == "rfp" and second == "0":
                # The whole return sequence becomes the standard epilogue.
                _drop(queue, 6)
                if name == "main":
                    out.append(AsmInstruction("movl", "-12(%rbp)", "%eax"))
                out.append(AsmInstruction("movq", "%rbp", "%rsp"))
                out.append(AsmInstruction("popq", "%rbp"))
                out.append(AsmInstruction("popq", "%rsp"))
                out.append(AsmInstruction("ret"))
            else:
                source = _memory_operand(first, second, global_scope, registers, queue)
                out.append(AsmInstruction("movl", source, registers.translate(third, queue)))
                _drop(queue)

        elif op is Operation.STOREAI:
            value = registers.translate(third, queue)
            target = _memory_operand(first, second, global_scope, registers, queue)
            out.append(AsmInstruction("movl", value, target))
            _drop(queue)
            registers.release(value)

        elif op is Operation.I2I:
            if first != "rsp" and third != "rbp":
                source = registers.translate(first, queue)
                target = registers.translate(third, queue)
                out.append(AsmInstruction("movl", source, target))
            _drop(queue)

        elif op is Operation.JUMPI:
            out.append(AsmInstruction("jmp", first))
            _drop(queue)

        elif op in _JUMPS:
            left = registers.translate(first, queue)
            right = registers.translate(second, queue)
            out.append(AsmInstruction("cmpl", right, left))
            _drop(queue)
            branch = _front(queue)
            taken, not_taken = _JUMPS[op]
            out.append(AsmInstruction(taken, branch.second))
            out.append(AsmInstruction(not_taken, branch.third))
            _drop(queue)

        else:
            raise AssemblyGenerationError(f"cannot translate ILOC instruction {inst.render()!r}")


def generate_asm(
    code: Iterable[IlocInstruction],
    global_scope: Scope,
    function_labels: Mapping[str, str],
) -> list[AsmInstruction]:
    """Translate a whole ILOC program into assembly lines.

    ``function_labels`` maps each function name to its entry label; the
    global scope supplies the data segment.
    """
    queue = deque(code)
    registers = RegisterAllocator()
    _drop(queue, PROLOGUE_LENGTH)

    out = [AsmInstruction(".file", '""'), AsmInstruction(".text")]
    out += _global_declarations(global_scope)

    while queue:
        head = queue.popleft()
        if head.label is None:
            raise AssemblyGenerationError("function code does not start with a label")
        name = find_function_by_label(function_labels, head.label)
        out += [
            AsmInstruction(".globl", name),
            AsmInstruction(".type", name, "@function"),
            AsmInstruction(label=name),
            AsmInstruction("pushq", "%rsp"),
            AsmInstruction("pushq", "%rbp"),
            AsmInstruction("movq", "%rsp", "%rbp"),
        ]
        _translate_function(queue, name, global_scope, function_labels, registers, out)

    return out


def format_asm(code: Iterable[AsmInstruction]) -> str:
    """Render assembly lines, one per line."""
    return "".join(f"{instruction.render()}\n" for instruction in code)