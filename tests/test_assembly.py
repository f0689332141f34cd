import pytest

from etapacc.assembly import (
    AsmInstruction,
    AssemblyGenerationError,
    RegisterAllocator,
    find_function_by_label,
    format_asm,
    generate_asm,
    global_name_from_offset,
)
from etapacc.iloc import IlocInstruction, Operation
from etapacc.scope import EntryNature, Scope, SymbolTableEntry, SymbolType


def prologue():
    return [IlocInstruction(Operation.NOP) for _ in range(9)]


def return_sequence():
    return [
        IlocInstruction(Operation.LOADAI, "rfp", "0", "r90"),
        IlocInstruction(Operation.LOADAI, "rfp", "4", "r91"),
        IlocInstruction(Operation.LOADAI, "rfp", "8", "r92"),
        IlocInstruction(Operation.I2I, "r91", "", "rsp"),
        IlocInstruction(Operation.I2I, "r92", "", "rfp"),
        IlocInstruction(Operation.JUMP, "r90"),
    ]


def lines_of(code):
    return format_asm(code).splitlines()


def test_render_label_and_instruction():
    assert AsmInstruction(label="main").render() == "main:"
    assert AsmInstruction("movl", "$3", "%eax").render() == "\tmovl\t$3, %eax"
    assert AsmInstruction("ret").render() == "\tret"


def test_format_asm_one_line_each():
    code = [AsmInstruction("ret"), AsmInstruction(label="main")]
    assert format_asm(code) == "\tret\nmain:\n"


def test_find_function_by_label():
    labels = {"main": "L0", "foo": "L1"}
    assert find_function_by_label(labels, "L1") == "foo"
    assert find_function_by_label(labels, "L9") == ""


def test_global_name_from_offset():
    scope = Scope()
    scope.table["a"] = SymbolTableEntry(SymbolType.INTEGER, 1, EntryNature.VAR, offset=0)
    scope.table["c"] = SymbolTableEntry(SymbolType.INTEGER, 2, EntryNature.VAR, offset=4)
    assert global_name_from_offset(scope, "4") == "c"
    assert global_name_from_offset(scope, "0") == "a"
    assert global_name_from_offset(scope, "8") == ""


def test_allocator_special_registers_and_order():
    registers = RegisterAllocator()
    assert registers.translate("rsp", []) == "%rsp"
    assert registers.translate("rfp", []) == "%rbp"
    assert registers.translate("r0", []) == "%eax"
    assert registers.translate("r1", []) == "%ebx"
    assert registers.translate("r0", []) == "%eax"


def test_allocator_reuses_released_register():
    registers = RegisterAllocator()
    first = registers.translate("r0", [])
    registers.translate("r1", [])
    registers.release(first)
    assert registers.translate("r2", []) == first


def test_release_if_dead():
    registers = RegisterAllocator()
    reg = registers.translate("r0", [])
    live = [IlocInstruction(Operation.ADD, "r0", "r1", "r2")]
    assert registers.release_if_dead("r0", live) is False
    assert registers.in_use[reg] is True
    assert registers.release_if_dead("r0", []) is True
    assert registers.in_use[reg] is False


def test_allocator_exhaustion_frees_dead_register():
    registers = RegisterAllocator()
    assigned = {registers.allocate(f"r{n}", []) for n in range(14)}
    assert len(assigned) == 14
    assert registers.allocate("r14", []) == ""
    again = registers.allocate("r15", [])
    assert again == registers.mapping["r0"]


def test_simple_main():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.ADDI, "rsp", "16", "rsp"),
        IlocInstruction(Operation.LOADI, "3", "", "r0"),
        IlocInstruction(Operation.STOREAI, "rfp", "16", "r0"),
    ] + return_sequence()
    result = generate_asm(code, Scope(), {"main": "L0"})
    assert lines_of(result) == [
        '\t.file\t""',
        "\t.text",
        "\t.globl\tmain",
        "\t.type\tmain, @function",
        "main:",
        "\tpushq\t%rsp",
        "\tpushq\t%rbp",
        "\tmovq\t%rsp, %rbp",
        "\tsubq\t$16, %rsp",
        "\tmovl\t$3, %eax",
        "\tmovl\t%eax, -16(%rbp)",
        "\tmovl\t-12(%rbp), %eax",
        "\tmovq\t%rbp, %rsp",
        "\tpopq\t%rbp",
        "\tpopq\t%rsp",
        "\tret",
    ]


def test_globals_declared_and_loaded():
    scope = Scope()
    scope.table["a"] = SymbolTableEntry(SymbolType.INTEGER, 1, EntryNature.VAR, offset=0)
    scope.table["c"] = SymbolTableEntry(SymbolType.INTEGER, 2, EntryNature.VAR, offset=4)
    scope.table["main"] = SymbolTableEntry(SymbolType.INTEGER, 3, EntryNature.FUNC, arguments=[])
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.LOADAI, "rbss", "4", "r0"),
    ] + return_sequence()
    lines = lines_of(generate_asm(code, scope, {"main": "L0"}))
    assert lines[2:9] == [
        "\t.globl\ta",
        "\t.data",
        "\t.align\t4",
        "\t.type\ta, @object",
        "\t.size\ta, 4",
        "a:",
        "\t.long\t0",
    ]
    assert "c:" in lines
    assert "main:" in lines
    assert lines.count("\t.data") == 2
    assert "\tmovl\tc(%rip), %eax" in lines


def test_no_data_segment_without_globals():
    code = prologue() + [IlocInstruction(Operation.NOP, label="L0")] + return_sequence()
    lines = lines_of(generate_asm(code, Scope(), {"main": "L0"}))
    assert "\t.data" not in lines
    assert lines.count("\t.text") == 1


def test_function_call_sequence():
    code = prologue() + [IlocInstruction(Operation.NOP, label="L1")] + return_sequence() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.ADDI, "rpc", "5", "r0"),
        IlocInstruction(Operation.STOREAI, "rsp", "0", "r0"),
        IlocInstruction(Operation.STOREAI, "rsp", "4", "rsp"),
        IlocInstruction(Operation.STOREAI, "rsp", "8", "rfp"),
        IlocInstruction(Operation.JUMPI, "L1"),
    ] + return_sequence()
    lines = lines_of(generate_asm(code, Scope(), {"main": "L0", "foo": "L1"}))
    call = lines.index("\tcall\tfoo")
    assert lines[call - 1 : call + 3] == [
        "\tpushq\t%rax",
        "\tcall\tfoo",
        "\tmovl\t%eax, -12(%rsp)",
        "\tpopq\t%rax",
    ]
    assert lines.count("\tret") == 2
    assert lines.count("\tmovl\t-12(%rbp), %eax") == 1
    assert lines.index("foo:") < lines.index("main:")


def test_comparison_with_branch():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.LOADI, "1", "", "r0"),
        IlocInstruction(Operation.LOADI, "2", "", "r1"),
        IlocInstruction(Operation.CMP_GT, "r0", "r1", "r2"),
        IlocInstruction(Operation.CBR, "r2", "L5", "L6"),
        IlocInstruction(Operation.NOP, label="L5"),
    ] + return_sequence()
    lines = lines_of(generate_asm(code, Scope(), {"main": "L0"}))
    start = lines.index("\tmovl\t$1, %eax")
    assert lines[start : start + 6] == [
        "\tmovl\t$1, %eax",
        "\tmovl\t$2, %ebx",
        "\tcmpl\t%ebx, %eax",
        "\tjg\tL5",
        "\tjle\tL6",
        "L5:",
    ]


def test_division():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.LOADI, "6", "", "r0"),
        IlocInstruction(Operation.LOADI, "2", "", "r1"),
        IlocInstruction(Operation.DIV, "r0", "r1", "r2"),
    ] + return_sequence()
    lines = lines_of(generate_asm(code, Scope(), {"main": "L0"}))
    start = lines.index("\tpushq\t%rax")
    assert lines[start : start + 8] == [
        "\tpushq\t%rax",
        "\tpushq\t%rdx",
        "\tmovl\t%eax, %eax",
        "\tcltd",
        "\tidivl\t%ebx",
        "\tmovl\t%eax, %ecx",
        "\tpopq\t%rdx",
        "\tpopq\t%rax",
    ]


def test_addition_uses_second_operand_as_destination():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.LOADI, "3", "", "r0"),
        IlocInstruction(Operation.LOADI, "2", "", "r1"),
        IlocInstruction(Operation.ADD, "r0", "r1", "r0"),
    ] + return_sequence()
    lines = lines_of(generate_asm(code, Scope(), {"main": "L0"}))
    assert "\taddl\t%ebx, %eax" in lines


def test_untranslatable_instruction_raises():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.HALT),
    ]
    with pytest.raises(AssemblyGenerationError):
        generate_asm(code, Scope(), {"main": "L0"})


def test_short_prologue_raises():
    with pytest.raises(AssemblyGenerationError):
        generate_asm(prologue()[:5], Scope(), {"main": "L0"})


def test_comparison_without_branch_raises():
    code = prologue() + [
        IlocInstruction(Operation.NOP, label="L0"),
        IlocInstruction(Operation.CMP_EQ, "r0", "r1", "r2"),
    ]
    with pytest.raises(AssemblyGenerationError):
        generate_asm(code, Scope(), {"main": "L0"})