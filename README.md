# etapacc

Building blocks of a compiler for a small C-like language: the printable
token listing, the abstract syntax tree and its graph export, symbol tables
with type rules, ILOC intermediate code and its translation into x86-64
assembly text (AT&T syntax).

## Modules

| Module              | Contents |
|---------------------|----------|
| `etapacc.tokens`    | `Token` (codes of multi-character tokens), `is_special_character`, `format_token`, `render_tokens` and `InvalidTokenError`. |
| `etapacc.lexical`   | `TokenType`, `LiteralType` and `LexicalValue`, the value attached to a token; `LexicalValue.text()` gives the form shown in tree labels. |
| `etapacc.errors`    | `ErrorCode`, the numeric semantic error codes, and `SemanticError`, which carries one as `code`. |
| `etapacc.iloc`      | `Operation`, `IlocInstruction` with `render()`, `NameGenerator` for fresh labels and registers, and `format_iloc`. |
| `etapacc.tree`      | `Node` and one subclass per node kind (`FunctionDeclaration`, `VarAccess`, `VectorAccess`, `VarAttr`, `VarInit`, `Input`, `Output`, `FunctionCall`, `ShiftLeft`, `ShiftRight`, `Break`, `Continue`, `Return`, `If`, `ForLoop`, `WhileLoop`, `UnaryOperation`, `BinaryOperation`, `TernaryOperation`, `Literal`), plus `edges`, `labels` and `export`. |
| `etapacc.scope`     | `EntryNature`, `SymbolType`, `FuncArgument`, `SymbolTableEntry`, `Scope`, `ScopeStack`, and the helpers `size_from_symbol_type`, `literal_type_to_symbol_type`, `int_to_symbol_type`, `node_type_to_symbol_type`, `symbol_type_to_node_type`, `implicit_conversion_possible`. |
| `etapacc.assembly`  | `generate_asm`, `format_asm`, `AsmInstruction`, `RegisterAllocator`, `find_function_by_label`, `global_name_from_offset` and `AssemblyGenerationError`. |

## Tokens

Single characters such as `;` or `+` are reported by their own character
code; everything else uses a `Token` code.

```python
from etapacc.tokens import Token, format_token, is_special_character

is_special_character(ord("+"))          # True
format_token(ord(";"), 3, ";")          # '3 TK_ESPECIAL [;]'
format_token(Token.TK_PR_INT, 1, "int") # '1 TK_PR_INT [int]'
```

`render_tokens` takes `(code, line, text)` triples and returns the listing
lines. It stops at a `TOKEN_ERRO` token or an unknown code by raising
`InvalidTokenError`, whose `lines` attribute holds what was rendered up to
and including the offending token.

## Syntax tree

Each node keeps its children in named fields and links to the next command
(or next list element) through `sequence`. `walk()` visits a node, its
children's subtrees and then the sequence, depth first. `edges(root)` lists
every parent/child pair, `labels(root)` every node with its label, and
`export(root)` renders both as text: edge lines `parent, child` followed by
label lines `node [label="..."]`, nodes being named by their object
addresses.

```python
from etapacc.lexical import LexicalValue, LiteralType, TokenType
from etapacc.tree import Literal

three = Literal(LexicalValue(1, TokenType.LITERAL, 3, LiteralType.INTEGER))
three.label()  # '3'
```

Nodes also carry `local`, `code`, `true_list` and `false_list` for code
generation.

## Symbol tables

```python
from etapacc.scope import Scope, ScopeStack, SymbolTableEntry, SymbolType, EntryNature

stack = ScopeStack()          # starts with the unnamed global scope
stack.push(Scope("main", 0))
stack.scopes[-1].table["x"] = SymbolTableEntry(SymbolType.INTEGER, 2, EntryNature.VAR)
stack.lookup("x").size        # 4
stack.is_global("x")          # False
```

A vector entry's `size` is the element size times `vector_size`; strings
report a size of -1. Integers, floats and booleans convert into one another
implicitly, while characters and strings only match their own type.

## ILOC and assembly

```python
from etapacc.iloc import IlocInstruction, NameGenerator, Operation

names = NameGenerator()
names.label()     # 'L0'
names.register()  # 'r0'
IlocInstruction(Operation.ADD, "r0", "r1", "r2").render()      # 'add r0, r1 => r2'
IlocInstruction(Operation.STOREAI, "rfp", "0", "r1").render()  # 'storeAI r1 => rfp, 0'
```

`generate_asm(code, global_scope, function_labels)` translates a whole ILOC
program. It expects the code to begin with a nine-instruction prologue
(register setup and the call to `main`), which it skips, followed by each
function starting at its entry label; `function_labels` maps function names
to those labels. Global variables of the global scope become `.data`
entries. Calls and returns are recognised from their ILOC sequences and
turned into `call`, the standard frame setup and `ret`. `format_asm` renders
the result one line per instruction. `RegisterAllocator` maps ILOC registers
onto the fourteen general purpose registers in name order and never spills
values to memory: when none is free it returns an empty string. Anything
the translation cannot handle raises `AssemblyGenerationError`.

## What the package does not do

There is no scanner and no parser: token streams and syntax trees must be
built by the caller. There is no semantic analysis pass and no generation of
ILOC from a tree; `ErrorCode` and `SemanticError` are provided for such a
pass but nothing in the package raises `SemanticError`. There is no
command-line program.

## Running the tests

Install the `test` extra and run `pytest`.