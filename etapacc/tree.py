"""Abstract syntax tree nodes and their export as a graph listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Iterator, Optional

from etapacc.iloc import IlocInstruction
from etapacc.lexical import LexicalValue, LiteralType, TokenType


class NodeCategory(Enum):
    FUNCTION_DECLARATION = auto()
    VAR_ACCESS = auto()
    VECTOR_ACCESS = auto()
    VAR_ATTR = auto()
    VAR_INIT = auto()
    INPUT = auto()
    OUTPUT = auto()
    FUNCTION_CALL = auto()
    SHIFT_LEFT = auto()
    SHIFT_RIGHT = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()
    IF = auto()
    FOR_LOOP = auto()
    WHILE_LOOP = auto()
    UNARY_OPERATION = auto()
    BINARY_OPERATION = auto()
    TERNARY_OPERATION = auto()
    LITERAL = auto()
    INDEF = auto()


class NodeType(Enum):
    INT = auto()
    FLOAT = auto()
    CHAR = auto()
    BOOL = auto()
    STRING = auto()
    INDEF = auto()


@dataclass(eq=False)
class Node:
    """A tree node; ``sequence`` links to the next command or list element.

    A bare ``Node`` has the undefined category and serves as a carrier of
    generated code with no syntactic meaning of its own.
    """

    category: ClassVar[NodeCategory] = NodeCategory.INDEF

    node_type: NodeType = field(default=NodeType.INDEF, kw_only=True)
    sequence: Optional[Node] = field(default=None, kw_only=True)
    local: str = field(default="", kw_only=True)
    code: list[IlocInstruction] = field(default_factory=list, kw_only=True)
    true_list: list[str] = field(default_factory=list, kw_only=True)
    false_list: list[str] = field(default_factory=list, kw_only=True)

    def children(self) -> list[Node]:
        """Return the direct children, in order, leaving out absent ones."""
        return [child for child in self._child_slots() if child is not None]

    def _child_slots(self) -> tuple[Optional[Node], ...]:
        return ()

    def label(self) -> Optional[str]:
        """Return the node's label, or None when the node shows none."""
        return None

    def walk(self) -> Iterator[Node]:
        """Yield this node, its children's subtrees, then the sequence, depth first."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.sequence is not None:
                stack.append(node.sequence)
            stack.extend(reversed(node.children()))


@dataclass(eq=False)
class FunctionDeclaration(Node):
    category: ClassVar[NodeCategory] = NodeCategory.FUNCTION_DECLARATION

    identifier: LexicalValue
    first_command: Optional[Node] = None

    def _child_slots(self):
        return (self.first_command,)

    def label(self):
        return str(self.identifier.value)


@dataclass(eq=False)
class VarAccess(Node):
    category: ClassVar[NodeCategory] = NodeCategory.VAR_ACCESS

    identifier: LexicalValue

    def label(self):
        return str(self.identifier.value)


@dataclass(eq=False)
class VectorAccess(Node):
    category: ClassVar[NodeCategory] = NodeCategory.VECTOR_ACCESS

    var: Node
    index: Node

    def _child_slots(self):
        return (self.var, self.index)

    def label(self):
        return "[]"


@dataclass(eq=False)
class VarAttr(Node):
    """Assignment; its type is that of the assigned variable."""

    category: ClassVar[NodeCategory] = NodeCategory.VAR_ATTR

    identifier: Node
    expression: Node

    def __post_init__(self):
        self.node_type = self.identifier.node_type

    def _child_slots(self):
        return (self.identifier, self.expression)

    def label(self):
        return "="


@dataclass(eq=False)
class VarInit(Node):
    """Initialisation in a declaration; its type is that of the variable."""

    category: ClassVar[NodeCategory] = NodeCategory.VAR_INIT

    identifier: Node
    expression: Node

    def __post_init__(self):
        self.node_type = self.identifier.node_type

    def _child_slots(self):
        return (self.identifier, self.expression)

    def label(self):
        return "<="


@dataclass(eq=False)
class Input(Node):
    category: ClassVar[NodeCategory] = NodeCategory.INPUT

    target: Node

    def _child_slots(self):
        return (self.target,)

    def label(self):
        return "input"


@dataclass(eq=False)
class Output(Node):
    category: ClassVar[NodeCategory] = NodeCategory.OUTPUT

    value: Node

    def _child_slots(self):
        return (self.value,)

    def label(self):
        return "output"


@dataclass(eq=False)
class FunctionCall(Node):
    category: ClassVar[NodeCategory] = NodeCategory.FUNCTION_CALL

    identifier: LexicalValue
    arguments: Optional[Node] = None

    def _child_slots(self):
        return (self.arguments,)

    def label(self):
        return f"call {self.identifier.value}"


@dataclass(eq=False)
class ShiftLeft(Node):
    category: ClassVar[NodeCategory] = NodeCategory.SHIFT_LEFT

    identifier: Node
    amount: Node

    def _child_slots(self):
        return (self.identifier, self.amount)

    def label(self):
        return "<<"


@dataclass(eq=False)
class ShiftRight(Node):
    category: ClassVar[NodeCategory] = NodeCategory.SHIFT_RIGHT

    identifier: Node
    amount: Node

    def _child_slots(self):
        return (self.identifier, self.amount)

    def label(self):
        return ">>"


@dataclass(eq=False)
class Break(Node):
    category: ClassVar[NodeCategory] = NodeCategory.BREAK

    def label(self):
        return "break"


@dataclass(eq=False)
class Continue(Node):
    category: ClassVar[NodeCategory] = NodeCategory.CONTINUE

    def label(self):
        return "continue"


@dataclass(eq=False)
class Return(Node):
    category: ClassVar[NodeCategory] = NodeCategory.RETURN

    value: Optional[Node] = None

    def _child_slots(self):
        return (self.value,)

    def label(self):
        return "return"


@dataclass(eq=False)
class If(Node):
    category: ClassVar[NodeCategory] = NodeCategory.IF

    condition: Node
    if_true: Optional[Node] = None
    if_false: Optional[Node] = None

    def _child_slots(self):
        return (self.condition, self.if_true, self.if_false)

    def label(self):
        return "if"


@dataclass(eq=False)
class ForLoop(Node):
    category: ClassVar[NodeCategory] = NodeCategory.FOR_LOOP

    init: Optional[Node] = None
    condition: Optional[Node] = None
    step: Optional[Node] = None
    body: Optional[Node] = None

    def _child_slots(self):
        return (self.init, self.condition, self.step, self.body)

    def label(self):
        return "for"


@dataclass(eq=False)
class WhileLoop(Node):
    category: ClassVar[NodeCategory] = NodeCategory.WHILE_LOOP

    condition: Node
    body: Optional[Node] = None

    def _child_slots(self):
        return (self.condition, self.body)

    def label(self):
        return "while"


@dataclass(eq=False)
class UnaryOperation(Node):
    category: ClassVar[NodeCategory] = NodeCategory.UNARY_OPERATION

    operation: LexicalValue
    operand: Node

    def _child_slots(self):
        return (self.operand,)

    def label(self):
        if self.operation.token_type is TokenType.SPECIAL_CHAR:
            return str(self.operation.value)
        return None


@dataclass(eq=False)
class BinaryOperation(Node):
    category: ClassVar[NodeCategory] = NodeCategory.BINARY_OPERATION

    operation: LexicalValue
    left: Node
    right: Node

    def _child_slots(self):
        return (self.left, self.right)

    def label(self):
        if self.operation.token_type in (TokenType.SPECIAL_CHAR, TokenType.COMPOSITE_OP):
            return str(self.operation.value)
        return None


@dataclass(eq=False)
class TernaryOperation(Node):
    category: ClassVar[NodeCategory] = NodeCategory.TERNARY_OPERATION

    condition: Node
    if_true: Node
    if_false: Node

    def _child_slots(self):
        return (self.condition, self.if_true, self.if_false)

    def label(self):
        return "?:"


@dataclass(eq=False)
class Literal(Node):
    category: ClassVar[NodeCategory] = NodeCategory.LITERAL

    literal: LexicalValue

    def label(self):
        if self.literal.literal_type is LiteralType.NOT_LITERAL:
            return None
        return self.literal.text()


def edges(root: Optional[Node]) -> list[tuple[Node, Node]]:
    """Return every (parent, child) edge, sequence links included, depth first."""
    result: list[tuple[Node, Node]] = []
    if root is None:
        return result
    stack: list[tuple[Node, Optional[Node]]] = [(root, None)]
    while stack:
        node, parent = stack.pop()
        if parent is not None:
            result.append((parent, node))
        if node.sequence is not None:
            stack.append((node.sequence, node))
        stack.extend((child, node) for child in reversed(node.children()))
    return result


def labels(root: Optional[Node]) -> list[tuple[Node, str]]:
    """Return (node, label) for every node that shows a label, depth first."""
    if root is None:
        return []
    return [(node, text) for node in root.walk() if (text := node.label()) is not None]


def _address(node: Node) -> str:
    return f"{id(node):#x}"


def export(root: Optional[Node]) -> str:
    """Render the tree as edge lines followed by label lines."""
    lines = [f"{_address(parent)}, {_address(child)}" for parent, child in edges(root)]
    lines.extend(f'{_address(node)} [label="{text}"]' for node, text in labels(root))
    return "".join(f"{line}\n" for line in lines)