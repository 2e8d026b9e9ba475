"""Syntax nodes handed to the patcher core by the parser.

Nodes are read-only. Every node carries the half-open offset range of its
text in the original source. Ranges never include grouping parentheses
around the node; patchers find those through the token list.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator


# ============================================================
# BASE
# ============================================================


@dataclass
class Node:
    """Base for all syntax nodes."""

    range: tuple[int, int]

    @property
    def start(self) -> int:
        return self.range[0]

    @property
    def end(self) -> int:
        return self.range[1]

    @property
    def type(self) -> str:
        return type(self).__name__


# ============================================================
# STRUCTURE
# ============================================================


@dataclass
class Program(Node):
    """Whole source file. body is None for an empty program."""

    body: Block | None


@dataclass
class Block(Node):
    """Sequence of statements under a header or at the top level."""

    statements: list[Node]


# ============================================================
# LITERALS AND NAMES
# ============================================================


@dataclass
class Identifier(Node):
    """Plain variable reference."""

    data: str


@dataclass
class Int(Node):
    """Integer literal."""

    data: int


@dataclass
class Float(Node):
    """Float literal."""

    data: float


@dataclass
class String(Node):
    """String literal; data is the unquoted value."""

    data: str


@dataclass
class Bool(Node):
    """true/false/yes/no/on/off."""

    data: bool


@dataclass
class Null(Node):
    """null."""


@dataclass
class This(Node):
    """this or @."""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class MemberAccessOp(Node):
    """a.b or @b."""

    expression: Node
    member: str


@dataclass
class DynamicMemberAccessOp(Node):
    """a[b]."""

    expression: Node
    index: Node


@dataclass
class FunctionApplication(Node):
    """f(a, b)."""

    function: Node
    arguments: list[Node]


@dataclass
class UnaryNegateOp(Node):
    """-a."""

    expression: Node


@dataclass
class BinaryOp(Node):
    """left op right; op is the source spelling (is, and, +, ...)."""

    op: str
    left: Node
    right: Node


@dataclass
class AssignOp(Node):
    """assignee = expression."""

    assignee: Node
    expression: Node


@dataclass
class ArrayInitialiser(Node):
    """[a, b]."""

    members: list[Node]


@dataclass
class ObjectInitialiserMember(Node):
    """key: expression inside an object literal; expression is None for {a}."""

    key: Node
    expression: Node | None


@dataclass
class ObjectInitialiser(Node):
    """{a: b}; braces may be implicit in the source."""

    members: list[ObjectInitialiserMember]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Return(Node):
    """return [expression]."""

    expression: Node | None


@dataclass
class ForIn(Node):
    """for val[, key] in target [by step] [when filter] body.

    Invariants:
    - val_assignee, target and body are always present
    - key_assignee, step and filter are independently optional
    - body has at least one statement
    """

    val_assignee: Node | None
    key_assignee: Node | None
    target: Node | None
    step: Node | None
    filter: Node | None
    body: Block | None


# ============================================================
# TRAVERSAL
# ============================================================


def child_nodes(node: Node) -> list[Node]:
    """Direct children of a node in source order."""
    result: list[Node] = []
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            result.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    result.append(item)
    result.sort(key=lambda child: child.range[0])
    return result


def walk(node: Node) -> Iterator[Node]:
    """Yield node and all of its descendants, parents first."""
    yield node
    for child in child_nodes(node):
        yield from walk(child)
