"""Patcher registry: builds the patcher tree mirroring a syntax tree."""

from __future__ import annotations

from ..context import ParseContext
from ..editor import Editor
from ..errors import PatcherError
from ..nodes import (
    ArrayInitialiser,
    AssignOp,
    BinaryOp,
    Block,
    Bool,
    DynamicMemberAccessOp,
    Float,
    ForIn,
    FunctionApplication,
    Identifier,
    Int,
    MemberAccessOp,
    Node,
    Null,
    ObjectInitialiser,
    ObjectInitialiserMember,
    Program,
    Return,
    String,
    This,
    UnaryNegateOp,
)
from .base import NodePatcher
from .block import BlockPatcher
from .expressions import (
    ArrayInitialiserPatcher,
    AssignOpPatcher,
    BinaryOpPatcher,
    BoolPatcher,
    DynamicMemberAccessOpPatcher,
    FloatPatcher,
    FunctionApplicationPatcher,
    IdentifierPatcher,
    IntPatcher,
    MemberAccessOpPatcher,
    NullPatcher,
    ObjectInitialiserMemberPatcher,
    ObjectInitialiserPatcher,
    ReturnPatcher,
    StringPatcher,
    ThisPatcher,
    UnaryNegateOpPatcher,
)
from .for_in import ForInPatcher, Step
from .loop import ForPatcher
from .program import ProgramPatcher

__all__ = [
    "NodePatcher",
    "BlockPatcher",
    "ForPatcher",
    "ForInPatcher",
    "ProgramPatcher",
    "Step",
    "make_patcher",
    "initialize_tree",
]


def _error(context: ParseContext, node: Node, message: str) -> PatcherError:
    lineno, col = context.line_and_column(node.start)
    return PatcherError(message, lineno, col)


def _make_block(node: Block | None, context: ParseContext, editor: Editor) -> BlockPatcher | None:
    if node is None:
        return None
    patcher = make_patcher(node, context, editor)
    assert isinstance(patcher, BlockPatcher)
    return patcher


def _make_optional(node: Node | None, context: ParseContext, editor: Editor) -> NodePatcher | None:
    if node is None:
        return None
    return make_patcher(node, context, editor)


def _build(node: Node, context: ParseContext, editor: Editor) -> NodePatcher:
    """Create the patcher for node, its child patchers first."""
    if isinstance(node, Program):
        return ProgramPatcher(node, context, editor, _make_block(node.body, context, editor))
    if isinstance(node, Block):
        statements = [make_patcher(s, context, editor) for s in node.statements]
        return BlockPatcher(node, context, editor, statements)
    if isinstance(node, Identifier):
        return IdentifierPatcher(node, context, editor)
    if isinstance(node, Int):
        return IntPatcher(node, context, editor)
    if isinstance(node, Float):
        return FloatPatcher(node, context, editor)
    if isinstance(node, String):
        return StringPatcher(node, context, editor)
    if isinstance(node, Bool):
        return BoolPatcher(node, context, editor)
    if isinstance(node, Null):
        return NullPatcher(node, context, editor)
    if isinstance(node, This):
        return ThisPatcher(node, context, editor)
    if isinstance(node, MemberAccessOp):
        return MemberAccessOpPatcher(
            node, context, editor, make_patcher(node.expression, context, editor)
        )
    if isinstance(node, DynamicMemberAccessOp):
        return DynamicMemberAccessOpPatcher(
            node,
            context,
            editor,
            make_patcher(node.expression, context, editor),
            make_patcher(node.index, context, editor),
        )
    if isinstance(node, FunctionApplication):
        fn = make_patcher(node.function, context, editor)
        args = [make_patcher(a, context, editor) for a in node.arguments]
        return FunctionApplicationPatcher(node, context, editor, fn, args)
    if isinstance(node, UnaryNegateOp):
        return UnaryNegateOpPatcher(
            node, context, editor, make_patcher(node.expression, context, editor)
        )
    if isinstance(node, BinaryOp):
        return BinaryOpPatcher(
            node,
            context,
            editor,
            make_patcher(node.left, context, editor),
            make_patcher(node.right, context, editor),
        )
    if isinstance(node, AssignOp):
        return AssignOpPatcher(
            node,
            context,
            editor,
            make_patcher(node.assignee, context, editor),
            make_patcher(node.expression, context, editor),
        )
    if isinstance(node, ArrayInitialiser):
        members = [make_patcher(m, context, editor) for m in node.members]
        return ArrayInitialiserPatcher(node, context, editor, members)
    if isinstance(node, ObjectInitialiserMember):
        return ObjectInitialiserMemberPatcher(
            node,
            context,
            editor,
            make_patcher(node.key, context, editor),
            _make_optional(node.expression, context, editor),
        )
    if isinstance(node, ObjectInitialiser):
        members = [make_patcher(m, context, editor) for m in node.members]
        return ObjectInitialiserPatcher(node, context, editor, members)
    if isinstance(node, Return):
        return ReturnPatcher(
            node, context, editor, _make_optional(node.expression, context, editor)
        )
    if isinstance(node, ForIn):
        if node.val_assignee is None:
            raise _error(context, node, "for-in loop has no value assignee")
        if node.target is None:
            raise _error(context, node, "for-in loop has no target")
        if node.body is None or len(node.body.statements) == 0:
            raise _error(context, node, "for-in loop has an empty body")
        body = _make_block(node.body, context, editor)
        assert body is not None
        return ForInPatcher(
            node,
            context,
            editor,
            _make_optional(node.key_assignee, context, editor),
            make_patcher(node.val_assignee, context, editor),
            make_patcher(node.target, context, editor),
            _make_optional(node.step, context, editor),
            _make_optional(node.filter, context, editor),
            body,
        )
    raise _error(context, node, f"no patcher for node type {node.type}")


def make_patcher(node: Node, context: ParseContext, editor: Editor) -> NodePatcher:
    """Build the patcher subtree for node and link parents and children."""
    patcher = _build(node, context, editor)
    patcher.children = _direct_children(patcher)
    for child in patcher.children:
        child.parent = patcher
    return patcher


def _direct_children(patcher: NodePatcher) -> list[NodePatcher]:
    result: list[NodePatcher] = []
    for value in vars(patcher).values():
        if isinstance(value, NodePatcher) and value is not patcher.parent:
            result.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, NodePatcher):
                    result.append(item)
    result.sort(key=lambda child: child.content_start)
    return result


def initialize_tree(patcher: NodePatcher) -> None:
    """Run initialize() on every patcher, children before parents."""
    for child in patcher.children:
        initialize_tree(child)
    patcher.initialize()
