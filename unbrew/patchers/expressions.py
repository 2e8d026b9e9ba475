"""Minimal expression and statement patchers the loop family delegates to."""

from __future__ import annotations

from ..context import ParseContext
from ..editor import Editor
from ..nodes import Node
from ..tokens import CALL_START, LBRACE, OPERATOR
from .base import NodePatcher

# Operators whose spelling differs in the output dialect
OPERATOR_MAP: dict[str, str] = {
    "is": "===",
    "isnt": "!==",
    "==": "===",
    "!=": "!==",
    "and": "&&",
    "or": "||",
}


# ============================================================
# NAMES AND LITERALS
# ============================================================


class PassthroughPatcher(NodePatcher):
    """Node whose source text is already valid output."""

    def patch_as_expression(self) -> None:
        pass

    def is_repeatable(self) -> bool:
        return True


class IdentifierPatcher(PassthroughPatcher):
    pass


class IntPatcher(PassthroughPatcher):
    pass


class FloatPatcher(PassthroughPatcher):
    pass


class StringPatcher(PassthroughPatcher):
    pass


class NullPatcher(PassthroughPatcher):
    pass


class BoolPatcher(PassthroughPatcher):
    """yes/no/on/off become true/false."""

    def patch_as_expression(self) -> None:
        text = "true" if self.node.data else "false"
        if self.get_original_source() != text:
            self.overwrite(self.content_start, self.content_end, text)


class ThisPatcher(PassthroughPatcher):
    """@ becomes this."""

    def patch_as_expression(self) -> None:
        if self.get_original_source() == "@":
            self.overwrite(self.content_start, self.content_end, "this")


# ============================================================
# ACCESS AND CALLS
# ============================================================


class MemberAccessOpPatcher(NodePatcher):
    """a.b, and @b which needs a dot once @ becomes this."""

    def __init__(
        self, node: Node, context: ParseContext, editor: Editor, expression: NodePatcher
    ) -> None:
        super().__init__(node, context, editor)
        self.expression: NodePatcher = expression

    def initialize(self) -> None:
        self.expression.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.expression.patch()
        between = self.context.source[self.expression.outer_end : self.content_end]
        if not between.lstrip().startswith("."):
            self.insert(self.expression.outer_end, ".")

    def is_repeatable(self) -> bool:
        return self.expression.is_repeatable()


class DynamicMemberAccessOpPatcher(NodePatcher):
    """a[b]."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        expression: NodePatcher,
        index: NodePatcher,
    ) -> None:
        super().__init__(node, context, editor)
        self.expression: NodePatcher = expression
        self.index: NodePatcher = index

    def initialize(self) -> None:
        self.expression.set_requires_expression()
        self.index.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.expression.patch()
        self.index.patch()

    def is_repeatable(self) -> bool:
        return self.expression.is_repeatable() and self.index.is_repeatable()


class FunctionApplicationPatcher(NodePatcher):
    """f(a, b); implicit calls like `f a, b` get their parentheses."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        fn: NodePatcher,
        args: list[NodePatcher],
    ) -> None:
        super().__init__(node, context, editor)
        self.fn: NodePatcher = fn
        self.args: list[NodePatcher] = args

    def initialize(self) -> None:
        self.fn.set_requires_expression()
        for arg in self.args:
            arg.set_requires_expression()

    def is_implicit_call(self) -> bool:
        tokens = self.context.tokens
        index = tokens.index_of_first_token_at_or_after(self.fn.outer_end)
        token = tokens.token_at_index(index) if index is not None else None
        return token is None or token.type != CALL_START or token.start >= self.content_end

    def patch_as_expression(self) -> None:
        implicit = self.is_implicit_call()
        self.fn.patch()
        for arg in self.args:
            arg.patch()
        if implicit and len(self.args) > 0:
            self.overwrite(self.fn.outer_end, self.args[0].outer_start, "(")
            self.insert(self.args[-1].outer_end, ")")


# ============================================================
# OPERATORS
# ============================================================


class UnaryNegateOpPatcher(NodePatcher):
    """-a."""

    def __init__(
        self, node: Node, context: ParseContext, editor: Editor, expression: NodePatcher
    ) -> None:
        super().__init__(node, context, editor)
        self.expression: NodePatcher = expression

    def initialize(self) -> None:
        self.expression.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.expression.patch()

    def is_repeatable(self) -> bool:
        return self.expression.is_repeatable()

    def needs_parens_for_member_access(self) -> bool:
        return True


class BinaryOpPatcher(NodePatcher):
    """left op right, with operator spellings mapped through OPERATOR_MAP."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        left: NodePatcher,
        right: NodePatcher,
    ) -> None:
        super().__init__(node, context, editor)
        self.left: NodePatcher = left
        self.right: NodePatcher = right

    def initialize(self) -> None:
        self.left.set_requires_expression()
        self.right.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.left.patch()
        index = self.index_of_source_token_between_patchers_matching(
            self.left, self.right, lambda t: t.type == OPERATOR
        )
        replacement = OPERATOR_MAP.get(self.node.op)
        if index is not None and replacement is not None:
            token = self.source_token_at_index(index)
            assert token is not None
            self.overwrite(token.start, token.end, replacement)
        self.right.patch()

    def is_repeatable(self) -> bool:
        return self.left.is_repeatable() and self.right.is_repeatable()

    def needs_parens_for_member_access(self) -> bool:
        return True


class AssignOpPatcher(NodePatcher):
    """assignee = expression."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        assignee: NodePatcher,
        expression: NodePatcher,
    ) -> None:
        super().__init__(node, context, editor)
        self.assignee: NodePatcher = assignee
        self.expression: NodePatcher = expression

    def initialize(self) -> None:
        self.assignee.set_requires_expression()
        self.expression.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.assignee.patch()
        self.expression.patch()

    def statement_should_add_parens(self) -> bool:
        return self.assignee.statement_needs_parens()

    def needs_parens_for_member_access(self) -> bool:
        return True


# ============================================================
# LITERAL COLLECTIONS
# ============================================================


class ArrayInitialiserPatcher(NodePatcher):
    """[a, b]; builds a new array on every evaluation."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        members: list[NodePatcher],
    ) -> None:
        super().__init__(node, context, editor)
        self.members: list[NodePatcher] = members

    def initialize(self) -> None:
        for member in self.members:
            member.set_requires_expression()

    def patch_as_expression(self) -> None:
        for member in self.members:
            member.patch()


class ObjectInitialiserMemberPatcher(NodePatcher):
    """key: value, or shorthand key."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        key: NodePatcher,
        expression: NodePatcher | None,
    ) -> None:
        super().__init__(node, context, editor)
        self.key: NodePatcher = key
        self.expression: NodePatcher | None = expression

    def initialize(self) -> None:
        self.key.set_requires_expression()
        if self.expression is not None:
            self.expression.set_requires_expression()

    def patch_as_expression(self) -> None:
        self.key.patch()
        if self.expression is not None:
            self.expression.patch()


class ObjectInitialiserPatcher(NodePatcher):
    """{a: b}; implicit objects get their braces."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        members: list[NodePatcher],
    ) -> None:
        super().__init__(node, context, editor)
        self.members: list[NodePatcher] = members

    def initialize(self) -> None:
        for member in self.members:
            member.set_requires_expression()

    def is_implicit(self) -> bool:
        index = self.context.tokens.index_of_token_starting_at(self.content_start)
        token = self.source_token_at_index(index) if index is not None else None
        return token is None or token.type != LBRACE

    def patch_as_expression(self) -> None:
        for member in self.members:
            member.patch()
        if self.is_implicit():
            self.prepend(self.content_start, "{")
            self.insert(self.content_end, "}")

    def statement_needs_parens(self) -> bool:
        return True


# ============================================================
# STATEMENTS
# ============================================================


class ReturnPatcher(NodePatcher):
    """return [expression]; only valid as a statement."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        expression: NodePatcher | None,
    ) -> None:
        super().__init__(node, context, editor)
        self.expression: NodePatcher | None = expression

    def initialize(self) -> None:
        if self.expression is not None:
            self.expression.set_requires_expression()

    def can_patch_as_expression(self) -> bool:
        return False

    def patch_as_statement(self) -> None:
        if self.expression is not None:
            self.expression.patch()
