"""Block patcher: a body of statements and its layout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..context import ParseContext
from ..editor import Editor
from ..nodes import Node, ObjectInitialiser
from .base import NodePatcher

if TYPE_CHECKING:
    from .loop import ForPatcher


class BlockPatcher(NodePatcher):
    """Sequence of statements under a header, inline or indented."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        statements: list[NodePatcher],
    ) -> None:
        super().__init__(node, context, editor)
        self.statements: list[NodePatcher] = statements
        self._implicit_return_owner: ForPatcher | None = None

    def can_patch_as_expression(self) -> bool:
        for statement in self.statements:
            if not statement.can_patch_as_expression():
                return False
        return True

    def set_implicitly_returns(self, owner: ForPatcher) -> None:
        """Route the value of the last statement through owner."""
        self._implicit_return_owner = owner

    def inline(self) -> bool:
        """Whether the block starts on the same line as its header."""
        line_start = self.context.line_start(self.content_start)
        return self.context.source[line_start : self.content_start].strip() != ""

    # --- Patching ---

    def patch_as_statement(self) -> None:
        last = len(self.statements) - 1
        for i, statement in enumerate(self.statements):
            owner = self._implicit_return_owner
            returns = i == last and owner is not None and statement.can_patch_as_expression()
            if returns:
                statement.set_requires_expression()
            statement.patch()
            if returns:
                assert owner is not None
                owner.patch_implicit_return(statement)
            if returns or statement.statement_needs_semicolon():
                self.insert(statement.outer_end, ";")

    def patch_as_expression(self) -> None:
        for statement in self.statements:
            statement.set_requires_expression()
        if len(self.statements) == 1:
            self.statements[0].patch()
            return
        last = len(self.statements) - 1
        for i, statement in enumerate(self.statements):
            statement.patch()
            if i < last:
                self.insert(statement.outer_end, ",")
        self.prepend(self.content_start, "(")
        self.insert(self.content_end, ")")

    # --- Layout ---

    def set_indent(self, indent: str) -> None:
        """Re-indent every line of the block to start at indent."""
        if self.inline():
            return
        if indent == self.get_indent():
            return
        original = self.context.indent_at(self.content_start)
        source = self.context.source
        offset = self.context.line_start(self.content_start)
        while offset < self.content_end:
            newline = source.find("\n", offset)
            line_end = newline if newline != -1 else len(source)
            line = source[offset:line_end]
            if line.strip() != "" and line.startswith(original):
                if original == "":
                    self.prepend(offset, indent)
                else:
                    self.overwrite(offset, offset + len(original), indent)
            if newline == -1:
                break
            offset = newline + 1

    def surround_in_parens(self) -> None:
        self.prepend(self.content_start, "(")
        self.insert(self.content_end, ")")

    def insert_line_before(self, statement: str, indent: str | None = None) -> None:
        """Add a line of code ahead of the first statement."""
        if self.inline():
            self.insert(self.outer_start, statement + " ")
            return
        if indent is None:
            indent = self.get_indent()
        self.insert(self.context.line_start(self.outer_start), indent + statement + "\n")

    def append_line_after(self, statement: str, indent: str) -> None:
        """Add a line of code after the last statement."""
        if self.inline():
            self.insert(self.outer_end, " " + statement)
        else:
            self.insert(self.outer_end, "\n" + indent + statement)


def is_object_initialiser_block(block: BlockPatcher) -> bool:
    """Whether the block is a lone object literal, which needs parens as an arrow body."""
    return len(block.statements) == 1 and isinstance(
        block.statements[0].node, ObjectInitialiser
    )
