"""Generic loop patcher: shared shape of `for ... in/of` constructs.

Owns the assignee/target/filter/body slots, the bindings derived from them,
the loop indentation, and the universal expression fallback: run the loop as
a statement inside an arrow IIFE that collects each body value.
"""

from __future__ import annotations

import logging

from ..context import ParseContext
from ..editor import Editor
from ..nodes import Node
from ..tokens import THEN
from .base import NodePatcher
from .block import BlockPatcher

logger = logging.getLogger(__name__)


class ForPatcher(NodePatcher):
    """Base for loops over a target with value/key assignees."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        key_assignee: NodePatcher | None,
        val_assignee: NodePatcher,
        target: NodePatcher,
        filter: NodePatcher | None,
        body: BlockPatcher,
    ) -> None:
        super().__init__(node, context, editor)
        self.key_assignee: NodePatcher | None = key_assignee
        self.val_assignee: NodePatcher = val_assignee
        self.target: NodePatcher = target
        self.filter: NodePatcher | None = filter
        self.body: BlockPatcher = body

    def initialize(self) -> None:
        if self.key_assignee is not None:
            self.key_assignee.set_requires_expression()
        self.val_assignee.set_requires_expression()
        self.target.set_requires_expression()
        if self.filter is not None:
            self.filter.set_requires_expression()

    def can_patch_as_expression(self) -> bool:
        return True

    def statement_needs_semicolon(self) -> bool:
        return self.will_patch_as_expression()

    # --- Expression fallback ---

    def patch_as_expression(self) -> None:
        """Wrap the statement form in an IIFE collecting body values."""
        result = self.get_result_binding()
        base_indent = self.get_indent()
        iife_indent = self.get_loop_indent()
        logger.debug("%r: patching as IIFE collecting into %r", self, result)
        self.body.set_implicitly_returns(self)
        self.patch_as_statement()
        self.prepend(
            self.content_start, f"(() => {{\n{iife_indent}{result} = [];\n{iife_indent}"
        )
        self.insert(
            self.content_end, f"\n{iife_indent}return {result};\n{base_indent}}})()"
        )

    def patch_implicit_return(self, patcher: NodePatcher) -> None:
        result = self.get_result_binding()
        self.prepend(patcher.outer_start, f"{result}.push(")
        self.insert(patcher.outer_end, ")")

    def get_result_binding(self) -> str:
        return self.memoize("result_binding", lambda: self.claim_free_binding("result"))

    # --- Bindings ---

    def index_binding_candidates(self) -> list[str]:
        return ["i", "j", "k"]

    def get_index_binding(self) -> str:
        """Key assignee code when there is one, otherwise a fresh name."""

        def compute() -> str:
            key_assignee = self.key_assignee
            if key_assignee is not None:
                key_assignee.patch()
                return self.slice(key_assignee.content_start, key_assignee.content_end)
            return self.claim_free_binding(self.index_binding_candidates())

        return self.memoize("index_binding", compute)

    def get_target_code(self) -> str:
        def compute() -> str:
            self.target.patch()
            return self.slice(self.target.content_start, self.target.content_end)

        return self.memoize("target_code", compute)

    def requires_extracting_target(self) -> bool:
        return not self.target.is_repeatable()

    def target_binding_candidate(self) -> str:
        return "iterable"

    def get_target_reference(self) -> str:
        """Name to index the target through: itself, or a hoisted binding."""

        def compute() -> str:
            if self.requires_extracting_target():
                return self.claim_free_binding(self.target_binding_candidate())
            if self.target.needs_parens_for_member_access():
                return f"({self.get_target_code()})"
            return self.get_target_code()

        return self.memoize("target_reference", compute)

    def get_filter_code(self) -> str | None:
        filter_patcher = self.filter
        if filter_patcher is None:
            return None

        def compute() -> str:
            filter_patcher.patch()
            return self.slice(filter_patcher.content_start, filter_patcher.content_end)

        return self.memoize("filter_code", compute)

    # --- Layout ---

    def get_loop_indent(self) -> str:
        """Indent of the loop header in the output."""
        if self.will_patch_as_expression():
            return self.get_indent(1)
        return self.get_indent()

    def get_outer_loop_body_indent(self) -> str:
        return self.get_loop_indent() + self.get_program_indent_string()

    def get_loop_body_indent(self) -> str:
        """Indent of the body statements, one deeper under a filter's if."""
        indent = self.get_outer_loop_body_indent()
        if self.filter is not None:
            indent += self.get_program_indent_string()
        return indent

    def header_patchers(self) -> list[NodePatcher]:
        result: list[NodePatcher] = [self.target]
        if self.filter is not None:
            result.append(self.filter)
        return result

    def get_last_header_patcher(self) -> NodePatcher:
        last = self.target
        for patcher in self.header_patchers():
            if patcher.content_end > last.content_end:
                last = patcher
        return last

    # --- Shared statement pieces ---

    def remove_then_token(self) -> None:
        """Drop an inline `then` separator between header and body."""
        index = self.index_of_source_token_between_patchers_matching(
            self.get_last_header_patcher(), self.body, lambda t: t.type == THEN
        )
        if index is None:
            return
        then_token = self.source_token_at_index(index)
        next_token = self.source_token_at_index(index + 1)
        assert then_token is not None
        end = next_token.start if next_token is not None else then_token.end
        self.remove(then_token.start, end)

    def patch_possible_newline_after_loop_header(self, header_end: int) -> None:
        """Carry blank and comment lines between header and body along.

        Such lines sit after the new `{` untouched; comment lines take the
        indent of the value assignment that follows them.
        """
        if self.body.inline():
            return
        body_line_start = self.context.line_start(self.body.outer_start)
        source = self.context.source
        first_newline = source.find("\n", header_end, body_line_start)
        if first_newline == -1:
            return
        original = self.context.indent_at(self.body.content_start)
        target = self.get_outer_loop_body_indent()
        if original == target or original == "":
            return
        offset = first_newline + 1
        while offset < body_line_start:
            newline = source.find("\n", offset, body_line_start)
            line_end = newline if newline != -1 else body_line_start
            line = source[offset:line_end]
            if line.strip() != "" and line.startswith(original):
                self.overwrite(offset, offset + len(original), target)
            if newline == -1:
                break
            offset = newline + 1

    def patch_body_and_filter(self) -> None:
        """Patch the body, wrapped in `if (filter) { ... }` when filtered."""
        outer_indent = self.get_outer_loop_body_indent()
        filter_code = self.get_filter_code()
        if filter_code is not None:
            self.body.insert_line_before(f"if ({filter_code}) {{", outer_indent)
            self.body.patch()
            self.body.append_line_after("}", outer_indent)
        else:
            self.body.patch()
        self.body.append_line_after("}", self.get_loop_indent())
