"""Generic patcher: the contract every node's transformer implements.

A patcher wraps one syntax node and turns it into edits on the shared
Editor. Parents decide, before patching, whether a child must produce a
single expression (set_requires_expression) and the child declares up front
whether it can (can_patch_as_expression). patch() then dispatches to
exactly one of patch_as_expression / patch_as_statement, once.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from ..context import ParseContext
from ..editor import Editor
from ..errors import PatcherError
from ..nodes import Node
from ..tokens import CALL_END, CALL_START, LPAREN, RPAREN, SourceToken

T = TypeVar("T")

_OPENERS: set[str] = {LPAREN, CALL_START}
_CLOSERS: set[str] = {RPAREN, CALL_END}


class NodePatcher:
    """Base for all patchers."""

    def __init__(self, node: Node, context: ParseContext, editor: Editor) -> None:
        self.node: Node = node
        self.context: ParseContext = context
        self.editor: Editor = editor
        self.parent: NodePatcher | None = None
        self.children: list[NodePatcher] = []
        self._expression: bool = False
        self._patched: bool = False
        self._memo: dict[str, object] = {}
        self.content_start: int = node.range[0]
        self.content_end: int = node.range[1]
        self.outer_start: int = self.content_start
        self.outer_end: int = self.content_end
        self._setup_location_information()

    def _setup_location_information(self) -> None:
        """Grow the outer range over grouping parentheses around the node."""
        tokens = self.context.tokens
        while True:
            after = tokens.index_of_first_token_at_or_after(self.outer_end)
            if after is None or after == 0:
                return
            before = tokens.index_of_first_token_at_or_after(self.outer_start)
            if before is None or before == 0:
                return
            open_token = tokens.token_at_index(before - 1)
            close_token = tokens.token_at_index(after)
            if open_token is None or close_token is None:
                return
            if open_token.type != LPAREN or close_token.type != RPAREN:
                return
            if not self._parens_match(before - 1, after):
                return
            self.outer_start = open_token.start
            self.outer_end = close_token.end

    def _parens_match(self, open_index: int, close_index: int) -> bool:
        depth = 0
        i = open_index + 1
        while i < close_index:
            token = self.context.tokens.token_at_index(i)
            if token is not None and token.type in _OPENERS:
                depth += 1
            elif token is not None and token.type in _CLOSERS:
                depth -= 1
                if depth < 0:
                    return False
            i += 1
        return depth == 0

    # --- Lifecycle ---

    def initialize(self) -> None:
        """One-time setup, run bottom-up over the tree before any patch()."""

    def set_requires_expression(self) -> None:
        if self._patched:
            raise self.error(
                f"cannot require an expression from {self.node.type} after patching it"
            )
        self._expression = True

    def will_patch_as_expression(self) -> bool:
        return self._expression

    def can_patch_as_expression(self) -> bool:
        return True

    def is_patched(self) -> bool:
        return self._patched

    def patch(self) -> None:
        if self._patched:
            raise self.error(f"cannot patch {self.node.type} more than once")
        if self._expression and not self.can_patch_as_expression():
            raise self.error(f"{self.node.type} cannot be patched as an expression")
        self._patched = True
        if self._expression:
            self.patch_as_expression()
        else:
            self.patch_as_statement()

    def patch_as_expression(self) -> None:
        raise self.error(f"'patch_as_expression' is not implemented for {self.node.type}")

    def patch_as_statement(self) -> None:
        add_parens = self.statement_should_add_parens()
        self.patch_as_expression()
        if add_parens:
            self.prepend(self.outer_start, "(")
            self.insert(self.outer_end, ")")

    # --- Shape queries ---

    def is_repeatable(self) -> bool:
        """Whether the code can be evaluated again without side effects or cost."""
        return False

    def needs_parens_for_member_access(self) -> bool:
        """Whether `.name` or `[index]` appended to this code would bind to a part of it."""
        return False

    def statement_needs_parens(self) -> bool:
        """Whether this code, leading a statement, would parse as something else."""
        return False

    def statement_should_add_parens(self) -> bool:
        return self.statement_needs_parens()

    def statement_needs_semicolon(self) -> bool:
        return True

    # --- Memoization ---

    def memoize(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value for key, computing it on first use only."""
        if key not in self._memo:
            self._memo[key] = compute()
        return self._memo[key]  # type: ignore[return-value]

    # --- Edits ---

    def insert(self, index: int, content: str) -> None:
        self.editor.insert(index, content)

    def prepend(self, index: int, content: str) -> None:
        self.editor.prepend(index, content)

    def overwrite(self, start: int, end: int, content: str) -> None:
        self.editor.overwrite(start, end, content)

    def remove(self, start: int, end: int) -> None:
        self.editor.remove(start, end)

    def slice(self, start: int, end: int) -> str:
        return self.editor.slice(start, end)

    def get_original_source(self) -> str:
        return self.context.source[self.content_start : self.content_end]

    # --- Bindings and layout ---

    def claim_free_binding(self, base: str | list[str]) -> str:
        return self.context.scope_for(self.node).claim_free_binding(base)

    def get_program_indent_string(self) -> str:
        return self.context.indent_unit

    def get_indent(self, offset: int = 0) -> str:
        """Indent of the line holding this node, shifted by offset levels.

        Reads the line as patched so far, so a parent that already re-indented
        this line is taken into account.
        """
        line_start = self.context.line_start(self.content_start)
        current = self.slice(line_start, self.content_start)
        indent = current[: len(current) - len(current.lstrip(" \t"))]
        unit = self.get_program_indent_string()
        if offset > 0:
            return indent + unit * offset
        if offset < 0:
            return indent[: max(0, len(indent) - len(unit) * -offset)]
        return indent

    # --- Tokens ---

    def index_of_source_token_between_patchers_matching(
        self,
        left: NodePatcher,
        right: NodePatcher,
        predicate: Callable[[SourceToken], bool],
    ) -> int | None:
        return self.context.tokens.index_of_token_matching_between(
            left.outer_end, right.outer_start, predicate
        )

    def source_token_at_index(self, index: int) -> SourceToken | None:
        return self.context.tokens.token_at_index(index)

    # --- Errors ---

    def error(self, message: str) -> PatcherError:
        lineno, col = self.context.line_and_column(self.content_start)
        return PatcherError(message, lineno, col)

    def __repr__(self) -> str:
        return (
            type(self).__name__
            + "("
            + str(self.content_start)
            + ", "
            + str(self.content_end)
            + ")"
        )
