"""Indexed-iteration patcher: `for value[, key] in target [by step] [when filter]`.

Two output strategies:

| Strategy          | Used when                                         | Output                                  |
|-------------------|---------------------------------------------------|-----------------------------------------|
| map chain         | expression required, no step, body is an          | target.filter((v, k) => f).map((v, k) => b) |
|                   | expression, not both filter and key               |                                         |
| indexed statement | everything else (inside an IIFE for expressions)  | for (i = 0; i < t.length; i++) { v = t[i]; ... } |

A filter and a key together rule out the chain: filtering first would shift
the indexes the map callback sees.
"""

from __future__ import annotations

import logging

from ..context import ParseContext
from ..editor import Editor
from ..nodes import Float, Int, Node, UnaryNegateOp
from .base import NodePatcher
from .block import BlockPatcher, is_object_initialiser_block
from .loop import ForPatcher

logger = logging.getLogger(__name__)


class Step:
    """Normalized view of an optional `by` expression.

    Leading negations are stripped with their parity tracked, so `- - 2`
    steps like `2`. Literal-ness is judged after stripping.

    - is_literal: the stripped expression is a number literal
    - negated: odd number of leading negations
    - number: literal value, None for dynamic steps
    - init: code evaluated once into the step binding (dynamic steps)
    - update: literal text, or the step binding name
    - raw: full patched step code, negations included
    """

    def __init__(self, patcher: NodePatcher | None) -> None:
        self.is_literal: bool = True
        self.negated: bool = False
        self.number: int | float | None = 1
        self.init: str = "1"
        self.update: str = "1"
        self.raw: str = "1"
        if patcher is None:
            return
        negated = False
        root = patcher
        while isinstance(root.node, UnaryNegateOp):
            negated = not negated
            root = root.expression  # type: ignore[attr-defined]
        patcher.patch()
        self.negated = negated
        self.raw = patcher.slice(patcher.content_start, patcher.content_end)
        self.init = root.slice(root.content_start, root.content_end)
        self.is_literal = isinstance(root.node, (Int, Float))
        if self.is_literal:
            self.update = self.init
            self.number = root.node.data  # type: ignore[attr-defined]
        else:
            self.update = root.claim_free_binding("step")
            self.number = None

    def __repr__(self) -> str:
        return (
            "Step("
            + ("-" if self.negated else "+")
            + self.update
            + (", literal" if self.is_literal else ", dynamic")
            + ")"
        )


class ForInPatcher(ForPatcher):
    """Loops over an indexable collection."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        key_assignee: NodePatcher | None,
        val_assignee: NodePatcher,
        target: NodePatcher,
        step: NodePatcher | None,
        filter: NodePatcher | None,
        body: BlockPatcher,
    ) -> None:
        super().__init__(
            node, context, editor, key_assignee, val_assignee, target, filter, body
        )
        self.step: NodePatcher | None = step

    def initialize(self) -> None:
        super().initialize()
        if self.step is not None:
            self.step.set_requires_expression()

    def header_patchers(self) -> list[NodePatcher]:
        result = super().header_patchers()
        if self.step is not None:
            result.append(self.step)
        return result

    # --- Strategy ---

    def can_patch_as_map_expression(self) -> bool:
        if not self.context.options.map_expressions:
            return False
        if self.step is not None:
            return False
        if not self.body.can_patch_as_expression():
            return False
        if self.filter is not None and self.key_assignee is not None:
            return False
        return True

    def patch_as_expression(self) -> None:
        if not self.can_patch_as_map_expression():
            logger.debug("%r: map chain not possible, falling back to IIFE", self)
            super().patch_as_expression()
            return
        logger.debug("%r: patching as map chain", self)
        self.remove_then_token()

        self.val_assignee.patch()
        if self.key_assignee is not None:
            self.key_assignee.patch()
        self.target.patch()
        if self.filter is not None:
            self.filter.patch()

        self.body.set_requires_expression()
        self.body.patch()

        assignee_code = self.slice(self.val_assignee.content_start, self.val_assignee.content_end)
        if self.key_assignee is not None:
            key_code = self.slice(self.key_assignee.content_start, self.key_assignee.content_end)
            assignee_code += ", " + key_code

        # for a in b when c d  ->  b when c d
        self.remove(self.content_start, self.target.outer_start)
        if self.target.needs_parens_for_member_access() and not self.target_is_grouped():
            # b or c  ->  (b or c)
            self.prepend(self.target.outer_start, "(")
            self.insert(self.target.outer_end, ")")
        if self.filter is not None:
            # b when c d  ->  b.filter((a) => c d
            self.overwrite(
                self.target.outer_end,
                self.filter.outer_start,
                f".filter(({assignee_code}) => ",
            )
            # b.filter((a) => c d  ->  b.filter((a) => c).map((a) => d
            self.insert(self.filter.outer_end, f").map(({assignee_code}) =>")
        else:
            # b d  ->  b.map((a) => d
            self.insert(self.target.outer_end, f".map(({assignee_code}) =>")
        if is_object_initialiser_block(self.body):
            self.body.surround_in_parens()
        self.insert(self.body.outer_end, ")")

    def target_is_grouped(self) -> bool:
        return self.target.outer_start != self.target.content_start

    def patch_as_statement(self) -> None:
        if not self.body.inline():
            self.body.set_indent(self.get_loop_body_indent())

        # Order matters: value, key, target, filter, step.
        self.get_value_binding()
        self.get_index_binding()
        self.get_target_code()
        self.get_target_reference()
        self.get_filter_code()
        self.get_step()

        self.patch_for_loop_header()
        self.patch_for_loop_body()

    # --- Pieces ---

    def get_value_binding(self) -> str:
        def compute() -> str:
            self.val_assignee.patch()
            return self.slice(self.val_assignee.content_start, self.val_assignee.content_end)

        return self.memoize("value_binding", compute)

    def get_step(self) -> Step:
        return self.memoize("step", lambda: Step(self.step))

    def patch_for_loop_header(self) -> None:
        if self.requires_extracting_target():
            logger.debug("%r: hoisting target into %r", self, self.get_target_reference())
            self.prepend(
                self.content_start,
                f"{self.get_target_reference()} = {self.get_target_code()}\n{self.get_loop_indent()}",
            )
        self.overwrite(
            self.val_assignee.outer_start,
            self.get_last_header_patcher().outer_end,
            f"({self.get_init_code()}; {self.get_test_code()}; {self.get_update_code()}) {{",
        )

    def patch_for_loop_body(self) -> None:
        self.remove_then_token()
        self.patch_possible_newline_after_loop_header(self.get_last_header_patcher().outer_end)

        value_assignment = (
            f"{self.get_value_binding()} = {self.get_target_reference()}[{self.get_index_binding()}]"
        )
        if self.val_assignee.statement_needs_parens():
            value_assignment = f"({value_assignment})"
        self.body.insert_line_before(value_assignment + ";", self.get_outer_loop_body_indent())
        self.patch_body_and_filter()

    def get_init_code(self) -> str:
        step = self.get_step()
        index = self.get_index_binding()
        if step.negated:
            result = f"{index} = {self.get_target_reference()}.length - 1"
        else:
            result = f"{index} = 0"
        if not step.is_literal:
            result += f", {step.update} = {step.init}"
        return result

    def get_test_code(self) -> str:
        step = self.get_step()
        index = self.get_index_binding()
        if step.negated:
            return f"{index} >= 0"
        return f"{index} < {self.get_target_reference()}.length"

    def get_update_code(self) -> str:
        step = self.get_step()
        index = self.get_index_binding()
        if step.number == 1:
            return f"{index}--" if step.negated else f"{index}++"
        if step.negated:
            return f"{index} -= {step.update}"
        return f"{index} += {step.update}"
