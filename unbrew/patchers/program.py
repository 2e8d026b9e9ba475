"""Program patcher: the root of the patcher tree."""

from __future__ import annotations

from ..context import ParseContext
from ..editor import Editor
from ..nodes import Node
from .base import NodePatcher
from .block import BlockPatcher


class ProgramPatcher(NodePatcher):
    """Patches the top-level block as statements."""

    def __init__(
        self,
        node: Node,
        context: ParseContext,
        editor: Editor,
        body: BlockPatcher | None,
    ) -> None:
        super().__init__(node, context, editor)
        self.body: BlockPatcher | None = body

    def can_patch_as_expression(self) -> bool:
        return False

    def patch_as_statement(self) -> None:
        if self.body is not None:
            self.body.patch()
