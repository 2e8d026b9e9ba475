"""Pipeline entry: build the patcher tree, patch it, collect the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .context import ParseContext
from .editor import Editor
from .patchers import initialize_tree, make_patcher
from .tokens import SourceToken

logger = logging.getLogger(__name__)


@dataclass
class PatchResult:
    """Patched code plus the comments carried through untouched."""

    code: str
    comments: list[SourceToken] = field(default_factory=list)


def transform(context: ParseContext) -> PatchResult:
    """Rewrite context.source into the output dialect."""
    editor = Editor(context.source)
    root = make_patcher(context.program, context, editor)
    initialize_tree(root)
    root.patch()
    comments = [
        token
        for token in context.tokens.comments()
        if editor.is_unchanged(token.start, token.end)
    ]
    logger.debug("patched %d characters, kept %d comments", len(context.source), len(comments))
    return PatchResult(editor.to_string(), comments)
