"""unbrew: loop-lowering core of a source-to-source converter."""

from .context import ParseContext
from .editor import Editor
from .errors import EditorError, PatcherError
from .options import PatchOptions
from .scope import Scope
from .transform import PatchResult, transform

__all__ = [
    "Editor",
    "EditorError",
    "ParseContext",
    "PatchOptions",
    "PatchResult",
    "PatcherError",
    "Scope",
    "transform",
]
