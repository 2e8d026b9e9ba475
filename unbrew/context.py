"""Parse context: everything the parser hands over, plus derived lookups."""

from __future__ import annotations

from bisect import bisect_right

from .nodes import Node, Program, walk
from .options import PatchOptions
from .scope import Scope, collect_names
from .tokens import SourceToken, SourceTokenList

DEFAULT_INDENT = "  "


class ParseContext:
    """Source text, tokens and syntax tree for one file.

    Scopes are built once here and reached by patchers through scope_for(),
    so binding allocation never depends on global state.
    """

    def __init__(
        self,
        source: str,
        tokens: SourceTokenList | list[SourceToken],
        program: Program,
        options: PatchOptions | None = None,
    ) -> None:
        self.source: str = source
        self.tokens: SourceTokenList = (
            tokens if isinstance(tokens, SourceTokenList) else SourceTokenList(tokens)
        )
        self.program: Program = program
        self.options: PatchOptions = options if options is not None else PatchOptions()
        self._line_starts: list[int] = [0]
        for i, c in enumerate(source):
            if c == "\n":
                self._line_starts.append(i + 1)
        self._scopes: dict[int, Scope] = {}
        self._build_scopes()
        self.indent_unit: str = (
            self.options.indent if self.options.indent is not None else self._detect_indent()
        )

    def _build_scopes(self) -> None:
        program_scope = Scope(self.program)
        collect_names(program_scope, self.program)
        for node in walk(self.program):
            self._scopes[id(node)] = program_scope

    def _detect_indent(self) -> str:
        for line in self.source.split("\n"):
            stripped = line.lstrip(" \t")
            if stripped == "" or stripped.startswith("#"):
                continue
            indent = line[: len(line) - len(stripped)]
            if indent != "":
                return indent
        return DEFAULT_INDENT

    def scope_for(self, node: Node) -> Scope:
        scope = self._scopes.get(id(node))
        if scope is None:
            raise KeyError(f"{node.type} at {node.start} is not part of this program")
        return scope

    def line_start(self, offset: int) -> int:
        """Offset of the first character on offset's line."""
        return self._line_starts[bisect_right(self._line_starts, offset) - 1]

    def line_and_column(self, offset: int) -> tuple[int, int]:
        """1-indexed line, 0-indexed column."""
        i = bisect_right(self._line_starts, offset) - 1
        return (i + 1, offset - self._line_starts[i])

    def indent_at(self, offset: int) -> str:
        """Leading whitespace of offset's line."""
        start = self.line_start(offset)
        end = start
        while end < len(self.source) and self.source[end] in " \t":
            end += 1
        return self.source[start:end]
