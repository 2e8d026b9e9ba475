"""Source tokens produced by the lexer, and lookups over them."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Callable


# Token type constants
IDENTIFIER = "IDENTIFIER"
NUMBER = "NUMBER"
STRING = "STRING"
OPERATOR = "OPERATOR"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
CALL_START = "CALL_START"
CALL_END = "CALL_END"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"
COMMA = "COMMA"
DOT = "DOT"
AT = "AT"
COLON = "COLON"
NEWLINE = "NEWLINE"
COMMENT = "COMMENT"
HERECOMMENT = "HERECOMMENT"

# Keywords the loop family cares about
FOR = "FOR"
IN = "IN"
OWN = "OWN"
WHEN = "WHEN"
BY = "BY"
THEN = "THEN"
RETURN = "RETURN"

COMMENT_TYPES: set[str] = {COMMENT, HERECOMMENT}


@dataclass(frozen=True)
class SourceToken:
    """One token; start/end are offsets into the source."""

    type: str
    start: int
    end: int


class SourceTokenList:
    """Ordered, immutable token sequence with offset lookups."""

    def __init__(self, tokens: list[SourceToken]) -> None:
        self._tokens: list[SourceToken] = sorted(tokens, key=lambda t: t.start)
        self._starts: list[int] = [t.start for t in self._tokens]
        self._by_start: dict[int, int] = {}
        for i, token in enumerate(self._tokens):
            self._by_start.setdefault(token.start, i)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self):
        return iter(self._tokens)

    def token_at_index(self, index: int) -> SourceToken | None:
        if 0 <= index < len(self._tokens):
            return self._tokens[index]
        return None

    def index_of_token_starting_at(self, offset: int) -> int | None:
        return self._by_start.get(offset)

    def index_of_first_token_at_or_after(self, offset: int) -> int | None:
        i = bisect_left(self._starts, offset)
        if i < len(self._tokens):
            return i
        return None

    def index_of_token_matching_between(
        self, start: int, end: int, predicate: Callable[[SourceToken], bool]
    ) -> int | None:
        """First token wholly inside [start, end) that satisfies predicate."""
        i = bisect_left(self._starts, start)
        while i < len(self._tokens):
            token = self._tokens[i]
            if token.end > end:
                break
            if predicate(token):
                return i
            i += 1
        return None

    def comments(self) -> list[SourceToken]:
        return [t for t in self._tokens if t.type in COMMENT_TYPES]
