"""Text overlay: pending edits over an immutable source buffer.

All offsets refer to the original text. Edits are recorded against chunks of
the original and only resolved by to_string(), so a patcher can still slice
code that an earlier patcher rewrote, and read back what a child emitted.

Anchoring rules:

| Operation  | Text lands                                              |
|------------|---------------------------------------------------------|
| insert     | after the character before index, after earlier inserts |
| prepend    | before the character at index, before earlier prepends  |
| overwrite  | replaces [start, end) and anything anchored inside it   |
| remove     | overwrite with the empty string                         |

slice(start, end) includes text prepended at start and text inserted at end.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right

from .errors import EditorError


class _Chunk:
    """A run of original text and the edits anchored to it."""

    __slots__ = ("start", "end", "original", "content", "intro", "outro", "edited")

    def __init__(self, start: int, end: int, original: str) -> None:
        self.start: int = start
        self.end: int = end
        self.original: str = original
        self.content: str = original
        self.intro: str = ""
        self.outro: str = ""
        self.edited: bool = False

    def edit(self, content: str) -> None:
        self.content = content
        self.intro = ""
        self.outro = ""
        self.edited = True

    def split(self, index: int) -> _Chunk:
        """Cut at absolute offset index; self keeps the left half."""
        offset = index - self.start
        right = _Chunk(index, self.end, self.original[offset:])
        right.outro = self.outro
        self.outro = ""
        self.original = self.original[:offset]
        self.content = self.original
        self.end = index
        return right

    def __repr__(self) -> str:
        return "_Chunk(" + str(self.start) + ", " + str(self.end) + ", " + repr(self.content) + ")"


class Editor:
    """Records insert/overwrite/remove edits and resolves them on demand."""

    def __init__(self, original: str) -> None:
        self.original: str = original
        self.intro: str = ""
        self._chunks: list[_Chunk] = [_Chunk(0, len(original), original)]
        self._starts: list[int] = [0]

    # --- Lookup ---

    def _check_offset(self, index: int) -> None:
        if index < 0 or index > len(self.original):
            raise EditorError(
                f"offset {index} is outside the source (length {len(self.original)})"
            )

    def _check_range(self, start: int, end: int) -> None:
        self._check_offset(start)
        self._check_offset(end)
        if start > end:
            raise EditorError(f"invalid range [{start}, {end})")

    def _index_of_chunk_containing(self, offset: int) -> int:
        return bisect_right(self._starts, offset) - 1

    def _split(self, index: int) -> None:
        if index <= 0 or index >= len(self.original):
            return
        i = self._index_of_chunk_containing(index)
        chunk = self._chunks[i]
        if chunk.start == index:
            return
        if chunk.edited:
            raise EditorError(
                f"cannot split [{chunk.start}, {chunk.end}) at {index}: "
                "range was already rewritten"
            )
        right = chunk.split(index)
        self._chunks.insert(i + 1, right)
        self._starts.insert(i + 1, index)

    # --- Edits ---

    def insert(self, index: int, content: str) -> None:
        """Anchor content to the end of the text before index."""
        self._check_offset(index)
        self._split(index)
        if index == 0:
            self.intro += content
            return
        i = bisect_left(self._starts, index) - 1
        self._chunks[i].outro += content

    def prepend(self, index: int, content: str) -> None:
        """Anchor content to the start of the text at index, ahead of earlier prepends."""
        self._check_offset(index)
        self._split(index)
        if index == len(self.original):
            self._chunks[-1].outro += content
            return
        i = self._index_of_chunk_containing(index)
        chunk = self._chunks[i]
        chunk.intro = content + chunk.intro

    def overwrite(self, start: int, end: int, content: str) -> None:
        self._check_range(start, end)
        if start == end:
            raise EditorError(f"cannot overwrite empty range at {start}")
        self._split(start)
        self._split(end)
        i = self._index_of_chunk_containing(start)
        first = True
        while i < len(self._chunks) and self._chunks[i].end <= end:
            self._chunks[i].edit(content if first else "")
            first = False
            i += 1

    def remove(self, start: int, end: int) -> None:
        if start == end:
            return
        self.overwrite(start, end, "")

    # --- Reads ---

    def slice(self, start: int, end: int) -> str:
        """Current text of [start, end), edits included."""
        self._check_range(start, end)
        if start == end:
            return ""
        i = self._index_of_chunk_containing(start)
        first_chunk = self._chunks[i]
        if first_chunk.edited and first_chunk.start != start:
            raise EditorError(f"cannot slice from {start}: character was rewritten")
        parts: list[str] = []
        while i < len(self._chunks):
            chunk = self._chunks[i]
            if chunk.start >= start:
                parts.append(chunk.intro)
            contains_end = chunk.start < end <= chunk.end
            if contains_end and chunk.edited and chunk.end != end:
                raise EditorError(f"cannot slice to {end}: character was rewritten")
            if chunk.edited:
                parts.append(chunk.content)
            else:
                lo = max(start, chunk.start) - chunk.start
                hi = min(end, chunk.end) - chunk.start
                parts.append(chunk.original[lo:hi])
            if not contains_end or chunk.end == end:
                parts.append(chunk.outro)
            if contains_end:
                break
            i += 1
        return "".join(parts)

    def is_unchanged(self, start: int, end: int) -> bool:
        """True when no character of [start, end) was overwritten or removed."""
        self._check_range(start, end)
        if start == end:
            return True
        i = self._index_of_chunk_containing(start)
        while i < len(self._chunks) and self._chunks[i].start < end:
            if self._chunks[i].edited:
                return False
            i += 1
        return True

    def to_string(self) -> str:
        parts: list[str] = [self.intro]
        for chunk in self._chunks:
            parts.append(chunk.intro)
            parts.append(chunk.content)
            parts.append(chunk.outro)
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()
