"""Patch options."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PatchOptions:
    """Knobs for one transform run.

    indent: indent unit for synthesized lines; None detects it from the source.
    map_expressions: allow rewriting expression loops as .filter().map() chains.
    """

    indent: str | None = None
    map_expressions: bool = True
