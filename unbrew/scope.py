"""Binding allocation: collision-free names for synthesized variables."""

from __future__ import annotations

import logging

from .nodes import Identifier, Node, walk

logger = logging.getLogger(__name__)


class Scope:
    """Names visible in one program or function body.

    Holds every identifier written in the scope plus the bindings claimed so
    far. A claimed name is never handed out again, by this scope or by any
    scope nested inside it.
    """

    def __init__(self, containing_node: Node, parent: Scope | None = None) -> None:
        self.containing_node: Node = containing_node
        self.parent: Scope | None = parent
        self._names: set[str] = set()
        self._claimed: list[str] = []

    def add_name(self, name: str) -> None:
        self._names.add(name)

    def has_own_name(self, name: str) -> bool:
        return name in self._names or name in self._claimed

    def is_name_used(self, name: str) -> bool:
        scope: Scope | None = self
        while scope is not None:
            if scope.has_own_name(name):
                return True
            scope = scope.parent
        return False

    def claimed_bindings(self) -> list[str]:
        return list(self._claimed)

    def claim_free_binding(self, base: str | list[str]) -> str:
        """Reserve and return the first unused name among the candidates.

        Candidates are tried in order; when all are taken the first one gets a
        numeric suffix: i, i1, i2, ...
        """
        candidates = [base] if isinstance(base, str) else list(base)
        if len(candidates) == 0:
            raise ValueError("claim_free_binding needs at least one candidate")
        name: str | None = None
        for candidate in candidates:
            if not self.is_name_used(candidate):
                name = candidate
                break
        counter = 1
        while name is None:
            candidate = candidates[0] + str(counter)
            if not self.is_name_used(candidate):
                name = candidate
            counter += 1
        self._claimed.append(name)
        logger.debug("claimed binding %r (wanted %r)", name, candidates[0])
        return name


def collect_names(scope: Scope, root: Node) -> None:
    """Record every identifier under root as used in scope."""
    for node in walk(root):
        if isinstance(node, Identifier):
            scope.add_name(node.data)
