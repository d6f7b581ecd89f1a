"""Materialized path derivation."""

from __future__ import annotations

from typing import NamedTuple, Protocol

import django_orgtree.conf as conf


class Placement(NamedTuple):
    """Where a node sits in its tree: its materialized path and depth."""

    path: str
    level: int


class _Placed(Protocol):
    path: str
    level: int


class PathBuilder:
    """Derive ``(path, level)`` for a node from its parent's current placement.

    Placements are always re-derived from the parent as it is stored right
    now and never adjusted incrementally, so a subtree cannot drift away from
    its ancestors after concurrent edits elsewhere in the tree.

    Example:
        builder = PathBuilder(" > ")
        builder.derive("Acme", None)             # Placement("Acme", 0)
        builder.derive("Sales", acme)            # Placement("Acme > Sales", 1)
    """

    def __init__(self, separator: str | None = None) -> None:
        self.separator = separator if separator is not None else conf.get_path_separator()

    def derive(self, name: str, parent: _Placed | None) -> Placement:
        if parent is None:
            return Placement(name, 0)
        return Placement(f"{parent.path}{self.separator}{name}", parent.level + 1)

    def split(self, path: str) -> list[str]:
        """Return the names along ``path``, root first."""
        if not path:
            return []
        return path.split(self.separator)
