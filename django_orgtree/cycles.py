"""Ancestor-walk cycle detection for reparenting."""

from __future__ import annotations

from typing import Any

from django_orgtree.store import TreeStore


class CycleGuard:
    """Decide whether giving ``moving_id`` a new parent would close a loop.

    The candidate parent is a descendant of the moving node exactly when the
    moving node shows up while walking up from the candidate, so only the
    candidate's ancestor chain is read (O(depth)), never the moving subtree.
    """

    def __init__(self, store: TreeStore) -> None:
        self.store = store

    def would_cycle(self, moving_id: Any, candidate_parent_id: Any | None, tenant_id: str) -> bool:
        if candidate_parent_id is None:
            return False
        if _same(candidate_parent_id, moving_id):
            return True

        seen: set[str] = set()
        current = candidate_parent_id
        while current is not None:
            if _same(current, moving_id):
                return True
            key = str(current)
            if key in seen:
                # The stored chain already loops; treat as a cycle rather than spin.
                return True
            seen.add(key)
            current = self.store.parent_id_of(current, tenant_id)
        return False


def _same(left: Any, right: Any) -> bool:
    return str(left) == str(right)
