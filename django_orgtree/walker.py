"""Pre-order traversal of a node's active descendants."""

from __future__ import annotations

from typing import Any, Iterator

from django_orgtree.exceptions import CycleDetected
from django_orgtree.models import EntityNode
from django_orgtree.store import TreeStore


class DescendantWalker:
    """Lazily yield the active descendants of a node, parent before children.

    Traversal keeps an explicit stack of child iterators instead of recursing,
    so stack usage is bounded by the number of open levels rather than by the
    interpreter's recursion limit.  Each call to :meth:`iter_descendants`
    starts a fresh walk.
    """

    def __init__(self, store: TreeStore) -> None:
        self.store = store

    def iter_descendants(self, node_id: Any, tenant_id: str) -> Iterator[EntityNode]:
        seen: set[Any] = {node_id}
        stack = [iter(self.store.children_of(node_id, tenant_id))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue
            if child.pk in seen:
                raise CycleDetected(
                    f"Entity {child.pk!r} reached twice below {node_id!r}; tree is corrupt"
                )
            seen.add(child.pk)
            yield child
            stack.append(iter(self.store.children_of(child.pk, tenant_id)))

    def descendant_ids(self, node_id: Any, tenant_id: str) -> list[Any]:
        return [node.pk for node in self.iter_descendants(node_id, tenant_id)]
