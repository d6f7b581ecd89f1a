"""Hierarchy operations over tenant entity trees.

:class:`HierarchyService` is the only entry point outer layers should use to
change a tree.  It keeps these invariants after every committed mutation:

- ``path == parent.path + separator + name`` (``path == name`` for roots)
- ``level == parent.level + 1`` (``0`` for roots)
- no node is its own ancestor, and parent and child share a tenant
- inactive nodes take no part in traversal, listing or parenting

Every mutation validates first, then writes inside
:func:`~django_orgtree.locking.tenant_mutation`, so callers observe either
the old tree or the fully cascaded new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from django.db.models import Avg, Count
from django.utils import timezone

import django_orgtree.conf as conf
from django_orgtree import signals
from django_orgtree.cycles import CycleGuard
from django_orgtree.dependents import DependentCounter, get_dependent_counter
from django_orgtree.exceptions import (
    CrossTenantError,
    CycleDetected,
    DependentsExist,
    DuplicateName,
    NodeNotFound,
    NodeValidationError,
)
from django_orgtree.locking import tenant_mutation
from django_orgtree.models import EntityNode, EntityType, NodeState
from django_orgtree.paths import PathBuilder, Placement
from django_orgtree.store import TreeStore
from django_orgtree.walker import DescendantWalker

logger = logging.getLogger(__name__)

_NAME_MAX_LENGTH = EntityNode._meta.get_field("name").max_length
_TENANT_MAX_LENGTH = EntityNode._meta.get_field("tenant_id").max_length


@dataclass(frozen=True)
class HierarchyStats:
    total: int = 0
    count_by_type: Mapping[str, int] = field(default_factory=dict)
    average_level_by_type: Mapping[str, float] = field(default_factory=dict)
    total_dependents: int = 0


class HierarchyService:
    """Create, rename, move, remove and query entity nodes of a tenant.

    Example:
        service = HierarchyService()
        acme = service.create("Acme", EntityType.COMPANY, "t1")
        sales = service.create("Sales", EntityType.DEPARTMENT, "t1", parent_id=acme.pk)
        sales.path                                    # "Acme > Sales"
        service.move(sales.pk, None, "t1").path       # "Sales"
    """

    def __init__(
        self,
        *,
        store: TreeStore | None = None,
        dependents: DependentCounter | None = None,
        path_builder: PathBuilder | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.store = store or TreeStore()
        self.paths = path_builder or PathBuilder()
        self.cycles = CycleGuard(self.store)
        self.walker = DescendantWalker(self.store)
        self._dependents = dependents
        self._batch_size = batch_size

    @property
    def dependents(self) -> DependentCounter:
        return self._dependents or get_dependent_counter()

    @property
    def batch_size(self) -> int:
        return self._batch_size or conf.get_cascade_batch_size()

    # ------------------------------------------------------------------ reads
    def get(self, node_id: Any, tenant_id: str) -> EntityNode:
        self._check_tenant(tenant_id)
        return self.store.get_active(node_id, tenant_id)

    def list(
        self,
        tenant_id: str,
        *,
        entity_type: str | None = None,
        parent_id: Any | None = None,
        level: int | None = None,
        search: str | None = None,
    ):
        """Return active nodes of a tenant in tree order, optionally filtered."""
        self._check_tenant(tenant_id)
        qs = self.store.list_under_tenant(tenant_id, separator=self.paths.separator)
        if entity_type is not None:
            qs = qs.filter(entity_type=self._check_type(entity_type))
        if parent_id is not None:
            qs = qs.filter(parent_id=parent_id)
        if level is not None:
            qs = qs.filter(level=level)
        if search:
            qs = qs.filter(name__icontains=search)
        return qs

    def find_hierarchy(self, tenant_id: str, max_depth: int | None = None):
        """Return active nodes in pre-order: every node directly before its subtree."""
        self._check_tenant(tenant_id)
        qs = self.store.list_under_tenant(tenant_id, separator=self.paths.separator)
        if max_depth is not None:
            if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
                raise _rejected("max_depth must be a non-negative integer", tenant_id=tenant_id)
            qs = qs.filter(level__lte=max_depth)
        return qs

    def ancestors(self, node_id: Any, tenant_id: str) -> list[EntityNode]:
        """Return the active ancestors of a node, root first."""
        node = self.get(node_id, tenant_id)
        chain: list[EntityNode] = []
        seen = {node.pk}
        current = node
        while current.parent_id is not None:
            if current.parent_id in seen:
                raise CycleDetected(f"Entity {node.pk!r} has a looping ancestor chain")
            current = self.store.get_active(current.parent_id, tenant_id, what="Parent entity")
            seen.add(current.pk)
            chain.append(current)
        chain.reverse()
        return chain

    def stats(self, tenant_id: str) -> HierarchyStats:
        self._check_tenant(tenant_id)
        rows = (
            self.store.active_under_tenant(tenant_id)
            .values("entity_type")
            .annotate(count=Count("pk"), avg_level=Avg("level"))
        )
        count_by_type: dict[str, int] = {}
        average_level_by_type: dict[str, float] = {}
        for row in rows:
            count_by_type[row["entity_type"]] = row["count"]
            average_level_by_type[row["entity_type"]] = float(row["avg_level"] or 0)
        return HierarchyStats(
            total=sum(count_by_type.values()),
            count_by_type=count_by_type,
            average_level_by_type=average_level_by_type,
            total_dependents=self.dependents.count_tenant_dependents(tenant_id),
        )

    # -------------------------------------------------------------- mutations
    def create(
        self,
        name: str,
        entity_type: str,
        tenant_id: str,
        *,
        parent_id: Any | None = None,
        metadata: Mapping[str, Any] | None = None,
        actor: str | None = None,
    ) -> EntityNode:
        self._check_tenant(tenant_id)
        name = self._check_name(name)
        entity_type = self._check_type(entity_type)
        metadata = self._check_metadata(metadata)

        with tenant_mutation(tenant_id):
            parent = None
            if parent_id is not None:
                parent = self._get_parent(parent_id, tenant_id)
            self._check_unique(name, tenant_id, parent.pk if parent else None)

            placement = self.paths.derive(name, parent)
            node = self.store.insert(
                EntityNode(
                    tenant_id=tenant_id,
                    name=name,
                    entity_type=entity_type,
                    parent=parent,
                    path=placement.path,
                    level=placement.level,
                    metadata=metadata,
                    state=NodeState.ACTIVE,
                    created_by=actor or "",
                    updated_by=actor or "",
                )
            )
            signals.node_created.send(sender=self.__class__, node=node)

        logger.info(
            "Created entity %s at %r",
            node.pk,
            node.path,
            extra={"tenant_id": tenant_id, "node_id": node.pk},
        )
        return node

    def rename(
        self,
        node_id: Any,
        new_name: str,
        tenant_id: str,
        *,
        actor: str | None = None,
    ) -> EntityNode:
        """Rename a node and regenerate the paths of its whole active subtree."""
        self._check_tenant(tenant_id)
        new_name = self._check_name(new_name)

        with tenant_mutation(tenant_id):
            node = self.store.get_active(node_id, tenant_id)
            if node.name == new_name:
                return node
            self._check_unique(new_name, tenant_id, node.parent_id, exclude_id=node.pk)

            parent = None
            if node.parent_id is not None:
                parent = self.store.get_active(node.parent_id, tenant_id, what="Parent entity")
            old_name = node.name
            placement = self.paths.derive(new_name, parent)
            node = self.store.update_fields(
                node.pk,
                tenant_id,
                name=new_name,
                path=placement.path,
                level=placement.level,
                updated_by=actor or "",
            )
            rewritten = self._cascade(node, tenant_id, actor)
            signals.node_renamed.send(sender=self.__class__, node=node, old_name=old_name)
            signals.subtree_repathed.send(
                sender=self.__class__, tenant_id=tenant_id, placements=rewritten
            )

        logger.info(
            "Renamed entity %s from %r to %r (%d nodes repathed)",
            node.pk,
            old_name,
            new_name,
            len(rewritten),
            extra={"tenant_id": tenant_id, "node_id": node.pk},
        )
        return node

    def move(
        self,
        node_id: Any,
        new_parent_id: Any | None,
        tenant_id: str,
        *,
        actor: str | None = None,
    ) -> EntityNode:
        """Reparent a node (``None`` makes it a root) and re-place its whole subtree."""
        self._check_tenant(tenant_id)

        with tenant_mutation(tenant_id):
            node = self.store.get_active(node_id, tenant_id)
            new_parent = None
            if new_parent_id is not None:
                new_parent = self._get_parent(new_parent_id, tenant_id)
            if self.cycles.would_cycle(node.pk, new_parent.pk if new_parent else None, tenant_id):
                logger.warning(
                    "Rejected move of entity %s under %s: cycle",
                    node.pk,
                    new_parent_id,
                    extra={"tenant_id": tenant_id, "node_id": node.pk},
                )
                raise CycleDetected(
                    f"Cannot move entity {node.pk!r} under {new_parent_id!r}: "
                    "it would become its own ancestor"
                )
            self._check_unique(
                node.name, tenant_id, new_parent.pk if new_parent else None, exclude_id=node.pk
            )

            old_parent_id = node.parent_id
            placement = self.paths.derive(node.name, new_parent)
            node = self.store.update_fields(
                node.pk,
                tenant_id,
                parent=new_parent,
                path=placement.path,
                level=placement.level,
                updated_by=actor or "",
            )
            rewritten = self._cascade(node, tenant_id, actor)
            signals.node_moved.send(
                sender=self.__class__, node=node, old_parent_id=old_parent_id
            )
            signals.subtree_repathed.send(
                sender=self.__class__, tenant_id=tenant_id, placements=rewritten
            )

        logger.info(
            "Moved entity %s from parent %s to %s (%d nodes repathed)",
            node.pk,
            old_parent_id,
            node.parent_id,
            len(rewritten),
            extra={"tenant_id": tenant_id, "node_id": node.pk},
        )
        return node

    def remove(self, node_id: Any, tenant_id: str, *, actor: str | None = None) -> None:
        """Soft-delete a node that has no active children and no active dependents."""
        self._check_tenant(tenant_id)

        with tenant_mutation(tenant_id):
            node = self.store.get_active(node_id, tenant_id)
            children = self.store.count_active_children(node.pk, tenant_id)
            dependents = 0 if children else self.dependents.count_active_dependents(node.pk, tenant_id)
            if children or dependents:
                logger.warning(
                    "Rejected removal of entity %s: %d children, %d dependents",
                    node.pk,
                    children,
                    dependents,
                    extra={"tenant_id": tenant_id, "node_id": node.pk},
                )
                raise DependentsExist(node.pk, children=children, dependents=dependents)
            if not NodeState.can_transition(node.state, NodeState.INACTIVE):
                raise NodeNotFound(node.pk, tenant_id)

            node = self.store.deactivate(node.pk, tenant_id, actor=actor or "")
            signals.node_removed.send(sender=self.__class__, node=node)

        logger.info(
            "Removed entity %s", node.pk, extra={"tenant_id": tenant_id, "node_id": node.pk}
        )

    def rebuild(self, tenant_id: str, *, actor: str | None = None) -> int:
        """Re-derive path and level of every active node from the roots down."""
        self._check_tenant(tenant_id)

        with tenant_mutation(tenant_id):
            roots = list(
                self.store.active_under_tenant(tenant_id).filter(parent__isnull=True).order_by("pk")
            )
            rewritten: dict[Any, Placement] = {}
            now = timezone.now()
            for root in roots:
                placement = self.paths.derive(root.name, None)
                root.path, root.level = placement
                root.updated_by = actor or ""
                root.updated_at = now
                self.store.bulk_update_placements([root], batch_size=self.batch_size)
                rewritten[root.pk] = placement
                rewritten.update(self._cascade(root, tenant_id, actor))
            signals.subtree_repathed.send(
                sender=self.__class__, tenant_id=tenant_id, placements=rewritten
            )

        logger.info(
            "Rebuilt %d entity placements", len(rewritten), extra={"tenant_id": tenant_id}
        )
        return len(rewritten)

    # ------------------------------------------------------------- internals
    def _cascade(self, root: EntityNode, tenant_id: str, actor: str | None) -> dict[Any, Placement]:
        """Re-derive every active descendant of ``root`` from its parent's new placement.

        Pre-order guarantees a parent's new placement is known before any of
        its children are visited.
        """
        placements: dict[Any, Placement] = {root.pk: Placement(root.path, root.level)}
        now = timezone.now()

        def rederived() -> Iterable[EntityNode]:
            for descendant in self.walker.iter_descendants(root.pk, tenant_id):
                placement = self.paths.derive(descendant.name, placements[descendant.parent_id])
                descendant.path, descendant.level = placement
                descendant.updated_by = actor or ""
                descendant.updated_at = now
                placements[descendant.pk] = placement
                yield descendant

        count = self.store.bulk_update_placements(rederived(), batch_size=self.batch_size)
        logger.debug(
            "Cascaded placement to %d descendants of %s",
            count,
            root.pk,
            extra={"tenant_id": tenant_id, "node_id": root.pk},
        )
        return placements

    def _get_parent(self, parent_id: Any, tenant_id: str) -> EntityNode:
        try:
            return self.store.get_active(parent_id, tenant_id, what="Parent entity")
        except NodeNotFound:
            if self.store.exists_in_other_tenant(parent_id, tenant_id):
                logger.warning(
                    "Rejected cross-tenant parent %s",
                    parent_id,
                    extra={"tenant_id": tenant_id},
                )
                raise CrossTenantError(
                    f"Parent entity {parent_id!r} belongs to another tenant"
                ) from None
            raise

    def _check_unique(
        self,
        name: str,
        tenant_id: str,
        parent_id: Any | None,
        *,
        exclude_id: Any | None = None,
    ) -> None:
        scope = conf.get_name_uniqueness()
        if self.store.name_taken(name, tenant_id, parent_id, scope, exclude_id=exclude_id):
            raise _rejected(
                f"An active entity named {name!r} already exists ({scope} scope)",
                tenant_id=tenant_id,
                error=DuplicateName,
            )

    @staticmethod
    def _check_tenant(tenant_id: str) -> None:
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            raise _rejected("tenant_id must be a non-empty string")
        if len(tenant_id) > _TENANT_MAX_LENGTH:
            raise _rejected(f"tenant_id longer than {_TENANT_MAX_LENGTH} characters")

    def _check_name(self, name: str) -> str:
        if not isinstance(name, str):
            raise _rejected("name must be a string")
        name = name.strip()
        if not name:
            raise _rejected("name must not be blank")
        if len(name) > _NAME_MAX_LENGTH:
            raise _rejected(f"name longer than {_NAME_MAX_LENGTH} characters")
        if any(ord(char) < 32 for char in name):
            raise _rejected("name must not contain control characters")
        # A whitespace-only separator is matched as-is.
        token = self.paths.separator.strip() or self.paths.separator
        if token in name:
            raise _rejected(f"name must not contain the path separator {self.paths.separator!r}")
        return name

    @staticmethod
    def _check_type(entity_type: str) -> str:
        if entity_type not in EntityType.values:
            raise _rejected(f"type must be one of {EntityType.values}, got {entity_type!r}")
        return str(entity_type)

    @staticmethod
    def _check_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
        if metadata is None:
            return {}
        if not isinstance(metadata, Mapping):
            raise _rejected("metadata must be a mapping")
        for key in metadata:
            if not isinstance(key, str):
                raise _rejected("metadata keys must be strings")
        return dict(metadata)


def _rejected(
    message: str,
    *,
    tenant_id: str | None = None,
    error: type[NodeValidationError] = NodeValidationError,
) -> NodeValidationError:
    """Log a rejected input at WARNING and return the error to raise."""
    logger.warning("Rejected input: %s", message, extra={"tenant_id": tenant_id})
    return error(message)
