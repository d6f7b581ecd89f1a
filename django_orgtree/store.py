"""Tenant-scoped access to entity-node records."""

from __future__ import annotations

from typing import Any, Iterable

from django.db.models import TextField, Value
from django.db.models.functions import Replace
from django.utils import timezone

import django_orgtree.conf as conf
from django_orgtree.exceptions import NodeNotFound
from django_orgtree.models import EntityNode, NodeState

_PLACEMENT_FIELDS = ("path", "level", "updated_by", "updated_at")

# Sorts below every character a name may contain.
_TREE_ORDER_SEPARATOR = "\x01"


class TreeStore:
    """Reads and writes for :class:`EntityNode` rows.

    Every read is filtered by ``tenant_id``; looking up an id that lives in
    another tenant behaves exactly like looking up a missing id.
    """

    def __init__(self, model: type[EntityNode] = EntityNode) -> None:
        self.model = model

    # ------------------------------------------------------------------ reads
    def _scoped(self, tenant_id: str):
        return self.model.objects.for_tenant(tenant_id)

    def get_active(self, node_id: Any, tenant_id: str, *, what: str = "Entity") -> EntityNode:
        try:
            return self._scoped(tenant_id).active().get(pk=node_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NodeNotFound(node_id, tenant_id, what=what) from None

    def exists_in_other_tenant(self, node_id: Any, tenant_id: str) -> bool:
        try:
            return (
                self.model.objects.active()
                .filter(pk=node_id)
                .exclude(tenant_id=tenant_id)
                .exists()
            )
        except (ValueError, TypeError):
            return False

    def children_of(self, node_id: Any, tenant_id: str):
        return self._scoped(tenant_id).active().filter(parent_id=node_id).order_by("pk")

    def count_active_children(self, node_id: Any, tenant_id: str) -> int:
        return self.children_of(node_id, tenant_id).count()

    def parent_id_of(self, node_id: Any, tenant_id: str) -> Any | None:
        return (
            self._scoped(tenant_id)
            .filter(pk=node_id)
            .values_list("parent_id", flat=True)
            .first()
        )

    def active_under_tenant(self, tenant_id: str):
        return self._scoped(tenant_id).active()

    def list_under_tenant(self, tenant_id: str, *, separator: str | None = None):
        """Active nodes in pre-order.

        Sorting on the raw path would put `"Acme 2"` between `"Acme"` and
        `"Acme > Sales"`; the sort key swaps the separator for a character
        below any allowed name character.
        """
        return (
            self.active_under_tenant(tenant_id)
            .annotate(
                tree_order=Replace(
                    "path",
                    Value(separator or conf.get_path_separator()),
                    Value(_TREE_ORDER_SEPARATOR),
                    output_field=TextField(),
                )
            )
            .order_by("tree_order", "pk")
        )

    def name_taken(
        self,
        name: str,
        tenant_id: str,
        parent_id: Any | None,
        scope: str,
        *,
        exclude_id: Any | None = None,
    ) -> bool:
        if scope == conf.UNIQUENESS_NONE:
            return False
        qs = self.model.objects.active().filter(name=name)
        if scope in (conf.UNIQUENESS_TENANT, conf.UNIQUENESS_SIBLING):
            qs = qs.filter(tenant_id=tenant_id)
        if scope == conf.UNIQUENESS_SIBLING:
            qs = qs.filter(parent_id=parent_id)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    # ----------------------------------------------------------------- writes
    def insert(self, node: EntityNode) -> EntityNode:
        node.save(force_insert=True)
        return node

    def update_fields(self, node_id: Any, tenant_id: str, **fields: Any) -> EntityNode:
        fields.setdefault("updated_at", timezone.now())
        updated = self._scoped(tenant_id).filter(pk=node_id).update(**fields)
        if not updated:
            raise NodeNotFound(node_id, tenant_id)
        return self._scoped(tenant_id).get(pk=node_id)

    def bulk_update_placements(
        self,
        nodes: Iterable[EntityNode],
        *,
        batch_size: int | None = None,
    ) -> int:
        """Write path/level/audit columns for ``nodes`` in batches, returning the count."""

        batch_size = batch_size or conf.get_cascade_batch_size()
        buffer: list[EntityNode] = []
        total = 0
        for node in nodes:
            buffer.append(node)
            if len(buffer) >= batch_size:
                self.model.objects.bulk_update(buffer, _PLACEMENT_FIELDS)
                total += len(buffer)
                buffer = []

        if buffer:
            self.model.objects.bulk_update(buffer, _PLACEMENT_FIELDS)
            total += len(buffer)

        return total

    def deactivate(self, node_id: Any, tenant_id: str, *, actor: str = "") -> EntityNode:
        return self.update_fields(
            node_id, tenant_id, state=NodeState.INACTIVE, updated_by=actor
        )
