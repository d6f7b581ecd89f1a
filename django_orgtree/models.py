"""Database models backing django-orgtree."""

from __future__ import annotations

from django.db import models


class EntityType(models.TextChoices):
    GENERIC = "entity", "Entity"
    COMPANY = "company", "Company"
    DEPARTMENT = "department", "Department"


class NodeState(models.TextChoices):
    """Lifecycle tag of a node.

    Transitions are listed in ``_TRANSITIONS``; a state with no outgoing
    transition is terminal.
    """

    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"

    @classmethod
    def can_transition(cls, source: str, target: str) -> bool:
        return target in _TRANSITIONS.get(source, frozenset())

    @classmethod
    def is_terminal(cls, state: str) -> bool:
        return not _TRANSITIONS.get(state)

    @classmethod
    def visible(cls) -> frozenset[str]:
        """States that take part in traversal, listing and parenting."""
        return frozenset({cls.ACTIVE.value})


_TRANSITIONS: dict[str, frozenset[str]] = {
    NodeState.ACTIVE.value: frozenset({NodeState.INACTIVE.value}),
    NodeState.INACTIVE.value: frozenset(),
}


class EntityNodeQuerySet(models.QuerySet):
    def active(self):
        return self.filter(state__in=NodeState.visible())

    def for_tenant(self, tenant_id: str):
        return self.filter(tenant_id=tenant_id)


class EntityNodeManager(models.Manager.from_queryset(EntityNodeQuerySet)):  # type: ignore[misc]
    pass


class EntityNode(models.Model):
    """A single organizational node in a tenant's forest.

    ``path`` and ``level`` are denormalized from the parent chain and are only
    ever written by :class:`django_orgtree.service.HierarchyService`.
    """

    tenant_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    entity_type = models.CharField(
        max_length=32, choices=EntityType.choices, default=EntityType.GENERIC
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.PROTECT,
    )
    path = models.TextField()
    level = models.PositiveIntegerField(default=0)
    metadata = models.JSONField(default=dict, blank=True)
    state = models.CharField(
        max_length=16, choices=NodeState.choices, default=NodeState.ACTIVE
    )

    created_by = models.CharField(max_length=128, blank=True)
    updated_by = models.CharField(max_length=128, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EntityNodeManager()

    class Meta:
        ordering = ("tenant_id", "path")
        indexes = [
            models.Index(fields=("tenant_id", "state", "path"), name="orgtree_tenant_path_idx"),
            models.Index(fields=("tenant_id", "parent", "state"), name="orgtree_tenant_parent_idx"),
            models.Index(fields=("tenant_id", "entity_type"), name="orgtree_tenant_type_idx"),
        ]
        verbose_name = "Entity node"
        verbose_name_plural = "Entity nodes"

    @property
    def is_active(self) -> bool:
        return self.state in NodeState.visible()

    def as_dict(self) -> dict[str, object]:
        """Return the plain shape handed to outer layers."""
        return {
            "id": self.pk,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "type": self.entity_type,
            "parent_id": self.parent_id,
            "path": self.path,
            "level": self.level,
            "metadata": dict(self.metadata or {}),
            "is_active": self.is_active,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __str__(self) -> str:  # pragma: no cover - admin nicety
        return self.path or self.name


class TenantLock(models.Model):
    """Row-lock target serializing structural mutations of one tenant."""

    tenant_id = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"lock:{self.tenant_id}"
