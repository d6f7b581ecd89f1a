"""Error kinds raised by the entity-tree core.

Every public operation of :class:`~django_orgtree.service.HierarchyService`
either returns the updated node or raises exactly one of these.  Each class
carries a stable ``code`` that outer layers can map to a response.
"""

from __future__ import annotations


class HierarchyError(Exception):
    """Base error for all entity-tree failures."""

    code = "hierarchy_error"


class NodeNotFound(HierarchyError):
    """Raised when a node id is missing, inactive, or outside the tenant."""

    code = "not_found"

    def __init__(self, node_id: object, tenant_id: str, *, what: str = "Entity") -> None:
        super().__init__(f"{what} {node_id!r} not found in tenant {tenant_id!r}")
        self.node_id = node_id
        self.tenant_id = tenant_id


class CrossTenantError(HierarchyError):
    """Raised when a parent and child would live in different tenants."""

    code = "cross_tenant"


class CycleDetected(HierarchyError):
    """Raised when a move would make a node its own ancestor."""

    code = "cycle_detected"


class DependentsExist(HierarchyError):
    """Raised when a node cannot be removed because something still hangs off it."""

    code = "dependents_exist"

    def __init__(self, node_id: object, *, children: int, dependents: int) -> None:
        if children:
            reason = f"{children} active child node(s)"
        else:
            reason = f"{dependents} active dependent(s)"
        super().__init__(f"Cannot remove entity {node_id!r}: it has {reason}")
        self.node_id = node_id
        self.children = children
        self.dependents = dependents


class NodeValidationError(HierarchyError, ValueError):
    """Raised when a name, type, metadata or tenant id is malformed."""

    code = "validation_error"


class DuplicateName(NodeValidationError):
    """Raised when a name collides with another active node in scope."""

    code = "duplicate_name"
