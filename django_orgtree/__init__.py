"""Multi-tenant organizational entity trees for Django.

Public entry point is :class:`django_orgtree.service.HierarchyService`; it is
not re-exported here because importing it needs a configured app registry.
"""

from .exceptions import (
    CrossTenantError,
    CycleDetected,
    DependentsExist,
    DuplicateName,
    HierarchyError,
    NodeNotFound,
    NodeValidationError,
)
from .paths import PathBuilder, Placement

__all__ = [
    "HierarchyError",
    "NodeNotFound",
    "CrossTenantError",
    "CycleDetected",
    "DependentsExist",
    "NodeValidationError",
    "DuplicateName",
    "PathBuilder",
    "Placement",
]
