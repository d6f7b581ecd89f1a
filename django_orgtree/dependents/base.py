"""Base dependent-counter definitions for django-orgtree."""

from __future__ import annotations

from typing import Any, Protocol


class DependentCounter(Protocol):
    """Protocol describing the collaborator consulted before a node is removed."""

    def count_active_dependents(self, entity_id: Any, tenant_id: str) -> int:
        """Return how many active records in ``tenant_id`` belong to ``entity_id``."""

    def count_tenant_dependents(self, tenant_id: str) -> int:
        """Return how many active records ``tenant_id`` holds across all its entities."""


class NullDependentCounter(DependentCounter):
    """Counter used when no collaborator is configured: nothing ever depends on a node."""

    def count_active_dependents(self, entity_id: Any, tenant_id: str) -> int:
        return 0

    def count_tenant_dependents(self, tenant_id: str) -> int:
        return 0
