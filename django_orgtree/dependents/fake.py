"""In-memory dependent counter used for tests."""

from __future__ import annotations

from typing import Any

from .base import DependentCounter


class FakeDependentCounter(DependentCounter):
    """Recording counter whose answers are set by the test."""

    def __init__(self) -> None:
        self._counts: dict[tuple[str, str], int] = {}
        self.calls: list[tuple[str, str]] = []

    def set_count(self, entity_id: Any, tenant_id: str, count: int) -> None:
        self._counts[(str(entity_id), tenant_id)] = count

    def count_active_dependents(self, entity_id: Any, tenant_id: str) -> int:
        key = (str(entity_id), tenant_id)
        self.calls.append(key)
        return self._counts.get(key, 0)

    def count_tenant_dependents(self, tenant_id: str) -> int:
        return sum(count for (_, tenant), count in self._counts.items() if tenant == tenant_id)
