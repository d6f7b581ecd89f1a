"""
Per-tenant serialization of structural mutations.

A mutation holds two locks for its whole duration:
- a process-local re-entrant lock keyed by tenant id, and
- a database row lock on the tenant's ``TenantLock`` row, taken inside the
  transaction that carries the mutation's writes.

Tenants never share a lock, so unrelated trees stay independently concurrent.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from django.db import transaction

from django_orgtree.models import TenantLock

logger = logging.getLogger(__name__)

# An entry drops out once no caller holds its lock.
_process_locks: weakref.WeakValueDictionary[str, threading.RLock] = weakref.WeakValueDictionary()
_registry_guard = threading.Lock()


def get_process_lock(tenant_id: str) -> threading.RLock:
    """Return the live process-local lock for ``tenant_id``, creating one if none exists."""
    with _registry_guard:
        lock = _process_locks.get(tenant_id)
        if lock is None:
            lock = _process_locks[tenant_id] = threading.RLock()
        return lock


def reset_process_locks() -> None:
    """Forget all process-local locks. Primarily intended for tests."""
    with _registry_guard:
        _process_locks.clear()


@contextmanager
def tenant_mutation(tenant_id: str, *, using: str | None = None) -> Iterator[None]:
    """
    Run the enclosed block as one serialized, atomic mutation of a tenant tree.

    Any exception raised inside the block rolls back every write made in it.

    Example:
        with tenant_mutation("acme"):
            node.path = ...
            store.bulk_update_placements(subtree)
    """
    with get_process_lock(tenant_id):
        with transaction.atomic(using=using):
            TenantLock.objects.using(using).get_or_create(tenant_id=tenant_id)
            TenantLock.objects.using(using).select_for_update().get(tenant_id=tenant_id)
            logger.debug("Acquired mutation lock", extra={"tenant_id": tenant_id})
            yield
