import gc
import threading
import weakref
from unittest import mock

import pytest

from django_orgtree import locking, signals
from django_orgtree.exceptions import CycleDetected
from django_orgtree.models import EntityNode, TenantLock
from django_orgtree.service import HierarchyService
from django_orgtree.store import TreeStore

from .conftest import reload


def snapshot(tenant_id):
    return {
        pk: rest
        for pk, *rest in EntityNode.objects.for_tenant(tenant_id).values_list(
            "pk", "path", "level", "parent_id", "name"
        )
    }


@pytest.mark.django_db
class TestAllOrNothing:
    def test_failure_mid_cascade_rolls_back_move(self, dependents, org_tree, tenant):
        service = HierarchyService(batch_size=1)
        before = snapshot(tenant)
        real = TreeStore.bulk_update_placements
        calls = {"n": 0}

        def flaky(self, nodes, *, batch_size=None):
            def second_write_fails():
                for node in nodes:
                    calls["n"] += 1
                    if calls["n"] == 2:
                        raise RuntimeError("disk full")
                    yield node

            return real(self, second_write_fails(), batch_size=batch_size)

        with mock.patch.object(TreeStore, "bulk_update_placements", flaky):
            with pytest.raises(RuntimeError):
                service.move(org_tree["sales"].pk, None, tenant)

        assert snapshot(tenant) == before
        assert reload(org_tree["sales"]).parent_id == org_tree["acme"].pk

    def test_failing_receiver_rolls_back_rename(self, service, org_tree, tenant):
        before = snapshot(tenant)

        def explode(sender, **kwargs):
            raise RuntimeError("receiver failed")

        signals.subtree_repathed.connect(explode, dispatch_uid="test_explode")
        try:
            with pytest.raises(RuntimeError):
                service.rename(org_tree["sales"].pk, "Revenue", tenant)
        finally:
            signals.subtree_repathed.disconnect(dispatch_uid="test_explode")

        assert snapshot(tenant) == before
        assert reload(org_tree["sales"]).name == "Sales"

    def test_rejected_move_writes_nothing(self, service, org_tree, tenant):
        before = dict(EntityNode.objects.for_tenant(tenant).values_list("pk", "updated_at"))
        with pytest.raises(CycleDetected):
            service.move(org_tree["acme"].pk, org_tree["north"].pk, tenant)
        assert dict(EntityNode.objects.for_tenant(tenant).values_list("pk", "updated_at")) == before


@pytest.mark.django_db
class TestTenantLocks:
    def test_mutation_creates_one_lock_row_per_tenant(self, org_tree, tenant):
        assert TenantLock.objects.filter(tenant_id=tenant).count() == 1

    def test_process_locks_are_per_tenant(self):
        assert locking.get_process_lock("a") is locking.get_process_lock("a")
        assert locking.get_process_lock("a") is not locking.get_process_lock("b")

    def test_process_lock_is_reentrant(self, tenant):
        with locking.tenant_mutation(tenant):
            with locking.tenant_mutation(tenant):
                assert TenantLock.objects.filter(tenant_id=tenant).exists()

    def test_other_tenant_is_not_blocked(self, tenant, other_tenant):
        held = locking.get_process_lock(tenant)
        acquired = []

        def worker():
            other = locking.get_process_lock(other_tenant)
            acquired.append(other.acquire(timeout=1))
            other.release()

        with held:
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert acquired == [True]

    def test_same_tenant_waits(self, tenant):
        held = locking.get_process_lock(tenant)
        acquired = []

        def worker():
            acquired.append(locking.get_process_lock(tenant).acquire(timeout=0.05))

        with held:
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert acquired == [False]

    def test_reset_forgets_locks(self, tenant):
        first = locking.get_process_lock(tenant)
        locking.reset_process_locks()
        assert locking.get_process_lock(tenant) is not first

    def test_unused_locks_are_dropped(self):
        lock = locking.get_process_lock("short-lived")
        ref = weakref.ref(lock)

        del lock
        gc.collect()

        assert ref() is None
        assert "short-lived" not in locking._process_locks

    def test_held_lock_is_shared(self, tenant):
        held = locking.get_process_lock(tenant)
        with held:
            gc.collect()
            assert locking.get_process_lock(tenant) is held
