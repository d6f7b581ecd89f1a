import pytest

from django_orgtree import signals
from django_orgtree.dependents import reset_dependent_counter
from django_orgtree.exceptions import DependentsExist
from django_orgtree.service import HierarchyService
from example_project.staff.models import Member

from .conftest import reload


@pytest.fixture
def member_service(db):
    # Uses the Member-backed counter configured in settings.
    reset_dependent_counter()
    yield HierarchyService()
    reset_dependent_counter()


@pytest.fixture
def captured():
    events = []

    def listener(signal):
        def handler(sender, **kwargs):
            events.append((signal, kwargs))

        return handler

    handlers = {
        name: listener(name)
        for name in ("node_created", "node_renamed", "node_moved", "node_removed", "subtree_repathed")
    }
    for name, handler in handlers.items():
        getattr(signals, name).connect(handler)
    yield events
    for name, handler in handlers.items():
        getattr(signals, name).disconnect(handler)


@pytest.mark.django_db
class TestServiceSignals:
    def test_create_sends_node_created(self, service, tenant, captured):
        node = service.create("Acme", "company", tenant)
        assert captured == [("node_created", {"signal": signals.node_created, "node": node})]

    def test_rename_sends_rename_then_repath(self, service, org_tree, tenant, captured):
        service.rename(org_tree["field"].pk, "Outside Sales", tenant)

        names = [name for name, _ in captured]
        assert names == ["node_renamed", "subtree_repathed"]
        assert captured[0][1]["old_name"] == "Field Sales"
        placements = captured[1][1]["placements"]
        assert set(placements) == {org_tree["field"].pk, org_tree["north"].pk}
        assert placements[org_tree["north"].pk].path == "Acme > Sales > Outside Sales > North Field"
        assert captured[1][1]["tenant_id"] == tenant

    def test_move_reports_old_parent(self, service, org_tree, tenant, captured):
        service.move(org_tree["sales"].pk, None, tenant)

        moved = dict(captured)["node_moved"]
        assert moved["old_parent_id"] == org_tree["acme"].pk
        assert moved["node"].parent_id is None

    def test_remove_sends_node_removed(self, service, org_tree, tenant, captured):
        service.remove(org_tree["globex"].pk, tenant)
        assert [name for name, _ in captured] == ["node_removed"]
        assert not captured[0][1]["node"].is_active

    def test_rejected_mutation_sends_nothing(self, service, org_tree, tenant, captured):
        with pytest.raises(DependentsExist):
            service.remove(org_tree["acme"].pk, tenant)
        assert captured == []


@pytest.mark.django_db
class TestMemberIntegration:
    def test_member_path_is_set_on_save(self, member_service, tenant):
        acme = member_service.create("Acme", "company", tenant)
        sales = member_service.create("Sales", "department", tenant, parent_id=acme.pk)

        member = Member.objects.create(tenant_id=tenant, email="dana@acme.test", entity=sales)

        assert member.entity_path == "Acme > Sales"

    def test_member_path_follows_move_and_rename(self, member_service, tenant):
        acme = member_service.create("Acme", "company", tenant)
        sales = member_service.create("Sales", "department", tenant, parent_id=acme.pk)
        inside = member_service.create("Inside Sales", "department", tenant, parent_id=sales.pk)
        member = Member.objects.create(tenant_id=tenant, email="eve@acme.test", entity=inside)

        member_service.move(sales.pk, None, tenant)
        assert Member.objects.get(pk=member.pk).entity_path == "Sales > Inside Sales"

        member_service.rename(sales.pk, "Revenue", tenant)
        assert Member.objects.get(pk=member.pk).entity_path == "Revenue > Inside Sales"

    def test_active_member_blocks_removal(self, member_service, tenant):
        acme = member_service.create("Acme", "company", tenant)
        member = Member.objects.create(tenant_id=tenant, email="finn@acme.test", entity=acme)

        with pytest.raises(DependentsExist) as exc:
            member_service.remove(acme.pk, tenant)
        assert exc.value.dependents == 1

        Member.objects.filter(pk=member.pk).update(is_active=False)
        member_service.remove(acme.pk, tenant)
        assert not reload(acme).is_active
