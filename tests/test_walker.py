import pytest

from django_orgtree.exceptions import CycleDetected
from django_orgtree.models import EntityNode, NodeState
from django_orgtree.store import TreeStore
from django_orgtree.walker import DescendantWalker


@pytest.fixture
def walker(db) -> DescendantWalker:
    return DescendantWalker(TreeStore())


@pytest.mark.django_db
class TestIterDescendants:
    def test_pre_order(self, walker, org_tree, tenant):
        names = [n.name for n in walker.iter_descendants(org_tree["acme"].pk, tenant)]
        assert names == ["Sales", "Inside Sales", "Field Sales", "North Field", "Engineering"]

    def test_parent_precedes_children(self, walker, org_tree, tenant):
        seen = {org_tree["acme"].pk}
        for node in walker.iter_descendants(org_tree["acme"].pk, tenant):
            assert node.parent_id in seen
            seen.add(node.pk)

    def test_leaf_has_no_descendants(self, walker, org_tree, tenant):
        assert walker.descendant_ids(org_tree["north"].pk, tenant) == []

    def test_inactive_subtrees_are_skipped(self, walker, org_tree, tenant):
        EntityNode.objects.filter(pk=org_tree["field"].pk).update(state=NodeState.INACTIVE)
        ids = walker.descendant_ids(org_tree["sales"].pk, tenant)
        assert ids == [org_tree["inside"].pk]

    def test_other_tenant_sees_nothing(self, walker, org_tree, other_tenant):
        assert walker.descendant_ids(org_tree["acme"].pk, other_tenant) == []

    def test_each_call_starts_fresh(self, walker, org_tree, tenant):
        first = walker.descendant_ids(org_tree["sales"].pk, tenant)
        second = walker.descendant_ids(org_tree["sales"].pk, tenant)
        assert first == second
        assert len(first) == 3

    def test_is_lazy(self, walker, org_tree, tenant):
        iterator = walker.iter_descendants(org_tree["acme"].pk, tenant)
        assert next(iterator).name == "Sales"

    def test_deep_chain_does_not_recurse(self, walker, service, tenant):
        parent = service.create("Level 0", "entity", tenant)
        root_id = parent.pk
        for depth in range(1, 60):
            parent = service.create(f"Level {depth}", "entity", tenant, parent_id=parent.pk)

        descendants = list(walker.iter_descendants(root_id, tenant))

        assert len(descendants) == 59
        assert descendants[-1].level == 59

    def test_revisited_node_raises(self, walker, org_tree, tenant):
        sales = org_tree["sales"]
        north = org_tree["north"]
        # North Field becomes the parent of Sales, closing a loop below Sales.
        EntityNode.objects.filter(pk=sales.pk).update(parent_id=north.pk)

        with pytest.raises(CycleDetected):
            list(walker.iter_descendants(sales.pk, tenant))
