from collections.abc import Iterator

import pytest

from django_orgtree import locking
from django_orgtree.dependents import reset_dependent_counter, set_dependent_counter
from django_orgtree.dependents.fake import FakeDependentCounter
from django_orgtree.models import EntityNode, EntityType
from django_orgtree.service import HierarchyService

TENANT = "acme-tenant"
OTHER_TENANT = "other-tenant"


@pytest.fixture(autouse=True)
def fresh_process_locks() -> Iterator[None]:
    locking.reset_process_locks()
    yield
    locking.reset_process_locks()


@pytest.fixture
def dependents() -> Iterator[FakeDependentCounter]:
    counter = FakeDependentCounter()
    set_dependent_counter(counter)
    yield counter
    reset_dependent_counter()


@pytest.fixture
def service(db, dependents) -> HierarchyService:
    return HierarchyService()


@pytest.fixture
def tenant() -> str:
    return TENANT


@pytest.fixture
def other_tenant() -> str:
    return OTHER_TENANT


@pytest.fixture
def org_tree(service, tenant) -> dict[str, EntityNode]:
    """Create a small tree for testing.

    Structure:
    - Acme (company)
      - Sales
        - Inside Sales
        - Field Sales
          - North Field
      - Engineering
    - Globex (company)
    """
    acme = service.create("Acme", EntityType.COMPANY, tenant)
    sales = service.create("Sales", EntityType.DEPARTMENT, tenant, parent_id=acme.pk)
    inside = service.create("Inside Sales", EntityType.DEPARTMENT, tenant, parent_id=sales.pk)
    field = service.create("Field Sales", EntityType.DEPARTMENT, tenant, parent_id=sales.pk)
    north = service.create("North Field", EntityType.GENERIC, tenant, parent_id=field.pk)
    engineering = service.create("Engineering", EntityType.DEPARTMENT, tenant, parent_id=acme.pk)
    globex = service.create("Globex", EntityType.COMPANY, tenant)
    return {
        "acme": acme,
        "sales": sales,
        "inside": inside,
        "field": field,
        "north": north,
        "engineering": engineering,
        "globex": globex,
    }


def reload(node: EntityNode) -> EntityNode:
    return EntityNode.objects.get(pk=node.pk)
