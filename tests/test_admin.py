import pytest
from django.contrib import admin

from django_orgtree.models import EntityNode


@pytest.mark.django_db
class TestEntityNodeAdmin:
    def test_changelist_renders(self, admin_client, org_tree):
        response = admin_client.get("/admin/django_orgtree/entitynode/")
        assert response.status_code == 200
        assert b"North Field" in response.content

    def test_structure_cannot_be_edited(self, rf, admin_user, org_tree):
        model_admin = admin.site._registry[EntityNode]
        request = rf.get("/")
        request.user = admin_user

        readonly = model_admin.get_readonly_fields(request, org_tree["sales"])

        assert {"name", "parent", "path", "level", "state"} <= set(readonly)
        assert not model_admin.has_add_permission(request)
        assert not model_admin.has_delete_permission(request, org_tree["sales"])
