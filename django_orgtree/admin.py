"""Django admin registration for django-orgtree models."""

from django.contrib import admin

from django_orgtree.models import EntityNode, TenantLock


@admin.register(EntityNode)
class EntityNodeAdmin(admin.ModelAdmin):
    """Read-mostly admin; structure changes go through HierarchyService."""

    list_display = ("name", "entity_type", "tenant_id", "parent", "level", "state")
    list_filter = ("tenant_id", "entity_type", "level", "state")
    search_fields = ("name", "path", "tenant_id")
    readonly_fields = (
        "tenant_id",
        "parent",
        "path",
        "level",
        "state",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )
    ordering = ("tenant_id", "path")

    fieldsets = (
        (None, {
            "fields": ("name", "entity_type")
        }),
        ("Hierarchy", {
            "fields": ("tenant_id", "parent", "path", "level")
        }),
        ("Metadata", {
            "fields": ("metadata",),
            "classes": ("collapse",),
        }),
        ("Status", {
            "fields": ("state", "created_by", "updated_by", "created_at", "updated_at")
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_readonly_fields(self, request, obj=None):
        # Renaming here would skip the descendant cascade.
        return self.readonly_fields + ("name",)


@admin.register(TenantLock)
class TenantLockAdmin(admin.ModelAdmin):
    list_display = ("tenant_id", "created_at")
    readonly_fields = ("tenant_id", "created_at")
