from django.db import models

from django_orgtree.models import EntityNode


class Member(models.Model):
    """A person attached to an entity; the dependent counted before removal."""

    tenant_id = models.CharField(max_length=64, db_index=True)
    email = models.EmailField()
    full_name = models.CharField(max_length=255, blank=True)
    entity = models.ForeignKey(
        EntityNode,
        on_delete=models.PROTECT,
        related_name="members",
    )
    entity_path = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.full_name or self.email
