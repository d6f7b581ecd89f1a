import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TenantLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="EntityNode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("name", models.CharField(max_length=255)),
                (
                    "entity_type",
                    models.CharField(
                        choices=[("entity", "Entity"), ("company", "Company"), ("department", "Department")],
                        default="entity",
                        max_length=32,
                    ),
                ),
                ("path", models.TextField()),
                ("level", models.PositiveIntegerField(default=0)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "state",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        max_length=16,
                    ),
                ),
                ("created_by", models.CharField(blank=True, max_length=128)),
                ("updated_by", models.CharField(blank=True, max_length=128)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="django_orgtree.entitynode",
                    ),
                ),
            ],
            options={
                "verbose_name": "Entity node",
                "verbose_name_plural": "Entity nodes",
                "ordering": ("tenant_id", "path"),
                "indexes": [
                    models.Index(fields=["tenant_id", "state", "path"], name="orgtree_tenant_path_idx"),
                    models.Index(fields=["tenant_id", "parent", "state"], name="orgtree_tenant_parent_idx"),
                    models.Index(fields=["tenant_id", "entity_type"], name="orgtree_tenant_type_idx"),
                ],
            },
        ),
    ]
