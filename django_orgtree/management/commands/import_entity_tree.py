from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django_orgtree.exceptions import HierarchyError
from django_orgtree.models import EntityType
from django_orgtree.service import HierarchyService
import yaml


class Command(BaseCommand):
    help = "Create entities from a YAML tree produced by export_entity_tree"

    def add_arguments(self, parser):
        parser.add_argument("input", help="YAML file to import")
        parser.add_argument("--tenant", help="Tenant to import into (defaults to the file's tenant)")
        parser.add_argument("--actor", default="import_entity_tree", help="Recorded as created_by")

    def handle(self, *args, **options):
        with open(options["input"], "r") as f:
            data = yaml.safe_load(f) or {}

        tenant_id = options["tenant"] or data.get("tenant")
        if not tenant_id:
            raise CommandError("No tenant given and the file does not name one.")

        service = HierarchyService()
        stack = [(entry, None) for entry in reversed(data.get("nodes") or [])]
        created = 0
        try:
            with transaction.atomic():
                while stack:
                    entry, parent_id = stack.pop()
                    node = service.create(
                        entry["name"],
                        entry.get("type", EntityType.GENERIC),
                        tenant_id,
                        parent_id=parent_id,
                        metadata=entry.get("metadata"),
                        actor=options["actor"],
                    )
                    created += 1
                    for child in reversed(entry.get("children") or []):
                        stack.append((child, node.pk))
        except (HierarchyError, KeyError, TypeError) as exc:
            raise CommandError(f"Import failed, nothing was created: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(f"Imported {created} entities into tenant {tenant_id}"))
