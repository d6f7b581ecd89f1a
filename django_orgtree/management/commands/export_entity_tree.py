from django.core.management.base import BaseCommand
from django_orgtree.service import HierarchyService
import yaml


class Command(BaseCommand):
    help = "Export the active entity tree of a tenant to a YAML file"

    def add_arguments(self, parser):
        parser.add_argument("tenant_id", help="Tenant whose forest is exported")
        parser.add_argument("output", nargs="?", default="entity_tree.yaml", help="Output YAML file path")

    def handle(self, *args, **options):
        tenant_id = options["tenant_id"]
        output_path = options["output"]

        entries = {}
        roots = []
        for node in HierarchyService().find_hierarchy(tenant_id):
            entry = {
                "name": node.name,
                "type": node.entity_type,
                "metadata": dict(node.metadata or {}),
                "children": [],
            }
            entries[node.pk] = entry
            if node.parent_id is None:
                roots.append(entry)
            else:
                entries[node.parent_id]["children"].append(entry)

        with open(output_path, "w") as f:
            yaml.safe_dump({"tenant": tenant_id, "nodes": roots}, f, default_flow_style=False, sort_keys=False)

        self.stdout.write(self.style.SUCCESS(f"Exported {len(entries)} entities to {output_path}"))
