from django.core.management.base import BaseCommand, CommandError
from django_orgtree.integrity import find_violations
from django_orgtree.service import HierarchyService


class Command(BaseCommand):
    help = "Verify stored paths and levels of a tenant's entity tree"

    def add_arguments(self, parser):
        parser.add_argument("tenant_id", help="Tenant to check")
        parser.add_argument("--repair", action="store_true", help="Re-derive all placements before reporting")

    def handle(self, *args, **options):
        tenant_id = options["tenant_id"]

        if options["repair"]:
            rewritten = HierarchyService().rebuild(tenant_id, actor="check_entity_tree")
            self.stdout.write(f"Rebuilt {rewritten} entity placements")

        violations = find_violations(tenant_id)
        for violation in violations:
            self.stderr.write(str(violation))
        if violations:
            raise CommandError(f"{len(violations)} violation(s) found in tenant {tenant_id}")

        self.stdout.write(self.style.SUCCESS(f"Entity tree of tenant {tenant_id} is consistent"))
