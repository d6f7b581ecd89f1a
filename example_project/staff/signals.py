"""Keep each member's denormalized ``entity_path`` in step with the tree."""

from django.db.models.signals import pre_save

from django_orgtree.signals import subtree_repathed


def _handle_member_pre_save(sender, instance, **kwargs):
    """Copy the entity's current path onto the member."""
    if instance.entity_id is None:
        return
    instance.entity_path = instance.entity.path


def _handle_subtree_repathed(sender, tenant_id, placements, **kwargs):
    """Rewrite ``entity_path`` of members whose entity was re-placed.

    Runs inside the mutation's transaction, so members never point at a
    path the tree has not committed.
    """
    from example_project.staff.models import Member

    for entity_id, placement in placements.items():
        Member.objects.filter(tenant_id=tenant_id, entity_id=entity_id).update(
            entity_path=placement.path
        )


def connect_member_signals():
    """Connect signal handlers for the Member model."""
    from example_project.staff.models import Member

    # Use dispatch_uid to prevent duplicate connections
    pre_save.connect(
        _handle_member_pre_save,
        sender=Member,
        weak=False,
        dispatch_uid="staff_member_pre_save",
    )
    subtree_repathed.connect(
        _handle_subtree_repathed,
        weak=False,
        dispatch_uid="staff_member_subtree_repathed",
    )
