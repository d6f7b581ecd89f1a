"""
Signals emitted by the hierarchy service, plus the app's own receivers.

Signals are sent inside the mutation's transaction, after its writes; a
receiver that raises aborts and rolls back the whole mutation.

- ``node_created(node)``
- ``node_renamed(node, old_name)``
- ``node_moved(node, old_parent_id)``
- ``node_removed(node)``
- ``subtree_repathed(tenant_id, placements)`` where ``placements`` maps each
  rewritten node id to its new :class:`~django_orgtree.paths.Placement`.
"""

from django.core.signals import setting_changed
from django.dispatch import Signal, receiver

from django_orgtree.dependents import factory

node_created = Signal()
node_renamed = Signal()
node_moved = Signal()
node_removed = Signal()
subtree_repathed = Signal()


@receiver(setting_changed)
def reset_dependent_counter_on_settings_change(setting, **_: object) -> None:
    if setting == "ORGTREE":
        factory.reset_dependent_counter()
