"""Consistency checks for stored entity trees."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from django_orgtree.models import EntityNode
from django_orgtree.paths import PathBuilder, Placement


@dataclass(frozen=True)
class Violation:
    node_id: Any
    problem: str
    expected: str = ""
    found: str = ""

    def __str__(self) -> str:
        text = f"entity {self.node_id}: {self.problem}"
        if self.expected or self.found:
            text += f" (expected {self.expected!r}, found {self.found!r})"
        return text


def find_violations(tenant_id: str, *, path_builder: PathBuilder | None = None) -> list[Violation]:
    """Return every active node of ``tenant_id`` whose stored placement is wrong."""
    return list(iter_violations(tenant_id, path_builder=path_builder))


def iter_violations(
    tenant_id: str, *, path_builder: PathBuilder | None = None
) -> Iterator[Violation]:
    builder = path_builder or PathBuilder()
    nodes = {
        node.pk: node
        for node in EntityNode.objects.for_tenant(tenant_id).active().order_by("pk")
    }
    children: dict[Any, list[EntityNode]] = {}
    for node in nodes.values():
        if node.parent_id is not None and node.parent_id not in nodes:
            yield Violation(node.pk, "parent is missing, inactive or in another tenant")
            continue
        children.setdefault(node.parent_id, []).append(node)

    reached: set[Any] = set()
    stack: list[tuple[EntityNode, Placement | None]] = [
        (root, None) for root in reversed(children.get(None, []))
    ]
    while stack:
        node, parent_placement = stack.pop()
        reached.add(node.pk)
        expected = builder.derive(node.name, parent_placement)
        if node.path != expected.path:
            yield Violation(node.pk, "path mismatch", expected.path, node.path)
        if node.level != expected.level:
            yield Violation(node.pk, "level mismatch", str(expected.level), str(node.level))
        for child in reversed(children.get(node.pk, [])):
            stack.append((child, expected))

    for node_id, node in nodes.items():
        if node_id not in reached and (node.parent_id is None or node.parent_id in nodes):
            yield Violation(node_id, "not reachable from any root")
