from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from domain.errors import DanglingReferenceError
from domain.models import Part, Resource


@dataclass(frozen=True)
class PartRow:
    part: Part
    is_child: bool


@dataclass(frozen=True)
class PartHierarchy:
    """Read-only index over a facility's part list.

    Built once per computation. Every `parent_id` must resolve inside the same
    facility, otherwise construction fails with `DanglingReferenceError`.
    """

    resource: Resource
    parts_by_id: Dict[str, Part] = field(default_factory=dict)
    children_by_id: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_resource(cls, resource: Resource) -> PartHierarchy:
        parts_by_id = {part.id: part for part in resource.parts}
        children: Dict[str, List[str]] = {}
        for part in resource.parts:
            if part.parent_id is None:
                continue
            if part.parent_id not in parts_by_id:
                raise DanglingReferenceError(resource.id, part.parent_id, f"part {part.id}")
            children.setdefault(part.parent_id, []).append(part.id)
        return cls(
            resource=resource,
            parts_by_id=parts_by_id,
            children_by_id={key: tuple(value) for key, value in children.items()},
        )

    def __contains__(self, part_id: object) -> bool:
        return part_id in self.parts_by_id

    def require(self, part_id: str, referenced_by: str) -> Part:
        part = self.parts_by_id.get(part_id)
        if part is None:
            raise DanglingReferenceError(self.resource.id, part_id, referenced_by)
        return part

    def name_of(self, part_id: str) -> str:
        part = self.parts_by_id.get(part_id)
        return part.name if part else part_id

    def parent_of(self, part_id: str) -> str | None:
        part = self.parts_by_id.get(part_id)
        return part.parent_id if part else None

    def children_of(self, part_id: str) -> Tuple[str, ...]:
        return self.children_by_id.get(part_id, ())

    def is_direct_child(self, child_id: str, parent_id: str) -> bool:
        return child_id in self.children_of(parent_id)

    def ancestors(self, part_id: str) -> List[str]:
        # A cyclic catalog stops at the first repeated id.
        result: List[str] = []
        seen = {part_id}
        current = self.parent_of(part_id)
        while current is not None and current not in seen:
            result.append(current)
            seen.add(current)
            current = self.parent_of(current)
        return result

    def descendants(self, part_id: str) -> List[str]:
        result: List[str] = []
        seen = {part_id}
        stack = list(reversed(self.children_of(part_id)))
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            result.append(node)
            stack.extend(reversed(self.children_of(node)))
        return result

    def is_related(self, part_id: str, other_id: str, *, direct_only: bool = True) -> bool:
        if direct_only:
            return self.is_direct_child(part_id, other_id) or self.is_direct_child(
                other_id, part_id
            )
        return other_id in self.ancestors(part_id) or other_id in self.descendants(part_id)

    def display_order(self) -> List[PartRow]:
        """Root parts by name, each followed by its direct children by name."""
        roots = sorted(
            (part for part in self.resource.parts if part.parent_id is None),
            key=lambda part: (part.name.casefold(), part.id),
        )
        rows: List[PartRow] = []
        for root in roots:
            rows.append(PartRow(part=root, is_child=False))
            children = sorted(
                (self.parts_by_id[child_id] for child_id in self.children_of(root.id)),
                key=lambda part: (part.name.casefold(), part.id),
            )
            rows.extend(PartRow(part=child, is_child=True) for child in children)
        return rows
