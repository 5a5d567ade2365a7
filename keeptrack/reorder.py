"""
Reorder engine: pure computation of new order/status values for a
drag-and-drop move.

Nothing here mutates its inputs. compute_move() returns one OrderChange for
every project whose record must be persisted, including ones whose values
end up unchanged.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import NotFoundError
from .schema import Project, ProjectStatus, create_optimistic_update


@dataclass
class MoveEvent:
    """A drop emitted by the drag-and-drop surface."""
    dragged_id: int
    source_column: str
    source_index: int
    dest_column: Optional[str] = None   # None = drop cancelled
    dest_index: Optional[int] = None

    @property
    def is_cancelled(self) -> bool:
        return self.dest_column is None or self.dest_index is None

    @property
    def is_noop(self) -> bool:
        return self.dest_column == self.source_column and self.dest_index == self.source_index

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoveEvent":
        """Accept the surface's camelCase payload."""
        dest_index = data.get("destIndex")
        return cls(
            dragged_id=int(data["draggedId"]),
            source_column=data.get("sourceColumn", ""),
            source_index=int(data.get("sourceIndex", 0)),
            dest_column=data.get("destColumn"),
            dest_index=int(dest_index) if dest_index is not None else None,
        )


@dataclass
class OrderChange:
    """New order/status for one project. `project` is the pre-move record."""
    project: Project
    order: int
    status: str

    @property
    def project_id(self) -> int:
        return self.project.id

    @property
    def changed(self) -> bool:
        return self.project.order != self.order or self.project.status != self.status

    def apply(self) -> Project:
        return create_optimistic_update(self.project, order=self.order, status=self.status)


def column(projects: List[Project], status: str) -> List[Project]:
    """Projects in one column, ascending by order (stable for ties)."""
    return sorted((p for p in projects if p.status == status), key=lambda p: p.order)


def group_by_status(projects: List[Project]) -> Dict[str, List[Project]]:
    """All six columns, each order-sorted. Empty columns are present."""
    groups = {status: column(projects, status) for status in ProjectStatus.values()}
    # keep anything with an unexpected status visible rather than dropping it
    for p in projects:
        if p.status not in groups:
            groups[p.status] = column(projects, p.status)
    return groups


def _dense(items: List[Project], status: str) -> List[OrderChange]:
    return [OrderChange(project=p, order=i, status=status) for i, p in enumerate(items)]


def compute_move(projects: List[Project], event: MoveEvent) -> List[OrderChange]:
    """
    Order changes produced by moving event.dragged_id.

    Same column: remove, reinsert at dest_index, renumber the whole column.
    Cross column: renumber the source column without the project, then
    insert it (with the new status) into the destination and renumber that.

    Raises NotFoundError if the dragged id is not in projects.
    """
    if event.is_cancelled or event.is_noop:
        return []

    moved = next((p for p in projects if p.id == event.dragged_id), None)
    if moved is None:
        raise NotFoundError(f"Project with id {event.dragged_id} not found")

    source_status = moved.status
    dest_status = event.dest_column

    source = [p for p in column(projects, source_status) if p.id != moved.id]

    if dest_status == source_status:
        index = max(0, min(event.dest_index, len(source)))
        source.insert(index, moved)
        return _dense(source, source_status)

    dest = column(projects, dest_status)
    index = max(0, min(event.dest_index, len(dest)))
    dest.insert(index, moved)
    return _dense(source, source_status) + _dense(dest, dest_status)
