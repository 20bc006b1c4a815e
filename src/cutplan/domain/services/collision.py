"""Kerf-aware collision detection and layout validation.

Every placed part reserves a band of half the kerf on each side. Two
parts are legal neighbours when their kerf-expanded boxes do not
overlap, which leaves exactly one saw pass between them: the shared cut
line is charged half to each part. Bands are clipped at the sheet edge
because a factory edge needs no cut.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

from cutplan.domain.value_objects import InstanceId, Rect, kerf_box

if TYPE_CHECKING:
    from cutplan.domain.entities import SheetUsage

__all__ = [
    "DEFAULT_TOLERANCE",
    "OverlapViolation",
    "OverlapError",
    "SpatialGrid",
    "assert_valid_sheet",
    "boxes_overlap",
    "contact_length",
    "has_collision",
    "kerf_box",
    "sheet_contact_length",
    "validate_sheet",
]

DEFAULT_TOLERANCE = 0.01


def boxes_overlap(a: Rect, b: Rect, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Axis-aligned overlap test.

    The tolerance absorbs floating point error only; boxes that overlap
    by more than it are always reported.
    """
    return a.intersects(b, tolerance)


def contact_length(a: Rect, b: Rect, tolerance: float = DEFAULT_TOLERANCE) -> float:
    """Length of the edge shared by two touching boxes, or 0.0."""
    if abs(a.right - b.x) <= tolerance or abs(b.right - a.x) <= tolerance:
        return max(0.0, min(a.top, b.top) - max(a.y, b.y))
    if abs(a.top - b.y) <= tolerance or abs(b.top - a.y) <= tolerance:
        return max(0.0, min(a.right, b.right) - max(a.x, b.x))
    return 0.0


def sheet_contact_length(
    box: Rect,
    sheet_length: float,
    sheet_width: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> float:
    """Length of ``box`` edges lying on the sheet boundary."""
    total = 0.0
    if box.x <= tolerance:
        total += box.height
    if box.y <= tolerance:
        total += box.width
    if box.right >= sheet_length - tolerance:
        total += box.height
    if box.top >= sheet_width - tolerance:
        total += box.width
    return total


class SpatialGrid:
    """Uniform grid bucketing boxes for fast collision lookups.

    A grid belongs to a single in-progress sheet packing and is rebuilt
    for every sheet.

    Attributes:
        cell_size: Edge length of a grid cell in mm.
    """

    def __init__(self, cell_size: float = 200.0) -> None:
        if cell_size <= 0:
            raise ValueError("Grid cell size must be positive")
        self.cell_size = cell_size
        self._cells: dict[tuple[int, int], list[int]] = {}

    def _cell_range(self, box: Rect) -> Iterable[tuple[int, int]]:
        min_x = math.floor(box.x / self.cell_size)
        max_x = math.floor(box.right / self.cell_size)
        min_y = math.floor(box.y / self.cell_size)
        max_y = math.floor(box.top / self.cell_size)
        for cx in range(min_x, max_x + 1):
            for cy in range(min_y, max_y + 1):
                yield (cx, cy)

    def insert(self, box: Rect, item: int) -> None:
        for cell in self._cell_range(box):
            self._cells.setdefault(cell, []).append(item)

    def query(self, box: Rect) -> set[int]:
        """Return the items sharing at least one cell with ``box``."""
        found: set[int] = set()
        for cell in self._cell_range(box):
            found.update(self._cells.get(cell, ()))
        return found


def has_collision(
    box: Rect,
    boxes: Sequence[Rect],
    tolerance: float = DEFAULT_TOLERANCE,
    grid: SpatialGrid | None = None,
) -> bool:
    """Check ``box`` against existing kerf-expanded boxes.

    Args:
        box: Candidate kerf-expanded box.
        boxes: Kerf-expanded boxes already on the sheet.
        tolerance: Numeric tolerance for the overlap test.
        grid: Optional spatial index over ``boxes``.

    Returns:
        True if the candidate overlaps any existing box.
    """
    if grid is not None:
        return any(boxes_overlap(box, boxes[i], tolerance) for i in grid.query(box))
    return any(boxes_overlap(box, other, tolerance) for other in boxes)


# =============================================================================
# Post-hoc validation
# =============================================================================


@dataclass(frozen=True)
class OverlapViolation:
    """A broken layout invariant found on a finalized sheet.

    Attributes:
        kind: "overlap" or "out_of_bounds".
        instance_ids: The instance(s) involved.
        detail: Human-readable description.
    """

    kind: str
    instance_ids: tuple[InstanceId, ...]
    detail: str


class OverlapError(ValueError):
    """Raised when a sheet layout violates the no-overlap invariant."""

    def __init__(self, violations: Sequence[OverlapViolation]) -> None:
        self.violations = tuple(violations)
        lines = [v.detail for v in self.violations]
        super().__init__("Invalid sheet layout: " + "; ".join(lines))


def validate_sheet(
    usage: SheetUsage,
    kerf: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[OverlapViolation]:
    """Pairwise check of every placement on a sheet.

    Checks that each raw placement lies inside the sheet and that no two
    kerf-expanded boxes overlap.

    Args:
        usage: Sheet to check.
        kerf: Kerf the sheet was packed with.
        tolerance: Numeric tolerance for the overlap test.

    Returns:
        List of violations; empty when the sheet is valid.
    """
    length = usage.stock.length
    width = usage.stock.width
    violations: list[OverlapViolation] = []

    for placement in usage.placements:
        if (
            placement.right > length + tolerance
            or placement.top > width + tolerance
        ):
            violations.append(
                OverlapViolation(
                    kind="out_of_bounds",
                    instance_ids=(placement.instance_id,),
                    detail=(
                        f"{placement.instance_id} extends to "
                        f"({placement.right:.1f}, {placement.top:.1f}) "
                        f"beyond {length:g}x{width:g}"
                    ),
                )
            )

    boxes = [p.kerf_box(kerf, length, width) for p in usage.placements]
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            if boxes_overlap(boxes[i], boxes[j], tolerance):
                first = usage.placements[i].instance_id
                second = usage.placements[j].instance_id
                violations.append(
                    OverlapViolation(
                        kind="overlap",
                        instance_ids=(first, second),
                        detail=f"{first} overlaps {second} on sheet {usage.sheet_index}",
                    )
                )

    return violations


def assert_valid_sheet(
    usage: SheetUsage,
    kerf: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> None:
    """Raise OverlapError if ``validate_sheet`` finds any violation."""
    violations = validate_sheet(usage, kerf, tolerance)
    if violations:
        raise OverlapError(violations)
