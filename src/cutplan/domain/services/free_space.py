"""Free-space bookkeeping for a single sheet.

Free spaces are maximal unoccupied rectangles. They may overlap each
other but never overlap a placed kerf box, so any rectangle contained in
a free space is safe to occupy.
"""

from __future__ import annotations

from typing import Iterable

from cutplan.domain.value_objects import FreeSpace, Rect


def split_space(space: FreeSpace, box: Rect) -> list[FreeSpace]:
    """Split ``space`` around an occupied ``box``.

    Returns the up to four residual rectangles left, right, below and
    above the box. Residuals with no extent are omitted; ``space`` is
    returned unchanged if it does not intersect the box.
    """
    if not space.intersects(box):
        return [space]

    residuals: list[FreeSpace] = []
    if box.x > space.x:
        residuals.append(Rect(space.x, space.y, box.x - space.x, space.height))
    if box.right < space.right:
        residuals.append(
            Rect(box.right, space.y, space.right - box.right, space.height)
        )
    if box.y > space.y:
        residuals.append(Rect(space.x, space.y, space.width, box.y - space.y))
    if box.top < space.top:
        residuals.append(Rect(space.x, box.top, space.width, space.top - box.top))
    return residuals


def prune_contained(spaces: Iterable[FreeSpace], tolerance: float = 0.0) -> list[FreeSpace]:
    """Drop spaces that are duplicates of, or contained in, another space."""
    ordered = sorted(set(spaces), key=lambda s: (-s.area, s.y, s.x, s.width))
    kept: list[FreeSpace] = []
    for space in ordered:
        if any(other.contains(space, tolerance) for other in kept):
            continue
        kept.append(space)
    return kept


def merge_adjacent(spaces: list[FreeSpace], tolerance: float = 0.0) -> list[FreeSpace]:
    """Coalesce pairs of spaces sharing a full edge.

    Two spaces merge when they touch along x with identical y extent, or
    along y with identical x extent. Repeats until no pair merges.
    """
    merged = list(spaces)
    changed = True
    while changed:
        changed = False
        for i in range(len(merged)):
            for j in range(i + 1, len(merged)):
                union = _union(merged[i], merged[j], tolerance)
                if union is not None:
                    merged[i] = union
                    del merged[j]
                    changed = True
                    break
            if changed:
                break
    return merged


def _union(a: Rect, b: Rect, tolerance: float) -> Rect | None:
    def close(p: float, q: float) -> bool:
        return abs(p - q) <= tolerance

    if close(a.y, b.y) and close(a.height, b.height):
        if close(a.right, b.x):
            return Rect(a.x, a.y, b.right - a.x, a.height)
        if close(b.right, a.x):
            return Rect(b.x, a.y, a.right - b.x, a.height)
    if close(a.x, b.x) and close(a.width, b.width):
        if close(a.top, b.y):
            return Rect(a.x, a.y, a.width, b.top - a.y)
        if close(b.top, a.y):
            return Rect(a.x, b.y, a.width, a.top - b.y)
    return None


def sort_spaces(spaces: Iterable[FreeSpace]) -> list[FreeSpace]:
    """Order spaces bottom-left first: ascending y, then x, then larger area."""
    return sorted(spaces, key=lambda s: (s.y, s.x, -s.area))


class FreeSpaceManager:
    """Maintains the free-space set of one sheet.

    Attributes:
        sheet_length: Sheet extent along x in mm.
        sheet_width: Sheet extent along y in mm.
        min_fragment_size: Absolute floor for residual sides in mm.
        min_fragment_ratio: Residual floor as a fraction of the placed
            part's smaller side.
        merge: Whether to coalesce adjacent spaces after each split.
    """

    def __init__(
        self,
        sheet_length: float,
        sheet_width: float,
        min_fragment_size: float = 10.0,
        min_fragment_ratio: float = 0.1,
        merge: bool = True,
        tolerance: float = 0.01,
        spaces: Iterable[FreeSpace] | None = None,
    ) -> None:
        self.sheet_length = sheet_length
        self.sheet_width = sheet_width
        self.min_fragment_size = min_fragment_size
        self.min_fragment_ratio = min_fragment_ratio
        self.merge = merge
        self.tolerance = tolerance
        if spaces is None:
            spaces = [Rect(0.0, 0.0, sheet_length, sheet_width)]
        self._spaces = sort_spaces(spaces)

    @property
    def spaces(self) -> list[FreeSpace]:
        return list(self._spaces)

    def fragment_floor(self, part_min_side: float) -> float:
        """Smallest residual side worth keeping after placing a part."""
        return max(self.min_fragment_size, self.min_fragment_ratio * part_min_side)

    def is_usable(self, space: FreeSpace, floor: float) -> bool:
        return space.width >= floor and space.height >= floor

    def preview(self, space: FreeSpace, box: Rect, part_min_side: float) -> tuple[list[FreeSpace], int]:
        """Residuals of ``space`` that would survive placing ``box``.

        Returns:
            Tuple of the usable residuals and the number of discarded slivers.
        """
        floor = self.fragment_floor(part_min_side)
        usable: list[FreeSpace] = []
        slivers = 0
        for residual in split_space(space, box):
            if self.is_usable(residual, floor):
                usable.append(residual)
            else:
                slivers += 1
        return usable, slivers

    def occupy(self, box: Rect, part_min_side: float) -> None:
        """Remove ``box`` from every free space it intersects."""
        floor = self.fragment_floor(part_min_side)
        updated: list[FreeSpace] = []
        for space in self._spaces:
            if not space.intersects(box):
                updated.append(space)
                continue
            updated.extend(
                r for r in split_space(space, box) if self.is_usable(r, floor)
            )

        updated = prune_contained(updated, self.tolerance)
        if self.merge:
            updated = prune_contained(merge_adjacent(updated, self.tolerance), self.tolerance)
        self._spaces = sort_spaces(updated)

    def containing(self, box: Rect) -> FreeSpace | None:
        """First space, in bottom-left order, that fully contains ``box``."""
        for space in self._spaces:
            if space.contains(box, self.tolerance):
                return space
        return None
