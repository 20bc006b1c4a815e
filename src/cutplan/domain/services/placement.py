"""Placement engine: finds the best legal position for one part on one sheet.

For every free space the engine probes a bounded set of anchor points
in each allowed orientation, rejects candidates whose kerf box leaves
the space or collides with an existing kerf box, and ranks the rest
with the configured placement rule.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterator

from cutplan.domain.config import PlannerConfig
from cutplan.domain.entities import SheetUsage
from cutplan.domain.services.collision import (
    SpatialGrid,
    contact_length,
    has_collision,
    sheet_contact_length,
)
from cutplan.domain.services.constraints import ConstraintEvaluator
from cutplan.domain.services.free_space import FreeSpaceManager
from cutplan.domain.value_objects import (
    FreeSpace,
    PartInstance,
    Placement,
    Rect,
    kerf_box,
)

logger = logging.getLogger(__name__)

UTILIZATION_WEIGHT = 50.0
PROXIMITY_WEIGHT = 25.0
FRAGMENT_WEIGHT = 20.0
SLIVER_PENALTY = 5.0
ADJACENCY_WEIGHT = 15.0
TIGHT_FIT_THRESHOLD = 0.9
TIGHT_FIT_BONUS = 25.0
STRIP_ALIGNMENT_BONUS = 30.0
STRIP_SIMILARITY = 0.05


class PlacementRule(str, Enum):
    """How the engine chooses among legal candidates.

    Attributes:
        SCORED: Highest heuristic score.
        FIRST_FIT: Lowest, then leftmost position.
        TIGHTEST: Smallest leftover in the containing free space.
        MIXED: FIRST_FIT for small parts, SCORED for the rest.
    """

    SCORED = "scored"
    FIRST_FIT = "first-fit"
    TIGHTEST = "tightest"
    MIXED = "mixed"


@dataclass(frozen=True)
class Candidate:
    """A legal position for a part.

    Attributes:
        x: Raw part position along x.
        y: Raw part position along y.
        width: Part extent along x.
        height: Part extent along y.
        rotated: True if the part is turned 90 degrees.
        box: Kerf-expanded footprint.
        space: Free space containing the footprint.
        score: Heuristic score; only meaningful for scored rules.
    """

    x: float
    y: float
    width: float
    height: float
    rotated: bool
    box: Rect
    space: FreeSpace
    score: float = 0.0


class SheetState:
    """Packing state of one open sheet.

    Owns the free-space manager and the spatial grid of the sheet. Both
    are created per sheet and never shared between packing attempts.
    """

    def __init__(self, usage: SheetUsage, config: PlannerConfig) -> None:
        self.usage = usage
        self.config = config
        self.kerf = usage.kerf
        self.length = usage.stock.length
        self.width = usage.stock.width
        self.boxes: list[Rect] = []
        self.grid = SpatialGrid(config.spatial_grid_cell)
        self.free = FreeSpaceManager(
            self.length,
            self.width,
            min_fragment_size=config.min_fragment_size,
            min_fragment_ratio=config.min_fragment_ratio,
            merge=config.merge_free_spaces,
            tolerance=config.collision_tolerance,
            spaces=usage.free_spaces,
        )

    @property
    def sheet_area(self) -> float:
        return self.length * self.width

    def collides(self, box: Rect) -> bool:
        grid = self.grid if len(self.boxes) > self.config.spatial_grid_threshold else None
        return has_collision(box, self.boxes, self.config.collision_tolerance, grid)

    def neighbours(self, box: Rect) -> list[Rect]:
        """Existing kerf boxes that may touch ``box``."""
        return [self.boxes[i] for i in sorted(self.grid.query(box))]

    def make_candidate(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        rotated: bool,
    ) -> tuple[Rect, Rect] | None:
        """Raw rectangle and kerf box for a position, or None if off-sheet."""
        tol = self.config.collision_tolerance
        if x < -tol or y < -tol:
            return None
        x = max(0.0, x)
        y = max(0.0, y)
        raw = Rect(x, y, width, height)
        if raw.right > self.length + tol or raw.top > self.width + tol:
            return None
        return raw, kerf_box(raw, self.kerf, self.length, self.width)

    def commit(self, candidate: Candidate, instance: PartInstance) -> Placement:
        """Record a placement and update free spaces and the grid."""
        placement = Placement(
            instance_id=instance.id,
            x=candidate.x,
            y=candidate.y,
            width=candidate.width,
            height=candidate.height,
            rotated=candidate.rotated,
            name=instance.name,
        )
        self.usage.add_placement(placement)
        self.grid.insert(candidate.box, len(self.boxes))
        self.boxes.append(candidate.box)
        self.free.occupy(candidate.box, min(candidate.width, candidate.height))
        self.usage.replace_free_spaces(self.free.spaces)
        return placement


class PlacementEngine:
    """Searches and scores candidate positions for part instances.

    Attributes:
        config: Planner configuration.
        evaluator: Constraint evaluator resolving allowed orientations.
    """

    def __init__(self, config: PlannerConfig, evaluator: ConstraintEvaluator) -> None:
        self.config = config
        self.evaluator = evaluator

    # -------------------------------------------------------------------------
    # Anchor generation
    # -------------------------------------------------------------------------

    def _near(self, edge: float, half: float) -> float:
        """Raw coordinate whose kerf box starts at ``edge``."""
        return edge + half if edge > self.config.collision_tolerance else edge

    def _far(self, edge: float, extent: float, half: float) -> float:
        """Raw far coordinate whose kerf box ends at ``edge``."""
        return edge - half if edge < extent - self.config.collision_tolerance else edge

    def anchors(
        self,
        state: SheetState,
        space: FreeSpace,
        width: float,
        height: float,
    ) -> list[tuple[float, float]]:
        """Raw positions to probe inside ``space``.

        The space origin is always probed. Spaces that can hold the part
        at least twice along an axis also get their far corners and a
        coarse grid, capped at ``max_probes_per_space`` anchors.
        """
        half = state.kerf / 2
        origin = (self._near(space.x, half), self._near(space.y, half))
        anchors = [origin]

        step_x = width + state.kerf
        step_y = height + state.kerf
        if space.width < 2 * step_x and space.height < 2 * step_y:
            return anchors

        cap = self.config.max_probes_per_space
        far_x = self._far(space.right, state.length, half) - width
        far_y = self._far(space.top, state.width, half) - height
        for anchor in _grid_anchors(
            [(far_x, origin[1]), (origin[0], far_y), (far_x, far_y)],
            space,
            step_x,
            step_y,
            lambda edge: self._near(edge, half),
        ):
            if len(anchors) >= cap:
                break
            if anchor not in anchors:
                anchors.append(anchor)
        return anchors

    def _candidates(
        self,
        state: SheetState,
        orientations: list[tuple[float, float, bool]],
    ) -> Iterator[Candidate]:
        tol = self.config.collision_tolerance
        for space in state.free.spaces:
            for width, height, rotated in orientations:
                if width > space.width + tol or height > space.height + tol:
                    continue
                for x, y in self.anchors(state, space, width, height):
                    made = state.make_candidate(x, y, width, height, rotated)
                    if made is None:
                        continue
                    raw, box = made
                    if not space.contains(box, tol):
                        continue
                    if state.collides(box):
                        if self.config.debug.collision:
                            logger.debug(
                                "Rejected %gx%g at (%.1f, %.1f): kerf collision",
                                width,
                                height,
                                raw.x,
                                raw.y,
                            )
                        continue
                    yield Candidate(raw.x, raw.y, width, height, rotated, box, space)

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def score(
        self,
        state: SheetState,
        candidate: Candidate,
        forced_rotation: bool,
    ) -> float:
        """Heuristic quality of a candidate; higher is better."""
        box = candidate.box
        utilization = box.area / candidate.space.area if candidate.space.area else 0.0

        distance = math.hypot(candidate.x / state.length, candidate.y / state.width)
        proximity = 1.0 - distance / math.sqrt(2)

        residuals, slivers = state.free.preview(
            candidate.space, box, min(candidate.width, candidate.height)
        )
        largest = max((r.area for r in residuals), default=0.0)
        fragment = FRAGMENT_WEIGHT * largest / candidate.space.area - SLIVER_PENALTY * slivers

        contact = sheet_contact_length(box, state.length, state.width)
        tol = self.config.collision_tolerance
        for other in state.neighbours(box):
            contact += contact_length(box, other, tol)
        perimeter = 2 * (box.width + box.height)
        adjacency = min(1.0, contact / perimeter) if perimeter else 0.0

        total = (
            UTILIZATION_WEIGHT * utilization
            + PROXIMITY_WEIGHT * proximity
            + fragment
            + ADJACENCY_WEIGHT * adjacency
        )
        if utilization > TIGHT_FIT_THRESHOLD:
            total += TIGHT_FIT_BONUS
        if candidate.rotated and not forced_rotation:
            total -= self.config.rotation_penalty
        return total

    # -------------------------------------------------------------------------
    # Strip heuristic
    # -------------------------------------------------------------------------

    def is_strip_part(self, state: SheetState, instance: PartInstance, largest_area: float) -> bool:
        """Small relative to both the sheet and the largest part of the batch."""
        return (
            instance.area < self.config.strip_sheet_fraction * state.sheet_area
            and instance.area < self.config.strip_part_fraction * largest_area
        )

    def _strip_candidates(
        self,
        state: SheetState,
        orientations: list[tuple[float, float, bool]],
    ) -> Iterator[Candidate]:
        half = state.kerf / 2
        for placement, box in zip(state.usage.placements, state.boxes):
            for width, height, rotated in orientations:
                if not (
                    _similar(placement.width, width) and _similar(placement.height, height)
                ):
                    continue
                row = (self._near(box.right, half), placement.y)
                column = (placement.x, self._near(box.top, half))
                for x, y in (row, column):
                    made = state.make_candidate(x, y, width, height, rotated)
                    if made is None:
                        continue
                    raw, cand_box = made
                    space = state.free.containing(cand_box)
                    if space is None or state.collides(cand_box):
                        continue
                    yield Candidate(raw.x, raw.y, width, height, rotated, cand_box, space)

    def find_strip(
        self,
        state: SheetState,
        orientations: list[tuple[float, float, bool]],
        forced_rotation: bool,
    ) -> Candidate | None:
        """Best position continuing a row or column of similar parts."""
        best: Candidate | None = None
        for candidate in self._strip_candidates(state, orientations):
            scored = replace(
                candidate,
                score=self.score(state, candidate, forced_rotation) + STRIP_ALIGNMENT_BONUS,
            )
            if best is None or scored.score > best.score:
                best = scored
        return best

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def find(
        self,
        state: SheetState,
        instance: PartInstance,
        rule: PlacementRule = PlacementRule.SCORED,
        largest_area: float | None = None,
    ) -> Candidate | None:
        """Best legal candidate for ``instance`` on the sheet, or None.

        Args:
            state: Open sheet to search.
            instance: Part instance to place.
            rule: How to rank legal candidates.
            largest_area: Area of the largest part in the current batch,
                used to detect strip parts.

        Returns:
            The chosen candidate, or None when the part does not fit.
        """
        stock = state.usage.stock
        orientations = self.evaluator.orientations(instance.requirement, stock)
        if not orientations:
            return None
        verdict = self.evaluator.evaluate(instance.requirement, stock)
        forced_rotation = verdict.grain_constrained or len(orientations) == 1

        if largest_area is None:
            largest_area = instance.area
        strip_part = self.is_strip_part(state, instance, largest_area)
        if strip_part and state.boxes:
            strip = self.find_strip(state, orientations, forced_rotation)
            if strip is not None:
                return strip

        if rule is PlacementRule.MIXED:
            rule = PlacementRule.FIRST_FIT if strip_part else PlacementRule.SCORED

        best: Candidate | None = None
        best_key: tuple[float, ...] | None = None
        for candidate in self._candidates(state, orientations):
            if rule is PlacementRule.SCORED:
                candidate = replace(
                    candidate, score=self.score(state, candidate, forced_rotation)
                )
                key: tuple[float, ...] = (-candidate.score,)
            elif rule is PlacementRule.FIRST_FIT:
                key = (candidate.y, candidate.x)
            else:
                key = (candidate.space.area - candidate.box.area, candidate.y, candidate.x)
            if best_key is None or key < best_key:
                best = candidate
                best_key = key
        return best

    def place(
        self,
        state: SheetState,
        instance: PartInstance,
        rule: PlacementRule = PlacementRule.SCORED,
        largest_area: float | None = None,
    ) -> Placement | None:
        """Find and commit a position for ``instance``.

        Returns:
            The new placement, or None if the part does not fit. Not
            fitting is a normal outcome.
        """
        candidate = self.find(state, instance, rule, largest_area)
        if candidate is None:
            return None
        placement = state.commit(candidate, instance)
        if self.config.debug.placement:
            logger.debug(
                "Placed %s (%gx%g%s) at (%.1f, %.1f) on sheet %d, score %.2f",
                instance.id,
                placement.width,
                placement.height,
                ", rotated" if placement.rotated else "",
                placement.x,
                placement.y,
                state.usage.sheet_index,
                candidate.score,
            )
        return placement


def _similar(a: float, b: float) -> bool:
    return abs(a - b) <= STRIP_SIMILARITY * max(a, b)



def _grid_anchors(
    corners: list[tuple[float, float]],
    space: FreeSpace,
    step_x: float,
    step_y: float,
    near: Callable[[float], float],
) -> Iterator[tuple[float, float]]:
    """Far corners first, then grid points of ``space`` row by row."""
    yield from corners
    columns = max(1, int(space.width // step_x))
    rows = max(1, int(space.height // step_y))
    for row in range(rows):
        for column in range(columns):
            if row == 0 and column == 0:
                continue
            yield (near(space.x + column * step_x), near(space.y + row * step_y))
