"""Unit tests for kerf-aware collision detection.

Tests cover:
- Box overlap and contact length
- SpatialGrid bucketing
- has_collision with and without a grid
- Post-hoc sheet validation (overlap, kerf gap, out of bounds)
"""

from __future__ import annotations

import pytest

from cutplan.domain.services.collision import (
    OverlapError,
    SpatialGrid,
    assert_valid_sheet,
    boxes_overlap,
    contact_length,
    has_collision,
    sheet_contact_length,
    validate_sheet,
)
from cutplan.domain.value_objects import InstanceId, Placement, Rect


def _placement(index: int, x: float, y: float, width: float = 100, height: float = 100) -> Placement:
    return Placement(InstanceId(index, 0), x=x, y=y, width=width, height=height)


# =============================================================================
# Geometry helpers
# =============================================================================


class TestBoxGeometry:
    """Tests for overlap and contact helpers."""

    def test_touching_boxes_do_not_overlap(self) -> None:
        assert not boxes_overlap(Rect(0, 0, 10, 10), Rect(10, 0, 10, 10))

    def test_overlapping_boxes(self) -> None:
        assert boxes_overlap(Rect(0, 0, 10, 10), Rect(9, 0, 10, 10))

    def test_contact_along_vertical_edge(self) -> None:
        assert contact_length(Rect(0, 0, 10, 10), Rect(10, 2, 10, 5)) == 5

    def test_contact_along_horizontal_edge(self) -> None:
        assert contact_length(Rect(0, 0, 10, 10), Rect(3, 10, 4, 4)) == 4

    def test_no_contact(self) -> None:
        assert contact_length(Rect(0, 0, 10, 10), Rect(50, 50, 10, 10)) == 0.0

    def test_sheet_contact_in_corner(self) -> None:
        assert sheet_contact_length(Rect(0, 0, 10, 20), 100, 100) == 30

    def test_sheet_contact_full_width_strip(self) -> None:
        assert sheet_contact_length(Rect(0, 0, 100, 20), 100, 100) == 20 + 100 + 20


# =============================================================================
# Spatial grid
# =============================================================================


class TestSpatialGrid:
    """Tests for SpatialGrid."""

    def test_query_returns_items_in_shared_cells(self) -> None:
        grid = SpatialGrid(cell_size=100)
        grid.insert(Rect(0, 0, 50, 50), 0)
        grid.insert(Rect(250, 250, 10, 10), 1)
        assert grid.query(Rect(40, 40, 20, 20)) == {0}
        assert grid.query(Rect(240, 240, 30, 30)) == {1}

    def test_box_spanning_cells(self) -> None:
        grid = SpatialGrid(cell_size=100)
        grid.insert(Rect(50, 50, 200, 10), 7)
        assert grid.query(Rect(220, 55, 5, 5)) == {7}

    def test_invalid_cell_size(self) -> None:
        with pytest.raises(ValueError):
            SpatialGrid(cell_size=0)


class TestHasCollision:
    """Tests for has_collision."""

    def test_without_grid(self) -> None:
        boxes = [Rect(0, 0, 100, 100), Rect(200, 0, 100, 100)]
        assert has_collision(Rect(150, 0, 100, 100), boxes)
        assert not has_collision(Rect(100, 0, 100, 100), boxes)

    def test_with_grid_matches_linear_scan(self) -> None:
        boxes = [Rect(x * 110, y * 110, 100, 100) for x in range(5) for y in range(5)]
        grid = SpatialGrid(cell_size=150)
        for index, box in enumerate(boxes):
            grid.insert(box, index)
        probes = [Rect(105, 105, 10, 10), Rect(100, 100, 10, 10), Rect(300, 300, 200, 5)]
        for probe in probes:
            assert has_collision(probe, boxes, grid=grid) == has_collision(probe, boxes)


# =============================================================================
# Sheet validation
# =============================================================================


class TestValidateSheet:
    """Tests for validate_sheet and assert_valid_sheet."""

    def test_valid_layout(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 0, 0), _placement(1, 100, 0)])
        assert validate_sheet(usage, kerf=0) == []

    def test_overlap_detected(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 0, 0), _placement(1, 50, 50)])
        violations = validate_sheet(usage, kerf=0)
        assert len(violations) == 1
        assert violations[0].kind == "overlap"
        assert violations[0].instance_ids == (InstanceId(0, 0), InstanceId(1, 0))

    def test_parts_closer_than_kerf_overlap(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 0, 0), _placement(1, 102, 0)])
        assert [v.kind for v in validate_sheet(usage, kerf=4)] == ["overlap"]

    def test_parts_exactly_one_kerf_apart_are_valid(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 0, 0), _placement(1, 104, 0)])
        assert validate_sheet(usage, kerf=4) == []

    def test_out_of_bounds(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 950, 0)])
        violations = validate_sheet(usage, kerf=0)
        assert [v.kind for v in violations] == ["out_of_bounds"]

    def test_assert_valid_sheet_raises(self, make_usage) -> None:
        usage = make_usage(placements=[_placement(0, 0, 0), _placement(1, 50, 50)])
        with pytest.raises(OverlapError) as exc_info:
            assert_valid_sheet(usage, kerf=0)
        assert len(exc_info.value.violations) == 1
        assert isinstance(exc_info.value, ValueError)
        assert "0-0 overlaps 1-0" in str(exc_info.value)
