"""Unit tests for cut planning value objects.

Tests cover:
- Grain direction normalization
- Rect geometry, overlap and containment
- StockDefinition and PartRequirement validation and derived areas
- Structured instance identifiers
- Placement validation and kerf-expanded footprints
"""

from __future__ import annotations

import pytest

from cutplan.domain.value_objects import (
    InstanceId,
    MaterialType,
    PartInstance,
    PartRequirement,
    Placement,
    Rect,
    StockDefinition,
    kerf_box,
    normalize_grain,
)


# =============================================================================
# Grain normalization
# =============================================================================


class TestNormalizeGrain:
    """Tests for normalize_grain."""

    @pytest.mark.parametrize("value", [None, "", "   ", "any", " ANY "])
    def test_unconstrained_values_become_none(self, value: str | None) -> None:
        assert normalize_grain(value) is None

    def test_direction_is_lower_cased_and_stripped(self) -> None:
        assert normalize_grain(" Length ") == "length"


# =============================================================================
# Rect
# =============================================================================


class TestRect:
    """Tests for Rect geometry."""

    def test_derived_edges_and_area(self) -> None:
        rect = Rect(10, 20, 30, 40)
        assert rect.right == 40
        assert rect.top == 60
        assert rect.area == 1200

    def test_touching_rectangles_do_not_intersect(self) -> None:
        assert not Rect(0, 0, 10, 10).intersects(Rect(10, 0, 10, 10))
        assert not Rect(0, 0, 10, 10).intersects(Rect(0, 10, 10, 10))

    def test_overlapping_rectangles_intersect(self) -> None:
        assert Rect(0, 0, 10, 10).intersects(Rect(5, 5, 10, 10))

    def test_tolerance_absorbs_tiny_overlap(self) -> None:
        a = Rect(0, 0, 10, 10)
        b = Rect(9.995, 0, 10, 10)
        assert a.intersects(b)
        assert not a.intersects(b, tolerance=0.01)

    def test_contains(self) -> None:
        outer = Rect(0, 0, 100, 100)
        assert outer.contains(Rect(10, 10, 20, 20))
        assert outer.contains(outer)
        assert not outer.contains(Rect(90, 90, 20, 20))


# =============================================================================
# Stock and parts
# =============================================================================


class TestStockDefinition:
    """Tests for StockDefinition."""

    def test_defaults(self) -> None:
        stock = StockDefinition(2440, 1220, 18)
        assert stock.quantity == 1
        assert stock.material_type is MaterialType.SHEET
        assert stock.grain is None

    def test_areas(self) -> None:
        stock = StockDefinition(2000, 1000, 18, quantity=3)
        assert stock.area == 2_000_000
        assert stock.total_area == 6_000_000

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"length": 0, "width": 1000, "thickness": 18}, "length"),
            ({"length": 1000, "width": -1, "thickness": 18}, "width"),
            ({"length": 1000, "width": 1000, "thickness": 0}, "thickness"),
            ({"length": 1000, "width": 1000, "thickness": 18, "quantity": 0}, "quantity"),
        ],
    )
    def test_non_positive_values_rejected(self, kwargs: dict, field: str) -> None:
        with pytest.raises(ValueError, match=f"Stock {field} must be positive"):
            StockDefinition(**kwargs)

    def test_grain_any_is_unconstrained(self) -> None:
        assert StockDefinition(1000, 500, 18, grain_direction="any").grain is None


class TestPartRequirement:
    """Tests for PartRequirement."""

    def test_areas(self) -> None:
        part = PartRequirement(600, 400, 18, quantity=4)
        assert part.area == 240_000
        assert part.total_area == 960_000

    def test_aspect_ratio_is_orientation_independent(self) -> None:
        assert PartRequirement(1000, 250, 18).aspect_ratio == 4
        assert PartRequirement(250, 1000, 18).aspect_ratio == 4

    def test_negative_quantity_rejected(self) -> None:
        with pytest.raises(ValueError, match="Part quantity"):
            PartRequirement(600, 400, 18, quantity=-1)

    def test_is_hashable(self) -> None:
        a = PartRequirement(600, 400, 18, name="Shelf")
        b = PartRequirement(600, 400, 18, name="Shelf")
        assert len({a, b}) == 1


# =============================================================================
# Instances
# =============================================================================


class TestInstanceId:
    """Tests for structured instance identifiers."""

    def test_label(self) -> None:
        assert InstanceId(2, 0).label == "2-0"
        assert str(InstanceId(10, 3)) == "10-3"

    def test_ordering_is_by_requirement_then_instance(self) -> None:
        ids = [InstanceId(1, 0), InstanceId(0, 5), InstanceId(0, 1)]
        assert sorted(ids) == [InstanceId(0, 1), InstanceId(0, 5), InstanceId(1, 0)]


class TestPartInstance:
    """Tests for PartInstance."""

    def test_delegates_dimensions(self) -> None:
        instance = PartInstance(InstanceId(0, 0), PartRequirement(600, 400, 18))
        assert (instance.length, instance.width, instance.thickness) == (600, 400, 18)
        assert instance.area == 240_000

    def test_name_falls_back_to_requirement_index(self) -> None:
        instance = PartInstance(InstanceId(3, 1), PartRequirement(600, 400, 18))
        assert instance.name == "Part-3"

    def test_name_from_requirement(self) -> None:
        instance = PartInstance(InstanceId(0, 0), PartRequirement(600, 400, 18, name="Door"))
        assert instance.name == "Door"


# =============================================================================
# Placements and kerf boxes
# =============================================================================


class TestPlacement:
    """Tests for Placement."""

    def test_negative_position_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            Placement(InstanceId(0, 0), x=-1, y=0, width=10, height=10)

    def test_zero_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            Placement(InstanceId(0, 0), x=0, y=0, width=0, height=10)

    def test_rect_and_area(self) -> None:
        placement = Placement(InstanceId(0, 0), x=5, y=6, width=10, height=20)
        assert placement.rect == Rect(5, 6, 10, 20)
        assert placement.area == 200
        assert placement.right == 15
        assert placement.top == 26

    def test_interior_kerf_box_grows_half_kerf_per_side(self) -> None:
        placement = Placement(InstanceId(0, 0), x=100, y=100, width=50, height=50)
        assert placement.kerf_box(4, 1000, 1000) == Rect(98, 98, 54, 54)

    def test_kerf_box_clipped_at_origin(self) -> None:
        placement = Placement(InstanceId(0, 0), x=0, y=0, width=50, height=50)
        assert placement.kerf_box(4, 1000, 1000) == Rect(0, 0, 52, 52)

    def test_kerf_box_clipped_at_far_edge(self) -> None:
        box = kerf_box(Rect(950, 0, 50, 50), 4, 1000, 1000)
        assert box.x == 948
        assert box.right == 1000

    def test_zero_kerf_box_is_raw_rect(self) -> None:
        rect = Rect(10, 10, 50, 50)
        assert kerf_box(rect, 0, 1000, 1000) == rect
