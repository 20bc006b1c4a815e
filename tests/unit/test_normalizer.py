"""Unit tests for input normalization.

Tests cover:
- Placement priority of part requirements
- Stock processing order
- Expansion of requirements into part instances
- Capacity checks and shortfall reports
"""

from __future__ import annotations

import pytest

from cutplan.domain.services.normalizer import InputNormalizer
from cutplan.domain.value_objects import (
    InstanceId,
    MaterialType,
    PartRequirement,
    StockDefinition,
)


@pytest.fixture
def normalizer() -> InputNormalizer:
    return InputNormalizer()


class TestPriority:
    """Tests for InputNormalizer.priority."""

    def test_area_and_quantity(self, normalizer) -> None:
        assert normalizer.priority(PartRequirement(600, 400, 18)) == pytest.approx(250)

    def test_grain_bonus(self, normalizer) -> None:
        part = PartRequirement(600, 400, 18, grain_direction="length")
        assert normalizer.priority(part) == pytest.approx(350)

    def test_slender_bonus(self, normalizer) -> None:
        part = PartRequirement(1000, 100, 18, quantity=2)
        assert normalizer.priority(part) == pytest.approx(100 + 20 + 50)


class TestOrderStock:
    """Tests for InputNormalizer.order_stock."""

    def test_sheets_first_then_material_then_largest(self, normalizer) -> None:
        stock = [
            StockDefinition(2400, 90, 19, material_type=MaterialType.LINEAR),
            StockDefinition(1200, 600, 18, material="birch"),
            StockDefinition(2440, 1220, 18, material="Birch"),
            StockDefinition(1000, 1000, 18, material="ash"),
        ]
        assert normalizer.order_stock(stock) == [3, 2, 1, 0]

    def test_ties_keep_input_order(self, normalizer) -> None:
        stock = [StockDefinition(1000, 500, 18), StockDefinition(1000, 500, 18)]
        assert normalizer.order_stock(stock) == [0, 1]


class TestExpand:
    """Tests for InputNormalizer.expand."""

    def test_one_instance_per_unit(self, normalizer) -> None:
        parts = [PartRequirement(100, 100, 18, quantity=2), PartRequirement(1000, 1000, 18)]
        instances = normalizer.expand(parts)
        assert len(instances) == 3
        assert len({i.id for i in instances}) == 3

    def test_higher_priority_first(self, normalizer) -> None:
        parts = [PartRequirement(100, 100, 18, quantity=2), PartRequirement(1000, 1000, 18)]
        ids = [i.id for i in normalizer.expand(parts)]
        assert ids == [InstanceId(1, 0), InstanceId(0, 0), InstanceId(0, 1)]

    def test_instances_reference_their_requirement(self, normalizer) -> None:
        part = PartRequirement(600, 400, 18, quantity=3, name="Shelf")
        instances = normalizer.expand([part])
        assert all(i.requirement is part for i in instances)
        assert [i.id.instance_index for i in instances] == [0, 1, 2]


class TestCheckCapacity:
    """Tests for InputNormalizer.check_capacity."""

    def test_sufficient_stock(self, normalizer) -> None:
        stock = [StockDefinition(2440, 1220, 18)]
        parts = [PartRequirement(600, 400, 18, quantity=4)]
        assert normalizer.check_capacity(stock, parts) is None

    def test_shortfall_report(self, normalizer) -> None:
        stock = [StockDefinition(1200, 600, 18)]
        parts = [PartRequirement(1300, 700, 18)]
        report = normalizer.check_capacity(stock, parts)

        assert report is not None
        assert report.required_area == 910_000
        assert report.available_area == 720_000
        assert report.shortfall_area == 190_000
        assert report.additional_sheets == 1
        assert any("Add at least 1 more sheet" in r for r in report.recommendations)
        assert any("larger sheet sizes" in r for r in report.recommendations)

    def test_no_larger_sheet_advice_when_stock_is_large_enough(self, normalizer) -> None:
        stock = [StockDefinition(1000, 1000, 18)]
        parts = [PartRequirement(900, 900, 18, quantity=2)]
        report = normalizer.check_capacity(stock, parts)
        assert report is not None
        assert not any("larger sheet sizes" in r for r in report.recommendations)
