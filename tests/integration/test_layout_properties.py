"""Property checks over generated planning jobs.

For a handful of seeded jobs these tests verify the layout guarantees:
- No two kerf-expanded parts overlap and every part lies on its sheet
- Every part instance is placed at most once and placed plus unplaced
  covers every instance exactly once
- Used area is the sum of the placed part areas
- Grain-bound parts are rotated exactly when the grains cross
- Repeated runs produce identical layouts
"""

from __future__ import annotations

import random

import pytest

from cutplan.application import PlannerConfig, plan
from cutplan.domain.services.collision import validate_sheet
from cutplan.domain.value_objects import PartRequirement, StockDefinition

SEEDS = [1, 2, 3, 4, 5, 6]
KERF = 3.2


def _generate_job(seed: int) -> tuple[list[StockDefinition], list[PartRequirement]]:
    rng = random.Random(seed)
    stock = [
        StockDefinition(2440, 1220, 18, quantity=3, grain_direction="length"),
        StockDefinition(1220, 610, 18, quantity=4),
    ]
    parts = []
    for _ in range(6):
        grain = rng.choice([None, None, "length", "width"])
        parts.append(
            PartRequirement(
                length=rng.randrange(100, 1000, 10),
                width=rng.randrange(80, 600, 10),
                thickness=18,
                quantity=rng.randint(1, 4),
                grain_direction=grain,
            )
        )
    return stock, parts


@pytest.fixture(params=SEEDS)
def job(request):
    stock, parts = _generate_job(request.param)
    return stock, parts, plan(stock, parts, KERF)


class TestLayoutProperties:
    """Layout guarantees over generated jobs."""

    def test_no_overlap_and_in_bounds(self, job) -> None:
        _, _, result = job
        for usage in result.sheet_usages:
            assert validate_sheet(usage, KERF) == []
            for placement in usage.placements:
                assert placement.x >= 0 and placement.y >= 0
                assert placement.right <= usage.stock.length + 0.01
                assert placement.top <= usage.stock.width + 0.01

    def test_each_instance_accounted_for_once(self, job) -> None:
        _, parts, result = job
        placed = [p.instance_id for u in result.sheet_usages for p in u.placements]
        unplaced = [i.id for i in result.unplaced_instances]

        assert len(placed) == len(set(placed))
        assert set(placed).isdisjoint(unplaced)
        assert len(placed) + len(unplaced) == sum(p.quantity for p in parts)

    def test_used_area_matches_placements(self, job) -> None:
        _, parts, result = job
        for usage in result.sheet_usages:
            expected = sum(
                parts[p.instance_id.requirement_index].area for p in usage.placements
            )
            assert usage.used_area == pytest.approx(expected)

    def test_grain_law(self, job) -> None:
        _, parts, result = job
        for usage in result.sheet_usages:
            stock_grain = usage.stock.grain
            for placement in usage.placements:
                part_grain = parts[placement.instance_id.requirement_index].grain
                if stock_grain is None or part_grain is None:
                    continue
                assert placement.rotated == (part_grain != stock_grain)

    def test_stock_quantities_respected(self, job) -> None:
        stock, _, result = job
        for index, item in enumerate(stock):
            used = sum(1 for u in result.sheet_usages if u.stock_index == index)
            assert used <= item.quantity

    def test_deterministic(self, job) -> None:
        stock, parts, result = job
        again = plan(stock, parts, KERF)
        assert [u.placements for u in again.sheet_usages] == [
            u.placements for u in result.sheet_usages
        ]
        assert again.unplaced_quantities == result.unplaced_quantities


class TestKerfMonotonicity:
    """Wider kerf never lets more parts onto the first sheet."""

    def test_zero_kerf_fits_at_least_as_many(self) -> None:
        stock = [StockDefinition(1000, 1000, 18)]
        parts = [PartRequirement(250, 250, 18, quantity=16)]
        config = PlannerConfig(strategies=("bottom-left",))

        tight = plan(stock, parts, 0, config)
        wide = plan(stock, parts, 6, config)

        assert tight.placed_count == 16
        assert wide.placed_count < tight.placed_count
