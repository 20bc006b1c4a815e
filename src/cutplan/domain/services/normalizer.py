"""Input normalization: stock ordering, part expansion and capacity checks."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from cutplan.domain.entities import ShortfallReport
from cutplan.domain.value_objects import (
    InstanceId,
    MaterialType,
    PartInstance,
    PartRequirement,
    StockDefinition,
)

logger = logging.getLogger(__name__)

# Priority weights: larger, grain-bound, numerous and slender parts are
# harder to fit late in a run, so they are placed first.
AREA_WEIGHT = 0.001
GRAIN_BONUS = 100.0
QUANTITY_WEIGHT = 10.0
SLENDER_ASPECT_RATIO = 3.0
SLENDER_BONUS = 50.0


class InputNormalizer:
    """Prepares raw stock and part lists for allocation."""

    def priority(self, requirement: PartRequirement) -> float:
        """Placement priority hint of a requirement; higher goes first."""
        score = requirement.area * AREA_WEIGHT
        if requirement.grain is not None:
            score += GRAIN_BONUS
        score += requirement.quantity * QUANTITY_WEIGHT
        if requirement.aspect_ratio > SLENDER_ASPECT_RATIO:
            score += SLENDER_BONUS
        return score

    def order_stock(self, stock: Sequence[StockDefinition]) -> list[int]:
        """Stock indices in processing order.

        Sheet goods come before linear boards, then stock is grouped by
        material name and larger items are consumed first.
        """

        def key(index: int) -> tuple[int, str, float, int]:
            item = stock[index]
            kind = 0 if item.material_type is MaterialType.SHEET else 1
            return (kind, (item.material or "").casefold(), -item.area, index)

        return sorted(range(len(stock)), key=key)

    def expand(self, parts: Sequence[PartRequirement]) -> list[PartInstance]:
        """Expand requirements into individually addressable instances."""
        instances = [
            PartInstance(
                id=InstanceId(req_index, unit),
                requirement=requirement,
                priority=self.priority(requirement),
            )
            for req_index, requirement in enumerate(parts)
            for unit in range(requirement.quantity)
        ]
        instances.sort(key=lambda inst: (-inst.priority, inst.id))
        return instances

    def check_capacity(
        self,
        stock: Sequence[StockDefinition],
        parts: Sequence[PartRequirement],
    ) -> ShortfallReport | None:
        """Compare required part area against available stock area.

        Returns:
            A ShortfallReport if the parts cannot possibly fit, else None.
        """
        required = sum(p.total_area for p in parts)
        available = sum(s.total_area for s in stock)
        if required <= available:
            return None

        logger.info(
            "Insufficient stock: %.0f mm² required, %.0f mm² available",
            required,
            available,
        )
        shortfall = required - available
        sheet_count = sum(s.quantity for s in stock)
        average_sheet = available / sheet_count if sheet_count else 0.0
        additional = math.ceil(shortfall / average_sheet) if average_sheet else 0

        recommendations = [
            f"Add at least {additional} more sheet(s) of similar size",
            f"Stock is short by {shortfall / 1_000_000:.2f} m² of material",
        ]
        largest_part = max(parts, key=lambda p: p.area)
        if all(s.area < largest_part.area for s in stock):
            recommendations.append("Consider larger sheet sizes to reduce waste")

        return ShortfallReport(
            required_area=required,
            available_area=available,
            shortfall_area=shortfall,
            additional_sheets=additional,
            recommendations=tuple(recommendations),
        )

