"""Efficiency metrics and recommendations for a finished plan."""

from __future__ import annotations

from typing import Sequence

from cutplan.domain.entities import EfficiencyMetrics, SheetUsage
from cutplan.domain.value_objects import StockDefinition

MATERIAL_WEIGHT = 0.4
WASTE_WEIGHT = 0.3
SHEET_WEIGHT = 0.2
INVENTORY_WEIGHT = 0.1

LOW_EFFICIENCY = 70.0
LOW_WASTE_MINIMIZATION = 60.0
LOW_INVENTORY_USE = 30.0
HIGH_INVENTORY_USE = 80.0
INVENTORY_BALANCE = 50.0


class EfficiencyScorer:
    """Computes aggregate metrics of a plan.

    The overall score is reporting-only and never feeds back into
    placement decisions.
    """

    def score(
        self,
        sheet_usages: Sequence[SheetUsage],
        stock: Sequence[StockDefinition],
    ) -> EfficiencyMetrics:
        """Compute efficiency metrics for the consumed sheets.

        Args:
            sheet_usages: Sheets consumed by the plan.
            stock: The full stock inventory.

        Returns:
            EfficiencyMetrics with all scores in percent.
        """
        sheets_available = sum(s.quantity for s in stock)
        sheets_used = len(sheet_usages)
        used = sum(u.used_area for u in sheet_usages)
        consumed = sum(u.sheet_area for u in sheet_usages)
        waste = consumed - used

        if consumed <= 0:
            return EfficiencyMetrics(sheets_available=sheets_available)

        material = used / consumed * 100
        waste_minimization = (1 - waste / consumed) * 100
        inventory = sheets_used / sheets_available * 100 if sheets_available else 0.0
        sheet_minimization = 100 - inventory

        inventory_term = 100.0 if inventory < INVENTORY_BALANCE else 100 - inventory
        overall = (
            MATERIAL_WEIGHT * material
            + WASTE_WEIGHT * waste_minimization
            + SHEET_WEIGHT * sheet_minimization
            + INVENTORY_WEIGHT * inventory_term
        )

        return EfficiencyMetrics(
            material_efficiency=material,
            inventory_utilization=inventory,
            waste_minimization=waste_minimization,
            sheet_minimization=sheet_minimization,
            overall_score=overall,
            used_area=used,
            consumed_area=consumed,
            waste_area=waste,
            sheets_used=sheets_used,
            sheets_available=sheets_available,
        )

    def recommend(self, metrics: EfficiencyMetrics, unplaced_count: int) -> list[str]:
        """Human-readable suggestions for thresholds the plan crosses."""
        recommendations: list[str] = []
        if metrics.sheets_used and metrics.material_efficiency < LOW_EFFICIENCY:
            recommendations.append(
                f"Material efficiency is {metrics.material_efficiency:.1f}%; "
                "consider smaller stock sizes or grouping parts differently"
            )
        if metrics.sheets_used and metrics.waste_minimization < LOW_WASTE_MINIMIZATION:
            recommendations.append(
                "High waste detected; review part dimensions for better nesting"
            )
        if metrics.sheets_used and metrics.inventory_utilization < LOW_INVENTORY_USE:
            recommendations.append(
                "Excellent inventory use: most stock remains available"
            )
        elif metrics.inventory_utilization > HIGH_INVENTORY_USE:
            recommendations.append(
                f"{metrics.inventory_utilization:.0f}% of inventory consumed; "
                "consider ordering more stock"
            )
        if unplaced_count:
            recommendations.append(
                f"{unplaced_count} part(s) could not be placed; add compatible "
                "stock or relax grain constraints"
            )
        return recommendations
