"""Output formatters for planning results."""

from __future__ import annotations

import json
from typing import Any, Sequence

from cutplan.domain.entities import OptimizationResult, SheetUsage
from cutplan.domain.value_objects import MaterialType, PartRequirement


def format_dimensions(part: PartRequirement) -> str:
    """Display string "T × W × L mm", noting grain on sheet parts.

    Examples:
        >>> format_dimensions(PartRequirement(600, 400, 18))
        '18 × 400 × 600 mm'
    """
    text = f"{part.thickness:g} × {part.width:g} × {part.length:g} mm"
    if part.material_type is MaterialType.SHEET and part.grain is not None:
        text += f" (grain along {part.length:g} mm)"
    return text


class PlanReportFormatter:
    """Formats an OptimizationResult as a plain-text report."""

    def __init__(self, parts: Sequence[PartRequirement] | None = None) -> None:
        """Initialize formatter.

        Args:
            parts: The requirements the plan was made for; used to show
                part dimensions in the unplaced section.
        """
        self._parts = list(parts or [])

    def format(self, result: OptimizationResult) -> str:
        lines = [
            "CUT PLAN",
            "=" * 70,
            f"Status: {result.status.value.upper()}",
            result.message,
            "",
        ]

        for usage in result.sheet_usages:
            lines.extend(self._format_sheet(usage))
            lines.append("")

        if result.unplaced_quantities:
            lines.append("UNPLACED PARTS")
            lines.append("-" * 70)
            for req_index, count in sorted(result.unplaced_quantities.items()):
                lines.append(f"  {self._describe(req_index)}: {count}")
            lines.append("")

        if result.sheet_usages:
            metrics = result.metrics
            lines.extend(
                [
                    "METRICS",
                    "-" * 70,
                    f"  Sheets used:           {metrics.sheets_used} of {metrics.sheets_available}",
                    f"  Material efficiency:   {metrics.material_efficiency:.1f}%",
                    f"  Waste minimization:    {metrics.waste_minimization:.1f}%",
                    f"  Inventory utilization: {metrics.inventory_utilization:.1f}%",
                    f"  Overall score:         {metrics.overall_score:.1f}",
                    f"  Total waste:           {result.total_waste_area / 1_000_000:.3f} m²",
                    "",
                ]
            )

        if result.offcuts:
            lines.append("OFFCUTS")
            lines.append("-" * 70)
            for offcut in result.offcuts:
                lines.append(
                    f"  Sheet {offcut.sheet_index + 1}: {offcut.width:g} × {offcut.height:g} mm "
                    f"at ({offcut.x:g}, {offcut.y:g})"
                )
            lines.append("")

        if result.recommendations:
            lines.append("RECOMMENDATIONS")
            lines.append("-" * 70)
            for recommendation in result.recommendations:
                lines.append(f"  - {recommendation}")

        return "\n".join(lines).rstrip() + "\n"

    def _format_sheet(self, usage: SheetUsage) -> list[str]:
        stock = usage.stock
        label = stock.name or stock.material or f"Stock {usage.stock_index}"
        lines = [
            f"Sheet {usage.sheet_index + 1}: {label} "
            f"{stock.length:g} × {stock.width:g} × {stock.thickness:g} mm "
            f"[{usage.strategy}] {usage.efficiency:.1f}% used",
            f"  {'Part':<20} {'Id':<8} {'X':>8} {'Y':>8} {'W':>8} {'H':>8}  Rot",
        ]
        for p in usage.placements:
            lines.append(
                f"  {p.name:<20} {p.instance_id.label:<8} {p.x:>8.1f} {p.y:>8.1f} "
                f"{p.width:>8g} {p.height:>8g}  {'yes' if p.rotated else ''}"
            )
        return lines

    def _describe(self, req_index: int) -> str:
        if 0 <= req_index < len(self._parts):
            part = self._parts[req_index]
            name = part.name or f"Part-{req_index}"
            return f"{name} ({format_dimensions(part)})"
        return f"Part-{req_index}"


class PlanJsonFormatter:
    """Formats an OptimizationResult as a JSON document."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    def to_dict(self, result: OptimizationResult) -> dict[str, Any]:
        metrics = result.metrics
        return {
            "success": result.success,
            "status": result.status.value,
            "message": result.message,
            "sheets_used": result.sheets_used_count,
            "total_waste_area": result.total_waste_area,
            "budget_exhausted": result.budget_exhausted,
            "sheets": [
                {
                    "sheet_index": usage.sheet_index,
                    "stock_index": usage.stock_index,
                    "strategy": usage.strategy,
                    "used_area": usage.used_area,
                    "waste_area": usage.waste_area,
                    "efficiency": usage.efficiency,
                    "placements": [
                        {
                            "id": p.instance_id.label,
                            "requirement_index": p.instance_id.requirement_index,
                            "instance_index": p.instance_id.instance_index,
                            "name": p.name,
                            "x": p.x,
                            "y": p.y,
                            "width": p.width,
                            "height": p.height,
                            "rotated": p.rotated,
                        }
                        for p in usage.placements
                    ],
                }
                for usage in result.sheet_usages
            ],
            "unplaced": {str(k): v for k, v in sorted(result.unplaced_quantities.items())},
            "metrics": {
                "material_efficiency": metrics.material_efficiency,
                "inventory_utilization": metrics.inventory_utilization,
                "waste_minimization": metrics.waste_minimization,
                "sheet_minimization": metrics.sheet_minimization,
                "overall_score": metrics.overall_score,
            },
            "offcuts": [
                {
                    "sheet_index": o.sheet_index,
                    "x": o.x,
                    "y": o.y,
                    "width": o.width,
                    "height": o.height,
                }
                for o in result.offcuts
            ],
            "recommendations": list(result.recommendations),
        }

    def format(self, result: OptimizationResult) -> str:
        return json.dumps(self.to_dict(result), indent=self._indent)
