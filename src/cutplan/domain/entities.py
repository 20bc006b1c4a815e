"""Entities and aggregates produced by a planning run.

``SheetUsage`` is the only mutable entity: it is owned by exactly one
packing computation while the sheet is being filled and frozen once the
allocator moves on. Everything else is an immutable result value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cutplan.domain.value_objects import (
    FreeSpace,
    MaterialType,
    PartInstance,
    Placement,
    Rect,
    StockDefinition,
)


@dataclass(frozen=True)
class Offcut:
    """A reusable leftover rectangle of a packed sheet.

    Attributes:
        x: Position along the stock length in mm.
        y: Position along the stock width in mm.
        width: Extent along x in mm.
        height: Extent along y in mm.
        sheet_index: Index of the sheet in the result.
        stock_index: Index of the stock definition in the caller's list.
    """

    x: float
    y: float
    width: float
    height: float
    sheet_index: int
    stock_index: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Offcut dimensions must be positive")
        if self.sheet_index < 0:
            raise ValueError("Sheet index must be non-negative")

    @property
    def area(self) -> float:
        """Area of the offcut in square mm."""
        return self.width * self.height


@dataclass
class SheetUsage:
    """One consumed stock item and the parts cut from it.

    Attributes:
        sheet_index: Zero-based index of the sheet in the result.
        stock_index: Index of the stock definition in the caller's list.
        stock: The stock definition the sheet was taken from.
        kerf: Saw kerf the sheet was packed with, in mm.
        placements: Placed parts, in placement order.
        free_spaces: Unoccupied rectangles left on the sheet.
        strategy: Name of the packing strategy that produced the layout.
    """

    sheet_index: int
    stock_index: int
    stock: StockDefinition
    kerf: float = 0.0
    placements: list[Placement] = field(default_factory=list)
    free_spaces: list[FreeSpace] = field(default_factory=list)
    strategy: str = ""
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.sheet_index < 0:
            raise ValueError("Sheet index must be non-negative")
        if self.kerf < 0:
            raise ValueError("Kerf must be non-negative")
        if not self.free_spaces and not self.placements:
            self.free_spaces = [Rect(0.0, 0.0, self.stock.length, self.stock.width)]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"Sheet {self.sheet_index} is frozen")

    def add_placement(self, placement: Placement) -> None:
        """Append a placement; only allowed while the sheet is open."""
        self._check_mutable()
        self.placements.append(placement)

    def replace_free_spaces(self, spaces: list[FreeSpace]) -> None:
        """Replace the free-space set; only allowed while the sheet is open."""
        self._check_mutable()
        self.free_spaces = list(spaces)

    def freeze(self) -> None:
        """Finalize the sheet. Further mutation raises RuntimeError."""
        self._frozen = True

    @property
    def material_type(self) -> MaterialType:
        return self.stock.material_type

    @property
    def piece_count(self) -> int:
        return len(self.placements)

    @property
    def sheet_area(self) -> float:
        """Area of the consumed stock item in square mm."""
        return self.stock.area

    @property
    def used_area(self) -> float:
        """Sum of raw part areas in square mm; kerf is not included."""
        return sum(p.area for p in self.placements)

    @property
    def waste_area(self) -> float:
        """Sheet area not covered by parts, kerf included."""
        return self.sheet_area - self.used_area

    @property
    def efficiency(self) -> float:
        """Used area as a percentage of the sheet area."""
        return self.used_area / self.sheet_area * 100

    def kerf_boxes(self) -> list[Rect]:
        """Kerf-expanded footprints of all placements."""
        return [
            p.kerf_box(self.kerf, self.stock.length, self.stock.width)
            for p in self.placements
        ]

    @property
    def kerf_area(self) -> float:
        """Area consumed by saw cuts around the placed parts."""
        return sum(box.area for box in self.kerf_boxes()) - self.used_area

    @property
    def layout_density(self) -> float:
        """Used area as a fraction of the kerf-inclusive bounding box.

        Measures how compact the layout is independent of how much of
        the sheet is needed. Returns 0.0 for an empty sheet.
        """
        boxes = self.kerf_boxes()
        if not boxes:
            return 0.0
        width = max(b.right for b in boxes) - min(b.x for b in boxes)
        height = max(b.top for b in boxes) - min(b.y for b in boxes)
        return self.used_area / (width * height)

    def offcuts(self, min_size: float) -> list[Offcut]:
        """Reusable leftovers with both sides at least ``min_size``.

        Free spaces may overlap each other, so the largest spaces are
        taken first and any space overlapping an already chosen one is
        skipped.
        """
        candidates = [
            s for s in self.free_spaces if s.width >= min_size and s.height >= min_size
        ]
        candidates.sort(key=lambda s: (-s.area, s.y, s.x))
        chosen: list[Rect] = []
        for space in candidates:
            if any(space.intersects(other) for other in chosen):
                continue
            chosen.append(space)
        return [
            Offcut(
                x=s.x,
                y=s.y,
                width=s.width,
                height=s.height,
                sheet_index=self.sheet_index,
                stock_index=self.stock_index,
            )
            for s in chosen
        ]


@dataclass(frozen=True)
class EfficiencyMetrics:
    """Aggregate quality figures of a plan. All scores are percentages.

    Attributes:
        material_efficiency: Used area over consumed sheet area.
        inventory_utilization: Sheets used over sheets available.
        waste_minimization: 100 minus waste over consumed sheet area.
        sheet_minimization: 100 minus inventory utilization.
        overall_score: Weighted blend used for reporting only.
        used_area: Total raw part area in square mm.
        consumed_area: Total area of consumed stock in square mm.
        waste_area: Consumed area minus used area.
        sheets_used: Number of consumed stock items.
        sheets_available: Number of stock items in the inventory.
    """

    material_efficiency: float = 0.0
    inventory_utilization: float = 0.0
    waste_minimization: float = 0.0
    sheet_minimization: float = 0.0
    overall_score: float = 0.0
    used_area: float = 0.0
    consumed_area: float = 0.0
    waste_area: float = 0.0
    sheets_used: int = 0
    sheets_available: int = 0


@dataclass(frozen=True)
class ShortfallReport:
    """Explains why the inventory cannot hold the required parts.

    Attributes:
        required_area: Total area of all required parts in square mm.
        available_area: Total area of all stock in square mm.
        shortfall_area: Missing area in square mm.
        additional_sheets: Suggested number of extra stock items.
        recommendations: Human-readable suggestions.
    """

    required_area: float
    available_area: float
    shortfall_area: float
    additional_sheets: int
    recommendations: tuple[str, ...] = ()


class PlanStatus(str, Enum):
    """Outcome category of a planning run."""

    SUCCESS = "success"
    PARTIAL = "partial"
    INFEASIBLE = "infeasible"
    EMPTY = "empty"


@dataclass(frozen=True)
class OptimizationResult:
    """Complete result of a planning run.

    Attributes:
        success: True when every part instance was placed.
        status: Outcome category.
        message: Human-readable summary.
        sheet_usages: Consumed sheets in allocation order.
        unplaced_instances: Part instances that could not be placed.
        unplaced_quantities: Unplaced count per requirement index.
        metrics: Aggregate efficiency figures.
        recommendations: Human-readable suggestions.
        shortfall: Capacity report when the input is infeasible.
        offcuts: Reusable leftovers across all sheets.
        budget_exhausted: True when the time or step budget stopped the run.
    """

    success: bool
    status: PlanStatus
    message: str
    sheet_usages: tuple[SheetUsage, ...] = ()
    unplaced_instances: tuple[PartInstance, ...] = ()
    unplaced_quantities: dict[int, int] = field(default_factory=dict)
    metrics: EfficiencyMetrics = field(default_factory=EfficiencyMetrics)
    recommendations: tuple[str, ...] = ()
    shortfall: ShortfallReport | None = None
    offcuts: tuple[Offcut, ...] = ()
    budget_exhausted: bool = False

    @property
    def sheets_used_count(self) -> int:
        return len(self.sheet_usages)

    @property
    def total_waste_area(self) -> float:
        return sum(usage.waste_area for usage in self.sheet_usages)

    @property
    def placed_count(self) -> int:
        return sum(usage.piece_count for usage in self.sheet_usages)

    @property
    def efficiency(self) -> float:
        """Material efficiency in percent."""
        return self.metrics.material_efficiency
