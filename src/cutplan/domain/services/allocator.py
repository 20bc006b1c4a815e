"""Multi-sheet allocation: the driver of a planning run.

The allocator moves through a fixed sequence of phases::

    VALIDATING -> EXPANDING -> ALLOCATING -> SCORING -> DONE

While allocating it repeatedly picks the first stock type (in stock
order) that still has items left and can take at least one unplaced
part, packs one item of it with every configured strategy, keeps the
best layout and removes the placed parts. The loop ends when all parts
are placed, a full pass over the stock makes no progress, or the time
or step budget runs out.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Sequence

from cutplan.domain.config import PlannerConfig
from cutplan.domain.entities import (
    OptimizationResult,
    PlanStatus,
    SheetUsage,
)
from cutplan.domain.services.collision import validate_sheet
from cutplan.domain.services.constraints import ConstraintEvaluator
from cutplan.domain.services.linear import LinearPacker
from cutplan.domain.services.normalizer import InputNormalizer
from cutplan.domain.services.placement import PlacementEngine, SheetState
from cutplan.domain.services.scoring import EfficiencyScorer
from cutplan.domain.services.strategies import PackingStrategy, get_strategy
from cutplan.domain.value_objects import (
    MaterialType,
    PartInstance,
    PartRequirement,
    StockDefinition,
)

logger = logging.getLogger(__name__)

# Parts below this share of the sheet area count as fillers when a
# distribution batch is capped.
FILLER_SHEET_FRACTION = 0.05


class AllocationPhase(str, Enum):
    """Phases of a planning run."""

    VALIDATING = "validating"
    EXPANDING = "expanding"
    ALLOCATING = "allocating"
    SCORING = "scoring"
    DONE = "done"


class MultiSheetAllocator:
    """Allocates part instances across the stock inventory.

    One allocator instance drives one run at a time; the phase history of
    the latest run is available in ``phases``.

    Attributes:
        config: Planner configuration.
        evaluator: Shared constraint evaluator.
        engine: Placement engine for sheet stock.
        linear_packer: Packer for linear stock.
        phases: Phases visited by the latest run.
    """

    def __init__(
        self,
        config: PlannerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or PlannerConfig()
        self.strategies = [get_strategy(name) for name in self.config.strategies]
        self.evaluator = ConstraintEvaluator()
        self.normalizer = InputNormalizer()
        self.engine = PlacementEngine(self.config, self.evaluator)
        self.linear_packer = LinearPacker(self.config, self.evaluator)
        self.scorer = EfficiencyScorer()
        self.phases: list[AllocationPhase] = []
        self._clock = clock

    @property
    def phase(self) -> AllocationPhase | None:
        return self.phases[-1] if self.phases else None

    def _enter(self, phase: AllocationPhase) -> None:
        self.phases.append(phase)
        if self.config.debug.multi_sheet:
            logger.debug("Entering phase %s", phase.value)

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(
        self,
        stock: Sequence[StockDefinition],
        parts: Sequence[PartRequirement],
        kerf: float,
    ) -> OptimizationResult:
        """Plan the cutting of ``parts`` from ``stock``.

        Args:
            stock: Stock inventory, non-empty.
            parts: Part requirements, non-empty.
            kerf: Saw kerf in mm.

        Returns:
            OptimizationResult. Infeasible and partial outcomes are
            reported through the result status, never raised.
        """
        self.phases = []

        self._enter(AllocationPhase.VALIDATING)
        shortfall = self.normalizer.check_capacity(stock, parts)

        self._enter(AllocationPhase.EXPANDING)
        instances = self.normalizer.expand(parts)

        if shortfall is not None:
            self._enter(AllocationPhase.DONE)
            message = (
                f"Insufficient stock: parts need {shortfall.required_area:.0f} mm² "
                f"but only {shortfall.available_area:.0f} mm² is available "
                f"(short {shortfall.shortfall_area:.0f} mm², "
                f"about {shortfall.additional_sheets} more sheet(s))"
            )
            return OptimizationResult(
                success=False,
                status=PlanStatus.INFEASIBLE,
                message=message,
                unplaced_instances=tuple(instances),
                unplaced_quantities=_count_by_requirement(instances),
                metrics=self.scorer.score([], stock),
                recommendations=shortfall.recommendations,
                shortfall=shortfall,
            )

        self._enter(AllocationPhase.ALLOCATING)
        stock_order = self.normalizer.order_stock(stock)
        sheets, unplaced, exhausted = self._allocate(stock, stock_order, instances, kerf)

        self._enter(AllocationPhase.SCORING)
        metrics = self.scorer.score(sheets, stock)
        recommendations = self.scorer.recommend(metrics, len(unplaced))
        offcuts = tuple(
            offcut
            for usage in sheets
            if usage.material_type is MaterialType.SHEET
            for offcut in usage.offcuts(self.config.min_offcut_size)
        )

        placed = len(instances) - len(unplaced)
        if unplaced:
            status = PlanStatus.PARTIAL
            message = (
                f"Placed {placed} of {len(instances)} part(s) on {len(sheets)} sheet(s); "
                f"{len(unplaced)} could not be placed (incompatible or insufficient stock)"
            )
            if exhausted:
                message += "; planning budget exhausted"
        else:
            status = PlanStatus.SUCCESS
            message = f"All {placed} part(s) placed on {len(sheets)} sheet(s)"

        logger.info(
            "Plan finished: %d/%d parts on %d sheet(s), %.1f%% material efficiency",
            placed,
            len(instances),
            len(sheets),
            metrics.material_efficiency,
        )
        self._enter(AllocationPhase.DONE)
        return OptimizationResult(
            success=not unplaced,
            status=status,
            message=message,
            sheet_usages=tuple(sheets),
            unplaced_instances=tuple(unplaced),
            unplaced_quantities=_count_by_requirement(unplaced),
            metrics=metrics,
            recommendations=tuple(recommendations),
            offcuts=offcuts,
            budget_exhausted=exhausted,
        )

    def _budget_exceeded(self, started: float, sheet_count: int) -> bool:
        if (
            self.config.max_sheet_steps is not None
            and sheet_count >= self.config.max_sheet_steps
        ):
            return True
        budget = self.config.time_budget_seconds
        return budget is not None and self._clock() - started >= budget

    def _allocate(
        self,
        stock: Sequence[StockDefinition],
        stock_order: Sequence[int],
        instances: Sequence[PartInstance],
        kerf: float,
    ) -> tuple[list[SheetUsage], list[PartInstance], bool]:
        remaining = {index: item.quantity for index, item in enumerate(stock)}
        unplaced = list(instances)
        sheets: list[SheetUsage] = []
        started = self._clock()
        exhausted = False

        while unplaced:
            if self._budget_exceeded(started, len(sheets)):
                exhausted = True
                logger.warning(
                    "Planning budget exhausted after %d sheet(s); %d part(s) left",
                    len(sheets),
                    len(unplaced),
                )
                break

            usage = None
            for stock_index in stock_order:
                if remaining[stock_index] == 0:
                    continue
                item = stock[stock_index]
                compatible = self.compatible_instances(item, unplaced)
                if not compatible:
                    continue
                batch = self.select_batch(item, compatible, remaining[stock_index])
                usage = self.pack_sheet(item, stock_index, len(sheets), batch, kerf)
                if usage is None and len(batch) < len(compatible):
                    usage = self.pack_sheet(
                        item, stock_index, len(sheets), compatible, kerf
                    )
                if usage is not None:
                    remaining[stock_index] -= 1
                    break

            if usage is None:
                break

            self._finalize(usage)
            sheets.append(usage)
            placed_ids = {p.instance_id for p in usage.placements}
            unplaced = [i for i in unplaced if i.id not in placed_ids]
            if self.config.debug.multi_sheet:
                logger.debug(
                    "Sheet %d (stock %d, %s): %d part(s), %.1f%% used, %d left",
                    usage.sheet_index,
                    usage.stock_index,
                    usage.strategy,
                    usage.piece_count,
                    usage.efficiency,
                    len(unplaced),
                )

        return sheets, unplaced, exhausted

    def _finalize(self, usage: SheetUsage) -> None:
        usage.freeze()
        violations = validate_sheet(usage, usage.kerf, self.config.collision_tolerance)
        for violation in violations:
            logger.error("Layout violation on sheet %d: %s", usage.sheet_index, violation.detail)
        if self.config.debug.shared_cuts:
            logger.debug(
                "Sheet %d kerf area %.0f mm², waste %.0f mm²",
                usage.sheet_index,
                usage.kerf_area,
                usage.waste_area,
            )

    # -------------------------------------------------------------------------
    # Batch selection
    # -------------------------------------------------------------------------

    def compatible_instances(
        self,
        stock: StockDefinition,
        instances: Sequence[PartInstance],
    ) -> list[PartInstance]:
        """Unplaced instances that can be cut from ``stock``."""
        return [
            i for i in instances if self.evaluator.evaluate(i.requirement, stock).compatible
        ]

    def select_batch(
        self,
        stock: StockDefinition,
        compatible: Sequence[PartInstance],
        remaining: int,
    ) -> list[PartInstance]:
        """Choose which compatible instances to offer the next sheet.

        When the whole compatible set would fill one sheet almost
        completely, more than one sheet of the stock remains, and the set
        is large with a wide size spread, only a target-fill sub-batch is
        offered so large and small parts spread over several sheets.
        Otherwise the full set is returned.
        """
        config = self.config
        full = list(compatible)
        if (
            stock.material_type is MaterialType.LINEAR
            or remaining <= 1
            or len(full) <= config.distribution_min_instances
        ):
            return full

        areas = [i.area for i in full]
        if max(areas) / min(areas) <= config.distribution_size_ratio:
            return full

        fill = sum(areas) / stock.area
        if not config.distribution_trigger_fill < fill <= 1.0:
            return full

        target = config.distribution_target_fill * stock.area
        filler_limit = FILLER_SHEET_FRACTION * stock.area
        selected: list[PartInstance] = []
        accumulated = 0.0
        fillers = 0
        for instance in sorted(full, key=lambda i: (-i.area, i.id)):
            is_filler = instance.area < filler_limit
            if is_filler and fillers >= config.distribution_max_fillers:
                continue
            if selected and accumulated + instance.area > target:
                continue
            selected.append(instance)
            accumulated += instance.area
            if is_filler:
                fillers += 1

        if accumulated < config.distribution_min_fill * stock.area:
            return full

        if config.debug.multi_sheet:
            logger.debug(
                "Distribution safeguard: %d of %d part(s) offered (%.0f%% fill)",
                len(selected),
                len(full),
                accumulated / stock.area * 100,
            )
        return selected

    # -------------------------------------------------------------------------
    # Sheet packing
    # -------------------------------------------------------------------------

    def pack_sheet(
        self,
        stock: StockDefinition,
        stock_index: int,
        sheet_index: int,
        batch: Sequence[PartInstance],
        kerf: float,
    ) -> SheetUsage | None:
        """Pack one item of ``stock`` with the best configured strategy.

        Returns:
            The best non-empty SheetUsage, or None if nothing was placed.
        """
        if stock.material_type is MaterialType.LINEAR:
            usage = self.linear_packer.pack(stock, stock_index, sheet_index, batch, kerf)
            return usage if usage.placements else None

        def attempt(strategy: PackingStrategy) -> SheetUsage | None:
            try:
                return self.run_strategy(strategy, stock, stock_index, sheet_index, batch, kerf)
            except Exception:
                logger.warning(
                    "Strategy %s failed on sheet %d; ignoring its result",
                    strategy.name,
                    sheet_index,
                    exc_info=True,
                )
                return None

        if self.config.max_workers > 1 and len(self.strategies) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                results = list(executor.map(attempt, self.strategies))
        else:
            results = [attempt(strategy) for strategy in self.strategies]

        best: SheetUsage | None = None
        for usage in results:
            if usage is None or not usage.placements:
                continue
            if best is None or usage.used_area > best.used_area:
                best = usage
        return best

    def run_strategy(
        self,
        strategy: PackingStrategy,
        stock: StockDefinition,
        stock_index: int,
        sheet_index: int,
        batch: Sequence[PartInstance],
        kerf: float,
    ) -> SheetUsage:
        """Pack one sheet with a single strategy."""
        usage = SheetUsage(
            sheet_index=sheet_index,
            stock_index=stock_index,
            stock=stock,
            kerf=kerf,
            strategy=strategy.name,
        )
        state = SheetState(usage, self.config)
        ordered = strategy.order(batch)
        largest = max((i.area for i in ordered), default=0.0)
        for instance in ordered:
            self.engine.place(state, instance, strategy.rule, largest)
        return usage


def _count_by_requirement(instances: Sequence[PartInstance]) -> dict[int, int]:
    counts: dict[int, int] = {}
    for instance in instances:
        index = instance.id.requirement_index
        counts[index] = counts.get(index, 0) + 1
    return counts
