"""Planner facade: the public entry point of the engine."""

from __future__ import annotations

import logging
from typing import Sequence

from cutplan.domain.config import PlannerConfig
from cutplan.domain.entities import OptimizationResult, PlanStatus
from cutplan.domain.services import MultiSheetAllocator, get_strategy
from cutplan.domain.value_objects import PartRequirement, StockDefinition

logger = logging.getLogger(__name__)


class CutPlanner:
    """Plans the cutting of parts from a stock inventory.

    The planner holds configuration only; every call to ``plan`` starts
    from a fresh allocator, so results depend on the arguments alone.
    """

    def __init__(self, config: PlannerConfig | None = None) -> None:
        """Initialize the planner.

        Raises:
            ValueError: If a configured strategy name is unknown.
        """
        self.config = config or PlannerConfig()
        for name in self.config.strategies:
            get_strategy(name)

    def plan(
        self,
        stock: Sequence[StockDefinition],
        parts: Sequence[PartRequirement],
        kerf: float = 0.0,
    ) -> OptimizationResult:
        """Plan cuts for ``parts`` from ``stock``.

        Args:
            stock: Stock inventory.
            parts: Part requirements.
            kerf: Saw kerf in mm.

        Returns:
            OptimizationResult describing placements and leftovers.

        Raises:
            ValueError: If kerf is negative. Invalid stock or part
                definitions are rejected when they are constructed.
        """
        if kerf < 0:
            raise ValueError(f"Kerf must be non-negative (got {kerf})")

        if not stock:
            return OptimizationResult(
                success=False,
                status=PlanStatus.EMPTY,
                message="No stock materials provided",
            )
        if not parts:
            return OptimizationResult(
                success=False,
                status=PlanStatus.EMPTY,
                message="No parts to cut",
            )

        logger.info(
            "Planning %d part requirement(s) on %d stock type(s), kerf %.2f mm",
            len(parts),
            len(stock),
            kerf,
        )
        allocator = MultiSheetAllocator(self.config)
        return allocator.run(list(stock), list(parts), kerf)


def plan(
    stock: Sequence[StockDefinition],
    parts: Sequence[PartRequirement],
    kerf: float = 0.0,
    config: PlannerConfig | None = None,
) -> OptimizationResult:
    """Plan cuts with a one-off planner. See ``CutPlanner.plan``."""
    return CutPlanner(config).plan(stock, parts, kerf)
