"""One-dimensional packing for linear stock such as boards and lumber.

Parts are laid end to end along the board length, first-fit decreasing,
with one kerf between consecutive parts and no trailing kerf after the
last one. Width and thickness are checked by the constraint evaluator
only.
"""

from __future__ import annotations

import logging
from typing import Sequence

from cutplan.domain.config import PlannerConfig
from cutplan.domain.entities import SheetUsage
from cutplan.domain.services.constraints import ConstraintEvaluator
from cutplan.domain.value_objects import (
    PartInstance,
    Placement,
    Rect,
    StockDefinition,
)

logger = logging.getLogger(__name__)

STRATEGY_NAME = "linear"


class LinearPacker:
    """Packs part instances onto a single linear stock piece."""

    def __init__(self, config: PlannerConfig, evaluator: ConstraintEvaluator) -> None:
        self.config = config
        self.evaluator = evaluator

    def pack(
        self,
        stock: StockDefinition,
        stock_index: int,
        sheet_index: int,
        instances: Sequence[PartInstance],
        kerf: float,
    ) -> SheetUsage:
        """Fill one piece of ``stock`` with as many instances as fit.

        Args:
            stock: Linear stock definition.
            stock_index: Caller index of the stock definition.
            sheet_index: Index of the piece in the result.
            instances: Candidate instances; incompatible ones are skipped.
            kerf: Saw kerf in mm.

        Returns:
            A SheetUsage for the piece, possibly empty.
        """
        usage = SheetUsage(
            sheet_index=sheet_index,
            stock_index=stock_index,
            stock=stock,
            kerf=kerf,
            strategy=STRATEGY_NAME,
        )
        tol = self.config.collision_tolerance
        ordered = sorted(instances, key=lambda i: (-i.length, -i.priority, i.id))

        cursor = 0.0
        for instance in ordered:
            if not self.evaluator.evaluate(instance.requirement, stock).compatible:
                continue
            start = cursor + kerf if usage.placements else 0.0
            if start + instance.length > stock.length + tol:
                continue
            placement = Placement(
                instance_id=instance.id,
                x=start,
                y=0.0,
                width=instance.length,
                height=instance.width,
                name=instance.name,
            )
            usage.add_placement(placement)
            cursor = placement.right
            if self.config.debug.placement:
                logger.debug(
                    "Placed %s at %.1f on board %d",
                    instance.id,
                    placement.x,
                    sheet_index,
                )

        remainder_start = cursor + kerf / 2 if usage.placements else 0.0
        if remainder_start < stock.length:
            usage.replace_free_spaces(
                [Rect(remainder_start, 0.0, stock.length - remainder_start, stock.width)]
            )
        else:
            usage.replace_free_spaces([])
        return usage
