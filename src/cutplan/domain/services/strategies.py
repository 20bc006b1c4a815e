"""Registry of packing strategies.

A strategy is a pure pairing of an instance ordering and a placement
rule. The allocator packs every sheet once per configured strategy and
keeps the best layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from cutplan.domain.services.placement import PlacementRule
from cutplan.domain.value_objects import PartInstance

Ordering = Callable[[Sequence[PartInstance]], list[PartInstance]]

AREA_BUCKET = 1000.0


def by_area_descending(instances: Sequence[PartInstance]) -> list[PartInstance]:
    """Largest parts first; priority then id break ties."""
    return sorted(instances, key=lambda i: (-i.area, -i.priority, i.id))


def by_area_then_perimeter(instances: Sequence[PartInstance]) -> list[PartInstance]:
    """Parts bucketed by area, longest perimeter first within a bucket."""

    def key(instance: PartInstance) -> tuple[float, float, object]:
        bucket = instance.area // AREA_BUCKET
        perimeter = 2 * (instance.length + instance.width)
        return (-bucket, -perimeter, instance.id)

    return sorted(instances, key=key)


def small_parts_first(instances: Sequence[PartInstance]) -> list[PartInstance]:
    """Parts below the average area first, each group largest first."""
    if not instances:
        return []
    average = sum(i.area for i in instances) / len(instances)
    return sorted(
        instances,
        key=lambda i: (0 if i.area < average else 1, -i.area, i.id),
    )


@dataclass(frozen=True)
class PackingStrategy:
    """A named (ordering, placement rule) pair.

    Attributes:
        name: Registry key.
        description: One-line summary for reports.
        ordering: Function ordering the batch before placement.
        rule: Placement rule used for every instance.
    """

    name: str
    description: str
    ordering: Ordering
    rule: PlacementRule

    def order(self, instances: Sequence[PartInstance]) -> list[PartInstance]:
        return self.ordering(instances)


STRATEGIES: dict[str, PackingStrategy] = {
    strategy.name: strategy
    for strategy in (
        PackingStrategy(
            name="best-fit",
            description="Largest first, heuristic scoring",
            ordering=by_area_descending,
            rule=PlacementRule.SCORED,
        ),
        PackingStrategy(
            name="bottom-left",
            description="Largest first, lowest then leftmost position",
            ordering=by_area_descending,
            rule=PlacementRule.FIRST_FIT,
        ),
        PackingStrategy(
            name="area-optimized",
            description="Area buckets by perimeter, tightest free space",
            ordering=by_area_then_perimeter,
            rule=PlacementRule.TIGHTEST,
        ),
        PackingStrategy(
            name="mixed-size",
            description="Small parts first, scored placement for large parts",
            ordering=small_parts_first,
            rule=PlacementRule.MIXED,
        ),
    )
}


def available_strategies() -> tuple[str, ...]:
    """Names of all registered strategies."""
    return tuple(STRATEGIES)


def get_strategy(name: str) -> PackingStrategy:
    """Look up a strategy by name.

    Raises:
        ValueError: If no strategy is registered under ``name``.
    """
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown strategy {name!r}; available: {', '.join(available_strategies())}"
        ) from None
