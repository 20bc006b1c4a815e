"""Part/stock compatibility rules.

Resolves material, thickness, size and grain-direction constraints of a
(part, stock) pair into a single verdict with the allowed orientation.
"""

from __future__ import annotations

from dataclasses import dataclass

from cutplan.domain.value_objects import (
    MaterialType,
    Orientation,
    PartRequirement,
    StockDefinition,
)


DIMENSION_TOLERANCE = 0.01


@dataclass(frozen=True)
class ResolvedDimensions:
    """Part extents on the stock after orientation is resolved.

    Attributes:
        along_length: Extent along the stock length (sheet x axis).
        along_width: Extent along the stock width (sheet y axis).
    """

    along_length: float
    along_width: float


@dataclass(frozen=True)
class CompatibilityResult:
    """Verdict of the constraint evaluator for one (part, stock) pair.

    Attributes:
        compatible: True if the part can be cut from the stock.
        orientation: Resolved orientation; IMPOSSIBLE when incompatible.
        dimensions: Resolved extents, None when incompatible.
        grain_constrained: True if grain fixes the orientation.
        reason: Why the pair is incompatible, None otherwise.
    """

    compatible: bool
    orientation: Orientation
    dimensions: ResolvedDimensions | None = None
    grain_constrained: bool = False
    reason: str | None = None

    @classmethod
    def rejected(cls, reason: str) -> CompatibilityResult:
        return cls(compatible=False, orientation=Orientation.IMPOSSIBLE, reason=reason)


def _fits(length: float, width: float, stock: StockDefinition) -> bool:
    return (
        length <= stock.length + DIMENSION_TOLERANCE
        and width <= stock.width + DIMENSION_TOLERANCE
    )


class ConstraintEvaluator:
    """Evaluates and caches part/stock compatibility.

    Stock and part definitions are immutable, so verdicts are cached per
    pair for the lifetime of the evaluator.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[PartRequirement, StockDefinition], CompatibilityResult] = {}

    def evaluate(self, part: PartRequirement, stock: StockDefinition) -> CompatibilityResult:
        """Resolve whether ``part`` can be cut from ``stock`` and how.

        Args:
            part: The part requirement.
            stock: The candidate stock definition.

        Returns:
            CompatibilityResult with orientation and resolved dimensions.
        """
        key = (part, stock)
        cached = self._cache.get(key)
        if cached is None:
            cached = self._evaluate(part, stock)
            self._cache[key] = cached
        return cached

    def _evaluate(self, part: PartRequirement, stock: StockDefinition) -> CompatibilityResult:
        if part.material_type != stock.material_type:
            return CompatibilityResult.rejected(
                f"material type {part.material_type.value} does not match "
                f"{stock.material_type.value} stock"
            )
        if (
            part.material is not None
            and stock.material is not None
            and part.material.strip().casefold() != stock.material.strip().casefold()
        ):
            return CompatibilityResult.rejected(
                f"material {part.material!r} does not match stock {stock.material!r}"
            )
        if part.thickness > stock.thickness + DIMENSION_TOLERANCE:
            return CompatibilityResult.rejected(
                f"thickness {part.thickness:g} exceeds stock thickness {stock.thickness:g}"
            )

        # Boards are packed along their length only; grain is irrelevant.
        if stock.material_type is MaterialType.LINEAR:
            if _fits(part.length, part.width, stock):
                return CompatibilityResult(
                    compatible=True,
                    orientation=Orientation.DIRECT,
                    dimensions=ResolvedDimensions(part.length, part.width),
                )
            return CompatibilityResult.rejected("part is larger than the stock board")

        part_grain = part.grain
        stock_grain = stock.grain

        if part_grain is None or stock_grain is None:
            if _fits(part.length, part.width, stock):
                dims = ResolvedDimensions(part.length, part.width)
            elif _fits(part.width, part.length, stock):
                dims = ResolvedDimensions(part.width, part.length)
            else:
                return CompatibilityResult.rejected("part is larger than the stock sheet")
            return CompatibilityResult(
                compatible=True,
                orientation=Orientation.DIRECT,
                dimensions=dims,
            )

        if part_grain == stock_grain:
            if _fits(part.length, part.width, stock):
                return CompatibilityResult(
                    compatible=True,
                    orientation=Orientation.DIRECT,
                    dimensions=ResolvedDimensions(part.length, part.width),
                    grain_constrained=True,
                )
            return CompatibilityResult.rejected(
                "part does not fit the stock with its grain aligned"
            )

        if _fits(part.width, part.length, stock):
            return CompatibilityResult(
                compatible=True,
                orientation=Orientation.ROTATED,
                dimensions=ResolvedDimensions(part.width, part.length),
                grain_constrained=True,
            )
        return CompatibilityResult.rejected(
            f"grain {part_grain!r} cannot be matched to stock grain {stock_grain!r}"
        )

    def orientations(
        self, part: PartRequirement, stock: StockDefinition
    ) -> list[tuple[float, float, bool]]:
        """Allowed (extent_x, extent_y, rotated) triples for a pair.

        Unconstrained sheet parts may use either orientation that fits;
        grain-constrained parts get exactly the resolved one.
        """
        result = self.evaluate(part, stock)
        if not result.compatible or result.dimensions is None:
            return []
        if result.grain_constrained or stock.material_type is MaterialType.LINEAR:
            return [
                (
                    result.dimensions.along_length,
                    result.dimensions.along_width,
                    result.orientation is Orientation.ROTATED,
                )
            ]

        options: list[tuple[float, float, bool]] = []
        if _fits(part.length, part.width, stock):
            options.append((part.length, part.width, False))
        if part.length != part.width and _fits(part.width, part.length, stock):
            options.append((part.width, part.length, True))
        return options
