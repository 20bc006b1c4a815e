"""Tunable planner configuration.

Every heuristic threshold used by the engine lives here as a named
parameter so that callers can adjust them per job.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_STRATEGIES: tuple[str, ...] = (
    "best-fit",
    "bottom-left",
    "area-optimized",
    "mixed-size",
)


@dataclass(frozen=True)
class DebugConfig:
    """Verbose diagnostics switches injected into the engine.

    Each flag enables the ``logger.debug`` output of one concern. The
    flags have no effect unless the logging level allows DEBUG records.

    Attributes:
        placement: Log every accepted placement and its score.
        collision: Log rejected candidates.
        shared_cuts: Log kerf accounting per sheet.
        multi_sheet: Log allocator batch selection and sheet progress.
    """

    placement: bool = False
    collision: bool = False
    shared_cuts: bool = False
    multi_sheet: bool = False

    @classmethod
    def all(cls) -> DebugConfig:
        """Return a config with every diagnostic enabled."""
        return cls(placement=True, collision=True, shared_cuts=True, multi_sheet=True)


@dataclass(frozen=True)
class PlannerConfig:
    """Configuration for the cut planning engine.

    Attributes:
        strategies: Registry names of the packing strategies to try per sheet.
        max_probes_per_space: Upper bound of candidate anchors per free space.
        collision_tolerance: Numeric tolerance of overlap tests in mm.
        min_fragment_size: Absolute floor for keeping a residual free space.
        min_fragment_ratio: Floor for residuals as a fraction of the placed
            part's smaller side.
        merge_free_spaces: Coalesce adjacent free spaces after each split.
        strip_sheet_fraction: A part smaller than this fraction of the sheet
            area is a strip candidate.
        strip_part_fraction: A part smaller than this fraction of the batch's
            largest part is a strip candidate.
        rotation_penalty: Score deducted for a voluntary rotation.
        distribution_trigger_fill: Theoretical single-sheet fill above which
            the distribution safeguard engages.
        distribution_target_fill: Fill the safeguard aims for.
        distribution_min_fill: Below this fill the safeguard is abandoned.
        distribution_min_instances: Batches must be larger than this.
        distribution_size_ratio: Max/min part area ratio defining a mixed batch.
        distribution_max_fillers: Cap of small filler parts in a capped batch.
        min_offcut_size: Minimum side of a reported offcut in mm.
        spatial_grid_cell: Cell size of the per-sheet collision grid in mm.
        spatial_grid_threshold: Placements on a sheet before the grid is used.
        max_workers: Threads used to evaluate strategies; 1 runs inline.
        time_budget_seconds: Wall-clock budget of the allocation loop.
        max_sheet_steps: Maximum number of sheets the allocator may pack.
        debug: Diagnostic switches.
    """

    strategies: tuple[str, ...] = DEFAULT_STRATEGIES
    max_probes_per_space: int = 12
    collision_tolerance: float = 0.01
    min_fragment_size: float = 10.0
    min_fragment_ratio: float = 0.1
    merge_free_spaces: bool = True
    strip_sheet_fraction: float = 0.15
    strip_part_fraction: float = 0.6
    rotation_penalty: float = 5.0
    distribution_trigger_fill: float = 0.90
    distribution_target_fill: float = 0.85
    distribution_min_fill: float = 0.65
    distribution_min_instances: int = 8
    distribution_size_ratio: float = 3.0
    distribution_max_fillers: int = 6
    min_offcut_size: float = 50.0
    spatial_grid_cell: float = 200.0
    spatial_grid_threshold: int = 10
    max_workers: int = 1
    time_budget_seconds: float | None = None
    max_sheet_steps: int | None = None
    debug: DebugConfig = field(default_factory=DebugConfig)

    def __post_init__(self) -> None:
        if not self.strategies:
            raise ValueError("At least one strategy must be configured")
        if self.max_probes_per_space < 1:
            raise ValueError("max_probes_per_space must be at least 1")
        if self.collision_tolerance < 0:
            raise ValueError("Collision tolerance must be non-negative")
        if self.min_fragment_size < 0 or self.min_fragment_ratio < 0:
            raise ValueError("Fragment floors must be non-negative")
        for name in (
            "strip_sheet_fraction",
            "strip_part_fraction",
            "distribution_trigger_fill",
            "distribution_target_fill",
            "distribution_min_fill",
        ):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1] (got {value})")
        if self.distribution_min_fill > self.distribution_target_fill:
            raise ValueError("distribution_min_fill cannot exceed distribution_target_fill")
        if self.distribution_size_ratio < 1:
            raise ValueError("distribution_size_ratio must be at least 1")
        if self.distribution_min_instances < 0 or self.distribution_max_fillers < 0:
            raise ValueError("Distribution counts must be non-negative")
        if self.min_offcut_size < 0:
            raise ValueError("Minimum offcut size must be non-negative")
        if self.spatial_grid_cell <= 0:
            raise ValueError("Spatial grid cell size must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.time_budget_seconds is not None and self.time_budget_seconds <= 0:
            raise ValueError("Time budget must be positive")
        if self.max_sheet_steps is not None and self.max_sheet_steps < 1:
            raise ValueError("max_sheet_steps must be at least 1")
