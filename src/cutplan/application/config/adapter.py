"""Adapters converting validated job schemas into domain values."""

from __future__ import annotations

from cutplan.application.config.schemas import (
    DebugOptionsConfig,
    PartConfig,
    PlanJobSchema,
    PlannerOptionsConfig,
    StockConfig,
)
from cutplan.domain.config import DebugConfig, PlannerConfig
from cutplan.domain.value_objects import MaterialType, PartRequirement, StockDefinition


def stock_config_to_domain(config: StockConfig) -> StockDefinition:
    return StockDefinition(
        length=config.length,
        width=config.width,
        thickness=config.thickness,
        quantity=config.quantity,
        material=config.material,
        material_type=MaterialType(config.material_type.value),
        grain_direction=config.grain_direction,
        name=config.name,
    )


def part_config_to_domain(config: PartConfig) -> PartRequirement:
    return PartRequirement(
        length=config.length,
        width=config.width,
        thickness=config.thickness,
        quantity=config.quantity,
        material=config.material,
        material_type=MaterialType(config.material_type.value),
        grain_direction=config.grain_direction,
        name=config.name,
    )


def job_to_stock(job: PlanJobSchema) -> list[StockDefinition]:
    """Stock definitions of a job, in file order."""
    return [stock_config_to_domain(s) for s in job.stock]


def job_to_parts(job: PlanJobSchema) -> list[PartRequirement]:
    """Part requirements of a job, in file order."""
    return [part_config_to_domain(p) for p in job.parts]


def debug_options_to_domain(config: DebugOptionsConfig) -> DebugConfig:
    return DebugConfig(
        placement=config.placement,
        collision=config.collision,
        shared_cuts=config.shared_cuts,
        multi_sheet=config.multi_sheet,
    )


def options_to_planner_config(
    options: PlannerOptionsConfig,
    strategies: list[str] | None = None,
    debug: DebugConfig | None = None,
) -> PlannerConfig:
    """Build a PlannerConfig from job options.

    Args:
        options: Options section of a job.
        strategies: Strategy names overriding the job's own list.
        debug: Debug switches overriding the job's own switches.

    Returns:
        PlannerConfig with every unset option at its default.
    """
    values = options.model_dump(exclude_none=True, exclude={"strategies", "debug"})
    chosen = strategies or options.strategies
    if chosen:
        values["strategies"] = tuple(chosen)
    if debug is not None:
        values["debug"] = debug
    elif options.debug is not None:
        values["debug"] = debug_options_to_domain(options.debug)
    return PlannerConfig(**values)


def job_to_planner_config(
    job: PlanJobSchema,
    strategies: list[str] | None = None,
    debug: DebugConfig | None = None,
) -> PlannerConfig:
    """PlannerConfig for a job; see ``options_to_planner_config``."""
    return options_to_planner_config(job.options, strategies=strategies, debug=debug)
