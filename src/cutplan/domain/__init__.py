"""Domain layer - cut planning model and engine."""

from .config import DebugConfig, PlannerConfig
from .entities import (
    EfficiencyMetrics,
    Offcut,
    OptimizationResult,
    PlanStatus,
    SheetUsage,
    ShortfallReport,
)
from .value_objects import (
    FreeSpace,
    InstanceId,
    MaterialType,
    Orientation,
    PartInstance,
    PartRequirement,
    Placement,
    Rect,
    StockDefinition,
)

__all__ = [
    "DebugConfig",
    "EfficiencyMetrics",
    "FreeSpace",
    "InstanceId",
    "MaterialType",
    "Offcut",
    "OptimizationResult",
    "Orientation",
    "PartInstance",
    "PartRequirement",
    "PlanStatus",
    "Placement",
    "PlannerConfig",
    "Rect",
    "SheetUsage",
    "ShortfallReport",
    "StockDefinition",
]
