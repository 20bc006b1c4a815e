"""Application layer - planner facade and job configuration."""

from cutplan.domain.config import DebugConfig, PlannerConfig

from .planner import CutPlanner, plan

__all__ = [
    "CutPlanner",
    "DebugConfig",
    "PlannerConfig",
    "plan",
]
