"""Domain services implementing the cut planning engine.

This package provides:
- Input normalization and part/stock constraint evaluation
- Free-space management and kerf-aware collision detection
- The placement engine and its strategy registry
- Multi-sheet allocation and efficiency scoring
"""

from .allocator import AllocationPhase, MultiSheetAllocator
from .collision import (
    OverlapError,
    OverlapViolation,
    SpatialGrid,
    assert_valid_sheet,
    validate_sheet,
)
from .constraints import CompatibilityResult, ConstraintEvaluator, ResolvedDimensions
from .free_space import FreeSpaceManager
from .linear import LinearPacker
from .normalizer import InputNormalizer
from .placement import Candidate, PlacementEngine, PlacementRule, SheetState
from .scoring import EfficiencyScorer
from .strategies import (
    STRATEGIES,
    PackingStrategy,
    available_strategies,
    get_strategy,
)

__all__ = [
    "AllocationPhase",
    "Candidate",
    "CompatibilityResult",
    "ConstraintEvaluator",
    "EfficiencyScorer",
    "FreeSpaceManager",
    "InputNormalizer",
    "LinearPacker",
    "MultiSheetAllocator",
    "OverlapError",
    "OverlapViolation",
    "PackingStrategy",
    "PlacementEngine",
    "PlacementRule",
    "ResolvedDimensions",
    "STRATEGIES",
    "SheetState",
    "SpatialGrid",
    "assert_valid_sheet",
    "available_strategies",
    "get_strategy",
    "validate_sheet",
]
