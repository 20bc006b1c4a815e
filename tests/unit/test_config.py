"""Unit tests for planner configuration.

Tests cover:
- PlannerConfig defaults
- Rejection of out-of-range tunables
- DebugConfig switches
"""

from __future__ import annotations

import pytest

from cutplan.domain.config import DEFAULT_STRATEGIES, DebugConfig, PlannerConfig


class TestPlannerConfig:
    """Tests for PlannerConfig."""

    def test_defaults(self) -> None:
        config = PlannerConfig()
        assert config.strategies == DEFAULT_STRATEGIES
        assert config.collision_tolerance == 0.01
        assert config.distribution_trigger_fill == 0.90
        assert config.distribution_target_fill == 0.85
        assert config.distribution_min_fill == 0.65
        assert config.distribution_size_ratio == 3.0
        assert config.max_workers == 1
        assert config.time_budget_seconds is None
        assert config.debug == DebugConfig()

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"strategies": ()}, "At least one strategy"),
            ({"max_probes_per_space": 0}, "max_probes_per_space"),
            ({"collision_tolerance": -0.1}, "tolerance"),
            ({"min_fragment_size": -1}, "Fragment"),
            ({"strip_sheet_fraction": 0}, "strip_sheet_fraction"),
            ({"distribution_trigger_fill": 1.5}, "distribution_trigger_fill"),
            ({"distribution_min_fill": 0.9}, "cannot exceed"),
            ({"distribution_size_ratio": 0.5}, "size_ratio"),
            ({"min_offcut_size": -5}, "offcut"),
            ({"spatial_grid_cell": 0}, "grid cell"),
            ({"max_workers": 0}, "max_workers"),
            ({"time_budget_seconds": 0}, "Time budget"),
            ({"max_sheet_steps": 0}, "max_sheet_steps"),
        ],
    )
    def test_invalid_values(self, kwargs: dict, match: str) -> None:
        with pytest.raises(ValueError, match=match):
            PlannerConfig(**kwargs)

    def test_is_immutable(self) -> None:
        config = PlannerConfig()
        with pytest.raises(AttributeError):
            config.max_workers = 4  # type: ignore[misc]


class TestDebugConfig:
    """Tests for DebugConfig."""

    def test_all_disabled_by_default(self) -> None:
        config = DebugConfig()
        assert not any(
            (config.placement, config.collision, config.shared_cuts, config.multi_sheet)
        )

    def test_all(self) -> None:
        config = DebugConfig.all()
        assert all((config.placement, config.collision, config.shared_cuts, config.multi_sheet))
