"""Pytest configuration and shared fixtures for cut planning tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from cutplan.domain.entities import SheetUsage
from cutplan.domain.value_objects import (
    InstanceId,
    PartInstance,
    PartRequirement,
    StockDefinition,
)

FIXTURES_PATH = Path(__file__).parent / "fixtures" / "jobs"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared domain fixtures
# =============================================================================


@pytest.fixture
def plywood_sheet() -> StockDefinition:
    """A single full 2440 x 1220 x 18 mm plywood sheet."""
    return StockDefinition(length=2440, width=1220, thickness=18, quantity=1)


@pytest.fixture
def make_instance() -> Callable[..., PartInstance]:
    """Factory building a PartInstance from plain dimensions."""

    def _make(
        length: float,
        width: float,
        requirement_index: int = 0,
        instance_index: int = 0,
        thickness: float = 18,
        **kwargs: object,
    ) -> PartInstance:
        requirement = PartRequirement(length, width, thickness, **kwargs)
        return PartInstance(
            id=InstanceId(requirement_index, instance_index),
            requirement=requirement,
        )

    return _make


@pytest.fixture
def make_usage() -> Callable[..., SheetUsage]:
    """Factory building an open SheetUsage for a sheet of the given size."""

    def _make(
        length: float = 1000,
        width: float = 1000,
        kerf: float = 0.0,
        **kwargs: object,
    ) -> SheetUsage:
        return SheetUsage(
            sheet_index=0,
            stock_index=0,
            stock=StockDefinition(length=length, width=width, thickness=18),
            kerf=kerf,
            **kwargs,
        )

    return _make


@pytest.fixture
def jobs_path() -> Path:
    """Directory holding the JSON job fixtures."""
    return FIXTURES_PATH
