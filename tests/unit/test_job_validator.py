"""Unit tests for semantic job validation.

Tests cover:
- Clean jobs
- Parts no stock can hold
- Unused stock warnings
- Capacity shortfall
- Wide kerf warnings
- Exit code mapping
"""

from __future__ import annotations

from typing import Any

from cutplan.application.config import PlanJobSchema, ValidationResult, validate_job


def _job(**overrides: Any) -> PlanJobSchema:
    data: dict[str, Any] = {
        "schema_version": "1.0",
        "stock": [{"length": 2440, "width": 1220, "thickness": 18}],
        "parts": [{"length": 600, "width": 400, "thickness": 18, "quantity": 2}],
    }
    data.update(overrides)
    return PlanJobSchema.model_validate(data)


class TestValidateJob:
    """Tests for validate_job."""

    def test_clean_job(self) -> None:
        result = validate_job(_job())
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.exit_code == 0

    def test_part_no_stock_can_hold(self) -> None:
        result = validate_job(
            _job(
                stock=[{"length": 2440, "width": 1220, "thickness": 18, "quantity": 3}],
                parts=[
                    {"length": 600, "width": 400, "thickness": 18},
                    {"name": "Thick", "length": 600, "width": 400, "thickness": 25},
                ],
            )
        )
        assert not result.is_valid
        assert [e.path for e in result.errors] == ["parts[1]"]
        assert "thickness" in result.errors[0].message
        assert result.errors[0].value == "Thick"

    def test_unused_stock_warning(self) -> None:
        result = validate_job(
            _job(
                stock=[
                    {"length": 2440, "width": 1220, "thickness": 18},
                    {"length": 2440, "width": 1220, "thickness": 6},
                ]
            )
        )
        assert result.is_valid
        assert [w.path for w in result.warnings] == ["stock[1]"]
        assert result.exit_code == 2

    def test_capacity_shortfall(self) -> None:
        result = validate_job(
            _job(
                stock=[{"length": 1000, "width": 1000, "thickness": 18}],
                parts=[{"length": 900, "width": 900, "thickness": 18, "quantity": 2}],
            )
        )
        assert [e.path for e in result.errors] == ["parts"]
        assert result.errors[0].value == 1

    def test_wide_kerf_warning(self) -> None:
        result = validate_job(_job(kerf=8))
        assert [w.path for w in result.warnings] == ["kerf"]


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_exit_codes(self) -> None:
        assert ValidationResult().exit_code == 0
        assert ValidationResult().add_warning("kerf", "wide").exit_code == 2
        assert ValidationResult().add_error("parts", "bad").add_warning("kerf", "wide").exit_code == 1
