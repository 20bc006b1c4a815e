"""Semantic job checks beyond schema validation.

The schema guarantees well-formed values; these checks look at the job
as a whole and report parts that can never be cut, insufficient stock,
and other likely mistakes before a plan is run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cutplan.application.config.adapter import job_to_parts, job_to_stock
from cutplan.application.config.schemas import PlanJobSchema
from cutplan.domain.services.constraints import ConstraintEvaluator
from cutplan.domain.services.normalizer import InputNormalizer

# Kerf wider than this is unusual for panel saws and likely a unit mistake.
WIDE_KERF_MM = 6.0


@dataclass
class ValidationError:
    """A problem that guarantees the job cannot be fully planned.

    Attributes:
        path: JSON path of the offending field, e.g. "parts[2]".
        message: Human-readable description.
        value: The offending value, if useful.
    """

    path: str
    message: str
    value: Any = None


@dataclass
class ValidationWarning:
    """A likely mistake that does not block planning.

    Attributes:
        path: JSON path of the concerning field.
        message: Human-readable description.
        suggestion: Optional remediation.
    """

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Errors and warnings found in a job."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        """CLI exit code: 0 clean, 1 errors, 2 warnings only."""
        if self.errors:
            return 1
        if self.warnings:
            return 2
        return 0

    def add_error(self, path: str, message: str, value: Any = None) -> ValidationResult:
        self.errors.append(ValidationError(path=path, message=message, value=value))
        return self

    def add_warning(
        self, path: str, message: str, suggestion: str | None = None
    ) -> ValidationResult:
        self.warnings.append(
            ValidationWarning(path=path, message=message, suggestion=suggestion)
        )
        return self


def validate_job(job: PlanJobSchema) -> ValidationResult:
    """Check a job for parts that can never be cut and likely mistakes.

    Args:
        job: A schema-valid job.

    Returns:
        ValidationResult with errors and warnings.
    """
    result = ValidationResult()
    stock = job_to_stock(job)
    parts = job_to_parts(job)
    evaluator = ConstraintEvaluator()

    used_stock: set[int] = set()
    for part_index, part in enumerate(parts):
        reasons: list[str] = []
        placeable = False
        for stock_index, item in enumerate(stock):
            verdict = evaluator.evaluate(part, item)
            if verdict.compatible:
                placeable = True
                used_stock.add(stock_index)
            elif verdict.reason:
                reasons.append(f"stock[{stock_index}]: {verdict.reason}")
        if not placeable:
            result.add_error(
                f"parts[{part_index}]",
                "No stock can hold this part (" + "; ".join(reasons) + ")",
                value=part.name,
            )

    for stock_index in range(len(stock)):
        if stock_index not in used_stock:
            result.add_warning(
                f"stock[{stock_index}]",
                "No part can be cut from this stock",
                suggestion="Remove it or check material, thickness and grain",
            )

    shortfall = InputNormalizer().check_capacity(stock, parts)
    if shortfall is not None:
        result.add_error(
            "parts",
            f"Parts need {shortfall.required_area:.0f} mm² but stock provides "
            f"{shortfall.available_area:.0f} mm²",
            value=shortfall.additional_sheets,
        )

    if job.kerf > WIDE_KERF_MM:
        result.add_warning(
            "kerf",
            f"Kerf of {job.kerf:g} mm is unusually wide",
            suggestion="Kerf is given in millimetres",
        )

    return result
