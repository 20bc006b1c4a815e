"""Infrastructure layer - output formatters."""

from .formatters import PlanJsonFormatter, PlanReportFormatter, format_dimensions

__all__ = [
    "PlanJsonFormatter",
    "PlanReportFormatter",
    "format_dimensions",
]
