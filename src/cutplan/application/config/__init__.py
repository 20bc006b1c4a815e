"""Job file configuration: schemas, loading, adaptation and checks.

Typical use::

    job = load_job(Path("job.json"))
    result = plan(job_to_stock(job), job_to_parts(job), job.kerf,
                  job_to_planner_config(job))
"""

from cutplan.application.config.adapter import (
    job_to_parts,
    job_to_planner_config,
    job_to_stock,
    options_to_planner_config,
)
from cutplan.application.config.loader import (
    ConfigError,
    load_job,
    load_job_from_dict,
)
from cutplan.application.config.schemas import (
    SUPPORTED_VERSIONS,
    DebugOptionsConfig,
    MaterialTypeConfig,
    PartConfig,
    PlanJobSchema,
    PlannerOptionsConfig,
    StockConfig,
)
from cutplan.application.config.validator import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate_job,
)

__all__ = [
    "ConfigError",
    "DebugOptionsConfig",
    "MaterialTypeConfig",
    "PartConfig",
    "PlanJobSchema",
    "PlannerOptionsConfig",
    "SUPPORTED_VERSIONS",
    "StockConfig",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "job_to_parts",
    "job_to_planner_config",
    "job_to_stock",
    "load_job",
    "load_job_from_dict",
    "options_to_planner_config",
    "validate_job",
]
