"""Job file loader with error reporting.

Loads JSON job files and turns file system, JSON syntax and schema
problems into a single ``ConfigError`` carrying a category and per-field
details.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cutplan.application.config.schemas import PlanJobSchema


class ConfigError(Exception):
    """Exception raised for job file problems.

    Attributes:
        message: The primary error message.
        error_type: Category of error (file_not_found, permission_denied,
            file_read_error, json_parse, validation).
        path: Path to the job file, if loaded from disk.
        details: Per-problem details; validation details carry a JSON
            path such as ``parts[0].length``.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        path: Path | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.error_type = error_type
        self.path = path
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


def _format_json_path(loc: tuple[str | int, ...]) -> str:
    """Format a pydantic location tuple as a JSON path.

    Examples:
        >>> _format_json_path(("parts", 0, "length"))
        'parts[0].length'
    """
    parts: list[str] = []
    for segment in loc:
        if isinstance(segment, int):
            if parts:
                parts[-1] = f"{parts[-1]}[{segment}]"
            else:
                parts.append(f"[{segment}]")
        else:
            parts.append(str(segment))
    return ".".join(parts)


def _extract_validation_errors(error: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {
            "path": _format_json_path(err["loc"]),
            "message": err["msg"],
            "value": err.get("input"),
            "error_type": err["type"],
        }
        for err in error.errors()
    ]


def _format_validation_error_message(details: list[dict[str, Any]]) -> str:
    lines = ["Job validation failed:"]
    for detail in details:
        value = detail.get("value")
        if value is not None and not isinstance(value, (dict, list)):
            lines.append(f"  - {detail['path']}: {detail['message']} (got: {value!r})")
        else:
            lines.append(f"  - {detail['path']}: {detail['message']}")
    return "\n".join(lines)


def load_job_from_dict(data: dict[str, Any], path: Path | None = None) -> PlanJobSchema:
    """Validate a job from an already parsed dictionary.

    Args:
        data: Parsed job data.
        path: Source file, used in error reports only.

    Returns:
        A validated PlanJobSchema.

    Raises:
        ConfigError: If the data fails validation.
    """
    try:
        return PlanJobSchema.model_validate(data)
    except PydanticValidationError as e:
        details = _extract_validation_errors(e)
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            path=path,
            details=details,
        ) from e


def load_job(path: Path) -> PlanJobSchema:
    """Load and validate a job file.

    Args:
        path: Path to the JSON job file.

    Returns:
        A validated PlanJobSchema.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    if not path.exists():
        raise ConfigError(
            message=f"Job file not found: {path}",
            error_type="file_not_found",
            path=path,
        )

    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigError(
            message=f"Permission denied reading job file: {path}",
            error_type="permission_denied",
            path=path,
        )
    except OSError as e:
        raise ConfigError(
            message=f"Error reading job file: {path}: {e}",
            error_type="file_read_error",
            path=path,
        )

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            message=f"Invalid JSON in job file: {path} (line {e.lineno}, column {e.colno}): {e.msg}",
            error_type="json_parse",
            path=path,
            details=[{"line": e.lineno, "column": e.colno, "message": e.msg}],
        )

    if not isinstance(data, dict):
        raise ConfigError(
            message=f"Job file must contain a JSON object: {path}",
            error_type="validation",
            path=path,
            details=[{"path": "", "message": "expected an object"}],
        )
    return load_job_from_dict(data, path)
