"""Pydantic models for cut planning job files.

A job file is a JSON document describing the stock inventory, the
required parts, the saw kerf and optional planner tuning. All models
reject unknown keys so that typos surface as validation errors.

Example job::

    {
        "schema_version": "1.0",
        "kerf": 3.2,
        "stock": [{"length": 2440, "width": 1220, "thickness": 18, "quantity": 2}],
        "parts": [{"name": "Side", "length": 720, "width": 560, "thickness": 18,
                   "quantity": 2, "grain_direction": "length"}]
    }
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cutplan.domain.services.strategies import available_strategies

SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


class MaterialTypeConfig(str, Enum):
    """Kind of stock material in a job file."""

    SHEET = "sheet"
    LINEAR = "linear"


class StockConfig(BaseModel):
    """One stock type held in inventory.

    Attributes:
        length: Stock length in mm.
        width: Stock width in mm.
        thickness: Stock thickness in mm.
        quantity: Number of identical items available.
        material: Optional material name.
        material_type: "sheet" or "linear".
        grain_direction: Optional grain direction; "any" means unconstrained.
        name: Optional display name.
    """

    model_config = ConfigDict(extra="forbid")

    length: float = Field(..., gt=0, description="Stock length in mm")
    width: float = Field(..., gt=0, description="Stock width in mm")
    thickness: float = Field(..., gt=0, description="Stock thickness in mm")
    quantity: int = Field(default=1, ge=1, description="Items available")
    material: str | None = Field(default=None, description="Material name")
    material_type: MaterialTypeConfig = Field(default=MaterialTypeConfig.SHEET)
    grain_direction: str | None = Field(default=None, description="Grain direction")
    name: str | None = Field(default=None, description="Display name")


class PartConfig(BaseModel):
    """One required part, possibly needed several times.

    Attributes:
        length: Part length in mm.
        width: Part width in mm.
        thickness: Required thickness in mm.
        quantity: Number of identical parts.
        material: Optional required material name.
        material_type: "sheet" or "linear".
        grain_direction: Optional grain direction; "any" means unconstrained.
        name: Optional display name.
    """

    model_config = ConfigDict(extra="forbid")

    length: float = Field(..., gt=0, description="Part length in mm")
    width: float = Field(..., gt=0, description="Part width in mm")
    thickness: float = Field(..., gt=0, description="Part thickness in mm")
    quantity: int = Field(default=1, ge=1, description="Parts required")
    material: str | None = Field(default=None, description="Material name")
    material_type: MaterialTypeConfig = Field(default=MaterialTypeConfig.SHEET)
    grain_direction: str | None = Field(default=None, description="Grain direction")
    name: str | None = Field(default=None, description="Display name")


class DebugOptionsConfig(BaseModel):
    """Diagnostic logging switches."""

    model_config = ConfigDict(extra="forbid")

    placement: bool = False
    collision: bool = False
    shared_cuts: bool = False
    multi_sheet: bool = False


class PlannerOptionsConfig(BaseModel):
    """Optional planner tuning.

    Every field left unset keeps the planner default.

    Attributes:
        strategies: Packing strategies to try on every sheet.
        max_probes_per_space: Candidate anchors per free space.
        rotation_penalty: Score deducted for voluntary rotation.
        merge_free_spaces: Coalesce adjacent free spaces.
        distribution_trigger_fill: Fill that engages distribution.
        distribution_target_fill: Fill the distribution aims for.
        distribution_min_fill: Fill below which distribution is abandoned.
        distribution_size_ratio: Part size spread defining a mixed batch.
        min_offcut_size: Smallest reported offcut side in mm.
        max_workers: Threads used to evaluate strategies.
        time_budget_seconds: Wall-clock budget of the run.
        max_sheet_steps: Maximum number of sheets to pack.
        debug: Diagnostic logging switches.
    """

    model_config = ConfigDict(extra="forbid")

    strategies: list[str] | None = Field(default=None, min_length=1)
    max_probes_per_space: int | None = Field(default=None, ge=1, le=100)
    rotation_penalty: float | None = Field(default=None, ge=0)
    merge_free_spaces: bool | None = None
    distribution_trigger_fill: float | None = Field(default=None, gt=0, le=1)
    distribution_target_fill: float | None = Field(default=None, gt=0, le=1)
    distribution_min_fill: float | None = Field(default=None, gt=0, le=1)
    distribution_size_ratio: float | None = Field(default=None, ge=1)
    min_offcut_size: float | None = Field(default=None, ge=0)
    max_workers: int | None = Field(default=None, ge=1, le=32)
    time_budget_seconds: float | None = Field(default=None, gt=0)
    max_sheet_steps: int | None = Field(default=None, ge=1)
    debug: DebugOptionsConfig | None = None

    @field_validator("strategies")
    @classmethod
    def validate_strategy_names(cls, v: list[str] | None) -> list[str] | None:
        """Validate that every strategy is registered."""
        if v is None:
            return v
        known = available_strategies()
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(
                f"Unknown strategies {unknown}; available: {list(known)}"
            )
        return v

    @model_validator(mode="after")
    def validate_fill_order(self) -> PlannerOptionsConfig:
        """Minimum distribution fill cannot exceed the target fill."""
        if (
            self.distribution_min_fill is not None
            and self.distribution_target_fill is not None
            and self.distribution_min_fill > self.distribution_target_fill
        ):
            raise ValueError(
                "distribution_min_fill cannot exceed distribution_target_fill"
            )
        return self


class PlanJobSchema(BaseModel):
    """Root model of a cut planning job file.

    Attributes:
        schema_version: Version string in format "major.minor".
        stock: Stock inventory.
        parts: Required parts.
        kerf: Saw kerf in mm.
        options: Optional planner tuning.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    stock: list[StockConfig] = Field(..., min_length=1)
    parts: list[PartConfig] = Field(..., min_length=1)
    kerf: float = Field(default=3.2, ge=0, le=20, description="Saw kerf in mm")
    options: PlannerOptionsConfig = Field(default_factory=PlannerOptionsConfig)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        """Accept supported versions and newer minors of a supported major."""
        if v in SUPPORTED_VERSIONS:
            return v
        major_version = int(v.split(".")[0])
        supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
        if major_version in supported_majors:
            return v
        raise ValueError(
            f"Unsupported schema version '{v}'. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}"
        )
