"""Value objects for cut planning.

All value objects are frozen dataclasses so they can be shared freely
between packing attempts and used as dictionary keys.

Coordinate convention: a sheet's x axis runs along the stock ``length``
and its y axis along the stock ``width``, with the origin at the
bottom-left corner. An unrotated part lays its own ``length`` along x.
All dimensions are millimetres.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ANY_GRAIN = "any"


class MaterialType(str, Enum):
    """Kind of stock material.

    Attributes:
        SHEET: Flat sheet goods packed in two dimensions.
        LINEAR: Boards and lumber packed along their length only.
    """

    SHEET = "sheet"
    LINEAR = "linear"


class Orientation(str, Enum):
    """How a part must be oriented on a given stock item.

    Attributes:
        DIRECT: Part length runs along stock length.
        ROTATED: Part must be turned 90 degrees to satisfy grain.
        IMPOSSIBLE: No orientation satisfies the constraints.
    """

    DIRECT = "direct"
    ROTATED = "rotated"
    IMPOSSIBLE = "impossible"


def normalize_grain(value: str | None) -> str | None:
    """Normalize a grain direction string.

    Returns None for missing, blank or "any" grain, otherwise the
    lower-cased direction.
    """
    if value is None:
        return None
    grain = value.strip().lower()
    if not grain or grain == ANY_GRAIN:
        return None
    return grain


def _check_positive(kind: str, **values: float) -> None:
    for name, value in values.items():
        if value <= 0:
            raise ValueError(f"{kind} {name} must be positive (got {value})")


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in a sheet's coordinate space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def intersects(self, other: Rect, tolerance: float = 0.0) -> bool:
        """Check whether the interiors overlap by more than ``tolerance``.

        Rectangles that only touch along an edge do not intersect.
        """
        return (
            self.x < other.right - tolerance
            and other.x < self.right - tolerance
            and self.y < other.top - tolerance
            and other.y < self.top - tolerance
        )

    def contains(self, other: Rect, tolerance: float = 0.0) -> bool:
        """Check whether ``other`` lies entirely inside this rectangle."""
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.right <= self.right + tolerance
            and other.top <= self.top + tolerance
        )


# A free space is just an unoccupied rectangle of a sheet.
FreeSpace = Rect


@dataclass(frozen=True)
class StockDefinition:
    """A type of stock held in inventory.

    Attributes:
        length: Stock length in mm (sheet x axis).
        width: Stock width in mm (sheet y axis).
        thickness: Stock thickness in mm.
        quantity: Number of identical items available.
        material: Optional material name, e.g. "birch ply".
        material_type: Sheet goods or linear boards.
        grain_direction: Optional grain direction; None or "any" is
            unconstrained.
        name: Optional display name.
    """

    length: float
    width: float
    thickness: float
    quantity: int = 1
    material: str | None = None
    material_type: MaterialType = MaterialType.SHEET
    grain_direction: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        _check_positive(
            "Stock",
            length=self.length,
            width=self.width,
            thickness=self.thickness,
            quantity=self.quantity,
        )

    @property
    def area(self) -> float:
        """Area of a single stock item in square mm."""
        return self.length * self.width

    @property
    def total_area(self) -> float:
        """Area of all items of this stock type in square mm."""
        return self.area * self.quantity

    @property
    def grain(self) -> str | None:
        return normalize_grain(self.grain_direction)


@dataclass(frozen=True)
class PartRequirement:
    """A part that must be cut, possibly several times.

    Attributes:
        length: Part length in mm.
        width: Part width in mm.
        thickness: Required thickness in mm.
        quantity: Number of identical parts required.
        material: Optional required material name.
        material_type: Whether the part comes from sheet or linear stock.
        grain_direction: Optional grain direction; None or "any" is
            unconstrained.
        name: Optional display name.
    """

    length: float
    width: float
    thickness: float
    quantity: int = 1
    material: str | None = None
    material_type: MaterialType = MaterialType.SHEET
    grain_direction: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        _check_positive(
            "Part",
            length=self.length,
            width=self.width,
            thickness=self.thickness,
            quantity=self.quantity,
        )

    @property
    def area(self) -> float:
        """Area of one part in square mm."""
        return self.length * self.width

    @property
    def total_area(self) -> float:
        """Area of all required parts of this kind in square mm."""
        return self.area * self.quantity

    @property
    def aspect_ratio(self) -> float:
        return max(self.length, self.width) / min(self.length, self.width)

    @property
    def grain(self) -> str | None:
        return normalize_grain(self.grain_direction)


@dataclass(frozen=True, order=True)
class InstanceId:
    """Structured identifier of one unit of a part requirement.

    Attributes:
        requirement_index: Index of the requirement in the caller's list.
        instance_index: Zero-based unit number within that requirement.
    """

    requirement_index: int
    instance_index: int

    @property
    def label(self) -> str:
        """Display label, e.g. ``"2-0"``. Never parsed back."""
        return f"{self.requirement_index}-{self.instance_index}"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class PartInstance:
    """One physical part to be placed exactly once.

    Attributes:
        id: Structured identifier.
        requirement: The requirement this unit was expanded from.
        priority: Placement priority hint; harder parts score higher.
    """

    id: InstanceId
    requirement: PartRequirement
    priority: float = 0.0

    @property
    def length(self) -> float:
        return self.requirement.length

    @property
    def width(self) -> float:
        return self.requirement.width

    @property
    def thickness(self) -> float:
        return self.requirement.thickness

    @property
    def area(self) -> float:
        return self.requirement.area

    @property
    def name(self) -> str:
        return self.requirement.name or f"Part-{self.id.requirement_index}"


@dataclass(frozen=True)
class Placement:
    """A part instance placed on a sheet.

    Coordinates are the raw part's bottom-left corner. ``width`` and
    ``height`` are the resolved extents along x and y, so a rotated part
    has ``width == length`` of the part swapped with its width.

    Attributes:
        instance_id: The placed part instance.
        x: Position along the stock length in mm.
        y: Position along the stock width in mm.
        width: Extent along x in mm.
        height: Extent along y in mm.
        rotated: True if the part is turned 90 degrees.
        name: Display name of the originating requirement.
    """

    instance_id: InstanceId
    x: float
    y: float
    width: float
    height: float
    rotated: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Placement coordinates must be non-negative")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Placement dimensions must be positive")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        """Raw part area in square mm (kerf excluded)."""
        return self.width * self.height

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def kerf_box(self, kerf: float, sheet_length: float, sheet_width: float) -> Rect:
        """Kerf-expanded footprint of this placement, clipped to the sheet."""
        return kerf_box(self.rect, kerf, sheet_length, sheet_width)


def kerf_box(rect: Rect, kerf: float, sheet_length: float, sheet_width: float) -> Rect:
    """Grow ``rect`` by half the kerf on every side, clipped to the sheet.

    Args:
        rect: Raw part rectangle.
        kerf: Saw kerf in mm.
        sheet_length: Sheet extent along x.
        sheet_width: Sheet extent along y.

    Returns:
        The kerf-expanded footprint.
    """
    half = kerf / 2
    left = max(0.0, rect.x - half)
    bottom = max(0.0, rect.y - half)
    right = min(sheet_length, rect.right + half)
    top = min(sheet_width, rect.top + half)
    return Rect(left, bottom, right - left, top - bottom)
