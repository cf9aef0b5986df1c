"""Parts submitted for nesting and their expansion into placeable instances."""

from dataclasses import dataclass
from typing import List, Sequence, Union

from sheetnest.nesting.errors import InvalidPart
from sheetnest.nesting.geometry import Polygon


@dataclass(frozen=True)
class Part:
    """A caller-defined shape with the number of copies to place."""
    id: str
    polygon: Polygon
    quantity: int = 1

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise InvalidPart(f"Part id must be a non-empty string, got {self.id!r}")
        if not isinstance(self.polygon, Polygon):
            # Accept a flat coordinate sequence
            object.__setattr__(self, "polygon", Polygon(tuple(self.polygon)))
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidPart(f"Part {self.id}: quantity must be an integer, got {self.quantity!r}")
        if self.quantity <= 0:
            raise InvalidPart(f"Part {self.id}: quantity must be positive, got {self.quantity}")

    @property
    def area(self) -> float:
        return self.polygon.area()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "polygon": self.polygon.to_list(),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Part":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            polygon=Polygon(tuple(data.get("polygon", ()))),
            quantity=data.get("quantity", 1),
        )


@dataclass(frozen=True)
class PartInstance:
    """One copy of a part. Copies differ only by position in the working list."""
    part_id: str
    polygon: Polygon
    area: float


PartLike = Union[Part, dict]


def expand_by_quantity(parts: Sequence[PartLike]) -> List[PartInstance]:
    """One instance per copy, each part's copies contiguous, in submission order."""
    instances: List[PartInstance] = []
    for part in parts:
        if isinstance(part, dict):
            part = Part.from_dict(part)
        part_area = part.polygon.area()
        for _ in range(part.quantity):
            instances.append(PartInstance(part.id, part.polygon, part_area))
    return instances


def expand_parts(parts: Sequence[PartLike]) -> List[PartInstance]:
    """Expand parts by quantity and order them largest area first.

    The sort is stable, so equal areas keep submission order.
    """
    instances = expand_by_quantity(parts)
    instances.sort(key=lambda inst: inst.area, reverse=True)
    return instances


def total_area(instances: Sequence[PartInstance]) -> float:
    """Sum of prototype areas."""
    return sum(inst.area for inst in instances)
