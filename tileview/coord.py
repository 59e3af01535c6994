"""Map coordinate value type.

Floating point ``(x, y)`` in tile units, origin at the top-left corner of the
map. Screen pixels never appear here; see :mod:`tileview.viewport` for the
transforms between the two spaces.
"""

from dataclasses import dataclass
import math
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class Coordinate:
    """Immutable map-space coordinate.

    Attributes:
        x: Column, in tiles (0 at left).
        y: Row, in tiles (0 at top).
    """

    x: float
    y: float

    def __add__(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Coordinate":
        return Coordinate(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def lerp(self, other: "Coordinate", frac: float) -> "Coordinate":
        """Return the point ``frac`` of the way from ``self`` to ``other``."""
        return self + (other - self) * frac

    def cell(self) -> Tuple[int, int]:
        """Integer cell containing this coordinate."""
        return math.floor(self.x), math.floor(self.y)

    def to_obj(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_obj(obj: Mapping[str, Any]) -> "Coordinate":
        """Build from a ``{"x": ..., "y": ...}`` mapping.

        Raises:
            ValueError: If a component is missing or not a number.
        """
        try:
            x, y = obj["x"], obj["y"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid coordinate: {obj!r}") from exc
        if isinstance(x, bool) or isinstance(y, bool):
            raise ValueError(f"Invalid coordinate: {obj!r}")
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            raise ValueError(f"Invalid coordinate: {obj!r}")
        return Coordinate(float(x), float(y))
