"""Camera and coordinate transforms.

The camera position is the **map coordinate** shown at the center of the
canvas. It is a real number, which lets the view scroll smoothly rather than
tile by tile. Canvas coordinates are integer pixels with the origin at the
top-left corner of the canvas::

    (0,0)   (1,0)   (2,0)  ...   x ->
    (0,1)   (1,1)   (2,1)
    ...
    y

Do not confuse them with map coordinates (tiles, origin at the map's
top-left corner).
"""

from dataclasses import dataclass
import math
from typing import Iterator, Optional, Tuple

from tileview.assets import MapSize
from tileview.config import ViewConfig
from tileview.coord import Coordinate
from tileview.types import PlayerID


class ViewportError(RuntimeError):
    """A transform was requested before the camera was positioned."""


@dataclass(frozen=True)
class CellBounds:
    """Inclusive integer cell range ``[x0, x1] x [y0, y1]``."""

    x0: int
    y0: int
    x1: int
    y1: int

    def clip(self, size: MapSize) -> "CellBounds":
        """Intersect with ``[0, width) x [0, height)``; may become empty."""
        return CellBounds(
            max(self.x0, 0),
            max(self.y0, 0),
            min(self.x1, size.width - 1),
            min(self.y1, size.height - 1),
        )

    def __contains__(self, cell: object) -> bool:
        if not isinstance(cell, tuple) or len(cell) != 2:
            return False
        x, y = cell
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        """Row-major cells."""
        for y in range(self.y0, self.y1 + 1):
            for x in range(self.x0, self.x1 + 1):
                yield x, y


class Viewport:
    """Camera over a map of known size, projected onto a fixed-size canvas.

    The camera starts at NaN and must be positioned with
    :meth:`set_camera_position` before any transform is valid. The map must
    be at least one canvas wide and tall; a smaller map yields a degenerate
    clamp range.
    """

    def __init__(
        self,
        canvas_width: int,
        canvas_height: int,
        map_size: MapSize,
        config: Optional[ViewConfig] = None,
    ):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.map_size = map_size
        self.config = config or ViewConfig()
        self.followed: Optional[PlayerID] = None
        self._camera = Coordinate(math.nan, math.nan)

    @property
    def tile_size(self) -> int:
        return self.config.tile_size

    @property
    def camera(self) -> Coordinate:
        return self._camera

    @property
    def is_initialized(self) -> bool:
        return not (math.isnan(self._camera.x) or math.isnan(self._camera.y))

    def camera_bounds(self) -> Tuple[float, float, float, float]:
        """``(min_x, max_x, min_y, max_y)`` the camera is clamped to."""
        min_x = (self.canvas_width / 2) / self.tile_size
        max_x = self.map_size.width - min_x
        min_y = (self.canvas_height / 2) / self.tile_size
        max_y = self.map_size.height - min_y
        return min_x, max_x, min_y, max_y

    def set_camera_position(self, x: float, y: float) -> Coordinate:
        """Center the canvas on ``(x, y)``, clamped so no off-map area shows.

        Returns:
            Coordinate: The camera position actually applied.
        """
        min_x, max_x, min_y, max_y = self.camera_bounds()
        x = min(max(x, min_x), max_x)
        y = min(max(y, min_y), max_y)
        self._camera = Coordinate(x, y)
        return self._camera

    def center_on(self, position: Coordinate) -> Coordinate:
        """Center on the middle of the tile whose top-left is ``position``."""
        return self.set_camera_position(position.x + 0.5, position.y + 0.5)

    def follow(self, player_id: Optional[PlayerID]) -> None:
        self.followed = player_id

    def _require_camera(self) -> None:
        if not self.is_initialized:
            raise ViewportError("Viewport camera position is not initialized")

    def map_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        """Map coordinate to canvas pixel (floored)."""
        self._require_camera()
        return (
            math.floor(self.canvas_width / 2 + (x - self._camera.x) * self.tile_size),
            math.floor(self.canvas_height / 2 + (y - self._camera.y) * self.tile_size),
        )

    def screen_to_map(self, px: float, py: float) -> Coordinate:
        """Canvas pixel to map coordinate (not floored)."""
        self._require_camera()
        return Coordinate(
            self._camera.x + (px - self.canvas_width / 2) / self.tile_size,
            self._camera.y + (py - self.canvas_height / 2) / self.tile_size,
        )

    def visible_cells(self) -> CellBounds:
        """Cells touched by the canvas, from its two corners."""
        x0, y0 = self.screen_to_map(0, 0).cell()
        x1, y1 = self.screen_to_map(self.canvas_width, self.canvas_height).cell()
        return CellBounds(x0, y0, x1, y1)

    def tile_intersects_canvas(self, px: int, py: int) -> bool:
        """Whether a tile drawn with its top-left at ``(px, py)`` is visible."""
        return (
            -self.tile_size < px < self.canvas_width
            and -self.tile_size < py < self.canvas_height
        )
