"""View configuration.

Geometry and animation constants shared between the player model and the
renderer. They are carried by a :class:`ViewConfig` instance handed to each
component rather than read from module globals, so independent viewports can
run with different values.

A config can also be read from the ``[view]`` table of a TOML file::

    [view]
    tile_size = 32
    move_interval_ms = 100
"""

from dataclasses import dataclass, fields
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union
import tomllib

logger = logging.getLogger(__name__)

DEFAULT_TILE_SIZE = 32  # pixel
DEFAULT_MOVE_INTERVAL_MS = 100.0
DEFAULT_ANIMATION_FRAME_MS = 100.0
DEFAULT_LABEL_FONT_SIZE = 12

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class ViewConfig:
    """Rendering and animation parameters.

    Attributes:
        tile_size: Width and height of one map cell on the canvas, in pixels.
        move_interval_ms: Duration over which a position change is animated.
        animation_frame_ms: Duration of one walk-cycle frame.
        label_font_size: Pixel size of player name labels.
        label_color: RGBA fill of player name labels.
        background_color: RGBA fill used to clear the canvas before a pass.
    """

    tile_size: int = DEFAULT_TILE_SIZE
    move_interval_ms: float = DEFAULT_MOVE_INTERVAL_MS
    animation_frame_ms: float = DEFAULT_ANIMATION_FRAME_MS
    label_font_size: int = DEFAULT_LABEL_FONT_SIZE
    label_color: RGBA = (0, 0, 0, 255)
    background_color: RGBA = (0, 0, 0, 255)

    def __post_init__(self) -> None:
        if self.tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.move_interval_ms <= 0:
            raise ValueError(
                f"move_interval_ms must be positive, got {self.move_interval_ms}"
            )
        if self.animation_frame_ms <= 0:
            raise ValueError(
                f"animation_frame_ms must be positive, got {self.animation_frame_ms}"
            )

    @staticmethod
    def from_mapping(obj: Mapping[str, Any]) -> "ViewConfig":
        """Build a config from a plain mapping, e.g. a parsed TOML table.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(ViewConfig)}
        unknown = set(obj) - known
        if unknown:
            raise ValueError(f"Unknown view config keys: {sorted(unknown)}")
        kwargs = dict(obj)
        for color_key in ("label_color", "background_color"):
            if color_key in kwargs:
                color = tuple(kwargs[color_key])
                if len(color) != 4:
                    raise ValueError(f"{color_key} must have 4 components")
                kwargs[color_key] = color
        return ViewConfig(**kwargs)


def load_config(path: Union[str, Path], table: str = "view") -> ViewConfig:
    """Read a :class:`ViewConfig` from ``[table]`` of a TOML file.

    A missing file or a missing table yields the defaults.
    """
    path = Path(path)
    if not path.exists():
        logger.info("View config not found, using defaults: path=%s", path)
        return ViewConfig()
    with open(path, "rb") as f:
        data = tomllib.load(f)
    section: Optional[Mapping[str, Any]] = data.get(table)
    if section is None:
        logger.info("No [%s] table in %s, using defaults", table, path)
        return ViewConfig()
    config = ViewConfig.from_mapping(section)
    logger.info("Loaded view config: path=%s config=%s", path, config)
    return config
