"""Guidepost watermark overlay.

Reads a JSON list of watermark entries::

    [{"assetName": "welcome", "src": "welcome.png", "x": 3, "y": 4}, ...]

loads every image, and once **all** of them are available registers the
``guidepost`` layer just above the ground. ``x`` / ``y`` place the image's
top-left corner in map coordinates and default to the map origin.
If any image fails to load, nothing is registered.
"""

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from PIL import Image

from tileview.assets import AssetLoadError, load_image_list
from tileview.renderer import MapRenderer
from tileview.utils.image import composite_clipped
from tileview.viewport import Viewport

logger = logging.getLogger(__name__)

GUIDEPOST_LAYER_Z = -10
GUIDEPOST_LAYER_NAME = "guidepost"


@dataclass(frozen=True)
class Watermark:
    asset_name: str
    src: str
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class LoadedWatermark:
    watermark: Watermark
    image: Image.Image


def parse_watermarks(entries: Any) -> List[Watermark]:
    """Validate the decoded JSON list.

    Raises:
        ValueError: If the payload is not a list of ``{assetName, src}`` objects.
    """
    if not isinstance(entries, list):
        raise ValueError(f"Watermark list must be a JSON array, got {type(entries).__name__}")
    watermarks: List[Watermark] = []
    for entry in entries:
        if not isinstance(entry, Mapping) or "assetName" not in entry or "src" not in entry:
            raise ValueError(f"Invalid watermark entry: {entry!r}")
        watermarks.append(
            Watermark(
                asset_name=str(entry["assetName"]),
                src=str(entry["src"]),
                x=float(entry.get("x", 0.0)),
                y=float(entry.get("y", 0.0)),
            )
        )
    return watermarks


def read_watermarks(path: Union[str, Path]) -> List[Watermark]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_watermarks(json.load(f))


def draw_watermarks(
    canvas: Image.Image, viewport: Viewport, data: Sequence[LoadedWatermark]
) -> bool:
    for loaded in data:
        dest = viewport.map_to_screen(loaded.watermark.x, loaded.watermark.y)
        composite_clipped(canvas, loaded.image, dest)
    return True


class GuidepostClient:
    """Client side of the guidepost extension; one per connected player."""

    def __init__(
        self,
        renderer: MapRenderer,
        list_path: Union[str, Path],
        asset_dir: Optional[Union[str, Path]] = None,
    ):
        self.renderer = renderer
        self.list_path = Path(list_path)
        self.asset_dir = Path(asset_dir) if asset_dir is not None else self.list_path.parent

    async def game_start(self) -> bool:
        """Load the watermarks and register the layer.

        Returns:
            bool: False if the list or any image failed to load; the layer is
            not registered in that case.
        """
        try:
            watermarks = read_watermarks(self.list_path)
        except (OSError, ValueError) as exc:
            logger.error("Cannot read watermark list: path=%s error=%s", self.list_path, exc)
            return False

        try:
            images = await load_image_list(
                [w.src for w in watermarks], base_dir=self.asset_dir
            )
        except AssetLoadError as exc:
            logger.error("Guidepost layer not registered: %s", exc)
            return False

        loaded = tuple(LoadedWatermark(w, image) for w, image in zip(watermarks, images))
        self.renderer.register_layer(
            GUIDEPOST_LAYER_Z, GUIDEPOST_LAYER_NAME, draw_watermarks, loaded
        )
        logger.info("Guidepost layer registered: watermarks=%d", len(loaded))
        return True
