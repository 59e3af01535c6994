"""Map-data collaborator interface and image loading.

The map definition and graphic asset formats belong to the host
application; the renderer only needs the :class:`MapData` protocol below,
which answers "what is the map size" and "which image region draws this
cell / this sprite".

Image loading is asynchronous. :func:`load_images` joins a batch of
independent loads behind an all-or-nothing barrier: it resolves to the
complete set of images or raises the first failure, never a partial set.
"""

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol, Tuple, Union

from PIL import Image, UnidentifiedImageError
from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

logger = logging.getLogger(__name__)

AssetSource = Union[str, Path]


class AssetLoadError(RuntimeError):
    """An image could not be loaded."""


@dataclass(frozen=True)
class MapSize:
    """Map dimensions in tiles."""

    width: int
    height: int


@dataclass(frozen=True)
class RenderInfo:
    """A rectangular region of a source image.

    Attributes:
        image: Source sheet (any mode; converted to RGBA when drawn).
        src_x: Left edge of the region, in source pixels.
        src_y: Top edge of the region, in source pixels.
        src_width: Region width, in source pixels.
        src_height: Region height, in source pixels.
    """

    image: Image.Image
    src_x: int
    src_y: int
    src_width: int
    src_height: int

    @staticmethod
    def whole(image: Image.Image) -> "RenderInfo":
        return RenderInfo(image, 0, 0, image.width, image.height)


class MapData(Protocol):
    """What the renderer consumes from the map owner."""

    def get_map_size(self) -> MapSize: ...

    def get_cell_render_info(
        self, layer_name: str, x: int, y: int
    ) -> Optional[RenderInfo]: ...

    def get_sprite(self, display_char: str, sprite_key: str) -> Optional[RenderInfo]: ...


def _open_image(path: Path) -> Image.Image:
    with Image.open(path) as img:
        img.load()
        return img.convert("RGBA")


async def load_image(
    src: AssetSource, base_dir: Optional[AssetSource] = None
) -> Image.Image:
    """Load one image off the event loop thread.

    Raises:
        AssetLoadError: If the file is missing or not a readable image.
    """
    path = Path(src)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    try:
        return await asyncio.to_thread(_open_image, path)
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise AssetLoadError(f"error on loading {src}") from exc


async def load_image_list(
    sources: Iterable[AssetSource],
    base_dir: Optional[AssetSource] = None,
) -> PVector[Image.Image]:
    """Load ``sources`` concurrently, keeping their order.

    Raises:
        AssetLoadError: The first failure; nothing is returned in that case.
    """
    images = await asyncio.gather(*(load_image(src, base_dir) for src in sources))
    logger.debug("Loaded %d images", len(images))
    return pvector(images)


async def load_images(
    entries: Iterable[Tuple[str, AssetSource]],
    base_dir: Optional[AssetSource] = None,
) -> PMap[str, Image.Image]:
    """Load ``(asset_name, src)`` pairs concurrently.

    Names must be unique; a repeated name keeps the image of its last entry.

    Returns:
        PMap[str, Image.Image]: Every image keyed by asset name.

    Raises:
        AssetLoadError: The first failure; nothing is returned in that case.
    """
    entries = list(entries)
    images = await load_image_list((src for _, src in entries), base_dir)
    return pmap({name: image for (name, _), image in zip(entries, images)})
